"""Pydantic schemas for students."""

import datetime as dt
from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from classroom_observations.db.enums import ObservationStatus
from classroom_observations.schemas.organization import (
    ClassroomSummary,
    SchoolRead,
    TeacherSummary,
)
from classroom_observations.schemas.reference import IdeaCategoryRead


def _check_distinct_categories(primary: UUID | None, secondary: UUID | None) -> None:
    if primary is not None and secondary is not None and primary == secondary:
        raise ValueError("Secondary IDEA category must differ from the primary category")


class StudentCreate(BaseModel):
    """Request to create a student."""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: date
    grade: str = Field(..., min_length=1, max_length=50)
    school_id: UUID
    primary_idea_category_id: UUID | None = None
    secondary_idea_category_id: UUID | None = None
    iep_date: date | None = None
    case_manager: str | None = Field(None, max_length=255)
    accommodations: str | None = None

    @model_validator(mode="after")
    def distinct_categories(self) -> "StudentCreate":
        _check_distinct_categories(
            self.primary_idea_category_id, self.secondary_idea_category_id
        )
        return self


class StudentUpdate(BaseModel):
    """
    Request to update a student (partial).

    Only fields present in the request are applied; optional profile fields
    may be cleared by sending null. is_active is not updatable here, use
    DELETE for the soft delete.
    """
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    date_of_birth: date | None = None
    grade: str | None = Field(None, min_length=1, max_length=50)
    school_id: UUID | None = None
    primary_idea_category_id: UUID | None = None
    secondary_idea_category_id: UUID | None = None
    iep_date: date | None = None
    case_manager: str | None = Field(None, max_length=255)
    accommodations: str | None = None


class StudentRead(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    date_of_birth: date
    grade: str
    school_id: UUID
    school: SchoolRead
    primary_idea_category_id: UUID | None
    secondary_idea_category_id: UUID | None
    primary_idea_category: IdeaCategoryRead | None
    secondary_idea_category: IdeaCategoryRead | None
    iep_date: date | None
    case_manager: str | None
    accommodations: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class StudentObservationSummary(BaseModel):
    """Most recent observations shown in the student list."""
    id: UUID
    date: dt.date
    status: ObservationStatus

    model_config = {"from_attributes": True}


class ObserverName(BaseModel):
    first_name: str
    last_name: str

    model_config = {"from_attributes": True}


class StudentObservationRead(BaseModel):
    """Observation history row on the student detail page."""
    id: UUID
    date: dt.date
    start_time: str
    end_time: str | None
    setting: str
    purpose: str
    status: ObservationStatus
    classroom: ClassroomSummary
    teacher: TeacherSummary
    observer: ObserverName

    model_config = {"from_attributes": True}


class StudentListItem(StudentRead):
    recent_observations: list[StudentObservationSummary] = []


class StudentDetail(StudentRead):
    observations: list[StudentObservationRead] = []
