"""Pydantic schemas for observations and their entries."""

import datetime as dt
import json
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from classroom_observations.db.enums import ObservationStatus
from classroom_observations.schemas.organization import (
    ClassroomSummary,
    SchoolRead,
    TeacherSummary,
)
from classroom_observations.schemas.reference import IdeaCategoryRead


# =============================================================================
# Observation commands
# =============================================================================

class ObservationCreate(BaseModel):
    """Request to start an observation session (always created as draft)."""
    student_id: UUID
    classroom_id: UUID
    teacher_id: UUID
    date: dt.date
    start_time: str = Field(..., min_length=1, max_length=20)
    end_time: str | None = Field(None, max_length=20)
    setting: str = Field(..., min_length=1, max_length=255)
    total_students: int = Field(..., ge=1)
    total_teachers: int = Field(..., ge=1)
    purpose: str = Field(..., min_length=1)
    notes: str | None = None


class ObservationUpdate(BaseModel):
    """
    Request to update an observation (partial).

    Only fields present in the request are applied. end_time and notes can
    be cleared with null; every other field ignores null.
    """
    date: dt.date | None = None
    start_time: str | None = Field(None, min_length=1, max_length=20)
    end_time: str | None = Field(None, max_length=20)
    setting: str | None = Field(None, min_length=1, max_length=255)
    total_students: int | None = Field(None, ge=1)
    total_teachers: int | None = Field(None, ge=1)
    purpose: str | None = Field(None, min_length=1)
    notes: str | None = None
    status: ObservationStatus | None = None


class ObservationStop(BaseModel):
    """Request to stop recording. end_time defaults to the server clock."""
    end_time: str | None = Field(None, min_length=1, max_length=20)


class ReportSave(BaseModel):
    """
    Request to save the report onto the observation.

    Omitted sections fall back to the generated text; supplied sections are
    the observer's edits.
    """
    summary: str | None = Field(None, min_length=1)
    recommendations: str | None = Field(None, min_length=1)


class ReportDraft(BaseModel):
    """
    Report text for the edit form.

    source is "saved" when the text was parsed from the observation notes,
    "generated" when it was assembled from the entries.
    """
    observation_id: UUID
    summary: str
    recommendations: str
    source: str = "generated"


# =============================================================================
# Entries
# =============================================================================

class EntryCreate(BaseModel):
    """Request to append an entry. timestamp/time_of_day default to now."""
    timestamp: str | None = Field(None, min_length=1, max_length=20)
    time_of_day: str | None = Field(None, min_length=1, max_length=20)
    behavior: str = Field(..., min_length=1)
    context: str = Field(..., min_length=1)
    antecedent: str | None = None
    consequence: str | None = None
    setting: str | None = Field(None, max_length=255)
    peers: str | None = None
    duration: int | None = Field(None, ge=0)
    intensity: str | None = Field(None, max_length=50)
    frequency: int | None = Field(None, ge=1)
    intervention: str | None = None
    notes: str | None = None
    tags: list[str] | None = None


class EntryRead(BaseModel):
    id: UUID
    observation_id: UUID
    timestamp: str
    time_of_day: str
    behavior: str
    context: str
    antecedent: str | None
    consequence: str | None
    setting: str | None
    peers: str | None
    duration: int | None
    intensity: str | None
    frequency: int | None
    intervention: str | None
    notes: str | None
    tags: list[str] = []
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("tags", mode="before")
    @classmethod
    def parse_tags(cls, v):
        """Tags are stored as a JSON array string."""
        if v is None:
            return []
        if isinstance(v, str):
            return json.loads(v)
        return v


# =============================================================================
# Observation responses
# =============================================================================

class ObservationStudent(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    grade: str
    is_active: bool
    school: SchoolRead
    primary_idea_category: IdeaCategoryRead | None
    secondary_idea_category: IdeaCategoryRead | None

    model_config = {"from_attributes": True}


class ObserverSummary(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    title: str | None
    email: str

    model_config = {"from_attributes": True}


class ObservationRead(BaseModel):
    """Full observation graph with entries ordered by time of day."""
    id: UUID
    student_id: UUID
    classroom_id: UUID
    teacher_id: UUID
    observer_id: UUID
    date: dt.date
    start_time: str
    end_time: str | None
    setting: str
    total_students: int
    total_teachers: int
    purpose: str
    notes: str | None
    status: ObservationStatus
    created_at: datetime
    updated_at: datetime
    student: ObservationStudent
    classroom: ClassroomSummary
    teacher: TeacherSummary
    observer: ObserverSummary
    entries: list[EntryRead] = []

    model_config = {"from_attributes": True}
