"""Pydantic schemas for schools, teachers and classrooms."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


# =============================================================================
# Schools
# =============================================================================

class SchoolCreate(BaseModel):
    """Request to create a school."""
    name: str = Field(..., min_length=1, max_length=255)
    district: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1, max_length=500)
    principal: str = Field(..., min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=50)


class SchoolRead(BaseModel):
    id: UUID
    name: str
    district: str
    address: str
    principal: str
    phone: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


# =============================================================================
# Teachers
# =============================================================================

class TeacherCreate(BaseModel):
    """Request to create a teacher."""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr | None = None
    school_id: UUID
    department: str | None = Field(None, max_length=100)
    grade_level: str | None = Field(None, max_length=50)


class TeacherSummary(BaseModel):
    """Compact teacher for nested responses."""
    id: UUID
    first_name: str
    last_name: str

    model_config = {"from_attributes": True}


class ClassroomSummary(BaseModel):
    """Compact classroom for nested responses."""
    id: UUID
    name: str
    subject: str | None
    grade_level: str | None
    room_number: str | None
    capacity: int

    model_config = {"from_attributes": True}


class TeacherRead(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    email: str | None
    school_id: UUID
    department: str | None
    grade_level: str | None
    school: SchoolRead
    classrooms: list[ClassroomSummary] = []
    created_at: datetime

    model_config = {"from_attributes": True}


# =============================================================================
# Classrooms
# =============================================================================

class ClassroomCreate(BaseModel):
    """Request to create a classroom."""
    name: str = Field(..., min_length=1, max_length=255)
    school_id: UUID
    teacher_id: UUID
    subject: str | None = Field(None, max_length=100)
    grade_level: str | None = Field(None, max_length=50)
    room_number: str | None = Field(None, max_length=50)
    capacity: int = Field(..., ge=1)


class ClassroomRead(BaseModel):
    id: UUID
    name: str
    school_id: UUID
    teacher_id: UUID
    subject: str | None
    grade_level: str | None
    room_number: str | None
    capacity: int
    school: SchoolRead
    teacher: TeacherSummary
    created_at: datetime

    model_config = {"from_attributes": True}
