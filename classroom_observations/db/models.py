"""SQLAlchemy ORM models."""

from __future__ import annotations

import json
import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from classroom_observations.db.base import Base
from classroom_observations.db.enums import DEFAULT_OBSERVATION_STATUS


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Observers
# =============================================================================

class User(Base):
    """
    Observer account (school psychologist).

    Identity is immutable once registered. Owns observations.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    title: Mapped[str | None] = mapped_column(String(100), nullable=True)
    district: Mapped[str] = mapped_column(String(255), nullable=False)
    license_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, onupdate=_utcnow, nullable=False
    )

    observations: Mapped[list["Observation"]] = relationship(back_populates="observer")

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# =============================================================================
# Organization (schools, teachers, classrooms)
# =============================================================================

class School(Base):
    __tablename__ = "schools"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    district: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    principal: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, onupdate=_utcnow, nullable=False
    )

    teachers: Mapped[list["Teacher"]] = relationship(back_populates="school")
    classrooms: Mapped[list["Classroom"]] = relationship(back_populates="school")


class Teacher(Base):
    __tablename__ = "teachers"
    __table_args__ = (Index("ix_teachers_school", "school_id"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    school_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("schools.id", ondelete="RESTRICT"), nullable=False
    )
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    grade_level: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, onupdate=_utcnow, nullable=False
    )

    school: Mapped["School"] = relationship(back_populates="teachers")
    classrooms: Mapped[list["Classroom"]] = relationship(
        back_populates="teacher", order_by="Classroom.name"
    )


class Classroom(Base):
    __tablename__ = "classrooms"
    __table_args__ = (
        CheckConstraint("capacity >= 1", name="ck_classrooms_capacity_positive"),
        Index("ix_classrooms_school", "school_id"),
        Index("ix_classrooms_teacher", "teacher_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    school_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("schools.id", ondelete="RESTRICT"), nullable=False
    )
    teacher_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("teachers.id", ondelete="RESTRICT"), nullable=False
    )
    subject: Mapped[str | None] = mapped_column(String(100), nullable=True)
    grade_level: Mapped[str | None] = mapped_column(String(50), nullable=True)
    room_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, onupdate=_utcnow, nullable=False
    )

    school: Mapped["School"] = relationship(back_populates="classrooms")
    teacher: Mapped["Teacher"] = relationship(back_populates="classrooms")


# =============================================================================
# Reference data
# =============================================================================

class IdeaCategory(Base):
    """One of the 13 IDEA disability categories. Read-only to end users."""

    __tablename__ = "idea_categories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)


class BehaviorCategory(Base):
    """Behavior vocabulary offered while recording. Read-only to end users."""

    __tablename__ = "behavior_categories"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    domain: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_positive: Mapped[bool] = mapped_column(Boolean, nullable=False)
    color: Mapped[str] = mapped_column(String(7), nullable=False)  # Hex color e.g. '#22c55e'


# =============================================================================
# Students
# =============================================================================

class Student(Base):
    """
    Student served under IDEA.

    Never hard-deleted: is_active=False hides the student from default
    listings while keeping historical observations.
    """

    __tablename__ = "students"
    __table_args__ = (
        CheckConstraint(
            "secondary_idea_category_id IS NULL "
            "OR primary_idea_category_id IS NULL "
            "OR secondary_idea_category_id <> primary_idea_category_id",
            name="ck_students_distinct_idea_categories",
        ),
        Index("ix_students_name", "last_name", "first_name"),
        Index("ix_students_active", "is_active"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    grade: Mapped[str] = mapped_column(String(50), nullable=False)
    school_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("schools.id", ondelete="RESTRICT"), nullable=False
    )
    primary_idea_category_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("idea_categories.id", ondelete="SET NULL"), nullable=True
    )
    secondary_idea_category_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("idea_categories.id", ondelete="SET NULL"), nullable=True
    )
    iep_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    case_manager: Mapped[str | None] = mapped_column(String(255), nullable=True)
    accommodations: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, onupdate=_utcnow, nullable=False
    )

    school: Mapped["School"] = relationship()
    primary_idea_category: Mapped["IdeaCategory | None"] = relationship(
        foreign_keys=[primary_idea_category_id]
    )
    secondary_idea_category: Mapped["IdeaCategory | None"] = relationship(
        foreign_keys=[secondary_idea_category_id]
    )
    observations: Mapped[list["Observation"]] = relationship(back_populates="student")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# =============================================================================
# Observations
# =============================================================================

class Observation(Base):
    """
    One classroom observation session for one student.

    Owned by its observer for its whole life; only the observer may read,
    change or delete it. Status moves draft -> completed -> reviewed.
    """

    __tablename__ = "observations"
    __table_args__ = (
        CheckConstraint("total_students >= 1", name="ck_observations_total_students"),
        CheckConstraint("total_teachers >= 1", name="ck_observations_total_teachers"),
        Index("ix_observations_observer_date", "observer_id", "date"),
        Index("ix_observations_student", "student_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("students.id", ondelete="RESTRICT"), nullable=False
    )
    classroom_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("classrooms.id", ondelete="RESTRICT"), nullable=False
    )
    teacher_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("teachers.id", ondelete="RESTRICT"), nullable=False
    )
    observer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[str] = mapped_column(String(20), nullable=False)
    end_time: Mapped[str | None] = mapped_column(String(20), nullable=True)
    setting: Mapped[str] = mapped_column(String(255), nullable=False)
    total_students: Mapped[int] = mapped_column(Integer, nullable=False)
    total_teachers: Mapped[int] = mapped_column(Integer, nullable=False)
    purpose: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_OBSERVATION_STATUS.value, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=_utcnow, onupdate=_utcnow, nullable=False
    )

    student: Mapped["Student"] = relationship(back_populates="observations")
    classroom: Mapped["Classroom"] = relationship()
    teacher: Mapped["Teacher"] = relationship()
    observer: Mapped["User"] = relationship(back_populates="observations")
    entries: Mapped[list["ObservationEntry"]] = relationship(
        back_populates="observation",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=lambda: [ObservationEntry.time_of_day, ObservationEntry.created_at],
    )


class ObservationEntry(Base):
    """
    One timestamped behavioral data point recorded during a session.

    Append-only: entries are never edited, and only go away with their
    observation.
    """

    __tablename__ = "observation_entries"
    __table_args__ = (
        CheckConstraint("duration IS NULL OR duration >= 0", name="ck_entries_duration"),
        CheckConstraint("frequency IS NULL OR frequency >= 1", name="ck_entries_frequency"),
        Index("ix_entries_observation_time", "observation_id", "time_of_day"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    observation_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("observations.id", ondelete="CASCADE"), nullable=False
    )
    timestamp: Mapped[str] = mapped_column(String(20), nullable=False)  # "1305" or "9:05"
    time_of_day: Mapped[str] = mapped_column(String(20), nullable=False)  # "HH:MM"
    behavior: Mapped[str] = mapped_column(Text, nullable=False)
    context: Mapped[str] = mapped_column(Text, nullable=False)
    antecedent: Mapped[str | None] = mapped_column(Text, nullable=True)
    consequence: Mapped[str | None] = mapped_column(Text, nullable=True)
    setting: Mapped[str | None] = mapped_column(String(255), nullable=True)
    peers: Mapped[str | None] = mapped_column(Text, nullable=True)
    duration: Mapped[int | None] = mapped_column(Integer, nullable=True)
    intensity: Mapped[str | None] = mapped_column(String(50), nullable=True)
    frequency: Mapped[int | None] = mapped_column(Integer, nullable=True)
    intervention: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    tags: Mapped[str | None] = mapped_column(Text, nullable=True)  # JSON array
    created_at: Mapped[datetime] = mapped_column(default=_utcnow, nullable=False)

    observation: Mapped["Observation"] = relationship(back_populates="entries")

    @property
    def tag_list(self) -> list[str]:
        if not self.tags:
            return []
        return json.loads(self.tags)
