"""Pydantic schemas for API request/response models."""

from classroom_observations.schemas.auth import (
    AuthResponse,
    LoginRequest,
    Principal,
    RegisterRequest,
    UserRead,
)
from classroom_observations.schemas.observation import (
    EntryCreate,
    EntryRead,
    ObservationCreate,
    ObservationRead,
    ObservationStop,
    ObservationUpdate,
    ReportDraft,
    ReportSave,
)
from classroom_observations.schemas.organization import (
    ClassroomCreate,
    ClassroomRead,
    SchoolCreate,
    SchoolRead,
    TeacherCreate,
    TeacherRead,
)
from classroom_observations.schemas.reference import BehaviorCategoryRead, IdeaCategoryRead
from classroom_observations.schemas.student import (
    StudentCreate,
    StudentDetail,
    StudentListItem,
    StudentRead,
    StudentUpdate,
)

__all__ = [
    # Auth
    "AuthResponse",
    "LoginRequest",
    "Principal",
    "RegisterRequest",
    "UserRead",
    # Observations
    "EntryCreate",
    "EntryRead",
    "ObservationCreate",
    "ObservationRead",
    "ObservationStop",
    "ObservationUpdate",
    "ReportDraft",
    "ReportSave",
    # Organization
    "ClassroomCreate",
    "ClassroomRead",
    "SchoolCreate",
    "SchoolRead",
    "TeacherCreate",
    "TeacherRead",
    # Reference
    "BehaviorCategoryRead",
    "IdeaCategoryRead",
    # Students
    "StudentCreate",
    "StudentDetail",
    "StudentListItem",
    "StudentRead",
    "StudentUpdate",
]
