"""API routers."""

from classroom_observations.routers.auth import router as auth_router
from classroom_observations.routers.observations import router as observations_router
from classroom_observations.routers.organization import router as organization_router
from classroom_observations.routers.reference import router as reference_router
from classroom_observations.routers.students import router as students_router

__all__ = [
    "auth_router",
    "observations_router",
    "organization_router",
    "reference_router",
    "students_router",
]
