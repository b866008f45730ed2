"""FastAPI dependencies for authentication and database access."""

from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from classroom_observations.core.config import settings
from classroom_observations.core.exceptions import Unauthorized
from classroom_observations.core.security import validate_access_token
from classroom_observations.schemas.auth import Principal
from classroom_observations.services.report_service import ReportAssembler, assemble_report


BEARER_PREFIX = "Bearer "


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Database session dependency.

    Sessions come from the factory the entry point attached to app.state,
    and are closed after the request.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def identify_caller(request: Request) -> Principal | None:
    """
    Resolve the calling observer from the request.

    Looks for a bearer token first, then the auth cookie.
    Returns None when no usable credential is present.
    """
    token = None
    authorization = request.headers.get("authorization", "")
    if authorization.startswith(BEARER_PREFIX):
        token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token:
        return None
    return validate_access_token(token)


def get_current_principal(request: Request) -> Principal:
    """
    Get the authenticated observer.

    This is the PRIMARY auth dependency for every protected endpoint.

    Raises:
        Unauthorized: No credential, or an invalid/expired one
    """
    principal = identify_caller(request)
    if principal is None:
        raise Unauthorized()
    return principal


def get_report_assembler() -> ReportAssembler:
    """
    Report text assembler used by the report endpoints.

    Override through app.dependency_overrides to plug in another assembler.
    """
    return assemble_report
