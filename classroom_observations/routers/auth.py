"""Authentication router - registration, password login, logout."""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from classroom_observations.core.config import settings
from classroom_observations.core.deps import get_current_principal, get_db
from classroom_observations.core.exceptions import Unauthorized
from classroom_observations.core.rate_limit import AUTH_LIMIT, limiter
from classroom_observations.schemas.auth import (
    AuthResponse,
    LoginRequest,
    Principal,
    RegisterRequest,
    UserRead,
)
from classroom_observations.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.JWT_EXPIRES_HOURS * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
        path="/",
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
@limiter.limit(AUTH_LIMIT)
def register(
    request: Request,
    response: Response,
    data: RegisterRequest,
    db: Session = Depends(get_db),
):
    """Create an observer account and sign it in."""
    user, token = auth_service.register(db, data)
    _set_auth_cookie(response, token)
    return AuthResponse(token=token, user=UserRead.model_validate(user))


@router.post("/login", response_model=AuthResponse)
@limiter.limit(AUTH_LIMIT)
def login(
    request: Request,
    response: Response,
    data: LoginRequest,
    db: Session = Depends(get_db),
):
    """
    Password login.

    Returns the token in the body for bearer use and also sets it as an
    HttpOnly cookie.
    """
    user, token = auth_service.authenticate(db, data.email, data.password)
    _set_auth_cookie(response, token)
    return AuthResponse(token=token, user=UserRead.model_validate(user))


@router.post("/logout")
def logout(response: Response):
    """Clear the auth cookie. Bearer tokens simply expire."""
    response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/")
    return {"message": "Logged out"}


@router.get("/me", response_model=UserRead)
def get_me(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Current observer profile."""
    user = auth_service.get_user(db, principal.user_id)
    if not user:
        # Token outlived its account
        raise Unauthorized()
    return user
