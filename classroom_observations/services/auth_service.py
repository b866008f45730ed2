"""Authentication service - observer registration and password login."""

import logging
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroom_observations.core.exceptions import DuplicateEmail, Unauthorized
from classroom_observations.core.security import (
    create_access_token,
    hash_password,
    verify_password,
)
from classroom_observations.core.structured_logging import build_log_context
from classroom_observations.db.models import User
from classroom_observations.schemas.auth import RegisterRequest

logger = logging.getLogger(__name__)

NO_ACCOUNT_DETAIL = "Invalid credentials - no account found for this email"
PASSWORD_MISMATCH_DETAIL = "Invalid credentials - password mismatch"


def get_user_by_email(db: Session, email: str) -> User | None:
    """Find an observer by email (case-insensitive)."""
    return db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()


def get_user(db: Session, user_id: UUID) -> User | None:
    return db.get(User, user_id)


def issue_token(user: User) -> str:
    """Create an access token carrying the observer identity."""
    return create_access_token(
        user_id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        district=user.district,
        title=user.title,
    )


def create_user(db: Session, data: RegisterRequest) -> User:
    """
    Create an observer account.

    Raises:
        DuplicateEmail: an account already uses this email
    """
    if get_user_by_email(db, data.email):
        raise DuplicateEmail()

    user = User(
        email=data.email.lower(),
        password_hash=hash_password(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
        title=data.title,
        district=data.district,
        license_number=data.license_number,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent registration with the same email
        db.rollback()
        raise DuplicateEmail()
    db.refresh(user)

    logger.info("Observer registered", extra=build_log_context(user_id=str(user.id)))
    return user


def register(db: Session, data: RegisterRequest) -> tuple[User, str]:
    """Register an observer and return (user, access_token)."""
    user = create_user(db, data)
    return user, issue_token(user)


def authenticate(db: Session, email: str, password: str) -> tuple[User, str]:
    """
    Verify credentials and return (user, access_token).

    The two failure causes are reported separately so the login form can
    tell "unknown account" from "wrong password".

    Raises:
        Unauthorized: unknown email or password mismatch
    """
    user = get_user_by_email(db, email)
    if not user:
        logger.info("Login rejected: unknown account")
        raise Unauthorized(NO_ACCOUNT_DETAIL)

    if not verify_password(password, user.password_hash):
        logger.info(
            "Login rejected: password mismatch",
            extra=build_log_context(user_id=str(user.id)),
        )
        raise Unauthorized(PASSWORD_MISMATCH_DETAIL)

    return user, issue_token(user)
