"""Security utilities for password hashing and JWT access tokens."""

from datetime import datetime, timedelta, timezone
from uuid import UUID

import bcrypt
import jwt

from classroom_observations.core.config import settings
from classroom_observations.schemas.auth import Principal


# =============================================================================
# Passwords
# =============================================================================

def hash_password(password: str) -> str:
    """Hash a password with bcrypt at the configured cost factor."""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash (e.g. legacy or truncated value)
        return False


# =============================================================================
# Access Token (JWT in Authorization header or cookie)
# =============================================================================

def create_access_token(
    user_id: UUID,
    email: str,
    first_name: str,
    last_name: str,
    district: str,
    title: str | None = None,
) -> str:
    """
    Create signed access JWT.

    Always signs with current secret (JWT_SECRET).
    Token carries the observer identity shown by clients.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "first_name": first_name,
        "last_name": last_name,
        "title": title,
        "district": district,
        "iat": now,
        "exp": now + timedelta(hours=settings.JWT_EXPIRES_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm="HS256")


def decode_access_token(token: str) -> dict:
    """
    Decode and verify access JWT.

    Tries current secret first, then previous (for rotation support).

    Raises:
        jwt.InvalidTokenError: If token invalid with all secrets
    """
    last_error = None
    for secret in settings.jwt_secrets:
        try:
            return jwt.decode(token, secret, algorithms=["HS256"])
        except jwt.InvalidTokenError as e:
            last_error = e
            continue
    raise last_error  # type: ignore


def validate_access_token(token: str) -> Principal | None:
    """Return the principal carried by a token, or None if it is unusable."""
    try:
        payload = decode_access_token(token)
        return Principal(
            user_id=payload["sub"],
            email=payload["email"],
            first_name=payload["first_name"],
            last_name=payload["last_name"],
            title=payload.get("title"),
            district=payload["district"],
        )
    except Exception:
        return None
