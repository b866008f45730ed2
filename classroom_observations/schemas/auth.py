"""Authentication-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

BCRYPT_MAX_PASSWORD_BYTES = 72


class Principal(BaseModel):
    """
    Authenticated observer making a request.

    Built from the access token claims by the auth dependency.
    """
    user_id: UUID
    email: str
    first_name: str
    last_name: str
    title: str | None = None
    district: str


class RegisterRequest(BaseModel):
    """Request schema for observer registration."""
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    title: str | None = Field(None, max_length=100)
    district: str = Field(..., min_length=1, max_length=255)
    license_number: str | None = Field(None, max_length=100)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower()

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        # bcrypt only accepts 72 bytes of input
        if len(v.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            raise ValueError(
                f"password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes when UTF-8 encoded"
            )
        return v


class LoginRequest(BaseModel):
    """Request schema for password login."""
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserRead(BaseModel):
    """Observer profile (never includes the password hash)."""
    id: UUID
    email: str
    first_name: str
    last_name: str
    title: str | None
    district: str
    license_number: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    """Response schema for register/login."""
    token: str
    user: UserRead
