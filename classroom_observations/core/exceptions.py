"""Service-level exceptions mapped to HTTP responses by the app."""


class ServiceError(Exception):
    """Base exception for service errors."""

    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthorized(ServiceError):
    """No credential, or the credential is invalid or expired."""

    status_code = 401
    default_detail = "Unauthorized"


class Forbidden(ServiceError):
    """Valid credential, but the caller does not own the resource."""

    status_code = 403
    default_detail = "Forbidden"


class NotFound(ServiceError):
    """Referenced id does not resolve."""

    status_code = 404
    default_detail = "Not found"


class ValidationError(ServiceError):
    """Missing or malformed input."""

    status_code = 400
    default_detail = "Missing required fields"


class InvalidStatusTransition(ValidationError):
    """Requested status change is not allowed from the current status."""

    default_detail = "Invalid status transition"


class DuplicateEmail(ValidationError):
    """An account already uses this email."""

    default_detail = "User with this email already exists"


class InternalError(ServiceError):
    """Unexpected failure; details stay in the server log."""
