"""
Typed service errors.

Every failure raised by the service layer carries the HTTP status code it maps
to, so routers never translate errors by hand. The exception handlers in
``samplehub.core.error_handlers`` render them as ``{success: false, message}``.
"""
from typing import Optional


class ServiceError(Exception):
    """Base class for service-layer exceptions mapped to HTTP responses."""

    status_code: int = 500
    code: str = "server_error"
    default_message: str = "Server Error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code


# ==================== 400 ====================


class InvalidRequest(ServiceError):
    """Missing or malformed input."""
    status_code = 400
    code = "invalid_request"
    default_message = "Invalid request"


class SamePassword(ServiceError):
    status_code = 400
    code = "same_password"
    default_message = "New password and old password are the same"


class InvalidToken(ServiceError):
    """A signed token failed verification."""
    status_code = 400
    code = "invalid_token"
    default_message = "Please check the link is valid"


class TokenExpiredError(InvalidToken):
    code = "token_expired"
    default_message = "Your link has expired, please request a new one"


class InvalidSignature(InvalidToken):
    code = "invalid_signature"


# ==================== 401 ====================


class InvalidCredentials(ServiceError):
    status_code = 401
    code = "invalid_credentials"
    default_message = "Invalid credentials"


class Unauthenticated(ServiceError):
    status_code = 401
    code = "unauthenticated"
    default_message = "Unauthenticated Request"


class ConflictingCredentials(ServiceError):
    """Both access and refresh cookies were presented to the refresh flow."""
    status_code = 401
    code = "conflicting_credentials"
    default_message = "AccessToken and RefreshToken already exist"


class PermissionDenied(ServiceError):
    status_code = 401
    code = "permission_denied"
    default_message = "Permission denied"


class AccountBlocked(ServiceError):
    status_code = 401
    code = "account_blocked"
    default_message = "Account blocked! Contact customer care"


class OtpExpired(ServiceError):
    status_code = 401
    code = "otp_expired"
    default_message = "OTP Expired"


class OtpLockedOut(ServiceError):
    status_code = 401
    code = "otp_locked_out"
    default_message = "Too many incorrect OTP attempts"


# ==================== 403 / 404 / 409 / 429 ====================


class Forbidden(ServiceError):
    """Opaque authorization failure; never says which check failed."""
    status_code = 403
    code = "forbidden"
    default_message = "Unauthenticated"


class NotFound(ServiceError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class Conflict(ServiceError):
    status_code = 409
    code = "conflict"
    default_message = "Duplicate field value entered"


class DuplicateKeyError(Conflict):
    """A unique index rejected a write."""

    def __init__(self, field: Optional[str] = None) -> None:
        self.field = field
        message = f"{field.capitalize()} already exists" if field else None
        super().__init__(message, code="duplicate_key")


class RateLimited(ServiceError):
    status_code = 429
    code = "rate_limited"
    default_message = "Too many requests. Please try again later."
