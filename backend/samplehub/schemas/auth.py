"""
Authentication request/response schemas.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class LoginRequest(BaseModel):
    """Login with any one of username, email or phone plus a password."""
    model_config = ConfigDict(coerce_numbers_to_str=True)

    username: Optional[str] = Field(None, description="Account username")
    email: Optional[str] = Field(None, description="Account email")
    phone: Optional[str] = Field(None, description="Account phone number (digits)")
    password: Optional[str] = Field(None, description="Account password")


class RegisterRequest(BaseModel):
    """Self-service user registration."""
    name: str = Field(..., min_length=1)
    username: str = Field(..., min_length=3, max_length=15)
    email: EmailStr
    phone: str = Field(..., pattern=r"^\d{1,15}$")
    password: str = Field(..., min_length=1)


class TokenPayload(BaseModel):
    """Decoded and verified token claims."""
    id: str = Field(..., description="Principal ObjectId as string")
    role: str = Field(..., description="Principal role at issue time")
    typ: str = Field(..., description="Token kind")
    jti: str = Field(..., description="Unique token id")
    aud: Optional[str] = Field(None, description="Display name of the principal")
    iss: str
    iat: int
    exp: int


class SessionTokens(BaseModel):
    """Access and refresh token pair issued on login, registration or refresh."""
    access_token: str
    refresh_token: str


class OtpVerification(BaseModel):
    verified: bool


class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    token: Optional[str] = Field(None, description="Reset token from the emailed link")
    password: Optional[str] = Field(None, description="New password")


# Phone numbers and codes arrive as JSON numbers or strings
class SendOtpRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    phone: Optional[str] = None


class VerifyOtpRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    phone: Optional[str] = None
    otp: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)
