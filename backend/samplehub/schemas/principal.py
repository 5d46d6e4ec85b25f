"""
Principal (user and admin) request schemas.
"""
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

PHONE_PATTERN = r"^\d{1,15}$"


class PrincipalCreate(BaseModel):
    """Account created by an admin; a password is generated when omitted."""
    name: str = Field(..., min_length=1)
    username: str = Field(..., min_length=3, max_length=15)
    email: EmailStr
    phone: str = Field(..., pattern=PHONE_PATTERN)
    password: Optional[str] = Field(None, min_length=1)


class PrincipalUpdate(BaseModel):
    """Admin edit of an account; omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=1)
    username: Optional[str] = Field(None, min_length=3, max_length=15)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    password: Optional[str] = Field(None, min_length=1)


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)


class UsernameChange(BaseModel):
    username: str = Field(..., min_length=3, max_length=15)


class EmailChange(BaseModel):
    email: EmailStr


class PhoneChange(BaseModel):
    phone: str = Field(..., pattern=PHONE_PATTERN)


class StatusChange(BaseModel):
    status: str
