"""
Principal models for the auth database (users and admins).
"""
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

# Fields shown by listings and detail views
PUBLIC_FIELDS = ("code", "name", "username", "email", "phone", "role", "status", "created_at")
DELETION_FIELDS = ("is_deleted", "deleted_at")


class AccountStatus(str, Enum):
    """Principal account status."""
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    BLOCKED = "Blocked"


class UserRole(str, Enum):
    USER = "User"


class AdminRole(str, Enum):
    """Admin role levels."""
    ADMIN = "Admin"
    SUPER_ADMIN = "SuperAdmin"
    DEVELOPER_ADMIN = "DeveloperAdmin"


# Synthetic role of anonymous callers; never stored
GUEST_ROLE = "Guest"

ADMIN_ROLES = frozenset(role.value for role in AdminRole)
SUPER_ADMIN_ROLES = frozenset({AdminRole.SUPER_ADMIN.value, AdminRole.DEVELOPER_ADMIN.value})
USER_ROLES = frozenset({UserRole.USER.value})
ALL_ROLES = ADMIN_ROLES | USER_ROLES

# Statuses an admin may set through change-status
SETTABLE_STATUSES = (
    AccountStatus.ACTIVE.value,
    AccountStatus.INACTIVE.value,
    AccountStatus.BLOCKED.value,
)


class Principal(BaseModel):
    """
    Authenticatable account stored in auth_db.users or auth_db.admins.
    """
    id: Optional[str] = Field(None, alias="_id", description="MongoDB ObjectId as string")
    code: Optional[str] = Field(None, description="Sequential human-readable code")
    name: str
    username: str
    email: str
    phone: str = Field(..., description="Digits only")
    role: str
    status: AccountStatus = AccountStatus.ACTIVE

    password: Optional[str] = Field(None, description="Bcrypt hash")
    last_password: Optional[str] = None
    password_changed: bool = False
    password_changed_at: Optional[datetime] = None
    auto_generated_password: bool = False
    reset_password_access: bool = False

    otp: Optional[str] = Field(None, description="Bcrypt hash of the current code")
    otp_sent_at: Optional[datetime] = None
    failed_otp_attempts: int = 0
    failed_otp_verify_at: Optional[datetime] = None

    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    last_used: Optional[datetime] = None
    last_sync: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        populate_by_name = True
        use_enum_values = True

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Principal":
        doc = dict(document)
        doc["_id"] = str(doc["_id"])
        if doc.get("phone") is not None:
            doc["phone"] = str(doc["phone"])
        return cls(**doc)

    def public_dict(self, include_deleted: bool = False) -> dict[str, Any]:
        """Serializable view without any secret material."""
        fields = PUBLIC_FIELDS + DELETION_FIELDS if include_deleted else PUBLIC_FIELDS
        data = self.model_dump(include=set(fields))
        data["_id"] = self.id
        return data


class User(Principal):
    """Customer account."""
    role: str = UserRole.USER.value


class Admin(Principal):
    """Back-office account."""
    role: str = AdminRole.ADMIN.value
