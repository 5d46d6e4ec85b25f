"""
Account management for users and admins.
"""
import logging
from typing import Any, Optional

from samplehub.config import Settings
from samplehub.core.exceptions import (
    Conflict,
    Forbidden,
    InvalidCredentials,
    InvalidRequest,
    NotFound,
    SamePassword,
)
from samplehub.core.security import generate_otp, generate_password
from samplehub.database.documents import contains_pattern, serialize_document, utcnow
from samplehub.models.principal import (
    DELETION_FIELDS,
    PUBLIC_FIELDS,
    SUPER_ADMIN_ROLES,
    SETTABLE_STATUSES,
    AccountStatus,
    Principal,
)
from samplehub.schemas.principal import PrincipalCreate, PrincipalUpdate, ProfileUpdate
from samplehub.services.credential_store import CONFLICT_MESSAGES, PrincipalStore
from samplehub.services.notifier import Notifier, Template
from samplehub.services.pagination import DeletedFilter, deleted_query, paginate

logger = logging.getLogger(__name__)


class PrincipalService:
    """
    CRUD and self-service operations over one principal collection.
    """

    def __init__(self, store: PrincipalStore, notifier: Notifier, settings: Settings):
        self.store = store
        self.notifier = notifier
        self.settings = settings
        self.label = store.label

    # ==================== Helpers ====================

    async def _load(self, principal_id: str, **criteria: Any) -> Principal:
        principal = await self.store.find_by_id(principal_id, **criteria)
        if principal is None:
            raise NotFound(f"{self.label} not found")
        return principal

    async def _load_deleted(self, principal_id: str) -> Principal:
        return await self._load(principal_id, include_deleted=True, is_deleted=True)

    def _ensure_development(self) -> None:
        if not self.settings.is_development:
            raise Forbidden(
                f"In {self.settings.environment} mode not able to delete permanently!!"
            )

    def _send_credentials(self, principal: Principal, password: str) -> None:
        self.notifier.send_email(
            principal.email,
            Template.SEND_CREDENTIALS,
            {
                "name": principal.name,
                "username": principal.username,
                "email": principal.email,
                "phone": principal.phone,
                "role": principal.role,
                "password": password,
            },
        )

    # ==================== Read ====================

    async def list_principals(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        timestamp: Optional[str] = None,
        role: Optional[str] = None,
        name: Optional[str] = None,
        username: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        statuses: Optional[list[str]] = None,
        deleted: DeletedFilter = "NO",
    ) -> dict[str, Any]:
        """
        List principals newest first with optional filters.

        Text filters are case-insensitive substring matches.

        Returns:
            Pagination envelope (see services.pagination.paginate)
        """
        query: dict[str, Any] = deleted_query(deleted)
        if role:
            query["role"] = role
        for field, value in (("name", name), ("username", username), ("email", email), ("phone", phone)):
            if value:
                query[field] = contains_pattern(value)
        if statuses:
            query["status"] = {"$in": statuses}

        fields = PUBLIC_FIELDS + DELETION_FIELDS if deleted != "NO" else PUBLIC_FIELDS
        return await paginate(
            self.store.collection,
            query,
            page=page,
            limit=limit,
            timestamp=timestamp,
            projection={field: 1 for field in fields},
            serialize=serialize_document,
            label=self.label,
        )

    async def get(self, principal_id: str, viewer_role: Optional[str] = None) -> dict[str, Any]:
        """Fetch one principal; deleted ones are visible to super admins only."""
        can_see_deleted = viewer_role in SUPER_ADMIN_ROLES
        principal = await self._load(principal_id, include_deleted=can_see_deleted)
        return {
            "message": f"{self.label} details fetched",
            "results": principal.public_dict(include_deleted=can_see_deleted),
        }

    async def check_username(self, username: Optional[str]) -> dict[str, Any]:
        if not username:
            raise InvalidRequest("Provide Username")
        taken = await self.store.find_conflict(username=username.lower()) is not None
        return {
            "message": f"Username is {'not available' if taken else 'available'}",
            "available": not taken,
        }

    # ==================== Create / edit ====================

    async def add(self, data: PrincipalCreate) -> dict[str, Any]:
        """
        Create an account on behalf of the principal.

        A password is generated and mailed when none is supplied. Users also
        get an initial one-time code.

        Raises:
            Conflict: If the username, phone or email is taken
        """
        username = data.username.lower()
        email = data.email.lower()
        conflict = await self.store.find_conflict(username=username, email=email, phone=data.phone)
        if conflict:
            raise Conflict(CONFLICT_MESSAGES[conflict])

        password = data.password or generate_password()
        principal = await self.store.create(
            name=data.name,
            username=username,
            email=email,
            phone=data.phone,
            password=password,
            role=self.store.default_role,
            auto_generated_password=not data.password,
            otp=generate_otp() if self.store.supports_otp else None,
        )
        if not data.password:
            self._send_credentials(principal, password)

        return {
            "message": f"{principal.username}'s account created successfully",
            "results": principal.public_dict(),
        }

    async def edit(self, principal_id: str, data: PrincipalUpdate) -> dict[str, Any]:
        """
        Update identity fields and optionally the password.

        Raises:
            Conflict: If a new identifier belongs to another principal
        """
        principal = await self._load(principal_id)

        username = data.username.lower() if data.username else None
        email = data.email.lower() if data.email else None
        conflict = await self.store.find_conflict(
            username=username if username != principal.username else None,
            email=email if email != principal.email else None,
            phone=data.phone if data.phone != principal.phone else None,
            exclude_id=principal.id,
        )
        if conflict:
            raise Conflict(f"{conflict.capitalize()} already exist for other {self.label.lower()}")

        principal.name = data.name or principal.name
        principal.username = username or principal.username
        principal.email = email or principal.email
        principal.phone = data.phone or principal.phone
        await self.store.save(principal, "name", "username", "email", "phone")

        if data.password:
            await self.store.change_password(principal, data.password)
            self._send_credentials(principal, data.password)

        return {
            "message": f"{self.label} edited successfully",
            "results": principal.public_dict(),
        }

    async def update_profile(self, principal_id: str, data: ProfileUpdate) -> dict[str, Any]:
        principal = await self._load(principal_id)
        principal.name = data.name or principal.name
        await self.store.save(principal, "name")
        return {"message": "Profile Updated Successfully", "results": principal.public_dict()}

    async def _change_identifier(self, principal_id: str, field: str, value: str) -> dict[str, Any]:
        principal = await self._load(principal_id)
        if getattr(principal, field) == value:
            raise InvalidRequest(f"Old and new {field} must be different")
        if await self.store.find_conflict(**{field: value}) is not None:
            raise Conflict(f"New {field} already exist for other {self.label.lower()}")

        setattr(principal, field, value)
        await self.store.save(principal, field)
        return {
            "message": f"{principal.name}'s {field} was changed to {value}",
            "results": principal.public_dict(),
        }

    async def change_username(self, principal_id: str, username: str) -> dict[str, Any]:
        return await self._change_identifier(principal_id, "username", username.lower())

    async def change_email(self, principal_id: str, email: str) -> dict[str, Any]:
        return await self._change_identifier(principal_id, "email", email.lower())

    async def change_phone(self, principal_id: str, phone: str) -> dict[str, Any]:
        if not str(phone).isdigit():
            raise InvalidRequest("Provide new valid phone number")
        return await self._change_identifier(principal_id, "phone", str(phone))

    async def change_status(self, principal_id: str, status: str) -> dict[str, Any]:
        if status not in SETTABLE_STATUSES:
            raise InvalidRequest(f"Status must be one of {', '.join(SETTABLE_STATUSES)}")
        principal = await self._load(principal_id)
        principal.status = status
        await self.store.save(principal, "status")
        return {
            "message": f"{principal.name} status changed to {principal.status}",
            "results": principal.public_dict(),
        }

    # ==================== Credentials ====================

    async def change_password(
        self,
        principal_id: str,
        current_password: str,
        new_password: str,
    ) -> dict[str, Any]:
        """
        Change a password after checking the current one.

        Raises:
            InvalidCredentials: If the current password is wrong
            SamePassword: If the new password equals the current one
        """
        principal = await self._load(principal_id)
        if not self.store.verify_password(principal, current_password):
            raise InvalidCredentials("Current Password does not match")
        if current_password == new_password:
            raise SamePassword()
        await self.store.change_password(principal, new_password)
        return {"message": "Password changed successfully"}

    async def send_login_credentials(self, principal_id: str) -> dict[str, Any]:
        """Replace the password with a generated one and mail it."""
        principal = await self._load(principal_id)
        password = generate_password()
        principal.auto_generated_password = True
        await self.store.set_password(principal, password, "auto_generated_password")
        self._send_credentials(principal, password)
        return {"message": f"Login credentials sent to {principal.email}"}

    # ==================== Delete / restore ====================

    async def delete(self, principal_id: str) -> dict[str, Any]:
        """Soft delete: the account is deactivated and hidden."""
        principal = await self._load(principal_id)
        principal.status = AccountStatus.INACTIVE.value
        principal.is_deleted = True
        principal.deleted_at = utcnow()
        await self.store.save(principal, "status", "is_deleted", "deleted_at")
        return {"message": f"{principal.username} {self.label.lower()} was deleted"}

    async def restore(self, principal_id: str) -> dict[str, Any]:
        principal = await self._load_deleted(principal_id)
        principal.status = AccountStatus.ACTIVE.value
        principal.is_deleted = False
        principal.deleted_at = None
        await self.store.save(principal, "status", "is_deleted", "deleted_at")
        return {
            "message": f"{principal.username} {self.label.lower()} was restored",
            "results": principal.public_dict(),
        }

    async def permanent_delete(self, principal_id: str) -> dict[str, Any]:
        """Remove a soft-deleted principal for good (development only)."""
        principal = await self._load_deleted(principal_id)
        self._ensure_development()
        await self.store.delete_document(principal.id)
        logger.info("Permanently deleted %s %s", self.label.lower(), principal.code)
        return {"message": f"{principal.username} {self.label.lower()} was deleted permanently"}

    async def delete_all(self) -> dict[str, Any]:
        self._ensure_development()
        count = await self.store.delete_all_documents()
        logger.info("Permanently deleted %d %ss", count, self.label.lower())
        return {"message": f"All {self.label.lower()}s deleted permanently"}
