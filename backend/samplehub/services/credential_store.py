"""
Credential store for principals (users and admins).

Owns every read and write of principal documents, the hashing of passwords
and one-time codes, and the account status check used by authorization.
Plaintext secrets never leave this module except through the notifier.
"""
import logging
from typing import Any, Iterable, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError as MongoDuplicateKeyError

from samplehub.config import Settings
from samplehub.core.exceptions import DuplicateKeyError, NotFound, Unauthenticated
from samplehub.core.security import hash_secret, verify_secret
from samplehub.database.databases import auth_db
from samplehub.database.documents import to_object_id, utcnow
from samplehub.models.principal import (
    ADMIN_ROLES,
    AccountStatus,
    Admin,
    AdminRole,
    Principal,
    User,
    USER_ROLES,
    UserRole,
)

logger = logging.getLogger(__name__)

OTP_FIELDS = ("otp", "otp_sent_at", "failed_otp_attempts", "failed_otp_verify_at")

CONFLICT_MESSAGES = {
    "username": "Username already exist",
    "phone": "Phone number already exist",
    "email": "Email already exist",
}


def _duplicate_field(exc: MongoDuplicateKeyError) -> Optional[str]:
    details = exc.details or {}
    for key in ("keyValue", "keyPattern"):
        if details.get(key):
            return next(iter(details[key]))
    return None


class PrincipalStore:
    """
    Persistence and credential primitives shared by users and admins.

    Subclasses pick the collection, the code prefix and whether the
    principal kind supports OTP login.
    """

    collection_name: str
    code_prefix: str
    label: str
    model: type[Principal] = Principal
    roles: frozenset[str] = frozenset()
    default_role: str
    supports_otp: bool = False

    def __init__(self, db: AsyncIOMotorDatabase, settings: Settings):
        self.collection = db[self.collection_name]
        self.settings = settings

    # ==================== Secrets ====================

    def hash_secret(self, plaintext: str) -> str:
        return hash_secret(plaintext, self.settings.bcrypt_rounds)

    def verify_password(self, principal: Principal, plaintext: str) -> bool:
        return verify_secret(plaintext, principal.password)

    async def change_password(self, principal: Principal, new_plaintext: str) -> Principal:
        """
        Replace the password, keeping the previous hash as history.

        Args:
            principal: Principal loaded with its password hash
            new_plaintext: The new password

        Returns:
            The updated principal
        """
        principal.last_password = principal.password
        principal.password = self.hash_secret(new_plaintext)
        principal.password_changed = True
        principal.password_changed_at = utcnow()
        return await self.save(
            principal,
            "password",
            "last_password",
            "password_changed",
            "password_changed_at",
        )

    async def set_password(
        self, principal: Principal, new_plaintext: str, *extra_fields: str
    ) -> Principal:
        """Store a new password hash without history bookkeeping."""
        principal.password = self.hash_secret(new_plaintext)
        return await self.save(principal, "password", *extra_fields)

    # ==================== Lookups ====================

    async def find_one(self, query: dict[str, Any]) -> Optional[Principal]:
        document = await self.collection.find_one(query)
        if document is None:
            return None
        return self.model.from_document(document)

    async def find_by_id(
        self,
        principal_id: str,
        *,
        include_deleted: bool = False,
        **criteria: Any,
    ) -> Optional[Principal]:
        query: dict[str, Any] = {"_id": to_object_id(principal_id), **criteria}
        if not include_deleted:
            query["is_deleted"] = False
        return await self.find_one(query)

    async def find_by_identifiers(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        *,
        include_deleted: bool = False,
    ) -> Optional[Principal]:
        """
        Find a principal matching any of the supplied identifiers.

        Identifiers left as None take no part in the match, so a lookup by
        email alone never matches a principal through a missing phone.
        """
        clauses = [
            {field: value}
            for field, value in (("username", username), ("email", email), ("phone", phone))
            if value
        ]
        if not clauses:
            return None
        query: dict[str, Any] = {"$or": clauses}
        if not include_deleted:
            query["is_deleted"] = False
        return await self.find_one(query)

    async def find_by_email(self, email: str) -> Optional[Principal]:
        return await self.find_one({"email": email.lower(), "is_deleted": False})

    async def find_by_phone(self, phone: str) -> Optional[Principal]:
        return await self.find_one({"phone": str(phone), "is_deleted": False})

    async def find_conflict(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        exclude_id: Optional[str] = None,
    ) -> Optional[str]:
        """
        Name the first identifier already used by another principal.

        Deleted principals still hold their identifiers.

        Returns:
            "username", "phone" or "email", or None when all are free
        """
        for field, value in (("username", username), ("phone", phone), ("email", email)):
            if not value:
                continue
            query: dict[str, Any] = {field: value}
            if exclude_id is not None:
                query["_id"] = {"$ne": to_object_id(exclude_id)}
            if await self.collection.find_one(query, {"_id": 1}) is not None:
                return field
        return None

    # ==================== Persistence ====================

    async def next_code(self) -> str:
        """Sequential human-readable code following the newest principal's."""
        cursor = (
            self.collection.find({"code": {"$regex": f"^{self.code_prefix}\\d+$"}}, {"code": 1})
            .sort("_id", -1)
            .limit(1)
        )
        latest = await cursor.to_list(length=1)
        if not latest:
            return f"{self.code_prefix}100"
        last_number = int(latest[0]["code"][len(self.code_prefix):])
        return f"{self.code_prefix}{last_number + 1}"

    async def insert(self, document: dict[str, Any]) -> Principal:
        """
        Insert a new principal document.

        Raises:
            DuplicateKeyError: If a unique identifier is already taken
        """
        try:
            result = await self.collection.insert_one(document)
        except MongoDuplicateKeyError as exc:
            raise DuplicateKeyError(_duplicate_field(exc))
        document["_id"] = result.inserted_id
        logger.info("Created %s %s", self.label.lower(), document.get("code"))
        return self.model.from_document(document)

    async def create(
        self,
        *,
        name: str,
        username: str,
        email: str,
        phone: str,
        password: str,
        role: str,
        auto_generated_password: bool = False,
        otp: Optional[str] = None,
    ) -> Principal:
        """Build, hash and insert a new principal with the next code."""
        now = utcnow()
        principal = self.model(
            code=await self.next_code(),
            name=name,
            username=username.lower(),
            email=email.lower(),
            phone=str(phone),
            role=role,
            status=AccountStatus.ACTIVE,
            password=self.hash_secret(password),
            auto_generated_password=auto_generated_password,
            otp=self.hash_secret(otp) if otp else None,
            last_used=now,
            last_sync=now,
            created_at=now,
            updated_at=now,
        )
        exclude = {"id"}
        if not self.supports_otp:
            exclude.update(OTP_FIELDS)
        return await self.insert(principal.model_dump(exclude=exclude))

    async def save(self, principal: Principal, *fields: str) -> Principal:
        """
        Persist the given fields of a loaded principal.

        Raises:
            DuplicateKeyError: If an identifier collides with another principal
        """
        principal.updated_at = utcnow()
        changes = {field: getattr(principal, field) for field in (*fields, "updated_at")}
        try:
            await self.collection.update_one(
                {"_id": to_object_id(principal.id)},
                {"$set": changes},
            )
        except MongoDuplicateKeyError as exc:
            raise DuplicateKeyError(_duplicate_field(exc))
        return principal

    async def delete_document(self, principal_id: str) -> None:
        await self.collection.delete_one({"_id": to_object_id(principal_id)})

    async def delete_all_documents(self) -> int:
        result = await self.collection.delete_many(self.delete_all_filter())
        return result.deleted_count

    def delete_all_filter(self) -> dict[str, Any]:
        return {}

    # ==================== Status ====================

    async def check_status(
        self,
        principal_id: str,
        allowed_statuses: Iterable[str],
    ) -> Principal:
        """
        Confirm a principal may act, touching its activity stamps.

        An Inactive principal becomes Active again on use.

        Raises:
            NotFound: If the principal is missing or deleted
            Unauthenticated: If the resulting status is not allowed
        """
        principal = await self.find_by_id(principal_id)
        if principal is None:
            raise NotFound(f"{self.label} not found")

        if principal.status == AccountStatus.INACTIVE.value:
            principal.status = AccountStatus.ACTIVE.value
        principal.last_used = utcnow()
        await self.save(principal, "status", "last_used")

        if principal.status not in set(allowed_statuses):
            raise Unauthenticated(f"{self.label} is {principal.status}")
        return principal


class UserStore(PrincipalStore):
    collection_name = auth_db.Collections.USERS
    code_prefix = "USR"
    label = "User"
    model = User
    roles = USER_ROLES
    default_role = UserRole.USER.value
    supports_otp = True

    def delete_all_filter(self) -> dict[str, Any]:
        return {"role": UserRole.USER.value}


class AdminStore(PrincipalStore):
    collection_name = auth_db.Collections.ADMINS
    code_prefix = "ADM"
    label = "Admin"
    model = Admin
    roles = ADMIN_ROLES
    default_role = AdminRole.ADMIN.value

    def delete_all_filter(self) -> dict[str, Any]:
        # Super and developer admins are kept
        return {"role": AdminRole.ADMIN.value}


def store_for_role(role: str, users: UserStore, admins: AdminStore) -> PrincipalStore:
    """Pick the store holding principals of the given role."""
    return admins if role in ADMIN_ROLES else users
