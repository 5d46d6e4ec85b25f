"""
Generic CRUD for catalog collections (samples, artists, categories, carts).

Every catalog collection shares the same lifecycle; what differs is the
collection, the code prefix and the optional extra fields, all captured by
a CatalogSpec.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo.errors import DuplicateKeyError as MongoDuplicateKeyError

from samplehub.config import Settings
from samplehub.core.exceptions import Conflict, DuplicateKeyError, Forbidden, NotFound
from samplehub.database.databases import catalog_db
from samplehub.database.documents import (
    contains_pattern,
    serialize_document,
    to_object_id,
    utcnow,
)
from samplehub.models.catalog import CatalogStatus
from samplehub.models.principal import SUPER_ADMIN_ROLES
from samplehub.schemas.catalog import (
    ArtistCreate,
    ArtistUpdate,
    CatalogCreate,
    CatalogUpdate,
    CategoryCreate,
    CategoryUpdate,
)
from samplehub.services.pagination import DeletedFilter, deleted_query, paginate

logger = logging.getLogger(__name__)

BASE_FIELDS = ("code", "name", "status", "created_at")
DELETION_FIELDS = ("is_deleted", "deleted_at")


@dataclass(frozen=True)
class CatalogSpec:
    """Describes one catalog collection."""
    label: str
    collection: str
    code_prefix: str
    path: str
    create_schema: type[BaseModel] = CatalogCreate
    update_schema: type[BaseModel] = CatalogUpdate
    extra_fields: tuple[str, ...] = ()
    plural: str = ""

    @property
    def plural_label(self) -> str:
        return self.plural or f"{self.label}s"

    @property
    def public_fields(self) -> tuple[str, ...]:
        return BASE_FIELDS + self.extra_fields


SAMPLES = CatalogSpec(
    label="Sample",
    collection=catalog_db.Collections.SAMPLES,
    code_prefix="SPLE",
    path="sample",
)
ARTISTS = CatalogSpec(
    label="Artist",
    collection=catalog_db.Collections.ARTISTS,
    code_prefix="ART",
    path="artist",
    create_schema=ArtistCreate,
    update_schema=ArtistUpdate,
    extra_fields=("verification_documents",),
)
CATEGORIES = CatalogSpec(
    label="Category",
    collection=catalog_db.Collections.CATEGORIES,
    code_prefix="CAT",
    path="category",
    create_schema=CategoryCreate,
    update_schema=CategoryUpdate,
    extra_fields=("image",),
    plural="Categories",
)
CARTS = CatalogSpec(
    label="Cart",
    collection=catalog_db.Collections.CARTS,
    code_prefix="CRT",
    path="cart",
)

ALL_CATALOG_SPECS = (SAMPLES, ARTISTS, CATEGORIES, CARTS)


class CatalogService:
    """CRUD over one catalog collection."""

    def __init__(self, db: AsyncIOMotorDatabase, spec: CatalogSpec, settings: Settings):
        self.collection = db[spec.collection]
        self.spec = spec
        self.settings = settings

    # ==================== Helpers ====================

    def _projection(self, include_deleted: bool) -> dict[str, int]:
        fields = self.spec.public_fields + (DELETION_FIELDS if include_deleted else ())
        return {field: 1 for field in fields}

    async def _load(
        self,
        item_id: str,
        *,
        include_deleted: bool = False,
        **criteria: Any,
    ) -> dict[str, Any]:
        query: dict[str, Any] = {"_id": to_object_id(item_id), **criteria}
        if not include_deleted:
            query["is_deleted"] = False
        document = await self.collection.find_one(query)
        if document is None:
            raise NotFound(f"{self.spec.label} not found")
        return document

    async def _update(self, document: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
        changes = {**changes, "updated_at": utcnow()}
        try:
            await self.collection.update_one({"_id": document["_id"]}, {"$set": changes})
        except MongoDuplicateKeyError:
            raise DuplicateKeyError()
        document.update(changes)
        return document

    def _public(self, document: dict[str, Any], include_deleted: bool = False) -> dict[str, Any]:
        fields = set(self._projection(include_deleted)) | {"_id"}
        return serialize_document({k: v for k, v in document.items() if k in fields})

    async def _next_code(self) -> str:
        prefix = self.spec.code_prefix
        cursor = (
            self.collection.find({"code": {"$regex": f"^{prefix}\\d+$"}}, {"code": 1})
            .sort("_id", -1)
            .limit(1)
        )
        latest = await cursor.to_list(length=1)
        if not latest:
            return f"{prefix}100"
        return f"{prefix}{int(latest[0]['code'][len(prefix):]) + 1}"

    async def _name_taken(self, name: str, exclude_id: Optional[Any] = None) -> bool:
        query: dict[str, Any] = {"name": name}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        return await self.collection.find_one(query, {"_id": 1}) is not None

    def _ensure_development(self) -> None:
        if not self.settings.is_development:
            raise Forbidden(
                f"In {self.settings.environment} mode not able to delete permanently!!"
            )

    # ==================== Read ====================

    async def list_items(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        timestamp: Optional[str] = None,
        code: Optional[str] = None,
        name: Optional[str] = None,
        statuses: Optional[list[str]] = None,
        deleted: DeletedFilter = "NO",
    ) -> dict[str, Any]:
        query: dict[str, Any] = deleted_query(deleted)
        if code:
            query["code"] = contains_pattern(code)
        if name:
            query["name"] = contains_pattern(name)
        if statuses:
            query["status"] = {"$in": statuses}

        return await paginate(
            self.collection,
            query,
            page=page,
            limit=limit,
            timestamp=timestamp,
            projection=self._projection(deleted != "NO"),
            serialize=serialize_document,
            label=self.spec.label,
            plural=self.spec.plural_label,
        )

    async def get(self, item_id: str, viewer_role: Optional[str] = None) -> dict[str, Any]:
        can_see_deleted = viewer_role in SUPER_ADMIN_ROLES
        document = await self._load(item_id, include_deleted=can_see_deleted)
        return {
            "message": f"{self.spec.label} details fetched",
            "results": self._public(document, can_see_deleted),
        }

    # ==================== Create / edit ====================

    async def add(self, data: BaseModel) -> dict[str, Any]:
        """
        Create an item with the next sequential code.

        Raises:
            Conflict: If the name is already used in this collection
        """
        if await self._name_taken(data.name):
            raise Conflict("Name already exist")

        now = utcnow()
        document = {
            **data.model_dump(include=set(self.spec.extra_fields), exclude_none=True),
            "code": await self._next_code(),
            "name": data.name,
            "status": CatalogStatus.ACTIVE.value,
            "is_deleted": False,
            "deleted_at": None,
            "created_at": now,
            "updated_at": now,
        }
        try:
            result = await self.collection.insert_one(document)
        except MongoDuplicateKeyError:
            raise DuplicateKeyError("code")
        document["_id"] = result.inserted_id
        logger.info("Created %s %s", self.spec.label.lower(), document["code"])
        return {
            "message": f"{document['name']} {self.spec.label.lower()} created successfully",
            "results": self._public(document),
        }

    async def edit(self, item_id: str, data: BaseModel) -> dict[str, Any]:
        document = await self._load(item_id)
        changes = data.model_dump(exclude_none=True)
        if "name" in changes and changes["name"] != document["name"]:
            if await self._name_taken(changes["name"], exclude_id=document["_id"]):
                raise Conflict(f"Name already exist for other {self.spec.label.lower()}")
        document = await self._update(document, changes)
        return {
            "message": f"{self.spec.label} edited successfully",
            "results": self._public(document),
        }

    async def change_status(self, item_id: str) -> dict[str, Any]:
        """Toggle between Active and Inactive."""
        document = await self._load(item_id)
        status = (
            CatalogStatus.INACTIVE.value
            if document.get("status") == CatalogStatus.ACTIVE.value
            else CatalogStatus.ACTIVE.value
        )
        document = await self._update(document, {"status": status})
        return {
            "message": f"{document['name']} status changed to {status}",
            "results": self._public(document),
        }

    # ==================== Delete / restore ====================

    async def delete(self, item_id: str) -> dict[str, Any]:
        document = await self._load(item_id)
        await self._update(
            document,
            {"status": CatalogStatus.INACTIVE.value, "is_deleted": True, "deleted_at": utcnow()},
        )
        return {"message": f"{document['name']} {self.spec.label.lower()} was deleted"}

    async def restore(self, item_id: str) -> dict[str, Any]:
        document = await self._load(item_id, include_deleted=True, is_deleted=True)
        document = await self._update(
            document,
            {"status": CatalogStatus.ACTIVE.value, "is_deleted": False, "deleted_at": None},
        )
        return {
            "message": f"{document['name']} {self.spec.label.lower()} was restored",
            "results": self._public(document),
        }

    async def permanent_delete(self, item_id: str) -> dict[str, Any]:
        document = await self._load(item_id, include_deleted=True, is_deleted=True)
        self._ensure_development()
        await self.collection.delete_one({"_id": document["_id"]})
        return {
            "message": f"{document['name']} {self.spec.label.lower()} was deleted permanently"
        }

    async def delete_all(self) -> dict[str, Any]:
        self._ensure_development()
        result = await self.collection.delete_many({})
        logger.info("Permanently deleted %d %s documents", result.deleted_count, self.spec.collection)
        return {"message": f"All {self.spec.plural_label.lower()} deleted permanently"}
