"""
Database registry management.
Ensures all databases, collections and indexes exist on startup, and seeds
the first super admin when configured.
"""
import logging
from datetime import datetime, timezone

from motor.motor_asyncio import AsyncIOMotorClient

from samplehub.config import Settings
from samplehub.database.databases import auth_db, catalog_db, system_db
from samplehub.models.principal import AdminRole
from samplehub.services.credential_store import AdminStore

logger = logging.getLogger(__name__)

# All database manifests
ALL_DB_MANIFESTS = [
    auth_db.DB_MANIFEST,
    catalog_db.DB_MANIFEST,
    system_db.DB_MANIFEST,
]


async def sync_registry(client: AsyncIOMotorClient) -> None:
    """
    Synchronize the database registry on application startup.
    Ensures all databases are registered in system_db.db_registry.
    """
    sys_db = client[system_db.DB_NAME]
    registry_collection = sys_db[system_db.Collections.DB_REGISTRY]
    now = datetime.now(timezone.utc)

    for manifest in ALL_DB_MANIFESTS:
        db_name = manifest["db_name"]

        await registry_collection.update_one(
            {"_id": db_name},
            {
                "$set": {
                    "purpose": manifest["purpose"],
                    "collections": manifest["collections"],
                    "access_level": manifest["access_level"],
                    "schema_version": system_db.SCHEMA_VERSION,
                    "updated_at": now,
                },
                "$setOnInsert": {"created_at": now},
            },
            upsert=True,
        )

        await client[db_name]["_metadata"].update_one(
            {"_id": "db_metadata"},
            {
                "$set": {"db_name": db_name, "last_updated_at": now},
                "$setOnInsert": {"created_at": now},
            },
            upsert=True,
        )


async def create_indexes(client: AsyncIOMotorClient) -> None:
    """Create necessary indexes for all databases."""
    await auth_db.create_auth_indexes(client[auth_db.DB_NAME])
    await catalog_db.create_catalog_indexes(client[catalog_db.DB_NAME])


async def bootstrap_super_admin(client: AsyncIOMotorClient, settings: Settings) -> bool:
    """
    Create the first SuperAdmin from the bootstrap_admin_* settings.

    Does nothing when any bootstrap setting is missing or an admin with the
    same username or email already exists.

    Returns:
        True if an admin was created
    """
    fields = {
        "name": settings.bootstrap_admin_name,
        "username": settings.bootstrap_admin_username,
        "email": settings.bootstrap_admin_email,
        "phone": settings.bootstrap_admin_phone,
        "password": settings.bootstrap_admin_password,
    }
    if not all(fields.values()):
        return False

    store = AdminStore(client[auth_db.DB_NAME], settings)
    existing = await store.find_by_identifiers(
        username=fields["username"].lower(), email=fields["email"].lower()
    )
    if existing is not None:
        return False

    await store.create(
        name=fields["name"],
        username=fields["username"],
        email=fields["email"],
        phone=fields["phone"],
        password=fields["password"],
        role=AdminRole.SUPER_ADMIN.value,
    )
    logger.info("Bootstrapped super admin %s", fields["username"].lower())
    return True
