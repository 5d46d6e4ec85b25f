"""
Auth database configuration.
Stores principals (users and admins) and their credential state.
"""
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import OperationFailure

DB_NAME = "auth_db"

# Fields that must be unique per principal collection
UNIQUE_FIELDS = ("username", "email", "phone")


class Collections:
    """Collection names in auth_db."""
    USERS = "users"
    ADMINS = "admins"
    METADATA = "_metadata"


async def create_auth_indexes(db: AsyncIOMotorDatabase) -> None:
    """Unique identifiers plus the listing sort key on both principal collections."""
    for collection_name in (Collections.USERS, Collections.ADMINS):
        collection = db[collection_name]
        for field in UNIQUE_FIELDS:
            await collection.create_index(field, unique=True)
        await collection.create_index("code", unique=True, sparse=True)
        try:
            await collection.create_index([("is_deleted", 1), ("created_at", -1)])
        except OperationFailure:
            # Index might already exist with different options
            pass


# Manifest for registry
DB_MANIFEST = {
    "db_name": DB_NAME,
    "purpose": "User and admin authentication and identity management",
    "collections": [Collections.USERS, Collections.ADMINS, Collections.METADATA],
    "access_level": "restricted",
}
