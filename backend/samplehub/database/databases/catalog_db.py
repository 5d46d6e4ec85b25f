"""
Catalog database configuration.

Structure:
- samples: Sample packs offered on the platform
- artists: Artists with optional verification documents
- categories: Browsing categories with an optional image
- carts: Shopping carts
- _metadata: Database metadata
"""
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import OperationFailure

DB_NAME = "catalog_db"


class Collections:
    """Collection names in catalog_db."""
    SAMPLES = "samples"
    ARTISTS = "artists"
    CATEGORIES = "categories"
    CARTS = "carts"
    METADATA = "_metadata"

    ITEMS = (SAMPLES, ARTISTS, CATEGORIES, CARTS)


async def create_catalog_indexes(db: AsyncIOMotorDatabase) -> None:
    """Unique code and listing sort key on every catalog collection."""
    for collection_name in Collections.ITEMS:
        collection = db[collection_name]
        await collection.create_index("code", unique=True, sparse=True)
        try:
            await collection.create_index([("is_deleted", 1), ("created_at", -1)])
        except OperationFailure:
            pass


# Manifest for registry
DB_MANIFEST = {
    "db_name": DB_NAME,
    "purpose": "Samples, artists, categories and carts",
    "collections": [*Collections.ITEMS, Collections.METADATA],
    "access_level": "standard",
}
