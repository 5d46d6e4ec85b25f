"""
Database module - client lifecycle and database definitions.
"""
from samplehub.database.connections import (
    get_mongo_client,
    get_redis_client,
    ping_mongo,
    ping_redis,
    close_connections,
)
from samplehub.database.databases import auth_db, catalog_db, system_db

__all__ = [
    "get_mongo_client",
    "get_redis_client",
    "ping_mongo",
    "ping_redis",
    "close_connections",
    "auth_db",
    "catalog_db",
    "system_db",
]
