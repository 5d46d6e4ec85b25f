"""
Database definitions and collection constants.
"""
from samplehub.database.databases import auth_db, catalog_db, system_db

__all__ = ["auth_db", "catalog_db", "system_db"]
