"""
System database configuration.

db_registry holds one document per application database (keyed by its
name) describing its purpose, collections and schema version.
"""

DB_NAME = "system_db"

# Bumped when a collection layout changes incompatibly
SCHEMA_VERSION = "1.0"


class Collections:
    """Collection names in system_db."""
    DB_REGISTRY = "db_registry"
    METADATA = "_metadata"


# Manifest for registry
DB_MANIFEST = {
    "db_name": DB_NAME,
    "purpose": "Registry of the SampleHub databases",
    "collections": [Collections.DB_REGISTRY, Collections.METADATA],
    "access_level": "system",
}
