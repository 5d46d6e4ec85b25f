"""
Pydantic models for database documents and data structures.
"""
from samplehub.models.principal import (
    Admin,
    AdminRole,
    AccountStatus,
    Principal,
    User,
    UserRole,
)
from samplehub.models.catalog import CatalogStatus, VerificationDocuments

__all__ = [
    "Admin",
    "AdminRole",
    "AccountStatus",
    "Principal",
    "User",
    "UserRole",
    "CatalogStatus",
    "VerificationDocuments",
]
