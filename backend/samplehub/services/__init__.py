"""
Service layer for business logic.
"""
from samplehub.services.credential_store import AdminStore, UserStore
from samplehub.services.session_service import SessionService
from samplehub.services.principal_service import PrincipalService
from samplehub.services.catalog_service import CatalogService

__all__ = [
    "AdminStore",
    "UserStore",
    "SessionService",
    "PrincipalService",
    "CatalogService",
]
