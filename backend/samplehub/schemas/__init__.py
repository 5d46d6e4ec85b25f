"""
Request and response schemas for API endpoints.
"""
from samplehub.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    SessionTokens,
    TokenPayload,
)
from samplehub.schemas.common import (
    MessageResponse,
    PaginatedResponse,
    ResultResponse,
    TokenResponse,
)
from samplehub.schemas.principal import PrincipalCreate, PrincipalUpdate
from samplehub.schemas.catalog import CatalogCreate, CatalogUpdate

__all__ = [
    # Auth
    "LoginRequest",
    "RegisterRequest",
    "SessionTokens",
    "TokenPayload",
    # Envelopes
    "MessageResponse",
    "PaginatedResponse",
    "ResultResponse",
    "TokenResponse",
    # Principals
    "PrincipalCreate",
    "PrincipalUpdate",
    # Catalog
    "CatalogCreate",
    "CatalogUpdate",
]
