"""
Catalog document models (samples, artists, categories, carts).
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class CatalogStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class VerificationDocuments(BaseModel):
    """Identity papers an artist may attach."""
    adhaar_card: Optional[str] = None
    social_media_urls: list[str] = Field(default_factory=list)
    pan_card: Optional[str] = None
    bank_details: Optional[str] = None

