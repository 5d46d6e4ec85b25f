"""
Catalog request schemas.
"""
from typing import Optional

from pydantic import BaseModel, Field

from samplehub.models.catalog import VerificationDocuments


class CatalogCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Display name, unique per collection")


class CatalogUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)


class ArtistCreate(CatalogCreate):
    verification_documents: Optional[VerificationDocuments] = None


class ArtistUpdate(CatalogUpdate):
    verification_documents: Optional[VerificationDocuments] = None


class CategoryCreate(CatalogCreate):
    image: Optional[str] = Field(None, description="Image URL")


class CategoryUpdate(CatalogUpdate):
    image: Optional[str] = None
