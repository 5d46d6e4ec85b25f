"""
Response envelopes shared by every router.
"""
from typing import Any, Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ResultResponse(MessageResponse):
    """Envelope carrying a single result object."""
    results: Any = None


class PaginatedResponse(MessageResponse):
    """Envelope of a paginated listing."""
    current_page: int = Field(..., description="Requested page, 1-based")
    results: list[dict[str, Any]] = Field(default_factory=list)
    latest_count: int = Field(0, description="Documents created after the snapshot timestamp")
    total_count: int
    total_pages: int


class AvailabilityResponse(MessageResponse):
    available: bool


class TokenResult(BaseModel):
    token: str


class TokenResponse(MessageResponse):
    results: Optional[TokenResult] = None
