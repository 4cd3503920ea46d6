"""
Pydantic Response Models
========================

API response schemas for the catalog advisor endpoints.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from catalog_advisor.schemas.products import ProductRead


class ErrorResponse(BaseModel):
    """Error body returned by the exception handlers."""

    error: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
    help: str | None = None


class UploadResponse(BaseModel):
    """Response for POST /api/chat/pdf-upload."""

    message: str
    upload_id: str
    text_length: int
    preview: str
    products_extracted: int
    strategy: str | None = None
    notices: list[str] = Field(default_factory=list)


class AskResponse(BaseModel):
    """Response for POST /api/chat/ask."""

    answer: str
    context_length: int
    query_length: int
    degraded: bool = False


class RecommendResponse(BaseModel):
    """Response for POST /api/chat/recommend."""

    recommendations: list[dict[str, Any]]
    explanation: str
    notice: str | None = None


class ProductListResponse(BaseModel):
    """Paginated product listing."""

    products: list[ProductRead]
    total: int
    limit: int
    offset: int


class InteractionRead(BaseModel):
    """Logged user interaction."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: str
    user_id: str
    interaction_type: str
    query: str | None = None
    products: list[dict[str, Any]] = Field(default_factory=list)
    ai_response: str | None = None
    timestamp: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> str:
        return str(v)
