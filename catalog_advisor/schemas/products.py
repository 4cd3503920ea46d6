"""
Product Schemas
===============

Pydantic models for the three stages a product goes through:

1. ``CandidateProduct``: raw extraction output, not yet deduplicated
2. ``NormalizedProduct``: deduplicated, with derived tags and SKU
3. ``ProductRead``: a persisted catalog product
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

TITLE_MAX_LENGTH = 500
CATEGORY_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 2000


class CandidateProduct(BaseModel):
    """
    Product extracted from catalog text by one of the extraction strategies.

    Attributes:
        title: Product title (required, whitespace-collapsed)
        category: Category label, "general" when unknown
        price: Non-negative price
        description: Free-text description, may be empty
        tags: Short lowercase tags, unique, order-preserving
        source_strategy: Name of the strategy that produced the record
    """

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH, description="Product title")
    category: str = Field(default="general", max_length=CATEGORY_MAX_LENGTH)
    price: Decimal = Field(..., ge=Decimal("0"), description="Unit price")
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)
    tags: list[str] = Field(default_factory=list)
    source_strategy: str = Field(default="unknown", description="Producing strategy")

    @field_validator("title")
    @classmethod
    def normalize_title(cls, v: str) -> str:
        """Strip whitespace and collapse inner runs of spaces."""
        normalized = " ".join(v.strip().split())
        if not normalized:
            raise ValueError("title must not be blank")
        return normalized

    @field_validator("category")
    @classmethod
    def normalize_category(cls, v: str) -> str:
        normalized = " ".join(v.strip().split())
        return normalized or "general"

    @field_validator("description")
    @classmethod
    def normalize_description(cls, v: str) -> str:
        return " ".join(v.split())

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list[str]) -> list[str]:
        """Lowercase, strip and deduplicate tags, keeping first occurrence order."""
        seen: dict[str, None] = {}
        for tag in v:
            cleaned = tag.strip().lower()
            if cleaned:
                seen.setdefault(cleaned, None)
        return list(seen)


class NormalizedProduct(BaseModel):
    """Deduplicated product, ready to be persisted."""

    title: str
    description: str = ""
    category: str = "general"
    price: Decimal = Field(..., ge=Decimal("0"))
    tags: list[str] = Field(default_factory=list)
    stock: int = Field(default=0, ge=0)
    sku: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class ProductRead(BaseModel):
    """
    Persisted catalog product as seen by the scorer and the API.

    ``id`` is always exposed as a string so that behavior profiles can
    refer to products by the same value whatever the storage key type.
    """

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    title: str = ""
    description: str = ""
    category: str = "general"
    price: Decimal = Field(..., ge=Decimal("0"))
    tags: list[str] = Field(default_factory=list)
    stock: int = 0
    sku: str | None = None
    # ORM rows expose the column as ``meta``; ``metadata`` there is the table registry
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("meta", "metadata"),
    )
    created_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> str:
        return str(v)

    @field_validator("tags", mode="before")
    @classmethod
    def default_tags(cls, v: Any) -> Any:
        return v or []

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, v: Any) -> Any:
        return v or ""


class ProductCreate(BaseModel):
    """Request body for manually adding a product to the catalog."""

    title: str = Field(..., min_length=1, max_length=500)
    description: str = Field(..., min_length=1, max_length=2000)
    category: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=Decimal("0"))
    tags: list[str] = Field(default_factory=list)
    stock: int = Field(default=0, ge=0)
    sku: str | None = Field(default=None, min_length=1, max_length=64)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("title", "category")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()
