"""
Behavior and Scoring Schemas
============================

Caller-supplied behavior profile and the scorer's output records.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from catalog_advisor.schemas.products import ProductRead


class BehaviorPreferences(BaseModel):
    """Explicit user preferences. ``maxPrice`` is accepted as an alias."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    categories: list[str] = Field(default_factory=list)
    max_price: Decimal | None = Field(default=None, alias="maxPrice")
    tags: list[str] = Field(default_factory=list)


class UserBehaviorProfile(BaseModel):
    """
    Signals used to personalize scoring.

    ``viewed`` mixes product ids and free-text keywords; only string
    entries are treated as keywords. ``purchased`` holds product ids.
    """

    model_config = ConfigDict(extra="ignore")

    preferences: BehaviorPreferences = Field(default_factory=BehaviorPreferences)
    viewed: list[str | int] = Field(default_factory=list)
    purchased: list[str | int] = Field(default_factory=list)


class ScoreSignal(BaseModel):
    """One scoring rule that fired for a product."""

    name: str
    points: int
    detail: str = ""


class ScoredProduct(BaseModel):
    """A catalog product paired with its recommendation score."""

    product: ProductRead
    score: int = Field(..., ge=0)
    signals: list[ScoreSignal] = Field(default_factory=list)

    def to_response(self) -> dict[str, Any]:
        """Flatten into the product fields plus ``score`` for API output."""
        data = self.product.model_dump(mode="json")
        data["score"] = self.score
        data["reasons"] = [s.detail for s in self.signals]
        return data
