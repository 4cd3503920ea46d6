"""
Pydantic Request Models
=======================

API request schemas for the catalog advisor endpoints.
"""

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AskRequest(BaseModel):
    """Request body for POST /api/chat/ask."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"query": "Which running shoes are under $100?"}}
    )

    query: Annotated[
        str,
        Field(min_length=1, max_length=2000, description="Natural-language question"),
    ]

    @field_validator("query")
    @classmethod
    def reject_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Query cannot be empty")
        return v.strip()


class RecommendRequest(BaseModel):
    """
    Request body for POST /api/chat/recommend.

    ``behavior`` is validated by the scorer rather than here so that a
    missing or non-object profile produces the same domain error whether
    the scorer is called over HTTP or directly.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "behavior": {
                    "preferences": {
                        "categories": ["footwear"],
                        "maxPrice": 100,
                        "tags": ["running"],
                    },
                    "viewed": ["trail"],
                    "purchased": [],
                },
                "topN": 3,
            }
        },
    )

    behavior: Any = None
    top_n: Annotated[
        int | None,
        Field(default=None, ge=1, le=50, alias="topN", description="Number of recommendations"),
    ] = None
