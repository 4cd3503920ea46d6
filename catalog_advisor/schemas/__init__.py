"""
Schemas Package
===============

Pydantic models for products, behavior profiles, extraction results
and API requests/responses.
"""

from catalog_advisor.schemas.behavior import (
    BehaviorPreferences,
    ScoredProduct,
    ScoreSignal,
    UserBehaviorProfile,
)
from catalog_advisor.schemas.extraction import ExtractionReport
from catalog_advisor.schemas.products import (
    CandidateProduct,
    NormalizedProduct,
    ProductCreate,
    ProductRead,
)
from catalog_advisor.schemas.requests import AskRequest, RecommendRequest
from catalog_advisor.schemas.responses import (
    AskResponse,
    ErrorResponse,
    InteractionRead,
    ProductListResponse,
    RecommendResponse,
    UploadResponse,
)

__all__ = [
    # Products
    "CandidateProduct",
    "NormalizedProduct",
    "ProductCreate",
    "ProductRead",
    # Behavior and scoring
    "BehaviorPreferences",
    "UserBehaviorProfile",
    "ScoreSignal",
    "ScoredProduct",
    # Extraction
    "ExtractionReport",
    # Requests
    "AskRequest",
    "RecommendRequest",
    # Responses
    "AskResponse",
    "ErrorResponse",
    "InteractionRead",
    "ProductListResponse",
    "RecommendResponse",
    "UploadResponse",
]
