"""
Services Package
================

Extraction, deduplication, recommendation and question answering,
plus the catalog service that wires them to the repositories.
"""

from catalog_advisor.services.deduplication_service import (
    DeduplicationService,
    DeduplicationStats,
    deduplicate,
)
from catalog_advisor.services.extraction import ExtractorChain, extract_products
from catalog_advisor.services.recommendation import (
    RecommendationExplainer,
    RecommendationScorer,
    score_and_rank,
)

__all__ = [
    "DeduplicationService",
    "DeduplicationStats",
    "ExtractorChain",
    "RecommendationExplainer",
    "RecommendationScorer",
    "deduplicate",
    "extract_products",
    "score_and_rank",
]
