"""Rule-based recommendation scoring and explanation."""

from catalog_advisor.services.recommendation.explainer import Explanation, RecommendationExplainer
from catalog_advisor.services.recommendation.scorer import (
    RecommendationScorer,
    coerce_behavior,
    score_and_rank,
)

__all__ = [
    "Explanation",
    "RecommendationExplainer",
    "RecommendationScorer",
    "coerce_behavior",
    "score_and_rank",
]
