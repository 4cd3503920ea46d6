"""
Recommendation Scorer
=====================

Ranks catalog products against a user behavior profile with a fixed
additive rule:

| Signal            | Condition                                           | Points    |
|-------------------|-----------------------------------------------------|-----------|
| category          | product.category in preferences.categories          | +30       |
| price             | max_price set and product.price <= max_price        | +20       |
| tags              | per product tag in preferences.tags                 | +10 each  |
| viewed            | product id in viewed                                | +25       |
| keyword           | per viewed string found in title or description     | +5 each   |
| purchased         | product id in purchased                             | +40       |

Scores are never negative and never normalized. Ranking is descending
by score and stable, so ties keep catalog order.
"""

from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any, Final

from pydantic import ValidationError as PydanticValidationError

from catalog_advisor.schemas.behavior import ScoredProduct, ScoreSignal, UserBehaviorProfile
from catalog_advisor.schemas.products import ProductRead
from catalog_advisor.utils.errors import ValidationError
from catalog_advisor.utils.logger import get_logger

logger = get_logger(__name__)

CATEGORY_POINTS: Final[int] = 30
PRICE_POINTS: Final[int] = 20
TAG_POINTS: Final[int] = 10
VIEWED_POINTS: Final[int] = 25
KEYWORD_POINTS: Final[int] = 5
PURCHASED_POINTS: Final[int] = 40


def coerce_behavior(behavior: Any) -> UserBehaviorProfile:
    """
    Validate a caller-supplied behavior profile.

    Args:
        behavior: Mapping (usually parsed JSON) or a UserBehaviorProfile

    Returns:
        Validated profile

    Raises:
        ValidationError: If behavior is missing, not an object, or has
            fields of the wrong type
    """
    if isinstance(behavior, UserBehaviorProfile):
        return behavior

    if not isinstance(behavior, Mapping):
        raise ValidationError(
            "Behavior object is required",
            details={"received_type": type(behavior).__name__},
        )

    try:
        return UserBehaviorProfile.model_validate(dict(behavior))
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid behavior profile",
            details={
                "errors": [
                    {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
                    for err in e.errors()
                ]
            },
        ) from e


def _coerce_product(product: ProductRead | Mapping[str, Any] | Any) -> ProductRead:
    if isinstance(product, ProductRead):
        return product
    try:
        if isinstance(product, Mapping):
            return ProductRead.model_validate(dict(product))
        return ProductRead.model_validate(product, from_attributes=True)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid catalog product",
            details={"errors": e.error_count()},
        ) from e


class RecommendationScorer:
    """
    Deterministic additive scorer.

    Example:
        scorer = RecommendationScorer()
        ranked = scorer.score_and_rank(products, {"preferences": {"categories": ["footwear"]}}, top_n=3)
        for item in ranked:
            print(item.product.title, item.score)
    """

    def score_product(self, product: ProductRead, behavior: UserBehaviorProfile) -> ScoredProduct:
        """Score a single product and record which rules fired."""
        prefs = behavior.preferences
        signals: list[ScoreSignal] = []
        product_id = str(product.id)

        if product.category in prefs.categories:
            signals.append(
                ScoreSignal(
                    name="category",
                    points=CATEGORY_POINTS,
                    detail=f"category match: {product.category}",
                )
            )

        if prefs.max_price is not None and product.price <= prefs.max_price:
            signals.append(
                ScoreSignal(
                    name="price",
                    points=PRICE_POINTS,
                    detail=f"within budget: ${_format_price(product.price)}",
                )
            )

        preferred_tags = {t.lower() for t in prefs.tags}
        overlap = sum(1 for tag in product.tags if tag.lower() in preferred_tags)
        if overlap:
            signals.append(
                ScoreSignal(
                    name="tags",
                    points=TAG_POINTS * overlap,
                    detail=f"shared tags: {overlap}",
                )
            )

        if product_id in {str(v) for v in behavior.viewed}:
            signals.append(ScoreSignal(name="viewed", points=VIEWED_POINTS, detail="recently viewed"))

        title = product.title.lower()
        description = product.description.lower()
        for keyword in behavior.viewed:
            if not isinstance(keyword, str) or not keyword.strip():
                continue
            needle = keyword.lower()
            if needle in title or needle in description:
                signals.append(
                    ScoreSignal(
                        name="keyword",
                        points=KEYWORD_POINTS,
                        detail=f"matches viewed keyword: {keyword}",
                    )
                )

        if product_id in {str(p) for p in behavior.purchased}:
            signals.append(
                ScoreSignal(name="purchased", points=PURCHASED_POINTS, detail="previously purchased")
            )

        return ScoredProduct(
            product=product,
            score=sum(s.points for s in signals),
            signals=signals,
        )

    def score_and_rank(
        self,
        catalog: Sequence[ProductRead | Mapping[str, Any]],
        behavior: UserBehaviorProfile | Mapping[str, Any] | Any,
        top_n: int | None = None,
    ) -> list[ScoredProduct]:
        """
        Score every product and return them best first.

        Args:
            catalog: Products to rank (models, mappings or ORM rows)
            behavior: User behavior profile
            top_n: Keep only the first N, None for the full ranking

        Returns:
            Ranked ScoredProduct list

        Raises:
            ValidationError: If behavior or a product is structurally invalid
        """
        profile = coerce_behavior(behavior)

        if top_n is not None and top_n < 0:
            raise ValidationError("top_n must be non-negative", details={"top_n": top_n})

        scored = [self.score_product(_coerce_product(p), profile) for p in catalog]
        # sorted() is stable with reverse=True, so ties keep catalog order
        ranked = sorted(scored, key=lambda s: s.score, reverse=True)

        logger.debug(
            "scorer.ranked",
            catalog_size=len(scored),
            top_n=top_n,
            best_score=ranked[0].score if ranked else None,
        )

        if top_n is not None:
            return ranked[:top_n]
        return ranked


def _format_price(price: Decimal) -> str:
    return format(price.normalize(), "f") if price == price.to_integral() else f"{price:.2f}"


def score_and_rank(
    catalog: Sequence[ProductRead | Mapping[str, Any]],
    behavior: UserBehaviorProfile | Mapping[str, Any] | Any,
    top_n: int | None = None,
) -> list[ScoredProduct]:
    """Rank a catalog with the default scorer."""
    return RecommendationScorer().score_and_rank(catalog, behavior, top_n=top_n)
