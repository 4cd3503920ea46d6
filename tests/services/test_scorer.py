"""
Recommendation Scorer Tests
===========================

Point values per signal, ranking order and behavior validation.
"""

from decimal import Decimal

import pytest

from catalog_advisor.schemas.behavior import UserBehaviorProfile
from catalog_advisor.services.recommendation.scorer import (
    RecommendationScorer,
    coerce_behavior,
    score_and_rank,
)
from catalog_advisor.utils.errors import ValidationError


@pytest.fixture
def scorer() -> RecommendationScorer:
    return RecommendationScorer()


class TestSignals:
    def test_category_budget_and_tag(self):
        catalog = [{"id": 1, "category": "footwear", "price": 80, "tags": ["running"]}]
        behavior = {
            "preferences": {"categories": ["footwear"], "maxPrice": 100, "tags": ["running"]}
        }

        (result,) = score_and_rank(catalog, behavior)

        assert result.score == 60
        assert [s.detail for s in result.signals] == [
            "category match: footwear",
            "within budget: $80",
            "shared tags: 1",
        ]

    def test_each_shared_tag_counts(self, scorer, make_product):
        product = make_product(tags=["running", "Road", "sale"])
        behavior = UserBehaviorProfile.model_validate(
            {"preferences": {"tags": ["running", "road"]}}
        )

        assert scorer.score_product(product, behavior).score == 20

    def test_over_budget(self, scorer, make_product):
        behavior = coerce_behavior({"preferences": {"maxPrice": "50.00"}})

        assert scorer.score_product(make_product(price=Decimal("79.99")), behavior).score == 0

    def test_budget_detail_keeps_cents(self, scorer, make_product):
        behavior = coerce_behavior({"preferences": {"maxPrice": 100}})

        result = scorer.score_product(make_product(price=Decimal("79.99")), behavior)

        assert result.signals[0].detail == "within budget: $79.99"

    def test_no_budget_means_no_price_points(self, scorer, make_product):
        behavior = coerce_behavior({"preferences": {"categories": ["home"]}})

        assert scorer.score_product(make_product(price=Decimal("1")), behavior).score == 0

    def test_viewed_and_purchased_ids(self, scorer, make_product):
        product = make_product(id="p-1")
        behavior = coerce_behavior({"viewed": ["p-1"], "purchased": ["p-1"]})

        result = scorer.score_product(product, behavior)

        assert result.score == 25 + 40
        assert {s.name for s in result.signals} == {"viewed", "purchased"}

    def test_integer_ids_match_string_ids(self, scorer):
        (result,) = scorer.score_and_rank(
            [{"id": 7, "price": 10}],
            {"viewed": [7], "purchased": ["7"]},
        )

        assert result.score == 65

    def test_viewed_keywords(self, scorer, make_product):
        product = make_product(title="Trail Running Shoe", description="Grippy outsole")
        behavior = coerce_behavior({"viewed": ["running", "OUTSOLE", "   ", "boots"]})

        result = scorer.score_product(product, behavior)

        assert result.score == 10
        assert [s.detail for s in result.signals] == [
            "matches viewed keyword: running",
            "matches viewed keyword: OUTSOLE",
        ]

    def test_category_match_is_exact(self, scorer, make_product):
        behavior = coerce_behavior({"preferences": {"categories": ["Footwear"]}})

        assert scorer.score_product(make_product(category="footwear"), behavior).score == 0


class TestRanking:
    def test_descending_order(self, scorer):
        catalog = [
            {"id": "a", "category": "home", "price": 10},
            {"id": "b", "category": "footwear", "price": 10},
            {"id": "c", "category": "footwear", "price": 10},
        ]
        behavior = {"preferences": {"categories": ["footwear"]}, "purchased": ["c"]}

        ranked = scorer.score_and_rank(catalog, behavior)

        assert [r.product.id for r in ranked] == ["c", "b", "a"]
        assert [r.score for r in ranked] == [70, 30, 0]

    def test_ties_keep_catalog_order(self, scorer):
        catalog = [{"id": str(i), "price": 5} for i in range(5)]

        ranked = scorer.score_and_rank(catalog, {})

        assert [r.product.id for r in ranked] == ["0", "1", "2", "3", "4"]
        assert all(r.score == 0 for r in ranked)

    def test_top_n(self, scorer):
        catalog = [{"id": str(i), "price": 5} for i in range(5)]

        assert len(scorer.score_and_rank(catalog, {}, top_n=2)) == 2
        assert scorer.score_and_rank(catalog, {}, top_n=0) == []

    def test_negative_top_n(self, scorer):
        with pytest.raises(ValidationError):
            scorer.score_and_rank([], {}, top_n=-1)

    def test_empty_catalog(self, scorer):
        assert scorer.score_and_rank([], {"viewed": ["shoes"]}) == []

    def test_orm_rows(self, scorer, make_product_row):
        row = make_product_row(category="footwear")

        (result,) = scorer.score_and_rank([row], {"preferences": {"categories": ["footwear"]}})

        assert result.product.id == str(row.id)
        assert result.score == 30


class TestBehaviorValidation:
    @pytest.mark.parametrize("behavior", [None, "footwear", ["footwear"], 42])
    def test_non_object_is_rejected(self, scorer, behavior):
        with pytest.raises(ValidationError, match="Behavior object is required"):
            scorer.score_and_rank([], behavior)

    def test_wrong_field_types(self, scorer):
        with pytest.raises(ValidationError, match="Invalid behavior profile") as exc_info:
            scorer.score_and_rank([], {"viewed": "shoes"})

        assert exc_info.value.details["errors"][0]["loc"].startswith("viewed")

    def test_unknown_fields_are_ignored(self):
        profile = coerce_behavior({"cart": ["x"], "viewed": ["p-1"]})

        assert profile.viewed == ["p-1"]
