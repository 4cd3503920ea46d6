"""Tests for product and behavior schemas."""

from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest
from pydantic import ValidationError

from catalog_advisor.schemas.behavior import ScoredProduct, ScoreSignal, UserBehaviorProfile
from catalog_advisor.schemas.products import CandidateProduct, ProductRead
from catalog_advisor.schemas.requests import AskRequest, RecommendRequest


class TestCandidateProduct:
    def test_normalizes_fields(self):
        candidate = CandidateProduct(
            title="  Running   Shoe ",
            category="  ",
            price=Decimal("79.99"),
            tags=["Running", "running", " Road "],
        )

        assert candidate.title == "Running Shoe"
        assert candidate.category == "general"
        assert candidate.tags == ["running", "road"]

    def test_rejects_blank_title(self):
        with pytest.raises(ValidationError):
            CandidateProduct(title="   ", price=Decimal("1"))

    def test_rejects_negative_price(self):
        with pytest.raises(ValidationError):
            CandidateProduct(title="Widget", price=Decimal("-1"))


class TestProductRead:
    def test_from_orm_row_reads_meta_column(self):
        row = SimpleNamespace(
            id=uuid4(),
            title="Desk Lamp",
            description=None,
            category="home",
            price=Decimal("34.50"),
            tags=None,
            stock=3,
            sku="HOM-1234ABCD",
            meta={"source_strategy": "pattern"},
            created_at=None,
        )

        product = ProductRead.model_validate(row)

        assert product.id == str(row.id)
        assert product.metadata == {"source_strategy": "pattern"}
        assert product.tags == []
        assert product.description == ""

    def test_int_id_is_stringified(self):
        product = ProductRead(id=1, category="footwear", price=80)

        assert product.id == "1"
        assert product.title == ""


class TestBehaviorProfile:
    def test_max_price_alias(self):
        profile = UserBehaviorProfile.model_validate(
            {"preferences": {"categories": ["footwear"], "maxPrice": 100}}
        )

        assert profile.preferences.max_price == Decimal("100")

    def test_defaults(self):
        profile = UserBehaviorProfile.model_validate({})

        assert profile.viewed == []
        assert profile.purchased == []
        assert profile.preferences.max_price is None

    def test_viewed_must_be_list(self):
        with pytest.raises(ValidationError):
            UserBehaviorProfile.model_validate({"viewed": "shoes"})


class TestScoredProduct:
    def test_to_response_flattens_product(self):
        scored = ScoredProduct(
            product=ProductRead(id="p1", title="Running Shoe", price=80),
            score=30,
            signals=[ScoreSignal(name="category", points=30, detail="category match: footwear")],
        )

        data = scored.to_response()

        assert data["id"] == "p1"
        assert data["score"] == 30
        assert data["reasons"] == ["category match: footwear"]


class TestRequests:
    def test_ask_strips_query(self):
        assert AskRequest(query="  shoes?  ").query == "shoes?"

    def test_ask_rejects_blank_query(self):
        with pytest.raises(ValidationError):
            AskRequest(query="   ")

    def test_recommend_accepts_top_n_alias(self):
        request = RecommendRequest.model_validate({"behavior": {}, "topN": 5})

        assert request.top_n == 5
