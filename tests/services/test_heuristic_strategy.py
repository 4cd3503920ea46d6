"""Tests for the heuristic line-scanning strategy."""

from decimal import Decimal

import pytest

from catalog_advisor.schemas.extraction import ExtractionReport
from catalog_advisor.services.extraction.heuristic_strategy import (
    HeuristicExtractionStrategy,
    infer_category,
)


@pytest.fixture
def strategy() -> HeuristicExtractionStrategy:
    return HeuristicExtractionStrategy()


class TestHeuristicStrategy:
    @pytest.mark.asyncio
    async def test_price_lines_become_products(self, strategy):
        text = (
            "Summer Collection\n"
            "Canvas Sneakers $45.00\n"
            "Breathable cotton upper\n"
            "\n"
            "Leather Wallet 19.99\n"
            "Slim bifold design\n"
        )

        candidates = await strategy.try_extract(text)

        assert len(candidates) == 2
        sneakers, wallet = candidates
        assert sneakers.title == "Canvas Sneakers"
        assert sneakers.price == Decimal("45.00")
        assert sneakers.description == "Breathable cotton upper"
        assert sneakers.category == "footwear"
        assert sneakers.source_strategy == "heuristic"
        assert wallet.title == "Leather Wallet"
        assert wallet.category == "general"

    @pytest.mark.asyncio
    async def test_next_price_line_is_not_a_description(self, strategy):
        text = "Coffee Beans $12\nGreen Tea $8.50\n"

        candidates = await strategy.try_extract(text)

        assert [c.title for c in candidates] == ["Coffee Beans", "Green Tea"]
        assert candidates[0].description == ""
        assert candidates[0].category == "food"

    @pytest.mark.asyncio
    async def test_title_and_description_are_truncated(self, strategy):
        text = f"{'Widget ' * 30}$5.00\n{'x' * 300}\n"

        candidates = await strategy.try_extract(text)

        assert len(candidates[0].title) <= 100
        assert len(candidates[0].description) == 200

    @pytest.mark.asyncio
    async def test_invalid_lines_are_counted(self, strategy):
        report = ExtractionReport()

        result = await strategy.try_extract("$19.99\nClearance item -12.50\n", report)

        assert result is None
        assert report.dropped_invalid == 2

    @pytest.mark.asyncio
    async def test_no_prices(self, strategy):
        assert await strategy.try_extract("About us\nWe sell shoes.") is None


class TestInferCategory:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Trail running shoes", "footwear"),
            ("Noise cancelling headphones", "electronics"),
            ("Cotton T-Shirt", "clothing"),
            ("Gift card", "general"),
        ],
    )
    def test_keyword_lookup(self, text, expected):
        assert infer_category(text) == expected
