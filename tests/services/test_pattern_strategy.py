"""
Pattern Extraction Strategy Tests
=================================

Each layout is tested on its own; the first matching layout wins.
"""

import json
from decimal import Decimal

import pytest

from catalog_advisor.schemas.extraction import ExtractionReport
from catalog_advisor.schemas.products import DESCRIPTION_MAX_LENGTH
from catalog_advisor.services.extraction.pattern_strategy import PatternExtractionStrategy


@pytest.fixture
def strategy() -> PatternExtractionStrategy:
    return PatternExtractionStrategy()


class TestDelimitedLines:
    @pytest.mark.asyncio
    async def test_single_line_with_description(self, strategy):
        candidates = await strategy.try_extract(
            "Running Shoe - footwear - $79.99 - Lightweight trainer"
        )

        assert candidates is not None
        assert len(candidates) == 1
        candidate = candidates[0]
        assert candidate.title == "Running Shoe"
        assert candidate.category == "footwear"
        assert candidate.price == Decimal("79.99")
        assert candidate.description == "Lightweight trainer"
        assert candidate.source_strategy == "pattern"

    @pytest.mark.asyncio
    async def test_multiple_lines_and_delimiters(self, strategy, sample_catalog_text):
        candidates = await strategy.try_extract(
            sample_catalog_text + "Coffee Mug | home | $8\n"
        )

        assert [c.title for c in candidates] == [
            "Running Shoe",
            "Trail Boot",
            "Desk Lamp",
            "Coffee Mug",
        ]
        assert candidates[2].description == ""
        assert candidates[3].price == Decimal("8")

    @pytest.mark.asyncio
    async def test_markdown_table_rows(self, strategy):
        text = (
            "| Title | Category | Price | Description |\n"
            "|---|---|---|---|\n"
            "| Running Shoe | footwear | $79.99 | Light |\n"
            "|Desk Lamp|home|$34.50||\n"
        )

        candidates = await strategy.try_extract(text)

        assert [(c.title, c.category, c.description) for c in candidates] == [
            ("Running Shoe", "footwear", "Light"),
            ("Desk Lamp", "home", ""),
        ]
        assert candidates[1].price == Decimal("34.50")

    @pytest.mark.asyncio
    async def test_thousands_separator(self, strategy):
        candidates = await strategy.try_extract("Gaming Laptop – electronics – $1,299.00")

        assert candidates[0].price == Decimal("1299.00")


class TestKeyBlocks:
    @pytest.mark.asyncio
    async def test_labeled_blocks(self, strategy):
        text = (
            "Title: Trail Runner\n"
            "Category: footwear\n"
            "Price: $120.00\n"
            "Description: Grippy outsole\n"
            "\n"
            "Name: Yoga Mat\n"
            "Price: 25.50\n"
        )

        candidates = await strategy.try_extract(text)

        assert len(candidates) == 2
        assert candidates[0].title == "Trail Runner"
        assert candidates[0].category == "footwear"
        assert candidates[0].description == "Grippy outsole"
        assert candidates[1].title == "Yoga Mat"
        assert candidates[1].category == "general"
        assert candidates[1].price == Decimal("25.50")


class TestCsvLines:
    @pytest.mark.asyncio
    async def test_header_is_skipped_and_quotes_are_honored(self, strategy):
        text = (
            "title,category,price,description\n"
            "Running Shoe,footwear,79.99,Lightweight trainer\n"
            '"Trail Boot, Waterproof",footwear,129.00,"Leather, lined"\n'
        )

        candidates = await strategy.try_extract(text)

        assert len(candidates) == 2
        assert candidates[1].title == "Trail Boot, Waterproof"
        assert candidates[1].description == "Leather, lined"


class TestJsonFragments:
    @pytest.mark.asyncio
    async def test_objects_in_text(self, strategy):
        text = (
            "Featured items:\n"
            '{"title": "Desk Lamp", "price": 34.5, "category": "home"}\n'
            '{"name": "Coffee Mug", "price": "$8"}\n'
        )

        candidates = await strategy.try_extract(text)

        assert [c.title for c in candidates] == ["Desk Lamp", "Coffee Mug"]
        assert candidates[0].price == Decimal("34.5")
        assert candidates[1].price == Decimal("8")

    @pytest.mark.asyncio
    async def test_negative_price_is_dropped_and_counted(self, strategy):
        report = ExtractionReport()
        text = (
            '{"title": "Broken", "price": -5}\n'
            '{"title": "Working", "price": 5}\n'
        )

        candidates = await strategy.try_extract(text, report)

        assert [c.title for c in candidates] == ["Working"]
        assert report.dropped_invalid == 1

    @pytest.mark.asyncio
    async def test_long_description_is_clipped(self, strategy):
        report = ExtractionReport()
        text = json.dumps({"title": "Desk Lamp", "price": 34.5, "description": "y" * 2500})

        candidates = await strategy.try_extract(text, report)

        assert len(candidates[0].description) == DESCRIPTION_MAX_LENGTH
        assert report.dropped_invalid == 0


class TestNoMatch:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   \n  ", "Just some prose about shoes."])
    async def test_returns_none(self, strategy, text):
        assert await strategy.try_extract(text) is None
