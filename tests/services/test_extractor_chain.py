"""Tests for the extraction strategy chain."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from catalog_advisor.schemas.products import CandidateProduct
from catalog_advisor.services.extraction.base import ExtractionStrategy
from catalog_advisor.services.extraction.chain import ExtractorChain, extract_products
from catalog_advisor.utils.errors import ExternalServiceBillingExhausted


def _stub_strategy(name: str, result: list[CandidateProduct] | None) -> MagicMock:
    strategy = MagicMock(spec=ExtractionStrategy)
    strategy.name = name
    strategy.try_extract = AsyncMock(return_value=result)
    return strategy


def _candidate(title: str, strategy: str) -> CandidateProduct:
    return CandidateProduct(title=title, price=Decimal("10"), source_strategy=strategy)


class TestShortCircuit:
    @pytest.mark.asyncio
    async def test_first_success_stops_the_chain(self):
        first = _stub_strategy("a", [_candidate("Widget", "a")])
        second = _stub_strategy("b", [_candidate("Gadget", "b")])
        third = _stub_strategy("c", [_candidate("Gizmo", "c")])

        report = await ExtractorChain([first, second, third]).run("some text")

        assert report.strategy == "a"
        assert report.strategies_tried == ["a"]
        assert [c.title for c in report.candidates] == ["Widget"]
        second.try_extract.assert_not_awaited()
        third.try_extract.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_falls_through_empty_results(self):
        first = _stub_strategy("a", None)
        second = _stub_strategy("b", [])
        third = _stub_strategy("c", [_candidate("Gizmo", "c")])

        report = await ExtractorChain([first, second, third]).run("some text")

        assert report.strategy == "c"
        assert report.strategies_tried == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_nothing_found(self):
        chain = ExtractorChain([_stub_strategy("a", None), _stub_strategy("b", None)])

        report = await chain.run("some text")

        assert report.is_empty
        assert report.strategy is None
        assert await chain.extract("some text") == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "  \n\t "])
    async def test_empty_input_runs_nothing(self, text):
        first = _stub_strategy("a", [_candidate("Widget", "a")])

        report = await ExtractorChain([first]).run(text)

        assert report.is_empty
        assert report.strategies_tried == []
        first.try_extract.assert_not_awaited()

    def test_requires_strategies(self):
        with pytest.raises(ValueError):
            ExtractorChain([])


class TestDefaultChain:
    @pytest.mark.asyncio
    async def test_pattern_wins_without_calling_llm(self, settings, mock_llm_client):
        chain = ExtractorChain.default(mock_llm_client, settings)

        report = await chain.run("Running Shoe - footwear - $79.99 - Lightweight trainer")

        assert report.strategy == "pattern"
        assert report.candidates[0].title == "Running Shoe"
        mock_llm_client.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_llm_billing_falls_back_to_heuristic(self, settings, mock_llm_client):
        mock_llm_client.complete.side_effect = ExternalServiceBillingExhausted(
            "Out of credits",
            remediation="Purchase credits.",
        )
        chain = ExtractorChain.default(mock_llm_client, settings)

        report = await chain.run("Weekend deals\nCanvas Sneakers $45.00\nBreathable upper\n")

        assert report.strategy == "heuristic"
        assert report.strategies_tried == ["pattern", "llm", "heuristic"]
        assert report.candidates[0].title == "Canvas Sneakers"
        assert report.notices

    @pytest.mark.asyncio
    async def test_extract_products_without_client(self):
        candidates = await extract_products("Running Shoe - footwear - $79.99 - Lightweight trainer")

        assert len(candidates) == 1
        assert candidates[0].price == Decimal("79.99")
        assert candidates[0].source_strategy == "pattern"
