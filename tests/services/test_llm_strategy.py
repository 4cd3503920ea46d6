"""
LLM Extraction Strategy Tests
=============================

The generative client is mocked; only answer parsing and failure
handling are under test.
"""

import json
from decimal import Decimal

import pytest

from catalog_advisor.schemas.extraction import ExtractionReport
from catalog_advisor.schemas.products import DESCRIPTION_MAX_LENGTH
from catalog_advisor.services.extraction.llm_strategy import LLMExtractionStrategy
from catalog_advisor.utils.errors import (
    ExternalServiceBillingExhausted,
    ExternalServiceUnavailable,
    MalformedExternalResponse,
)


CATALOG_TEXT = "Running Shoe, great for roads, only 79.99 dollars"


class TestResponseParsing:
    @pytest.mark.asyncio
    async def test_fenced_json_array(self, mock_llm_client, llm_response):
        mock_llm_client.complete.return_value = llm_response(
            "```json\n"
            '[{"title": "Running Shoe", "category": "footwear", "price": 79.99,'
            ' "description": "Road trainer", "tags": ["running", "road"]}]\n'
            "```"
        )
        strategy = LLMExtractionStrategy(mock_llm_client)

        candidates = await strategy.try_extract(CATALOG_TEXT)

        assert len(candidates) == 1
        assert candidates[0].title == "Running Shoe"
        assert candidates[0].price == Decimal("79.99")
        assert candidates[0].tags == ["running", "road"]
        assert candidates[0].source_strategy == "llm"

    @pytest.mark.asyncio
    async def test_products_wrapper_and_string_fields(self, mock_llm_client, llm_response):
        mock_llm_client.complete.return_value = llm_response(
            '{"products": [{"name": "Desk Lamp", "price": "$34.50", "tags": "home, light"}]}'
        )
        strategy = LLMExtractionStrategy(mock_llm_client)

        candidates = await strategy.try_extract(CATALOG_TEXT)

        assert candidates[0].title == "Desk Lamp"
        assert candidates[0].price == Decimal("34.50")
        assert candidates[0].category == "general"
        assert candidates[0].tags == ["home", "light"]

    @pytest.mark.asyncio
    async def test_json_surrounded_by_prose(self, mock_llm_client, llm_response):
        mock_llm_client.complete.return_value = llm_response(
            'Here are the products I found: [{"title": "Trail Boot", "price": 129}] Hope this helps.'
        )
        strategy = LLMExtractionStrategy(mock_llm_client)

        candidates = await strategy.try_extract(CATALOG_TEXT)

        assert [c.title for c in candidates] == ["Trail Boot"]

    @pytest.mark.asyncio
    async def test_invalid_records_are_dropped(self, mock_llm_client, llm_response):
        mock_llm_client.complete.return_value = llm_response(
            '[{"title": "Free Sample", "price": 0},'
            ' {"price": 10},'
            ' "not an object",'
            ' {"title": "Socks", "price": 5}]'
        )
        report = ExtractionReport()
        strategy = LLMExtractionStrategy(mock_llm_client)

        candidates = await strategy.try_extract(CATALOG_TEXT, report)

        assert [c.title for c in candidates] == ["Socks"]
        assert report.dropped_invalid == 3

    @pytest.mark.asyncio
    async def test_long_text_fields_are_clipped(self, mock_llm_client, llm_response):
        record = {"title": "Running Shoe", "price": 79.99, "description": "x" * 2500}
        mock_llm_client.complete.return_value = llm_response(json.dumps([record]))
        report = ExtractionReport()
        strategy = LLMExtractionStrategy(mock_llm_client)

        candidates = await strategy.try_extract(CATALOG_TEXT, report)

        assert [c.title for c in candidates] == ["Running Shoe"]
        assert len(candidates[0].description) == DESCRIPTION_MAX_LENGTH
        assert report.dropped_invalid == 0

    def test_parse_response_rejects_non_list(self, mock_llm_client):
        strategy = LLMExtractionStrategy(mock_llm_client)

        with pytest.raises(MalformedExternalResponse):
            strategy.parse_response('{"answer": "no products"}')

        with pytest.raises(MalformedExternalResponse):
            strategy.parse_response("I could not find any products.")

    @pytest.mark.asyncio
    async def test_record_limit(self, mock_llm_client, llm_response):
        records = ",".join(f'{{"title": "Item {i}", "price": {i + 1}}}' for i in range(5))
        mock_llm_client.complete.return_value = llm_response(f"[{records}]")
        strategy = LLMExtractionStrategy(mock_llm_client, max_products=3)

        candidates = await strategy.try_extract(CATALOG_TEXT)

        assert len(candidates) == 3


class TestFailureHandling:
    @pytest.mark.asyncio
    async def test_billing_exhausted_adds_notice(self, mock_llm_client):
        mock_llm_client.complete.side_effect = ExternalServiceBillingExhausted(
            "Out of credits",
            remediation="Purchase credits.",
        )
        report = ExtractionReport()
        strategy = LLMExtractionStrategy(mock_llm_client)

        assert await strategy.try_extract(CATALOG_TEXT, report) is None
        assert len(report.notices) == 1
        assert "billing" in report.notices[0]
        assert "Purchase credits." in report.notices[0]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            ExternalServiceUnavailable("Request timed out. Please try again."),
            MalformedExternalResponse("Invalid response format from AI service"),
        ],
    )
    async def test_service_errors_fall_through(self, mock_llm_client, error):
        mock_llm_client.complete.side_effect = error
        report = ExtractionReport()
        strategy = LLMExtractionStrategy(mock_llm_client)

        assert await strategy.try_extract(CATALOG_TEXT, report) is None
        assert report.notices == []

    @pytest.mark.asyncio
    async def test_unparseable_answer_falls_through(self, mock_llm_client, llm_response):
        mock_llm_client.complete.return_value = llm_response("Sorry, I can't help with that.")
        strategy = LLMExtractionStrategy(mock_llm_client)

        assert await strategy.try_extract(CATALOG_TEXT) is None

    @pytest.mark.asyncio
    async def test_unconfigured_client_is_not_called(self, mock_llm_client):
        mock_llm_client.is_configured = False
        strategy = LLMExtractionStrategy(mock_llm_client)

        assert await strategy.try_extract(CATALOG_TEXT) is None
        mock_llm_client.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_client(self):
        assert await LLMExtractionStrategy(None).try_extract(CATALOG_TEXT) is None


class TestPrompt:
    @pytest.mark.asyncio
    async def test_document_is_truncated(self, mock_llm_client, llm_response):
        mock_llm_client.complete.return_value = llm_response('[{"title": "A", "price": 1}]')
        strategy = LLMExtractionStrategy(mock_llm_client, max_chars=100)

        await strategy.try_extract("A" * 100 + "SENTINEL")

        messages = mock_llm_client.complete.await_args.args[0]
        prompt = " ".join(m["content"] for m in messages)
        assert "A" * 100 in prompt
        assert "SENTINEL" not in prompt
