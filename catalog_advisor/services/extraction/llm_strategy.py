"""
LLM Extraction Strategy
=======================

Strategy B: asks the generative service to turn catalog text into a
JSON array of products.

Only the first ``max_chars`` characters of the document are sent and at
most ``max_products`` records are kept. Any service failure (unavailable,
out of credits, unparseable answer) makes the strategy return None so
the chain falls through to the heuristic strategy.
"""

import json
import re
from typing import Any

from catalog_advisor.schemas.extraction import ExtractionReport
from catalog_advisor.schemas.products import CandidateProduct
from catalog_advisor.services.extraction.base import ExtractionStrategy
from catalog_advisor.services.llm.client import ChatCompletionClient
from catalog_advisor.services.llm.prompts import get_extraction_messages
from catalog_advisor.utils.errors import (
    ExternalServiceBillingExhausted,
    ExternalServiceError,
    MalformedExternalResponse,
)
from catalog_advisor.utils.logger import get_logger
from catalog_advisor.utils.price_parser import extract_price

logger = get_logger(__name__)

_CODE_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


class LLMExtractionStrategy(ExtractionStrategy):
    """
    Extract products with a chat completions model.

    Attributes:
        client: Generative client, None disables the strategy
        max_chars: Document prefix length sent to the model
        max_products: Maximum records kept from one answer
    """

    name = "llm"

    def __init__(
        self,
        client: ChatCompletionClient | None,
        max_chars: int = 8000,
        max_products: int = 50,
    ) -> None:
        self.client = client
        self.max_chars = max_chars
        self.max_products = max_products

    async def try_extract(
        self,
        text: str,
        report: ExtractionReport | None = None,
    ) -> list[CandidateProduct] | None:
        if not text or not text.strip():
            return None

        if self.client is None or not self.client.is_configured:
            logger.debug("llm_strategy.skipped", reason="client not configured")
            return None

        excerpt = text[: self.max_chars]
        messages = get_extraction_messages(excerpt, max_products=self.max_products)

        try:
            response = await self.client.complete(messages, max_tokens=2048, temperature=0.1)
            records = self.parse_response(response.content)
        except ExternalServiceBillingExhausted as e:
            logger.warning("llm_strategy.billing_exhausted", error=e.message)
            if report is not None:
                notice = "LLM unavailable (billing); products were extracted with local rules."
                if e.remediation:
                    notice = f"{notice} {e.remediation}"
                report.notices.append(notice)
            return None
        except ExternalServiceError as e:
            logger.warning(
                "llm_strategy.failed",
                error_type=type(e).__name__,
                error=e.message,
            )
            return None

        candidates: list[CandidateProduct] = []
        for record in records[: self.max_products]:
            candidate = self._record_to_candidate(record, report)
            if candidate:
                candidates.append(candidate)

        logger.info(
            "llm_strategy.extracted",
            records=len(records),
            candidates=len(candidates),
            excerpt_chars=len(excerpt),
        )
        return candidates or None

    def parse_response(self, content: str) -> list[Any]:
        """
        Parse a model answer into a list of raw product records.

        Accepts a bare JSON array or a ``{"products": [...]}`` wrapper,
        optionally inside code fences or surrounded by prose.

        Raises:
            MalformedExternalResponse: If no JSON array can be recovered
        """
        text = self._strip_code_fences(content)

        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            data = self._recover_json(text)

        if isinstance(data, dict) and isinstance(data.get("products"), list):
            return data["products"]
        if isinstance(data, list):
            return data

        raise MalformedExternalResponse(
            "Model answer is not a product list",
            details={"preview": content[:200]},
        )

    @staticmethod
    def _strip_code_fences(text: str) -> str:
        fenced = _CODE_FENCE.search(text)
        if fenced:
            return fenced.group(1).strip()
        return text.strip()

    @staticmethod
    def _recover_json(text: str) -> Any:
        """Cut the outermost array (or object) out of surrounding prose."""
        for opener, closer in (("[", "]"), ("{", "}")):
            start = text.find(opener)
            end = text.rfind(closer)
            if start != -1 and end > start:
                try:
                    return json.loads(text[start : end + 1])
                except json.JSONDecodeError:
                    continue

        raise MalformedExternalResponse(
            "Model answer is not valid JSON",
            details={"preview": text[:200]},
        )

    def _record_to_candidate(
        self,
        record: Any,
        report: ExtractionReport | None,
    ) -> CandidateProduct | None:
        if not isinstance(record, dict):
            if report is not None:
                report.dropped_invalid += 1
            return None

        title = record.get("title") or record.get("name")
        price = extract_price(record.get("price"))

        if not title or not price.was_parsed or price.amount is None or price.amount <= 0:
            if report is not None:
                report.dropped_invalid += 1
            return None

        tags = record.get("tags") or []
        if isinstance(tags, str):
            tags = tags.split(",")

        return self._make_candidate(
            report,
            title=str(title),
            category=str(record.get("category") or "general"),
            price=price.amount,
            description=str(record.get("description") or ""),
            tags=[str(t) for t in tags] if isinstance(tags, list) else [],
        )
