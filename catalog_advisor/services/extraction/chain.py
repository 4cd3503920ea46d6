"""
Extractor Chain
===============

Runs the extraction strategies in fixed priority order and stops at the
first one that produces at least one candidate:

    pattern → llm → heuristic

An empty result is a valid outcome: ``extract`` returns ``[]`` and the
report has ``strategy=None``.

Example:
    chain = ExtractorChain.default(client)
    report = await chain.run(document_text)
    if report.is_empty:
        ...
"""

import time

from catalog_advisor.config.settings import Settings, get_settings
from catalog_advisor.schemas.extraction import ExtractionReport
from catalog_advisor.schemas.products import CandidateProduct
from catalog_advisor.services.extraction.base import ExtractionStrategy
from catalog_advisor.services.extraction.heuristic_strategy import HeuristicExtractionStrategy
from catalog_advisor.services.extraction.llm_strategy import LLMExtractionStrategy
from catalog_advisor.services.extraction.pattern_strategy import PatternExtractionStrategy
from catalog_advisor.services.llm.client import ChatCompletionClient
from catalog_advisor.utils.logger import get_logger

logger = get_logger(__name__)


class ExtractorChain:
    """Ordered list of extraction strategies with short-circuit semantics."""

    def __init__(self, strategies: list[ExtractionStrategy]) -> None:
        if not strategies:
            raise ValueError("ExtractorChain needs at least one strategy")
        self.strategies = list(strategies)

    @classmethod
    def default(
        cls,
        client: ChatCompletionClient | None = None,
        settings: Settings | None = None,
    ) -> "ExtractorChain":
        """Build the standard pattern → llm → heuristic chain."""
        settings = settings or get_settings()
        return cls(
            [
                PatternExtractionStrategy(),
                LLMExtractionStrategy(
                    client,
                    max_chars=settings.llm_max_context_chars,
                    max_products=settings.llm_max_products,
                ),
                HeuristicExtractionStrategy(),
            ]
        )

    async def run(self, text: str) -> ExtractionReport:
        """
        Extract products and report how they were found.

        Args:
            text: Raw document text

        Returns:
            ExtractionReport with the winning strategy's candidates
        """
        report = ExtractionReport()

        if not text or not text.strip():
            logger.info("extraction.empty_input")
            return report

        start = time.perf_counter()

        for strategy in self.strategies:
            report.strategies_tried.append(strategy.name)
            candidates = await strategy.try_extract(text, report)
            if candidates:
                report.candidates = candidates
                report.strategy = strategy.name
                break

        logger.info(
            "extraction.completed",
            strategy=report.strategy,
            strategies_tried=report.strategies_tried,
            candidates=len(report.candidates),
            dropped_invalid=report.dropped_invalid,
            text_length=len(text),
            duration_ms=round((time.perf_counter() - start) * 1000, 1),
        )
        return report

    async def extract(self, text: str) -> list[CandidateProduct]:
        """Extract candidate products, ``[]`` when no strategy finds any."""
        report = await self.run(text)
        return report.candidates


async def extract_products(
    text: str,
    client: ChatCompletionClient | None = None,
) -> list[CandidateProduct]:
    """Run the default extraction chain over document text."""
    return await ExtractorChain.default(client).extract(text)
