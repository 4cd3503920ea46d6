"""
Extraction Strategy Abstract Base Class
=======================================

Defines the interface shared by the product extraction strategies.
The extractor chain holds an ordered list of strategies and stops at
the first one that returns at least one candidate.

Implementations:
    - PatternExtractionStrategy: regex patterns for well-formed catalogs
    - LLMExtractionStrategy: generative model extraction
    - HeuristicExtractionStrategy: price-token line scanning
"""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from catalog_advisor.schemas.extraction import ExtractionReport
from catalog_advisor.schemas.products import (
    CATEGORY_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    CandidateProduct,
)
from catalog_advisor.utils.logger import get_logger

logger = get_logger(__name__)

_TEXT_LIMITS = {
    "title": TITLE_MAX_LENGTH,
    "category": CATEGORY_MAX_LENGTH,
    "description": DESCRIPTION_MAX_LENGTH,
}


class ExtractionStrategy(ABC):
    """
    Abstract base class for product extraction strategies.

    Contract:
        - Input: raw document text
        - Output: list of CandidateProduct, or None when the strategy
          found nothing or could not run
        - Errors: never raised for bad input; invalid records are
          counted in ``report.dropped_invalid`` and skipped
    """

    #: Short identifier stored in ``CandidateProduct.source_strategy``
    name: str = "base"

    @abstractmethod
    async def try_extract(
        self,
        text: str,
        report: ExtractionReport | None = None,
    ) -> list[CandidateProduct] | None:
        """
        Extract candidate products from text.

        Args:
            text: Raw document text
            report: Optional report to record dropped records and notices

        Returns:
            Non-empty list of candidates, or None
        """
        ...

    def _make_candidate(
        self,
        report: ExtractionReport | None,
        **fields: Any,
    ) -> CandidateProduct | None:
        """
        Build a candidate, counting it as dropped if validation fails.

        Over-long text fields are clipped to the schema limits first, so
        only a missing title or a bad price can drop a record.
        """
        for key, limit in _TEXT_LIMITS.items():
            value = fields.get(key)
            if isinstance(value, str):
                fields[key] = " ".join(value.split())[:limit]
        try:
            return CandidateProduct(source_strategy=self.name, **fields)
        except PydanticValidationError as e:
            if report is not None:
                report.dropped_invalid += 1
            logger.debug(
                "extraction.candidate_dropped",
                strategy=self.name,
                title=fields.get("title"),
                errors=e.error_count(),
            )
            return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
