"""
Extraction Schemas
==================

Aggregate result of running the extraction chain over one document.
"""

from pydantic import BaseModel, Field

from catalog_advisor.schemas.products import CandidateProduct


class ExtractionReport(BaseModel):
    """
    Result of the extraction chain.

    Attributes:
        candidates: Products from the first strategy that produced any
        strategy: Name of that strategy, None when nothing was found
        strategies_tried: Strategy names in the order they ran
        dropped_invalid: Records discarded for missing title or bad price
        notices: User-facing remarks (e.g. LLM billing exhausted)
    """

    candidates: list[CandidateProduct] = Field(default_factory=list)
    strategy: str | None = None
    strategies_tried: list[str] = Field(default_factory=list)
    dropped_invalid: int = Field(default=0, ge=0)
    notices: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when no strategy found any product."""
        return not self.candidates
