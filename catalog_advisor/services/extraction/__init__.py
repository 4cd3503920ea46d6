"""
Product Extraction
==================

Layered strategies that turn raw catalog text into candidate products.
"""

from catalog_advisor.services.extraction.base import ExtractionStrategy
from catalog_advisor.services.extraction.chain import ExtractorChain, extract_products
from catalog_advisor.services.extraction.heuristic_strategy import (
    HeuristicExtractionStrategy,
    infer_category,
)
from catalog_advisor.services.extraction.llm_strategy import LLMExtractionStrategy
from catalog_advisor.services.extraction.pattern_strategy import PatternExtractionStrategy

__all__ = [
    "ExtractionStrategy",
    "ExtractorChain",
    "HeuristicExtractionStrategy",
    "LLMExtractionStrategy",
    "PatternExtractionStrategy",
    "extract_products",
    "infer_category",
]
