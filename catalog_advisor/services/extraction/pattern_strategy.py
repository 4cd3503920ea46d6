"""
Pattern Extraction Strategy
===========================

Regex-based extraction for catalogs that follow a recognizable layout.

Patterns are mutually exclusive and evaluated in order; the first that
yields at least one valid candidate wins:

1. Delimited line:   ``Running Shoe - footwear - $79.99 - Lightweight trainer``
2. Key-labeled block::

       Title: Running Shoe
       Category: footwear
       Price: $79.99
       Description: Lightweight trainer

3. CSV-like line:    ``Running Shoe,footwear,79.99,"Lightweight, breathable"``
4. JSON fragments:   ``{"title": "Running Shoe", "price": 79.99}``
"""

import csv
import json
import re
from collections.abc import Callable
from typing import Any, Final

from catalog_advisor.schemas.extraction import ExtractionReport
from catalog_advisor.schemas.products import CandidateProduct
from catalog_advisor.services.extraction.base import ExtractionStrategy
from catalog_advisor.utils.logger import get_logger
from catalog_advisor.utils.price_parser import extract_price

logger = get_logger(__name__)

_PRICE: Final[str] = r"(?:[$€£¥₹][ \t]?)?\d[\d,]*(?:\.\d{1,2})?"
# Dashes need surrounding spaces (hyphenated titles); table pipes do not
_DELIM: Final[str] = r"(?:[ \t]+[-–][ \t]+|[ \t]*\|[ \t]*)"

# Markdown table rows keep their outer pipes out of the title and description
DELIMITED_LINE_PATTERN: Final[re.Pattern[str]] = re.compile(
    rf"^[ \t•*·|]*(?P<title>[^\n|]+?){_DELIM}"
    rf"(?P<category>[^\n\-–|]+?){_DELIM}"
    rf"(?P<price>{_PRICE})(?=[ \t|]|$)"
    rf"(?:{_DELIM}(?P<description>[^\n]*?[^\n| \t][^\n]*?))?[ \t|]*$",
    re.MULTILINE,
)

KEY_BLOCK_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^[ \t]*(?:title|name|product)[ \t]*:[ \t]*(?P<title>[^\n]+?)[ \t]*\n"
    r"(?:[ \t]*category[ \t]*:[ \t]*(?P<category>[^\n]*?)[ \t]*\n)?"
    r"[ \t]*price[ \t]*:[ \t]*(?P<price>[^\n]+?)[ \t]*$"
    r"(?:\n[ \t]*description[ \t]*:[ \t]*(?P<description>[^\n]*?)[ \t]*$)?",
    re.IGNORECASE | re.MULTILINE,
)

CSV_PRICE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"[$€£¥₹]?[ \t]?\d+(?:[.,]\d+)*"
)

JSON_OBJECT_PATTERN: Final[re.Pattern[str]] = re.compile(r"\{[^{}]*\}")


class PatternExtractionStrategy(ExtractionStrategy):
    """
    Strategy A: deterministic regex patterns.

    Runs first in the chain. Documents that follow none of the layouts
    fall through to the next strategy.
    """

    name = "pattern"

    def __init__(self) -> None:
        self._patterns: list[tuple[str, Callable[[str, ExtractionReport | None], list[CandidateProduct]]]] = [
            ("delimited_line", self._match_delimited_lines),
            ("key_block", self._match_key_blocks),
            ("csv_line", self._match_csv_lines),
            ("json_fragment", self._match_json_fragments),
        ]

    async def try_extract(
        self,
        text: str,
        report: ExtractionReport | None = None,
    ) -> list[CandidateProduct] | None:
        if not text or not text.strip():
            return None

        normalized = text.replace("\r\n", "\n").replace("\r", "\n")

        for pattern_name, matcher in self._patterns:
            candidates = matcher(normalized, report)
            if candidates:
                logger.info(
                    "pattern_strategy.matched",
                    pattern=pattern_name,
                    candidates=len(candidates),
                )
                return candidates

        logger.debug("pattern_strategy.no_match")
        return None

    def _match_delimited_lines(
        self, text: str, report: ExtractionReport | None
    ) -> list[CandidateProduct]:
        candidates = []
        for match in DELIMITED_LINE_PATTERN.finditer(text):
            candidate = self._from_fields(
                report,
                title=match.group("title"),
                category=match.group("category"),
                price=match.group("price"),
                description=match.group("description"),
            )
            if candidate:
                candidates.append(candidate)
        return candidates

    def _match_key_blocks(
        self, text: str, report: ExtractionReport | None
    ) -> list[CandidateProduct]:
        candidates = []
        for match in KEY_BLOCK_PATTERN.finditer(text):
            candidate = self._from_fields(
                report,
                title=match.group("title"),
                category=match.group("category"),
                price=match.group("price"),
                description=match.group("description"),
            )
            if candidate:
                candidates.append(candidate)
        return candidates

    def _match_csv_lines(
        self, text: str, report: ExtractionReport | None
    ) -> list[CandidateProduct]:
        candidates = []
        for line in text.split("\n"):
            if line.count(",") < 2:
                continue

            try:
                fields = next(csv.reader([line], skipinitialspace=True))
            except (csv.Error, StopIteration):
                continue

            if len(fields) < 3:
                continue

            title, category, price = (f.strip() for f in fields[:3])
            # Header rows never match: the price column must be numeric
            if not CSV_PRICE_PATTERN.fullmatch(price):
                continue

            candidate = self._from_fields(
                report,
                title=title,
                category=category,
                price=price,
                description=", ".join(f.strip() for f in fields[3:] if f.strip()),
            )
            if candidate:
                candidates.append(candidate)
        return candidates

    def _match_json_fragments(
        self, text: str, report: ExtractionReport | None
    ) -> list[CandidateProduct]:
        candidates = []
        for match in JSON_OBJECT_PATTERN.finditer(text):
            try:
                data = json.loads(match.group(0))
            except json.JSONDecodeError:
                continue

            if not isinstance(data, dict):
                continue

            title = data.get("title") or data.get("name")
            if title is None or "price" not in data:
                continue

            tags = data.get("tags")
            candidate = self._from_fields(
                report,
                title=str(title),
                category=data.get("category"),
                price=data.get("price"),
                description=data.get("description"),
                tags=[str(t) for t in tags] if isinstance(tags, list) else [],
            )
            if candidate:
                candidates.append(candidate)
        return candidates

    def _from_fields(
        self,
        report: ExtractionReport | None,
        title: str | None,
        category: Any,
        price: Any,
        description: Any,
        tags: list[str] | None = None,
    ) -> CandidateProduct | None:
        parsed = extract_price(price)
        return self._make_candidate(
            report,
            title=(title or "").strip(),
            category=str(category).strip() if category else "general",
            price=parsed.amount if parsed.was_parsed else None,
            description=str(description).strip() if description else "",
            tags=tags or [],
        )
