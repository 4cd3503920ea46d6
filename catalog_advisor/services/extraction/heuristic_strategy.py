"""
Heuristic Extraction Strategy
=============================

Strategy C: last-resort line scanner.

Every line containing a price-like token (``$12``, ``$12.50``, ``12.50``,
``USD 12``) becomes a product:

- title: the rest of the line, at most 100 characters
- description: the next non-empty line without a price, at most 200 characters
- category: keyword lookup over title and description, "general" otherwise
"""

import re
from typing import Final

from catalog_advisor.schemas.extraction import ExtractionReport
from catalog_advisor.schemas.products import CandidateProduct
from catalog_advisor.services.extraction.base import ExtractionStrategy
from catalog_advisor.utils.logger import get_logger
from catalog_advisor.utils.price_parser import find_price_token

logger = get_logger(__name__)

MAX_TITLE_LENGTH: Final[int] = 100
MAX_DESCRIPTION_LENGTH: Final[int] = 200
DEFAULT_CATEGORY: Final[str] = "general"

# Checked in order; the first category with a matching keyword wins
CATEGORY_KEYWORDS: Final[dict[str, tuple[str, ...]]] = {
    "footwear": ("shoe", "shoes", "sneaker", "sneakers", "boot", "boots", "sandal", "sandals", "trainer", "trainers", "slipper"),
    "clothing": ("shirt", "t-shirt", "jacket", "coat", "dress", "jeans", "pants", "trousers", "hoodie", "sweater", "skirt", "socks"),
    "electronics": ("phone", "smartphone", "laptop", "tablet", "headphones", "earbuds", "camera", "charger", "speaker", "monitor", "keyboard", "mouse", "tv"),
    "home": ("chair", "table", "sofa", "lamp", "bed", "pillow", "blanket", "mug", "kettle", "cookware", "shelf"),
    "beauty": ("cream", "lotion", "shampoo", "conditioner", "perfume", "lipstick", "serum", "soap"),
    "sports": ("ball", "racket", "yoga", "dumbbell", "bicycle", "bike", "helmet", "treadmill", "fitness"),
    "books": ("book", "novel", "paperback", "hardcover", "edition"),
    "toys": ("toy", "puzzle", "doll", "lego", "board game"),
    "food": ("coffee", "tea", "chocolate", "snack", "juice", "cereal"),
}

_KEYWORD_PATTERNS: Final[dict[str, re.Pattern[str]]] = {
    category: re.compile(
        r"\b(?:" + "|".join(re.escape(k) for k in keywords) + r")\b",
        re.IGNORECASE,
    )
    for category, keywords in CATEGORY_KEYWORDS.items()
}

_TITLE_TRIM = " \t-–|:;,•*·"


def infer_category(text: str) -> str:
    """
    Infer a category from free text by keyword lookup.

    Examples:
        >>> infer_category("Trail running shoes")
        'footwear'
        >>> infer_category("Gift card")
        'general'
    """
    for category, pattern in _KEYWORD_PATTERNS.items():
        if pattern.search(text):
            return category
    return DEFAULT_CATEGORY


class HeuristicExtractionStrategy(ExtractionStrategy):
    """Line-by-line scan for price tokens."""

    name = "heuristic"

    async def try_extract(
        self,
        text: str,
        report: ExtractionReport | None = None,
    ) -> list[CandidateProduct] | None:
        if not text or not text.strip():
            return None

        lines = [line.strip() for line in text.splitlines()]
        candidates: list[CandidateProduct] = []

        for index, line in enumerate(lines):
            found = find_price_token(line)
            if found is None:
                continue

            match, amount = found
            # "-12.50" is a negative amount, not a dash before the price
            if match.start() > 0 and line[match.start() - 1] == "-":
                amount = -amount

            title = f"{line[: match.start()]} {line[match.end():]}"
            title = " ".join(title.split()).strip(_TITLE_TRIM)[:MAX_TITLE_LENGTH].strip()
            description = self._next_description(lines, index)

            candidate = self._make_candidate(
                report,
                title=title,
                category=infer_category(f"{title} {description}"),
                price=amount,
                description=description,
            )
            if candidate:
                candidates.append(candidate)

        if candidates:
            logger.info("heuristic_strategy.extracted", candidates=len(candidates))
        return candidates or None

    @staticmethod
    def _next_description(lines: list[str], index: int) -> str:
        """Return the next non-empty line unless it is itself a product line."""
        for line in lines[index + 1 :]:
            if not line:
                continue
            if find_price_token(line) is not None:
                return ""
            return line[:MAX_DESCRIPTION_LENGTH]
        return ""
