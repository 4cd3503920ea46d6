"""
Deduplication Service
=====================

Turns extracted candidates into catalog-ready products:

- drops fuzzy duplicates by title (first occurrence wins)
- derives tags from description and category
- assigns a deterministic synthetic SKU

Similarity is ``1 - levenshtein(a, b) / max(len(a), len(b))`` over
normalized titles; two titles are duplicates when it exceeds the
threshold (0.85 by default). The comparison is pairwise against every
accepted title, O(n²·L), which is fine for tens to low hundreds of
products per upload.
"""

import hashlib
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Final

from rapidfuzz.distance import Levenshtein

from catalog_advisor.schemas.products import CandidateProduct, NormalizedProduct
from catalog_advisor.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SIMILARITY_THRESHOLD: Final[float] = 0.85
MAX_TAGS: Final[int] = 8
MIN_TAG_LENGTH: Final[int] = 3

STOP_WORDS: Final[frozenset[str]] = frozenset(
    {
        "and", "the", "for", "with", "from", "this", "that", "your", "you",
        "are", "our", "its", "has", "have", "was", "were", "will", "can",
        "all", "any", "but", "not", "into", "onto", "over", "under", "per",
        "each", "more", "most", "very", "also", "than", "then", "them",
        "they", "their", "these", "those", "which", "while", "about",
        "general",
    }
)

_TOKEN = re.compile(r"[a-z0-9]+")


def normalize_title(title: str) -> str:
    """Lowercase, trim and collapse whitespace."""
    return " ".join(title.lower().split())


def title_similarity(a: str, b: str) -> float:
    """
    Normalized Levenshtein similarity in [0, 1].

    Examples:
        >>> title_similarity("running shoe", "running shoes")
        0.923...
        >>> title_similarity("", "")
        1.0
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(a, b) / longest


def derive_tags(
    description: str,
    category: str,
    existing: Iterable[str] = (),
    max_tags: int = MAX_TAGS,
) -> list[str]:
    """
    Merge existing tags with tokens from description and category.

    Existing tags come first; derived tokens are lowercase alphanumeric,
    at least 3 characters and not stop-words. The merged list is
    deduplicated in order and capped at ``max_tags``.
    """
    merged: dict[str, None] = {}
    for tag in existing:
        cleaned = tag.strip().lower()
        if cleaned:
            merged.setdefault(cleaned, None)

    for token in _TOKEN.findall(f"{description} {category}".lower()):
        if len(token) < MIN_TAG_LENGTH or token in STOP_WORDS:
            continue
        merged.setdefault(token, None)

    return list(merged)[:max_tags]


def generate_sku(category: str, title: str) -> str:
    """
    Build a synthetic SKU ``<CAT3>-<HASH8>``.

    CAT3 is the first three alphanumeric characters of the category
    upper-cased ("GEN" if there are none); HASH8 is the first eight hex
    digits of SHA-1 over the normalized title, upper-cased.

    Example:
        >>> generate_sku("footwear", "Running Shoe")
        'FOO-...'
    """
    prefix = re.sub(r"[^A-Za-z0-9]", "", category)[:3].upper() or "GEN"
    digest = hashlib.sha1(normalize_title(title).encode("utf-8")).hexdigest()[:8].upper()
    return f"{prefix}-{digest}"


@dataclass
class DuplicateMatch:
    """A dropped title and the accepted title it collided with."""

    title: str
    matched_title: str
    similarity: float


@dataclass
class DeduplicationStats:
    """Statistics from one deduplication run."""

    total_candidates: int = 0
    unique_products: int = 0
    duplicates_removed: int = 0
    seeded_titles: int = 0
    duplicates: list[DuplicateMatch] = field(default_factory=list)

    @property
    def dedup_rate(self) -> float:
        """Percentage of candidates that were duplicates."""
        if self.total_candidates == 0:
            return 0.0
        return (self.duplicates_removed / self.total_candidates) * 100


class DeduplicationService:
    """
    Fuzzy title deduplication with tag and SKU derivation.

    Example:
        service = DeduplicationService(similarity_threshold=0.85)
        products, stats = service.deduplicate(candidates, existing_titles=titles)
        print(f"Removed {stats.duplicates_removed} duplicates")
    """

    def __init__(
        self,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        max_tags: int = MAX_TAGS,
    ) -> None:
        """
        Initialize DeduplicationService.

        Args:
            similarity_threshold: Titles scoring strictly above this are duplicates
            max_tags: Cap on the merged tag list
        """
        if not 0.0 <= similarity_threshold <= 1.0:
            raise ValueError("similarity_threshold must be between 0 and 1")
        self.similarity_threshold = similarity_threshold
        self.max_tags = max_tags

    def deduplicate(
        self,
        candidates: Sequence[CandidateProduct | NormalizedProduct],
        existing_titles: Iterable[str] = (),
    ) -> tuple[list[NormalizedProduct], DeduplicationStats]:
        """
        Remove fuzzy duplicates and normalize the survivors.

        Args:
            candidates: Products in extraction order
            existing_titles: Titles already in the catalog; candidates
                matching them are dropped as duplicates

        Returns:
            Tuple of (normalized unique products, stats)
        """
        accepted: list[str] = []
        for title in existing_titles:
            normalized = normalize_title(title)
            if normalized not in accepted:
                accepted.append(normalized)

        stats = DeduplicationStats(
            total_candidates=len(candidates),
            seeded_titles=len(accepted),
        )
        unique: list[NormalizedProduct] = []

        for candidate in candidates:
            key = normalize_title(candidate.title)
            match = self.find_match(key, accepted)

            if match is not None:
                matched_title, similarity = match
                stats.duplicates_removed += 1
                stats.duplicates.append(
                    DuplicateMatch(
                        title=candidate.title,
                        matched_title=matched_title,
                        similarity=round(similarity, 4),
                    )
                )
                logger.debug(
                    "dedup.duplicate",
                    title=candidate.title,
                    matched_title=matched_title,
                    similarity=round(similarity, 4),
                )
                continue

            accepted.append(key)
            unique.append(self._normalize(candidate))

        stats.unique_products = len(unique)

        logger.info(
            "dedup.completed",
            total=stats.total_candidates,
            unique=stats.unique_products,
            duplicates_removed=stats.duplicates_removed,
            seeded_titles=stats.seeded_titles,
        )
        return unique, stats

    def find_match(self, key: str, accepted: Sequence[str]) -> tuple[str, float] | None:
        """
        Find the first accepted title that ``key`` duplicates.

        Returns:
            ``(accepted_title, similarity)`` or None
        """
        for title in accepted:
            if title == key:
                return title, 1.0
            similarity = title_similarity(key, title)
            if similarity > self.similarity_threshold:
                return title, similarity
        return None

    def _normalize(self, candidate: CandidateProduct | NormalizedProduct) -> NormalizedProduct:
        if isinstance(candidate, NormalizedProduct):
            metadata = dict(candidate.metadata)
            stock = candidate.stock
        else:
            metadata = {"source_strategy": candidate.source_strategy}
            stock = 0

        return NormalizedProduct(
            title=candidate.title,
            description=candidate.description,
            category=candidate.category,
            price=candidate.price,
            tags=derive_tags(
                candidate.description,
                candidate.category,
                existing=candidate.tags,
                max_tags=self.max_tags,
            ),
            stock=stock,
            sku=generate_sku(candidate.category, candidate.title),
            metadata=metadata,
        )


def deduplicate(
    candidates: Sequence[CandidateProduct | NormalizedProduct],
    existing_titles: Iterable[str] = (),
) -> list[NormalizedProduct]:
    """Deduplicate with default settings and return only the products."""
    products, _ = DeduplicationService().deduplicate(candidates, existing_titles)
    return products
