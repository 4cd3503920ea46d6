"""
Question Answering Service
==========================

Answers free-form questions about the uploaded catalog document.

Flow:
    1. Truncate the document to ``max_context_chars`` (a marker is
       appended when content was cut)
    2. Ask the generative service
    3. On billing exhaustion, run a local snippet search and attach the
       result to the raised error so the API can still show something

When no generative service is configured at all, the snippet search is
returned directly as a degraded answer.
"""

import re
from dataclasses import dataclass, field
from typing import Final

from catalog_advisor.services.llm.client import ChatCompletionClient
from catalog_advisor.services.llm.prompts import get_ask_messages
from catalog_advisor.utils.errors import ExternalServiceBillingExhausted, ValidationError
from catalog_advisor.utils.logger import get_logger

logger = get_logger(__name__)

TRUNCATION_MARKER: Final[str] = "\n[Content truncated...]"
MAX_SNIPPETS: Final[int] = 5
MAX_KEYWORDS: Final[int] = 6

_SENTENCE_BOUNDARY = re.compile(r"(?<=[.?!])\s+")
_NON_WORD = re.compile(r"\W+")


@dataclass
class SnippetSearchResult:
    """Sentences of the document that match a query."""

    snippets: list[str] = field(default_factory=list)
    total_hits: int = 0
    keywords: list[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.snippets)

    def render(self, prefix: str) -> str:
        """Format the snippets as a user-facing message."""
        body = "\n\n".join(self.snippets)
        if self.keywords:
            return (
                f"{prefix} Showing relevant snippets from the uploaded document "
                f"based on keywords ({', '.join(self.keywords)}):\n\n{body}"
            )
        return (
            f"{prefix} Found {self.total_hits} matching snippet(s) "
            f"from the uploaded document:\n\n{body}"
        )


@dataclass
class Answer:
    """Answer to a question about the document."""

    answer: str
    context_length: int
    query_length: int
    degraded: bool = False


def search_snippets(query: str, text: str, limit: int = MAX_SNIPPETS) -> SnippetSearchResult:
    """
    Find sentences containing the whole query, else any of its keywords.

    Args:
        query: User question
        text: Document text
        limit: Maximum snippets returned

    Returns:
        SnippetSearchResult; ``keywords`` is set only for keyword matches
    """
    needle = query.strip().lower()
    sentences = [s.strip() for s in _SENTENCE_BOUNDARY.split(text) if s.strip()]

    hits = [s for s in sentences if needle and needle in s.lower()]
    if hits:
        return SnippetSearchResult(snippets=hits[:limit], total_hits=len(hits))

    keywords = list(dict.fromkeys(k for k in _NON_WORD.split(needle) if k))[:MAX_KEYWORDS]
    if not keywords:
        return SnippetSearchResult()

    keyword_hits = [s for s in sentences if any(k in s.lower() for k in keywords)]
    return SnippetSearchResult(
        snippets=keyword_hits[:limit],
        total_hits=len(keyword_hits),
        keywords=keywords if keyword_hits else [],
    )


class QuestionAnsweringService:
    """Grounded question answering over one document."""

    def __init__(
        self,
        client: ChatCompletionClient | None,
        max_context_chars: int = 8000,
    ) -> None:
        self.client = client
        self.max_context_chars = max_context_chars

    def build_context(self, document_text: str) -> str:
        """Truncate the document, appending a marker when content was cut."""
        if len(document_text) > self.max_context_chars:
            return document_text[: self.max_context_chars] + TRUNCATION_MARKER
        return document_text

    async def answer(self, query: str, document_text: str) -> Answer:
        """
        Answer a question using the document as the only context.

        Raises:
            ValidationError: If the query or the document is empty
            ExternalServiceBillingExhausted: With ``details["fallback"]``
                holding the local snippet search result
            ExternalServiceUnavailable: If the service cannot answer
            MalformedExternalResponse: If the service answers with nothing
        """
        if not query or not query.strip():
            raise ValidationError("Query cannot be empty")
        if not document_text or not document_text.strip():
            raise ValidationError(
                "No PDF content available. Please upload a PDF file first.",
                remediation="Upload a catalog via POST /api/chat/pdf-upload.",
            )

        query = query.strip()
        context = self.build_context(document_text)

        if self.client is None or not self.client.is_configured:
            logger.info("qa.local_search", reason="client not configured")
            return Answer(
                answer=self._local_answer(query, document_text, "LLM not configured."),
                context_length=len(context),
                query_length=len(query),
                degraded=True,
            )

        try:
            response = await self.client.complete(
                get_ask_messages(context, query),
                max_tokens=1024,
                temperature=0.3,
            )
        except ExternalServiceBillingExhausted as e:
            result = search_snippets(query, document_text)
            logger.warning(
                "qa.billing_exhausted",
                snippets=len(result.snippets),
                keywords=result.keywords,
            )
            if result.found:
                e.details["fallback"] = result.render("LLM unavailable (billing).")
                e.details["snippets"] = result.snippets
            else:
                e.details["fallback"] = "Insufficient credits on the generative service account."
            raise

        logger.info("qa.answered", model=response.model, context_length=len(context))
        return Answer(
            answer=response.content.strip(),
            context_length=len(context),
            query_length=len(query),
        )

    @staticmethod
    def _local_answer(query: str, document_text: str, prefix: str) -> str:
        result = search_snippets(query, document_text)
        if result.found:
            return result.render(prefix)
        return f"{prefix} No passages in the uploaded document match: {query}"
