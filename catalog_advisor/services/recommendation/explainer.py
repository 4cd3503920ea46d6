"""
Recommendation Explainer
========================

Produces a short "why this product?" explanation for the top-ranked
products.

The generative service is asked first. When it is unavailable or out of
credits, the explanation is rebuilt from the scoring signals of each
product, so the caller always gets an explanation.
"""

import json
from collections.abc import Sequence
from dataclasses import dataclass

from catalog_advisor.schemas.behavior import ScoredProduct, UserBehaviorProfile
from catalog_advisor.schemas.products import ProductRead
from catalog_advisor.services.llm.client import ChatCompletionClient
from catalog_advisor.services.llm.prompts import get_explanation_messages
from catalog_advisor.utils.errors import ExternalServiceBillingExhausted, ExternalServiceError
from catalog_advisor.utils.logger import get_logger

logger = get_logger(__name__)

BILLING_PREFIX = "LLM unavailable (billing). Fallback explanations:"
UNAVAILABLE_PREFIX = "LLM unavailable. Fallback explanations:"
DEFAULT_REASON = "Recommended based on matching attributes."


@dataclass
class Explanation:
    """
    Explanation text for a set of recommendations.

    Attributes:
        text: Explanation shown to the user
        notice: Remediation hint when the LLM was out of credits
        degraded: True when the text was built locally
    """

    text: str
    notice: str | None = None
    degraded: bool = False


class RecommendationExplainer:
    """LLM explanations with a deterministic signal-based fallback."""

    def __init__(
        self,
        client: ChatCompletionClient | None,
        excerpt_size: int = 50,
    ) -> None:
        self.client = client
        self.excerpt_size = excerpt_size

    async def explain(
        self,
        catalog: Sequence[ProductRead],
        behavior: UserBehaviorProfile,
        ranked: Sequence[ScoredProduct],
    ) -> Explanation:
        """
        Explain why ``ranked`` products were recommended.

        Args:
            catalog: Full catalog (an excerpt is sent as context)
            behavior: Validated behavior profile
            ranked: Top-N scored products

        Returns:
            Explanation, never raises for generative service failures
        """
        if not ranked:
            return Explanation(text="No products to recommend yet.", degraded=True)

        if self.client is None or not self.client.is_configured:
            return Explanation(text=self.fallback_text(ranked, UNAVAILABLE_PREFIX), degraded=True)

        messages = get_explanation_messages(
            catalog_excerpt=self._catalog_excerpt(catalog),
            behavior_json=json.dumps(behavior.model_dump(mode="json", by_alias=True)),
            recommended="\n".join(f"- {s.product.id}: {s.product.title}" for s in ranked),
        )

        try:
            response = await self.client.complete(messages, max_tokens=512, temperature=0.2)
        except ExternalServiceBillingExhausted as e:
            logger.warning("explainer.billing_exhausted", error=e.message)
            return Explanation(
                text=self.fallback_text(ranked, BILLING_PREFIX),
                notice=e.remediation,
                degraded=True,
            )
        except ExternalServiceError as e:
            logger.warning("explainer.llm_failed", error_type=type(e).__name__, error=e.message)
            return Explanation(text=self.fallback_text(ranked, UNAVAILABLE_PREFIX), degraded=True)

        return Explanation(text=response.content.strip())

    @staticmethod
    def fallback_text(ranked: Sequence[ScoredProduct], prefix: str) -> str:
        """
        Restate each product's fired scoring signals.

        Example output:
            LLM unavailable (billing). Fallback explanations:

            - Running Shoe: category match: footwear; within budget: $80
        """
        lines = []
        for scored in ranked:
            reasons = [s.detail for s in scored.signals if s.detail]
            reason_text = "; ".join(reasons) if reasons else DEFAULT_REASON
            lines.append(f"- {scored.product.title}: {reason_text}")
        return f"{prefix}\n\n" + "\n".join(lines)

    def _catalog_excerpt(self, catalog: Sequence[ProductRead]) -> str:
        return "\n".join(
            f"- {p.id}: {p.title} ({p.category}) ${p.price}"
            for p in catalog[: self.excerpt_size]
        )
