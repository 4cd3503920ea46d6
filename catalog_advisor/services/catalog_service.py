"""
Catalog Service
===============

Per-session orchestration behind the HTTP routes.

Upload flow:
    PDF bytes → text → extraction chain → deduplication (seeded with the
    titles already in the catalog) → products table

Recommendation flow:
    catalog + behavior → scorer → explainer → interaction log

No document or catalog state is kept in memory: every call reads the
latest upload and the catalog through the repositories.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any

from catalog_advisor.config.settings import Settings, get_settings
from catalog_advisor.db.models import CatalogUpload, Product, UserInteraction
from catalog_advisor.db.repositories import (
    CatalogUploadRepository,
    InteractionRepository,
    ProductRepository,
)
from catalog_advisor.ingest.pdf_text import PdfTextExtractor
from catalog_advisor.schemas.behavior import ScoredProduct
from catalog_advisor.schemas.extraction import ExtractionReport
from catalog_advisor.schemas.products import NormalizedProduct, ProductCreate, ProductRead
from catalog_advisor.services.deduplication_service import (
    DeduplicationService,
    DeduplicationStats,
    generate_sku,
)
from catalog_advisor.services.extraction.chain import ExtractorChain
from catalog_advisor.services.question_answering import Answer, QuestionAnsweringService
from catalog_advisor.services.recommendation.explainer import Explanation, RecommendationExplainer
from catalog_advisor.services.recommendation.scorer import RecommendationScorer, coerce_behavior
from catalog_advisor.utils.errors import DatabaseError, NotFoundError
from catalog_advisor.utils.logger import get_logger

logger = get_logger(__name__)

PREVIEW_LENGTH = 200


@dataclass
class UploadOutcome:
    """Result of ingesting one uploaded catalog."""

    upload: CatalogUpload
    report: ExtractionReport
    stats: DeduplicationStats
    products: list[Product] = field(default_factory=list)
    notices: list[str] = field(default_factory=list)

    @property
    def preview(self) -> str:
        text = self.upload.extracted_text
        return text[:PREVIEW_LENGTH] + ("..." if len(text) > PREVIEW_LENGTH else "")


@dataclass
class RecommendationOutcome:
    """Ranked products with their explanation."""

    ranked: list[ScoredProduct]
    explanation: Explanation


class CatalogService:
    """
    Coordinates repositories with the extraction and recommendation core.

    All collaborators are injected; ``CatalogService.build`` wires the
    defaults from settings.
    """

    def __init__(
        self,
        products: ProductRepository,
        uploads: CatalogUploadRepository,
        interactions: InteractionRepository,
        chain: ExtractorChain,
        deduplicator: DeduplicationService,
        scorer: RecommendationScorer,
        explainer: RecommendationExplainer,
        qa: QuestionAnsweringService,
        text_extractor: PdfTextExtractor,
        settings: Settings | None = None,
    ) -> None:
        self.products = products
        self.uploads = uploads
        self.interactions = interactions
        self.chain = chain
        self.deduplicator = deduplicator
        self.scorer = scorer
        self.explainer = explainer
        self.qa = qa
        self.text_extractor = text_extractor
        self.settings = settings or get_settings()

    @classmethod
    def build(
        cls,
        products: ProductRepository,
        uploads: CatalogUploadRepository,
        interactions: InteractionRepository,
        client: Any = None,
        settings: Settings | None = None,
    ) -> "CatalogService":
        """Wire the default collaborators around the given repositories."""
        settings = settings or get_settings()
        return cls(
            products=products,
            uploads=uploads,
            interactions=interactions,
            chain=ExtractorChain.default(client, settings),
            deduplicator=DeduplicationService(settings.dedup_similarity_threshold),
            scorer=RecommendationScorer(),
            explainer=RecommendationExplainer(client),
            qa=QuestionAnsweringService(client, settings.llm_max_context_chars),
            text_extractor=PdfTextExtractor(max_bytes=settings.max_upload_bytes),
            settings=settings,
        )

    async def ingest_document(
        self,
        session_id: str,
        file_name: str,
        data: bytes,
        user_id: str = "anonymous",
    ) -> UploadOutcome:
        """
        Extract text and products from an uploaded PDF.

        Raises:
            DocumentError: If the file is not a readable PDF (nothing is stored)
        """
        text = await asyncio.to_thread(self.text_extractor.extract, data)

        upload = await self.uploads.create(
            file_name=file_name,
            file_size=len(data),
            extracted_text=text,
            session_id=session_id,
            user_id=user_id,
        )

        report = await self.chain.run(text)
        existing_titles = await self.products.titles()
        normalized, stats = self.deduplicator.deduplicate(
            report.candidates,
            existing_titles=existing_titles,
        )

        notices = list(report.notices)
        try:
            saved = await self.products.create_many(normalized)
        except DatabaseError as e:
            await self.uploads.mark_failed(upload, e.message)
            notices.append(f"Products could not be saved: {e.message}")
            return UploadOutcome(upload=upload, report=report, stats=stats, notices=notices)

        await self.uploads.mark_processed(
            upload,
            products_extracted=len(saved),
            metadata={
                "strategy": report.strategy,
                "strategies_tried": report.strategies_tried,
                "candidates": len(report.candidates),
                "dropped_invalid": report.dropped_invalid,
                "duplicates_removed": stats.duplicates_removed,
            },
        )

        logger.info(
            "catalog.ingested",
            upload_id=str(upload.id),
            strategy=report.strategy,
            candidates=len(report.candidates),
            saved=len(saved),
        )
        return UploadOutcome(
            upload=upload,
            report=report,
            stats=stats,
            products=saved,
            notices=notices,
        )

    async def ask(self, session_id: str, query: str, user_id: str = "anonymous") -> Answer:
        """
        Answer a question about the session's latest upload.

        Raises:
            NotFoundError: If the session has not uploaded a document
        """
        upload = await self.uploads.latest_for_session(session_id)
        if upload is None:
            raise NotFoundError(
                "No PDF content available. Please upload a PDF file first.",
                details={"session_id": session_id},
                remediation="Upload a catalog via POST /api/chat/pdf-upload.",
            )

        answer = await self.qa.answer(query, upload.extracted_text)

        await self.interactions.log(
            session_id=session_id,
            user_id=user_id,
            interaction_type="query",
            query=query,
            ai_response=answer.answer,
            metadata={"upload_id": str(upload.id), "degraded": answer.degraded},
        )
        return answer

    async def recommend(
        self,
        session_id: str,
        behavior: Any,
        top_n: int | None = None,
        user_id: str = "anonymous",
    ) -> RecommendationOutcome:
        """
        Rank the catalog for a behavior profile and explain the top N.

        Raises:
            ValidationError: If behavior is structurally invalid
            NotFoundError: If the catalog is empty
        """
        profile = coerce_behavior(behavior)
        top_n = top_n or self.settings.default_top_n

        rows = await self.products.list_all()
        if not rows:
            raise NotFoundError(
                "No product catalog available.",
                remediation="Upload a PDF catalog or add products first.",
            )

        catalog = [ProductRead.model_validate(row) for row in rows]
        ranked = self.scorer.score_and_rank(catalog, profile, top_n=top_n)
        explanation = await self.explainer.explain(catalog, profile, ranked)

        await self.interactions.log(
            session_id=session_id,
            user_id=user_id,
            interaction_type="recommendation_shown",
            products=[
                {
                    "product_id": s.product.id,
                    "product_title": s.product.title,
                    "relevance_score": s.score,
                }
                for s in ranked
            ],
            ai_response=explanation.text,
            metadata={
                "behavior": profile.model_dump(mode="json", by_alias=True),
                "top_n": top_n,
                "degraded": explanation.degraded,
            },
        )
        return RecommendationOutcome(ranked=ranked, explanation=explanation)

    async def add_product(self, data: ProductCreate) -> Product:
        """
        Add a product by hand; a SKU is generated when none is given.

        Raises:
            ConflictError: If the SKU already exists
        """
        product = NormalizedProduct(
            title=data.title,
            description=data.description,
            category=data.category,
            price=data.price,
            tags=[t.strip().lower() for t in data.tags if t.strip()],
            stock=data.stock,
            sku=data.sku or generate_sku(data.category, data.title),
            metadata={"source_strategy": "manual", **data.metadata},
        )
        return await self.products.create(product)

    async def list_products(
        self,
        category: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[Product], int]:
        rows = await self.products.list_products(category=category, limit=limit, offset=offset)
        total = await self.products.count(category=category)
        return rows, total

    async def get_product(self, product_id: str) -> Product:
        """
        Fetch one catalog product.

        Raises:
            NotFoundError: If the id is malformed or unknown
        """
        return await self.products.get(product_id)

    async def list_interactions(
        self,
        session_id: str | None = None,
        limit: int = 50,
    ) -> list[UserInteraction]:
        return await self.interactions.list_recent(session_id=session_id, limit=limit)
