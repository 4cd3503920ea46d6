"""
Chat Routes
===========

Endpoints:
- POST /api/chat/pdf-upload - Upload a PDF catalog (multipart field ``pdf``)
- POST /api/chat/ask - Ask a question about the uploaded catalog
- POST /api/chat/recommend - Ranked recommendations with explanation

The session is taken from the ``X-Session-ID`` header.
"""

from typing import Annotated

from fastapi import APIRouter, File, UploadFile, status

from catalog_advisor.api.dependencies import CatalogServiceDep, SessionIdDep
from catalog_advisor.schemas.requests import AskRequest, RecommendRequest
from catalog_advisor.schemas.responses import AskResponse, RecommendResponse, UploadResponse
from catalog_advisor.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/pdf-upload",
    response_model=UploadResponse,
    status_code=status.HTTP_200_OK,
    summary="Upload a PDF catalog",
    responses={
        400: {"description": "Not a readable PDF, empty or too large"},
    },
)
async def pdf_upload(
    pdf: Annotated[UploadFile, File(description="PDF catalog")],
    service: CatalogServiceDep,
    session_id: SessionIdDep,
) -> UploadResponse:
    """
    Extract text and products from an uploaded PDF catalog.

    The text becomes the session's question-answering context and the
    extracted products are added to the catalog after deduplication.
    """
    data = await pdf.read()
    logger.info(
        "upload.received",
        file_name=pdf.filename,
        content_type=pdf.content_type,
        size=len(data),
    )

    outcome = await service.ingest_document(
        session_id=session_id,
        file_name=pdf.filename or "catalog.pdf",
        data=data,
    )

    return UploadResponse(
        message="PDF uploaded and text extracted successfully.",
        upload_id=str(outcome.upload.id),
        text_length=outcome.upload.text_length,
        preview=outcome.preview,
        products_extracted=len(outcome.products),
        strategy=outcome.report.strategy,
        notices=outcome.notices,
    )


@router.post(
    "/ask",
    response_model=AskResponse,
    summary="Ask about the uploaded catalog",
    responses={
        402: {"description": "Out of credits; details carry matching snippets"},
        404: {"description": "No catalog uploaded in this session"},
        503: {"description": "Generative service unavailable"},
    },
)
async def ask(
    body: AskRequest,
    service: CatalogServiceDep,
    session_id: SessionIdDep,
) -> AskResponse:
    answer = await service.ask(session_id=session_id, query=body.query)
    return AskResponse(
        answer=answer.answer,
        context_length=answer.context_length,
        query_length=answer.query_length,
        degraded=answer.degraded,
    )


@router.post(
    "/recommend",
    response_model=RecommendResponse,
    summary="Recommend products for a behavior profile",
    responses={
        400: {"description": "Invalid behavior profile"},
        404: {"description": "Catalog is empty"},
    },
)
async def recommend(
    body: RecommendRequest,
    service: CatalogServiceDep,
    session_id: SessionIdDep,
) -> RecommendResponse:
    """
    Score the catalog against the behavior profile and explain the top N.

    The explanation falls back to rule-based text when the generative
    service is unavailable; ``notice`` tells how to restore it.
    """
    outcome = await service.recommend(
        session_id=session_id,
        behavior=body.behavior,
        top_n=body.top_n,
    )
    return RecommendResponse(
        recommendations=[s.to_response() for s in outcome.ranked],
        explanation=outcome.explanation.text,
        notice=outcome.explanation.notice,
    )
