"""
Catalog Uploads Repository
==========================

Data access layer for the catalog_uploads table. The most recent
upload of a session is the context for question answering; ``failed``
only means its products could not be saved, the text is still usable.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_advisor.db.models import CatalogUpload
from catalog_advisor.utils.logger import get_logger

logger = get_logger(__name__)


class CatalogUploadRepository:
    """Repository for uploaded catalog documents."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        file_name: str,
        file_size: int,
        extracted_text: str,
        session_id: str,
        user_id: str = "anonymous",
        metadata: dict[str, Any] | None = None,
    ) -> CatalogUpload:
        """Record an upload in ``uploaded`` status."""
        upload = CatalogUpload(
            file_name=file_name,
            file_size=file_size,
            extracted_text=extracted_text,
            text_length=len(extracted_text),
            products_extracted=0,
            session_id=session_id,
            user_id=user_id,
            status="uploaded",
            meta=metadata or {},
        )
        self._session.add(upload)
        await self._session.flush()
        await self._session.refresh(upload)

        logger.info(
            "upload.created",
            upload_id=str(upload.id),
            session_id=session_id,
            text_length=upload.text_length,
        )
        return upload

    async def latest_for_session(self, session_id: str) -> CatalogUpload | None:
        result = await self._session.execute(
            select(CatalogUpload)
            .where(CatalogUpload.session_id == session_id)
            .order_by(CatalogUpload.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def mark_processed(
        self,
        upload: CatalogUpload,
        products_extracted: int,
        metadata: dict[str, Any] | None = None,
    ) -> CatalogUpload:
        upload.status = "processed"
        upload.products_extracted = products_extracted
        if metadata:
            upload.meta = {**upload.meta, **metadata}
        await self._session.flush()
        return upload

    async def mark_failed(self, upload: CatalogUpload, error: str) -> CatalogUpload:
        upload.status = "failed"
        upload.meta = {**upload.meta, "error": error}
        await self._session.flush()
        logger.warning("upload.failed", upload_id=str(upload.id), error=error)
        return upload
