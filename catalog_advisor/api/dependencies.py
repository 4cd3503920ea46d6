"""
API Dependencies
================

FastAPI dependency providers. Tests override ``get_catalog_service`` to
run the routes without a database.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_advisor.config.settings import get_settings
from catalog_advisor.db.connection import get_session
from catalog_advisor.db.repositories import (
    CatalogUploadRepository,
    InteractionRepository,
    ProductRepository,
)
from catalog_advisor.services.catalog_service import CatalogService
from catalog_advisor.services.llm.client import ChatCompletionClient

DEFAULT_SESSION_ID = "default"


def get_llm_client(request: Request) -> ChatCompletionClient | None:
    """Shared generative client created in the application lifespan."""
    return getattr(request.app.state, "llm_client", None)


def get_session_id(
    x_session_id: Annotated[str | None, Header(max_length=128)] = None,
) -> str:
    """Client session from the ``X-Session-ID`` header."""
    return (x_session_id or "").strip() or DEFAULT_SESSION_ID


async def get_catalog_service(
    session: Annotated[AsyncSession, Depends(get_session)],
    client: Annotated[ChatCompletionClient | None, Depends(get_llm_client)],
) -> AsyncGenerator[CatalogService, None]:
    yield CatalogService.build(
        products=ProductRepository(session),
        uploads=CatalogUploadRepository(session),
        interactions=InteractionRepository(session),
        client=client,
        settings=get_settings(),
    )


CatalogServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
SessionIdDep = Annotated[str, Depends(get_session_id)]
