"""
FastAPI Application Entry Point
===============================

Application factory with lifespan management, request logging,
error mapping and the health endpoint.
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog_advisor import __version__
from catalog_advisor.config.settings import get_settings
from catalog_advisor.db.connection import DatabaseManager
from catalog_advisor.services.llm.client import ChatCompletionClient
from catalog_advisor.utils.errors import (
    CatalogAdvisorError,
    ConfigurationError,
    ConflictError,
    DatabaseError,
    DocumentError,
    ExternalServiceBillingExhausted,
    ExternalServiceUnavailable,
    MalformedExternalResponse,
    NotFoundError,
    ValidationError,
)
from catalog_advisor.utils.logger import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)

configure_logging()
logger = get_logger(__name__)

# Most specific classes first; the first isinstance match wins
ERROR_STATUS_CODES: list[tuple[type[CatalogAdvisorError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (DocumentError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ExternalServiceBillingExhausted, status.HTTP_402_PAYMENT_REQUIRED),
    (ExternalServiceUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
    (MalformedExternalResponse, status.HTTP_502_BAD_GATEWAY),
    (DatabaseError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (ConfigurationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_code_for(exc: CatalogAdvisorError) -> int:
    for error_type, code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Startup: database pool (degraded mode if unreachable), generative client.
    Shutdown: close both.
    """
    settings = get_settings()
    logger.info(
        "app.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.fastapi_port,
        models=settings.model_list,
    )

    try:
        await DatabaseManager.initialize(settings)
    except DatabaseError as e:
        # Keep serving /health so the outage is visible
        logger.error("app.database_unavailable", error=e.message)

    app.state.llm_client = ChatCompletionClient(settings)
    if not app.state.llm_client.is_configured:
        logger.warning("app.llm_not_configured", hint="Set LLM_API_KEY to enable AI answers")

    yield

    logger.info("app.shutting_down")
    await app.state.llm_client.close()
    await DatabaseManager.close()


def create_app() -> FastAPI:
    """
    FastAPI application factory.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Catalog Advisor API",
        description=(
            "Upload PDF product catalogs, ask questions about them and get "
            "explained product recommendations."
        ),
        version=__version__,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Request Logging Middleware
    # -------------------------------------------------------------------------
    @app.middleware("http")
    async def log_requests(request: Request, call_next: Any) -> Any:
        """Log each request with a correlation id (echoed as X-Request-ID)."""
        request_id = request.headers.get("x-request-id") or str(uuid4())
        clear_request_context()
        bind_request_context(
            request_id=request_id,
            session_id=request.headers.get("x-session-id"),
        )
        start_time = time.perf_counter()

        logger.info(
            "request.received",
            method=request.method,
            path=request.url.path,
            client_ip=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
            process_time = time.perf_counter() - start_time

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = f"{process_time:.4f}"

            logger.info(
                "request.completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(process_time * 1000, 2),
            )
            return response
        finally:
            clear_request_context()

    # -------------------------------------------------------------------------
    # Exception Handlers
    # -------------------------------------------------------------------------
    @app.exception_handler(CatalogAdvisorError)
    async def catalog_advisor_error_handler(
        request: Request, exc: CatalogAdvisorError
    ) -> JSONResponse:
        status_code = status_code_for(exc)
        log = logger.error if status_code >= 500 else logger.warning
        log(
            "request.app_error",
            error_type=type(exc).__name__,
            message=exc.message,
            status_code=status_code,
            path=request.url.path,
        )

        content: dict[str, Any] = {
            "error": type(exc).__name__,
            "message": exc.message,
            "details": exc.details,
        }
        if exc.remediation:
            content["help"] = exc.remediation
        return JSONResponse(status_code=status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {"loc": ".".join(str(p) for p in err.get("loc", ())), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        logger.warning("request.invalid", path=request.url.path, errors=errors)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": "ValidationError",
                "message": "Invalid request",
                "details": {"errors": errors},
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "request.unexpected_error",
            error_type=type(exc).__name__,
            message=str(exc),
            path=request.url.path,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "InternalServerError",
                "message": "An unexpected error occurred",
                "details": {},
            },
        )

    # -------------------------------------------------------------------------
    # Health & Info
    # -------------------------------------------------------------------------
    @app.get("/health", tags=["Health"], summary="Health check endpoint")
    async def health_check(request: Request) -> dict[str, Any]:
        health: dict[str, Any] = {
            "status": "healthy",
            "version": __version__,
            "service": "catalog-advisor",
            "checks": {},
        }

        db_status = await DatabaseManager.health_check()
        health["checks"]["database"] = db_status
        if db_status.get("status") != "healthy":
            health["status"] = "degraded"

        client = getattr(request.app.state, "llm_client", None)
        health["checks"]["llm"] = {
            "status": "configured" if client is not None and client.is_configured else "not_configured",
            "models": settings.model_list,
        }
        return health

    @app.get("/", tags=["Info"], summary="API information")
    async def api_info() -> dict[str, str]:
        return {
            "service": "catalog-advisor",
            "version": __version__,
            "description": "PDF catalog extraction, Q&A and product recommendations",
            "docs": "/docs",
        }

    from catalog_advisor.api.routes import catalog_router, chat_router

    app.include_router(chat_router, prefix="/api/chat", tags=["Chat"])
    app.include_router(catalog_router, prefix="/api/chat", tags=["Catalog"])

    return app


app = create_app()
