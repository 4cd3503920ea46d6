"""
API Test Fixtures
=================

The application is built with ``create_app()`` and the catalog service
dependency is replaced by a mock, so no database or lifespan is needed.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from catalog_advisor.api.dependencies import get_catalog_service
from catalog_advisor.api.main import create_app
from catalog_advisor.services.catalog_service import CatalogService


@pytest.fixture
def catalog_service() -> MagicMock:
    service = MagicMock(spec=CatalogService)
    service.ingest_document = AsyncMock()
    service.ask = AsyncMock()
    service.recommend = AsyncMock()
    service.add_product = AsyncMock()
    service.get_product = AsyncMock()
    service.list_products = AsyncMock(return_value=([], 0))
    service.list_interactions = AsyncMock(return_value=[])
    return service


@pytest.fixture
def app(catalog_service) -> FastAPI:
    application = create_app()
    application.dependency_overrides[get_catalog_service] = lambda: catalog_service
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
