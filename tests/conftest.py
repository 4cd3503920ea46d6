"""
Test Configuration and Fixtures
===============================

Shared pytest fixtures for catalog advisor tests.
"""

from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from catalog_advisor.config.settings import Settings
from catalog_advisor.schemas.products import ProductRead
from catalog_advisor.services.llm.client import ChatCompletionClient, LLMResponse


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the developer's environment and .env file."""
    return Settings(
        _env_file=None,
        llm_api_key="test-key",
        llm_models="model-a,model-b",
        llm_base_url="https://llm.test/api/v1",
    )


@pytest.fixture
def mock_llm_client() -> MagicMock:
    """Configured generative client whose ``complete`` is an AsyncMock."""
    client = MagicMock(spec=ChatCompletionClient)
    client.is_configured = True
    client.complete = AsyncMock(return_value=LLMResponse(content="ok", model="model-a"))
    return client


@pytest.fixture
def llm_response():
    """Factory for LLMResponse objects."""

    def _make(content: str, model: str = "model-a") -> LLMResponse:
        return LLMResponse(content=content, model=model)

    return _make


@pytest.fixture
def make_product():
    """Factory for ProductRead instances."""

    def _make(**overrides: Any) -> ProductRead:
        data: dict[str, Any] = {
            "id": str(uuid4()),
            "title": "Running Shoe",
            "description": "Lightweight trainer",
            "category": "footwear",
            "price": Decimal("79.99"),
            "tags": ["running"],
            "sku": "FOO-00000000",
        }
        data.update(overrides)
        return ProductRead(**data)

    return _make


@pytest.fixture
def make_product_row():
    """Factory for ORM-like product rows (attribute access, ``meta`` column)."""

    def _make(**overrides: Any) -> SimpleNamespace:
        data: dict[str, Any] = {
            "id": uuid4(),
            "title": "Running Shoe",
            "description": "Lightweight trainer",
            "category": "footwear",
            "price": Decimal("79.99"),
            "tags": ["running"],
            "stock": 0,
            "sku": "FOO-00000000",
            "meta": {"source_strategy": "pattern"},
            "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
        }
        data.update(overrides)
        return SimpleNamespace(**data)

    return _make


@pytest.fixture
def sample_catalog_text() -> str:
    """Catalog text in the delimited-line layout."""
    return (
        "Spring Catalog\n"
        "Running Shoe - footwear - $79.99 - Lightweight trainer\n"
        "Trail Boot - footwear - $129.00 - Waterproof leather upper\n"
        "Desk Lamp - home - $34.50\n"
    )
