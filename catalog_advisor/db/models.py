"""
SQLAlchemy ORM Models
=====================

Tables:
    - products: catalog products (unique SKU)
    - catalog_uploads: uploaded PDF documents and their extracted text
    - user_interactions: queries and recommendations shown per session

JSON columns use PostgreSQL JSONB. The ``metadata`` column is exposed as
``meta`` because ``metadata`` is reserved on declarative classes.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import CheckConstraint, Integer, Numeric, String, Text, func
from sqlalchemy.dialects import postgresql
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

UPLOAD_STATUSES = ("uploaded", "processed", "failed")
INTERACTION_TYPES = (
    "query",
    "view",
    "click",
    "search",
    "recommendation_shown",
    "recommendation_clicked",
)


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all ORM models with async support."""

    pass


class UUIDMixin:
    """Mixin for UUID primary key."""

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
        server_default=func.gen_random_uuid(),
        nullable=False,
    )


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class Product(Base, UUIDMixin, TimestampMixin):
    """Catalog product. SKU is unique and never changes once assigned."""

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price >= 0", name="check_product_price_non_negative"),
        CheckConstraint("stock >= 0", name="check_product_stock_non_negative"),
    )

    title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    tags: Mapped[list[str]] = mapped_column(
        postgresql.JSONB(astext_type=Text),
        nullable=False,
        server_default="[]",
        default=list,
    )
    stock: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0", default=0)
    sku: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    meta: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        postgresql.JSONB(astext_type=Text),
        nullable=False,
        server_default="{}",
        default=dict,
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, sku='{self.sku}', title='{self.title}')>"


class CatalogUpload(Base, UUIDMixin, TimestampMixin):
    """Uploaded catalog document; the latest one per session is the Q&A context."""

    __tablename__ = "catalog_uploads"
    __table_args__ = (
        CheckConstraint(
            "status IN ('uploaded', 'processed', 'failed')",
            name="check_upload_status",
        ),
    )

    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    file_size: Mapped[int] = mapped_column(Integer, nullable=False)
    extracted_text: Mapped[str] = mapped_column(Text, nullable=False)
    text_length: Mapped[int] = mapped_column(Integer, nullable=False)
    products_extracted: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0", default=0)
    session_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(
        String(128), nullable=False, server_default="anonymous", default="anonymous"
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, server_default="uploaded", default="uploaded", index=True
    )
    meta: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        postgresql.JSONB(astext_type=Text),
        nullable=False,
        server_default="{}",
        default=dict,
    )

    def __repr__(self) -> str:
        return f"<CatalogUpload(id={self.id}, file_name='{self.file_name}', status='{self.status}')>"


class UserInteraction(Base, UUIDMixin):
    """Logged user action (question asked, recommendations shown, ...)."""

    __tablename__ = "user_interactions"
    __table_args__ = (
        CheckConstraint(
            "interaction_type IN ('query', 'view', 'click', 'search', "
            "'recommendation_shown', 'recommendation_clicked')",
            name="check_interaction_type",
        ),
    )

    session_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(
        String(128), nullable=False, server_default="anonymous", default="anonymous"
    )
    interaction_type: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    query: Mapped[str | None] = mapped_column(Text, nullable=True)
    # [{"product_id", "product_title", "relevance_score"}]
    products: Mapped[list[dict[str, Any]]] = mapped_column(
        postgresql.JSONB(astext_type=Text),
        nullable=False,
        server_default="[]",
        default=list,
    )
    ai_response: Mapped[str | None] = mapped_column(Text, nullable=True)
    meta: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        postgresql.JSONB(astext_type=Text),
        nullable=False,
        server_default="{}",
        default=dict,
    )
    timestamp: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<UserInteraction(id={self.id}, type='{self.interaction_type}', session='{self.session_id}')>"
