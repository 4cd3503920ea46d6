"""
Products Repository
===================

Data access layer for the products table.
"""

import uuid
from collections.abc import Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog_advisor.db.models import Product
from catalog_advisor.schemas.products import NormalizedProduct
from catalog_advisor.utils.errors import ConflictError, DatabaseError, NotFoundError
from catalog_advisor.utils.logger import get_logger

logger = get_logger(__name__)


class ProductRepository:
    """Repository for catalog products."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_products(
        self,
        category: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Product]:
        """
        List products in insertion order.

        Args:
            category: Only products of this category
            limit: Page size
            offset: Rows to skip
        """
        stmt = select(Product).order_by(Product.created_at, Product.id)
        if category:
            stmt = stmt.where(Product.category == category)
        stmt = stmt.limit(limit).offset(offset)

        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def list_all(self) -> list[Product]:
        """Return the whole catalog (used for scoring)."""
        result = await self._session.execute(
            select(Product).order_by(Product.created_at, Product.id)
        )
        return list(result.scalars().all())

    async def count(self, category: str | None = None) -> int:
        stmt = select(func.count()).select_from(Product)
        if category:
            stmt = stmt.where(Product.category == category)
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def get(self, product_id: uuid.UUID | str) -> Product:
        """
        Fetch one product by id.

        Raises:
            NotFoundError: If the id is malformed or unknown
        """
        try:
            key = product_id if isinstance(product_id, uuid.UUID) else uuid.UUID(str(product_id))
        except ValueError as e:
            raise NotFoundError("Product not found", details={"id": str(product_id)}) from e

        product = await self._session.get(Product, key)
        if product is None:
            raise NotFoundError("Product not found", details={"id": str(product_id)})
        return product

    async def find_by_sku(self, sku: str) -> Product | None:
        result = await self._session.execute(select(Product).where(Product.sku == sku))
        return result.scalar_one_or_none()

    async def titles(self) -> list[str]:
        """Titles of every product, used to seed deduplication."""
        result = await self._session.execute(select(Product.title))
        return list(result.scalars().all())

    async def create(self, product: NormalizedProduct) -> Product:
        """
        Insert one product.

        Raises:
            ConflictError: If the SKU is already taken
        """
        if await self.find_by_sku(product.sku) is not None:
            raise ConflictError(
                f"Product with SKU {product.sku} already exists",
                details={"sku": product.sku},
            )

        row = self._to_row(product)
        self._session.add(row)
        try:
            await self._session.flush()
            await self._session.refresh(row)
        except IntegrityError as e:
            raise ConflictError(
                f"Product with SKU {product.sku} already exists",
                details={"sku": product.sku},
            ) from e

        logger.info("product.created", product_id=str(row.id), sku=row.sku)
        return row

    async def create_many(self, products: Sequence[NormalizedProduct]) -> list[Product]:
        """
        Insert a batch of products, skipping SKUs that already exist.

        Returns:
            The inserted rows, in input order
        """
        if not products:
            return []

        skus = [p.sku for p in products]
        existing = set(
            (await self._session.execute(select(Product.sku).where(Product.sku.in_(skus))))
            .scalars()
            .all()
        )

        rows: list[Product] = []
        seen: set[str] = set(existing)
        for product in products:
            if product.sku in seen:
                logger.debug("product.sku_exists", sku=product.sku, title=product.title)
                continue
            seen.add(product.sku)
            rows.append(self._to_row(product))

        if not rows:
            return []

        try:
            # Savepoint: a failed batch leaves the outer transaction usable
            async with self._session.begin_nested():
                self._session.add_all(rows)
                await self._session.flush()
            for row in rows:
                await self._session.refresh(row)
        except SQLAlchemyError as e:
            logger.error("product.batch_insert_failed", count=len(rows), error=str(e))
            raise DatabaseError(
                "Failed to save extracted products",
                details={"count": len(rows), "error": str(e)},
            ) from e

        logger.info(
            "product.batch_created",
            inserted=len(rows),
            skipped=len(products) - len(rows),
        )
        return rows

    @staticmethod
    def _to_row(product: NormalizedProduct) -> Product:
        return Product(
            title=product.title,
            description=product.description,
            category=product.category,
            price=product.price,
            tags=list(product.tags),
            stock=product.stock,
            sku=product.sku,
            meta=dict(product.metadata),
        )
