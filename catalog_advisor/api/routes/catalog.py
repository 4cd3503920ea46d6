"""
Catalog Routes
==============

Endpoints:
- GET /api/chat/products - List catalog products
- GET /api/chat/products/{product_id} - One catalog product
- POST /api/chat/products - Add a product by hand
- GET /api/chat/interactions - Recent user interactions
"""

from typing import Annotated

from fastapi import APIRouter, Query, status

from catalog_advisor.api.dependencies import CatalogServiceDep
from catalog_advisor.schemas.products import ProductCreate, ProductRead
from catalog_advisor.schemas.responses import InteractionRead, ProductListResponse

router = APIRouter()


@router.get("/products", response_model=ProductListResponse, summary="List products")
async def list_products(
    service: CatalogServiceDep,
    category: Annotated[str | None, Query(max_length=100)] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> ProductListResponse:
    rows, total = await service.list_products(category=category, limit=limit, offset=offset)
    return ProductListResponse(
        products=[ProductRead.model_validate(row) for row in rows],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/products/{product_id}",
    response_model=ProductRead,
    summary="Get a product",
    responses={404: {"description": "Product not found"}},
)
async def get_product(product_id: str, service: CatalogServiceDep) -> ProductRead:
    row = await service.get_product(product_id)
    return ProductRead.model_validate(row)


@router.post(
    "/products",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add a product",
    responses={409: {"description": "SKU already exists"}},
)
async def create_product(body: ProductCreate, service: CatalogServiceDep) -> ProductRead:
    """Add a product; a SKU is derived from category and title when omitted."""
    row = await service.add_product(body)
    return ProductRead.model_validate(row)


@router.get(
    "/interactions",
    response_model=list[InteractionRead],
    summary="Recent interactions",
)
async def list_interactions(
    service: CatalogServiceDep,
    session_id: Annotated[str | None, Query(max_length=128)] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> list[InteractionRead]:
    rows = await service.list_interactions(session_id=session_id, limit=limit)
    return [InteractionRead.model_validate(row) for row in rows]
