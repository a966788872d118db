"""
Storefront Backend: Product Route Handlers
=============================================

What:  Catalogue endpoints. Reads are public; writes require the admin key.
How:   Extracts request data, delegates to ProductService, returns JSON.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database import get_db_session
from storefront.schemas.common import ErrorResponse, MessageResponse
from storefront.schemas.product import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from storefront.security import require_admin
from storefront.services.product_service import product_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["Products"])

ADMIN_ERRORS = {
    401: {"description": "Missing admin key", "model": ErrorResponse},
    403: {"description": "Invalid admin key", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=ProductListResponse,
    summary="List products",
    responses={500: {"description": "Server error", "model": ErrorResponse}},
)
async def list_products(
    response: Response,
    category: str | None = Query(default=None, description="Only products in this category"),
    search: str | None = Query(default=None, max_length=100, description="Case-insensitive name match"),
    limit: int = Query(default=20, ge=1, le=100, description="Items per page (max 100)"),
    offset: int = Query(default=0, ge=0, description="Number of products to skip"),
    db: AsyncSession = Depends(get_db_session),
) -> ProductListResponse:
    result = await product_service.list_products(
        db=db,
        category=category,
        search=search,
        limit=limit,
        offset=offset,
    )
    response.headers["X-Total-Count"] = str(result.total_count)
    return result


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get a single product",
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
)
async def get_product(
    product_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ProductResponse:
    return await product_service.get_product(db=db, product_id=product_id)


@router.post(
    "",
    status_code=201,
    response_model=ProductResponse,
    summary="Create a product",
    dependencies=[Depends(require_admin)],
    responses=ADMIN_ERRORS,
)
async def create_product(
    payload: ProductCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ProductResponse:
    return await product_service.create_product(db=db, data=payload)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Update a product",
    dependencies=[Depends(require_admin)],
    responses={**ADMIN_ERRORS, 404: {"description": "Product not found", "model": ErrorResponse}},
)
async def update_product(
    product_id: UUID,
    payload: ProductUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> ProductResponse:
    return await product_service.update_product(db=db, product_id=product_id, data=payload)


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    summary="Delete a product and its image",
    dependencies=[Depends(require_admin)],
    responses={**ADMIN_ERRORS, 404: {"description": "Product not found", "model": ErrorResponse}},
)
async def delete_product(
    product_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await product_service.delete_product(db=db, product_id=product_id)
    return MessageResponse(message="Product deleted successfully")
