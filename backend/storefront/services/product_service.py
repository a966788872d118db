"""
Storefront Backend: Product Service
======================================

What:  Business logic for the product catalogue (list, get, create, update, delete).
Why:   Keeps SQL and error translation out of the route handlers.
How:   Receives the request's AsyncSession per call; commit/rollback is owned
       by get_db_session, so this layer only flushes.

Error Handling Strategy:
    - Missing rows become NotFoundError (404)
    - Any other database failure becomes DatabaseError (500, generic message)
    - Deleting a product also deletes its image from object storage; a failure
      there is logged and does not undo the delete
"""

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.exceptions import DatabaseError, NotFoundError, StorefrontError
from storefront.models.product import Product
from storefront.schemas.product import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from storefront.services.storage_service import ObjectStorage, object_storage

logger = logging.getLogger(__name__)


class ProductService:
    """
    Stateless product operations.

    Args:
        storage: Object storage override (tests); defaults to the shared instance.
    """

    def __init__(self, storage: Optional[ObjectStorage] = None):
        self._storage = storage

    @property
    def storage(self) -> ObjectStorage:
        return self._storage or object_storage

    def _apply_filters(self, query, category: Optional[str], search: Optional[str]):
        if category:
            query = query.where(Product.category == category)
        if search:
            query = query.where(Product.name.ilike(f"%{search}%"))
        return query

    async def list_products(
        self,
        db: AsyncSession,
        category: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> ProductListResponse:
        """
        Page through the catalogue, newest first.

        Fetches limit + 1 rows so has_more needs no extra query; the total
        count is a separate COUNT with the same filters.
        """
        try:
            query = self._apply_filters(select(Product), category, search)
            query = query.order_by(desc(Product.created_at)).offset(offset).limit(limit + 1)
            result = await db.execute(query)
            products = list(result.scalars().all())

            count_query = self._apply_filters(select(func.count(Product.id)), category, search)
            count_result = await db.execute(count_query)
            total_count = count_result.scalar() or 0
        except Exception as e:
            logger.error("Database error listing products: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve products. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        has_more = len(products) > limit
        return ProductListResponse(
            products=[ProductResponse.model_validate(p) for p in products[:limit]],
            total_count=total_count,
            has_more=has_more,
        )

    async def _fetch(self, db: AsyncSession, product_id: UUID) -> Product:
        result = await db.execute(select(Product).where(Product.id == product_id))
        product = result.scalar_one_or_none()
        if product is None:
            raise NotFoundError(resource="product", resource_id=str(product_id))
        return product

    async def get_product(self, db: AsyncSession, product_id: UUID) -> ProductResponse:
        try:
            product = await self._fetch(db, product_id)
        except NotFoundError:
            raise
        except Exception as e:
            logger.error("Database error fetching product %s: %s", product_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the product. Please try again.",
                context={"product_id": str(product_id)},
            ) from e
        return ProductResponse.model_validate(product)

    async def create_product(self, db: AsyncSession, data: ProductCreate) -> ProductResponse:
        try:
            product = Product(**data.model_dump())
            db.add(product)
            await db.flush()
        except Exception as e:
            logger.error("Database error creating product: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the product. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Product created: %s (%s)", product.id, product.name)
        return ProductResponse.model_validate(product)

    async def update_product(
        self,
        db: AsyncSession,
        product_id: UUID,
        data: ProductUpdate,
    ) -> ProductResponse:
        """Apply only the fields the client sent."""
        changes = data.model_dump(exclude_unset=True)
        try:
            product = await self._fetch(db, product_id)
            for field, value in changes.items():
                setattr(product, field, value)
            product.updated_at = datetime.now(timezone.utc)
            await db.flush()
        except NotFoundError:
            raise
        except Exception as e:
            logger.error("Database error updating product %s: %s", product_id, str(e))
            raise DatabaseError(
                message="Could not update the product. Please try again.",
                context={"product_id": str(product_id)},
            ) from e

        logger.info("Product updated: %s (%s)", product_id, ", ".join(sorted(changes)) or "no changes")
        return ProductResponse.model_validate(product)

    async def delete_product(self, db: AsyncSession, product_id: UUID) -> None:
        try:
            product = await self._fetch(db, product_id)
            image_public_id = product.image_public_id
            await db.delete(product)
            await db.flush()
        except NotFoundError:
            raise
        except Exception as e:
            logger.error("Database error deleting product %s: %s", product_id, str(e))
            raise DatabaseError(
                message="Could not delete the product. Please try again.",
                context={"product_id": str(product_id)},
            ) from e

        logger.info("Product deleted: %s", product_id)

        if image_public_id:
            try:
                await self.storage.delete(image_public_id)
            except StorefrontError as e:
                logger.warning(
                    "Product %s deleted but its image %s was not: %s",
                    product_id,
                    image_public_id,
                    e.message,
                )


# ── Singleton Instance ────────────────────────────────────────────────────
product_service = ProductService()
