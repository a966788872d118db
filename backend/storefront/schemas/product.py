"""
Storefront Backend: Product Request/Response Schemas
=======================================================

What:  Pydantic models defining the product API contract.
Why:   Strict input validation, automatic serialization, and OpenAPI docs.

Schemas are separate from the SQLAlchemy model so the API contract can
evolve independently of the table (e.g. ProductUpdate is fully partial).
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class ProductBase(BaseModel):
    name: str = Field(min_length=1, max_length=200, description="Display name")
    description: str = Field(default="", description="Long-form description")
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2, description="Unit price")
    category: Optional[str] = Field(default=None, max_length=100)
    brand: Optional[str] = Field(default=None, max_length=100)
    image_url: Optional[str] = Field(default=None, max_length=500)
    image_public_id: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Object-storage id returned by POST /api/upload",
    )
    stock: int = Field(default=0, ge=0, description="Units available")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("name must not be blank")
        return stripped


class ProductCreate(ProductBase):
    """Body of POST /api/products."""


class ProductUpdate(BaseModel):
    """
    Body of PUT /api/products/{id}.

    Every field is optional; only fields present in the request are applied.
    """

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    category: Optional[str] = Field(default=None, max_length=100)
    brand: Optional[str] = Field(default=None, max_length=100)
    image_url: Optional[str] = Field(default=None, max_length=500)
    image_public_id: Optional[str] = Field(default=None, max_length=255)
    stock: Optional[int] = Field(default=None, ge=0)


class ProductResponse(ProductBase):
    id: uuid.UUID = Field(description="Unique product identifier")
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ProductListResponse(BaseModel):
    """
    Paginated response for GET /api/products.

    Offset pagination: the catalogue is small and clients page by number.
    """

    products: List[ProductResponse]
    total_count: int = Field(description="Total number of products matching filters")
    has_more: bool = Field(description="Whether more pages are available")
