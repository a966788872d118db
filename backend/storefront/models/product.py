"""
Storefront Backend: Product SQLAlchemy Model
===============================================

What:  ORM model representing the `products` table.
Who:   Used by ProductService for CRUD operations and by Alembic for schema management.

Table Design Rationale:
    - UUID primary key: non-sequential, safe to expose in URLs
    - price NUMERIC(10, 2): exact currency arithmetic (never float)
    - image_url / image_public_id: the object-storage result for the product
      image; the public id is kept so the image can be deleted with the product
    - created_at / updated_at: UTC with timezone

    Index on created_at DESC: the catalogue is listed newest first.
    Index on category: storefront pages filter by category.
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import TIMESTAMP, CheckConstraint, Index, Integer, Numeric, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    """A product in the catalogue."""

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier",
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        server_default=text("''"),
    )

    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    category: Mapped[str | None] = mapped_column(String(100), nullable=True)

    brand: Mapped[str | None] = mapped_column(String(100), nullable=True)

    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    image_public_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Object-storage id of the product image",
    )

    stock: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_products_created_at", created_at.desc()),
        Index("idx_products_category", "category"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}', price={self.price})>"
