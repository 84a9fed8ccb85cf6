"""
Product model - catalog entry owned by the catalog service.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from backoffice.core.database import Base
from backoffice.core.timestamps import utcnow


class Product(Base):
    """Catalog product with pricing, discount and stock."""

    __tablename__ = "products"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
    )
    # Identifier used by legacy/seeded data
    external_id: Mapped[Optional[str]] = mapped_column(
        String(255),
        unique=True,
        index=True,
    )

    # Product details
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    image: Mapped[Optional[str]] = mapped_column(Text)
    # Category id or category name, depending on how the product was seeded
    category: Mapped[str] = mapped_column(String(255), index=True, nullable=False)

    # Pricing
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    discount: Mapped[float] = mapped_column(Numeric(5, 2, asdecimal=False), default=0)

    # Inventory (informational; ingestion does not reserve stock)
    stock: Mapped[int] = mapped_column(Integer, default=0)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Product {self.name[:30]}>"
