"""
Order model - a placed purchase with frozen line snapshots.
"""
import secrets
import threading
import time
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean, DateTime, Numeric, String, Uuid, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.core.database import Base
from backoffice.core.timestamps import utcnow

if TYPE_CHECKING:
    from backoffice.models.user import User

JSONType = JSON().with_variant(JSONB(), "postgresql")


class OrderStatus(str, Enum):
    """Fulfilment states an order can be in."""

    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentMethod(str, Enum):
    """Payment methods accepted at checkout."""

    COD = "COD"
    CARD = "CARD"
    UPI = "UPI"


class PaymentStatus(str, Enum):
    PENDING = "Pending"
    PAID = "Paid"
    FAILED = "Failed"


class OrderNumberGenerator:
    """
    Produces ``ORD-<millis>-<4 digits>`` order numbers.

    The millisecond component never repeats or goes backwards within a
    process; the random suffix separates processes that share a millisecond.
    The unique constraint on the column is the final guard.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_millis = 0

    def _next_millis(self) -> int:
        with self._lock:
            millis = max(int(time.time() * 1000), self._last_millis + 1)
            self._last_millis = millis
            return millis

    def __call__(self) -> str:
        suffix = 1000 + secrets.randbelow(9000)
        return f"ORD-{self._next_millis()}-{suffix}"


generate_order_number = OrderNumberGenerator()


class Order(Base):
    """Customer order with snapshotted line items and mutable status."""

    __tablename__ = "orders"

    id: Mapped[UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid4,
    )
    # Identity owned by the auth service, so no foreign key
    user_id: Mapped[UUID] = mapped_column(Uuid, index=True, nullable=False)

    # Line snapshots: product, title, image, quantity, price, orderName, category
    items: Mapped[list[dict[str, Any]]] = mapped_column(
        JSONType,
        nullable=False,
    )

    # Financial
    total_amount: Mapped[float] = mapped_column(
        Numeric(12, 2, asdecimal=False),
        nullable=False,
    )

    # Status
    status: Mapped[str] = mapped_column(
        String(20),
        default=OrderStatus.PENDING.value,
        index=True,
        nullable=False,
    )
    payment_method: Mapped[str] = mapped_column(
        String(10),
        default=PaymentMethod.COD.value,
        nullable=False,
    )
    payment_status: Mapped[str] = mapped_column(
        String(20),
        default=PaymentStatus.PENDING.value,
        nullable=False,
    )

    shipping_address: Mapped[dict[str, Any]] = mapped_column(
        JSONType,
        nullable=False,
    )

    order_number: Mapped[str] = mapped_column(
        String(40),
        unique=True,
        nullable=False,
    )
    has_reviewed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
    )

    # Read-only view of the identity mirror; load explicitly with selectinload
    user: Mapped[Optional["User"]] = relationship(
        "User",
        primaryjoin="foreign(Order.user_id) == User.id",
        viewonly=True,
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<Order {self.order_number}>"


@event.listens_for(Order, "before_insert")
def _assign_order_number(mapper, connection, target: Order) -> None:
    if not target.order_number:
        target.order_number = generate_order_number()
