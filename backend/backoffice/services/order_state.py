"""
Order state machine - status, payment status and the review flag.
"""
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.config import settings
from backoffice.core.exceptions import (
    AlreadyReviewedError,
    InvalidStatusError,
    NotEligibleError,
    NotFoundError,
    OrderValidationError,
)
from backoffice.core.logging import get_logger
from backoffice.models.order import Order, OrderStatus, PaymentStatus
from backoffice.repositories.order import OrderRepository
from backoffice.services.order_ingestion import parse_order_id

logger = get_logger(__name__)

# Moves allowed when strict transitions are switched on
ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

MIN_RATING = 1
MAX_RATING = 5


def parse_status(value: Any) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidStatusError("Invalid status", details={"received": repr(value)})


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    """Strict policy check; re-applying the current status is always allowed."""
    return current == target or target in ALLOWED_TRANSITIONS[current]


def parse_rating(rating: Any) -> float:
    if isinstance(rating, bool) or not isinstance(rating, (int, float)):
        raise OrderValidationError("Valid rating (1-5) is required")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise OrderValidationError("Valid rating (1-5) is required")
    return rating


class OrderStateMachine:
    """
    Applies status changes and review submissions.

    The default policy accepts any enumerated status from any state so
    staff can correct mistakes; ``strict_transitions`` enforces
    ``ALLOWED_TRANSITIONS`` instead. Writes are single-row updates with
    no version check, so concurrent updates resolve as last write wins.
    """

    def __init__(
        self,
        session: AsyncSession,
        *,
        strict_transitions: Optional[bool] = None,
    ) -> None:
        self.session = session
        self.orders = OrderRepository(session)
        self.strict_transitions = (
            settings.strict_status_transitions
            if strict_transitions is None
            else strict_transitions
        )

    async def update_status(self, order_id: Any, new_status: Any) -> Order:
        status = parse_status(new_status)
        order_uuid = parse_order_id(order_id)

        if self.strict_transitions:
            current = await self.orders.reload(order_uuid)
            if current is None:
                raise NotFoundError("Order not found")
            if not can_transition(OrderStatus(current.status), status):
                raise InvalidStatusError(
                    f"Cannot move order from {current.status} to {status.value}",
                    details={"from": current.status, "to": status.value},
                )

        if not await self.orders.set_status(order_uuid, status.value):
            raise NotFoundError("Order not found")

        order = await self.orders.get_with_user(order_uuid)
        logger.info(
            "Order status updated",
            order_id=str(order_uuid),
            order_number=order.order_number,
            status=status.value,
        )
        return order

    async def update_payment_status(self, order_id: Any, payment_status: Any) -> Order:
        try:
            new_payment_status = PaymentStatus(payment_status)
        except ValueError:
            raise OrderValidationError(
                "Invalid payment status",
                details={"received": repr(payment_status)},
            )
        order_uuid = parse_order_id(order_id)

        if not await self.orders.set_payment_status(order_uuid, new_payment_status.value):
            raise NotFoundError("Order not found")

        order = await self.orders.get_with_user(order_uuid)
        logger.info(
            "Order payment status updated",
            order_id=str(order_uuid),
            payment_status=new_payment_status.value,
        )
        return order

    async def submit_review(self, order_id: Any, user_id: UUID, rating: Any) -> Order:
        """
        Mark a delivered order of the caller as reviewed, exactly once.

        Raises:
            OrderValidationError: rating outside 1..5 or malformed id
            NotFoundError: order missing or owned by someone else
            NotEligibleError: order not delivered
            AlreadyReviewedError: review flag already set
        """
        parse_rating(rating)
        order_uuid = parse_order_id(order_id)

        order = await self.orders.get_for_user(order_uuid, user_id)
        if order is None:
            raise NotFoundError("Order not found")
        if order.status != OrderStatus.DELIVERED.value:
            raise NotEligibleError("Order not found or not eligible for review")
        if order.has_reviewed:
            raise AlreadyReviewedError("Review already submitted for this order")

        if not await self.orders.mark_reviewed(order_uuid):
            raise AlreadyReviewedError("Review already submitted for this order")

        logger.info("Order reviewed", order_id=str(order_uuid), rating=rating)
        return await self.orders.reload(order_uuid)
