"""
Order repository for data access operations.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import selectinload

from backoffice.core.timestamps import utcnow
from backoffice.models.order import Order, OrderStatus
from backoffice.repositories.base import BaseRepository
from backoffice.repositories.catalog import parse_uuid


class OrderRepository(BaseRepository[Order]):
    """Repository for Order model operations."""

    model = Order

    async def get_for_user(self, order_id: UUID, user_id: UUID) -> Optional[Order]:
        """Get an order only if it belongs to the given user."""
        stmt = select(Order).where(Order.id == order_id, Order.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_with_user(self, order_id: UUID) -> Optional[Order]:
        """Get an order with its owner summary loaded."""
        stmt = (
            select(Order)
            .options(selectinload(Order.user))
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: UUID) -> list[Order]:
        """All orders of a user, newest first."""
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_paginated(
        self,
        *,
        status: Optional[str] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[Order], int]:
        """
        Get orders for the admin listing with filtering.
        Returns (orders, total_count) tuple.
        """
        base_query = select(Order)

        if status:
            base_query = base_query.where(Order.status == status)
        if search:
            order_id = parse_uuid(search)
            if order_id is not None:
                base_query = base_query.where(Order.id == order_id)
            else:
                base_query = base_query.where(Order.order_number == search.strip())

        count_stmt = select(func.count()).select_from(base_query.subquery())
        count_result = await self.session.execute(count_stmt)
        total = count_result.scalar() or 0

        stmt = (
            base_query
            .options(selectinload(Order.user))
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def recent(self, limit: int) -> list[Order]:
        """Newest orders with owner summaries."""
        stmt = (
            select(Order)
            .options(selectinload(Order.user))
            .order_by(Order.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def set_status(self, order_id: UUID, status: str) -> bool:
        """
        Overwrite the status in a single-row UPDATE.
        Returns False when no row matched.
        """
        stmt = (
            update(Order)
            .where(Order.id == order_id)
            .values(status=status, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def set_payment_status(self, order_id: UUID, payment_status: str) -> bool:
        """Overwrite the payment status in a single-row UPDATE."""
        stmt = (
            update(Order)
            .where(Order.id == order_id)
            .values(payment_status=payment_status, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def mark_reviewed(self, order_id: UUID) -> bool:
        """
        Flip has_reviewed to true on a delivered, not yet reviewed order.
        Returns False if another request already flipped it.
        """
        stmt = (
            update(Order)
            .where(
                Order.id == order_id,
                Order.status == OrderStatus.DELIVERED.value,
                Order.has_reviewed.is_(False),
            )
            .values(has_reviewed=True, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0

    async def reload(self, order_id: UUID) -> Optional[Order]:
        """Re-read an order after a bulk UPDATE."""
        return await self.session.get(Order, order_id, populate_existing=True)
