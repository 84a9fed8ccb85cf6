"""
Admin order API routes: listing, statistics and status changes.
"""
import math
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from backoffice.core.database import DbSession
from backoffice.core.exceptions import NotFoundError
from backoffice.core.logging import get_logger
from backoffice.repositories.order import OrderRepository
from backoffice.routers.deps import (
    AdminIdentity,
    get_analytics_engine,
    get_state_machine,
)
from backoffice.schemas.dashboard import OrderStatsOverview
from backoffice.schemas.order import (
    AdminOrderResponse,
    PaginatedOrdersResponse,
    PaymentStatusUpdate,
    StatusUpdate,
)
from backoffice.services.analytics_engine import AnalyticsEngine
from backoffice.services.order_ingestion import parse_order_id
from backoffice.services.order_state import OrderStateMachine

logger = get_logger(__name__)

router = APIRouter(prefix="/admin/orders", tags=["admin-orders"])


@router.get("", response_model=PaginatedOrdersResponse)
async def list_orders(
    admin: AdminIdentity,
    session: DbSession,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = Query(None, description="Filter by order status"),
    search: Optional[str] = Query(None, description="Order id or order number"),
) -> PaginatedOrdersResponse:
    """List all orders, newest first, with optional filters."""
    repo = OrderRepository(session)
    orders, total = await repo.list_paginated(
        status=status or None,
        search=search or None,
        skip=(page - 1) * limit,
        limit=limit,
    )
    return PaginatedOrdersResponse(
        orders=[AdminOrderResponse.from_order(order) for order in orders],
        total_pages=math.ceil(total / limit),
        current_page=page,
        total=total,
    )


# Registered before /{order_id} so "stats" is not read as an id
@router.get("/stats/overview", response_model=OrderStatsOverview)
async def order_stats(
    admin: AdminIdentity,
    engine: Annotated[AnalyticsEngine, Depends(get_analytics_engine)],
) -> OrderStatsOverview:
    """Per-status order counts and totals."""
    return await engine.order_stats_overview()


@router.get("/{order_id}", response_model=AdminOrderResponse)
async def get_order(
    order_id: str,
    admin: AdminIdentity,
    session: DbSession,
) -> AdminOrderResponse:
    """Get any order with its owner summary."""
    order = await OrderRepository(session).get_with_user(parse_order_id(order_id))
    if order is None:
        raise NotFoundError("Order not found")
    return AdminOrderResponse.from_order(order)


@router.put("/{order_id}/status", response_model=AdminOrderResponse)
async def update_order_status(
    order_id: str,
    update: StatusUpdate,
    admin: AdminIdentity,
    machine: Annotated[OrderStateMachine, Depends(get_state_machine)],
) -> AdminOrderResponse:
    """Move an order to another status."""
    order = await machine.update_status(order_id, update.status)
    logger.info("Status changed by admin", admin_id=str(admin.user_id), order_id=order_id)
    return AdminOrderResponse.from_order(order)


@router.put("/{order_id}/payment-status", response_model=AdminOrderResponse)
async def update_payment_status(
    order_id: str,
    update: PaymentStatusUpdate,
    admin: AdminIdentity,
    machine: Annotated[OrderStateMachine, Depends(get_state_machine)],
) -> AdminOrderResponse:
    """Record the payment outcome of an order."""
    order = await machine.update_payment_status(order_id, update.payment_status)
    return AdminOrderResponse.from_order(order)
