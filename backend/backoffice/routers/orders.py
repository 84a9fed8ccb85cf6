"""
Customer order API routes: checkout, history, tracking and reviews.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, status

from backoffice.core.logging import get_logger
from backoffice.routers.deps import (
    CurrentIdentity,
    get_ingestion_service,
    get_state_machine,
)
from backoffice.schemas.order import (
    OrderCreate,
    OrderDetailResponse,
    OrderListResponse,
    OrderPlacedResponse,
    OrderResponse,
    ReviewCreate,
    ReviewResponse,
)
from backoffice.services.order_ingestion import OrderIngestionService
from backoffice.services.order_state import OrderStateMachine

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", response_model=OrderPlacedResponse, status_code=status.HTTP_201_CREATED)
async def place_order(
    payload: OrderCreate,
    identity: CurrentIdentity,
    service: Annotated[OrderIngestionService, Depends(get_ingestion_service)],
) -> OrderPlacedResponse:
    """
    Place an order from the caller's cart.

    Prices, names, images and categories are copied from the catalog at
    this moment and never change afterwards.
    """
    order = await service.place_order(
        user_id=identity.user_id,
        items=payload.items,
        total_amount=payload.total_amount,
        shipping_address=payload.shipping_address,
        payment_method=payload.payment_method,
    )
    return OrderPlacedResponse(
        order=OrderResponse.from_order(order),
        order_number=order.order_number,
    )


@router.get("", response_model=OrderListResponse)
async def list_orders(
    identity: CurrentIdentity,
    service: Annotated[OrderIngestionService, Depends(get_ingestion_service)],
) -> OrderListResponse:
    """Get the caller's orders, newest first."""
    orders = await service.list_orders(identity.user_id)
    return OrderListResponse(orders=[OrderResponse.from_order(order) for order in orders])


@router.get("/track/{order_id}", response_model=OrderDetailResponse)
@router.get("/{order_id}", response_model=OrderDetailResponse)
async def get_order(
    order_id: str,
    identity: CurrentIdentity,
    service: Annotated[OrderIngestionService, Depends(get_ingestion_service)],
) -> OrderDetailResponse:
    """Get one of the caller's orders."""
    order = await service.get_order(order_id, identity.user_id)
    return OrderDetailResponse(order=OrderResponse.from_order(order))


@router.post("/{order_id}/review", response_model=ReviewResponse)
async def submit_review(
    order_id: str,
    review: ReviewCreate,
    identity: CurrentIdentity,
    machine: Annotated[OrderStateMachine, Depends(get_state_machine)],
) -> ReviewResponse:
    """Review a delivered order. Allowed once per order."""
    order = await machine.submit_review(order_id, identity.user_id, review.rating)
    return ReviewResponse(
        order_id=order.id,
        rating=review.rating,
        has_reviewed=order.has_reviewed,
    )
