"""
Order Pydantic schemas for request/response validation.

Request bodies are deliberately loose: the ingestion and state machine
services own validation so the API answers with their 400 messages
rather than a generic 422.
"""
from datetime import datetime
from typing import Any, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from backoffice.core.timestamps import normalize_timestamps
from backoffice.models.order import Order


class OrderCreate(BaseModel):
    """Checkout payload."""

    items: Any = None
    total_amount: Any = Field(None, alias="totalAmount")
    payment_method: Any = Field(None, alias="paymentMethod")
    shipping_address: Any = Field(None, alias="shippingAddress")

    model_config = ConfigDict(populate_by_name=True)


class StatusUpdate(BaseModel):
    status: Any = None


class PaymentStatusUpdate(BaseModel):
    payment_status: Any = Field(None, alias="paymentStatus")

    model_config = ConfigDict(populate_by_name=True)


class ReviewCreate(BaseModel):
    rating: Any = None


class OrderItemResponse(BaseModel):
    """Snapshotted order line."""

    product: str
    title: str
    image: Optional[str] = None
    quantity: int
    price: float
    order_name: str = Field(alias="orderName")
    category: str

    model_config = ConfigDict(populate_by_name=True)


def _order_payload(order: Order) -> dict[str, Any]:
    return {
        "id": order.id,
        "user": order.user_id,
        "items": order.items,
        "totalAmount": order.total_amount,
        "status": order.status,
        "paymentMethod": order.payment_method,
        "paymentStatus": order.payment_status,
        "shippingAddress": order.shipping_address,
        "orderNumber": order.order_number,
        "hasReviewed": order.has_reviewed,
        "createdAt": order.created_at,
        "updatedAt": order.updated_at,
    }


class OrderResponse(BaseModel):
    """Order as exposed to clients, timestamps in display time."""

    id: UUID
    user_id: UUID = Field(alias="user")
    items: list[OrderItemResponse]
    total_amount: float = Field(alias="totalAmount")
    status: str
    payment_method: str = Field(alias="paymentMethod")
    payment_status: str = Field(alias="paymentStatus")
    shipping_address: dict[str, Any] = Field(alias="shippingAddress")
    order_number: str = Field(alias="orderNumber")
    has_reviewed: bool = Field(alias="hasReviewed")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        return cls.model_validate(normalize_timestamps(_order_payload(order)))


class UserSummary(BaseModel):
    id: UUID
    name: str
    email: str


class AdminOrderResponse(OrderResponse):
    """Order with the owner's name and email when the identity is known."""

    user_id: Union[UserSummary, UUID] = Field(alias="user")

    @classmethod
    def from_order(cls, order: Order) -> "AdminOrderResponse":
        payload = _order_payload(order)
        if order.user is not None:
            payload["user"] = UserSummary(
                id=order.user.id,
                name=order.user.name,
                email=order.user.email,
            )
        return cls.model_validate(normalize_timestamps(payload))


class OrderPlacedResponse(BaseModel):
    message: str = "Order placed successfully"
    order: OrderResponse
    order_number: str = Field(alias="orderNumber")

    model_config = ConfigDict(populate_by_name=True)


class OrderDetailResponse(BaseModel):
    order: OrderResponse


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]


class PaginatedOrdersResponse(BaseModel):
    """Schema for paginated admin order list."""

    orders: list[AdminOrderResponse]
    total_pages: int = Field(alias="totalPages")
    current_page: int = Field(alias="currentPage")
    total: int

    model_config = ConfigDict(populate_by_name=True)


class ReviewResponse(BaseModel):
    message: str = "Review submitted successfully"
    order_id: UUID = Field(alias="orderId")
    rating: float
    has_reviewed: bool = Field(alias="hasReviewed")

    model_config = ConfigDict(populate_by_name=True)
