"""
Order ingestion - turns a cart into a persisted order.

Every line is resolved against the catalog and its price, name, image and
category are frozen into the order. Nothing is written until all lines
resolve, so a failed call leaves no order behind.
"""
import math
from collections.abc import Iterable, Mapping
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.config import settings
from backoffice.core.exceptions import NotFoundError, OrderValidationError, UnauthorizedError
from backoffice.core.logging import get_logger
from backoffice.models.order import Order, OrderStatus, PaymentMethod, PaymentStatus
from backoffice.models.product import Product
from backoffice.repositories.catalog import ProductRepository
from backoffice.repositories.order import OrderRepository

logger = get_logger(__name__)

# Keys a cart line may use for its product reference
PRODUCT_REF_KEYS = ("product", "productId", "_id")

# Largest value orders.total_amount (NUMERIC(12, 2)) can hold
MAX_TOTAL_AMOUNT = 9_999_999_999.99


def compute_effective_price(base_price: float, discount: Optional[float]) -> float:
    """Apply a percentage discount: base - base * discount / 100."""
    discount = discount or 0
    if discount < 0 or discount >= 100:
        raise OrderValidationError(
            "Product discount must be in the range [0, 100)",
            details={"discount": discount},
        )
    if discount == 0:
        return base_price
    return base_price - (base_price * discount) / 100


def parse_total_amount(total_amount: Any) -> float:
    """
    Accept numbers and numeric strings.

    The value must stay positive once rounded to cents and fit the
    total_amount column.
    """
    if isinstance(total_amount, bool) or not isinstance(total_amount, (int, float, str)):
        raise OrderValidationError(
            "Invalid total amount type",
            details={"received": repr(total_amount), "type": type(total_amount).__name__},
        )

    try:
        parsed = float(total_amount)
    except (ValueError, OverflowError):
        parsed = math.nan

    if not math.isfinite(parsed) or round(parsed, 2) <= 0 or parsed > MAX_TOTAL_AMOUNT:
        raise OrderValidationError(
            "Invalid total amount value",
            details={"received": repr(total_amount)},
        )
    return parsed


def parse_payment_method(payment_method: Any) -> PaymentMethod:
    if payment_method is None or payment_method == "":
        return PaymentMethod.COD
    try:
        return PaymentMethod(payment_method)
    except ValueError:
        raise OrderValidationError(
            "Invalid payment method",
            details={"received": repr(payment_method)},
        )


def parse_quantity(quantity: Any) -> Optional[int]:
    """Integer quantity from an int, integral float or digit string."""
    if isinstance(quantity, bool):
        return None
    if isinstance(quantity, int):
        return quantity
    if isinstance(quantity, float):
        return int(quantity) if quantity.is_integer() else None
    if isinstance(quantity, str):
        try:
            return int(quantity.strip())
        except ValueError:
            return None
    return None


def parse_cart_line(line: Any) -> tuple[Any, int]:
    """Extract (product reference, quantity) from one cart line."""
    if not isinstance(line, Mapping):
        raise OrderValidationError("Invalid cart item")

    product_ref = next((line[key] for key in PRODUCT_REF_KEYS if line.get(key)), None)
    quantity = parse_quantity(line.get("quantity"))
    if product_ref is None or quantity is None or quantity < 1:
        raise OrderValidationError("Invalid cart item", details={"item": dict(line)})
    return product_ref, quantity


def snapshot_line(product: Product, quantity: int) -> dict[str, Any]:
    """Freeze the catalog values an order line keeps forever."""
    return {
        "product": str(product.id),
        "title": product.name,
        "image": product.image,
        "quantity": quantity,
        "price": compute_effective_price(float(product.price), product.discount),
        "orderName": product.name,
        "category": product.category,
    }


def parse_order_id(order_id: Any) -> UUID:
    if isinstance(order_id, UUID):
        return order_id
    try:
        return UUID(str(order_id))
    except ValueError:
        raise OrderValidationError("Invalid order ID")


def recompute_total(lines: Iterable[Mapping[str, Any]]) -> float:
    """Sum of price * quantity over snapshotted lines."""
    return sum(float(line["price"]) * int(line["quantity"]) for line in lines)


def verify_total(
    declared: float,
    lines: Iterable[Mapping[str, Any]],
    tolerance: float,
) -> None:
    """Raise if the declared total drifts from the snapshot total."""
    expected = recompute_total(lines)
    if abs(expected - declared) > tolerance:
        raise OrderValidationError(
            "Total amount does not match order items",
            details={"declared": declared, "expected": round(expected, 2)},
        )


class OrderIngestionService:
    """Validates carts and persists orders with price snapshots."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        enforce_total: Optional[bool] = None,
        total_tolerance: Optional[float] = None,
    ) -> None:
        self.session = session
        self.products = ProductRepository(session)
        self.orders = OrderRepository(session)
        self.enforce_total = (
            settings.enforce_order_total if enforce_total is None else enforce_total
        )
        self.total_tolerance = (
            settings.order_total_tolerance if total_tolerance is None else total_tolerance
        )

    async def place_order(
        self,
        user_id: Optional[UUID],
        items: Any,
        total_amount: Any,
        shipping_address: Any,
        payment_method: Any = None,
    ) -> Order:
        """
        Create an order for a user from raw cart input.

        Raises:
            UnauthorizedError: no identity
            OrderValidationError: malformed cart, total, payment method or address
            NotFoundError: a line references an unknown product
        """
        if user_id is None:
            raise UnauthorizedError("Unauthorized")

        if not isinstance(items, list) or not items:
            raise OrderValidationError("Cart items are required")

        parsed_total = parse_total_amount(total_amount)
        method = parse_payment_method(payment_method)

        if not isinstance(shipping_address, Mapping) or not shipping_address:
            raise OrderValidationError("Shipping address is required")

        cart = [parse_cart_line(line) for line in items if line]
        if not cart:
            raise OrderValidationError("Cart items are required")

        lines: list[dict[str, Any]] = []
        for product_ref, quantity in cart:
            product = await self.products.resolve(product_ref)
            if product is None:
                raise NotFoundError(f"Product not found: {product_ref}")
            lines.append(snapshot_line(product, quantity))

        if self.enforce_total:
            verify_total(parsed_total, lines, self.total_tolerance)

        order = Order(
            user_id=user_id,
            items=lines,
            total_amount=parsed_total,
            payment_method=method.value,
            payment_status=PaymentStatus.PENDING.value,
            status=OrderStatus.PENDING.value,
            shipping_address=dict(shipping_address),
        )
        order = await self.orders.add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            lines=len(lines),
            total_amount=parsed_total,
            payment_method=method.value,
        )
        return order

    async def list_orders(self, user_id: UUID) -> list[Order]:
        """Orders of the caller, newest first."""
        return await self.orders.list_for_user(user_id)

    async def get_order(self, order_id: Any, user_id: UUID) -> Order:
        """Single order, visible only to its owner."""
        order = await self.orders.get_for_user(parse_order_id(order_id), user_id)
        if order is None:
            raise NotFoundError("Order not found")
        return order

