"""
SQLAlchemy models package.
All models are imported here for easy access and Alembic discovery.
"""
from backoffice.models.category import Category
from backoffice.models.order import (
    Order,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    generate_order_number,
)
from backoffice.models.product import Product
from backoffice.models.user import User

__all__ = [
    "Order",
    "OrderStatus",
    "PaymentMethod",
    "PaymentStatus",
    "generate_order_number",
    "Product",
    "Category",
    "User",
]
