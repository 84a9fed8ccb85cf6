"""
Repository package for data access layer.
"""
from backoffice.repositories.base import BaseRepository
from backoffice.repositories.catalog import CategoryRepository, ProductRepository
from backoffice.repositories.order import OrderRepository
from backoffice.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "ProductRepository",
    "CategoryRepository",
    "OrderRepository",
    "UserRepository",
]
