"""
User repository over the identity mirror.
"""
from backoffice.models.user import User
from backoffice.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User model operations."""

    model = User
