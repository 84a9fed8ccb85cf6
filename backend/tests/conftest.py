"""
Pytest configuration and shared fixtures.

Each test gets its own SQLite file so the API (running in the test
client's event loop) and the test body see the same committed data.
"""
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-the-backoffice-orders-api")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["ENVIRONMENT"] = "test"

from collections.abc import AsyncGenerator
from datetime import datetime
from typing import Any, Optional
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

import backoffice.models  # noqa: F401
from backoffice.core.database import Base, get_db_session
from backoffice.core.security import ADMIN_ROLE, create_access_token
from backoffice.main import app
from backoffice.models import Category, Order, Product, User


@pytest.fixture
def database_url(tmp_path) -> str:
    """Fresh schema in a temporary SQLite file."""
    path = tmp_path / "backoffice.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
def session_factory(database_url: str) -> async_sessionmaker[AsyncSession]:
    engine = create_async_engine(database_url, poolclass=NullPool)
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging data and calling services directly."""
    async with session_factory() as db:
        yield db


@pytest.fixture
def override_db(session_factory):
    async def _get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as db:
            try:
                yield db
                await db.commit()
            except Exception:
                await db.rollback()
                raise

    app.dependency_overrides[get_db_session] = _get_db_session
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client(override_db) -> TestClient:
    """Synchronous test client (lifespan not started)."""
    return TestClient(app)


@pytest_asyncio.fixture
async def async_client(override_db) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def bearer(user_id: UUID, role: str = "user") -> dict[str, str]:
    token = create_access_token({"sub": str(user_id), "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    """Build bearer headers for an arbitrary identity."""
    return bearer


@pytest.fixture
def customer_id() -> UUID:
    return uuid4()


@pytest.fixture
def customer_headers(customer_id: UUID) -> dict[str, str]:
    return bearer(customer_id)


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return bearer(uuid4(), ADMIN_ROLE)


@pytest.fixture
def make_product(session: AsyncSession):
    """Factory that persists a catalog product."""

    async def _make(
        name: str = "Cotton Shirt",
        price: float = 100.0,
        discount: float = 0,
        category: str = "Mens Fashion",
        external_id: Optional[str] = None,
        image: Optional[str] = "https://cdn.example.com/shirt.png",
    ) -> Product:
        product = Product(
            name=name,
            price=price,
            discount=discount,
            category=category,
            external_id=external_id,
            image=image,
            stock=10,
        )
        session.add(product)
        await session.commit()
        return product

    return _make


@pytest.fixture
def make_category(session: AsyncSession):
    async def _make(name: str) -> Category:
        category = Category(name=name, slug=name.lower().replace(" ", "-").replace("'", ""))
        session.add(category)
        await session.commit()
        return category

    return _make


@pytest.fixture
def make_user(session: AsyncSession):
    async def _make(name: str = "Asha Rao", email: Optional[str] = None) -> User:
        user = User(name=name, email=email or f"{uuid4().hex[:8]}@example.com")
        session.add(user)
        await session.commit()
        return user

    return _make


@pytest.fixture
def make_order(session: AsyncSession):
    """Factory that persists an order directly, bypassing ingestion."""

    async def _make(
        user_id: Optional[UUID] = None,
        total_amount: float = 100.0,
        status: str = "Pending",
        payment_method: str = "COD",
        created_at: Optional[datetime] = None,
        items: Optional[list[dict[str, Any]]] = None,
        has_reviewed: bool = False,
    ) -> Order:
        fields: dict[str, Any] = {}
        if created_at is not None:
            fields["created_at"] = created_at
        order = Order(
            user_id=user_id or uuid4(),
            items=items or [],
            total_amount=total_amount,
            status=status,
            payment_method=payment_method,
            shipping_address={"city": "Pune"},
            has_reviewed=has_reviewed,
            **fields,
        )
        session.add(order)
        await session.commit()
        return order

    return _make
