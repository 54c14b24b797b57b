"""Service test fixtures — in-memory fakes, async DB, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched for code paths that bypass get_db (readiness check)
    - Engine tests run against InMemoryCartStore/InMemoryCatalog, no DB at all

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific features not exercised here)
    - Tokens issued with the same authenticator the app verifies with
"""

from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from storefront.db.base import Base
from storefront.infrastructure.database import get_db, DatabaseSessionManager
from storefront.models.product import Product
from storefront.models.user import User
from storefront.services.cart_engine import CartEngine
import storefront.infrastructure.database as db_module
from storefront.main import app
from tests.services.auth_helpers import auth_headers
from tests.services.fake_stores import InMemoryCartStore, InMemoryCatalog


# ─── In-memory engine ───────────────────────────────────────────

@pytest.fixture
def catalog():
    return InMemoryCatalog()


@pytest.fixture
def store(catalog):
    return InMemoryCartStore(catalog)


@pytest.fixture
def engine(store, catalog):
    return CartEngine(store, catalog)


# ─── SQLite-backed app ──────────────────────────────────────────

@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


async def _add_user(db, username: str, role: str = "USER", is_active: bool = True) -> User:
    user = User(
        email=f"{username}@test.com", username=username,
        role=role, is_active=is_active,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest.fixture
async def seed_user(test_db):
    return await _add_user(test_db, "testuser")


@pytest.fixture
async def seed_other_user(test_db):
    return await _add_user(test_db, "john")


@pytest.fixture
async def seed_admin(test_db):
    return await _add_user(test_db, "admin", role="ADMIN")


@pytest.fixture
def make_product(test_db):
    """Factory: insert a product row and return it."""
    async def _make(
        title: str = "iPhone 14 Pro", price: str = "10.00", stock: int = 5,
        is_active: bool = True, category: str = "smartphones",
    ) -> Product:
        product = Product(
            title=title,
            description="A product used by the cart tests.",
            price=Decimal(price),
            stock=stock,
            brand="Acme",
            category=category,
            thumbnail="https://cdn.example.com/thumb.jpg",
            is_active=is_active,
        )
        test_db.add(product)
        await test_db.commit()
        await test_db.refresh(product)
        return product
    return _make


@pytest.fixture
def user_headers(seed_user):
    return auth_headers(seed_user)


@pytest.fixture
def admin_headers(seed_admin):
    return auth_headers(seed_admin)
