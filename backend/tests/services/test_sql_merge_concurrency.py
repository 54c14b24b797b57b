"""SQL merge under concurrency — two sessions racing merge_item on one SQLite file.

Tests cover:
    - Two increments that together exceed stock: exactly one applies
    - Two first adds of the same product: one line, never above stock
    - Two increments that fit: both apply, quantities add up

Design Decisions:
    - File-backed database: each session gets its own connection, so the
      conditional UPDATE is what serializes the writers, not a shared cursor
"""

import asyncio
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from storefront.core.domain_types import CartId, OwnerId, ProductId
from storefront.db.base import Base
from storefront.infrastructure.sql_repositories import SqlCartStore
from storefront.models.cart_item import CartItem
from storefront.models.product import Product
from storefront.models.user import User


@pytest.fixture
async def file_sessions(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'carts.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


async def _seed(sessions, stock: int, in_cart: int = 0) -> tuple[CartId, ProductId]:
    async with sessions() as db:
        user = User(email="racer@test.com", username="racer")
        product = Product(
            title="Console", description="Limited edition console.",
            price=Decimal("499.00"), stock=stock,
        )
        db.add_all([user, product])
        await db.commit()
        store = SqlCartStore(db)
        cart = await store.get_or_create(OwnerId(user.id))
        if in_cart:
            await store.merge_item(cart.id, ProductId(product.id), in_cart)
        return cart.id, ProductId(product.id)


async def _race(sessions, cart_id, product_id, quantity):
    async def _merge():
        async with sessions() as db:
            return await SqlCartStore(db).merge_item(cart_id, product_id, quantity)

    return await asyncio.gather(_merge(), _merge())


async def _quantities(sessions, cart_id) -> list[int]:
    async with sessions() as db:
        result = await db.execute(
            select(CartItem.quantity).where(CartItem.cart_id == cart_id),
        )
        return list(result.scalars().all())


async def test_racing_increments_never_exceed_stock(file_sessions):
    cart_id, product_id = await _seed(file_sessions, stock=5, in_cart=1)

    results = await _race(file_sessions, cart_id, product_id, 3)

    assert sorted(r.applied for r in results) == [False, True]
    rejected = next(r for r in results if not r.applied)
    assert rejected.existing_quantity == 4
    assert await _quantities(file_sessions, cart_id) == [4]


async def test_racing_first_adds_keep_one_line(file_sessions):
    cart_id, product_id = await _seed(file_sessions, stock=5)

    results = await _race(file_sessions, cart_id, product_id, 3)

    assert sorted(r.applied for r in results) == [False, True]
    assert await _quantities(file_sessions, cart_id) == [3]


async def test_racing_increments_that_fit_both_apply(file_sessions):
    cart_id, product_id = await _seed(file_sessions, stock=10, in_cart=1)

    results = await _race(file_sessions, cart_id, product_id, 2)

    assert all(r.applied for r in results)
    assert await _quantities(file_sessions, cart_id) == [5]
