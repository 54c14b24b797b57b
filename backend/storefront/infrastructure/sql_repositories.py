"""SQL Repositories — SQLAlchemy implementations of ProductCatalog and CartStore.

Invariants:
    - Return core records (frozen dataclasses), never ORM rows
    - Reads select columns, not entities: results never come from a stale identity map
    - merge_item increments with ONE conditional UPDATE guarded by live stock
    - Each mutating method commits its own transaction

Design Decisions:
    - Conditional UPDATE ... RETURNING over SELECT-then-UPDATE: closes the
      check-then-act race between concurrent adds of the same product
    - First insert of a line relies on uq_cart_items_cart_product; a concurrent
      duplicate insert rolls back and is retried once as a merge
    - Cart creation relies on the unique owner_id the same way
"""

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.domain_types import (
    CartId, CartItemId, CartItemRecord, CartRecord, MergeResult,
    OwnerId, ProductId, ProductSnapshot,
)
from storefront.models.cart import Cart
from storefront.models.cart_item import CartItem
from storefront.models.product import Product

logger = logging.getLogger(__name__)

_ITEM_COLUMNS = (
    CartItem.id, CartItem.cart_id, CartItem.product_id, CartItem.quantity,
)
_PRODUCT_COLUMNS = (
    Product.id, Product.title, Product.price, Product.stock,
    Product.is_active, Product.thumbnail,
)


def _item_record(row) -> CartItemRecord:
    return CartItemRecord(
        id=CartItemId(row.id),
        cart_id=CartId(row.cart_id),
        product_id=ProductId(row.product_id),
        quantity=row.quantity,
    )


def _product_snapshot(row) -> ProductSnapshot:
    return ProductSnapshot(
        id=ProductId(row.id),
        title=row.title,
        price=row.price,
        stock=row.stock,
        is_active=row.is_active,
        thumbnail=row.thumbnail,
    )


class SqlProductCatalog:
    """Read-only product lookups for the cart engine."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def get_by_id(self, product_id: ProductId) -> ProductSnapshot | None:
        result = await self._db.execute(
            select(*_PRODUCT_COLUMNS).where(Product.id == product_id),
        )
        row = result.first()
        return _product_snapshot(row) if row else None

    async def get_many(
        self, product_ids: list[ProductId],
    ) -> dict[ProductId, ProductSnapshot]:
        if not product_ids:
            return {}
        result = await self._db.execute(
            select(*_PRODUCT_COLUMNS).where(Product.id.in_(set(product_ids))),
        )
        return {
            ProductId(row.id): _product_snapshot(row) for row in result.all()
        }


class SqlCartStore:
    """Cart and line-item persistence."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def get_by_owner(self, owner_id: OwnerId) -> CartRecord | None:
        result = await self._db.execute(
            select(Cart.id, Cart.owner_id).where(Cart.owner_id == owner_id),
        )
        row = result.first()
        if row is None:
            return None
        items = await self._db.execute(
            select(*_ITEM_COLUMNS)
            .where(CartItem.cart_id == row.id)
            .order_by(CartItem.id),
        )
        return CartRecord(
            id=CartId(row.id),
            owner_id=OwnerId(row.owner_id),
            items=tuple(_item_record(r) for r in items.all()),
        )

    async def create(self, owner_id: OwnerId) -> CartRecord:
        cart = Cart(owner_id=owner_id)
        self._db.add(cart)
        await self._db.flush()
        await self._db.commit()
        logger.info(
            "Cart created", extra={"owner_id": owner_id, "cart_id": cart.id},
        )
        return CartRecord(id=CartId(cart.id), owner_id=owner_id)

    async def get_or_create(self, owner_id: OwnerId) -> CartRecord:
        cart = await self.get_by_owner(owner_id)
        if cart is not None:
            return cart
        try:
            return await self.create(owner_id)
        except IntegrityError:
            await self._db.rollback()
            cart = await self.get_by_owner(owner_id)
            if cart is None:
                raise
            return cart

    async def get_item(
        self, cart_id: CartId, product_id: ProductId,
    ) -> CartItemRecord | None:
        result = await self._db.execute(
            select(*_ITEM_COLUMNS).where(
                CartItem.cart_id == cart_id, CartItem.product_id == product_id,
            ),
        )
        row = result.first()
        return _item_record(row) if row else None

    async def merge_item(
        self, cart_id: CartId, product_id: ProductId, quantity: int,
    ) -> MergeResult:
        """Insert a line, or increment the existing one if it stays within stock."""
        row = await self._conditional_increment(cart_id, product_id, quantity)
        if row is not None:
            await self._db.commit()
            return MergeResult(
                applied=True,
                existing_quantity=row.quantity - quantity,
                item=_item_record(row),
            )

        existing = await self.get_item(cart_id, product_id)
        if existing is not None:
            return MergeResult(applied=False, existing_quantity=existing.quantity)

        item = CartItem(cart_id=cart_id, product_id=product_id, quantity=quantity)
        try:
            self._db.add(item)
            await self._db.flush()
            await self._db.commit()
        except IntegrityError:
            await self._db.rollback()
            logger.info(
                "Concurrent first add detected, retrying as merge",
                extra={"cart_id": cart_id, "product_id": product_id},
            )
            return await self._retry_merge(cart_id, product_id, quantity)
        return MergeResult(
            applied=True,
            existing_quantity=0,
            item=CartItemRecord(
                id=CartItemId(item.id), cart_id=cart_id,
                product_id=product_id, quantity=quantity,
            ),
        )

    async def set_item_quantity(
        self, cart_id: CartId, product_id: ProductId, quantity: int,
    ) -> CartItemRecord | None:
        """Overwrite an existing line's quantity; None if the line is gone."""
        result = await self._db.execute(
            update(CartItem)
            .where(
                CartItem.cart_id == cart_id, CartItem.product_id == product_id,
            )
            .values(quantity=quantity)
            .returning(*_ITEM_COLUMNS)
            .execution_options(synchronize_session=False),
        )
        row = result.first()
        if row is None:
            await self._db.rollback()
            return None
        await self._db.commit()
        return _item_record(row)

    async def delete_item(self, item_id: CartItemId) -> None:
        await self._db.execute(
            delete(CartItem)
            .where(CartItem.id == item_id)
            .execution_options(synchronize_session=False),
        )
        await self._db.commit()

    async def delete_all_items(self, cart_id: CartId) -> None:
        await self._db.execute(
            delete(CartItem)
            .where(CartItem.cart_id == cart_id)
            .execution_options(synchronize_session=False),
        )
        await self._db.commit()

    # ─── internals ──────────────────────────────────────────────

    async def _conditional_increment(
        self, cart_id: CartId, product_id: ProductId, quantity: int,
    ):
        # NULL stock (missing or inactive product) makes the guard false.
        live_stock = (
            select(Product.stock)
            .where(Product.id == product_id, Product.is_active.is_(True))
            .scalar_subquery()
        )
        result = await self._db.execute(
            update(CartItem)
            .where(
                CartItem.cart_id == cart_id,
                CartItem.product_id == product_id,
                CartItem.quantity + quantity <= live_stock,
            )
            .values(quantity=CartItem.quantity + quantity)
            .returning(*_ITEM_COLUMNS)
            .execution_options(synchronize_session=False),
        )
        return result.first()

    async def _retry_merge(
        self, cart_id: CartId, product_id: ProductId, quantity: int,
    ) -> MergeResult:
        row = await self._conditional_increment(cart_id, product_id, quantity)
        if row is not None:
            await self._db.commit()
            return MergeResult(
                applied=True,
                existing_quantity=row.quantity - quantity,
                item=_item_record(row),
            )
        existing = await self.get_item(cart_id, product_id)
        return MergeResult(
            applied=False,
            existing_quantity=existing.quantity if existing else 0,
        )
