"""Cart Engine — the five cart operations over CartStore + ProductCatalog.

Invariants:
    - owner_id always comes from the authenticated identity (never a request parameter)
    - A line's quantity never exceeds product stock at mutation time
    - One line per (cart, product): adds for an existing product merge into it
    - Every returned view is rebuilt from live product prices (core/cart_view.py)
    - The engine never mutates the catalog; it only reads stock and price

Design Decisions:
    - Imperative shell around the pure view builder (ADR: pure core, IO at the edges)
    - Merge is delegated to CartStore.merge_item, a single conditional update, so
      two concurrent adds cannot both pass the stock check
    - Two distinct stock messages: "Only N items available" (absolute stock, used
      when the request alone exceeds it) vs "Cannot add Q more. Only R available"
      (remaining increment when merging); both are user-facing copy
"""

import logging

from storefront.core.cart_view import build_cart_view, empty_cart_view
from storefront.core.domain_types import (
    CartRecord, OwnerId, ProductId, ProductSnapshot,
)
from storefront.core.errors import (
    BadRequestError, ErrorContext, ResourceNotFoundError,
)
from storefront.core.repository_protocols import CartStore, ProductCatalog

logger = logging.getLogger(__name__)


class CartEngine:
    """Orchestrates cart mutations and view rendering for one request."""

    def __init__(self, store: CartStore, catalog: ProductCatalog):
        self.store = store
        self.catalog = catalog

    async def get_or_create_cart(self, owner_id: OwnerId) -> dict:
        cart = await self.store.get_or_create(owner_id)
        return await self._render(cart)

    async def add_item(
        self, owner_id: OwnerId, product_id: ProductId, quantity: int = 1,
    ) -> dict:
        """Add quantity of a product, merging into an existing line."""
        if quantity < 1:
            raise BadRequestError("Quantity must be at least 1")
        ctx = ErrorContext(owner_id=owner_id, product_id=product_id)
        product = await self._get_product_or_404(product_id, ctx)
        _check_addable(product, quantity, ctx)

        cart = await self.store.get_or_create(owner_id)
        result = await self.store.merge_item(cart.id, product_id, quantity)
        if not result.applied:
            remaining = max(product.stock - result.existing_quantity, 0)
            logger.warning(
                "Add rejected: merge would exceed stock",
                extra={
                    "owner_id": owner_id, "product_id": product_id,
                    "quantity": quantity, "cart_id": cart.id,
                },
            )
            raise BadRequestError(
                f"Cannot add {quantity} more. Only {remaining} available",
                ctx,
            )

        logger.info(
            "Item added to cart",
            extra={
                "owner_id": owner_id, "product_id": product_id,
                "quantity": quantity, "cart_id": cart.id,
            },
        )
        return await self._render_owner(owner_id)

    async def update_item_quantity(
        self, owner_id: OwnerId, product_id: ProductId, quantity: int,
    ) -> dict:
        """Set a line's quantity; quantity < 1 removes the line."""
        ctx = ErrorContext(owner_id=owner_id, product_id=product_id)
        cart = await self._get_cart_or_404(owner_id, ctx)
        item = cart.find_item(product_id)
        if item is None:
            raise ResourceNotFoundError("Cart item", context=ctx)
        product = await self._get_product_or_404(product_id, ctx)

        if quantity > product.stock:
            raise BadRequestError(
                f"Only {product.stock} items available", ctx,
            )
        if quantity < 1:
            await self.store.delete_item(item.id)
            logger.info(
                "Item removed via zero quantity",
                extra={"owner_id": owner_id, "product_id": product_id},
            )
            return await self._render_owner(owner_id)
        if not product.is_active and quantity > item.quantity:
            raise BadRequestError("Product is not available", ctx)

        updated = await self.store.set_item_quantity(cart.id, product_id, quantity)
        if updated is None:
            raise ResourceNotFoundError("Cart item", context=ctx)
        logger.info(
            "Cart item quantity updated",
            extra={
                "owner_id": owner_id, "product_id": product_id,
                "quantity": quantity, "cart_id": cart.id,
            },
        )
        return await self._render_owner(owner_id)

    async def remove_item(
        self, owner_id: OwnerId, product_id: ProductId,
    ) -> dict:
        ctx = ErrorContext(owner_id=owner_id, product_id=product_id)
        cart = await self._get_cart_or_404(owner_id, ctx)
        item = cart.find_item(product_id)
        if item is None:
            raise ResourceNotFoundError("Cart item", context=ctx)
        await self.store.delete_item(item.id)
        logger.info(
            "Item removed from cart",
            extra={"owner_id": owner_id, "product_id": product_id},
        )
        return await self._render_owner(owner_id)

    async def clear_cart(self, owner_id: OwnerId) -> dict:
        cart = await self._get_cart_or_404(
            owner_id, ErrorContext(owner_id=owner_id),
        )
        await self.store.delete_all_items(cart.id)
        logger.info(
            "Cart cleared",
            extra={"owner_id": owner_id, "cart_id": cart.id},
        )
        return empty_cart_view(cart)

    # ─── helpers ────────────────────────────────────────────────

    async def _get_product_or_404(
        self, product_id: ProductId, ctx: ErrorContext,
    ) -> ProductSnapshot:
        product = await self.catalog.get_by_id(product_id)
        if product is None:
            raise ResourceNotFoundError("Product", context=ctx)
        return product

    async def _get_cart_or_404(
        self, owner_id: OwnerId, ctx: ErrorContext,
    ) -> CartRecord:
        cart = await self.store.get_by_owner(owner_id)
        if cart is None:
            raise ResourceNotFoundError("Cart", context=ctx)
        return cart

    async def _render_owner(self, owner_id: OwnerId) -> dict:
        cart = await self.store.get_by_owner(owner_id)
        if cart is None:
            raise ResourceNotFoundError(
                "Cart", context=ErrorContext(owner_id=owner_id),
            )
        return await self._render(cart)

    async def _render(self, cart: CartRecord) -> dict:
        products = await self.catalog.get_many(
            [item.product_id for item in cart.items],
        )
        return build_cart_view(cart, products)


def _check_addable(
    product: ProductSnapshot, quantity: int, ctx: ErrorContext,
) -> None:
    """Stock/availability gate for add, checked before any cart write."""
    if not product.is_active:
        raise BadRequestError("Product is not available", ctx)
    if product.stock < 1:
        raise BadRequestError("Product is out of stock", ctx)
    if product.stock < quantity:
        raise BadRequestError(
            f"Only {product.stock} items available", ctx,
        )
