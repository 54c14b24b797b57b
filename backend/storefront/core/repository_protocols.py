"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - merge_item is a single atomic read-modify-write per (cart, product):
      the increment is applied only if the resulting quantity fits live stock

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE these records are never async themselves;
      the shell orchestrates the async calls around the pure logic
"""

from typing import Protocol

from storefront.core.domain_types import (
    CartId, CartItemId, CartItemRecord, CartRecord, MergeResult,
    OwnerId, ProductId, ProductSnapshot,
)


class ProductCatalog(Protocol):
    """Contract for read-only product lookups: implemented by shell."""
    async def get_by_id(self, product_id: ProductId) -> ProductSnapshot | None: ...
    async def get_many(
        self, product_ids: list[ProductId],
    ) -> dict[ProductId, ProductSnapshot]: ...


class CartStore(Protocol):
    """Contract for cart persistence: implemented by shell."""
    async def get_by_owner(self, owner_id: OwnerId) -> CartRecord | None: ...
    async def create(self, owner_id: OwnerId) -> CartRecord: ...
    async def get_or_create(self, owner_id: OwnerId) -> CartRecord: ...
    async def get_item(
        self, cart_id: CartId, product_id: ProductId,
    ) -> CartItemRecord | None: ...
    async def merge_item(
        self, cart_id: CartId, product_id: ProductId, quantity: int,
    ) -> MergeResult: ...
    async def set_item_quantity(
        self, cart_id: CartId, product_id: ProductId, quantity: int,
    ) -> CartItemRecord | None: ...
    async def delete_item(self, item_id: CartItemId) -> None: ...
    async def delete_all_items(self, cart_id: CartId) -> None: ...
