"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - OwnerId, ProductId, CartId, CartItemId wrap ints; never use bare int ids in domain logic
    - Snapshots are frozen: the core never mutates catalog or store state in place
    - Money is Decimal end-to-end inside the core; floats only at the JSON boundary
    - All valid states encoded as Enums, no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - Frozen dataclasses for records: stores return values, not ORM rows, so the
      engine works the same against SQL and in-memory stores
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

OwnerId = NewType("OwnerId", int)
ProductId = NewType("ProductId", int)
CartId = NewType("CartId", int)
CartItemId = NewType("CartItemId", int)


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """User roles: maps to DB `role` column."""
    USER = "USER"
    ADMIN = "ADMIN"


class Capability(str, Enum):
    """What an identity may do with a resource. Ordered NONE < READ < WRITE."""
    NONE = "none"
    READ = "read"
    WRITE = "write"


class ResourceKind(str, Enum):
    PRODUCT = "product"
    CART = "cart"
    REVIEW = "review"
    USER = "user"


# ─── Records ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class ProductSnapshot:
    """Point-in-time view of a product as the cart sees it."""
    id: ProductId
    title: str
    price: Decimal
    stock: int
    is_active: bool = True
    thumbnail: str | None = None


@dataclass(frozen=True)
class CartItemRecord:
    id: CartItemId
    cart_id: CartId
    product_id: ProductId
    quantity: int


@dataclass(frozen=True)
class CartRecord:
    """A cart with its line items in insertion order."""
    id: CartId
    owner_id: OwnerId
    items: tuple[CartItemRecord, ...] = field(default_factory=tuple)

    def find_item(self, product_id: ProductId) -> CartItemRecord | None:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None


@dataclass(frozen=True)
class MergeResult:
    """Outcome of an atomic add-or-increment on one (cart, product) line.

    applied=False means the increment would exceed stock; existing_quantity
    then holds the quantity that blocked it.
    """
    applied: bool
    existing_quantity: int = 0
    item: CartItemRecord | None = None


@dataclass(frozen=True)
class Identity:
    """Authenticated caller."""
    user_id: OwnerId
    role: Role = Role.USER


@dataclass(frozen=True)
class Resource:
    kind: ResourceKind
    owner_id: OwnerId | None = None
