"""ORM Models — SQLAlchemy declarative models for all storefront entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Cart is the aggregate root for line items; one cart per user

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from storefront.models.user import User  # noqa: F401
from storefront.models.product import Product  # noqa: F401
from storefront.models.cart import Cart  # noqa: F401
from storefront.models.cart_item import CartItem  # noqa: F401
from storefront.models.review import Review  # noqa: F401
