"""Cart View — pure computation of the enriched cart read-model and its totals.

Invariants:
    - No IO, no DB: inputs are records + product snapshots, output is a JSON-ready dict
    - subtotal = price x quantity per line; totalPrice rounds the final sum, never per line
    - Money leaves the core as plain float with 2 decimal places (ROUND_HALF_UP)
    - Totals are never cached: every call recomputes from the snapshots given

Design Decisions:
    - Decimal arithmetic until the boundary: float sums drift (0.1 + 0.2) and the
      storefront shows totals to the cent
    - Lines whose product snapshot is missing are skipped rather than raising:
      the view reflects what the catalog can still price
"""

from decimal import Decimal, ROUND_HALF_UP

from storefront.core.domain_types import (
    CartItemRecord, CartRecord, ProductId, ProductSnapshot,
)

CENT = Decimal("0.01")


def to_money(amount: Decimal) -> float:
    """Round to cents (half-up) and convert to a plain JSON number."""
    return float(Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP))


def product_view(product: ProductSnapshot) -> dict:
    return {
        "id": product.id,
        "title": product.title,
        "price": to_money(product.price),
        "thumbnail": product.thumbnail,
        "stock": product.stock,
        "isActive": product.is_active,
    }


def line_subtotal(item: CartItemRecord, product: ProductSnapshot) -> Decimal:
    return Decimal(product.price) * item.quantity


def compute_totals(
    items: tuple[CartItemRecord, ...] | list[CartItemRecord],
    products: dict[ProductId, ProductSnapshot],
) -> tuple[int, float]:
    """(totalItems, totalPrice) over the priced lines."""
    total_items = 0
    total_price = Decimal("0")
    for item in items:
        product = products.get(item.product_id)
        if product is None:
            continue
        total_items += item.quantity
        total_price += line_subtotal(item, product)
    return total_items, to_money(total_price)


def build_cart_view(
    cart: CartRecord, products: dict[ProductId, ProductSnapshot],
) -> dict:
    """Build the CartView document for a cart. Pure, no IO."""
    lines = []
    for item in cart.items:
        product = products.get(item.product_id)
        if product is None:
            continue
        lines.append({
            "id": item.id,
            "productId": item.product_id,
            "quantity": item.quantity,
            "product": product_view(product),
            "subtotal": to_money(line_subtotal(item, product)),
        })
    total_items, total_price = compute_totals(cart.items, products)
    return {
        "cart": {
            "id": cart.id,
            "ownerId": cart.owner_id,
            "items": lines,
            "totalItems": total_items,
            "totalPrice": total_price,
        },
    }


def empty_cart_view(cart: CartRecord) -> dict:
    """View of a just-cleared cart, built without consulting any store."""
    return {
        "cart": {
            "id": cart.id,
            "ownerId": cart.owner_id,
            "items": [],
            "totalItems": 0,
            "totalPrice": 0,
        },
    }
