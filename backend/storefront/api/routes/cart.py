"""Cart Routes — the caller's own cart; no owner id ever appears in the URL.

Invariants:
    - Every route depends on get_current_user; owner_id = caller's user id
    - Routes never contain business logic (delegate to CartEngine)
    - Responses wrap the CartView: {"status": "success", "message"?, "data": {"cart": ...}}
"""

from fastapi import APIRouter, Depends, Path, status

from storefront.api.dependencies import get_cart_engine, get_current_user
from storefront.core.domain_types import Identity, ProductId
from storefront.schemas.cart import AddItemRequest, QuantityUpdate
from storefront.services.cart_engine import CartEngine

router = APIRouter(prefix="/api/v1/cart", tags=["cart"])


def _envelope(view: dict, message: str | None = None) -> dict:
    body: dict = {"status": "success"}
    if message:
        body["message"] = message
    body["data"] = view
    return body


@router.get("")
async def get_cart(
    user: Identity = Depends(get_current_user),
    engine: CartEngine = Depends(get_cart_engine),
):
    """Get the caller's cart, creating an empty one on first access."""
    return _envelope(await engine.get_or_create_cart(user.user_id))


@router.post("/items", status_code=status.HTTP_201_CREATED)
async def add_to_cart(
    body: AddItemRequest,
    user: Identity = Depends(get_current_user),
    engine: CartEngine = Depends(get_cart_engine),
):
    view = await engine.add_item(
        user.user_id, ProductId(body.product_id), body.quantity,
    )
    return _envelope(view, "Item added to cart")


@router.put("/items/{product_id}")
async def update_cart_item(
    body: QuantityUpdate,
    product_id: int = Path(ge=1),
    user: Identity = Depends(get_current_user),
    engine: CartEngine = Depends(get_cart_engine),
):
    view = await engine.update_item_quantity(
        user.user_id, ProductId(product_id), body.quantity,
    )
    return _envelope(view, "Cart updated")


@router.delete("/items/{product_id}")
async def remove_from_cart(
    product_id: int = Path(ge=1),
    user: Identity = Depends(get_current_user),
    engine: CartEngine = Depends(get_cart_engine),
):
    view = await engine.remove_item(user.user_id, ProductId(product_id))
    return _envelope(view, "Item removed from cart")


@router.delete("")
async def clear_cart(
    user: Identity = Depends(get_current_user),
    engine: CartEngine = Depends(get_cart_engine),
):
    return _envelope(await engine.clear_cart(user.user_id), "Cart cleared")
