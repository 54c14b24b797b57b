"""Product Routes — public catalog reads and admin-only writes.

Invariants:
    - Listing shows active products only, paginated by skip/limit (limit 1-100)
    - Default order is newest first; sortBy/order pick another column, id breaks ties
    - /categories is declared before /{product_id} so it never parses as an id
    - Writes require WRITE on the product resource (core/authorize.py): admins only
    - Update accepts PUT and PATCH with the same partial-update semantics
    - Delete is soft: is_active=False keeps rows referenced by carts intact
    - Prices rendered as plain floats rounded to 2 places

Design Decisions:
    - ORM access inline in routes: plain pass-through persistence, no invariants
      worth a repository (the cart core goes through CartStore instead)
"""

import logging
import math
from typing import Literal

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.dependencies import get_current_user
from storefront.core.authorize import require
from storefront.core.cart_view import to_money
from storefront.core.domain_types import (
    Capability, Identity, Resource, ResourceKind,
)
from storefront.core.errors import ResourceNotFoundError
from storefront.infrastructure.database import get_db
from storefront.models.product import Product
from storefront.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/products", tags=["products"])

_PRODUCT = Resource(kind=ResourceKind.PRODUCT)

SortField = Literal["createdAt", "price", "title", "stock", "rating"]

_SORT_COLUMNS = {
    "createdAt": Product.created_at,
    "price": Product.price,
    "title": Product.title,
    "stock": Product.stock,
    "rating": Product.rating,
}


def serialize_product(product: Product) -> dict:
    return {
        "id": product.id,
        "title": product.title,
        "description": product.description,
        "price": to_money(product.price),
        "stock": product.stock,
        "brand": product.brand,
        "category": product.category,
        "thumbnail": product.thumbnail,
        "rating": to_money(product.rating),
        "isActive": product.is_active,
        "createdAt": product.created_at.isoformat(),
    }


async def get_product_or_404(product_id: int, db: AsyncSession) -> Product:
    result = await db.execute(select(Product).where(Product.id == product_id))
    product = result.scalar_one_or_none()
    if product is None:
        raise ResourceNotFoundError("Product")
    return product


@router.get("")
async def list_products(
    limit: int = Query(20, ge=1, le=100),
    skip: int = Query(0, ge=0),
    category: str | None = Query(None),
    sort_by: SortField = Query("createdAt", alias="sortBy"),
    order: Literal["asc", "desc"] = Query("desc"),
    db: AsyncSession = Depends(get_db),
):
    """List active products with pagination and sorting."""
    conditions = [Product.is_active.is_(True)]
    if category:
        conditions.append(Product.category == category.lower())

    column = _SORT_COLUMNS[sort_by]
    if order == "asc":
        ordering = (column.asc(), Product.id.asc())
    else:
        ordering = (column.desc(), Product.id.desc())

    query = (
        select(Product)
        .where(*conditions)
        .order_by(*ordering)
        .limit(limit)
        .offset(skip)
    )
    products = (await db.execute(query)).scalars().all()
    total = (
        await db.execute(select(func.count(Product.id)).where(*conditions))
    ).scalar_one()

    return {
        "status": "success",
        "results": len(products),
        "data": {
            "products": [serialize_product(p) for p in products],
            "total": total,
            "skip": skip,
            "limit": limit,
            "pages": math.ceil(total / limit),
        },
    }


@router.get("/categories")
async def list_categories(db: AsyncSession = Depends(get_db)):
    """Distinct categories of active products, alphabetical."""
    result = await db.execute(
        select(Product.category)
        .where(Product.is_active.is_(True), Product.category.is_not(None))
        .distinct()
        .order_by(Product.category)
    )
    categories = list(result.scalars().all())
    return {
        "status": "success",
        "results": len(categories),
        "data": {"categories": categories},
    }


@router.get("/{product_id}")
async def get_product(
    product_id: int = Path(ge=1), db: AsyncSession = Depends(get_db),
):
    product = await get_product_or_404(product_id, db)
    return {"status": "success", "data": {"product": serialize_product(product)}}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    body: ProductCreate,
    user: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    require(user, _PRODUCT, Capability.WRITE)
    product = Product(**body.model_dump())
    db.add(product)
    await db.commit()
    await db.refresh(product)
    logger.info("Product created", extra={"product_id": product.id})
    return {
        "status": "success",
        "message": "Product created successfully",
        "data": {"product": serialize_product(product)},
    }


@router.api_route("/{product_id}", methods=["PUT", "PATCH"])
async def update_product(
    body: ProductUpdate,
    product_id: int = Path(ge=1),
    user: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Partial update: only fields present in the body are written."""
    require(user, _PRODUCT, Capability.WRITE)
    product = await get_product_or_404(product_id, db)
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(product, field, value)
    await db.commit()
    await db.refresh(product)
    logger.info("Product updated", extra={"product_id": product.id})
    return {
        "status": "success",
        "message": "Product updated successfully",
        "data": {"product": serialize_product(product)},
    }


@router.delete("/{product_id}")
async def delete_product(
    product_id: int = Path(ge=1),
    user: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Soft delete: existing cart lines stay readable but cannot grow."""
    require(user, _PRODUCT, Capability.WRITE)
    product = await get_product_or_404(product_id, db)
    product.is_active = False
    await db.commit()
    logger.info("Product deactivated", extra={"product_id": product_id})
    return {
        "status": "success",
        "message": "Product deleted successfully",
        "data": {"productId": product_id},
    }
