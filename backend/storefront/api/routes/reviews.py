"""Review Routes — product ratings and the cached products.rating average.

Invariants:
    - Anyone may read a product's reviews; writing needs a signed-in user
    - One review per (product, user); inactive products cannot be reviewed
    - Only the author (or an admin) may update or delete a review
    - products.rating is recomputed in the same transaction as every review
      write, so the listing never shows a stale average after a response

Design Decisions:
    - Column selects joined to users/products: responses embed the author or
      product summary without loading ORM relationships
"""

import logging

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.dependencies import get_current_user
from storefront.api.routes.products import get_product_or_404
from storefront.core.authorize import require
from storefront.core.cart_view import to_money
from storefront.core.domain_types import (
    Capability, Identity, Resource, ResourceKind,
)
from storefront.core.errors import BadRequestError, ResourceNotFoundError
from storefront.core.ratings import average_rating
from storefront.infrastructure.database import get_db
from storefront.models.product import Product
from storefront.models.review import Review
from storefront.models.user import User
from storefront.schemas.review import ReviewCreate, ReviewUpdate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["reviews"])

_REVIEW_COLUMNS = (
    Review.id, Review.product_id, Review.user_id,
    Review.rating, Review.comment, Review.created_at,
)


def _serialize_review(row) -> dict:
    return {
        "id": row.id,
        "productId": row.product_id,
        "userId": row.user_id,
        "rating": row.rating,
        "comment": row.comment,
        "createdAt": row.created_at.isoformat(),
    }


def _with_author(row) -> dict:
    review = _serialize_review(row)
    review["user"] = {"id": row.user_id, "username": row.username, "email": row.email}
    return review


def _authored_reviews():
    return (
        select(*_REVIEW_COLUMNS, User.username, User.email)
        .join(User, User.id == Review.user_id)
    )


async def _load_with_author(review_id: int, db: AsyncSession) -> dict:
    row = (
        await db.execute(_authored_reviews().where(Review.id == review_id))
    ).one()
    return _with_author(row)


async def _get_review_or_404(review_id: int, db: AsyncSession) -> Review:
    result = await db.execute(select(Review).where(Review.id == review_id))
    review = result.scalar_one_or_none()
    if review is None:
        raise ResourceNotFoundError("Review")
    return review


async def _refresh_product_rating(product_id: int, db: AsyncSession) -> None:
    ratings = (
        await db.execute(select(Review.rating).where(Review.product_id == product_id))
    ).scalars().all()
    await db.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(rating=average_rating(list(ratings)))
    )


@router.get("/products/{product_id}/reviews")
async def list_product_reviews(
    product_id: int = Path(ge=1), db: AsyncSession = Depends(get_db),
):
    await get_product_or_404(product_id, db)
    rows = (
        await db.execute(
            _authored_reviews()
            .where(Review.product_id == product_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
    ).all()
    return {
        "status": "success",
        "results": len(rows),
        "data": {
            "reviews": [_with_author(r) for r in rows],
            "averageRating": to_money(average_rating([r.rating for r in rows])),
            "totalReviews": len(rows),
        },
    }


@router.post(
    "/products/{product_id}/reviews", status_code=status.HTTP_201_CREATED,
)
async def create_review(
    body: ReviewCreate,
    product_id: int = Path(ge=1),
    user: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    product = await get_product_or_404(product_id, db)
    if not product.is_active:
        raise BadRequestError("Cannot review inactive product")

    existing = await db.execute(
        select(Review.id).where(
            Review.product_id == product_id, Review.user_id == user.user_id,
        ),
    )
    if existing.first() is not None:
        raise BadRequestError("You have already reviewed this product")

    review = Review(
        product_id=product_id, user_id=user.user_id,
        rating=body.rating, comment=body.comment,
    )
    db.add(review)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise BadRequestError("You have already reviewed this product") from e
    await _refresh_product_rating(product_id, db)
    await db.commit()

    logger.info(
        "Review created",
        extra={"review_id": review.id, "product_id": product_id, "user_id": user.user_id},
    )
    return {
        "status": "success",
        "message": "Review created successfully",
        "data": {"review": await _load_with_author(review.id, db)},
    }


@router.get("/reviews/my-reviews")
async def list_my_reviews(
    user: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows = (
        await db.execute(
            select(*_REVIEW_COLUMNS, Product.title, Product.thumbnail)
            .join(Product, Product.id == Review.product_id)
            .where(Review.user_id == user.user_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
    ).all()
    reviews = []
    for row in rows:
        review = _serialize_review(row)
        review["product"] = {
            "id": row.product_id, "title": row.title, "thumbnail": row.thumbnail,
        }
        reviews.append(review)
    return {"status": "success", "results": len(reviews), "data": {"reviews": reviews}}


@router.put("/reviews/{review_id}")
async def update_review(
    body: ReviewUpdate,
    review_id: int = Path(ge=1),
    user: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    review = await _get_review_or_404(review_id, db)
    require(
        user, Resource(kind=ResourceKind.REVIEW, owner_id=review.user_id),
        Capability.WRITE, message="You can only update your own reviews",
    )
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(review, field, value)
    await _refresh_product_rating(review.product_id, db)
    await db.commit()

    logger.info("Review updated", extra={"review_id": review_id, "user_id": user.user_id})
    return {
        "status": "success",
        "message": "Review updated successfully",
        "data": {"review": await _load_with_author(review_id, db)},
    }


@router.delete("/reviews/{review_id}")
async def delete_review(
    review_id: int = Path(ge=1),
    user: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    review = await _get_review_or_404(review_id, db)
    require(
        user, Resource(kind=ResourceKind.REVIEW, owner_id=review.user_id),
        Capability.WRITE, message="You do not have permission to delete this review",
    )
    product_id = review.product_id
    await db.delete(review)
    await _refresh_product_rating(product_id, db)
    await db.commit()

    logger.info("Review deleted", extra={"review_id": review_id, "user_id": user.user_id})
    return {
        "status": "success",
        "message": "Review deleted successfully",
        "data": {"reviewId": review_id},
    }
