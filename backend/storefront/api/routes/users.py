"""User Admin Routes — account listing, role changes and (de)activation.

Invariants:
    - Every route requires WRITE on the user resource: admins only
    - An admin cannot demote or deactivate their own account
    - Accounts are never hard-deleted here; deactivation blocks authentication
      (api/dependencies.get_current_user) while carts and reviews stay intact
"""

import logging
import math

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.dependencies import get_current_user
from storefront.core.authorize import require
from storefront.core.domain_types import (
    Capability, Identity, Resource, ResourceKind, Role,
)
from storefront.core.errors import BadRequestError, ResourceNotFoundError
from storefront.infrastructure.database import get_db
from storefront.models.user import User
from storefront.schemas.user import RoleUpdate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/users", tags=["users"])

_USERS = Resource(kind=ResourceKind.USER)


def serialize_user(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "username": user.username,
        "role": user.role,
        "isActive": user.is_active,
        "createdAt": user.created_at.isoformat(),
    }


async def get_user_or_404(user_id: int, db: AsyncSession) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise ResourceNotFoundError("User")
    return user


@router.get("")
async def list_users(
    limit: int = Query(50, ge=1, le=100),
    skip: int = Query(0, ge=0),
    role: str | None = Query(None),
    is_active: bool | None = Query(None, alias="isActive"),
    admin: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    require(admin, _USERS, Capability.WRITE)
    conditions = []
    if role is not None:
        conditions.append(User.role == role.upper())
    if is_active is not None:
        conditions.append(User.is_active.is_(is_active))

    users = (
        await db.execute(
            select(User)
            .where(*conditions)
            .order_by(User.created_at.desc(), User.id.desc())
            .limit(limit)
            .offset(skip)
        )
    ).scalars().all()
    total = (
        await db.execute(select(func.count(User.id)).where(*conditions))
    ).scalar_one()

    return {
        "status": "success",
        "results": len(users),
        "data": {
            "users": [serialize_user(u) for u in users],
            "total": total,
            "skip": skip,
            "limit": limit,
            "pages": math.ceil(total / limit),
        },
    }


@router.get("/{user_id}")
async def get_user(
    user_id: int = Path(ge=1),
    admin: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    require(admin, _USERS, Capability.WRITE)
    user = await get_user_or_404(user_id, db)
    return {"status": "success", "data": {"user": serialize_user(user)}}


@router.put("/{user_id}/role")
async def update_user_role(
    body: RoleUpdate,
    user_id: int = Path(ge=1),
    admin: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    require(admin, _USERS, Capability.WRITE)
    user = await get_user_or_404(user_id, db)
    if user.id == admin.user_id and body.role != Role.ADMIN:
        raise BadRequestError("You cannot change your own admin role")
    user.role = body.role.value
    await db.commit()
    await db.refresh(user)
    logger.info(
        "User role changed",
        extra={"user_id": user.id, "role": user.role, "changed_by": admin.user_id},
    )
    return {
        "status": "success",
        "message": "User role updated successfully",
        "data": {"user": serialize_user(user)},
    }


@router.put("/{user_id}/deactivate")
async def deactivate_user(
    user_id: int = Path(ge=1),
    admin: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    require(admin, _USERS, Capability.WRITE)
    user = await get_user_or_404(user_id, db)
    if user.id == admin.user_id:
        raise BadRequestError("You cannot deactivate your own account")
    return await _set_active(user, False, admin, db)


@router.put("/{user_id}/activate")
async def activate_user(
    user_id: int = Path(ge=1),
    admin: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    require(admin, _USERS, Capability.WRITE)
    user = await get_user_or_404(user_id, db)
    return await _set_active(user, True, admin, db)


async def _set_active(
    user: User, active: bool, admin: Identity, db: AsyncSession,
) -> dict:
    user.is_active = active
    await db.commit()
    await db.refresh(user)
    action = "activated" if active else "deactivated"
    logger.info(
        f"User {action}", extra={"user_id": user.id, "changed_by": admin.user_id},
    )
    return {
        "status": "success",
        "message": f"User {action} successfully",
        "data": {"user": serialize_user(user)},
    }
