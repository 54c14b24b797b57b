"""Request Dependencies — authenticated caller and per-request cart engine.

Invariants:
    - get_current_user is the only source of owner identity for cart routes
    - Every failure raises UnauthorizedError (401) with a user-facing reason
    - Deleted or deactivated users are rejected even with a valid token

Design Decisions:
    - Header parsed by hand (not HTTPBearer): missing header, wrong scheme and
      empty token each get their own message
    - Engine built per request around the request's DB session
"""

import logging

from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import get_settings
from storefront.core.domain_types import Identity, OwnerId, Role
from storefront.core.errors import UnauthorizedError
from storefront.infrastructure.auth_tokens import (
    InvalidTokenError, TokenAuthenticator,
)
from storefront.infrastructure.database import get_db
from storefront.infrastructure.sql_repositories import (
    SqlCartStore, SqlProductCatalog,
)
from storefront.models.user import User
from storefront.services.cart_engine import CartEngine

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def get_authenticator() -> TokenAuthenticator:
    settings = get_settings()
    return TokenAuthenticator(
        settings.auth_token_secret, settings.auth_token_ttl_seconds,
    )


async def get_current_user(
    authorization: str | None = Header(None),
    authenticator: TokenAuthenticator = Depends(get_authenticator),
    db: AsyncSession = Depends(get_db),
) -> Identity:
    """Resolve the caller from `Authorization: Bearer <token>`."""
    if not authorization:
        raise UnauthorizedError("No authorization token provided")
    if not authorization.startswith(BEARER_PREFIX):
        raise UnauthorizedError(
            "Invalid authorization format. Use: Bearer <token>",
        )
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise UnauthorizedError("No token provided")

    try:
        claims = authenticator.verify(token)
    except InvalidTokenError as e:
        raise UnauthorizedError(str(e)) from e

    result = await db.execute(
        select(User.id, User.role, User.is_active).where(
            User.id == claims.user_id,
        ),
    )
    user = result.first()
    if user is None:
        raise UnauthorizedError("User no longer exists")
    if not user.is_active:
        raise UnauthorizedError("Account is deactivated")
    return Identity(user_id=OwnerId(user.id), role=Role(user.role))


def get_cart_engine(db: AsyncSession = Depends(get_db)) -> CartEngine:
    return CartEngine(SqlCartStore(db), SqlProductCatalog(db))
