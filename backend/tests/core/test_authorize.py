"""Authorization — capability decisions per role and resource.

Tests cover:
    - ADMIN writes everything
    - USER reads products, never writes them
    - Cart: owner writes, anyone else gets NONE
    - Review: author writes, anyone else reads
    - User accounts: ADMIN only
    - require() raises ForbiddenError with the resource-specific or given message
"""

import pytest

from storefront.core.authorize import authorize, can, require
from storefront.core.domain_types import (
    Capability, Identity, OwnerId, Resource, ResourceKind, Role,
)
from storefront.core.errors import ForbiddenError

USER = Identity(user_id=OwnerId(1))
OTHER = Identity(user_id=OwnerId(2))
ADMIN = Identity(user_id=OwnerId(3), role=Role.ADMIN)
PRODUCT = Resource(ResourceKind.PRODUCT)
USER_CART = Resource(ResourceKind.CART, owner_id=OwnerId(1))
USER_REVIEW = Resource(ResourceKind.REVIEW, owner_id=OwnerId(1))
ACCOUNTS = Resource(ResourceKind.USER)


def test_admin_writes_everything():
    assert authorize(ADMIN, PRODUCT) == Capability.WRITE
    assert authorize(ADMIN, USER_CART) == Capability.WRITE


def test_user_reads_products():
    assert authorize(USER, PRODUCT) == Capability.READ
    assert can(USER, PRODUCT, Capability.READ)
    assert not can(USER, PRODUCT, Capability.WRITE)


def test_cart_owner_writes_own_cart():
    assert authorize(USER, USER_CART) == Capability.WRITE


def test_other_user_gets_nothing_on_cart():
    assert authorize(OTHER, USER_CART) == Capability.NONE
    assert not can(OTHER, USER_CART, Capability.READ)


def test_require_passes_when_allowed():
    require(USER, USER_CART, Capability.WRITE)
    require(ADMIN, PRODUCT, Capability.WRITE)


def test_require_on_foreign_cart_message():
    with pytest.raises(ForbiddenError) as exc:
        require(OTHER, USER_CART, Capability.WRITE)
    assert exc.value.http_status == 403
    assert exc.value.message == "Forbidden: You can only access your own resources"


def test_require_product_write_message():
    with pytest.raises(ForbiddenError) as exc:
        require(USER, PRODUCT, Capability.WRITE)
    assert exc.value.message == (
        "Forbidden: You do not have permission to perform this action"
    )


def test_review_author_writes_others_read():
    assert authorize(USER, USER_REVIEW) == Capability.WRITE
    assert authorize(OTHER, USER_REVIEW) == Capability.READ
    assert authorize(ADMIN, USER_REVIEW) == Capability.WRITE


def test_only_admin_manages_accounts():
    assert authorize(USER, ACCOUNTS) == Capability.NONE
    assert authorize(ADMIN, ACCOUNTS) == Capability.WRITE


def test_require_with_explicit_message():
    with pytest.raises(ForbiddenError) as exc:
        require(
            OTHER, USER_REVIEW, Capability.WRITE,
            message="You can only update your own reviews",
        )
    assert exc.value.message == "You can only update your own reviews"
