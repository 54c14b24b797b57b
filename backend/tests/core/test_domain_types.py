"""Domain Types — verifies rich type definitions, enum values and record helpers.

Tests:
    - NewType wrappers exist and are callable
    - Enums have expected members and serialize to string
    - Records are frozen; CartRecord.find_item looks lines up by product
"""

import dataclasses
from decimal import Decimal

import pytest

from storefront.core.domain_types import (
    CartId, CartItemId, CartItemRecord, CartRecord, Capability,
    MergeResult, OwnerId, ProductId, ProductSnapshot, ResourceKind, Role,
)


def test_identity_types_wrap_int():
    assert OwnerId(7) == 7
    assert ProductId(7) == 7
    assert CartId(7) == 7
    assert CartItemId(7) == 7


def test_role_has_two_members():
    assert set(Role) == {Role.USER, Role.ADMIN}
    assert Role("ADMIN") is Role.ADMIN


def test_capability_values_serialize_to_string():
    assert [c.value for c in Capability] == ["none", "read", "write"]
    assert Capability.WRITE == "write"


def test_resource_kinds():
    assert {k.value for k in ResourceKind} == {"product", "cart", "review", "user"}


def test_snapshot_is_frozen():
    snapshot = ProductSnapshot(
        id=ProductId(1), title="Phone", price=Decimal("10.00"), stock=5,
    )
    assert snapshot.is_active is True
    assert snapshot.thumbnail is None
    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.stock = 4


def test_cart_record_find_item():
    line = CartItemRecord(
        id=CartItemId(1), cart_id=CartId(1),
        product_id=ProductId(10), quantity=2,
    )
    cart = CartRecord(id=CartId(1), owner_id=OwnerId(1), items=(line,))
    assert cart.find_item(ProductId(10)) is line
    assert cart.find_item(ProductId(11)) is None
    assert CartRecord(id=CartId(2), owner_id=OwnerId(2)).items == ()


def test_merge_result_defaults():
    rejected = MergeResult(applied=False, existing_quantity=3)
    assert rejected.item is None
    assert MergeResult(applied=True).existing_quantity == 0
