"""Authorization — single decision function mapping (identity, resource) to a capability.

Invariants:
    - Pure: no IO, decisions depend only on the identity and resource given
    - ADMIN gets WRITE on every resource
    - Products are readable by everyone, writable only by ADMIN
    - Carts and reviews are writable by their owner (plus ADMIN); other users
      get NONE on a cart and READ on a review
    - User accounts are managed by ADMIN only

Design Decisions:
    - One function instead of per-route role/ownership checks: routes ask
      "what may this caller do" and compare, so the rules live in one place
"""

from storefront.core.domain_types import (
    Capability, Identity, Resource, ResourceKind, Role,
)
from storefront.core.errors import ForbiddenError

_RANK = {Capability.NONE: 0, Capability.READ: 1, Capability.WRITE: 2}


def authorize(identity: Identity, resource: Resource) -> Capability:
    """Decide what identity may do with resource."""
    if identity.role == Role.ADMIN:
        return Capability.WRITE
    is_owner = resource.owner_id is not None and resource.owner_id == identity.user_id
    if resource.kind == ResourceKind.PRODUCT:
        return Capability.READ
    if resource.kind == ResourceKind.CART:
        return Capability.WRITE if is_owner else Capability.NONE
    if resource.kind == ResourceKind.REVIEW:
        return Capability.WRITE if is_owner else Capability.READ
    return Capability.NONE


def can(identity: Identity, resource: Resource, needed: Capability) -> bool:
    return _RANK[authorize(identity, resource)] >= _RANK[needed]


def require(
    identity: Identity,
    resource: Resource,
    needed: Capability,
    message: str | None = None,
) -> None:
    """Raise ForbiddenError unless identity holds at least `needed` on resource."""
    if can(identity, resource, needed):
        return
    if message is None:
        if resource.kind == ResourceKind.CART:
            message = "Forbidden: You can only access your own resources"
        else:
            message = "Forbidden: You do not have permission to perform this action"
    raise ForbiddenError(message)
