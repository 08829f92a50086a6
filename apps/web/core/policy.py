"""
Authorization policy - the single decision point for every API action.

``authorize`` is a pure function over a principal and a snapshot of the
target's ownership. Callers resolve ownership first (see
``apps.web.restaurant.ownership``); the policy never touches storage.

Rules, first match wins:
1. Admins may do everything except place orders.
2. Catalog reads are open to anyone, signed in or not.
3. Restaurant and menu writes need the owner of the target restaurant.
4. Only customers place orders.
5. Customers read their own orders.
6. Restaurant orders and status updates need the owner of the restaurant.
7. Everything else is denied.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from apps.web.core.exceptions import (
    Forbidden,
    NotResourceOwner,
    RoleNotPermitted,
    Unauthenticated,
)
from apps.web.core.identity import Principal

logger = logging.getLogger(__name__)


class Action(str, Enum):
    """Actions the policy decides on."""

    READ_RESTAURANT = "read_restaurant"
    WRITE_RESTAURANT = "write_restaurant"
    READ_MENU = "read_menu"
    WRITE_MENU = "write_menu"
    DELETE_MENU = "delete_menu"
    CREATE_ORDER = "create_order"
    READ_OWN_ORDERS = "read_own_orders"
    READ_RESTAURANT_ORDERS = "read_restaurant_orders"
    UPDATE_ORDER_STATUS = "update_order_status"
    ADMIN_READ_ALL = "admin_read_all"


class DenyReason(str, Enum):
    """Why a decision was a deny."""

    NOT_RESOURCE_OWNER = "not_resource_owner"
    ROLE_NOT_PERMITTED = "role_not_permitted"


CATALOG_ACTIONS = frozenset({Action.READ_RESTAURANT, Action.READ_MENU})
OWNER_WRITE_ACTIONS = frozenset(
    {Action.WRITE_RESTAURANT, Action.WRITE_MENU, Action.DELETE_MENU}
)
RESTAURANT_ORDER_ACTIONS = frozenset(
    {Action.READ_RESTAURANT_ORDERS, Action.UPDATE_ORDER_STATUS}
)

_DENIALS: dict[DenyReason, type[Forbidden]] = {
    DenyReason.NOT_RESOURCE_OWNER: NotResourceOwner,
    DenyReason.ROLE_NOT_PERMITTED: RoleNotPermitted,
}


@dataclass(frozen=True)
class Resource:
    """
    Ownership snapshot of the target of an action.

    owner_id is the resolved owner of the restaurant the target belongs to;
    customer_id is the customer an order (or order listing) belongs to.
    """

    owner_id: int | None = None
    customer_id: int | None = None


@dataclass(frozen=True)
class Decision:
    """Outcome of an authorization check."""

    action: Action
    allowed: bool
    reason: DenyReason | None = None

    @classmethod
    def allow(cls, action: Action) -> "Decision":
        return cls(action=action, allowed=True)

    @classmethod
    def deny(cls, action: Action, reason: DenyReason) -> "Decision":
        return cls(action=action, allowed=False, reason=reason)

    def __bool__(self) -> bool:
        return self.allowed

    def enforce(self) -> None:
        """
        Raise the matching Forbidden error if this decision is a deny.

        Raises:
            NotResourceOwner: If the principal does not own the target
            RoleNotPermitted: If the principal's role may not act at all
        """
        if self.allowed:
            return
        reason = self.reason or DenyReason.ROLE_NOT_PERMITTED
        logger.warning("Denied %s: %s", self.action.value, reason.value)
        raise _DENIALS[reason](f"Not authorized to {self.action.value}")


def authorize(
    principal: Principal | None,
    action: Action,
    resource: Resource | None = None,
) -> Decision:
    """
    Decide whether ``principal`` may perform ``action`` on ``resource``.

    Raises:
        Unauthenticated: If there is no principal and the action is not a catalog read
    """
    resource = resource or Resource()

    if principal is None:
        if action in CATALOG_ACTIONS:
            return Decision.allow(action)
        raise Unauthenticated("Authentication required")

    # 1. Admins act on everything, but never place orders as a customer
    if principal.is_admin and action is not Action.CREATE_ORDER:
        return Decision.allow(action)

    # 2. Catalog reads; visibility filtering happens in the querysets
    if action in CATALOG_ACTIONS:
        return Decision.allow(action)

    # 3. Restaurant and menu management
    if action in OWNER_WRITE_ACTIONS:
        if _owns(principal, resource):
            return Decision.allow(action)
        return Decision.deny(action, DenyReason.NOT_RESOURCE_OWNER)

    # 4. Order placement
    if action is Action.CREATE_ORDER and principal.is_customer:
        return Decision.allow(action)

    # 5. A customer's own orders
    if action is Action.READ_OWN_ORDERS and principal.is_customer:
        if resource.customer_id == principal.id:
            return Decision.allow(action)
        return Decision.deny(action, DenyReason.NOT_RESOURCE_OWNER)

    # 6. Orders of a restaurant
    if action in RESTAURANT_ORDER_ACTIONS:
        if _owns(principal, resource):
            return Decision.allow(action)
        return Decision.deny(action, DenyReason.NOT_RESOURCE_OWNER)

    # 7. Default
    return Decision.deny(action, DenyReason.ROLE_NOT_PERMITTED)


def _owns(principal: Principal, resource: Resource) -> bool:
    return (
        principal.is_owner
        and resource.owner_id is not None
        and resource.owner_id == principal.id
    )
