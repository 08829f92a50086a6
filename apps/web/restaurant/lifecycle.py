"""
Order lifecycle - valid status and payment transitions.

    Pending -> Preparing -> Delivered
    Pending -> Cancelled
    Preparing -> Cancelled

Delivered and Cancelled are terminal. Requesting the current status of a
non-terminal order is a no-op; a terminal order rejects every request,
including its own status. Payment moves Pending -> Paid once.

Authorization is checked before reachability, so a principal who may not
touch the order learns nothing about its state.
"""

import logging

from apps.web.core.exceptions import InvalidTransition
from apps.web.core.identity import Principal
from apps.web.core.policy import Action, authorize
from apps.web.restaurant.models import Order, OrderStatus, PaymentStatus
from apps.web.restaurant.ownership import order_resource

logger = logging.getLogger(__name__)

TRANSITIONS: dict[str, frozenset[str]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in TRANSITIONS.items() if not targets
)

PAYMENT_TRANSITIONS: dict[str, frozenset[str]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PAID}),
    PaymentStatus.PAID: frozenset(),
}


def can_transition(current: str, requested: str) -> bool:
    """Whether ``requested`` is reachable from ``current`` in one step."""
    return requested in TRANSITIONS.get(current, frozenset())


def transition(order: Order, requested_status: str, principal: Principal) -> Order:
    """
    Move an order to ``requested_status``.

    Only ``status`` changes; the caller persists the order.

    Raises:
        NotResourceOwner / RoleNotPermitted: If the principal may not update
            this order's status
        InvalidTransition: If the status is not reachable from the current one
    """
    authorize(principal, Action.UPDATE_ORDER_STATUS, order_resource(order)).enforce()

    current = order.status
    if current in TERMINAL_STATUSES:
        raise InvalidTransition(
            f"Order is already {current}",
            details=[{"from": current, "to": requested_status}],
        )
    if requested_status == current:
        return order
    if not can_transition(current, requested_status):
        raise InvalidTransition(
            f"Cannot move order from {current} to {requested_status}",
            details=[{"from": current, "to": requested_status}],
        )

    order.status = requested_status
    logger.info(
        "Order %s status %s -> %s by %s %s",
        order.pk,
        current,
        requested_status,
        principal.role,
        principal.id,
    )
    return order


def record_payment(
    order: Order, requested_status: str, principal: Principal
) -> Order:
    """
    Move an order's payment status to ``requested_status``.

    Same authorization as status updates. Paid is final and cancelled
    orders cannot be marked paid.

    Raises:
        NotResourceOwner / RoleNotPermitted: If the principal may not update
            this order
        InvalidTransition: If the payment status is not reachable
    """
    authorize(principal, Action.UPDATE_ORDER_STATUS, order_resource(order)).enforce()

    current = order.payment_status
    if requested_status == current:
        return order
    if requested_status not in PAYMENT_TRANSITIONS.get(current, frozenset()):
        raise InvalidTransition(
            f"Cannot move payment from {current} to {requested_status}",
            details=[{"from": current, "to": requested_status}],
        )
    if order.status == OrderStatus.CANCELLED:
        raise InvalidTransition("Cannot mark a cancelled order as paid")

    order.payment_status = requested_status
    logger.info(
        "Order %s payment %s -> %s by %s %s",
        order.pk,
        current,
        requested_status,
        principal.role,
        principal.id,
    )
    return order
