"""
ORDER LIFECYCLE DOMAIN RULES

This module defines the ONLY allowed lifecycle transitions
for Order entities.

placed → confirmed → preparing → ready_for_pickup → out_for_delivery → delivered
placed → cancelled   (only through cancel_order, inside the window)

Any strictly forward jump along the flow is an allowed advance; skipping
steps is allowed, going back or sideways is not.

DESIGN PRINCIPLES:
- No database writes
- No side effects
- Single source of truth
"""

from orders.models import Order
from orders.services.exceptions import InvalidOrderTransitionError

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    Order.STATUS_DELIVERED,
    Order.STATUS_CANCELLED,
}

CANCELLABLE_STATES = {
    Order.STATUS_PLACED,
}


def _forward_targets(status: str) -> set[str]:
    flow = Order.STATUS_FLOW
    index = flow.index(status)
    return set(flow[index + 1:])


ALLOWED_TRANSITIONS = {
    status: _forward_targets(status)
    for status in Order.STATUS_FLOW
    if status not in TERMINAL_STATES
}


# ============================================================
# DOMAIN RULES
# ============================================================


def is_known_status(status: str) -> bool:
    return status in dict(Order.STATUS_CHOICES)


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def can_cancel(*, status: str) -> bool:
    return status in CANCELLABLE_STATES


def validate_transition(*, order: Order, target_status: str):
    if not can_transition(
        from_status=order.status,
        to_status=target_status,
    ):
        raise InvalidOrderTransitionError(order.id, order.status, target_status)
