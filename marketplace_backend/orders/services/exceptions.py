# orders/services/exceptions.py

"""
ORDER SERVICE ERRORS

State errors carry the current state and the attempted action so the API
layer (and tests) can report exactly what was refused.
"""

from __future__ import annotations


class OrderError(Exception):
    """Base exception for all order failures."""


class OrderNotFoundError(OrderError):
    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__(f"Order {order_id} does not exist")


class OrderPlacementError(OrderError):
    """Raised when a cart cannot be committed as an order."""


class InvalidOrderTransitionError(OrderError):
    def __init__(self, order_id, current_status: str, target_status: str):
        self.order_id = order_id
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            f"Order {order_id} cannot transition from "
            f"'{current_status}' to '{target_status}'"
        )


class CancellationWindowExpired(OrderError):
    """
    Cancellation refused: the deadline passed, or the order already left
    'placed' (early lock). Distinct from OrderNotFoundError so clients can
    route to the support flow only for this case.
    """

    def __init__(self, order_id, current_status: str, deadline, attempted_at):
        self.order_id = order_id
        self.current_status = current_status
        self.deadline = deadline
        self.attempted_at = attempted_at
        super().__init__(
            f"Order {order_id} can no longer be cancelled "
            f"(status '{current_status}', deadline {deadline.isoformat()}, "
            f"attempted {attempted_at.isoformat()})"
        )


class DeliveryAssignmentError(OrderError):
    """Raised when a delivery partner cannot be assigned in the order's current state."""


class DeliveryPartnerRequiredError(DeliveryAssignmentError):
    """A third-party order cannot leave the kitchen without an assigned partner."""

    def __init__(self, order_id, current_status: str, target_status: str):
        self.order_id = order_id
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            f"Order {order_id} needs a delivery partner before moving "
            f"from '{current_status}' to '{target_status}'"
        )


class TipError(OrderError):
    """Raised when a tip is refused (amount range, order state, missing recipient)."""


class DuplicateTipError(TipError):
    def __init__(self, order_id, recipient_type: str):
        self.order_id = order_id
        self.recipient_type = recipient_type
        super().__init__(f"Order {order_id} already has a {recipient_type} tip")
