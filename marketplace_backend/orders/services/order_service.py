# orders/services/order_service.py

"""
ORDER SERVICE (APPLICATION SERVICE)

Purpose:
- Commit a computed breakdown as an Order (placement).
- Cancel inside the window with a full refund, idempotently.
- Advance status forward; settle to the earnings ledger on delivery.
- Confirm orders whose window lapsed (scheduler sweep).
- Assign the delivery partner.

Hard rules:
- Every mutating operation runs in one DB transaction and re-reads the
  order with select_for_update(), so cancel and advance on the same order
  are serialized: an order can never end up both refunded and settled.
- The committed breakdown on the Order is authoritative; nothing here
  recomputes money.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from orders.constants import DELIVERY_TYPE_THIRD_PARTY
from orders.models import Order, OrderCancellation, OrderItem
from orders.services.breakdown import CartSnapshot, FinancialBreakdown
from orders.services.cancellation_window import deadline_for, is_within_window
from orders.services.exceptions import (
    CancellationWindowExpired,
    DeliveryAssignmentError,
    DeliveryPartnerRequiredError,
    InvalidOrderTransitionError,
    OrderNotFoundError,
    OrderPlacementError,
)
from orders.services.order_lifecycle import can_cancel, is_known_status, validate_transition
from settlement.services.ledger_posting import post_delivered_order

logger = logging.getLogger("orders")

# Third-party orders must have a partner before these statuses.
PARTNER_REQUIRED_STATUSES = {Order.STATUS_OUT_FOR_DELIVERY, Order.STATUS_DELIVERED}


class MinimumOrderNotMetError(OrderPlacementError):
    def __init__(self, subtotal: int, minimum: int):
        self.subtotal = subtotal
        self.minimum = minimum
        super().__init__(f"Subtotal {subtotal} is below the chef minimum order of {minimum}")


@dataclass(frozen=True)
class CancellationResult:
    order_id: str
    status: str
    refund_amount: int
    cancelled_at: datetime
    reason: str = ""
    repeated: bool = field(default=False, compare=False)


# ============================================================
# HELPERS
# ============================================================


def _now(at: datetime | None) -> datetime:
    if at is None:
        return timezone.now()
    if timezone.is_naive(at):
        return timezone.make_aware(at, timezone.get_current_timezone())
    return at


def _grace_seconds(grace_period) -> int:
    if grace_period is None:
        return int(settings.ORDER_CANCELLATION_GRACE_SECONDS)
    if isinstance(grace_period, timedelta):
        return int(grace_period.total_seconds())
    return int(grace_period)


def get_order_for_update(order_id) -> Order:
    try:
        return Order.objects.select_for_update().get(pk=order_id)
    except (Order.DoesNotExist, ValidationError, ValueError) as exc:
        raise OrderNotFoundError(order_id) from exc


def _result_from_cancellation(order: Order, cancellation: OrderCancellation, *, repeated: bool):
    return CancellationResult(
        order_id=str(order.id),
        status=order.status,
        refund_amount=cancellation.refund_amount,
        cancelled_at=order.cancelled_at,
        reason=cancellation.reason,
        repeated=repeated,
    )


# ============================================================
# PLACE
# ============================================================


@transaction.atomic
def place_order(
    *,
    cart: CartSnapshot,
    breakdown: FinancialBreakdown,
    delivery_address: str,
    customer_id: str = "",
    placed_at: datetime | None = None,
    grace_period=None,
) -> Order:
    """
    Commit the breakdown onto a new Order in status 'placed'.

    FLOW:
    1) Validate cart / breakdown / address
    2) Fix placed_at and the grace period for this order
    3) Copy breakdown + line snapshots
    """
    if cart.is_empty:
        raise OrderPlacementError("Cart has no billable items")

    if breakdown.subtotal != cart.subtotal:
        raise OrderPlacementError("Breakdown was not computed from this cart")

    if not breakdown.meets_minimum:
        raise MinimumOrderNotMetError(breakdown.subtotal, int(cart.chef_minimum_order))

    address = (delivery_address or "").strip()
    if not address:
        raise OrderPlacementError("Delivery address is required")

    grace_seconds = _grace_seconds(grace_period)
    if grace_seconds <= 0:
        raise OrderPlacementError("Grace period must be positive")

    placed_at = _now(placed_at)

    order = Order.objects.create(
        customer_id=str(customer_id or ""),
        chef_id=str(cart.chef_id),
        delivery_type=cart.delivery_type,
        delivery_address=address,
        subtotal_amount=breakdown.subtotal,
        delivery_fee_amount=breakdown.delivery_fee,
        tax_amount=breakdown.taxes_and_fees,
        promo_code=breakdown.promo_code,
        discount_amount=breakdown.promo_discount,
        commission_amount=breakdown.platform_commission,
        chef_earnings_amount=breakdown.chef_net_earnings,
        total_amount=breakdown.total,
        status=Order.STATUS_PLACED,
        placed_at=placed_at,
        grace_period_seconds=grace_seconds,
        cancellation_deadline=deadline_for(placed_at, grace_seconds),
    )

    for line in cart.billable_lines:
        OrderItem.objects.create(
            order=order,
            dish_id=str(line.dish_id),
            dish_name=line.dish_name or "",
            unit_price=line.unit_price,
            quantity=line.quantity,
            note=line.note or "",
        )

    logger.info(
        "Order placed",
        extra={
            "order_id": str(order.id),
            "order_number": order.order_number,
            "chef_id": order.chef_id,
            "total": order.total_amount,
            "deadline": order.cancellation_deadline.isoformat(),
        },
    )
    return order


# ============================================================
# CANCEL
# ============================================================


@transaction.atomic
def cancel_order(*, order_id, at: datetime | None = None, reason: str = "") -> CancellationResult:
    """
    Cancel inside the window for a full refund.

    - placed and at <= deadline -> cancelled, refund = committed total,
      no ledger entry
    - already cancelled         -> the stored prior result (idempotent)
    - anything else             -> CancellationWindowExpired
    """
    at = _now(at)
    order = get_order_for_update(order_id)

    if order.status == Order.STATUS_CANCELLED:
        cancellation = OrderCancellation.objects.get(order=order)
        logger.info(
            "Repeat cancellation returned stored result",
            extra={"order_id": str(order.id)},
        )
        return _result_from_cancellation(order, cancellation, repeated=True)

    if not can_cancel(status=order.status) or not is_within_window(order, at):
        logger.warning(
            "Cancellation refused",
            extra={
                "order_id": str(order.id),
                "status": order.status,
                "deadline": order.cancellation_deadline.isoformat(),
                "attempted_at": at.isoformat(),
            },
        )
        raise CancellationWindowExpired(order.id, order.status, order.cancellation_deadline, at)

    cancellation = OrderCancellation.objects.create(
        order=order,
        refund_amount=order.total_amount,
        reason=(reason or "").strip(),
        requested_at=at,
    )

    order.status = Order.STATUS_CANCELLED
    order.cancelled_at = at
    order.save(update_fields=["status", "cancelled_at", "updated_at"])

    logger.info(
        "Order cancelled inside window",
        extra={"order_id": str(order.id), "refund_amount": cancellation.refund_amount},
    )
    return _result_from_cancellation(order, cancellation, repeated=False)


# ============================================================
# ADVANCE
# ============================================================


def _stamp_transition(order: Order, target_status: str, at: datetime) -> list[str]:
    update_fields = ["status", "updated_at"]

    if order.confirmed_at is None and target_status != Order.STATUS_PLACED:
        order.confirmed_at = at
        update_fields.append("confirmed_at")

    if target_status == Order.STATUS_DELIVERED:
        order.delivered_at = at
        update_fields.append("delivered_at")

    return update_fields


@transaction.atomic
def advance_order(*, order_id, target_status: str, at: datetime | None = None) -> Order:
    """
    Move an order strictly forward. Reaching 'delivered' posts the ledger
    entries in the same transaction.
    """
    at = _now(at)

    if target_status == Order.STATUS_CANCELLED or not is_known_status(target_status):
        order = get_order_for_update(order_id)
        raise InvalidOrderTransitionError(order.id, order.status, target_status)

    order = get_order_for_update(order_id)

    if order.status == target_status:
        logger.info(
            "Advance to current status ignored",
            extra={"order_id": str(order.id), "status": order.status},
        )
        return order

    validate_transition(order=order, target_status=target_status)

    if (
        target_status in PARTNER_REQUIRED_STATUSES
        and order.delivery_type == DELIVERY_TYPE_THIRD_PARTY
        and not order.delivery_partner_id
    ):
        raise DeliveryPartnerRequiredError(order.id, order.status, target_status)

    previous_status = order.status
    update_fields = _stamp_transition(order, target_status, at)
    order.status = target_status
    order.save(update_fields=update_fields)

    if target_status == Order.STATUS_DELIVERED:
        post_delivered_order(order=order, earned_at=at)

    logger.info(
        "Order advanced",
        extra={
            "order_id": str(order.id),
            "from_status": previous_status,
            "to_status": target_status,
        },
    )
    return order


def confirm_expired_windows(*, now: datetime | None = None) -> int:
    """
    Confirm every 'placed' order whose cancellation deadline has passed.
    Each order is locked and re-checked in its own transaction.
    """
    now = _now(now)

    candidate_ids = list(
        Order.objects.filter(
            status=Order.STATUS_PLACED,
            cancellation_deadline__lt=now,
        ).values_list("id", flat=True)
    )

    confirmed = 0
    for order_id in candidate_ids:
        with transaction.atomic():
            order = get_order_for_update(order_id)
            if order.status != Order.STATUS_PLACED or is_within_window(order, now):
                continue

            update_fields = _stamp_transition(order, Order.STATUS_CONFIRMED, now)
            order.status = Order.STATUS_CONFIRMED
            order.save(update_fields=update_fields)
            confirmed += 1

    if confirmed:
        logger.info("Expired cancellation windows confirmed", extra={"count": confirmed})
    return confirmed


# ============================================================
# DELIVERY ASSIGNMENT
# ============================================================

ASSIGNABLE_STATES = {
    Order.STATUS_PLACED,
    Order.STATUS_CONFIRMED,
    Order.STATUS_PREPARING,
    Order.STATUS_READY_FOR_PICKUP,
}


@transaction.atomic
def assign_delivery_partner(*, order_id, partner_id: str) -> Order:
    partner_id = str(partner_id or "").strip()
    if not partner_id:
        raise DeliveryAssignmentError("partner_id is required")

    order = get_order_for_update(order_id)

    if order.status not in ASSIGNABLE_STATES:
        raise DeliveryAssignmentError(
            f"Order {order.id} is '{order.status}'; a delivery partner can only be "
            f"assigned before it is out for delivery"
        )

    if order.delivery_partner_id == partner_id:
        return order

    order.delivery_partner_id = partner_id
    order.save(update_fields=["delivery_partner_id", "updated_at"])

    logger.info(
        "Delivery partner assigned",
        extra={"order_id": str(order.id), "partner_id": partner_id},
    )
    return order
