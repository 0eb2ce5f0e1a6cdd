# orders/services/tip_service.py

"""
TIP SERVICE

Tips go to the chef or the assigned delivery partner in full:
- no commission, no ledger entry (reporting adds them separately)
- amount within [MIN_TIP_AMOUNT, MAX_TIP_AMOUNT]
- at most one tip per (order, recipient type)
- never on a cancelled order
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction

from orders.constants import (
    MAX_TIP_AMOUNT,
    MIN_TIP_AMOUNT,
    RECIPIENT_CHEF,
    RECIPIENT_TYPES,
)
from orders.models import Order, OrderTip
from orders.services.exceptions import DuplicateTipError, TipError
from orders.services.order_service import get_order_for_update

logger = logging.getLogger("orders")


def _recipient_for(order: Order, recipient_type: str) -> str:
    if recipient_type == RECIPIENT_CHEF:
        return order.chef_id

    if not order.delivery_partner_id:
        raise TipError(f"Order {order.id} has no delivery partner to tip yet")
    return order.delivery_partner_id


@transaction.atomic
def add_tip(*, order_id, recipient_type: str, amount: int, message: str = "") -> OrderTip:
    if recipient_type not in RECIPIENT_TYPES:
        raise TipError(f"Unknown tip recipient type '{recipient_type}'")

    amount = int(amount)
    if amount < MIN_TIP_AMOUNT or amount > MAX_TIP_AMOUNT:
        raise TipError(
            f"Tip must be between {MIN_TIP_AMOUNT} and {MAX_TIP_AMOUNT} paise"
        )

    order = get_order_for_update(order_id)

    if order.status == Order.STATUS_CANCELLED:
        raise TipError(f"Order {order.id} is cancelled and cannot be tipped")

    recipient_id = _recipient_for(order, recipient_type)

    if OrderTip.objects.filter(order=order, recipient_type=recipient_type).exists():
        raise DuplicateTipError(order.id, recipient_type)

    try:
        with transaction.atomic():
            tip = OrderTip.objects.create(
                order=order,
                recipient_type=recipient_type,
                recipient_id=recipient_id,
                amount=amount,
                message=(message or "").strip(),
            )
    except IntegrityError as exc:
        raise DuplicateTipError(order.id, recipient_type) from exc

    logger.info(
        "Tip added",
        extra={
            "order_id": str(order.id),
            "recipient_type": recipient_type,
            "amount": amount,
        },
    )
    return tip


def tips_for(*, recipient_id: str, recipient_type: str | None = None):
    qs = OrderTip.objects.filter(recipient_id=recipient_id).exclude(
        order__status=Order.STATUS_CANCELLED
    )
    if recipient_type:
        qs = qs.filter(recipient_type=recipient_type)
    return qs

