# settlement/services/ledger_posting.py

"""
======================================================
PATH: settlement/services/ledger_posting.py
======================================================
LEDGER POSTING (SETTLEMENT CHOKE-POINT)

This module is the ONLY place allowed to create LedgerEntry rows.

Rules:
- Only delivered orders settle. Cancelled-in-window orders never do.
- Chef entry:     amount = chef_earnings_amount, platform_fee = commission_amount
                  (both copied from the committed breakdown, never recomputed)
- Delivery entry: only when a delivery partner is assigned (third-party
                  orders cannot settle without one);
                  platform_fee = apply_rate(delivery_fee, DELIVERY_COMMISSION_RATE)
                  amount       = delivery_fee - platform_fee
- Idempotent: an existing (order, recipient_type) entry is returned as-is.
  The DB unique constraint is the final authority under races.
"""

from __future__ import annotations

import logging
from datetime import datetime

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from orders.constants import (
    DELIVERY_TYPE_THIRD_PARTY,
    DELIVERY_COMMISSION_RATE,
    RECIPIENT_CHEF,
    RECIPIENT_DELIVERY,
)
from orders.services.money import apply_rate
from settlement.models import LedgerEntry
from settlement.services.exceptions import LedgerPostingError, SettlementInvariantError

logger = logging.getLogger("settlement")


def delivery_split(delivery_fee: int) -> tuple[int, int]:
    """Return (partner_amount, platform_fee) for a delivery fee."""
    platform_fee = apply_rate(delivery_fee, DELIVERY_COMMISSION_RATE)
    return delivery_fee - platform_fee, platform_fee


def _planned_entries(order) -> list[dict]:
    planned = [
        {
            "recipient_type": RECIPIENT_CHEF,
            "recipient_id": order.chef_id,
            "amount": order.chef_earnings_amount,
            "platform_fee": order.commission_amount,
        }
    ]

    if order.delivery_partner_id:
        amount, fee = delivery_split(order.delivery_fee_amount)
        planned.append(
            {
                "recipient_type": RECIPIENT_DELIVERY,
                "recipient_id": order.delivery_partner_id,
                "amount": amount,
                "platform_fee": fee,
            }
        )

    return planned


def _create_or_get(*, order, earned_at: datetime, planned: dict) -> tuple[LedgerEntry, bool]:
    existing = LedgerEntry.objects.filter(
        order=order, recipient_type=planned["recipient_type"]
    ).first()
    if existing is not None:
        return existing, False

    try:
        with transaction.atomic():
            entry = LedgerEntry.objects.create(order=order, earned_at=earned_at, **planned)
    except (IntegrityError, ValidationError) as exc:
        existing = LedgerEntry.objects.filter(
            order=order, recipient_type=planned["recipient_type"]
        ).first()
        if existing is not None:
            return existing, False
        raise LedgerPostingError(
            f"Failed to post {planned['recipient_type']} entry for order {order.id}: {exc}"
        ) from exc

    return entry, True


@transaction.atomic
def post_delivered_order(*, order, earned_at: datetime | None = None) -> list[LedgerEntry]:
    from orders.models import Order

    if order.status != Order.STATUS_DELIVERED:
        raise LedgerPostingError(
            f"Order {order.id} is '{order.status}'; only delivered orders settle"
        )

    if order.delivery_type == DELIVERY_TYPE_THIRD_PARTY and not order.delivery_partner_id:
        raise LedgerPostingError(
            f"Order {order.id} is third-party delivered but has no delivery partner"
        )

    if order.commission_amount + order.chef_earnings_amount != order.subtotal_amount:
        raise SettlementInvariantError(
            f"Order {order.id} committed split does not add up to its subtotal"
        )

    earned_at = earned_at or order.delivered_at or timezone.now()

    entries: list[LedgerEntry] = []
    for planned in _planned_entries(order):
        entry, created = _create_or_get(order=order, earned_at=earned_at, planned=planned)
        entries.append(entry)

        if created:
            logger.info(
                "Ledger entry posted",
                extra={
                    "order_id": str(order.id),
                    "recipient_type": entry.recipient_type,
                    "recipient_id": entry.recipient_id,
                    "amount": entry.amount,
                    "platform_fee": entry.platform_fee,
                },
            )
        else:
            logger.debug(
                "Ledger entry already present; not duplicated",
                extra={"order_id": str(order.id), "recipient_type": entry.recipient_type},
            )

    return entries


def entries_for(
    *,
    recipient_id: str,
    recipient_type: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
):
    """
    Ledger read access for reporting: entries for one recipient, optionally
    restricted to a type and an [start, end) earned_at range.
    """
    qs = LedgerEntry.objects.filter(recipient_id=recipient_id)

    if recipient_type:
        qs = qs.filter(recipient_type=recipient_type)
    if start is not None:
        qs = qs.filter(earned_at__gte=start)
    if end is not None:
        qs = qs.filter(earned_at__lt=end)

    return qs.order_by("earned_at", "id")
