# orders/services/cancellation_window.py

"""
CANCELLATION WINDOW (DERIVED, NEVER STORED)

The window is fixed per order at placement:
    cancellation_deadline = placed_at + grace_period_seconds

Remaining time is always recomputed from the stored deadline, so a client
countdown survives restarts and paused screens. The deadline is an upper
bound only: once the order leaves 'placed' it is not cancellable even if
time remains.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta

from django.utils import timezone


def deadline_for(placed_at: datetime, grace_period_seconds: int) -> datetime:
    return placed_at + timedelta(seconds=int(grace_period_seconds))


def seconds_remaining(order, now: datetime | None = None) -> int:
    now = now or timezone.now()
    remaining = (order.cancellation_deadline - now).total_seconds()
    if remaining <= 0:
        return 0
    return int(math.ceil(remaining))


def is_within_window(order, at: datetime) -> bool:
    return at <= order.cancellation_deadline


def is_cancellable(order, now: datetime | None = None) -> bool:
    from orders.models import Order

    now = now or timezone.now()
    return order.status == Order.STATUS_PLACED and is_within_window(order, now)
