# orders/services/money.py

"""
MONEY HELPERS

The only place a percentage is turned into paise.

Rule:
- amount × rate computed with Decimal
- rounded HALF-UP to a whole paisa
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

ONE_PAISA = Decimal("1")


def apply_rate(amount: int, rate) -> int:
    value = Decimal(int(amount)) * Decimal(str(rate))
    return int(value.quantize(ONE_PAISA, rounding=ROUND_HALF_UP))


def rupees(amount: int) -> Decimal:
    """Display helper: paise -> rupees with two decimals."""
    return (Decimal(int(amount)) / Decimal(100)).quantize(Decimal("0.01"))
