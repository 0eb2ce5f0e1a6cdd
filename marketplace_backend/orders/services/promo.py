# orders/services/promo.py

"""
PROMO ENGINE

Rule table maps a code to either a percentage of the subtotal or a flat
amount in paise.

Guarantees:
- Matching is case-insensitive and whitespace-trimmed.
- Percentage discounts round exactly like commission (apply_rate).
- Discount is always within [0, subtotal].
- Unknown or empty codes are a soft result (valid=False, discount=0).
  This function never raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from orders.services.money import apply_rate

KIND_PERCENT = "percent"
KIND_FLAT = "flat"


@dataclass(frozen=True)
class PromoRule:
    code: str
    kind: str
    value: Decimal | int
    description: str = ""


@dataclass(frozen=True)
class PromoResult:
    code: str
    discount: int
    valid: bool


PROMO_RULES: dict[str, PromoRule] = {
    "FIRST10": PromoRule("FIRST10", KIND_PERCENT, Decimal("0.10"), "10% off your first order"),
    "SAVE50": PromoRule("SAVE50", KIND_FLAT, 5000, "Flat ₹50 off"),
    "WELCOME": PromoRule("WELCOME", KIND_PERCENT, Decimal("0.15"), "15% welcome discount"),
}


def normalize_code(code) -> str:
    return (code or "").strip().upper() if isinstance(code, str) else ""


def apply_promo(code, subtotal: int, *, rules: dict[str, PromoRule] | None = None) -> PromoResult:
    normalized = normalize_code(code)
    rule = (rules if rules is not None else PROMO_RULES).get(normalized)

    if rule is None:
        return PromoResult(code=normalized, discount=0, valid=False)

    base = max(int(subtotal), 0)

    if rule.kind == KIND_PERCENT:
        discount = apply_rate(base, rule.value)
    else:
        discount = int(rule.value)

    discount = min(max(discount, 0), base)
    return PromoResult(code=normalized, discount=discount, valid=True)
