# orders/services/breakdown.py

"""
BREAKDOWN CALCULATOR (PURE)

Turns a cart snapshot (+ optional promo code) into an immutable
FinancialBreakdown.

DESIGN PRINCIPLES:
- No database access
- No side effects
- Deterministic: same inputs -> same breakdown
- Integer paise only; every percentage goes through apply_rate

Split rule:
- platform_commission = apply_rate(subtotal, CHEF_COMMISSION_RATE)
- chef_net_earnings   = subtotal - platform_commission
  (the chef absorbs any rounding remainder; nothing is dropped)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from orders.constants import (
    CHEF_COMMISSION_RATE,
    DEFAULT_TAX_RATE,
    DELIVERY_TYPE_SELF,
    DELIVERY_TYPE_THIRD_PARTY,
    THIRD_PARTY_DELIVERY_SURCHARGE,
)
from orders.services.money import apply_rate
from orders.services.promo import apply_promo
from settlement.services.exceptions import SettlementInvariantError


# ============================================================
# INPUT VALUE TYPES
# ============================================================


@dataclass(frozen=True)
class CartLine:
    dish_id: str
    unit_price: int
    quantity: int
    note: str = ""
    dish_name: str = ""

    @property
    def is_billable(self) -> bool:
        # Negative price or non-positive quantity contributes nothing.
        return self.quantity > 0 and self.unit_price >= 0

    @property
    def line_total(self) -> int:
        if not self.is_billable:
            return 0
        return int(self.unit_price) * int(self.quantity)


@dataclass(frozen=True)
class CartSnapshot:
    chef_id: str
    lines: tuple[CartLine, ...] = ()
    chef_minimum_order: int = 0
    chef_delivery_fee: int = 0
    delivery_type: str = DELIVERY_TYPE_SELF

    @property
    def billable_lines(self) -> tuple[CartLine, ...]:
        return tuple(line for line in self.lines if line.is_billable)

    @property
    def subtotal(self) -> int:
        return sum(line.line_total for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.billable_lines


@dataclass(frozen=True)
class FeeSchedule:
    tax_rate: Decimal = DEFAULT_TAX_RATE
    flat_tax: Optional[int] = None
    free_delivery_threshold: Optional[int] = None
    third_party_surcharge: int = THIRD_PARTY_DELIVERY_SURCHARGE


DEFAULT_FEE_SCHEDULE = FeeSchedule()


# ============================================================
# OUTPUT VALUE TYPE
# ============================================================


@dataclass(frozen=True)
class FinancialBreakdown:
    subtotal: int
    delivery_fee: int
    taxes_and_fees: int
    promo_code: str
    promo_discount: int
    promo_applied: bool
    platform_commission: int
    chef_net_earnings: int
    total: int
    meets_minimum: bool
    commission_rate: Decimal = field(default=CHEF_COMMISSION_RATE)

    def __post_init__(self):
        if self.platform_commission + self.chef_net_earnings != self.subtotal:
            raise SettlementInvariantError(
                f"commission {self.platform_commission} + chef net "
                f"{self.chef_net_earnings} != subtotal {self.subtotal}"
            )

        expected_total = (
            self.subtotal + self.delivery_fee + self.taxes_and_fees - self.promo_discount
        )
        if self.total != expected_total:
            raise SettlementInvariantError(
                f"total {self.total} != subtotal + delivery + taxes - discount ({expected_total})"
            )

        if not 0 <= self.promo_discount <= self.subtotal:
            raise SettlementInvariantError(
                f"promo discount {self.promo_discount} outside [0, {self.subtotal}]"
            )

        if self.total < 0:
            raise SettlementInvariantError(f"total {self.total} is negative")

    def as_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "delivery_fee": self.delivery_fee,
            "taxes_and_fees": self.taxes_and_fees,
            "promo_code": self.promo_code,
            "promo_discount": self.promo_discount,
            "promo_applied": self.promo_applied,
            "platform_commission": self.platform_commission,
            "chef_net_earnings": self.chef_net_earnings,
            "total": self.total,
            "meets_minimum": self.meets_minimum,
            "commission_rate": str(self.commission_rate),
        }


# ============================================================
# CALCULATOR
# ============================================================


def _delivery_fee(cart: CartSnapshot, subtotal: int, schedule: FeeSchedule) -> int:
    if cart.is_empty:
        return 0

    if (
        schedule.free_delivery_threshold is not None
        and subtotal >= schedule.free_delivery_threshold
    ):
        return 0

    fee = max(int(cart.chef_delivery_fee), 0)
    if cart.delivery_type == DELIVERY_TYPE_THIRD_PARTY:
        fee += int(schedule.third_party_surcharge)
    return fee


def _taxes(subtotal: int, schedule: FeeSchedule) -> int:
    if subtotal <= 0:
        return 0
    if schedule.flat_tax is not None:
        return max(int(schedule.flat_tax), 0)
    return apply_rate(subtotal, schedule.tax_rate)


def compute_breakdown(
    cart: CartSnapshot,
    promo_code: Optional[str] = None,
    fee_schedule: Optional[FeeSchedule] = None,
) -> FinancialBreakdown:
    schedule = fee_schedule or DEFAULT_FEE_SCHEDULE

    subtotal = cart.subtotal
    delivery_fee = _delivery_fee(cart, subtotal, schedule)
    taxes = _taxes(subtotal, schedule)

    promo = apply_promo(promo_code, subtotal)

    commission = apply_rate(subtotal, CHEF_COMMISSION_RATE)
    chef_net = subtotal - commission

    return FinancialBreakdown(
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        taxes_and_fees=taxes,
        promo_code=promo.code if promo.valid else "",
        promo_discount=promo.discount,
        promo_applied=promo.valid,
        platform_commission=commission,
        chef_net_earnings=chef_net,
        total=subtotal + delivery_fee + taxes - promo.discount,
        meets_minimum=subtotal >= int(cart.chef_minimum_order),
    )
