# settlement/services/reporting.py

"""
EARNINGS REPORTING (READ-ONLY)

Period summaries for chefs and delivery partners, derived only from the
numbers settlement already committed:
- ledger entries (amount earned, platform fee withheld)
- tips (outside commission, outside the ledger)

The commission rate shown is imported from orders.constants; reports
never restate a literal rate.

Periods (local time, TIME_ZONE):
- daily   -> today 00:00 .. now
- weekly  -> rolling 7 days .. now
- monthly -> 1st of this month 00:00 .. now
- yearly  -> 1 Jan 00:00 .. now
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Count, Sum
from django.utils import timezone

from orders.constants import (
    CHEF_COMMISSION_RATE,
    DELIVERY_COMMISSION_RATE,
    RECIPIENT_CHEF,
    RECIPIENT_TYPES,
)
from orders.services.tip_service import tips_for
from settlement.services.exceptions import ReportingError
from settlement.services.ledger_posting import entries_for

PERIOD_DAILY = "daily"
PERIOD_WEEKLY = "weekly"
PERIOD_MONTHLY = "monthly"
PERIOD_YEARLY = "yearly"

PERIODS = (PERIOD_DAILY, PERIOD_WEEKLY, PERIOD_MONTHLY, PERIOD_YEARLY)

ONE_DP = Decimal("0.1")


@dataclass(frozen=True)
class EarningsSummary:
    recipient_id: str
    recipient_type: str
    period: str
    start: datetime
    end: datetime
    order_count: int
    gross_sales: int
    platform_fees: int
    net_earnings: int
    tips: int
    gross_revenue: int
    expenses: int
    net_profit: int
    profit_margin: Decimal
    average_order_value: int
    commission_rate: Decimal

    def as_dict(self) -> dict:
        data = asdict(self)
        data["start"] = self.start.isoformat()
        data["end"] = self.end.isoformat()
        data["profit_margin"] = str(self.profit_margin)
        data["commission_rate"] = str(self.commission_rate)
        return data


def period_bounds(period: str, now: datetime | None = None) -> tuple[datetime, datetime]:
    now = now or timezone.now()
    local_now = timezone.localtime(now)
    midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)

    if period == PERIOD_DAILY:
        start = midnight
    elif period == PERIOD_WEEKLY:
        start = local_now - timedelta(days=7)
    elif period == PERIOD_MONTHLY:
        start = midnight.replace(day=1)
    elif period == PERIOD_YEARLY:
        start = midnight.replace(month=1, day=1)
    else:
        raise ReportingError(f"Unsupported period '{period}'. Use one of: {', '.join(PERIODS)}")

    return start, now


def commission_rate_for(recipient_type: str) -> Decimal:
    if recipient_type == RECIPIENT_CHEF:
        return CHEF_COMMISSION_RATE
    return DELIVERY_COMMISSION_RATE


def _margin(numerator: int, denominator: int) -> Decimal:
    if denominator <= 0:
        return Decimal("0.0")
    value = Decimal(numerator) * Decimal(100) / Decimal(denominator)
    return value.quantize(ONE_DP, rounding=ROUND_HALF_UP)


def _average(total: int, count: int) -> int:
    if count <= 0:
        return 0
    return int((Decimal(total) / Decimal(count)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def earnings_summary(
    *,
    recipient_id: str,
    recipient_type: str,
    period: str,
    now: datetime | None = None,
    expenses: int = 0,
) -> EarningsSummary:
    if recipient_type not in RECIPIENT_TYPES:
        raise ReportingError(f"Unknown recipient type '{recipient_type}'")

    expenses = int(expenses or 0)
    if expenses < 0:
        raise ReportingError("expenses cannot be negative")

    start, end = period_bounds(period, now)

    totals = entries_for(
        recipient_id=recipient_id,
        recipient_type=recipient_type,
        start=start,
        end=end,
    ).aggregate(
        count=Count("id"),
        earned=Sum("amount"),
        fees=Sum("platform_fee"),
    )

    order_count = totals["count"] or 0
    net_earnings = totals["earned"] or 0
    platform_fees = totals["fees"] or 0
    gross_sales = net_earnings + platform_fees

    tips = (
        tips_for(recipient_id=recipient_id, recipient_type=recipient_type)
        .filter(created_at__gte=start, created_at__lt=end)
        .aggregate(total=Sum("amount"))["total"]
        or 0
    )

    gross_revenue = net_earnings + tips
    net_profit = gross_revenue - expenses

    return EarningsSummary(
        recipient_id=str(recipient_id),
        recipient_type=recipient_type,
        period=period,
        start=start,
        end=end,
        order_count=order_count,
        gross_sales=gross_sales,
        platform_fees=platform_fees,
        net_earnings=net_earnings,
        tips=tips,
        gross_revenue=gross_revenue,
        expenses=expenses,
        net_profit=net_profit,
        profit_margin=_margin(net_profit, gross_revenue),
        average_order_value=_average(gross_sales, order_count),
        commission_rate=commission_rate_for(recipient_type),
    )
