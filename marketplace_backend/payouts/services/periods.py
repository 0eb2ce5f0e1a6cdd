# payouts/services/periods.py

"""
PAYOUT PERIOD WINDOWS

period_window(schedule, as_of) -> (period_start, period_end)

The most recent CLOSED period ending at or before as_of, in local time
(TIME_ZONE), with boundaries at local midnight:

- weekly:    end = latest anchor weekday <= as_of;       start = end - 7 days
- bi-weekly: end = latest anchor date on the fortnight grid counted from
             FORTNIGHT_EPOCH;                            start = end - 14 days
- monthly:   end = latest anchor day-of-month <= as_of (clamped to month
             length);                                    start = previous month's anchor
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta

from django.utils import timezone

from payouts.models import PayoutSchedule

# Monday. Fixes which alternate weeks a bi-weekly schedule closes on.
FORTNIGHT_EPOCH = date(2024, 1, 1)


def _local_midnight(day: date) -> datetime:
    return timezone.make_aware(datetime.combine(day, time.min), timezone.get_current_timezone())


def _clamped(year: int, month: int, day: int) -> date:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last))


def _previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def _weekly_end(today: date, anchor: int) -> date:
    return today - timedelta(days=(today.weekday() - anchor) % 7)


def _fortnight_end(today: date, anchor: int) -> date:
    first_anchor = FORTNIGHT_EPOCH + timedelta(days=(anchor - FORTNIGHT_EPOCH.weekday()) % 7)
    fortnights = (today - first_anchor).days // 14
    return first_anchor + timedelta(days=14 * fortnights)


def _monthly_bounds(today: date, anchor: int) -> tuple[date, date]:
    end = _clamped(today.year, today.month, anchor)
    if end > today:
        year, month = _previous_month(today.year, today.month)
        end = _clamped(year, month, anchor)

    year, month = _previous_month(end.year, end.month)
    return _clamped(year, month, anchor), end


def period_window(schedule: PayoutSchedule, as_of: datetime | None = None) -> tuple[datetime, datetime]:
    as_of = as_of or timezone.now()
    today = timezone.localtime(as_of).date()
    anchor = int(schedule.anchor_day)

    if schedule.frequency == PayoutSchedule.FREQ_WEEKLY:
        end = _weekly_end(today, anchor)
        start = end - timedelta(days=7)
    elif schedule.frequency == PayoutSchedule.FREQ_BIWEEKLY:
        end = _fortnight_end(today, anchor)
        start = end - timedelta(days=14)
    elif schedule.frequency == PayoutSchedule.FREQ_MONTHLY:
        start, end = _monthly_bounds(today, anchor)
    else:
        raise ValueError(f"Unsupported payout frequency '{schedule.frequency}'")

    return _local_midnight(start), _local_midnight(end)
