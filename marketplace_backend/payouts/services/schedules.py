# payouts/services/schedules.py

from __future__ import annotations

from payouts.models import PayoutSchedule
from payouts.services.exceptions import InactiveScheduleError, PayoutScheduleNotFoundError


def active_schedule_for(recipient_type: str) -> PayoutSchedule:
    """
    Current configuration for a recipient type: the latest version.
    Raises when none exists or when the latest version is deactivated.
    """
    schedule = PayoutSchedule.latest_for(recipient_type)
    if schedule is None:
        raise PayoutScheduleNotFoundError(f"No payout schedule configured for '{recipient_type}'")

    if not schedule.is_active:
        raise InactiveScheduleError(
            f"Payout schedule for '{recipient_type}' is inactive (v{schedule.version})"
        )
    return schedule


def revise_schedule(*, recipient_type: str, **changes) -> PayoutSchedule:
    return PayoutSchedule.revise(recipient_type=recipient_type, **changes)
