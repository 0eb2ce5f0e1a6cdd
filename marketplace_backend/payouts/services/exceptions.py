# payouts/services/exceptions.py

"""
PAYOUT SERVICE ERRORS

State errors carry the current state and the attempted action.
Each class exposes a stable `code` used by the API error envelope and by
per-record bulk processing results.
"""

from __future__ import annotations


class PayoutError(Exception):
    """Base exception for all payout failures."""

    code = "PAYOUT_ERROR"


class PayoutNotFoundError(PayoutError):
    code = "PAYOUT_NOT_FOUND"

    def __init__(self, payout_id):
        self.payout_id = payout_id
        super().__init__(f"Payout {payout_id} does not exist")


class InvalidPayoutTransitionError(PayoutError):
    code = "INVALID_TRANSITION"

    def __init__(self, payout_id, current_status: str, target_status: str):
        self.payout_id = payout_id
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            f"Payout {payout_id} cannot transition from "
            f"'{current_status}' to '{target_status}'"
        )


class PayoutScheduleNotFoundError(PayoutError):
    code = "SCHEDULE_NOT_FOUND"


class InactiveScheduleError(PayoutError):
    code = "SCHEDULE_INACTIVE"


class PayoutScheduleMismatchError(PayoutError):
    code = "SCHEDULE_MISMATCH"


class PayoutAccountError(PayoutError):
    """Recipient has no payout account, or its bank details are invalid."""

    code = "PAYOUT_ACCOUNT_INVALID"


class SupersededScheduleError(PayoutError):
    """Generation was asked to run under a schedule version that is no longer current."""

    code = "SCHEDULE_SUPERSEDED"
