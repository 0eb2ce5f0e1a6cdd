# payouts/models/__init__.py

"""
PAYOUTS MODELS PACKAGE EXPORTS
"""

from .account import PayoutAccount
from .payout_line import PayoutLine
from .payout_record import PayoutRecord
from .schedule import PayoutSchedule

__all__ = [
    "PayoutSchedule",
    "PayoutAccount",
    "PayoutRecord",
    "PayoutLine",
]
