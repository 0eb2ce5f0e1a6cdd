# settlement/services/exceptions.py

"""
SETTLEMENT SERVICE ERRORS

Centralized domain errors for the earnings ledger.
"""


class SettlementError(Exception):
    """Base exception for all settlement failures."""


class LedgerPostingError(SettlementError):
    """Raised when an order cannot be posted to the earnings ledger."""


class ReportingError(SettlementError):
    """Raised for unsupported reporting periods or recipient types."""


class SettlementInvariantError(AssertionError):
    """
    A money invariant does not hold (split leak, negative total, an entry
    consumed twice). This is a programming defect, never a user condition;
    callers must not catch it.
    """
