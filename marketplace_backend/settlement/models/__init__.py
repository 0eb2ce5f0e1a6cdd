# settlement/models/__init__.py

from .ledger_entry import LedgerEntry

__all__ = ["LedgerEntry"]
