from .ledger import EarningsSummaryQuerySerializer, LedgerEntrySerializer

__all__ = ["LedgerEntrySerializer", "EarningsSummaryQuerySerializer"]
