from .payout import (
    CompletePayoutCommandSerializer,
    FailPayoutCommandSerializer,
    GenerateBatchCommandSerializer,
    PayoutLineSerializer,
    PayoutProcessResultSerializer,
    PayoutRecordSerializer,
    ProcessBulkCommandSerializer,
)

__all__ = [
    "PayoutLineSerializer",
    "PayoutRecordSerializer",
    "PayoutProcessResultSerializer",
    "GenerateBatchCommandSerializer",
    "ProcessBulkCommandSerializer",
    "CompletePayoutCommandSerializer",
    "FailPayoutCommandSerializer",
]
