# orders/serializers/__init__.py

from .commands import (
    AdvanceCommandSerializer,
    AssignDeliveryCommandSerializer,
    CancelCommandSerializer,
    CartInputSerializer,
    PlaceOrderInputSerializer,
    QuoteInputSerializer,
    TipCommandSerializer,
)
from .order import (
    BreakdownSerializer,
    CancellationResultSerializer,
    OrderSerializer,
    OrderTipSerializer,
)

__all__ = [
    "AdvanceCommandSerializer",
    "AssignDeliveryCommandSerializer",
    "BreakdownSerializer",
    "CancelCommandSerializer",
    "CancellationResultSerializer",
    "CartInputSerializer",
    "OrderSerializer",
    "OrderTipSerializer",
    "PlaceOrderInputSerializer",
    "QuoteInputSerializer",
    "TipCommandSerializer",
]
