# orders/models/__init__.py

"""
ORDERS MODELS PACKAGE EXPORTS
"""

from .cancellation import OrderCancellation
from .order import Order
from .order_item import OrderItem
from .tip import OrderTip

__all__ = [
    "Order",
    "OrderItem",
    "OrderCancellation",
    "OrderTip",
]
