# orders/constants.py

"""
MARKETPLACE FINANCIAL CONSTANTS (SINGLE SOURCE OF TRUTH)

Money is always an integer number of paise (1 INR = 100 paise).
Rates are Decimals and are only ever applied through
orders.services.money.apply_rate (round half-up).

Reporting and settlement import these names; nothing else restates the
literal rates.
"""

from decimal import Decimal

# Platform share of the food subtotal, withheld from chef earnings.
CHEF_COMMISSION_RATE = Decimal("0.15")

# Platform share of the delivery fee, withheld from delivery partner earnings.
DELIVERY_COMMISSION_RATE = Decimal("0.10")

DEFAULT_TAX_RATE = Decimal("0.05")

THIRD_PARTY_DELIVERY_SURCHARGE = 1500  # ₹15

MIN_TIP_AMOUNT = 1000  # ₹10
MAX_TIP_AMOUNT = 50000  # ₹500

# Recipient types (ledger entries, tips, payout schedules, payout records)
RECIPIENT_CHEF = "chef"
RECIPIENT_DELIVERY = "delivery"

RECIPIENT_TYPE_CHOICES = [
    (RECIPIENT_CHEF, "Chef"),
    (RECIPIENT_DELIVERY, "Delivery Partner"),
]

RECIPIENT_TYPES = {RECIPIENT_CHEF, RECIPIENT_DELIVERY}

# Delivery modes
DELIVERY_TYPE_SELF = "self"
DELIVERY_TYPE_THIRD_PARTY = "third_party"

DELIVERY_TYPE_CHOICES = [
    (DELIVERY_TYPE_SELF, "Chef delivers"),
    (DELIVERY_TYPE_THIRD_PARTY, "Third-party partner"),
]
