# settlement/models/ledger_entry.py

"""
======================================================
PATH: settlement/models/ledger_entry.py
======================================================
EARNINGS LEDGER ENTRY

One recipient's earned amount from one delivered order.

Guarantees:
- Immutable once created (no updates, no deletes)
- At most one entry per (order, recipient_type): the idempotency boundary
  the payout batch engine relies on
- amount is what the recipient earns; platform_fee is what the platform
  already withheld (informational, never deducted again)
- Consumption by a payout is recorded by payouts.PayoutLine, not here
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from orders.constants import RECIPIENT_TYPE_CHOICES, RECIPIENT_TYPES


class LedgerEntry(models.Model):
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="ledger_entries",
    )

    recipient_type = models.CharField(max_length=16, choices=RECIPIENT_TYPE_CHOICES)
    recipient_id = models.CharField(max_length=64)

    amount = models.BigIntegerField(help_text="Earned amount in paise")
    platform_fee = models.BigIntegerField(
        default=0,
        help_text="Commission already withheld at settlement (paise, informational)",
    )

    earned_at = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Ledger Entry"
        verbose_name_plural = "Ledger Entries"
        ordering = ["earned_at", "id"]
        indexes = [
            models.Index(
                fields=["recipient_type", "recipient_id", "earned_at"],
                name="idx_ledger_recipient_earned",
            ),
            models.Index(fields=["recipient_type", "earned_at"], name="idx_ledger_type_earned"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "recipient_type"],
                name="uniq_ledger_order_recipient_type",
            ),
            models.CheckConstraint(
                condition=Q(amount__gte=0),
                name="chk_ledger_amount_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(platform_fee__gte=0),
                name="chk_ledger_platform_fee_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.recipient_type}:{self.recipient_id} +{self.amount} ({self.order_id})"

    def clean(self):
        if self.recipient_type not in RECIPIENT_TYPES:
            raise ValidationError("Invalid recipient_type")

        if not (self.recipient_id or "").strip():
            raise ValidationError("recipient_id is required")

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("LedgerEntry records are immutable and cannot be modified")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("LedgerEntry records are immutable and cannot be deleted")
