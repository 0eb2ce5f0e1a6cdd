# payouts/models/payout_line.py

"""
PAYOUT LINE

Links one LedgerEntry to the PayoutRecord that consumed it.

The one-to-one on ledger_entry is what "consumed" means: an entry can never
be folded into two payout records.
"""

from django.core.exceptions import ValidationError
from django.db import models

from payouts.models.payout_record import PayoutRecord


class PayoutLine(models.Model):
    payout = models.ForeignKey(
        PayoutRecord,
        on_delete=models.PROTECT,
        related_name="lines",
    )

    ledger_entry = models.OneToOneField(
        "settlement.LedgerEntry",
        on_delete=models.PROTECT,
        related_name="payout_line",
    )

    amount = models.BigIntegerField(help_text="Copied from the ledger entry (paise)")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("PayoutLine rows are immutable once created")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("PayoutLine rows are immutable and cannot be deleted")

    def __str__(self):
        return f"{self.ledger_entry_id} → {self.payout_id} ({self.amount})"
