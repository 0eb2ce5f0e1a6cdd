# orders/models/cancellation.py

"""
======================================================
PATH: orders/models/cancellation.py
======================================================
ORDER CANCELLATION RECORD

Written exactly once, when an order is cancelled inside its window.

Guarantees:
- One per order (one-to-one)
- Immutable, non-deletable
- refund_amount is the committed order total at cancellation time
- It is the stored result returned to repeated cancel requests
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from orders.models.order import Order


class OrderCancellation(models.Model):
    order = models.OneToOneField(
        Order,
        on_delete=models.PROTECT,
        related_name="cancellation",
    )

    refund_amount = models.BigIntegerField(help_text="Full refund in paise (= committed total)")
    reason = models.TextField(blank=True, default="")
    requested_at = models.DateTimeField()

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=Q(refund_amount__gte=0),
                name="chk_cancellation_refund_non_negative",
            ),
        ]

    def __str__(self):
        return f"Cancellation {self.order_id} refund={self.refund_amount}"

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("OrderCancellation records are immutable once created")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("OrderCancellation records are immutable and cannot be deleted")
