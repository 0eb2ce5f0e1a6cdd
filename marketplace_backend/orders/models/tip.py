# orders/models/tip.py

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from orders.constants import RECIPIENT_TYPE_CHOICES
from orders.models.order import Order


class OrderTip(models.Model):
    """
    Gratuity on an order for the chef or the delivery partner.

    Tips are never subject to commission and never become ledger entries;
    reporting adds them on top of net earnings. Immutable.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.PROTECT,
        related_name="tips",
    )

    recipient_type = models.CharField(max_length=16, choices=RECIPIENT_TYPE_CHOICES)
    recipient_id = models.CharField(max_length=64, db_index=True)
    amount = models.BigIntegerField()
    message = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "recipient_type"],
                name="uniq_tip_order_recipient_type",
            ),
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="chk_tip_amount_positive",
            ),
        ]

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("OrderTip records are immutable once created")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("OrderTip records are immutable and cannot be deleted")

    def __str__(self):
        return f"Tip {self.amount} → {self.recipient_type}:{self.recipient_id}"
