# orders/models/order_item.py

from django.core.exceptions import ValidationError
from django.db import models

from orders.models.order import Order


class OrderItem(models.Model):
    """
    Snapshot of one cart line at placement. Immutable.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
    )

    dish_id = models.CharField(max_length=64)
    dish_name = models.CharField(max_length=255, blank=True, default="")
    unit_price = models.BigIntegerField(help_text="Unit price in paise at placement")
    quantity = models.PositiveIntegerField()
    note = models.CharField(max_length=255, blank=True, default="")
    line_total = models.BigIntegerField()

    class Meta:
        ordering = ["id"]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("OrderItem snapshots are immutable once written")

        self.line_total = int(self.unit_price) * int(self.quantity)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.dish_id} × {self.quantity}"
