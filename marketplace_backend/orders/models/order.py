# orders/models/order.py

import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from orders.constants import DELIVERY_TYPE_CHOICES, DELIVERY_TYPE_SELF
from orders.services.cancellation_window import deadline_for


class Order(models.Model):
    """
    A placed marketplace order with its committed financial breakdown.

    GUARANTEES:
    - Breakdown fields are copied at placement and never change afterwards
      (prices do not drift if the menu changes)
    - cancellation_deadline is fixed at placement from placed_at + grace period
    - Status only moves through orders.services.order_lifecycle rules

    Money fields are integer paise.
    """

    STATUS_PLACED = "placed"
    STATUS_CONFIRMED = "confirmed"
    STATUS_PREPARING = "preparing"
    STATUS_READY_FOR_PICKUP = "ready_for_pickup"
    STATUS_OUT_FOR_DELIVERY = "out_for_delivery"
    STATUS_DELIVERED = "delivered"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PLACED, "Placed"),
        (STATUS_CONFIRMED, "Confirmed"),
        (STATUS_PREPARING, "Preparing"),
        (STATUS_READY_FOR_PICKUP, "Ready for pickup"),
        (STATUS_OUT_FOR_DELIVERY, "Out for delivery"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    # Forward progression; cancelled sits outside the flow.
    STATUS_FLOW = (
        STATUS_PLACED,
        STATUS_CONFIRMED,
        STATUS_PREPARING,
        STATUS_READY_FOR_PICKUP,
        STATUS_OUT_FOR_DELIVERY,
        STATUS_DELIVERED,
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_number = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        help_text="System-generated human order number",
    )

    customer_id = models.CharField(max_length=64, blank=True, default="", db_index=True)
    chef_id = models.CharField(max_length=64, db_index=True)
    delivery_partner_id = models.CharField(max_length=64, null=True, blank=True, db_index=True)

    delivery_type = models.CharField(
        max_length=16,
        choices=DELIVERY_TYPE_CHOICES,
        default=DELIVERY_TYPE_SELF,
    )
    delivery_address = models.TextField()

    # Committed breakdown (paise)
    subtotal_amount = models.BigIntegerField(default=0)
    delivery_fee_amount = models.BigIntegerField(default=0)
    tax_amount = models.BigIntegerField(default=0)
    promo_code = models.CharField(max_length=32, blank=True, default="")
    discount_amount = models.BigIntegerField(default=0)
    commission_amount = models.BigIntegerField(
        default=0,
        help_text="Platform commission withheld from the chef (subtotal × commission rate).",
    )
    chef_earnings_amount = models.BigIntegerField(
        default=0,
        help_text="Chef net earnings = subtotal - commission.",
    )
    total_amount = models.BigIntegerField(default=0)

    status = models.CharField(
        max_length=32,
        choices=STATUS_CHOICES,
        default=STATUS_PLACED,
    )

    placed_at = models.DateTimeField(default=timezone.now)
    grace_period_seconds = models.PositiveIntegerField(default=300)
    cancellation_deadline = models.DateTimeField(blank=True)

    confirmed_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-placed_at"]
        indexes = [
            models.Index(fields=["status"], name="idx_order_status"),
            models.Index(fields=["placed_at"], name="idx_order_placed_at"),
            models.Index(
                fields=["status", "cancellation_deadline"],
                name="idx_order_status_deadline",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(subtotal_amount=F("commission_amount") + F("chef_earnings_amount")),
                name="chk_order_split_equals_subtotal",
            ),
            models.CheckConstraint(
                condition=Q(total_amount__gte=0),
                name="chk_order_total_non_negative",
            ),
        ]

    _IMMUTABLE_FIELDS_AFTER_PLACEMENT = (
        "customer_id",
        "chef_id",
        "delivery_type",
        "subtotal_amount",
        "delivery_fee_amount",
        "tax_amount",
        "promo_code",
        "discount_amount",
        "commission_amount",
        "chef_earnings_amount",
        "total_amount",
        "placed_at",
        "grace_period_seconds",
        "cancellation_deadline",
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in (self.STATUS_DELIVERED, self.STATUS_CANCELLED)

    def breakdown_snapshot(self) -> dict:
        return {
            "subtotal": self.subtotal_amount,
            "delivery_fee": self.delivery_fee_amount,
            "taxes_and_fees": self.tax_amount,
            "promo_code": self.promo_code,
            "promo_discount": self.discount_amount,
            "platform_commission": self.commission_amount,
            "chef_net_earnings": self.chef_earnings_amount,
            "total": self.total_amount,
        }

    def _validate_immutable(self, previous: "Order"):
        for field in self._IMMUTABLE_FIELDS_AFTER_PLACEMENT:
            if getattr(self, field) != getattr(previous, field):
                raise ValidationError(
                    f"Order {previous.order_number} is immutable after placement. "
                    f"Field '{field}' cannot be changed."
                )

    def save(self, *args, **kwargs):
        if not self._state.adding:
            previous = Order.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        if not self.order_number:
            prefix = timezone.now().strftime("ORD%Y%m%d")
            self.order_number = f"{prefix}-{uuid.uuid4().hex[:8].upper()}"

        if self.cancellation_deadline is None:
            self.cancellation_deadline = deadline_for(self.placed_at, self.grace_period_seconds)

        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.order_number} | {self.status} | {self.total_amount}"
