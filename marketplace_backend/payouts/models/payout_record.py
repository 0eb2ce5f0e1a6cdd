# payouts/models/payout_record.py

import uuid

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from orders.constants import RECIPIENT_TYPE_CHOICES
from payouts.models.schedule import PayoutSchedule


class PayoutRecord(models.Model):
    """
    One recipient's batched, schedule-bound payout.

    GUARANTEES:
    - net_amount = gross_earnings - processing_fee (DB check constraint)
    - (recipient_type, recipient_id, period_start, period_end) is unique:
      the batch idempotency key
    - Money fields and the period are immutable after creation
    - Status only moves through payouts.services.payout_lifecycle rules
    - The ledger entries it covers are linked through PayoutLine

    platform_fee_already_deducted is informational: it was withheld when the
    ledger entries were written and is never deducted again.
    """

    STATUS_PENDING = "pending"
    STATUS_PROCESSING = "processing"
    STATUS_COMPLETED = "completed"
    STATUS_FAILED = "failed"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PROCESSING, "Processing"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_FAILED, "Failed"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    recipient_type = models.CharField(max_length=16, choices=RECIPIENT_TYPE_CHOICES)
    recipient_id = models.CharField(max_length=64)

    schedule = models.ForeignKey(
        PayoutSchedule,
        on_delete=models.PROTECT,
        related_name="payout_records",
        help_text="Exact schedule version used to generate this record",
    )

    period_start = models.DateTimeField()
    period_end = models.DateTimeField()

    gross_earnings = models.BigIntegerField()
    platform_fee_already_deducted = models.BigIntegerField(default=0)
    processing_fee = models.BigIntegerField()
    net_amount = models.BigIntegerField()

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    due_date = models.DateTimeField()

    processed_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)
    failure_reason = models.TextField(blank=True, default="")
    provider_reference = models.CharField(max_length=128, blank=True, default="")
    retry_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-period_end", "recipient_id"]
        indexes = [
            models.Index(fields=["recipient_type", "status"], name="idx_payout_type_status"),
            models.Index(fields=["status", "due_date"], name="idx_payout_status_due"),
            models.Index(fields=["recipient_type", "recipient_id"], name="idx_payout_recipient"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["recipient_type", "recipient_id", "period_start", "period_end"],
                name="uniq_payout_recipient_period",
            ),
            models.CheckConstraint(
                condition=Q(net_amount=F("gross_earnings") - F("processing_fee")),
                name="chk_payout_net_equals_gross_minus_fee",
            ),
            models.CheckConstraint(
                condition=Q(period_end__gt=F("period_start")),
                name="chk_payout_period_end_after_start",
            ),
            models.CheckConstraint(
                condition=Q(net_amount__gte=0),
                name="chk_payout_net_non_negative",
            ),
        ]

    _IMMUTABLE_FIELDS = (
        "recipient_type",
        "recipient_id",
        "schedule_id",
        "period_start",
        "period_end",
        "gross_earnings",
        "platform_fee_already_deducted",
        "processing_fee",
        "net_amount",
        "due_date",
    )

    def is_overdue(self, now=None) -> bool:
        now = now or timezone.now()
        return self.status == self.STATUS_PENDING and self.due_date < now

    def _validate_immutable(self, previous: "PayoutRecord"):
        for field in self._IMMUTABLE_FIELDS:
            if getattr(self, field) != getattr(previous, field):
                raise ValidationError(
                    f"PayoutRecord {previous.id}: field '{field}' cannot be changed after creation."
                )

    def save(self, *args, **kwargs):
        if not self._state.adding:
            previous = PayoutRecord.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("PayoutRecord rows cannot be deleted")

    def __str__(self):
        return (
            f"{self.recipient_type}:{self.recipient_id} "
            f"{self.period_start:%Y-%m-%d}→{self.period_end:%Y-%m-%d} "
            f"net={self.net_amount} ({self.status})"
        )
