# payouts/models/schedule.py

"""
======================================================
PATH: payouts/models/schedule.py
======================================================
PAYOUT SCHEDULE (VERSIONED CONFIGURATION)

Per recipient type: frequency, anchor day, minimum amount, processing fee.

Guarantees:
- Rows are immutable; an edit is a new version (PayoutSchedule.revise)
- The latest version for a recipient type is the current configuration;
  deactivating is also a new version with is_active=False
- PayoutRecords reference the exact version they were generated with, so
  historical batches stay reproducible

anchor_day:
- weekly / bi-weekly: weekday the period closes on (0 = Monday .. 6 = Sunday)
- monthly: day of month the period closes on (1..31, clamped to month length)
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.db.models import F, Q

from orders.constants import RECIPIENT_TYPE_CHOICES


class PayoutSchedule(models.Model):
    FREQ_WEEKLY = "weekly"
    FREQ_BIWEEKLY = "bi-weekly"
    FREQ_MONTHLY = "monthly"

    FREQUENCY_CHOICES = [
        (FREQ_WEEKLY, "Weekly"),
        (FREQ_BIWEEKLY, "Every two weeks"),
        (FREQ_MONTHLY, "Monthly"),
    ]

    _REVISABLE_FIELDS = (
        "frequency",
        "anchor_day",
        "minimum_amount",
        "processing_fee",
        "is_active",
    )

    recipient_type = models.CharField(max_length=16, choices=RECIPIENT_TYPE_CHOICES)
    frequency = models.CharField(max_length=16, choices=FREQUENCY_CHOICES)
    anchor_day = models.PositiveSmallIntegerField()

    minimum_amount = models.BigIntegerField(help_text="Minimum gross earnings (paise) to issue a payout")
    processing_fee = models.BigIntegerField(help_text="Flat fee (paise) charged once per payout record")

    is_active = models.BooleanField(default=True)
    version = models.PositiveIntegerField()

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["recipient_type", "-version"]
        constraints = [
            models.UniqueConstraint(
                fields=["recipient_type", "version"],
                name="uniq_payout_schedule_type_version",
            ),
            models.CheckConstraint(
                condition=Q(processing_fee__gte=0),
                name="chk_payout_schedule_fee_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(minimum_amount__gte=F("processing_fee")),
                name="chk_payout_schedule_minimum_covers_fee",
            ),
        ]

    def __str__(self):
        state = "active" if self.is_active else "inactive"
        return f"{self.recipient_type} v{self.version} {self.frequency} ({state})"

    def clean(self):
        if self.frequency in (self.FREQ_WEEKLY, self.FREQ_BIWEEKLY):
            if self.anchor_day is None or not 0 <= self.anchor_day <= 6:
                raise ValidationError({"anchor_day": "Weekly anchors are weekdays 0 (Mon) .. 6 (Sun)"})
        elif self.frequency == self.FREQ_MONTHLY:
            if self.anchor_day is None or not 1 <= self.anchor_day <= 31:
                raise ValidationError({"anchor_day": "Monthly anchors are days 1 .. 31"})

        if self.processing_fee is not None and self.processing_fee < 0:
            raise ValidationError({"processing_fee": "processing_fee cannot be negative"})

        if (
            self.minimum_amount is not None
            and self.processing_fee is not None
            and self.minimum_amount < self.processing_fee
        ):
            raise ValidationError(
                {"minimum_amount": "minimum_amount must cover the processing fee"}
            )

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("PayoutSchedule versions are immutable; use PayoutSchedule.revise()")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("PayoutSchedule versions are immutable and cannot be deleted")

    @classmethod
    def latest_for(cls, recipient_type: str):
        return cls.objects.filter(recipient_type=recipient_type).order_by("-version").first()

    @classmethod
    def revise(cls, *, recipient_type: str, **changes) -> "PayoutSchedule":
        """
        Create the next version for recipient_type. Unspecified fields are
        carried over from the latest version (a first version must specify
        frequency, anchor_day, minimum_amount and processing_fee).
        """
        unknown = set(changes) - set(cls._REVISABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown schedule fields: {', '.join(sorted(unknown))}")

        with transaction.atomic():
            latest = (
                cls.objects.select_for_update()
                .filter(recipient_type=recipient_type)
                .order_by("-version")
                .first()
            )

            values = {}
            if latest is not None:
                values = {name: getattr(latest, name) for name in cls._REVISABLE_FIELDS}
            values.update(changes)

            return cls.objects.create(
                recipient_type=recipient_type,
                version=(latest.version + 1) if latest is not None else 1,
                **values,
            )
