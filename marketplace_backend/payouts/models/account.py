# payouts/models/account.py

import re

from django.db import models

from orders.constants import RECIPIENT_TYPE_CHOICES

IFSC_PATTERN = re.compile(r"^[A-Z]{4}0[A-Z0-9]{6}$")


class PayoutAccount(models.Model):
    """
    Bank destination for a chef or delivery partner. A payout can only be
    handed to the rail when the recipient has valid bank details here.
    Only the last digits of the account number are stored.
    """

    recipient_type = models.CharField(max_length=16, choices=RECIPIENT_TYPE_CHOICES)
    recipient_id = models.CharField(max_length=64)

    bank_name = models.CharField(max_length=128)
    account_holder_name = models.CharField(max_length=128)
    account_number_masked = models.CharField(max_length=32, help_text="e.g. ****4567")
    ifsc_code = models.CharField(max_length=11)

    is_verified = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["recipient_type", "recipient_id"],
                name="uniq_payout_account_recipient",
            ),
        ]

    def has_valid_bank_details(self) -> bool:
        return bool(
            self.is_verified
            and (self.account_holder_name or "").strip()
            and (self.account_number_masked or "").strip()
            and IFSC_PATTERN.match((self.ifsc_code or "").strip().upper())
        )

    def __str__(self):
        return f"{self.recipient_type}:{self.recipient_id} {self.bank_name} {self.account_number_masked}"
