# payouts/tests/helpers.py

from __future__ import annotations

from payouts.models import PayoutAccount, PayoutSchedule


def weekly_schedule(recipient_type="chef", **overrides) -> PayoutSchedule:
    """Friday close, ₹500 minimum, ₹10 processing fee."""
    values = {
        "frequency": PayoutSchedule.FREQ_WEEKLY,
        "anchor_day": 4,
        "minimum_amount": 50000,
        "processing_fee": 1000,
    }
    values.update(overrides)
    return PayoutSchedule.revise(recipient_type=recipient_type, **values)


def bank_account(recipient_id, recipient_type="chef", **overrides) -> PayoutAccount:
    values = {
        "bank_name": "HDFC Bank",
        "account_holder_name": "Asha Rao",
        "account_number_masked": "****4567",
        "ifsc_code": "HDFC0001234",
    }
    values.update(overrides)
    return PayoutAccount.objects.create(
        recipient_type=recipient_type,
        recipient_id=str(recipient_id),
        **values,
    )
