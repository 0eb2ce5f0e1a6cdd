"""
PAYOUT RECORD LIFECYCLE

pending → processing → completed | failed
failed  → pending          (admin retry)

completed is terminal. processing is entered only by the batch engine
(hand-off to the payment rail); completed / failed arrive as rail
callbacks. Repeating a callback that already took effect is a no-op.
"""

from __future__ import annotations

import logging
from datetime import datetime

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from payouts.models import PayoutRecord
from payouts.services.exceptions import InvalidPayoutTransitionError, PayoutNotFoundError

logger = logging.getLogger("payouts")

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    PayoutRecord.STATUS_COMPLETED,
}

ALLOWED_TRANSITIONS = {
    PayoutRecord.STATUS_PENDING: {PayoutRecord.STATUS_PROCESSING},
    PayoutRecord.STATUS_PROCESSING: {
        PayoutRecord.STATUS_COMPLETED,
        PayoutRecord.STATUS_FAILED,
    },
    PayoutRecord.STATUS_FAILED: {PayoutRecord.STATUS_PENDING},
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def validate_transition(*, payout: PayoutRecord, target_status: str):
    if not can_transition(from_status=payout.status, to_status=target_status):
        raise InvalidPayoutTransitionError(payout.id, payout.status, target_status)


def get_payout_for_update(payout_id) -> PayoutRecord:
    try:
        return PayoutRecord.objects.select_for_update().get(pk=payout_id)
    except (PayoutRecord.DoesNotExist, ValidationError, ValueError) as exc:
        raise PayoutNotFoundError(payout_id) from exc


def _log_transition(payout: PayoutRecord, from_status: str):
    logger.info(
        "Payout status changed",
        extra={
            "payout_id": str(payout.id),
            "recipient_id": payout.recipient_id,
            "from_status": from_status,
            "to_status": payout.status,
        },
    )


# ============================================================
# RAIL CALLBACKS + ADMIN RETRY
# ============================================================


@transaction.atomic
def complete_payout(*, payout_id, provider_reference: str, at: datetime | None = None) -> PayoutRecord:
    payout = get_payout_for_update(payout_id)

    if payout.status == PayoutRecord.STATUS_COMPLETED:
        return payout

    validate_transition(payout=payout, target_status=PayoutRecord.STATUS_COMPLETED)

    previous = payout.status
    payout.status = PayoutRecord.STATUS_COMPLETED
    payout.completed_at = at or timezone.now()
    payout.provider_reference = (provider_reference or "").strip()
    payout.save(update_fields=["status", "completed_at", "provider_reference", "updated_at"])

    _log_transition(payout, previous)
    return payout


@transaction.atomic
def fail_payout(*, payout_id, reason: str, at: datetime | None = None) -> PayoutRecord:
    payout = get_payout_for_update(payout_id)

    if payout.status == PayoutRecord.STATUS_FAILED:
        return payout

    validate_transition(payout=payout, target_status=PayoutRecord.STATUS_FAILED)

    previous = payout.status
    payout.status = PayoutRecord.STATUS_FAILED
    payout.failed_at = at or timezone.now()
    payout.failure_reason = (reason or "").strip()
    payout.save(update_fields=["status", "failed_at", "failure_reason", "updated_at"])

    logger.warning(
        "Payout failed at the rail",
        extra={"payout_id": str(payout.id), "reason": payout.failure_reason},
    )
    _log_transition(payout, previous)
    return payout


@transaction.atomic
def retry_payout(*, payout_id) -> PayoutRecord:
    """failed -> pending. The last failure_reason is kept for audit."""
    payout = get_payout_for_update(payout_id)

    validate_transition(payout=payout, target_status=PayoutRecord.STATUS_PENDING)

    previous = payout.status
    payout.status = PayoutRecord.STATUS_PENDING
    payout.retry_count = payout.retry_count + 1
    payout.save(update_fields=["status", "retry_count", "updated_at"])

    _log_transition(payout, previous)
    return payout
