# payouts/services/batch_engine.py

"""
======================================================
PATH: payouts/services/batch_engine.py
======================================================
PAYOUT BATCH ENGINE

generate_batch:
- Folds unconsumed ledger entries for one recipient type into one pending
  PayoutRecord per recipient for the most recent closed period.
- Entries earned before period_end that were never paid (sub-minimum in
  an earlier period) are carried into this batch.
- Sub-minimum totals produce no record; their entries stay unconsumed.
- Record creation and entry consumption (PayoutLine) happen in one
  transaction, serialized per (recipient type, schedule) by locking the
  schedule row.
- Only the latest schedule version may generate; a superseded or
  deactivated schedule is refused.
- Re-running for a settled period is a no-op (idempotency key:
  recipient_type, recipient_id, period_start, period_end).

process_individual / process_bulk:
- pending -> processing after checking the recipient's PayoutAccount.
- Non-pending records are returned unchanged.
- Bulk processing isolates every record in its own savepoint and reports
  per-record results; one bad bank account never aborts the batch.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from payouts.models import PayoutAccount, PayoutLine, PayoutRecord, PayoutSchedule
from payouts.services.exceptions import (
    InactiveScheduleError,
    PayoutAccountError,
    PayoutError,
    PayoutScheduleMismatchError,
    SupersededScheduleError,
)
from payouts.services.payout_lifecycle import get_payout_for_update, validate_transition
from payouts.services.periods import period_window
from settlement.models import LedgerEntry
from settlement.services.exceptions import SettlementInvariantError

logger = logging.getLogger("payouts")

__all__ = [
    "PayoutProcessResult",
    "period_window",
    "generate_batch",
    "process_individual",
    "process_bulk",
]


@dataclass(frozen=True)
class PayoutProcessResult:
    payout_id: str
    status: str
    changed: bool
    ok: bool = True
    error: str = ""
    error_code: str = ""

    def as_dict(self) -> dict:
        return {
            "payout_id": self.payout_id,
            "status": self.status,
            "changed": self.changed,
            "ok": self.ok,
            "error": self.error,
            "error_code": self.error_code,
        }


# ============================================================
# GENERATION
# ============================================================


def _unconsumed_entries(*, recipient_type: str, period_end: datetime):
    return (
        LedgerEntry.objects.filter(
            recipient_type=recipient_type,
            earned_at__lt=period_end,
            payout_line__isnull=True,
        )
        .order_by("recipient_id", "earned_at", "id")
    )


def _group_by_recipient(entries) -> "OrderedDict[str, list[LedgerEntry]]":
    grouped: OrderedDict[str, list[LedgerEntry]] = OrderedDict()
    for entry in entries:
        grouped.setdefault(entry.recipient_id, []).append(entry)
    return grouped


def _create_record(
    *,
    schedule: PayoutSchedule,
    recipient_id: str,
    entries: list[LedgerEntry],
    period_start: datetime,
    period_end: datetime,
) -> PayoutRecord | None:
    gross = sum(e.amount for e in entries)
    fees_withheld = sum(e.platform_fee for e in entries)

    try:
        with transaction.atomic():
            record = PayoutRecord.objects.create(
                recipient_type=schedule.recipient_type,
                recipient_id=recipient_id,
                schedule=schedule,
                period_start=period_start,
                period_end=period_end,
                gross_earnings=gross,
                platform_fee_already_deducted=fees_withheld,
                processing_fee=schedule.processing_fee,
                net_amount=gross - schedule.processing_fee,
                status=PayoutRecord.STATUS_PENDING,
                due_date=period_end + timedelta(days=int(settings.PAYOUT_DUE_DAYS)),
            )
    except IntegrityError:
        already_settled = PayoutRecord.objects.filter(
            recipient_type=schedule.recipient_type,
            recipient_id=recipient_id,
            period_start=period_start,
            period_end=period_end,
        ).exists()
        if not already_settled:
            raise
        # Same idempotency key written concurrently; that batch owns it.
        logger.info(
            "Payout record already exists for period; skipped",
            extra={"recipient_id": recipient_id, "period_end": period_end.isoformat()},
        )
        return None

    try:
        PayoutLine.objects.bulk_create(
            [PayoutLine(payout=record, ledger_entry=e, amount=e.amount) for e in entries]
        )
    except IntegrityError as exc:
        raise SettlementInvariantError(
            f"Ledger entry for recipient {recipient_id} was already consumed by another payout"
        ) from exc

    line_total = sum(record.lines.values_list("amount", flat=True))
    if line_total != record.gross_earnings:
        raise SettlementInvariantError(
            f"Payout {record.id}: lines {line_total} != gross {record.gross_earnings}"
        )
    if record.net_amount != record.gross_earnings - record.processing_fee:
        raise SettlementInvariantError(f"Payout {record.id}: net != gross - fee")

    return record


@transaction.atomic
def generate_batch(
    *,
    recipient_type: str,
    schedule: PayoutSchedule,
    as_of: datetime | None = None,
) -> list[PayoutRecord]:
    if schedule.recipient_type != recipient_type:
        raise PayoutScheduleMismatchError(
            f"Schedule v{schedule.version} is for '{schedule.recipient_type}', "
            f"not '{recipient_type}'"
        )

    # Serialize generation per (recipient type, schedule).
    schedule = PayoutSchedule.objects.select_for_update().get(pk=schedule.pk)

    if not schedule.is_active:
        raise InactiveScheduleError(
            f"Schedule v{schedule.version} for '{recipient_type}' is inactive"
        )

    latest = PayoutSchedule.latest_for(recipient_type)
    if latest.pk != schedule.pk:
        if not latest.is_active:
            raise InactiveScheduleError(
                f"Payout schedule for '{recipient_type}' was deactivated in v{latest.version}"
            )
        raise SupersededScheduleError(
            f"Schedule v{schedule.version} for '{recipient_type}' was superseded by v{latest.version}"
        )

    as_of = as_of or timezone.now()
    period_start, period_end = period_window(schedule, as_of)

    grouped = _group_by_recipient(
        _unconsumed_entries(recipient_type=recipient_type, period_end=period_end)
    )

    created: list[PayoutRecord] = []
    for recipient_id, entries in grouped.items():
        gross = sum(e.amount for e in entries)

        if gross <= 0 or gross < schedule.minimum_amount:
            logger.info(
                "Below payout minimum; earnings roll over",
                extra={
                    "recipient_type": recipient_type,
                    "recipient_id": recipient_id,
                    "gross": gross,
                    "minimum": schedule.minimum_amount,
                },
            )
            continue

        if PayoutRecord.objects.filter(
            recipient_type=recipient_type,
            recipient_id=recipient_id,
            period_start=period_start,
            period_end=period_end,
        ).exists():
            logger.debug(
                "Period already settled for recipient; skipped",
                extra={"recipient_id": recipient_id, "period_end": period_end.isoformat()},
            )
            continue

        record = _create_record(
            schedule=schedule,
            recipient_id=recipient_id,
            entries=entries,
            period_start=period_start,
            period_end=period_end,
        )
        if record is not None:
            created.append(record)

    logger.info(
        "Payout batch generated",
        extra={
            "recipient_type": recipient_type,
            "schedule_version": schedule.version,
            "period_start": period_start.isoformat(),
            "period_end": period_end.isoformat(),
            "records": len(created),
        },
    )
    return created


# ============================================================
# PROCESSING
# ============================================================


def _assert_payout_account(payout: PayoutRecord):
    account = PayoutAccount.objects.filter(
        recipient_type=payout.recipient_type,
        recipient_id=payout.recipient_id,
    ).first()

    if account is None:
        raise PayoutAccountError(
            f"{payout.recipient_type} {payout.recipient_id} has no payout account"
        )
    if not account.has_valid_bank_details():
        raise PayoutAccountError(
            f"{payout.recipient_type} {payout.recipient_id} has invalid bank details"
        )


@transaction.atomic
def process_individual(*, payout_id, at: datetime | None = None) -> PayoutProcessResult:
    """
    Hand a pending payout to the payment rail (pending -> processing).
    Returns synchronously; completion arrives later via a rail callback.
    """
    payout = get_payout_for_update(payout_id)

    if payout.status != PayoutRecord.STATUS_PENDING:
        return PayoutProcessResult(payout_id=str(payout.id), status=payout.status, changed=False)

    _assert_payout_account(payout)
    validate_transition(payout=payout, target_status=PayoutRecord.STATUS_PROCESSING)

    payout.status = PayoutRecord.STATUS_PROCESSING
    payout.processed_at = at or timezone.now()
    payout.save(update_fields=["status", "processed_at", "updated_at"])

    logger.info(
        "Payout handed to rail",
        extra={
            "payout_id": str(payout.id),
            "recipient_id": payout.recipient_id,
            "net_amount": payout.net_amount,
        },
    )
    return PayoutProcessResult(payout_id=str(payout.id), status=payout.status, changed=True)


def process_bulk(*, recipient_type: str, at: datetime | None = None) -> list[PayoutProcessResult]:
    pending_ids = list(
        PayoutRecord.objects.filter(
            recipient_type=recipient_type,
            status=PayoutRecord.STATUS_PENDING,
        )
        .order_by("due_date", "recipient_id")
        .values_list("id", flat=True)
    )

    results: list[PayoutProcessResult] = []
    for payout_id in pending_ids:
        try:
            results.append(process_individual(payout_id=payout_id, at=at))
        except PayoutError as exc:
            logger.warning(
                "Payout processing failed for record",
                extra={"payout_id": str(payout_id), "error_code": exc.code},
            )
            results.append(
                PayoutProcessResult(
                    payout_id=str(payout_id),
                    status=PayoutRecord.STATUS_PENDING,
                    changed=False,
                    ok=False,
                    error=str(exc),
                    error_code=exc.code,
                )
            )

    logger.info(
        "Bulk payout processing finished",
        extra={
            "recipient_type": recipient_type,
            "processed": sum(1 for r in results if r.changed),
            "failed": sum(1 for r in results if not r.ok),
        },
    )
    return results
