# payouts/management/commands/generate_payouts.py

from __future__ import annotations

from datetime import datetime, time

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from orders.constants import RECIPIENT_TYPES
from orders.services.money import rupees
from payouts.services.batch_engine import generate_batch, process_bulk
from payouts.services.exceptions import PayoutError
from payouts.services.schedules import active_schedule_for


def _parse_date(s: str | None):
    if not s:
        return None
    try:
        return datetime.strptime(s, "%Y-%m-%d").date()
    except ValueError:
        return None


class Command(BaseCommand):
    help = "Generate payout records for the most recent closed period of a recipient type."

    def add_arguments(self, parser):
        parser.add_argument(
            "--type",
            dest="recipient_type",
            required=True,
            choices=sorted(RECIPIENT_TYPES),
            help="Recipient type (chef | delivery)",
        )
        parser.add_argument("--as-of", dest="as_of", help="Reference date YYYY-MM-DD (default: now)")
        parser.add_argument(
            "--process",
            action="store_true",
            help="Also hand every pending record of the type to the payment rail",
        )

    def handle(self, *args, **options):
        recipient_type = options["recipient_type"]

        as_of = None
        if options.get("as_of"):
            as_of_date = _parse_date(options["as_of"])
            if as_of_date is None:
                raise CommandError("Invalid --as-of date. Use YYYY-MM-DD")
            # End of the given local day, so a period closing that day is included.
            as_of = timezone.make_aware(
                datetime.combine(as_of_date, time.max),
                timezone.get_current_timezone(),
            )

        try:
            schedule = active_schedule_for(recipient_type)
            records = generate_batch(recipient_type=recipient_type, schedule=schedule, as_of=as_of)
        except PayoutError as exc:
            raise CommandError(str(exc)) from exc

        self.stdout.write(self.style.MIGRATE_HEADING(f"Payout batch ({recipient_type}, v{schedule.version})"))
        for record in records:
            self.stdout.write(
                f"  {record.recipient_id}: gross=₹{rupees(record.gross_earnings)} "
                f"fee=₹{rupees(record.processing_fee)} net=₹{rupees(record.net_amount)} due={record.due_date:%Y-%m-%d}"
            )
        self.stdout.write(self.style.SUCCESS(f"Created: {len(records)}"))

        if options.get("process"):
            results = process_bulk(recipient_type=recipient_type)
            failed = [r for r in results if not r.ok]
            for result in failed:
                self.stdout.write(self.style.WARNING(f"  {result.payout_id}: {result.error_code} {result.error}"))
            self.stdout.write(
                self.style.SUCCESS(
                    f"Processed: {sum(1 for r in results if r.changed)} | Failed: {len(failed)}"
                )
            )
