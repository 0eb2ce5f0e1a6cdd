# orders/management/commands/confirm_expired_orders.py

from __future__ import annotations

from django.core.management.base import BaseCommand
from django.utils import timezone

from orders.services.order_service import confirm_expired_windows


class Command(BaseCommand):
    help = "Confirm placed orders whose cancellation window has lapsed (run from a scheduler)."

    def handle(self, *args, **options):
        now = timezone.now()
        confirmed = confirm_expired_windows(now=now)

        self.stdout.write(self.style.MIGRATE_HEADING("Confirm expired cancellation windows"))
        self.stdout.write(f"As of: {now.isoformat()}")
        self.stdout.write(self.style.SUCCESS(f"Confirmed: {confirmed}"))
