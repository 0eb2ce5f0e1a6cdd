# orders/tests/test_commands.py

from __future__ import annotations

from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from orders.models import Order
from orders.tests.factories import local_dt, place


class ConfirmExpiredOrdersCommandTests(TestCase):
    def test_confirms_lapsed_orders(self):
        order = place(placed_at=local_dt(2024, 1, 9, 12, 0))
        out = StringIO()

        call_command("confirm_expired_orders", stdout=out)

        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_CONFIRMED)
        self.assertIn("Confirmed: 1", out.getvalue())
