# settlement/tests/test_ledger_posting.py

from __future__ import annotations

from datetime import timedelta

from django.core.exceptions import ValidationError
from django.test import TestCase

from orders.constants import DELIVERY_TYPE_THIRD_PARTY, RECIPIENT_CHEF, RECIPIENT_DELIVERY
from orders.models import Order
from orders.tests.factories import delivered_order, local_dt, make_cart, place
from settlement.models import LedgerEntry
from settlement.services.exceptions import LedgerPostingError
from settlement.services.ledger_posting import delivery_split, entries_for, post_delivered_order


class LedgerPostingTests(TestCase):
    """
    GUARANTEES:
    - one entry per (order, recipient type), however often posting runs
    - chef amounts are copied from the committed breakdown
    - entries are immutable
    """

    def setUp(self):
        self.at = local_dt(2024, 1, 8, 19, 30)
        self.order = delivered_order(
            subtotal=35294,
            delivery_fee=4000,
            partner_id="partner-1",
            delivered_at=self.at,
        )

    def test_entries_for_chef_and_partner(self):
        chef = LedgerEntry.objects.get(order=self.order, recipient_type=RECIPIENT_CHEF)
        partner = LedgerEntry.objects.get(order=self.order, recipient_type=RECIPIENT_DELIVERY)

        self.assertEqual(chef.recipient_id, "chef-1")
        self.assertEqual(chef.amount, 30000)
        self.assertEqual(chef.platform_fee, 5294)
        self.assertEqual(chef.earned_at, self.at)

        self.assertEqual(partner.recipient_id, "partner-1")
        self.assertEqual(partner.amount, 3600)
        self.assertEqual(partner.platform_fee, 400)

    def test_posting_is_idempotent(self):
        first_ids = sorted(e.id for e in LedgerEntry.objects.filter(order=self.order))

        again = post_delivered_order(order=self.order)
        post_delivered_order(order=self.order, earned_at=self.at + timedelta(days=1))

        self.assertEqual(sorted(e.id for e in again), first_ids)
        self.assertEqual(LedgerEntry.objects.filter(order=self.order).count(), 2)

    def test_only_delivered_orders_settle(self):
        with self.assertRaises(LedgerPostingError):
            post_delivered_order(order=place())

    def test_third_party_order_without_partner_does_not_settle(self):
        order = place(make_cart(delivery_fee=3000, delivery_type=DELIVERY_TYPE_THIRD_PARTY))
        Order.objects.filter(pk=order.id).update(status=Order.STATUS_DELIVERED, delivered_at=self.at)
        order.refresh_from_db()

        with self.assertRaises(LedgerPostingError):
            post_delivered_order(order=order)
        self.assertFalse(LedgerEntry.objects.filter(order=order).exists())

    def test_entries_are_immutable(self):
        entry = LedgerEntry.objects.filter(order=self.order).first()

        entry.amount = 1
        with self.assertRaises(ValidationError):
            entry.save()
        with self.assertRaises(ValidationError):
            entry.delete()

    def test_delivery_split_rounding(self):
        self.assertEqual(delivery_split(4000), (3600, 400))
        self.assertEqual(delivery_split(4005), (3604, 401))
        self.assertEqual(delivery_split(0), (0, 0))

    def test_entries_for_half_open_range(self):
        later = delivered_order(subtotal=10000, delivered_at=self.at + timedelta(days=1))

        rows = entries_for(
            recipient_id="chef-1",
            recipient_type=RECIPIENT_CHEF,
            start=self.at,
            end=self.at + timedelta(days=1),
        )

        self.assertEqual([e.order_id for e in rows], [self.order.id])
        self.assertEqual(entries_for(recipient_id="chef-1").count(), 2)
        self.assertTrue(entries_for(recipient_id="chef-1", start=later.delivered_at).exists())
