# settlement/tests/test_reporting.py

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.test import TestCase

from orders.constants import CHEF_COMMISSION_RATE, DELIVERY_COMMISSION_RATE, RECIPIENT_CHEF, RECIPIENT_DELIVERY
from orders.services.tip_service import add_tip
from orders.tests.factories import delivered_order, local_dt
from settlement.services.exceptions import ReportingError
from settlement.services.reporting import earnings_summary, period_bounds


class PeriodBoundsTests(TestCase):
    def setUp(self):
        self.now = local_dt(2024, 3, 15, 18, 30)

    def test_calendar_periods(self):
        self.assertEqual(period_bounds("daily", self.now), (local_dt(2024, 3, 15), self.now))
        self.assertEqual(period_bounds("monthly", self.now)[0], local_dt(2024, 3, 1))
        self.assertEqual(period_bounds("yearly", self.now)[0], local_dt(2024, 1, 1))

    def test_weekly_is_rolling(self):
        self.assertEqual(period_bounds("weekly", self.now)[0], self.now - timedelta(days=7))

    def test_unknown_period(self):
        with self.assertRaises(ReportingError):
            period_bounds("hourly", self.now)


class EarningsSummaryTests(TestCase):
    def test_period_filtering(self):
        now = local_dt(2024, 1, 10, 18, 0)
        delivered_order(subtotal=20000, delivered_at=local_dt(2024, 1, 10, 10, 0))
        delivered_order(subtotal=10000, delivered_at=local_dt(2024, 1, 9, 10, 0))
        delivered_order(subtotal=50000, delivered_at=local_dt(2023, 12, 20, 10, 0))

        daily = earnings_summary(recipient_id="chef-1", recipient_type=RECIPIENT_CHEF, period="daily", now=now)
        weekly = earnings_summary(recipient_id="chef-1", recipient_type=RECIPIENT_CHEF, period="weekly", now=now)
        yearly = earnings_summary(recipient_id="chef-1", recipient_type=RECIPIENT_CHEF, period="yearly", now=now)

        self.assertEqual(daily.order_count, 1)
        self.assertEqual(daily.net_earnings, 17000)
        self.assertEqual(weekly.order_count, 2)
        self.assertEqual(yearly.order_count, 2)

    def test_summary_figures(self):
        order = delivered_order(subtotal=20000)
        delivered_order(subtotal=10000)
        add_tip(order_id=order.id, recipient_type=RECIPIENT_CHEF, amount=2000)

        summary = earnings_summary(
            recipient_id="chef-1",
            recipient_type=RECIPIENT_CHEF,
            period="weekly",
            expenses=5500,
        )

        self.assertEqual(summary.order_count, 2)
        self.assertEqual(summary.gross_sales, 30000)
        self.assertEqual(summary.platform_fees, 4500)
        self.assertEqual(summary.net_earnings, 25500)
        self.assertEqual(summary.tips, 2000)
        self.assertEqual(summary.gross_revenue, 27500)
        self.assertEqual(summary.net_profit, 22000)
        self.assertEqual(summary.profit_margin, Decimal("80.0"))
        self.assertEqual(summary.average_order_value, 15000)
        self.assertEqual(summary.commission_rate, CHEF_COMMISSION_RATE)

        data = summary.as_dict()
        self.assertEqual(data["profit_margin"], "80.0")
        self.assertEqual(data["commission_rate"], "0.15")

    def test_delivery_partner_summary(self):
        delivered_order(subtotal=10000, delivery_fee=4000, partner_id="partner-1")

        summary = earnings_summary(recipient_id="partner-1", recipient_type=RECIPIENT_DELIVERY, period="daily")

        self.assertEqual(summary.net_earnings, 3600)
        self.assertEqual(summary.platform_fees, 400)
        self.assertEqual(summary.commission_rate, DELIVERY_COMMISSION_RATE)

    def test_empty_period(self):
        summary = earnings_summary(recipient_id="nobody", recipient_type=RECIPIENT_CHEF, period="monthly")

        self.assertEqual(summary.order_count, 0)
        self.assertEqual(summary.profit_margin, Decimal("0.0"))
        self.assertEqual(summary.average_order_value, 0)

    def test_invalid_inputs(self):
        with self.assertRaises(ReportingError):
            earnings_summary(recipient_id="chef-1", recipient_type="customer", period="daily")
        with self.assertRaises(ReportingError):
            earnings_summary(recipient_id="chef-1", recipient_type=RECIPIENT_CHEF, period="daily", expenses=-1)
