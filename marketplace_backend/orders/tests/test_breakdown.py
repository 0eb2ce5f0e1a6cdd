# orders/tests/test_breakdown.py

from __future__ import annotations

from decimal import Decimal

from django.test import SimpleTestCase

from orders.constants import DELIVERY_TYPE_THIRD_PARTY, THIRD_PARTY_DELIVERY_SURCHARGE
from orders.services.breakdown import FeeSchedule, FinancialBreakdown, compute_breakdown
from orders.services.money import apply_rate
from orders.tests.factories import make_cart
from settlement.services.exceptions import SettlementInvariantError


class ApplyRateTests(SimpleTestCase):
    def test_rounds_half_up(self):
        self.assertEqual(apply_rate(10010, Decimal("0.05")), 501)   # 500.5
        self.assertEqual(apply_rate(10001, Decimal("0.05")), 500)   # 500.05
        self.assertEqual(apply_rate(11765, Decimal("0.15")), 1765)  # 1764.75

    def test_zero_amount(self):
        self.assertEqual(apply_rate(0, Decimal("0.15")), 0)


class BreakdownCalculatorTests(SimpleTestCase):
    """
    GUARANTEES:
    - commission + chef net == subtotal for every subtotal
    - total == subtotal + delivery + taxes - discount
    - invalid promo codes never change the total
    """

    # --------------------------------------------------
    # Split invariant
    # --------------------------------------------------

    def test_split_invariant_over_range(self):
        subtotals = list(range(0, 20001, 7)) + [33333, 35294, 99999, 10**9 + 7]

        for subtotal in subtotals:
            with self.subTest(subtotal=subtotal):
                b = compute_breakdown(make_cart(lines=((subtotal, 1),), delivery_fee=2500))

                self.assertEqual(b.platform_commission + b.chef_net_earnings, b.subtotal)
                self.assertEqual(
                    b.total,
                    b.subtotal + b.delivery_fee + b.taxes_and_fees - b.promo_discount,
                )
                self.assertGreaterEqual(b.total, 0)

    def test_chef_absorbs_rounding_remainder(self):
        b = compute_breakdown(make_cart(lines=((35294, 1),)))
        self.assertEqual(b.platform_commission, 5294)
        self.assertEqual(b.chef_net_earnings, 30000)

    # --------------------------------------------------
    # Concrete scenario
    # --------------------------------------------------

    def test_save50_scenario(self):
        cart = make_cart(lines=((50000, 2),), delivery_fee=4000)
        b = compute_breakdown(cart, "SAVE50", FeeSchedule(flat_tax=2000))

        self.assertEqual(b.subtotal, 100000)
        self.assertEqual(b.platform_commission, 15000)
        self.assertEqual(b.chef_net_earnings, 85000)
        self.assertEqual(b.delivery_fee, 4000)
        self.assertEqual(b.taxes_and_fees, 2000)
        self.assertEqual(b.promo_discount, 5000)
        self.assertTrue(b.promo_applied)
        self.assertEqual(b.total, 101000)

    # --------------------------------------------------
    # Promo interaction
    # --------------------------------------------------

    def test_flat_promo_is_clamped_to_subtotal(self):
        b = compute_breakdown(make_cart(lines=((3000, 1),)), "SAVE50")

        self.assertEqual(b.promo_discount, 3000)
        self.assertEqual(b.total, b.taxes_and_fees)

    def test_unknown_code_does_not_change_total(self):
        cart = make_cart(lines=((12345, 3),), delivery_fee=3000)

        plain = compute_breakdown(cart)
        unknown = compute_breakdown(cart, "NOT-A-CODE")

        self.assertEqual(unknown.total, plain.total)
        self.assertFalse(unknown.promo_applied)
        self.assertEqual(unknown.promo_code, "")
        self.assertEqual(unknown.promo_discount, 0)

    def test_promo_does_not_reduce_commission(self):
        cart = make_cart(lines=((20000, 1),))
        self.assertEqual(
            compute_breakdown(cart, "WELCOME").platform_commission,
            compute_breakdown(cart).platform_commission,
        )

    # --------------------------------------------------
    # Cart lines, fees, taxes
    # --------------------------------------------------

    def test_invalid_lines_contribute_nothing(self):
        cart = make_cart(lines=((10000, 2), (5000, -1), (-300, 1), (7000, 0)))
        b = compute_breakdown(cart)
        self.assertEqual(b.subtotal, 20000)

    def test_empty_cart_is_all_zero(self):
        b = compute_breakdown(make_cart(lines=(), delivery_fee=4000), "SAVE50")

        self.assertEqual(b.subtotal, 0)
        self.assertEqual(b.delivery_fee, 0)
        self.assertEqual(b.taxes_and_fees, 0)
        self.assertEqual(b.promo_discount, 0)
        self.assertEqual(b.total, 0)

    def test_default_tax_rate(self):
        b = compute_breakdown(make_cart(lines=((10010, 1),)))
        self.assertEqual(b.taxes_and_fees, 501)

    def test_third_party_delivery_adds_surcharge(self):
        cart = make_cart(delivery_fee=3000, delivery_type=DELIVERY_TYPE_THIRD_PARTY)
        b = compute_breakdown(cart)
        self.assertEqual(b.delivery_fee, 3000 + THIRD_PARTY_DELIVERY_SURCHARGE)

    def test_free_delivery_threshold(self):
        cart = make_cart(lines=((50000, 1),), delivery_fee=3000)

        self.assertEqual(
            compute_breakdown(cart, fee_schedule=FeeSchedule(free_delivery_threshold=50000)).delivery_fee,
            0,
        )
        self.assertEqual(
            compute_breakdown(cart, fee_schedule=FeeSchedule(free_delivery_threshold=50001)).delivery_fee,
            3000,
        )

    def test_meets_minimum(self):
        self.assertTrue(compute_breakdown(make_cart(lines=((10000, 1),), minimum=10000)).meets_minimum)
        self.assertFalse(compute_breakdown(make_cart(lines=((9999, 1),), minimum=10000)).meets_minimum)

    def test_inconsistent_breakdown_is_rejected(self):
        with self.assertRaises(SettlementInvariantError):
            FinancialBreakdown(
                subtotal=1000,
                delivery_fee=0,
                taxes_and_fees=0,
                promo_code="",
                promo_discount=0,
                promo_applied=False,
                platform_commission=150,
                chef_net_earnings=849,
                total=1000,
                meets_minimum=True,
            )
