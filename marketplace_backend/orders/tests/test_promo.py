# orders/tests/test_promo.py

from decimal import Decimal

from django.test import SimpleTestCase

from orders.services.promo import KIND_FLAT, KIND_PERCENT, PromoRule, apply_promo


class PromoEngineTests(SimpleTestCase):
    def test_code_matching_is_case_and_whitespace_insensitive(self):
        result = apply_promo("  save50 ", 100000)

        self.assertTrue(result.valid)
        self.assertEqual(result.code, "SAVE50")
        self.assertEqual(result.discount, 5000)

    def test_percentage_rounds_half_up(self):
        # 12345 * 0.10 = 1234.5
        self.assertEqual(apply_promo("FIRST10", 12345).discount, 1235)

    def test_unknown_and_empty_codes_are_soft_failures(self):
        for code in ("NOPE", "", None, "   "):
            with self.subTest(code=code):
                result = apply_promo(code, 50000)
                self.assertFalse(result.valid)
                self.assertEqual(result.discount, 0)

    def test_flat_discount_never_exceeds_subtotal(self):
        for subtotal in (0, 1, 4999, 5000, 5001):
            with self.subTest(subtotal=subtotal):
                self.assertLessEqual(apply_promo("SAVE50", subtotal).discount, subtotal)

    def test_custom_rule_table(self):
        rules = {
            "HALF": PromoRule("HALF", KIND_PERCENT, Decimal("0.50")),
            "BIG": PromoRule("BIG", KIND_FLAT, 10**9),
        }

        self.assertEqual(apply_promo("half", 3001, rules=rules).discount, 1501)
        self.assertEqual(apply_promo("BIG", 3001, rules=rules).discount, 3001)
        self.assertFalse(apply_promo("SAVE50", 3001, rules=rules).valid)
