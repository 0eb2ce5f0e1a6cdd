# payouts/tests/test_periods.py

from django.test import SimpleTestCase

from orders.tests.factories import local_dt
from payouts.models import PayoutSchedule
from payouts.services.periods import period_window


def _schedule(frequency, anchor_day):
    # Unsaved: period_window only reads frequency / anchor_day.
    return PayoutSchedule(
        recipient_type="chef",
        frequency=frequency,
        anchor_day=anchor_day,
        minimum_amount=0,
        processing_fee=0,
        version=1,
    )


class PeriodWindowTests(SimpleTestCase):
    def test_weekly_closes_on_anchor_weekday(self):
        friday = _schedule(PayoutSchedule.FREQ_WEEKLY, 4)

        self.assertEqual(
            period_window(friday, local_dt(2024, 1, 12, 10, 0)),
            (local_dt(2024, 1, 5), local_dt(2024, 1, 12)),
        )
        self.assertEqual(
            period_window(friday, local_dt(2024, 1, 11, 23, 59)),
            (local_dt(2023, 12, 29), local_dt(2024, 1, 5)),
        )

    def test_biweekly_follows_fortnight_grid(self):
        monday = _schedule(PayoutSchedule.FREQ_BIWEEKLY, 0)

        self.assertEqual(
            period_window(monday, local_dt(2024, 1, 20, 9, 0)),
            (local_dt(2024, 1, 1), local_dt(2024, 1, 15)),
        )
        self.assertEqual(
            period_window(monday, local_dt(2024, 1, 14, 9, 0)),
            (local_dt(2023, 12, 18), local_dt(2024, 1, 1)),
        )

    def test_monthly_clamps_to_month_length(self):
        last_day = _schedule(PayoutSchedule.FREQ_MONTHLY, 31)

        self.assertEqual(
            period_window(last_day, local_dt(2024, 3, 15, 12, 0)),
            (local_dt(2024, 1, 31), local_dt(2024, 2, 29)),
        )
        self.assertEqual(
            period_window(last_day, local_dt(2024, 3, 31, 12, 0)),
            (local_dt(2024, 2, 29), local_dt(2024, 3, 31)),
        )

    def test_monthly_across_year_boundary(self):
        first = _schedule(PayoutSchedule.FREQ_MONTHLY, 1)

        self.assertEqual(
            period_window(first, local_dt(2024, 1, 1, 9, 0)),
            (local_dt(2023, 12, 1), local_dt(2024, 1, 1)),
        )
