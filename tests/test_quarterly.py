"""Tests for the quarterly review schedule."""
from datetime import date, datetime
from types import SimpleNamespace

from django.test import SimpleTestCase

from apps.scheduling.exceptions import ValidationError
from apps.scheduling.quarterly import (
    QUARTER_LABELS,
    add_months,
    compute_quarterly_reviews,
    next_due_index,
    quarter_date_for_month,
    resolve_next_due_quarter,
)


def make_client(annual=date(2025, 3, 1), completed=(False, False, False, False), overrides=(None,) * 4):
    fields = {"next_annual_assessment": annual}
    for number, (done, override) in enumerate(zip(completed, overrides), start=1):
        fields[f"qr{number}_completed"] = done
        fields[f"qr{number}_date"] = override
    return SimpleNamespace(**fields)


class ComputeQuarterlyReviewsTest(SimpleTestCase):

    def test_march_assessment(self):
        reviews = compute_quarterly_reviews(date(2025, 3, 1))
        self.assertEqual(
            [r.date for r in reviews],
            [date(2025, 6, 1), date(2025, 9, 1), date(2025, 12, 1), date(2025, 2, 28)],
        )
        self.assertEqual([r.label for r in reviews], list(QUARTER_LABELS))

    def test_january_assessment_q4_is_previous_december(self):
        reviews = compute_quarterly_reviews(date(2025, 1, 1))
        self.assertEqual(reviews[3].date, date(2024, 12, 31))
        self.assertEqual(reviews[0].date, date(2025, 4, 1))

    def test_year_wraps_for_late_assessment(self):
        reviews = compute_quarterly_reviews(date(2025, 11, 1))
        self.assertEqual(
            [r.date for r in reviews],
            [date(2026, 2, 1), date(2026, 5, 1), date(2026, 8, 1), date(2025, 10, 31)],
        )

    def test_leap_year_february(self):
        self.assertEqual(compute_quarterly_reviews(date(2024, 3, 1))[3].date, date(2024, 2, 29))

    def test_day_of_month_is_ignored(self):
        self.assertEqual(
            compute_quarterly_reviews(date(2025, 3, 17)),
            compute_quarterly_reviews(date(2025, 3, 1)),
        )

    def test_accepts_datetime(self):
        reviews = compute_quarterly_reviews(datetime(2025, 3, 1, 23, 30))
        self.assertEqual(reviews[0].date, date(2025, 6, 1))


class HelpersTest(SimpleTestCase):

    def test_add_months_wraps_both_ways(self):
        self.assertEqual(add_months(2025, 11, 3), (2026, 2))
        self.assertEqual(add_months(2025, 1, -1), (2024, 12))
        self.assertEqual(add_months(2025, 12, 0), (2025, 12))

    def test_quarter_date_for_month(self):
        self.assertEqual(quarter_date_for_month(0, 2025, 4), date(2025, 4, 1))
        self.assertEqual(quarter_date_for_month(3, 2025, 4), date(2025, 4, 30))
        self.assertEqual(quarter_date_for_month(3, 2024, 2), date(2024, 2, 29))

    def test_quarter_date_for_month_rejects_bad_input(self):
        with self.assertRaises(ValidationError):
            quarter_date_for_month(4, 2025, 1)
        with self.assertRaises(ValidationError):
            quarter_date_for_month(0, 2025, 13)


class NextDueQuarterTest(SimpleTestCase):

    def test_first_incomplete_quarter(self):
        client = make_client(completed=(True, False, True, False))
        self.assertEqual(next_due_index(client), 1)

    def test_all_complete_restarts_cycle(self):
        client = make_client(completed=(True, True, True, True))
        due = resolve_next_due_quarter(client)
        self.assertEqual(due.index, 0)
        self.assertEqual(due.effective_date, date(2025, 6, 1))

    def test_calculated_date_when_no_override(self):
        due = resolve_next_due_quarter(make_client(completed=(True, True, False, False)))
        self.assertEqual(due, (2, date(2025, 12, 1)))

    def test_override_wins(self):
        client = make_client(
            completed=(True, False, False, False),
            overrides=(None, date(2025, 10, 1), None, None),
        )
        self.assertEqual(resolve_next_due_quarter(client).effective_date, date(2025, 10, 1))

    def test_override_on_other_quarter_ignored(self):
        client = make_client(overrides=(None, date(2025, 10, 1), None, None))
        self.assertEqual(resolve_next_due_quarter(client).effective_date, date(2025, 6, 1))
