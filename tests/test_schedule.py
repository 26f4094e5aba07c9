"""Tests for per-client schedule summaries (contact urgency, due flags)."""
from datetime import date
from types import SimpleNamespace

from django.test import SimpleTestCase, override_settings

from apps.scheduling.schedule import contact_urgency, next_face_to_face_due, upcoming_dates
from apps.scheduling.urgency import Urgency


def make_client(**overrides):
    fields = {
        "next_annual_assessment": date(2025, 3, 1),
        "last_contact_date": None,
        "last_face_to_face_date": None,
    }
    for number in range(1, 5):
        fields[f"qr{number}_completed"] = False
        fields[f"qr{number}_date"] = None
    fields.update(overrides)
    return SimpleNamespace(**fields)


class ContactUrgencyTest(SimpleTestCase):

    def test_no_contacts_recorded(self):
        result = contact_urgency(make_client(), date(2025, 6, 1))
        self.assertEqual(result.last_contact, Urgency.UNKNOWN)
        self.assertEqual(result.last_face_to_face, Urgency.UNKNOWN)
        self.assertEqual(result.next_face_to_face, Urgency.UNKNOWN)
        self.assertIsNone(result.next_face_to_face_date)

    def test_stale_contact_and_due_visit(self):
        client = make_client(
            last_contact_date=date(2025, 5, 1),
            last_face_to_face_date=date(2025, 3, 10),
        )
        result = contact_urgency(client, date(2025, 6, 1))
        self.assertEqual(result.last_contact, Urgency.CRITICAL)
        self.assertEqual(result.last_face_to_face, Urgency.HIGH)
        self.assertEqual(result.next_face_to_face_date, date(2025, 6, 8))
        self.assertEqual(result.next_face_to_face, Urgency.LOW)

    def test_overdue_visit(self):
        client = make_client(last_face_to_face_date=date(2025, 2, 1))
        result = contact_urgency(client, date(2025, 6, 1))
        self.assertEqual(result.last_face_to_face, Urgency.CRITICAL)
        self.assertEqual(result.next_face_to_face, Urgency.CRITICAL)

    @override_settings(CONTACT_STALENESS_DAYS=60)
    def test_thresholds_come_from_settings(self):
        client = make_client(last_contact_date=date(2025, 5, 1))
        self.assertEqual(contact_urgency(client, date(2025, 6, 1)).last_contact, Urgency.LOW)

    def test_next_face_to_face_is_ninety_days_out(self):
        self.assertEqual(next_face_to_face_due(date(2025, 1, 1)), date(2025, 4, 1))
        self.assertIsNone(next_face_to_face_due(None))


class UpcomingDatesTest(SimpleTestCase):

    def test_annual_due_this_month(self):
        result = upcoming_dates(make_client(), date(2025, 3, 10))
        self.assertTrue(result.is_annual_due)
        self.assertFalse(result.is_annual_due_next_month)

    def test_quarter_due_this_month(self):
        result = upcoming_dates(make_client(), date(2025, 6, 10))
        self.assertTrue(result.is_qr_due)
        self.assertEqual(result.next_qr_index, 0)
        self.assertEqual(result.next_qr_date, date(2025, 6, 1))

    def test_q4_month_before_annual(self):
        result = upcoming_dates(make_client(), date(2025, 2, 10))
        self.assertTrue(result.is_q4)
        self.assertTrue(result.is_annual_due_next_month)

    def test_q4_wraps_from_december_to_january(self):
        client = make_client(next_annual_assessment=date(2026, 1, 1))
        result = upcoming_dates(client, date(2025, 12, 10))
        self.assertTrue(result.is_annual_due_next_month)
        self.assertTrue(result.is_q4)

    def test_override_drives_next_qr(self):
        client = make_client(qr1_completed=True, qr2_date=date(2025, 8, 1))
        result = upcoming_dates(client, date(2025, 8, 5))
        self.assertEqual(result.next_qr_index, 1)
        self.assertTrue(result.is_qr_due)
        self.assertEqual(result.qr_dates[1], date(2025, 9, 1))
