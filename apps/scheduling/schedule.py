"""Per-client schedule summaries built on the pure date calculators.

Thresholds come from settings (CONTACT_STALENESS_DAYS and friends) so an
agency can change its contact policy without a code change.
"""
from collections import namedtuple
from datetime import timedelta

from django.conf import settings

from .quarterly import compute_quarterly_reviews, resolve_next_due_quarter
from .urgency import ELAPSED, UPCOMING, classify_urgency

ContactUrgency = namedtuple(
    "ContactUrgency",
    ["last_contact", "last_face_to_face", "next_face_to_face", "next_face_to_face_date"],
)

UpcomingDates = namedtuple(
    "UpcomingDates",
    [
        "is_annual_due",
        "is_annual_due_next_month",
        "is_qr_due",
        "is_q4",
        "annual_date",
        "qr_dates",
        "next_qr_date",
        "next_qr_index",
    ],
)


def next_face_to_face_due(last_face_to_face):
    """Date the next face-to-face visit is due, or None if none recorded."""
    if last_face_to_face is None:
        return None
    return last_face_to_face + timedelta(days=settings.FACE_TO_FACE_INTERVAL_DAYS)


def contact_urgency(client, today):
    """Urgency of a client's last contact, last visit and next visit."""
    next_visit = next_face_to_face_due(client.last_face_to_face_date)
    return ContactUrgency(
        last_contact=classify_urgency(
            client.last_contact_date, settings.CONTACT_STALENESS_DAYS, ELAPSED, today,
        ),
        last_face_to_face=classify_urgency(
            client.last_face_to_face_date, settings.FACE_TO_FACE_STALENESS_DAYS, ELAPSED, today,
        ),
        next_face_to_face=classify_urgency(
            next_visit, settings.FACE_TO_FACE_WARNING_DAYS, UPCOMING, today,
        ),
        next_face_to_face_date=next_visit,
    )


def _following_month(month):
    return 1 if month == 12 else month + 1


def upcoming_dates(client, today):
    """Month-level due flags for the caseload list.

    A review or assessment counts as due when it falls in the current
    calendar month. ``is_q4`` flags the month where a quarterly review and
    the next month's annual assessment stack up.
    """
    annual_date = client.next_annual_assessment
    current_month = today.month
    next_month = _following_month(current_month)

    qr_dates = [review.date for review in compute_quarterly_reviews(annual_date)]
    next_qr = resolve_next_due_quarter(client)

    return UpcomingDates(
        is_annual_due=annual_date.month == current_month,
        is_annual_due_next_month=annual_date.month == next_month,
        is_qr_due=next_qr.effective_date.month == current_month,
        is_q4=any(
            qr.month == current_month and annual_date.month == next_month
            for qr in qr_dates
        ),
        annual_date=annual_date,
        qr_dates=qr_dates,
        next_qr_date=next_qr.effective_date,
        next_qr_index=next_qr.index,
    )
