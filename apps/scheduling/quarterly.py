"""
Quarterly-review schedule derived from a client's annual assessment.

Q1, Q2 and Q3 fall on the 1st of the month three, six and nine months after
the annual assessment month. Q4 is deliberately different: it falls on the
last day of the month *before* the assessment month, so the final review
lands just ahead of the next annual assessment.

    March 2025 assessment -> Jun 1 2025, Sep 1 2025, Dec 1 2025, Feb 28 2025

Dates are built from calendar fields only, never by adding day offsets, so
month lengths and the caller's timezone cannot shift a result.
"""
import calendar
from collections import namedtuple
from datetime import date

from .exceptions import ValidationError

QUARTER_LABELS = ("1st Quarter", "2nd Quarter", "3rd Quarter", "4th Quarter")

QR_COMPLETED_FIELDS = ("qr1_completed", "qr2_completed", "qr3_completed", "qr4_completed")
QR_DATE_FIELDS = ("qr1_date", "qr2_date", "qr3_date", "qr4_date")

QuarterlyReview = namedtuple("QuarterlyReview", ["label", "date"])
NextDueQuarter = namedtuple("NextDueQuarter", ["index", "effective_date"])


def add_months(year, month, months):
    """Return ``(year, month)`` shifted by ``months`` (month is 1-12)."""
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def first_of_month(year, month):
    return date(year, month, 1)


def last_of_month(year, month):
    return date(year, month, calendar.monthrange(year, month)[1])


def compute_quarterly_reviews(annual_assessment):
    """Return the four quarterly reviews for an annual assessment date.

    Args:
        annual_assessment: date or datetime. Only the year and month are
            used; the day is treated as the 1st.

    Returns:
        List of four ``QuarterlyReview(label, date)`` in quarter order.
    """
    year, month = annual_assessment.year, annual_assessment.month
    reviews = []
    for offset, label in zip((3, 6, 9), QUARTER_LABELS):
        reviews.append(QuarterlyReview(label, first_of_month(*add_months(year, month, offset))))
    reviews.append(QuarterlyReview(QUARTER_LABELS[3], last_of_month(*add_months(year, month, -1))))
    return reviews


def quarter_date_for_month(index, year, month):
    """Date a manually chosen quarter month stands for.

    Q1-Q3 use the 1st of the month, Q4 the last day, matching
    ``compute_quarterly_reviews``.
    """
    if index not in range(4):
        raise ValidationError(f"Quarter index must be 0-3, got {index!r}")
    if month not in range(1, 13):
        raise ValidationError(f"Month must be 1-12, got {month!r}")
    if index == 3:
        return last_of_month(year, month)
    return first_of_month(year, month)


def next_due_index(client):
    """Index (0-3) of the first incomplete quarter; all complete restarts at 0."""
    for index, field in enumerate(QR_COMPLETED_FIELDS):
        if not getattr(client, field, False):
            return index
    return 0


def resolve_next_due_quarter(client):
    """Which quarterly review is due next for ``client``, and on what date.

    ``client`` is anything with the Client scheduling attributes: a model
    instance, or the effective view a detail session builds over pending
    edits. A non-null ``qrN_date`` override wins over the calculated date.
    """
    index = next_due_index(client)
    override = getattr(client, QR_DATE_FIELDS[index], None)
    if override is not None:
        return NextDueQuarter(index, override)
    calculated = compute_quarterly_reviews(client.next_annual_assessment)[index].date
    return NextDueQuarter(index, calculated)
