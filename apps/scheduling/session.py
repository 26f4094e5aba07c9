"""
Client detail session: every edit a case manager makes while a client's
detail panel is open goes through here into a PendingChangeLedger.

The session never writes directly. Reads go through ``effective_client()``
so the schedule shown always reflects unsaved edits; ``close()`` and
``archive()`` sync the ledger.
"""
import logging
from collections import namedtuple
from datetime import date

from apps.clients.services import aarchive_client

from .exceptions import SchedulingError, StateError, ValidationError
from .pending import CONTACT_FIELDS, DATE_FIELDS
from .quarterly import (
    QR_COMPLETED_FIELDS,
    QR_DATE_FIELDS,
    compute_quarterly_reviews,
    quarter_date_for_month,
    resolve_next_due_quarter,
)
from .schedule import contact_urgency, upcoming_dates

logger = logging.getLogger(__name__)

CONTACT_DATE_FIELDS = ("last_contact_date", "last_face_to_face_date")

QuarterlyReviewStatus = namedtuple(
    "QuarterlyReviewStatus", ["label", "date", "calculated_date", "completed"],
)


class EffectiveClient:
    """Read-only view of a client with pending ledger values applied.

    Contact flags and schedule dates come from the ledger when an edit is
    pending; every other attribute is read from the underlying client.
    """

    def __init__(self, client, ledger):
        self._client = client
        self._ledger = ledger

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        stored = getattr(self._client, name)
        if name in CONTACT_FIELDS:
            return self._ledger.contact_state(self._client.pk, name, stored)
        if name in DATE_FIELDS:
            value = self._ledger.date_state(self._client.pk, name, stored)
            if name == "next_annual_assessment" and value is None:
                return stored
            return value
        return stored

    def __setattr__(self, name, value):
        if name.startswith("_"):
            super().__setattr__(name, value)
            return
        raise AttributeError("EffectiveClient is read-only; record edits in the ledger")

    def __repr__(self):
        return f"<EffectiveClient {self._client.pk}>"


class ClientDetailSession:
    """Edits to one client's detail panel, buffered in ``ledger``.

    Args:
        client: the Client as loaded when the panel opened.
        ledger: a PendingChangeLedger with dispatchers for the acting user.
        todos: optional iterable of the client's Todo rows, for display.
    """

    def __init__(self, client, ledger, todos=()):
        self.client = client
        self.ledger = ledger
        self.todos = list(todos)
        self.is_open = True

    def _require_open(self):
        if not self.is_open:
            raise StateError("This client detail session has been closed")

    # ── Edits ────────────────────────────────────────────────────────

    def toggle_contact(self, field):
        """Flip a contact checkbox. Returns the new effective value."""
        self._require_open()
        if field not in CONTACT_FIELDS:
            raise ValidationError(f"Unknown contact field {field!r}")
        new_value = not getattr(self.effective_client(), field)
        self.ledger.add_contact_change(self.client.pk, field, new_value)
        return new_value

    def toggle_todo(self, todo):
        """Flip a todo's completion. Returns the new effective value."""
        self._require_open()
        new_value = not self.todo_completed(todo)
        self.ledger.add_todo_change(todo.pk, new_value)
        return new_value

    def set_quarterly_review_completed(self, index, checked):
        """Tick or untick a quarterly review.

        Ticking the 4th quarter ends the annual cycle, so all four boxes
        are cleared instead of Q4 being marked.
        """
        self._require_open()
        if index not in range(4):
            raise ValidationError(f"Quarter index must be 0-3, got {index!r}")
        if index == 3 and checked:
            for field in QR_COMPLETED_FIELDS:
                self.ledger.add_contact_change(self.client.pk, field, False)
            return
        self.ledger.add_contact_change(self.client.pk, QR_COMPLETED_FIELDS[index], checked)

    def set_quarterly_review_month(self, index, month, today):
        """Override one quarter's date with a month in ``today``'s year."""
        self._require_open()
        when = quarter_date_for_month(index, today.year, month)
        self.ledger.add_date_change(self.client.pk, QR_DATE_FIELDS[index], when)
        return when

    def set_annual_assessment_month(self, month, today):
        """Move the annual assessment and re-derive all four quarter dates."""
        self._require_open()
        if month not in range(1, 13):
            raise ValidationError(f"Month must be 1-12, got {month!r}")
        annual = date(today.year, month, 1)
        self.ledger.add_date_change(self.client.pk, "next_annual_assessment", annual)
        self._write_calculated_dates(annual)
        return annual

    def reset_to_calculated_dates(self):
        """Replace quarter overrides with dates calculated from the annual date."""
        self._require_open()
        self._write_calculated_dates(self.effective_client().next_annual_assessment)

    def _write_calculated_dates(self, annual):
        for field, review in zip(QR_DATE_FIELDS, compute_quarterly_reviews(annual)):
            self.ledger.add_date_change(self.client.pk, field, review.date)

    def record_contact_today(self, field, today):
        """The "Today" button next to last contact / last face-to-face."""
        return self.set_contact_date(field, today)

    def set_contact_date(self, field, value):
        self._require_open()
        if field not in CONTACT_DATE_FIELDS:
            raise ValidationError(f"{field!r} is not a contact date field")
        self.ledger.add_date_change(self.client.pk, field, value)
        return value

    # ── Reads ────────────────────────────────────────────────────────

    def effective_client(self):
        return EffectiveClient(self.client, self.ledger)

    def todo_completed(self, todo):
        return self.ledger.todo_state(todo.pk, todo.completed)

    def next_due_quarter(self):
        return resolve_next_due_quarter(self.effective_client())

    def quarterly_reviews(self):
        """The four quarters with effective dates and completion flags."""
        client = self.effective_client()
        statuses = []
        calculated = compute_quarterly_reviews(client.next_annual_assessment)
        for review, date_field, done_field in zip(calculated, QR_DATE_FIELDS, QR_COMPLETED_FIELDS):
            override = getattr(client, date_field)
            statuses.append(QuarterlyReviewStatus(
                label=review.label,
                date=override if override is not None else review.date,
                calculated_date=review.date,
                completed=getattr(client, done_field),
            ))
        return statuses

    def upcoming_dates(self, today):
        return upcoming_dates(self.effective_client(), today)

    def contact_urgency(self, today):
        return contact_urgency(self.effective_client(), today)

    # ── Sync ─────────────────────────────────────────────────────────

    async def _sync(self):
        if not self.ledger.has_pending_changes:
            return
        try:
            await self.ledger.flush()
        except SchedulingError:
            logger.warning(
                "Failed to save pending changes for client %s", self.client.pk, exc_info=True,
            )
            raise

    async def close(self):
        """Save pending changes and close. On failure the session stays open."""
        await self._sync()
        self.is_open = False

    async def archive(self, user):
        """Save pending changes, then archive the client for ``user``.

        Nothing is archived if the save fails.
        """
        self._require_open()
        await self._sync()
        await aarchive_client(user, self.client.pk)
        self.is_open = False
        logger.info("Archived client %s from its detail session", self.client.pk)
