"""
Pending-change ledger: optimistic edits buffered until an explicit sync.

A case manager can tick contact boxes, complete quarterly reviews, pick
dates and complete todos on a client's detail page without a round trip per
click. Each edit is recorded here, keyed by what it changes, and the page
reads the *effective value* (pending edit if any, else the stored value).
When the page is closed or saved, ``flush`` writes every entry concurrently
and clears the ledger only if all writes succeeded.

Every write is an absolute "set field to V", never a toggle or delta, so a
retried flush that re-sends already-applied values is harmless.

    ledger = PendingChangeLedger(OrmDispatchers(request.user))
    ledger.add_contact_change(client.pk, "first_contact_completed", True)
    ledger.contact_state(client.pk, "first_contact_completed", False)  # True
    await ledger.flush()
"""
import asyncio
import logging
from collections import namedtuple
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import ClassVar, Optional, Protocol

from .exceptions import DispatchFailure, StateError, ValidationError

logger = logging.getLogger(__name__)

TODO = "todo"
CONTACT = "contact"
DATE = "date"

CONTACT_FIELDS = (
    "first_contact_completed",
    "second_contact_completed",
    "qr1_completed",
    "qr2_completed",
    "qr3_completed",
    "qr4_completed",
)

DATE_FIELDS = (
    "last_contact_date",
    "last_face_to_face_date",
    "next_annual_assessment",
    "qr1_date",
    "qr2_date",
    "qr3_date",
    "qr4_date",
)

# Dates every client must keep.
REQUIRED_DATE_FIELDS = ("next_annual_assessment",)

ChangeKey = namedtuple("ChangeKey", ["kind", "entity_id", "field"])


def _require_id(value, name):
    if value is None or value == "":
        raise ValidationError(f"{name} is required")


@dataclass(frozen=True)
class TodoChange:
    """Mark a todo complete or incomplete."""

    todo_id: int
    completed: bool
    kind: ClassVar[str] = TODO

    def __post_init__(self):
        _require_id(self.todo_id, "todo_id")
        if not isinstance(self.completed, bool):
            raise ValidationError(f"Todo completion must be a bool, got {self.completed!r}")

    @property
    def key(self):
        return ChangeKey(TODO, self.todo_id, None)

    @property
    def value(self):
        return self.completed


@dataclass(frozen=True)
class ContactChange:
    """Set one of a client's boolean contact or review flags."""

    client_id: int
    field: str
    value: bool
    kind: ClassVar[str] = CONTACT

    def __post_init__(self):
        _require_id(self.client_id, "client_id")
        if self.field not in CONTACT_FIELDS:
            raise ValidationError(f"Unknown contact field {self.field!r}")
        if not isinstance(self.value, bool):
            raise ValidationError(f"{self.field} must be a bool, got {self.value!r}")

    @property
    def key(self):
        return ChangeKey(CONTACT, self.client_id, self.field)


@dataclass(frozen=True)
class DateChange:
    """Set (or clear, with None) one of a client's date fields.

    The annual assessment date cannot be cleared.
    """

    client_id: int
    field: str
    value: Optional[date]
    kind: ClassVar[str] = DATE

    def __post_init__(self):
        _require_id(self.client_id, "client_id")
        if self.field not in DATE_FIELDS:
            raise ValidationError(f"Unknown date field {self.field!r}")
        if self.value is not None and (
            not isinstance(self.value, date) or isinstance(self.value, datetime)
        ):
            raise ValidationError(f"{self.field} must be a date or None, got {self.value!r}")
        if self.value is None and self.field in REQUIRED_DATE_FIELDS:
            raise ValidationError(f"{self.field} cannot be cleared")

    @property
    def key(self):
        return ChangeKey(DATE, self.client_id, self.field)


PENDING_CHANGE_TYPES = (TodoChange, ContactChange, DateChange)


class Dispatchers(Protocol):
    """Writes the ledger needs from the persistence layer."""

    async def update_field(self, client_id, field_name, value):
        ...

    async def set_todo_completed(self, todo_id, completed):
        ...


class LedgerState(Enum):
    IDLE = "idle"
    DIRTY = "dirty"
    FLUSHING = "flushing"


@dataclass
class PendingChangeLedger:
    """Ordered upsert log of unsaved edits, at most one entry per key.

    Not thread-safe: a ledger belongs to one detail session and is only
    touched from that session's event loop.
    """

    dispatchers: Optional[Dispatchers] = None
    _entries: list = field(default_factory=list, init=False, repr=False)
    _flushing: bool = field(default=False, init=False, repr=False)

    # ── Writing ──────────────────────────────────────────────────────

    def upsert(self, change):
        """Record ``change``, replacing any pending change for the same key."""
        if not isinstance(change, PENDING_CHANGE_TYPES):
            raise ValidationError(f"Not a pending change: {change!r}")
        key = change.key
        self._entries = [entry for entry in self._entries if entry.key != key]
        self._entries.append(change)
        return change

    def add_todo_change(self, todo_id, completed):
        return self.upsert(TodoChange(todo_id, completed))

    def add_contact_change(self, client_id, field_name, value):
        return self.upsert(ContactChange(client_id, field_name, value))

    def add_date_change(self, client_id, field_name, value):
        return self.upsert(DateChange(client_id, field_name, value))

    def discard(self):
        """Drop every pending change without saving."""
        if self._entries:
            logger.info("Discarding %d pending change(s)", len(self._entries))
        self._entries = []

    # ── Reading ──────────────────────────────────────────────────────

    def get(self, key):
        for entry in self._entries:
            if entry.key == key:
                return entry
        return None

    def effective_value(self, key, authoritative):
        """Pending value for ``key`` if there is one, else ``authoritative``."""
        entry = self.get(key)
        return authoritative if entry is None else entry.value

    def todo_state(self, todo_id, original_completed):
        return self.effective_value(ChangeKey(TODO, todo_id, None), original_completed)

    def contact_state(self, client_id, field_name, original_value):
        return self.effective_value(ChangeKey(CONTACT, client_id, field_name), original_value)

    def date_state(self, client_id, field_name, original_value):
        return self.effective_value(ChangeKey(DATE, client_id, field_name), original_value)

    def changes(self):
        return list(self._entries)

    @property
    def has_pending_changes(self):
        return bool(self._entries)

    @property
    def state(self):
        if self._flushing:
            return LedgerState.FLUSHING
        return LedgerState.DIRTY if self._entries else LedgerState.IDLE

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(list(self._entries))

    def __contains__(self, key):
        return self.get(key) is not None

    # ── Syncing ──────────────────────────────────────────────────────

    async def flush(self, dispatchers=None):
        """Write every pending change concurrently; clear them on success.

        Only the entries present when the flush starts are written and
        cleared. Edits made while the writes are in flight stay pending,
        including a newer value for a key that is being written.

        On any failure nothing is cleared and ``DispatchFailure`` is raised,
        so the caller can show an error and retry.
        """
        if self._flushing:
            raise StateError("A flush is already in progress")
        dispatchers = dispatchers or self.dispatchers
        if dispatchers is None:
            raise StateError("No dispatchers configured for this ledger")

        snapshot = list(self._entries)
        if not snapshot:
            return

        self._flushing = True
        try:
            results = await asyncio.gather(
                *(_dispatch(dispatchers, change) for change in snapshot),
                return_exceptions=True,
            )
        finally:
            self._flushing = False

        failures = [
            (change, result)
            for change, result in zip(snapshot, results)
            if isinstance(result, BaseException)
        ]
        if failures:
            logger.warning(
                "Flush failed for %d of %d pending change(s); keeping all for retry",
                len(failures), len(snapshot),
            )
            raise DispatchFailure(failures) from failures[0][1]

        flushed = {id(change) for change in snapshot}
        self._entries = [entry for entry in self._entries if id(entry) not in flushed]
        logger.info("Flushed %d pending change(s)", len(snapshot))


async def _dispatch(dispatchers, change):
    if change.kind == TODO:
        await dispatchers.set_todo_completed(change.todo_id, change.completed)
    else:
        await dispatchers.update_field(change.client_id, change.field, change.value)
