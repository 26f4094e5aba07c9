"""Errors raised by the scheduling engine and the pending-change ledger."""


class SchedulingError(Exception):
    """Base class for scheduling errors."""


class ValidationError(SchedulingError):
    """A change, field name, month or mode is malformed.

    Raised when a pending change is constructed, so bad input never
    reaches the ledger or the database.
    """


class StateError(SchedulingError):
    """The ledger cannot flush right now.

    Either a flush is already running or no dispatchers were configured.
    """


class DispatchFailure(SchedulingError):
    """One or more writes failed while flushing pending changes.

    ``failures`` holds ``(change, exception)`` pairs in ledger order. The
    ledger keeps every entry when this is raised, so the same flush can be
    retried without re-entering anything.
    """

    def __init__(self, failures):
        self.failures = list(failures)
        count = len(self.failures)
        first = self.failures[0][1] if self.failures else None
        detail = f": {first}" if first is not None else ""
        noun = "change" if count == 1 else "changes"
        super().__init__(f"Failed to save {count} pending {noun}{detail}")
