"""Sorting and search for the caseload list."""
from datetime import date

from apps.scheduling.exceptions import ValidationError
from apps.scheduling.quarterly import resolve_next_due_quarter
from apps.scheduling.schedule import next_face_to_face_due

SORT_DIRECTIONS = ("asc", "desc")
NAME_ORDERS = ("first", "last")


def _name_key(name_order):
    def key(client):
        parts = (client.name or "").split()
        if not parts:
            return ""
        word = parts[0] if name_order == "first" else parts[-1]
        return word.casefold()
    return key


def _date_key(getter):
    # Missing dates sort as the earliest possible value.
    def key(client):
        value = getter(client)
        return value if value is not None else date.min
    return key


SORT_KEYS = {
    "annual_assessment": _date_key(lambda c: c.next_annual_assessment),
    "next_qr": _date_key(lambda c: resolve_next_due_quarter(c).effective_date),
    "last_contact": _date_key(lambda c: c.last_contact_date),
    "last_f2f": _date_key(lambda c: c.last_face_to_face_date),
    "next_f2f": _date_key(lambda c: next_face_to_face_due(c.last_face_to_face_date)),
}
SORT_COLUMNS = ("name",) + tuple(SORT_KEYS)


def sort_clients(clients, column="name", direction="asc", name_order="last"):
    """Return ``clients`` sorted by a caseload column.

    Args:
        clients: iterable of Client (or anything with the same attributes).
        column: one of SORT_COLUMNS.
        direction: "asc" or "desc".
        name_order: for the name column, sort by the "first" or "last" word.
    """
    if column not in SORT_COLUMNS:
        raise ValidationError(f"Unknown sort column {column!r}")
    if direction not in SORT_DIRECTIONS:
        raise ValidationError(f"Sort direction must be 'asc' or 'desc', got {direction!r}")
    if column == "name":
        if name_order not in NAME_ORDERS:
            raise ValidationError(f"Name order must be 'first' or 'last', got {name_order!r}")
        key = _name_key(name_order)
    else:
        key = SORT_KEYS[column]
    return sorted(clients, key=key, reverse=direction == "desc")


def filter_clients(clients, search):
    """Clients whose name contains ``search``, ignoring case."""
    needle = (search or "").casefold()
    if not needle:
        return list(clients)
    return [c for c in clients if needle in (c.name or "").casefold()]
