"""Caseload access checks.

A case manager may read and change a client only while they hold a
non-archived assignment to that client. Todos, notes and sticky notes are
further restricted to the case manager who wrote them.
"""
from django.core.exceptions import PermissionDenied

from .models import CaseManagerAssignment


class ClientAccessError(PermissionDenied):
    """The acting user is not assigned to the client, or does not own the record."""


def _active_assignments(user, client_id):
    return CaseManagerAssignment.objects.filter(
        case_manager=user, client_id=client_id, archived=False,
    )


def has_client_access(user, client_id):
    return _active_assignments(user, client_id).exists()


def require_client_access(user, client_id):
    """Raise ClientAccessError unless ``user`` is actively assigned to the client."""
    if not has_client_access(user, client_id):
        raise ClientAccessError("Client not found or not assigned to you.")


async def arequire_client_access(user, client_id):
    if not await _active_assignments(user, client_id).aexists():
        raise ClientAccessError("Client not found or not assigned to you.")


def require_owner(user, record, label="record"):
    """Raise ClientAccessError unless ``record.case_manager`` is ``user``."""
    if record.case_manager_id != user.pk:
        raise ClientAccessError(f"Only the case manager who created this {label} can change it.")
