"""Client mutations and caseload queries.

Every function that acts for a case manager takes the acting user first and
checks the assignment before touching a client.
"""
import logging
from datetime import date, datetime

from django.db import transaction
from django.db.models import Count, F, Q

from apps.scheduling.exceptions import ValidationError

from .access import ClientAccessError, require_client_access
from .models import CaseManagerAssignment, Client

logger = logging.getLogger(__name__)

# Plaintext attribute -> encrypted column it is stored in.
ENCRYPTED_FIELDS = {
    "name": "_name_encrypted",
    "phone_number": "_phone_number_encrypted",
    "insurance": "_insurance_encrypted",
}
STRING_FIELDS = ("name", "phone_number", "insurance", "client_id")
BOOLEAN_FIELDS = (
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
    "next_quarterly_review",
    "next_annual_assessment",
    "last_qr_completed",
    "last_annual_completed",
    "qr1_date",
    "qr2_date",
    "qr3_date",
    "qr4_date",
)
REQUIRED_FIELDS = ("name", "next_annual_assessment")

UPDATABLE_FIELDS = frozenset(STRING_FIELDS + BOOLEAN_FIELDS + DATE_FIELDS)


def validate_field_value(field, value):
    """Check ``value`` is acceptable for ``field``; raise ValidationError if not."""
    if field not in UPDATABLE_FIELDS:
        raise ValidationError(f"Field {field!r} cannot be updated")
    if value is None:
        if field in REQUIRED_FIELDS:
            raise ValidationError(f"{field} cannot be cleared")
        return
    if field in BOOLEAN_FIELDS and not isinstance(value, bool):
        raise ValidationError(f"{field} must be a bool, got {value!r}")
    if field in DATE_FIELDS and (not isinstance(value, date) or isinstance(value, datetime)):
        raise ValidationError(f"{field} must be a date, got {value!r}")
    if field in STRING_FIELDS and not isinstance(value, str):
        raise ValidationError(f"{field} must be a string, got {value!r}")


def apply_field(client, field, value):
    """Set ``field`` on ``client`` in memory; return the columns to save."""
    validate_field_value(field, value)
    setattr(client, field, value)
    return [ENCRYPTED_FIELDS.get(field, field), "updated_at"]


def ensure_assignment(case_manager, client):
    """Create, or unarchive, the assignment of ``client`` to ``case_manager``."""
    assignment, created = CaseManagerAssignment.objects.get_or_create(
        case_manager=case_manager, client=client,
    )
    if not created and assignment.archived:
        assignment.archived = False
        assignment.save(update_fields=["archived"])
        logger.info("Unarchived assignment of client %s to user %s", client.pk, case_manager.pk)
    return assignment


@transaction.atomic
def add_client(user, name, phone_number, insurance, client_id,
               next_quarterly_review, next_annual_assessment):
    """Put a client on ``user``'s caseload, creating the record if needed.

    A client whose record id already exists is reused as-is (the submitted
    details are ignored) so two case managers can share one client.
    """
    client = Client.objects.filter(client_id=client_id).first() if client_id else None
    if client is None:
        client = Client(
            client_id=client_id or None,
            next_quarterly_review=next_quarterly_review,
            next_annual_assessment=next_annual_assessment,
        )
        client.name = name
        client.phone_number = phone_number
        client.insurance = insurance
        client.save()
        logger.info("Created client %s", client.pk)
    ensure_assignment(user, client)
    return client


def archive_client(user, client):
    """Hide ``client`` from ``user``'s caseload. Other assignments are untouched."""
    updated = CaseManagerAssignment.objects.filter(
        case_manager=user, client=client,
    ).update(archived=True)
    if not updated:
        raise ClientAccessError("Client assignment not found.")
    logger.info("User %s archived client %s", user.pk, client.pk)


async def aarchive_client(user, client_pk):
    updated = await CaseManagerAssignment.objects.filter(
        case_manager=user, client_id=client_pk,
    ).aupdate(archived=True)
    if not updated:
        raise ClientAccessError("Client assignment not found.")
    logger.info("User %s archived client %s", user.pk, client_pk)


@transaction.atomic
def assign_client(client_id, case_manager):
    """Assign the client with record id ``client_id`` to ``case_manager``.

    Raises Client.DoesNotExist when no client has that record id.
    """
    client = Client.objects.get(client_id=client_id)
    return ensure_assignment(case_manager, client)


def update_field(user, client, field, value):
    """Set one client field to an absolute value after an access check."""
    require_client_access(user, client.pk)
    update_fields = apply_field(client, field, value)
    client.save(update_fields=update_fields)


def list_clients(user):
    """``user``'s active caseload, each client annotated with ``assigned_at``."""
    return (
        Client.objects.filter(
            assignments__case_manager=user,
            assignments__archived=False,
        )
        .annotate(assigned_at=F("assignments__assigned_at"))
    )


def client_case_managers(client):
    """Every assignment for ``client``, archived ones included."""
    return client.assignments.select_related("case_manager").order_by("assigned_at")


def client_todo_counts(user):
    """Todo counts per client on ``user``'s caseload.

    Returns:
        dict of client pk -> {"total": int, "incomplete": int}. Clients with
        no todos are omitted.
    """
    from apps.todos.models import Todo

    rows = (
        Todo.objects.filter(
            client__assignments__case_manager=user,
            client__assignments__archived=False,
        )
        .order_by()
        .values("client_id")
        .annotate(total=Count("pk"), incomplete=Count("pk", filter=Q(completed=False)))
    )
    return {
        row["client_id"]: {"total": row["total"], "incomplete": row["incomplete"]}
        for row in rows
    }


def reset_monthly_contacts():
    """Clear both monthly contact checkboxes on every client. Returns the row count."""
    count = Client.objects.update(
        first_contact_completed=False,
        second_contact_completed=False,
    )
    logger.info("Reset monthly contacts for %d client(s)", count)
    return count
