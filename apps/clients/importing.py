"""
Bulk client import from the agency's caseload CSV export.

Expected columns, in order:

    Id, First Name, Last Name, Preferred Name, Client/Record ID, Cell Phone,
    Plan Program, Plan End Date, Primary Provider, Authorization ID

The same client usually appears once per program they are enrolled in.
``deduplicate_by_program`` keeps one row per client, preferring case
management programs by priority; ``deduplicate`` handles exports that have
no program column.
"""
import csv
import io
import logging
from collections import namedtuple
from dataclasses import dataclass, field
from datetime import date, datetime

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from .models import Client
from .services import ensure_assignment

logger = logging.getLogger(__name__)

DEFAULT_PHONE = "No phone provided"
DEFAULT_INSURANCE = "No insurance provided"
DEFAULT_PLAN_END_DATE = "12/31/2025"
PLAN_END_DATE_FORMAT = "%m/%d/%Y"

COLUMN_COUNT = 10
STRATEGIES = ("first", "latest", "earliest")

ImportRow = namedtuple(
    "ImportRow",
    [
        "first_name",
        "last_name",
        "preferred_name",
        "client_id",
        "phone_number",
        "insurance",
        "plan_end_date",
        "plan_program",
    ],
)


class CSVImportError(Exception):
    """The uploaded file cannot be imported at all (as opposed to a bad row)."""


@dataclass
class ImportResult:
    clients: list = field(default_factory=list)
    created: int = 0
    skipped: int = 0
    errors: list = field(default_factory=list)


def parse_csv_line(line):
    """Split one CSV line into trimmed fields. Quoted commas and "" escapes are honoured."""
    fields = next(csv.reader([line], skipinitialspace=True), [])
    return [value.strip() for value in fields]


def parse_client_rows(text):
    """Parse an export into ImportRows.

    Returns:
        (rows, errors) where errors are human-readable messages for rows
        that were skipped. Row numbers count the header as row 1.
        Quoted fields may contain commas and line breaks.

    Raises:
        CSVImportError: unreadable CSV, fewer than two non-blank records,
            or no usable rows.
    """
    try:
        records = [
            [value.strip() for value in record]
            for record in csv.reader(io.StringIO(text), skipinitialspace=True)
        ]
    except csv.Error as exc:
        raise CSVImportError(f"Could not read CSV: {exc}") from exc
    records = [record for record in records if any(record)]
    if len(records) < 2:
        raise CSVImportError("CSV file must have at least a header row and one data row")

    rows = []
    errors = []
    for number, values in enumerate(records[1:], start=2):
        values += [""] * (COLUMN_COUNT - len(values))
        (record_id, first_name, last_name, preferred_name, client_record_id,
         cell_phone, plan_program, plan_end_date, _provider, authorization_id) = values[:COLUMN_COUNT]

        if not first_name or not last_name:
            errors.append(f"Row {number}: Missing first name or last name")
            continue
        client_id = client_record_id or record_id
        if not client_id:
            errors.append(f"Row {number}: Missing client id")
            continue

        rows.append(ImportRow(
            first_name=first_name,
            last_name=last_name,
            preferred_name=preferred_name or None,
            client_id=client_id,
            phone_number=cell_phone or DEFAULT_PHONE,
            insurance=authorization_id or DEFAULT_INSURANCE,
            plan_end_date=plan_end_date or DEFAULT_PLAN_END_DATE,
            plan_program=plan_program or None,
        ))

    if not rows:
        raise CSVImportError("No valid client records found in CSV")
    logger.info("Parsed %d client row(s), %d row error(s)", len(rows), len(errors))
    return rows, errors


def parse_plan_end_date(value):
    """MM/DD/YYYY -> date. Raises ValueError on anything else."""
    return datetime.strptime(value, PLAN_END_DATE_FORMAT).date()


def priority_for_program(program, priorities=None):
    """Priority of a plan program; 0 means not case management."""
    if priorities is None:
        priorities = settings.CASE_MANAGEMENT_PROGRAM_PRIORITY
    if not program:
        return 0
    return priorities.get(program.strip(), 0)


def deduplicate_by_program(rows, priorities=None):
    """One row per client id, restricted to case management programs.

    A higher-priority program replaces a lower one. Between equal
    priorities the row with the later plan end date wins; if either date
    cannot be parsed the row seen first is kept.
    """
    kept = {}
    for row in rows:
        priority = priority_for_program(row.plan_program, priorities)
        if priority == 0:
            continue
        existing = kept.get(row.client_id)
        if existing is None:
            kept[row.client_id] = row
            continue
        existing_priority = priority_for_program(existing.plan_program, priorities)
        if priority > existing_priority:
            kept[row.client_id] = row
        elif priority == existing_priority:
            try:
                later = parse_plan_end_date(row.plan_end_date) > parse_plan_end_date(existing.plan_end_date)
            except ValueError:
                logger.warning(
                    "Unparseable plan end date for client %s (%r vs %r); keeping first row",
                    row.client_id, row.plan_end_date, existing.plan_end_date,
                )
                continue
            if later:
                kept[row.client_id] = row
    logger.info(
        "%d unique case management client(s) from %d row(s)", len(kept), len(rows),
    )
    return list(kept.values())


def deduplicate(rows, strategy="first"):
    """One row per client id for exports without a program column.

    Strategies: "first" keeps the first row, "latest" / "earliest" keep the
    row with the latest / earliest plan end date.
    """
    if strategy not in STRATEGIES:
        raise CSVImportError(f"Unknown deduplication strategy {strategy!r}")
    kept = {}
    for row in rows:
        existing = kept.get(row.client_id)
        if existing is None:
            kept[row.client_id] = row
            continue
        if strategy == "first":
            continue
        try:
            current = parse_plan_end_date(row.plan_end_date)
            previous = parse_plan_end_date(existing.plan_end_date)
        except ValueError:
            logger.warning("Unparseable plan end date for client %s; keeping first row", row.client_id)
            continue
        if (strategy == "latest" and current > previous) or (strategy == "earliest" and current < previous):
            kept[row.client_id] = row
    return list(kept.values())


def display_name(row):
    if row.preferred_name:
        return f"{row.first_name} ({row.preferred_name}) {row.last_name}"
    return f"{row.first_name} {row.last_name}"


@transaction.atomic
def bulk_import(user, rows, program_priority=True, strategy="first", today=None):
    """Import parsed rows onto ``user``'s caseload.

    Existing clients (matched on record id) are reused unchanged; new ones
    get an annual assessment on the 1st of their plan end month. Either way
    the caller is assigned, unarchiving an old assignment if there is one.
    """
    if today is None:
        today = timezone.localdate()
    unique = deduplicate_by_program(rows) if program_priority else deduplicate(rows, strategy)
    result = ImportResult(skipped=len(rows) - len(unique))

    for row in unique:
        client = Client.objects.filter(client_id=row.client_id).first()
        if client is None:
            try:
                plan_end = parse_plan_end_date(row.plan_end_date)
            except ValueError:
                result.errors.append(f"Client {row.client_id}: invalid plan end date {row.plan_end_date!r}")
                continue
            client = Client(
                client_id=row.client_id,
                next_quarterly_review=today,
                next_annual_assessment=date(plan_end.year, plan_end.month, 1),
            )
            client.name = display_name(row)
            client.phone_number = row.phone_number
            client.insurance = row.insurance
            client.save()
            result.created += 1
            logger.info("Created client %s from import", client.pk)
        ensure_assignment(user, client)
        result.clients.append(client)

    logger.info(
        "Imported %d client(s) for user %s: %d created, %d duplicate row(s) skipped, %d error(s)",
        len(result.clients), user.pk, result.created, result.skipped, len(result.errors),
    )
    return result
