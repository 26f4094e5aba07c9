"""Tests for CSV client import."""
from datetime import date
from io import StringIO

import pytest
from cryptography.fernet import Fernet
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, TestCase, override_settings

from apps.auth_app.models import User
from apps.clients.importing import (
    DEFAULT_INSURANCE,
    DEFAULT_PHONE,
    DEFAULT_PLAN_END_DATE,
    CSVImportError,
    ImportRow,
    bulk_import,
    deduplicate,
    deduplicate_by_program,
    display_name,
    parse_client_rows,
    parse_csv_line,
)
from apps.clients.models import CaseManagerAssignment, Client
import caseload.encryption as enc_module

TEST_KEY = Fernet.generate_key().decode()

HEADER = (
    "Id,First Name,Last Name,Preferred Name,Client/Record ID,Cell Phone,"
    "Plan Program,Plan End Date,Primary Provider,Authorization ID"
)


def row(client_id="R-1", program="WCCSS", end="06/30/2025", first="Jane", last="Doe", preferred=None):
    return ImportRow(
        first_name=first,
        last_name=last,
        preferred_name=preferred,
        client_id=client_id,
        phone_number=DEFAULT_PHONE,
        insurance=DEFAULT_INSURANCE,
        plan_end_date=end,
        plan_program=program,
    )


class ParseTest(SimpleTestCase):

    def test_quoted_commas_and_escaped_quotes(self):
        self.assertEqual(
            parse_csv_line('1, "Doe, Jane" ,"Say ""hi""",x'),
            ["1", "Doe, Jane", 'Say "hi"', "x"],
        )

    def test_defaults_for_blank_columns(self):
        text = f"{HEADER}\n7,Jane,Doe,,,,,,,\n"
        rows, errors = parse_client_rows(text)
        self.assertEqual(errors, [])
        self.assertEqual(rows[0].client_id, "7")
        self.assertEqual(rows[0].phone_number, DEFAULT_PHONE)
        self.assertEqual(rows[0].insurance, DEFAULT_INSURANCE)
        self.assertEqual(rows[0].plan_end_date, DEFAULT_PLAN_END_DATE)
        self.assertIsNone(rows[0].preferred_name)
        self.assertIsNone(rows[0].plan_program)

    def test_record_id_preferred_over_row_id(self):
        text = f"{HEADER}\n7,Jane,Doe,JJ,R-77,555-0101,WCCSS,03/15/2026,Dr. A,AUTH-9\n"
        (parsed,), _ = parse_client_rows(text)
        self.assertEqual(parsed.client_id, "R-77")
        self.assertEqual(parsed.insurance, "AUTH-9")
        self.assertEqual(parsed.plan_program, "WCCSS")

    def test_rows_missing_names_reported(self):
        text = f"{HEADER}\n1,,Doe\n2,Sam,Lee\n\n3,Ana,\n"
        rows, errors = parse_client_rows(text)
        self.assertEqual(len(rows), 1)
        self.assertEqual(errors, [
            "Row 2: Missing first name or last name",
            "Row 4: Missing first name or last name",
        ])

    def test_quoted_field_spanning_lines(self):
        text = f'{HEADER}\n7,Jane,Doe,,R-7,,WCCSS,06/30/2025,"Dr. A\nDr. B",AUTH-1\n8,Sam,Lee,,R-8,,BCSS,,,\n'
        rows, errors = parse_client_rows(text)
        self.assertEqual(errors, [])
        self.assertEqual([r.client_id for r in rows], ["R-7", "R-8"])
        self.assertEqual(rows[0].insurance, "AUTH-1")

    def test_header_only(self):
        with self.assertRaises(CSVImportError):
            parse_client_rows(HEADER + "\n\n")

    def test_no_valid_rows(self):
        with self.assertRaises(CSVImportError):
            parse_client_rows(f"{HEADER}\n1,,\n")

    def test_display_name(self):
        self.assertEqual(display_name(row(preferred="JJ")), "Jane (JJ) Doe")
        self.assertEqual(display_name(row()), "Jane Doe")


class DeduplicateByProgramTest(SimpleTestCase):

    def test_non_case_management_rows_dropped(self):
        kept = deduplicate_by_program([row(program="Psychiatry"), row("R-2", program=None)])
        self.assertEqual(kept, [])

    def test_higher_priority_wins(self):
        kept = deduplicate_by_program([
            row(program="NAV CM"),
            row(program="WCCSS", end="01/31/2025"),
            row(program="BCSS", end="12/31/2026"),
        ])
        self.assertEqual([r.plan_program for r in kept], ["WCCSS"])

    def test_equal_priority_later_end_date_wins(self):
        kept = deduplicate_by_program([
            row(program="BCSS", end="06/30/2025"),
            row(program="BCSS", end="09/30/2025"),
            row(program="BCSS", end="07/31/2025"),
        ])
        self.assertEqual(kept[0].plan_end_date, "09/30/2025")

    def test_unparseable_date_keeps_existing(self):
        kept = deduplicate_by_program([
            row(program="BCSS", end="06/30/2025"),
            row(program="BCSS", end="soon"),
        ])
        self.assertEqual(kept[0].plan_end_date, "06/30/2025")

    def test_program_name_is_trimmed(self):
        self.assertEqual(len(deduplicate_by_program([row(program=" MH PSH CM ")])), 1)


class DeduplicateTest(SimpleTestCase):

    rows = [
        row(end="06/30/2025", program=None),
        row(end="12/31/2025", program=None),
        row(end="01/31/2025", program=None),
    ]

    def test_first(self):
        self.assertEqual(deduplicate(self.rows)[0].plan_end_date, "06/30/2025")

    def test_latest(self):
        self.assertEqual(deduplicate(self.rows, "latest")[0].plan_end_date, "12/31/2025")

    def test_earliest(self):
        self.assertEqual(deduplicate(self.rows, "earliest")[0].plan_end_date, "01/31/2025")

    def test_unknown_strategy(self):
        with self.assertRaises(CSVImportError):
            deduplicate(self.rows, "random")


@override_settings(FIELD_ENCRYPTION_KEY=TEST_KEY)
class BulkImportTest(TestCase):

    def setUp(self):
        enc_module.reset_cipher()
        self.manager = User.objects.create_user(username="casey")

    def tearDown(self):
        enc_module.reset_cipher()

    def test_creates_clients_with_annual_on_first_of_month(self):
        result = bulk_import(
            self.manager,
            [row(preferred="JJ", end="06/30/2025"), row("R-1", program="NAV CM")],
            today=date(2025, 1, 15),
        )
        self.assertEqual(result.created, 1)
        self.assertEqual(result.skipped, 1)
        client = Client.objects.get(client_id="R-1")
        self.assertEqual(client.name, "Jane (JJ) Doe")
        self.assertEqual(client.next_annual_assessment, date(2025, 6, 1))
        self.assertEqual(client.next_quarterly_review, date(2025, 1, 15))
        self.assertTrue(
            CaseManagerAssignment.objects.filter(case_manager=self.manager, client=client).exists()
        )

    def test_existing_client_reused_and_unarchived(self):
        bulk_import(self.manager, [row()])
        CaseManagerAssignment.objects.update(archived=True)

        result = bulk_import(self.manager, [row(first="Renamed")])
        self.assertEqual(result.created, 0)
        self.assertEqual(len(result.clients), 1)
        self.assertEqual(Client.objects.get().name, "Jane Doe")
        self.assertFalse(CaseManagerAssignment.objects.get().archived)

    def test_invalid_date_reported(self):
        result = bulk_import(self.manager, [row(end="13/45/2025")])
        self.assertEqual(result.created, 0)
        self.assertEqual(len(result.errors), 1)

    def test_strategy_without_program_priority(self):
        rows = [row(program=None, end="06/30/2025"), row(program=None, end="12/31/2025")]
        bulk_import(self.manager, rows, program_priority=False, strategy="latest")
        self.assertEqual(Client.objects.get().next_annual_assessment, date(2025, 12, 1))


def _call_command(*args):
    out = StringIO()
    call_command("import_clients", *args, stdout=out)
    return out.getvalue()


@pytest.mark.django_db
class TestImportClientsCommand:

    @pytest.fixture
    def csv_file(self, tmp_path):
        path = tmp_path / "caseload.csv"
        path.write_text(
            f"{HEADER}\n"
            "1,Jane,Doe,,R-1,555-0101,WCCSS,06/30/2025,,AUTH-1\n"
            "2,Jane,Doe,,R-1,555-0101,Psychiatry,06/30/2025,,AUTH-1\n"
            "3,Sam,Lee,,R-2,,BCSS,09/30/2025,,\n"
            "4,,Nobody,,R-3,,WCCSS,09/30/2025,,\n",
            encoding="utf-8",
        )
        return path

    @pytest.fixture
    def manager(self):
        return User.objects.create_user(username="casey")

    def test_imports(self, csv_file, manager):
        output = _call_command(str(csv_file), "--user", "casey")
        assert "Row 5: Missing first name or last name" in output
        assert "Imported 2 client(s) for casey" in output
        assert Client.objects.count() == 2

    def test_dry_run(self, csv_file, manager):
        output = _call_command(str(csv_file), "--user", "casey", "--dry-run")
        assert "DRY RUN" in output
        assert "Would import 2 client(s)" in output
        assert Client.objects.count() == 0

    def test_unknown_user(self, csv_file):
        with pytest.raises(CommandError):
            _call_command(str(csv_file), "--user", "nobody")

    def test_missing_file(self, tmp_path, manager):
        with pytest.raises(CommandError):
            _call_command(str(tmp_path / "missing.csv"), "--user", "casey")
