"""Tests for the command line interface."""

import json

from finops.cli.main import cli


def _invoke(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "--log-level", "WARNING", *args])


def test_client_create_and_list(cli_runner, temp_db):
    result = _invoke(cli_runner, temp_db, "client", "create", "Acme Traders", "--email", "ops@acme.test")

    assert result.exit_code == 0
    assert "Created client 'Acme Traders'" in result.output

    result = _invoke(cli_runner, temp_db, "client", "list")

    assert result.exit_code == 0
    assert "Acme Traders" in result.output
    assert "Page 1 of 1 (1 total)" in result.output


def test_duplicate_client_fails(cli_runner, temp_db, client_service):
    client_service.create_client("Acme Traders")

    result = _invoke(cli_runner, temp_db, "client", "create", "Acme Traders")

    assert result.exit_code == 1
    assert "Error: Client with name 'Acme Traders' already exists" in result.output


def test_transaction_add_by_client_name(cli_runner, temp_db, client_service):
    client_service.create_client("Acme Traders")

    result = _invoke(
        cli_runner, temp_db,
        "transaction", "add",
        "--client", "Acme Traders",
        "--type", "withdraw",
        "--amount", "1,500",
        "--charges", "2",
        "--date", "2024-01-15",
    )

    assert result.exit_code == 0
    assert "Created withdraw of 1,500.00 for 'Acme Traders'" in result.output


def test_transaction_add_rejects_bad_amount(cli_runner, temp_db, client_service):
    client_service.create_client("Acme Traders")

    result = _invoke(
        cli_runner, temp_db,
        "transaction", "add", "--client", "Acme Traders", "--type", "deposit", "--amount", "0",
    )

    assert result.exit_code == 1
    assert "transaction_amount must be greater than 0" in result.output


def test_transaction_list_json_envelope(cli_runner, temp_db, sample_ledger):
    result = _invoke(
        cli_runner, temp_db,
        "transaction", "list", "--type", "deposit", "--limit", "1", "--json",
    )

    assert result.exit_code == 0
    body = json.loads(result.output)
    assert len(body["data"]) == 1
    assert body["pagination"]["total_count"] == 2
    assert body["pagination"]["has_next_page"] is True
    assert body["filters_applied"] == {"transaction_type": 0}
    assert body["sort_applied"] == {"sort_by": "create_date", "sort_order": "desc"}


def test_transaction_list_invalid_sort_as_json(cli_runner, temp_db, sample_ledger):
    result = _invoke(cli_runner, temp_db, "transaction", "list", "--sort-by", "nope", "--json")

    assert result.exit_code == 1
    assert '"code": "validation_error"' in result.output
    assert '"field": "sort_by"' in result.output


def test_card_delete_cascade(cli_runner, temp_db, sample_ledger):
    card_id = str(sample_ledger["card"])

    blocked = _invoke(cli_runner, temp_db, "card", "delete", card_id)
    assert blocked.exit_code == 1
    assert "Cannot delete card" in blocked.output

    result = _invoke(cli_runner, temp_db, "card", "delete", card_id, "--cascade")
    assert result.exit_code == 0
    assert "Detached 1 transaction(s)" in result.output


def test_export_csv_to_file(cli_runner, temp_db, sample_ledger, tmp_path):
    target = tmp_path / "out.csv"

    result = _invoke(
        cli_runner, temp_db,
        "export", "transactions", "--format", "csv", "--fields", "client_name,transaction_amount",
        "-o", str(target),
    )

    assert result.exit_code == 0
    assert "Exported 5 transaction(s)" in result.output
    assert target.read_text().splitlines()[0] == "Client Name,Amount"


def test_export_into_directory_uses_generated_name(cli_runner, temp_db, sample_ledger, tmp_path):
    result = _invoke(cli_runner, temp_db, "export", "transactions", "--format", "excel", "-o", str(tmp_path))

    assert result.exit_code == 0
    written = list(tmp_path.glob("transaction_export_*.xlsx"))
    assert len(written) == 1


def test_export_unknown_field(cli_runner, temp_db, sample_ledger, tmp_path):
    result = _invoke(
        cli_runner, temp_db, "export", "transactions", "--fields", "secret", "-o", str(tmp_path)
    )

    assert result.exit_code == 1
    assert "Unknown export field(s): secret" in result.output


def test_export_preview(cli_runner, temp_db, sample_ledger):
    result = _invoke(cli_runner, temp_db, "export", "preview", "--format", "json", "--type", "withdraw")

    assert result.exit_code == 0
    body = json.loads(result.output)
    assert body["total_rows"] == 3
    assert body["is_estimate"] is True


def test_report_command(cli_runner, temp_db, sample_ledger, tmp_path):
    result = _invoke(
        cli_runner, temp_db,
        "report", "--start-date", "2024-01-01", "--end-date", "2024-02-29", "-o", str(tmp_path),
    )

    assert result.exit_code == 0
    assert "(5 transaction(s), 2 client(s))" in result.output
    reports = list(tmp_path.glob("All_Clients_transaction_report_*.pdf"))
    assert len(reports) == 1
    assert reports[0].read_bytes().startswith(b"%PDF")


def test_report_without_rows_fails(cli_runner, temp_db, sample_ledger, tmp_path):
    result = _invoke(
        cli_runner, temp_db,
        "report", "--start-date", "2020-01-01", "--end-date", "2020-01-31", "-o", str(tmp_path),
    )

    assert result.exit_code == 1
    assert "No transactions found" in result.output


def test_profiler_flow(cli_runner, temp_db):
    assert _invoke(cli_runner, temp_db, "profiler", "client", "create", "Ravi Kumar").exit_code == 0
    assert _invoke(cli_runner, temp_db, "profiler", "bank", "create", "ICICI").exit_code == 0

    opened = _invoke(
        cli_runner, temp_db,
        "profiler", "profile", "create", "--client", "1", "--bank", "1", "--deposit", "10000",
    )
    assert opened.exit_code == 0
    assert "Opened profile 1 for 'Ravi Kumar' with balance 10,000.00" in opened.output

    withdrawn = _invoke(
        cli_runner, temp_db,
        "profiler", "transaction", "add", "1", "--type", "withdraw", "--amount", "2000", "--charges", "2.5",
    )
    assert withdrawn.exit_code == 0
    assert "charge 50.00" in withdrawn.output

    listed = _invoke(cli_runner, temp_db, "profiler", "transaction", "list", "--profile-id", "1")
    assert listed.exit_code == 0
    assert "Withdrawals: 2,000.00 | Charges: 50.00 | Net: -2,050.00" in listed.output

    assert _invoke(cli_runner, temp_db, "profiler", "profile", "done", "1").exit_code == 0

    rejected = _invoke(
        cli_runner, temp_db,
        "profiler", "transaction", "add", "1", "--type", "deposit", "--amount", "5",
    )
    assert rejected.exit_code == 1
    assert "marked done" in rejected.output


def test_export_profile_pdf(cli_runner, temp_db, sample_profile, tmp_path):
    result = _invoke(cli_runner, temp_db, "export", "profile", str(sample_profile.id), "-o", str(tmp_path))

    assert result.exit_code == 0
    written = list(tmp_path.glob("Ravi_Kumar_Transactions_*.pdf"))
    assert len(written) == 1


def test_help_does_not_open_database(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "profiler" in result.output


def test_transaction_list_period_conflicts_with_dates(cli_runner, temp_db, sample_ledger):
    result = _invoke(
        cli_runner, temp_db,
        "transaction", "list", "--period", "last-month", "--start-date", "2024-01-01",
    )

    assert result.exit_code == 1
    assert "--period cannot be combined" in result.output


def test_transaction_list_unknown_period(cli_runner, temp_db, sample_ledger):
    result = _invoke(cli_runner, temp_db, "transaction", "list", "--period", "next-decade")

    assert result.exit_code == 1
    assert "Unknown period" in result.output


def test_client_autocomplete(cli_runner, temp_db, sample_ledger):
    result = _invoke(cli_runner, temp_db, "client", "autocomplete", "zen")

    assert result.exit_code == 0
    assert "Zen Stores" in result.output
    assert "Acme Traders" not in result.output

    as_json = _invoke(cli_runner, temp_db, "client", "autocomplete", "--limit", "1", "--json")
    body = json.loads(as_json.output)
    assert [c["name"] for c in body["data"]] == ["Acme Traders"]
    assert body["total"] == 2


def test_profile_autocomplete(cli_runner, temp_db, sample_profile):
    result = _invoke(cli_runner, temp_db, "profiler", "profile", "autocomplete", "ravi", "--status", "active")

    assert result.exit_code == 0
    assert "Ravi Kumar / ICICI [active]" in result.output


def test_non_numeric_page_size_env(cli_runner, temp_db):
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "client", "list"],
        env={"FINOPS_PAGE_SIZE": "lots"},
    )

    assert result.exit_code == 1
    assert "FINOPS_PAGE_SIZE must be an integer" in result.output
