"""Shared pytest fixtures for finops tests."""

import os
import tempfile
from datetime import date

import pytest

from finops.database.factories import create_sqlite_database
from finops.domain.directory import BankService, CardService, ClientService
from finops.domain.export import ExportService
from finops.domain.preview import PreviewService
from finops.domain.profiler import ProfileService, ProfilerTransactionService
from finops.domain.profiler_directory import ProfilerBankService, ProfilerClientService
from finops.domain.report import ReportService
from finops.domain.transaction import TransactionService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for CLI tests
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def client_service(temp_db):
    return ClientService(temp_db)


@pytest.fixture
def bank_service(temp_db):
    return BankService(temp_db)


@pytest.fixture
def card_service(temp_db):
    return CardService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    return TransactionService(temp_db)


@pytest.fixture
def export_service(temp_db):
    return ExportService(temp_db)


@pytest.fixture
def preview_service(temp_db):
    return PreviewService(temp_db)


@pytest.fixture
def report_service(temp_db):
    return ReportService(temp_db)


@pytest.fixture
def profiler_client_service(temp_db):
    return ProfilerClientService(temp_db)


@pytest.fixture
def profiler_bank_service(temp_db):
    return ProfilerBankService(temp_db)


@pytest.fixture
def profile_service(temp_db):
    return ProfileService(temp_db)


@pytest.fixture
def profiler_transaction_service(temp_db):
    return ProfilerTransactionService(temp_db)


@pytest.fixture
def sample_ledger(client_service, bank_service, card_service, transaction_service):
    """Two clients, one bank, one card and five transactions.

    Acme Traders: deposit 1000 (HDFC, Gold), withdraw 200 @ 10% (HDFC)
    Zen Stores: withdraw 500 @ 2%, withdraw 100 @ 0%, deposit 300 with a
    remark mentioning "acme".
    """
    acme = client_service.create_client("Acme Traders", email="ops@acme.test")
    zen = client_service.create_client("Zen Stores")
    hdfc = bank_service.create_bank("HDFC")
    gold = card_service.create_card("Gold")

    created = [
        transaction_service.create_transaction(
            client_id=acme, transaction_type="deposit", transaction_amount="1000",
            bank_id=hdfc, card_id=gold, create_date=date(2024, 1, 10),
        ),
        transaction_service.create_transaction(
            client_id=acme, transaction_type="withdraw", transaction_amount="200",
            withdraw_charges="10", bank_id=hdfc, create_date=date(2024, 1, 12),
        ),
        transaction_service.create_transaction(
            client_id=zen, transaction_type="withdraw", transaction_amount="500",
            withdraw_charges="2", create_date=date(2024, 1, 15),
        ),
        transaction_service.create_transaction(
            client_id=zen, transaction_type="withdraw", transaction_amount="100",
            create_date=date(2024, 2, 1),
        ),
        transaction_service.create_transaction(
            client_id=zen, transaction_type="deposit", transaction_amount="300",
            remark="refund from acme", create_date=date(2024, 2, 3),
        ),
    ]
    return {
        "clients": {"acme": acme, "zen": zen},
        "bank": hdfc,
        "card": gold,
        "transactions": created,
    }


@pytest.fixture
def sample_profile(profiler_client_service, profiler_bank_service, profile_service):
    """An active profile opened with a 10,000 pre-planned deposit."""
    client = profiler_client_service.create_client("Ravi Kumar", mobile_number="9876543210")
    bank = profiler_bank_service.create_bank("ICICI")
    return profile_service.create_profile(
        client_id=client.id,
        bank_id=bank.id,
        pre_planned_deposit_amount="10000",
        credit_card_number="4111 1111 1111 1111",
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
