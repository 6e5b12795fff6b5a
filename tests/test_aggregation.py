"""Tests for the aggregation engine and report summaries."""

from datetime import date, datetime, time
from decimal import Decimal

from finops.domain.aggregation import LedgerEntry, aggregate, aggregate_transactions
from finops.domain.entities import (
    ProfilerTransaction,
    ProfilerTransactionType,
    Transaction,
    TransactionType,
)
from finops.domain.report import group_summary, ledger_row


def _entry(group, is_deposit, amount, charge="0", pct=None):
    return LedgerEntry(
        group_key=group,
        group_label=group,
        is_deposit=is_deposit,
        amount=Decimal(amount),
        charge_amount=Decimal(charge),
        charge_percentage=Decimal(pct) if pct is not None else None,
    )


def _transaction(id, client, kind, amount, pct="0"):
    return Transaction(
        id=id,
        client_id=1,
        bank_id=None,
        card_id=None,
        transaction_type=kind,
        transaction_amount=Decimal(amount),
        withdraw_charges=Decimal(pct),
        remark=None,
        create_date=date(2024, 1, id),
        create_time=time(9, 30),
        client_name=client,
    )


def test_mixed_group_totals():
    result = aggregate([_entry("Acme", True, "1000"), _entry("Acme", False, "200", charge="20")])

    group = result.groups["Acme"]
    assert group.deposits == Decimal("1000")
    assert group.withdrawals == Decimal("200")
    assert group.charges == Decimal("20")
    assert group.transaction_amount == Decimal("800")
    assert group.final_amount == Decimal("820")
    assert not group.is_only_withdraw
    assert group.display_final_amount == Decimal("820")


def test_only_withdraw_group_display():
    result = aggregate([_entry("Zen", False, "500", charge="10"), _entry("Zen", False, "100")])

    group = result.groups["Zen"]
    assert group.is_only_withdraw
    assert group.transaction_amount == Decimal("-600")
    assert group.final_amount == Decimal("-590")
    assert group.display_transaction_amount == Decimal("0")
    assert group.display_final_amount == Decimal("10")


def test_only_withdraw_is_decided_per_group():
    result = aggregate(
        [
            _entry("Acme", True, "100"),
            _entry("Zen", False, "50", charge="1"),
        ]
    )

    assert not result.groups["Acme"].is_only_withdraw
    assert result.groups["Zen"].is_only_withdraw


def test_groups_keep_first_seen_order_and_grand_totals():
    result = aggregate(
        [
            _entry("Beta", True, "10"),
            _entry("Alpha", False, "5", charge="0.5"),
            _entry("Beta", False, "4", charge="0.4"),
        ]
    )

    assert [g.label for g in result] == ["Beta", "Alpha"]
    assert len(result) == 2
    assert result.row_count == 3
    assert result.total_deposits == Decimal("10")
    assert result.total_withdrawals == Decimal("9")
    assert result.total_charges == Decimal("0.9")


def test_totals_are_not_rounded():
    result = aggregate([_entry("A", False, "0.333", charge="0.0033")] * 3)

    assert result.groups["A"].charges == Decimal("0.0099")


def test_ledger_transactions_charge_from_percentage():
    result = aggregate_transactions(
        [
            _transaction(1, "Acme", TransactionType.DEPOSIT, "1000"),
            _transaction(2, "Acme", TransactionType.WITHDRAW, "200", pct="10"),
        ]
    )

    group = result.groups["Acme"]
    assert group.charges == Decimal("20")
    assert group.final_amount == Decimal("820")


def test_profiler_transactions_use_frozen_charge_and_group_by_profile():
    common = dict(
        notes=None,
        created_at=datetime(2024, 1, 1, 10, 0),
        client_id=1,
        client_name="Ravi",
        bank_id=1,
        bank_name="ICICI",
    )
    rows = [
        ProfilerTransaction(
            id=1, profile_id=7, transaction_type=ProfilerTransactionType.WITHDRAW,
            amount=Decimal("100"), withdraw_charges_percentage=Decimal("3"),
            withdraw_charges_amount=Decimal("2.50"), **common,
        ),
        ProfilerTransaction(
            id=2, profile_id=8, transaction_type=ProfilerTransactionType.DEPOSIT,
            amount=Decimal("40"), withdraw_charges_percentage=None,
            withdraw_charges_amount=Decimal("0"), **common,
        ),
    ]

    result = aggregate_transactions(rows)

    assert list(result.groups) == [7, 8]
    assert result.groups[7].charges == Decimal("2.50")


def test_group_summary_lines():
    result = aggregate([_entry("Acme", True, "1000"), _entry("Acme", False, "200", charge="20")])

    lines = {line.label: line for line in group_summary(result.groups["Acme"])}

    assert lines["Transaction Amount"].value == "Rs. 800.00/-"
    assert lines["Net Balance"].value == "Rs. 820.00/-"
    assert lines["Net Balance"].note == "(Acme Outstanding Balance)"
    assert lines["Payment Difference"].value == "Rs. -800.00/-"
    assert lines["Payment Difference"].note == "(Amount Receivable from Acme)"


def test_group_summary_company_owes():
    result = aggregate([_entry("Acme", True, "100"), _entry("Acme", False, "500", charge="5")])

    lines = {line.label: line for line in group_summary(result.groups["Acme"])}

    # final = (100 - 500) + 5 = -395
    assert lines["Net Balance"].value == "Rs. 395.00/-"
    assert lines["Net Balance"].note == "(Company Outstanding Balance)"
    assert lines["Payment Difference"].note == "(Amount Payable to Acme)"


def test_ledger_row_formats_charges():
    withdrawal = LedgerEntry(
        group_key="Acme",
        group_label="Acme",
        is_deposit=False,
        amount=Decimal("200"),
        charge_amount=Decimal("20"),
        charge_percentage=Decimal("10.00"),
        occurred_on=date(2024, 1, 12),
        occurred_at=time(14, 5),
        bank_name="HDFC",
    )

    assert ledger_row(withdrawal) == [
        "Withdraw",
        "Rs. 200.00/-",
        "Rs. 20.00/-\n(10%)",
        "HDFC",
        "-",
        "12/01/2024\n02:05 PM",
    ]
