"""Grouped client reports rendered through the aggregation engine."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Optional

from finops.database.base import Database
from finops.domain import catalog
from finops.domain.aggregation import Aggregation, GroupTotals, LedgerEntry, aggregate_transactions
from finops.domain.entities import ProfilerProfile
from finops.domain.errors import NotFoundError, ValidationError, entity_not_found
from finops.logging import get_logger
from finops.rendering.pdf import DocumentSection, SummaryLine, render_document
from finops.utils.formatting import format_currency, sanitize_filename
from finops.utils.params import parse_date_value, parse_positive_int

REPORT_TITLE = "Financial Transaction Report"
PROFILE_REPORT_TITLE = "Profile Transaction Report"
PDF_MIME_TYPE = "application/pdf"
REPORT_COLUMNS = ("Type", "Amount", "Withdraw Charges", "Bank", "Card", "Date & Time")
PROFILE_COLUMNS = ("Type", "Amount", "Charges", "Notes", "Date & Time")


def _percentage(value: Optional[Decimal]) -> str:
    if value is None:
        return "0%"
    return f"{format(Decimal(value).normalize(), 'f')}%"


def _when(entry: LedgerEntry) -> str:
    day = entry.occurred_on.strftime("%d/%m/%Y") if entry.occurred_on else "-"
    moment = entry.occurred_at.strftime("%I:%M %p") if entry.occurred_at else "-"
    return f"{day}\n{moment}"


def _charge(entry: LedgerEntry) -> str:
    if entry.is_deposit:
        return "-"
    return f"{format_currency(entry.charge_amount)}\n({_percentage(entry.charge_percentage)})"


def ledger_row(entry: LedgerEntry) -> list[str]:
    return [
        entry.type_label,
        format_currency(entry.amount),
        _charge(entry),
        entry.bank_name or "-",
        entry.card_name or "-",
        _when(entry),
    ]


def payment_difference_note(difference: Decimal, client_name: str) -> str:
    if difference < 0:
        return f"(Amount Receivable from {client_name})"
    return f"(Amount Payable to {client_name})"


def net_balance_note(outstanding_by_client: bool, client_name: str) -> str:
    if outstanding_by_client:
        return f"({client_name} Outstanding Balance)"
    return "(Company Outstanding Balance)"


def group_summary(group: GroupTotals) -> list[SummaryLine]:
    """Summary box for one client group.

    Only-withdraw groups show a transaction amount of 0 and their charges
    as the net balance, which the client owes.
    """
    difference = group.payment_difference
    client_owes = group.is_only_withdraw or group.final_amount >= 0
    return [
        SummaryLine("Total Deposits", format_currency(group.deposits)),
        SummaryLine("Total Withdrawals", format_currency(group.withdrawals)),
        SummaryLine("Withdrawal Charges", format_currency(group.charges)),
        SummaryLine(
            "Payment Difference",
            format_currency(difference),
            note=payment_difference_note(difference, group.label),
            positive=difference < 0,
        ),
        SummaryLine("Transaction Amount", format_currency(group.display_transaction_amount)),
        SummaryLine(
            "Net Balance",
            format_currency(group.display_final_amount),
            note=net_balance_note(client_owes, group.label),
            positive=client_owes,
            bold=True,
        ),
    ]


def grouped_sections(aggregation: Aggregation) -> list[DocumentSection]:
    """One document section per group, in first-seen order."""
    return [
        DocumentSection(
            heading=str(group.label),
            columns=REPORT_COLUMNS,
            rows=[ledger_row(entry) for entry in group.entries],
            summary=group_summary(group),
            row_kinds=[entry.is_deposit for entry in group.entries],
        )
        for group in aggregation
    ]


def profile_section(profile: ProfilerProfile, aggregation: Aggregation) -> DocumentSection:
    """Document section for one profiler profile and its transactions."""
    group = next(iter(aggregation), None)
    entries = group.entries if group is not None else []
    deposits = group.deposits if group is not None else Decimal("0")
    withdrawals = group.withdrawals if group is not None else Decimal("0")
    charges = group.charges if group is not None else Decimal("0")
    difference = withdrawals - deposits
    net = deposits - withdrawals - charges
    name = profile.client_name

    return DocumentSection(
        heading=f"{name} / {profile.bank_name}",
        columns=PROFILE_COLUMNS,
        rows=[
            [
                entry.type_label.upper(),
                format_currency(entry.amount),
                "-" if entry.is_deposit else f"{format_currency(entry.charge_amount)}\n({_percentage(entry.charge_percentage)})",
                entry.notes or "-",
                _when(entry),
            ]
            for entry in entries
        ],
        details=[
            ("Client Name", name),
            ("Bank", profile.bank_name),
            ("Card Number", profile.credit_card_number or "-"),
            ("Opening Balance", format_currency(profile.pre_planned_deposit_amount)),
            ("Current Balance", format_currency(profile.current_balance)),
            ("Remaining Balance", format_currency(profile.remaining_balance)),
            ("Status", profile.status.value),
        ],
        summary=[
            SummaryLine(f"Total Deposits ({name} Paid)", format_currency(deposits)),
            SummaryLine("Total Withdrawals (Company Paid)", format_currency(withdrawals)),
            SummaryLine("Withdrawal Charges (Company Earned)", format_currency(charges)),
            SummaryLine(
                "Payment Difference",
                format_currency(difference),
                note=payment_difference_note(difference, name),
                positive=difference < 0,
            ),
            SummaryLine(
                "Net Balance",
                format_currency(net),
                note=net_balance_note(net >= 0, name),
                positive=net >= 0,
                bold=True,
            ),
        ],
        row_kinds=[entry.is_deposit for entry in entries],
    )


def report_filename(client_name: Optional[str], start: date, end: date, now: datetime) -> str:
    scope = sanitize_filename(client_name) if client_name else "All_Clients"
    return (
        f"{scope}_transaction_report_{start.strftime('%d%m%Y')}_to_{end.strftime('%d%m%Y')}"
        f"_{now.strftime('%d%m%Y_%H-%M-%S')}.pdf"
    )


@dataclass(frozen=True)
class ReportDocument:
    """Generated report bytes plus descriptive metadata."""

    content: bytes
    filename: str
    total_rows: int
    group_count: int
    generated_at: datetime
    filters_applied: dict[str, Any] = field(default_factory=dict)
    mime_type: str = PDF_MIME_TYPE


class ReportService:
    """Build grouped PDF reports of ledger transactions."""

    def __init__(self, db: Database, logger: Optional[logging.Logger] = None):
        """Initialize report service.

        Args:
            db: Database instance
            logger: Logger for generated reports
        """
        self.db = db
        self.logger = logger or get_logger(__name__)

    def generate_report(self, start_date: Any, end_date: Any, client_id: Any = None) -> ReportDocument:
        """Generate the grouped report for a period, optionally for one client.

        Args:
            start_date: First booking date (inclusive)
            end_date: Last booking date (inclusive)
            client_id: Optional client to scope the report to

        Returns:
            ReportDocument with the PDF bytes

        Raises:
            ValidationError: If a date is missing or invalid, the range is
                inverted, or nothing matches
            NotFoundError: If the client doesn't exist
        """
        for name, value in (("start_date", start_date), ("end_date", end_date)):
            if value in (None, ""):
                raise ValidationError(f"{name} is required", field=name)
        start = parse_date_value(start_date, "start_date")
        end = parse_date_value(end_date, "end_date")

        client_name = None
        filters: dict[str, Any] = {"start_date": start, "end_date": end}
        if client_id not in (None, ""):
            client_id = parse_positive_int(client_id, "client_id")
            client = self.db.get_client(client_id)
            if client is None:
                raise NotFoundError(entity_not_found("Client", client_id))
            client_name = client.name
            filters["client_ids"] = [client_id]

        plan = catalog.TRANSACTIONS.plan(filters=filters, sort_by="client_name", sort_order="asc")
        if self.db.count_matching(plan) == 0:
            raise ValidationError("No transactions found for the specified criteria")

        aggregation = aggregate_transactions(self.db.iter_matching(plan))
        now = datetime.now()
        subtitle = [f"Period: {start.strftime('%d/%m/%Y')} to {end.strftime('%d/%m/%Y')}"]
        subtitle.append(f"Client: {client_name}" if client_name else "All clients")
        content = render_document(REPORT_TITLE, subtitle, grouped_sections(aggregation), generated_at=now)

        self.logger.info(
            "Generated report with %d transactions in %d groups",
            aggregation.row_count,
            len(aggregation),
            extra={"client_id": client_id, "size_bytes": len(content)},
        )
        return ReportDocument(
            content=content,
            filename=report_filename(client_name, start, end, now),
            total_rows=aggregation.row_count,
            group_count=len(aggregation),
            generated_at=now,
            filters_applied=dict(plan.filters_applied),
        )


def render_grouped(rows: Iterable[Any], title: str, subtitle: list[str], now: datetime) -> tuple[bytes, int]:
    """Aggregate rows and render them as a grouped document.

    Returns:
        (PDF bytes, number of rows rendered)
    """
    aggregation = aggregate_transactions(rows)
    return render_document(title, subtitle, grouped_sections(aggregation), generated_at=now), aggregation.row_count
