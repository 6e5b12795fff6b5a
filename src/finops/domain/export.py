"""Export pipeline: project transactions onto fields and serialize them.

Formats:

* CSV: header of display names, RFC 4180 quoting.
* XLSX: a ``Transactions`` data sheet and a ``Metadata`` sheet.
* JSON: ``{"metadata": {...}, "transactions": [...]}``.
* PDF: rows re-grouped per client through the aggregation engine.

Rows are streamed from the store and projected one at a time. The
JSON writer collects its records first so the metadata block can lead
with the row count.
"""

import base64
import csv
import io
import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence

from finops.database.base import Database
from finops.domain import catalog
from finops.domain.entities import Transaction
from finops.domain.errors import NotFoundError, ValidationError, entity_not_found
from finops.domain.report import REPORT_TITLE, PROFILE_REPORT_TITLE, profile_section, render_grouped
from finops.domain.aggregation import aggregate_transactions
from finops.logging import get_logger
from finops.rendering.pdf import render_document
from finops.rendering.spreadsheet import build_workbook
from finops.utils.formatting import sanitize_filename
from finops.utils.params import parse_positive_int


class ExportFormat(str, Enum):
    CSV = "csv"
    XLSX = "xlsx"
    JSON = "json"
    PDF = "pdf"

    @classmethod
    def parse(cls, value: Any) -> "ExportFormat":
        """Accept a member or its name, case-insensitive; 'excel' means xlsx."""
        if isinstance(value, ExportFormat):
            return value
        text = str(value or "").strip().lower()
        if text == "excel":
            return cls.XLSX
        try:
            return cls(text)
        except ValueError:
            allowed = [f.value for f in cls]
            raise ValidationError(
                f"format must be one of: {', '.join(allowed)}; got '{value}'",
                field="format",
                details={"allowed": allowed},
            ) from None


MIME_TYPES = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ExportFormat.JSON: "application/json",
    ExportFormat.PDF: "application/pdf",
}

# Canonical field order with display names
EXPORT_FIELDS = {
    "id": "Transaction ID",
    "transaction_type": "Type",
    "client_name": "Client Name",
    "bank_name": "Bank Name",
    "card_name": "Card Name",
    "transaction_amount": "Amount",
    "withdraw_charges": "Charges (%)",
    "remark": "Remarks",
    "create_date": "Date",
    "create_time": "Time",
}
DEFAULT_FIELDS = tuple(EXPORT_FIELDS)

COLUMN_WIDTHS = {
    "id": 15,
    "transaction_type": 12,
    "client_name": 25,
    "bank_name": 20,
    "card_name": 20,
    "transaction_amount": 15,
    "withdraw_charges": 12,
    "remark": 30,
    "create_date": 12,
    "create_time": 12,
}


def select_fields(fields: Optional[Iterable[str] | str]) -> tuple[str, ...]:
    """Validate a field subset; empty means every canonical field.

    Raises:
        ValidationError: If a field is unknown
    """
    if fields is None:
        return DEFAULT_FIELDS
    if isinstance(fields, str):
        fields = fields.split(",")
    selected = tuple(name.strip() for name in fields if name and name.strip())
    if not selected:
        return DEFAULT_FIELDS
    unknown = [name for name in selected if name not in EXPORT_FIELDS]
    if unknown:
        raise ValidationError(
            f"Unknown export field(s): {', '.join(unknown)}",
            field="fields",
            details={"unknown": unknown, "allowed": list(DEFAULT_FIELDS)},
        )
    return selected


def field_value(transaction: Transaction, name: str) -> Any:
    """Raw value of one export field."""
    if name == "transaction_type":
        return transaction.transaction_type.label
    return getattr(transaction, name)


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)


def _json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (date, time)):
        return value.isoformat()
    return value


def project(rows: Iterable[Transaction], fields: Sequence[str]) -> Iterator[list[Any]]:
    for row in rows:
        yield [field_value(row, name) for name in fields]


def write_csv(rows: Iterable[Transaction], fields: Sequence[str]) -> tuple[bytes, int]:
    """CSV with display-name header. Returns (bytes, row count)."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([EXPORT_FIELDS[name] for name in fields])
    count = 0
    for values in project(rows, fields):
        writer.writerow([_text(value) for value in values])
        count += 1
    return buffer.getvalue().encode("utf-8"), count


def write_json(
    rows: Iterable[Transaction],
    fields: Sequence[str],
    generated_at: datetime,
    filters_applied: Mapping[str, Any],
) -> tuple[bytes, int]:
    """JSON envelope of metadata plus projected records.

    Unlike the CSV and XLSX writers this holds every record in memory.
    """
    records = [
        {name: _json_value(value) for name, value in zip(fields, values)}
        for values in project(rows, fields)
    ]
    document = {
        "metadata": {
            "total_rows": len(records),
            "generated_at": generated_at.isoformat(),
            "filters_applied": dict(filters_applied),
            "selected_fields": list(fields),
        },
        "transactions": records,
    }
    return json.dumps(document, indent=2).encode("utf-8"), len(records)


def write_xlsx(
    rows: Iterable[Transaction],
    fields: Sequence[str],
    generated_at: datetime,
    filters_applied: Mapping[str, Any],
) -> tuple[bytes, int]:
    return build_workbook(
        "Transactions",
        [EXPORT_FIELDS[name] for name in fields],
        project(rows, fields),
        widths=[COLUMN_WIDTHS[name] for name in fields],
        metadata={
            "Generated At": generated_at.isoformat(),
            "Filters Applied": json.dumps(dict(filters_applied)),
        },
    )


def export_filename(fmt: ExportFormat, now: datetime, client_name: Optional[str] = None) -> str:
    """transaction_export_{YYYYmmdd_HHMMSS}.{ext}, client-prefixed when scoped."""
    base = f"transaction_export_{now.strftime('%Y%m%d_%H%M%S')}.{fmt.value}"
    if client_name:
        return f"{sanitize_filename(client_name)}_{base}"
    return base


@dataclass(frozen=True)
class ExportResult:
    """Generated export content and its metadata."""

    content: bytes
    filename: str
    mime_type: str
    format: ExportFormat
    total_rows: int
    generated_at: datetime
    filters_applied: dict[str, Any] = field(default_factory=dict)

    @property
    def file_size_bytes(self) -> int:
        return len(self.content)

    def to_dict(self, encode_base64: bool = True) -> dict[str, Any]:
        """External envelope; content is base64 text unless disabled."""
        return {
            "content": base64.b64encode(self.content).decode("ascii") if encode_base64 else self.content,
            "filename": self.filename,
            "mimeType": self.mime_type,
            "format": self.format.value,
            "metadata": {
                "total_rows": self.total_rows,
                "file_size_bytes": self.file_size_bytes,
                "generated_at": self.generated_at.isoformat(),
                "filters_applied": dict(self.filters_applied),
            },
        }


class ExportService:
    """Generate transaction exports."""

    def __init__(self, db: Database, logger: Optional[logging.Logger] = None):
        """Initialize export service.

        Args:
            db: Database instance
            logger: Logger for completed exports
        """
        self.db = db
        self.logger = logger or get_logger(__name__)

    def _scoped_client_name(self, filters_applied: Mapping[str, Any]) -> Optional[str]:
        client_ids = filters_applied.get("client_ids") or []
        if len(client_ids) != 1:
            return None
        client = self.db.get_client(client_ids[0])
        return client.name if client is not None else None

    def export_transactions(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        format: Any = ExportFormat.CSV,
        fields: Optional[Iterable[str] | str] = None,
    ) -> ExportResult:
        """Export every transaction matching the filters.

        Args:
            filters: Raw transaction filters (same keys as the list query)
            search: Optional free-text term
            sort_by: Whitelisted sort key (ignored for PDF, which groups
                by client)
            sort_order: asc or desc
            format: csv, xlsx (or excel), json or pdf
            fields: Field subset; defaults to every canonical field

        Returns:
            ExportResult

        Raises:
            ValidationError: On invalid filters, format or fields
        """
        fmt = ExportFormat.parse(format)
        selected = select_fields(fields)
        if fmt is ExportFormat.PDF:
            sort_by, sort_order = "client_name", "asc"
        plan = catalog.TRANSACTIONS.plan(
            filters=filters, search=search, sort_by=sort_by, sort_order=sort_order
        )
        applied = dict(plan.filters_applied)
        now = datetime.now()
        rows = self.db.iter_matching(plan)

        if fmt is ExportFormat.CSV:
            content, count = write_csv(rows, selected)
        elif fmt is ExportFormat.JSON:
            content, count = write_json(rows, selected, now, applied)
        elif fmt is ExportFormat.XLSX:
            content, count = write_xlsx(rows, selected, now, applied)
        else:
            subtitle = []
            if "start_date" in applied or "end_date" in applied:
                subtitle.append(f"Period: {applied.get('start_date', '...')} to {applied.get('end_date', '...')}")
            content, count = render_grouped(rows, REPORT_TITLE, subtitle, now)

        result = ExportResult(
            content=content,
            filename=export_filename(fmt, now, self._scoped_client_name(applied)),
            mime_type=MIME_TYPES[fmt],
            format=fmt,
            total_rows=count,
            generated_at=now,
            filters_applied=applied,
        )
        self.logger.info(
            "Exported %d transactions as %s",
            count,
            fmt.value,
            extra={"export_format": fmt.value, "size_bytes": result.file_size_bytes},
        )
        return result

    def export_profile_pdf(self, profile_id: Any) -> ExportResult:
        """Render one profiler profile and its transactions as a PDF.

        Raises:
            NotFoundError: If the profile doesn't exist
        """
        profile_id = parse_positive_int(profile_id, "profile_id")
        profile = self.db.get_profile(profile_id)
        if profile is None:
            raise NotFoundError(entity_not_found("Profiler profile", profile_id))

        plan = catalog.PROFILER_TRANSACTIONS.plan(
            filters={"profile_id": profile_id}, sort_by="created_at", sort_order="asc"
        )
        aggregation = aggregate_transactions(self.db.iter_matching(plan))
        now = datetime.now()
        content = render_document(
            PROFILE_REPORT_TITLE,
            [f"Client: {profile.client_name}", f"Bank: {profile.bank_name}"],
            [profile_section(profile, aggregation)],
            generated_at=now,
        )
        filename = f"{sanitize_filename(profile.client_name)}_Transactions_{now.strftime('%Y-%m-%dT%H-%M-%S')}.pdf"
        self.logger.info(
            "Exported profiler profile %s as pdf", profile_id, extra={"profile_id": profile_id}
        )
        return ExportResult(
            content=content,
            filename=filename,
            mime_type=MIME_TYPES[ExportFormat.PDF],
            format=ExportFormat.PDF,
            total_rows=aggregation.row_count,
            generated_at=now,
            filters_applied=dict(plan.filters_applied),
        )
