"""Export size preview.

The estimate is a heuristic: per-field average byte widths, a per-row
format overhead and a whole-file overhead, scaled by a fixed per-format
compression factor. It is never an exact byte count and callers should
present it as approximate.
"""

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from finops.database.base import Database
from finops.domain import catalog
from finops.domain.export import ExportFormat, select_fields
from finops.utils.formatting import human_size

FIELD_WIDTHS = {
    "client_name": 25,
    "bank_name": 20,
    "card_name": 25,
    "transaction_amount": 12,
    "transaction_type": 8,
    "create_date": 20,
    "create_time": 12,
    "remark": 50,
    "withdraw_charges": 12,
}
DEFAULT_FIELD_WIDTH = 15

COMPRESSION_FACTORS = {
    ExportFormat.CSV: 0.8,
    ExportFormat.XLSX: 0.6,
    ExportFormat.JSON: 0.9,
    ExportFormat.PDF: 0.95,
}


def row_overhead(fmt: ExportFormat, field_count: int) -> int:
    """Separator and structure bytes added to every row."""
    if fmt is ExportFormat.CSV:
        return (field_count - 1) + 2
    if fmt is ExportFormat.XLSX:
        return field_count * 2 + 50
    if fmt is ExportFormat.JSON:
        return field_count * 8 + 20
    return field_count * 5 + 100


def file_overhead(fmt: ExportFormat, fields: Sequence[str]) -> int:
    """Header/footer bytes added once per file."""
    if fmt is ExportFormat.CSV:
        return len(",".join(fields)) + 2
    if fmt is ExportFormat.XLSX:
        return 1024
    if fmt is ExportFormat.JSON:
        return 50
    return 5000


@dataclass(frozen=True)
class SizeEstimate:
    total_rows: int
    estimated_size_bytes: int
    format: ExportFormat
    fields: tuple[str, ...]
    base_size_per_row: int
    field_overhead: int
    format_overhead: int
    compression_factor: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_rows": self.total_rows,
            "estimated_size_bytes": self.estimated_size_bytes,
            "estimated_size_human": f"~{human_size(self.estimated_size_bytes)}",
            "format": self.format.value,
            "fields": list(self.fields),
            "breakdown": {
                "base_size_per_row": self.base_size_per_row,
                "field_overhead": self.field_overhead,
                "format_overhead": self.format_overhead,
                "compression_factor": self.compression_factor,
            },
            "is_estimate": True,
        }


def estimate_size(total_rows: int, fmt: ExportFormat, fields: Sequence[str]) -> SizeEstimate:
    """Estimate the output size for ``total_rows`` rows.

    total = round(rows * (base + row overhead) * factor) + file overhead,
    rounding halves up.
    """
    base = sum(FIELD_WIDTHS.get(name, DEFAULT_FIELD_WIDTH) for name in fields)
    per_row_overhead = row_overhead(fmt, len(fields))
    factor = COMPRESSION_FACTORS[fmt]
    compressed = math.floor(total_rows * (base + per_row_overhead) * factor + 0.5)
    once = file_overhead(fmt, fields)
    return SizeEstimate(
        total_rows=total_rows,
        estimated_size_bytes=compressed + once,
        format=fmt,
        fields=tuple(fields),
        base_size_per_row=base,
        field_overhead=per_row_overhead,
        format_overhead=once,
        compression_factor=factor,
    )


class PreviewService:
    """Estimate export sizes from a count query alone."""

    def __init__(self, db: Database):
        self.db = db

    def preview_export(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        search: Optional[str] = None,
        format: Any = ExportFormat.CSV,
        fields: Optional[Sequence[str]] = None,
    ) -> SizeEstimate:
        """Count matching transactions and estimate the export size.

        No row data is fetched.

        Raises:
            ValidationError: On invalid filters, format or fields
        """
        fmt = ExportFormat.parse(format)
        selected = select_fields(fields)
        plan = catalog.TRANSACTIONS.plan(filters=filters, search=search)
        return estimate_size(self.db.count_matching(plan), fmt, selected)
