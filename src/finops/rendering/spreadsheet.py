"""Write tabular exports to .xlsx bytes with openpyxl."""

from io import BytesIO
from typing import Any, Iterable, Mapping, Optional, Sequence

from openpyxl import Workbook
from openpyxl.cell import WriteOnlyCell
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter


def build_workbook(
    sheet_title: str,
    headers: Sequence[str],
    rows: Iterable[Sequence[Any]],
    widths: Optional[Sequence[float]] = None,
    metadata: Optional[Mapping[str, Any]] = None,
    metadata_title: str = "Metadata",
) -> tuple[bytes, int]:
    """Stream rows into a workbook with a bold header row.

    The metadata sheet is written after the data sheet so it can record
    the number of rows actually written under the "Total Rows" key.

    Args:
        sheet_title: Name of the data sheet
        headers: Header labels
        rows: Row values, consumed once
        widths: Column widths in characters, by position
        metadata: Extra key/value pairs for the metadata sheet
        metadata_title: Name of the metadata sheet

    Returns:
        (workbook bytes, number of data rows written)
    """
    workbook = Workbook(write_only=True)
    sheet = workbook.create_sheet(sheet_title)
    for index, width in enumerate(widths or (), start=1):
        sheet.column_dimensions[get_column_letter(index)].width = width

    header_cells = []
    for label in headers:
        cell = WriteOnlyCell(sheet, value=label)
        cell.font = Font(bold=True)
        header_cells.append(cell)
    sheet.append(header_cells)

    count = 0
    for row in rows:
        sheet.append(list(row))
        count += 1

    info = workbook.create_sheet(metadata_title)
    info.column_dimensions["A"].width = 20
    info.column_dimensions["B"].width = 60
    key_cell = WriteOnlyCell(info, value="Total Rows")
    key_cell.font = Font(bold=True)
    info.append([key_cell, count])
    for key, value in (metadata or {}).items():
        key_cell = WriteOnlyCell(info, value=key)
        key_cell.font = Font(bold=True)
        info.append([key_cell, value])

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue(), count
