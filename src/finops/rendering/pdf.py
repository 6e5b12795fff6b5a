"""Render grouped report documents to PDF bytes with reportlab."""

from dataclasses import dataclass, field
from datetime import datetime
from io import BytesIO
from typing import Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import KeepTogether, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

_HEADER_BG = colors.HexColor("#EEF1F4")
_GRID = colors.HexColor("#D7DCE2")
_STRIPE = colors.HexColor("#FAFBFC")
_SUMMARY_BG = colors.HexColor("#F4F6F8")
_DEPOSIT_BG = colors.HexColor("#D1FAE5")
_WITHDRAW_BG = colors.HexColor("#FEE2E2")
_POSITIVE = colors.HexColor("#15803D")
_NEGATIVE = colors.HexColor("#B91C1C")
_MUTED = colors.HexColor("#6B7280")


@dataclass
class SummaryLine:
    """One label/value line of a section summary box."""

    label: str
    value: str
    note: Optional[str] = None
    positive: Optional[bool] = None
    bold: bool = False


@dataclass
class DocumentSection:
    """A titled table of rows followed by a summary box."""

    heading: str
    columns: Sequence[str]
    rows: list[list[str]]
    summary: list[SummaryLine] = field(default_factory=list)
    details: list[tuple[str, str]] = field(default_factory=list)
    # Per-row flag: True deposit, False withdraw, None no shading
    row_kinds: list[Optional[bool]] = field(default_factory=list)


def _table(section: DocumentSection, width: float) -> Table:
    data = [list(section.columns)] + section.rows
    col_width = width / max(len(section.columns), 1)
    table = Table(data, colWidths=[col_width] * len(section.columns), repeatRows=1)
    style: list[tuple] = [
        ("BACKGROUND", (0, 0), (-1, 0), _HEADER_BG),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("GRID", (0, 0), (-1, -1), 0.25, _GRID),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]
    for index, kind in enumerate(section.row_kinds, start=1):
        if kind is not None:
            style.append(("BACKGROUND", (0, index), (0, index), _DEPOSIT_BG if kind else _WITHDRAW_BG))
        elif index % 2 == 0:
            style.append(("BACKGROUND", (0, index), (-1, index), _STRIPE))
    table.setStyle(TableStyle(style))
    return table


def _summary_box(lines: list[SummaryLine], width: float) -> Table:
    styles = getSampleStyleSheet()
    label_style = ParagraphStyle(name="SummaryLabel", parent=styles["BodyText"], fontSize=9, leading=12)
    note_style = ParagraphStyle(name="SummaryNote", parent=label_style, fontSize=7, textColor=_MUTED)

    cells = []
    for line in lines:
        label = f"<b>{escape(line.label)}</b>" if line.bold else escape(line.label)
        value_color = None
        if line.positive is not None:
            value_color = (_POSITIVE if line.positive else _NEGATIVE).hexval()[2:]
        value = f"<b>{escape(line.value)}</b>"
        if value_color:
            value = f'<font color="#{value_color}">{value}</font>'
        value_cell = [Paragraph(value, ParagraphStyle(name="SummaryValue", parent=label_style, alignment=2))]
        if line.note:
            value_cell.append(Paragraph(escape(line.note), ParagraphStyle(name="Note", parent=note_style, alignment=2)))
        cells.append([Paragraph(label, label_style), value_cell])

    table = Table(cells, colWidths=[width * 0.55, width * 0.45])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, -1), _SUMMARY_BG),
                ("BOX", (0, 0), (-1, -1), 0.6, _GRID),
                ("LINEBELOW", (0, 0), (-1, -2), 0.25, _GRID),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ("LEFTPADDING", (0, 0), (-1, -1), 8),
                ("RIGHTPADDING", (0, 0), (-1, -1), 8),
            ]
        )
    )
    return table


def render_document(
    title: str,
    subtitle_lines: Sequence[str],
    sections: Sequence[DocumentSection],
    generated_at: Optional[datetime] = None,
) -> bytes:
    """Render a report with one table and summary per section.

    Args:
        title: Document title
        subtitle_lines: Lines printed under the title (period, scope)
        sections: Grouped sections in display order
        generated_at: Timestamp printed in the header

    Returns:
        PDF document bytes
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=16 * mm,
        leftMargin=16 * mm,
        topMargin=16 * mm,
        bottomMargin=14 * mm,
        title=title,
    )
    styles = getSampleStyleSheet()
    section_title_style = ParagraphStyle(name="SectionTitle", parent=styles["Heading2"], spaceAfter=4, fontSize=12)
    subtitle_style = ParagraphStyle(name="Subtitle", parent=styles["BodyText"], fontSize=9, textColor=_MUTED)

    generated_at = generated_at or datetime.now()
    story = [Paragraph(escape(title), styles["Title"]), Spacer(1, 1 * mm)]
    for line in subtitle_lines:
        story.append(Paragraph(escape(line), styles["BodyText"]))
    story.append(Paragraph(f"Generated on {generated_at.strftime('%d/%m/%Y %H:%M:%S')}", subtitle_style))
    story.append(Spacer(1, 6 * mm))

    for section in sections:
        story.append(Paragraph(escape(section.heading), section_title_style))
        for label, value in section.details:
            story.append(Paragraph(f"<b>{escape(label)}:</b> {escape(value)}", styles["BodyText"]))
        if section.details:
            story.append(Spacer(1, 2 * mm))
        story.append(_table(section, doc.width))
        if section.summary:
            story.append(Spacer(1, 3 * mm))
            story.append(KeepTogether([_summary_box(section.summary, doc.width)]))
        story.append(Spacer(1, 8 * mm))

    if not sections:
        story.append(Paragraph("No transactions for the selected period.", styles["Italic"]))

    doc.build(story)
    buffer.seek(0)
    return buffer.read()
