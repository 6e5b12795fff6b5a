"""Byte sinks for spreadsheet and PDF documents."""

from finops.rendering.pdf import DocumentSection, SummaryLine, render_document
from finops.rendering.spreadsheet import build_workbook

__all__ = ["DocumentSection", "SummaryLine", "build_workbook", "render_document"]
