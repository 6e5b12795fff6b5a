"""Display formatting helpers.

Amounts are only rounded here, at presentation time.
"""

import re
from decimal import Decimal, ROUND_HALF_UP

_CENT = Decimal("0.01")


def format_amount(value: Decimal) -> str:
    """Format with thousands separators and two decimals: 1234.5 -> '1,234.50'."""
    return f"{Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP):,.2f}"


def format_currency(value: Decimal) -> str:
    """Format an amount as printed on reports: 'Rs. 1,234.50/-'."""
    return f"Rs. {format_amount(value)}/-"


def sanitize_filename(name: str) -> str:
    """Strip unsafe characters and collapse whitespace to underscores."""
    cleaned = re.sub(r"[^a-zA-Z0-9\s-]", "", name or "")
    return re.sub(r"\s+", "_", cleaned.strip())


def human_size(size_bytes: int) -> str:
    """Render a byte count using base-1024 units ('0 B', '512 B', '1.5 KB')."""
    if size_bytes <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    value = float(size_bytes)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    if index == 0:
        return f"{int(value)} B"
    return f"{value:.1f} {units[index]}"
