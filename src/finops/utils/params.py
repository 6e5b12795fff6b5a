"""Parsing of raw request parameters.

Every value may arrive as a string. Parsers take ``(value, field)`` and
raise ``ValidationError`` naming the field when the value is unusable;
they never substitute a default for bad input.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Iterable

from finops.domain.errors import ValidationError
from finops.utils.amount_parser import parse_amount
from finops.utils.date_parser import parse_date

_TRUE = {"true", "1", "yes", "y", "on"}
_FALSE = {"false", "0", "no", "n", "off"}


def parse_int(value: Any, field: str) -> int:
    """Parse an integer."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer", field=field)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer, got '{value}'", field=field)


def parse_positive_int(value: Any, field: str) -> int:
    """Parse an integer identifier (> 0)."""
    number = parse_int(value, field)
    if number < 1:
        raise ValidationError(f"{field} must be a positive integer", field=field)
    return number


def parse_decimal(value: Any, field: str) -> Decimal:
    """Parse a decimal amount (currency symbols and separators allowed)."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return Decimal(str(value))
    try:
        return parse_amount(str(value))
    except ValueError:
        raise ValidationError(f"{field} must be a number, got '{value}'", field=field)


def parse_non_negative_decimal(value: Any, field: str) -> Decimal:
    amount = parse_decimal(value, field)
    if amount < 0:
        raise ValidationError(f"{field} must not be negative", field=field)
    return amount


def parse_date_value(value: Any, field: str) -> date:
    """Parse an absolute or relative date ("2024-01-31", "last month")."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return parse_date(str(value))
    except ValueError:
        raise ValidationError(f"{field} must be a valid date, got '{value}'", field=field)


def parse_bool(value: Any, field: str) -> bool:
    """Parse a boolean flag ("true"/"false", "1"/"0", "yes"/"no")."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValidationError(f"{field} must be true or false, got '{value}'", field=field)


def _split(value: Any) -> list:
    if isinstance(value, str):
        return [part for part in (p.strip() for p in value.split(",")) if part]
    if isinstance(value, Iterable):
        return list(value)
    return [value]


def parse_id_list(value: Any, field: str) -> tuple[int, ...]:
    """Parse a comma-separated string or a sequence of integer IDs."""
    return tuple(parse_positive_int(item, field) for item in _split(value))


def parse_id_or_ids(value: Any, field: str) -> int | tuple[int, ...]:
    """Parse a single ID, or a set of IDs when several are given."""
    items = _split(value)
    if len(items) == 1 and not isinstance(value, (list, tuple, set, frozenset)):
        return parse_positive_int(items[0], field)
    return tuple(parse_positive_int(item, field) for item in items)


def choice(allowed: Iterable[str], convert: Callable[[str], Any] = str) -> Callable[[Any, str], Any]:
    """Build a parser accepting one of ``allowed`` (case-insensitive)."""
    options = tuple(allowed)

    def parse(value: Any, field: str) -> Any:
        text = str(getattr(value, "value", value)).strip().lower()
        if text not in options:
            raise ValidationError(
                f"{field} must be one of: {', '.join(options)}; got '{value}'",
                field=field,
                details={"allowed": list(options)},
            )
        return convert(text)

    return parse


def choice_or_choices(allowed: Iterable[str], convert: Callable[[str], Any] = str) -> Callable[[Any, str], Any]:
    """Like ``choice`` but a comma-separated value yields a tuple."""
    single = choice(allowed, convert)

    def parse(value: Any, field: str) -> Any:
        items = _split(value)
        if len(items) == 1 and not isinstance(value, (list, tuple, set, frozenset)):
            return single(items[0], field)
        return tuple(single(item, field) for item in items)

    return parse


def build_patch(entity: str, **fields: Any) -> dict[str, Any]:
    """Collect the fields explicitly provided for a selective update.

    ``None`` means "leave unchanged". An empty patch is rejected.
    """
    patch = {name: value for name, value in fields.items() if value is not None}
    if not patch:
        raise ValidationError(f"No fields provided to update {entity}")
    return patch


def clean_text(value: Any, field: str, required: bool = False) -> Any:
    """Strip a text value; blank optional values become None."""
    if value is None:
        if required:
            raise ValidationError(f"{field} is required", field=field)
        return None
    text = str(value).strip()
    if not text:
        if required:
            raise ValidationError(f"{field} must not be empty", field=field)
        return None
    return text
