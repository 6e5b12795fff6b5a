"""Shared list options and output rendering for CLI commands."""

import dataclasses
import functools
import json
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Sequence

import click

from finops.domain.query import Page


def list_options(func: Callable) -> Callable:
    """Add --page/--limit/--search/--sort-by/--sort-order/--json to a command."""
    options = [
        click.option("--json", "as_json", is_flag=True, help="Print the JSON page envelope"),
        click.option("--sort-order", help="asc or desc"),
        click.option("--sort-by", help="Sort key"),
        click.option("--search", help="Free-text search; exact matches are listed first"),
        click.option("--limit", help="Rows per page (1-100, default FINOPS_PAGE_SIZE or 50)"),
        click.option("--page", help="Page number (default 1)"),
    ]

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        if kwargs.get("limit") is None:
            config = (click.get_current_context().obj or {}).get("config")
            if config is not None:
                kwargs["limit"] = config.default_page_size
        return func(*args, **kwargs)

    for option in options:
        wrapper = option(wrapper)
    return wrapper


def plain(value: Any) -> Any:
    """Convert a value into something json.dumps accepts."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [plain(item) for item in value]
    return value


def to_record(entity: Any) -> dict[str, Any]:
    """Domain dataclass to a JSON-ready dict, including derived properties."""
    record = {field.name: plain(getattr(entity, field.name)) for field in dataclasses.fields(entity)}
    for name in ("remaining_balance", "charge_amount"):
        if hasattr(type(entity), name):
            record[name] = plain(getattr(entity, name))
    return record


def echo_json(payload: Any) -> None:
    click.echo(json.dumps(plain(payload), indent=2))


def echo_page(
    page: Page,
    as_json: bool,
    columns: Sequence[tuple[str, int]],
    row: Callable[[Any], Sequence[Any]],
    empty_message: str,
) -> None:
    """Print a page as a JSON envelope or a fixed-width table.

    Args:
        page: Page to print
        as_json: Print ``page.to_dict`` as JSON instead of a table
        columns: (header, width) pairs
        row: Maps an entity to cell values, one per column
        empty_message: Printed when the page has no rows
    """
    if as_json:
        echo_json(page.to_dict(to_record))
        return

    if not page.rows:
        click.echo(empty_message)
        return

    header = " | ".join(f"{title:<{width}}" for title, width in columns)
    click.echo(header)
    click.echo("-" * len(header))
    for entity in page.rows:
        cells = row(entity)
        click.echo(
            " | ".join(
                f"{'' if value is None else str(value):<{width}}"[: max(width, 1)]
                for value, (_, width) in zip(cells, columns)
            )
        )
    click.echo(
        f"\nPage {page.page} of {max(page.total_pages, 1)} ({page.total_count} total)"
    )


def echo_matches(page: Page, as_json: bool, label: Callable[[Any], str]) -> None:
    """Print autocomplete matches as ``ID  label`` lines or a JSON list."""
    if as_json:
        echo_json({"data": [to_record(entity) for entity in page.rows], "total": page.total_count})
        return
    for entity in page.rows:
        click.echo(f"{entity.id:>5}  {label(entity)}")
    hidden = page.total_count - len(page.rows)
    if hidden > 0:
        click.echo(f"  ... and {hidden} more")
