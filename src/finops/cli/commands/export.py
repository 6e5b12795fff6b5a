"""Export commands."""

from pathlib import Path

import click

from finops.cli.commands.transaction import collect_filters, transaction_filter_options
from finops.cli.error_handling import handle_domain_error
from finops.cli.listing import echo_json
from finops.domain.errors import DomainError
from finops.domain.export import ExportResult, ExportService
from finops.domain.preview import PreviewService
from finops.utils.formatting import human_size

FORMAT_CHOICES = click.Choice(["csv", "xlsx", "excel", "json", "pdf"], case_sensitive=False)


def _write(result: ExportResult, output: str | None) -> Path:
    target = Path(output) if output else Path.cwd() / result.filename
    if target.is_dir():
        target = target / result.filename
    target.write_bytes(result.content)
    return target


@click.group()
def export_group():
    """Export transactions and profiles."""
    pass


@export_group.command("transactions")
@transaction_filter_options
@click.option("--format", "export_format", type=FORMAT_CHOICES, default="csv", show_default=True)
@click.option("--fields", help="Comma-separated fields (default: all)")
@click.option("--search", help="Free-text search")
@click.option("--sort-by", help="Sort key")
@click.option("--sort-order", help="asc or desc")
@click.option("--output", "-o", type=click.Path(), help="Output file or directory (default: generated name)")
@click.pass_context
def export_transactions(
    ctx,
    export_format,
    fields,
    search,
    sort_by,
    sort_order,
    output,
    transaction_type,
    min_amount,
    max_amount,
    start_date,
    end_date,
    bank_ids,
    card_ids,
    client_ids,
):
    """Export matching transactions to a file.

    Examples:
        finops export transactions --format xlsx --start-date 2024-01-01
        finops export transactions --format pdf --client-ids 3 -o reports/
    """
    service = ExportService(ctx.obj["db"])
    filters = collect_filters(
        transaction_type=transaction_type,
        min_amount=min_amount,
        max_amount=max_amount,
        start_date=start_date,
        end_date=end_date,
        bank_ids=bank_ids,
        card_ids=card_ids,
        client_ids=client_ids,
    )
    try:
        result = service.export_transactions(
            filters=filters,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
            format=export_format,
            fields=fields,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    path = _write(result, output)
    click.echo(
        f"Exported {result.total_rows} transaction(s) to {path} ({human_size(result.file_size_bytes)})"
    )


@export_group.command("preview")
@transaction_filter_options
@click.option("--format", "export_format", type=FORMAT_CHOICES, default="csv", show_default=True)
@click.option("--fields", help="Comma-separated fields (default: all)")
@click.option("--search", help="Free-text search")
@click.pass_context
def preview_export(
    ctx,
    export_format,
    fields,
    search,
    transaction_type,
    min_amount,
    max_amount,
    start_date,
    end_date,
    bank_ids,
    card_ids,
    client_ids,
):
    """Estimate export size without generating it.

    The size is an approximation based on average field widths.
    """
    service = PreviewService(ctx.obj["db"])
    filters = collect_filters(
        transaction_type=transaction_type,
        min_amount=min_amount,
        max_amount=max_amount,
        start_date=start_date,
        end_date=end_date,
        bank_ids=bank_ids,
        card_ids=card_ids,
        client_ids=client_ids,
    )
    try:
        estimate = service.preview_export(filters=filters, search=search, format=export_format, fields=fields)
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=True)
    echo_json(estimate.to_dict())


@export_group.command("profile")
@click.argument("profile_id", type=int)
@click.option("--output", "-o", type=click.Path(), help="Output file or directory")
@click.pass_context
def export_profile(ctx, profile_id: int, output: str | None):
    """Export one profiler profile and its transactions as PDF."""
    service = ExportService(ctx.obj["db"])
    try:
        result = service.export_profile_pdf(profile_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    path = _write(result, output)
    click.echo(f"Exported profile {profile_id} to {path}")


def register_commands(cli):
    """Register export commands with the CLI."""
    cli.add_command(export_group, name="export")
