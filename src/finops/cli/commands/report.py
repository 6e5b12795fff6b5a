"""Report commands."""

from pathlib import Path

import click

from finops.cli.error_handling import handle_domain_error
from finops.domain.directory import ClientService
from finops.domain.errors import DomainError
from finops.domain.report import ReportService


@click.command("report")
@click.option("--start-date", required=True, help="First booking date (YYYY-MM-DD or relative)")
@click.option("--end-date", required=True, help="Last booking date (YYYY-MM-DD or relative)")
@click.option("--client", help="Client name or ID (default: all clients)")
@click.option("--output", "-o", type=click.Path(), help="Output file or directory")
@click.pass_context
def report(ctx, start_date: str, end_date: str, client: str | None, output: str | None):
    """Generate a grouped PDF transaction report.

    Transactions are grouped per client with deposit, withdrawal, charge,
    payment difference and net balance totals.

    Examples:
        finops report --start-date 2024-01-01 --end-date 2024-01-31
        finops report --start-date "last month" --end-date today --client "Acme Traders"
    """
    db = ctx.obj["db"]
    try:
        client_id = ClientService(db).resolve_client(client) if client else None
        document = ReportService(db).generate_report(start_date, end_date, client_id=client_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    target = Path(output) if output else Path.cwd() / document.filename
    if target.is_dir():
        target = target / document.filename
    target.write_bytes(document.content)
    click.echo(
        f"Report written to {target} ({document.total_rows} transaction(s), {document.group_count} client(s))"
    )


def register_commands(cli):
    """Register report command with the CLI."""
    cli.add_command(report)
