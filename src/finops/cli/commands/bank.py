"""Bank management commands."""

import click

from finops.cli.error_handling import handle_domain_error
from finops.cli.listing import echo_matches, echo_page, list_options
from finops.domain.directory import BankService
from finops.domain.errors import DomainError


@click.group()
def bank_group():
    """Manage ledger banks."""
    pass


@bank_group.command("create")
@click.argument("name", metavar="BANK_NAME")
@click.pass_context
def create_bank(ctx, name: str):
    """Create a new bank."""
    service = BankService(ctx.obj["db"])
    try:
        bank_id = service.create_bank(name)
        click.echo(f"Created bank '{name.strip()}' (ID: {bank_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@bank_group.command("rename")
@click.argument("bank_id", type=int)
@click.argument("new_name", metavar="NEW_NAME")
@click.pass_context
def rename_bank(ctx, bank_id: int, new_name: str):
    """Rename a bank."""
    service = BankService(ctx.obj["db"])
    try:
        bank = service.update_bank(bank_id, name=new_name)
        click.echo(f"Renamed bank {bank.id} to '{bank.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@bank_group.command("delete")
@click.argument("bank_id", type=int)
@click.pass_context
def delete_bank(ctx, bank_id: int):
    """Delete a bank that no transaction references."""
    service = BankService(ctx.obj["db"])
    try:
        service.delete_bank(bank_id)
        click.echo(f"Deleted bank {bank_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@bank_group.command("list")
@list_options
@click.pass_context
def list_banks(ctx, page, limit, search, sort_by, sort_order, as_json: bool):
    """List banks (sort keys: name, create_date, transaction_count)."""
    service = BankService(ctx.obj["db"])
    try:
        result = service.list_banks(
            search=search, sort_by=sort_by, sort_order=sort_order, page=page, limit=limit
        )
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
    echo_page(
        result,
        as_json,
        [("ID", 5), ("Name", 30), ("Txns", 5)],
        lambda b: [b.id, b.name, b.transaction_count],
        "No banks found.",
    )


@bank_group.command("autocomplete")
@click.argument("term", required=False)
@click.option("--limit", help="Maximum matches (1-10, default 5)")
@click.option("--json", "as_json", is_flag=True, help="Print matches as JSON")
@click.pass_context
def autocomplete_banks(ctx, term, limit, as_json: bool):
    """Look up banks whose name contains TERM."""
    try:
        result = BankService(ctx.obj["db"]).autocomplete(search=term, limit=limit)
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
    echo_matches(result, as_json, lambda b: b.name)


def register_commands(cli):
    """Register bank commands with the CLI."""
    cli.add_command(bank_group, name="bank")
