"""Card management commands."""

import click

from finops.cli.error_handling import handle_domain_error
from finops.cli.listing import echo_matches, echo_page, list_options
from finops.domain.directory import CardService
from finops.domain.errors import DomainError


@click.group()
def card_group():
    """Manage ledger cards."""
    pass


@card_group.command("create")
@click.argument("name", metavar="CARD_NAME")
@click.pass_context
def create_card(ctx, name: str):
    """Create a new card."""
    service = CardService(ctx.obj["db"])
    try:
        card_id = service.create_card(name)
        click.echo(f"Created card '{name.strip()}' (ID: {card_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@card_group.command("rename")
@click.argument("card_id", type=int)
@click.argument("new_name", metavar="NEW_NAME")
@click.pass_context
def rename_card(ctx, card_id: int, new_name: str):
    """Rename a card."""
    service = CardService(ctx.obj["db"])
    try:
        card = service.update_card(card_id, name=new_name)
        click.echo(f"Renamed card {card.id} to '{card.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


@card_group.command("delete")
@click.argument("card_id", type=int)
@click.option(
    "--cascade",
    is_flag=True,
    help="Clear the card from referencing transactions, then delete it",
)
@click.pass_context
def delete_card(ctx, card_id: int, cascade: bool):
    """Delete a card.

    Without --cascade the card must not be referenced by any transaction.

    Examples:
        finops card delete 3
        finops card delete 3 --cascade
    """
    service = CardService(ctx.obj["db"])
    try:
        detached = service.delete_card(card_id, cascade=cascade)
        click.echo(f"Deleted card {card_id}")
        if detached:
            click.echo(f"Detached {detached} transaction(s)")
    except DomainError as e:
        handle_domain_error(ctx, e)


@card_group.command("list")
@list_options
@click.pass_context
def list_cards(ctx, page, limit, search, sort_by, sort_order, as_json: bool):
    """List cards (sort keys: name, create_date, transaction_count)."""
    service = CardService(ctx.obj["db"])
    try:
        result = service.list_cards(
            search=search, sort_by=sort_by, sort_order=sort_order, page=page, limit=limit
        )
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
    echo_page(
        result,
        as_json,
        [("ID", 5), ("Name", 30), ("Txns", 5)],
        lambda c: [c.id, c.name, c.transaction_count],
        "No cards found.",
    )


@card_group.command("autocomplete")
@click.argument("term", required=False)
@click.option("--limit", help="Maximum matches (1-10, default 5)")
@click.option("--json", "as_json", is_flag=True, help="Print matches as JSON")
@click.pass_context
def autocomplete_cards(ctx, term, limit, as_json: bool):
    """Look up cards whose name contains TERM."""
    try:
        result = CardService(ctx.obj["db"]).autocomplete(search=term, limit=limit)
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
    echo_matches(result, as_json, lambda c: c.name)


def register_commands(cli):
    """Register card commands with the CLI."""
    cli.add_command(card_group, name="card")
