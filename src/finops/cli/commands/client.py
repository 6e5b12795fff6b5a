"""Client management commands."""

import click

from finops.cli.error_handling import handle_domain_error
from finops.cli.listing import echo_json, echo_matches, echo_page, list_options, to_record
from finops.domain.directory import ClientService
from finops.domain.errors import DomainError


@click.group()
def client_group():
    """Manage ledger clients."""
    pass


@client_group.command("create")
@click.argument("name", metavar="CLIENT_NAME")
@click.option("--email", help="Email address")
@click.option("--contact", help="Phone or other contact")
@click.option("--address", help="Postal address")
@click.pass_context
def create_client(ctx, name: str, email: str | None, contact: str | None, address: str | None):
    """Create a new client.

    Examples:
        finops client create "Acme Traders"
        finops client create "Ravi Kumar" --contact 9876543210
    """
    service = ClientService(ctx.obj["db"])
    try:
        client_id = service.create_client(name=name, email=email, contact=contact, address=address)
        click.echo(f"Created client '{name.strip()}' (ID: {client_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@client_group.command("show")
@click.argument("client", metavar="CLIENT")
@click.pass_context
def show_client(ctx, client: str):
    """Show a client by name or ID."""
    service = ClientService(ctx.obj["db"])
    try:
        found = service.get_client(service.resolve_client(client))
    except DomainError as e:
        handle_domain_error(ctx, e)
    echo_json(to_record(found))


@client_group.command("update")
@click.argument("client_id", type=int)
@click.option("--name", help="New name")
@click.option("--email", help="New email")
@click.option("--contact", help="New contact")
@click.option("--address", help="New address")
@click.pass_context
def update_client(ctx, client_id: int, name, email, contact, address):
    """Update a client.

    Updates only the fields that are provided.
    """
    service = ClientService(ctx.obj["db"])
    try:
        updated = service.update_client(
            client_id, name=name, email=email, contact=contact, address=address
        )
        click.echo(f"Updated client {updated.id} ('{updated.name}')")
    except DomainError as e:
        handle_domain_error(ctx, e)


@client_group.command("delete")
@click.argument("client_id", type=int)
@click.pass_context
def delete_client(ctx, client_id: int):
    """Delete a client.

    The client can only be deleted if it has no transactions.
    """
    service = ClientService(ctx.obj["db"])
    try:
        service.delete_client(client_id)
        click.echo(f"Deleted client {client_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@client_group.command("list")
@list_options
@click.pass_context
def list_clients(ctx, page, limit, search, sort_by, sort_order, as_json: bool):
    """List clients.

    Sort keys: name, email, contact, create_date, transaction_count.
    """
    service = ClientService(ctx.obj["db"])
    try:
        result = service.list_clients(
            search=search, sort_by=sort_by, sort_order=sort_order, page=page, limit=limit
        )
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
    echo_page(
        result,
        as_json,
        [("ID", 5), ("Name", 25), ("Email", 25), ("Contact", 15), ("Txns", 5)],
        lambda c: [c.id, c.name, c.email, c.contact, c.transaction_count],
        "No clients found.",
    )


@client_group.command("autocomplete")
@click.argument("term", required=False)
@click.option("--limit", help="Maximum matches (1-10, default 5)")
@click.option("--json", "as_json", is_flag=True, help="Print matches as JSON")
@click.pass_context
def autocomplete_clients(ctx, term, limit, as_json: bool):
    """Look up clients whose name, email or contact contains TERM."""
    try:
        result = ClientService(ctx.obj["db"]).autocomplete(search=term, limit=limit)
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
    echo_matches(result, as_json, lambda c: c.name)


def register_commands(cli):
    """Register client commands with the CLI."""
    cli.add_command(client_group, name="client")
