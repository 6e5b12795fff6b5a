"""Transaction management commands."""

import click

from finops.cli.error_handling import handle_domain_error
from finops.cli.listing import echo_json, echo_page, list_options, to_record
from finops.domain.directory import ClientService
from finops.domain.errors import DomainError, NotFoundError, ValidationError, entity_not_found
from finops.domain.transaction import TransactionService
from finops.utils.date_parser import get_date_range
from finops.utils.formatting import format_amount


def transaction_filter_options(func):
    """Add the transaction filter options shared by list and export commands."""
    options = [
        click.option("--client-ids", help="Comma-separated client IDs"),
        click.option("--card-ids", help="Comma-separated card IDs"),
        click.option("--bank-ids", help="Comma-separated bank IDs"),
        click.option("--end-date", help="Last booking date (YYYY-MM-DD or relative like 'today')"),
        click.option("--start-date", help="First booking date (YYYY-MM-DD or relative like 'last month')"),
        click.option("--max-amount", help="Maximum amount"),
        click.option("--min-amount", help="Minimum amount"),
        click.option("--type", "transaction_type", help="deposit or withdraw"),
    ]
    for option in options:
        func = option(func)
    return func


def collect_filters(**values) -> dict:
    """Map filter option values onto transaction filter keys."""
    return {key: value for key, value in values.items() if value is not None}


def resolve_period(period, start_date, end_date):
    """Turn a named period into start and end dates.

    Raises:
        ValidationError: If the period is unknown or combined with explicit dates
    """
    if not period:
        return start_date, end_date
    if start_date or end_date:
        raise ValidationError(
            "--period cannot be combined with --start-date or --end-date", field="period"
        )
    try:
        return get_date_range(period)
    except ValueError as e:
        raise ValidationError(str(e), field="period")


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.option("--client", required=True, help="Client name or ID")
@click.option("--type", "transaction_type", required=True, help="deposit or withdraw")
@click.option("--amount", required=True, help="Amount (e.g., 1000 or 'Rs. 1,000/-')")
@click.option("--charges", default="0", show_default=True, help="Withdraw charge percentage (0-100)")
@click.option("--bank", "bank_id", type=int, help="Bank ID")
@click.option("--card", "card_id", type=int, help="Card ID")
@click.option("--remark", help="Remark")
@click.option("--date", "create_date", help="Booking date (defaults to today)")
@click.pass_context
def add_transaction(ctx, client, transaction_type, amount, charges, bank_id, card_id, remark, create_date):
    """Add a transaction.

    Examples:
        finops transaction add --client "Acme Traders" --type deposit --amount 1000
        finops transaction add --client 1 --type withdraw --amount 200 --charges 10 --bank 2
    """
    db = ctx.obj["db"]
    try:
        client_id = ClientService(db).resolve_client(client)
        created = TransactionService(db).create_transaction(
            client_id=client_id,
            transaction_type=transaction_type,
            transaction_amount=amount,
            withdraw_charges=charges,
            bank_id=bank_id,
            card_id=card_id,
            remark=remark,
            create_date=create_date,
        )
        click.echo(
            f"Created {created.transaction_type.label.lower()} of {format_amount(created.transaction_amount)} "
            f"for '{created.client_name}' (ID: {created.id})"
        )
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("show")
@click.argument("transaction_id", type=int)
@click.pass_context
def show_transaction(ctx, transaction_id: int):
    """Show one transaction."""
    found = TransactionService(ctx.obj["db"]).get_transaction(transaction_id)
    if found is None:
        handle_domain_error(ctx, NotFoundError(entity_not_found("Transaction", transaction_id)))
    echo_json(to_record(found))


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--client", "client_id", type=int, help="Client ID")
@click.option("--type", "transaction_type", help="deposit or withdraw")
@click.option("--amount", help="Amount")
@click.option("--charges", help="Withdraw charge percentage (0-100)")
@click.option("--bank", "bank_id", type=int, help="Bank ID")
@click.option("--card", "card_id", type=int, help="Card ID")
@click.option("--remark", help="Remark")
@click.option("--date", "create_date", help="Booking date")
@click.pass_context
def update_transaction(
    ctx, transaction_id, client_id, transaction_type, amount, charges, bank_id, card_id, remark, create_date
):
    """Update a transaction.

    Updates only the fields that are provided.

    Examples:
        finops transaction update 4 --amount 250
        finops transaction update 4 --charges 2.5 --remark "corrected"
    """
    service = TransactionService(ctx.obj["db"])
    try:
        service.update_transaction(
            transaction_id,
            client_id=client_id,
            transaction_type=transaction_type,
            transaction_amount=amount,
            withdraw_charges=charges,
            bank_id=bank_id,
            card_id=card_id,
            remark=remark,
            create_date=create_date,
        )
        click.echo(f"Updated transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.pass_context
def delete_transaction(ctx, transaction_id: int):
    """Delete a transaction permanently."""
    service = TransactionService(ctx.obj["db"])
    try:
        service.delete_transaction(transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("list")
@transaction_filter_options
@click.option("--period", help="this-week, this-month, this-year, last-week, last-month or last-year")
@list_options
@click.pass_context
def list_transactions(
    ctx,
    page,
    limit,
    search,
    sort_by,
    sort_order,
    as_json,
    transaction_type,
    min_amount,
    max_amount,
    start_date,
    end_date,
    bank_ids,
    card_ids,
    client_ids,
    period,
):
    """List transactions.

    Sort keys: create_date, transaction_amount, client_name, bank_name,
    card_name. Default is newest first.

    Examples:
        finops transaction list --start-date "last month" --type withdraw
        finops transaction list --search acme --sort-by transaction_amount
        finops transaction list --period last-month
    """
    service = TransactionService(ctx.obj["db"])
    try:
        start_date, end_date = resolve_period(period, start_date, end_date)
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
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
        result = service.list_transactions(
            filters=filters, search=search, sort_by=sort_by, sort_order=sort_order, page=page, limit=limit
        )
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
    echo_page(
        result,
        as_json,
        [("ID", 5), ("Date", 10), ("Type", 8), ("Client", 20), ("Amount", 12), ("Chg %", 6), ("Bank", 15)],
        lambda t: [
            t.id,
            t.create_date.isoformat(),
            t.transaction_type.label,
            t.client_name,
            format_amount(t.transaction_amount),
            t.withdraw_charges,
            t.bank_name or "-",
        ],
        "No transactions found.",
    )


def register_commands(cli):
    """Register transaction commands with the CLI."""
    cli.add_command(transaction_group, name="transaction")
