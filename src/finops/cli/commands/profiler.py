"""Profiler commands: clients, banks, profiles and the balance ledger."""

import click

from finops.cli.error_handling import handle_domain_error
from finops.cli.listing import echo_json, echo_matches, echo_page, list_options, to_record
from finops.domain.errors import DomainError
from finops.domain.profiler import ProfileService, ProfilerTransactionService
from finops.domain.profiler_directory import ProfilerBankService, ProfilerClientService
from finops.utils.formatting import format_amount


@click.group()
def profiler_group():
    """Track profiler profiles and their running balances."""
    pass


# Clients ---------------------------------------------------------------


@profiler_group.group("client")
def client_group():
    """Manage profiler clients."""
    pass


@client_group.command("create")
@click.argument("name")
@click.option("--email")
@click.option("--mobile", "mobile_number")
@click.option("--aadhaar", "aadhaar_card_number")
@click.option("--notes")
@click.pass_context
def create_client(ctx, name, email, mobile_number, aadhaar_card_number, notes):
    """Create a profiler client."""
    service = ProfilerClientService(ctx.obj["db"])
    try:
        created = service.create_client(
            name=name,
            email=email,
            mobile_number=mobile_number,
            aadhaar_card_number=aadhaar_card_number,
            notes=notes,
        )
        click.echo(f"Created profiler client '{created.name}' (ID: {created.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@client_group.command("update")
@click.argument("client_id", type=int)
@click.option("--name")
@click.option("--email")
@click.option("--mobile", "mobile_number")
@click.option("--aadhaar", "aadhaar_card_number")
@click.option("--notes")
@click.pass_context
def update_client(ctx, client_id, name, email, mobile_number, aadhaar_card_number, notes):
    """Update only the provided fields of a profiler client."""
    service = ProfilerClientService(ctx.obj["db"])
    try:
        service.update_client(
            client_id,
            name=name,
            email=email,
            mobile_number=mobile_number,
            aadhaar_card_number=aadhaar_card_number,
            notes=notes,
        )
        click.echo(f"Updated profiler client {client_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@client_group.command("delete")
@click.argument("client_id", type=int)
@click.pass_context
def delete_client(ctx, client_id):
    """Delete a profiler client without profiles."""
    service = ProfilerClientService(ctx.obj["db"])
    try:
        service.delete_client(client_id)
        click.echo(f"Deleted profiler client {client_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@client_group.command("list")
@click.option("--has-profiles", help="true/false")
@list_options
@click.pass_context
def list_clients(ctx, has_profiles, page, limit, search, sort_by, sort_order, as_json):
    """List profiler clients."""
    service = ProfilerClientService(ctx.obj["db"])
    try:
        result = service.list_clients(
            filters={"has_profiles": has_profiles},
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
    echo_page(
        result,
        as_json,
        [("ID", 5), ("Name", 25), ("Mobile", 14), ("Profiles", 8)],
        lambda c: [c.id, c.name, c.mobile_number, c.profile_count],
        "No profiler clients found.",
    )


@client_group.command("autocomplete")
@click.argument("term", required=False)
@click.option("--limit", help="Maximum matches (1-10, default 5)")
@click.option("--json", "as_json", is_flag=True, help="Print matches as JSON")
@click.pass_context
def autocomplete_clients(ctx, term, limit, as_json: bool):
    """Look up profiler clients by name, email, mobile, Aadhaar or notes."""
    try:
        result = ProfilerClientService(ctx.obj["db"]).autocomplete(search=term, limit=limit)
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
    echo_matches(result, as_json, lambda c: f"{c.name} ({c.mobile_number or '-'})")


# Banks -----------------------------------------------------------------


@profiler_group.group("bank")
def bank_group():
    """Manage profiler banks."""
    pass


@bank_group.command("create")
@click.argument("bank_name")
@click.pass_context
def create_bank(ctx, bank_name):
    """Create a profiler bank."""
    service = ProfilerBankService(ctx.obj["db"])
    try:
        created = service.create_bank(bank_name)
        click.echo(f"Created profiler bank '{created.bank_name}' (ID: {created.id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@bank_group.command("rename")
@click.argument("bank_id", type=int)
@click.argument("bank_name")
@click.pass_context
def rename_bank(ctx, bank_id, bank_name):
    """Rename a profiler bank."""
    service = ProfilerBankService(ctx.obj["db"])
    try:
        service.update_bank(bank_id, bank_name=bank_name)
        click.echo(f"Renamed profiler bank {bank_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@bank_group.command("delete")
@click.argument("bank_id", type=int)
@click.pass_context
def delete_bank(ctx, bank_id):
    """Delete a profiler bank without profiles."""
    service = ProfilerBankService(ctx.obj["db"])
    try:
        service.delete_bank(bank_id)
        click.echo(f"Deleted profiler bank {bank_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@bank_group.command("list")
@click.option("--has-profiles", help="true/false")
@list_options
@click.pass_context
def list_banks(ctx, has_profiles, page, limit, search, sort_by, sort_order, as_json):
    """List profiler banks."""
    service = ProfilerBankService(ctx.obj["db"])
    try:
        result = service.list_banks(
            filters={"has_profiles": has_profiles},
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
    echo_page(
        result,
        as_json,
        [("ID", 5), ("Bank", 30), ("Profiles", 8)],
        lambda b: [b.id, b.bank_name, b.profile_count],
        "No profiler banks found.",
    )


@bank_group.command("autocomplete")
@click.argument("term", required=False)
@click.option("--limit", help="Maximum matches (1-10, default 5)")
@click.option("--json", "as_json", is_flag=True, help="Print matches as JSON")
@click.pass_context
def autocomplete_banks(ctx, term, limit, as_json: bool):
    """Look up profiler banks whose name contains TERM."""
    try:
        result = ProfilerBankService(ctx.obj["db"]).autocomplete(search=term, limit=limit)
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
    echo_matches(result, as_json, lambda b: b.bank_name)


# Profiles --------------------------------------------------------------


@profiler_group.group("profile")
def profile_group():
    """Manage profiler profiles."""
    pass


@profile_group.command("create")
@click.option("--client", "client_id", type=int, required=True, help="Profiler client ID")
@click.option("--bank", "bank_id", type=int, required=True, help="Profiler bank ID")
@click.option("--deposit", "pre_planned_deposit_amount", required=True, help="Pre-planned deposit (opening balance)")
@click.option("--card-number", "credit_card_number")
@click.option("--carry-forward", is_flag=True, help="Roll the remaining balance into the next period")
@click.option("--notes")
@click.pass_context
def create_profile(ctx, client_id, bank_id, pre_planned_deposit_amount, credit_card_number, carry_forward, notes):
    """Open an active profile.

    Examples:
        finops profiler profile create --client 1 --bank 2 --deposit 50000
    """
    service = ProfileService(ctx.obj["db"])
    try:
        profile = service.create_profile(
            client_id=client_id,
            bank_id=bank_id,
            pre_planned_deposit_amount=pre_planned_deposit_amount,
            credit_card_number=credit_card_number,
            carry_forward_enabled=carry_forward,
            notes=notes,
        )
        click.echo(
            f"Opened profile {profile.id} for '{profile.client_name}' "
            f"with balance {format_amount(profile.current_balance)}"
        )
    except DomainError as e:
        handle_domain_error(ctx, e)


@profile_group.command("show")
@click.argument("profile_id", type=int)
@click.pass_context
def show_profile(ctx, profile_id):
    """Show a profile with its balances."""
    service = ProfileService(ctx.obj["db"])
    try:
        profile = service.require_profile(profile_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    echo_json(to_record(profile))


@profile_group.command("update")
@click.argument("profile_id", type=int)
@click.option("--card-number", "credit_card_number")
@click.option("--deposit", "pre_planned_deposit_amount")
@click.option("--carry-forward", "carry_forward_enabled", help="true/false")
@click.option("--notes")
@click.pass_context
def update_profile(ctx, profile_id, credit_card_number, pre_planned_deposit_amount, carry_forward_enabled, notes):
    """Update only the provided fields of a profile."""
    service = ProfileService(ctx.obj["db"])
    try:
        service.update_profile(
            profile_id,
            credit_card_number=credit_card_number,
            pre_planned_deposit_amount=pre_planned_deposit_amount,
            carry_forward_enabled=carry_forward_enabled,
            notes=notes,
        )
        click.echo(f"Updated profile {profile_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@profile_group.command("done")
@click.argument("profile_id", type=int)
@click.pass_context
def mark_done(ctx, profile_id):
    """Mark an active profile as done. No transactions can be added afterwards."""
    service = ProfileService(ctx.obj["db"])
    try:
        service.mark_done(profile_id)
        click.echo(f"Profile {profile_id} marked done")
    except DomainError as e:
        handle_domain_error(ctx, e)


@profile_group.command("delete")
@click.argument("profile_id", type=int)
@click.pass_context
def delete_profile(ctx, profile_id):
    """Delete a profile that has no transactions."""
    service = ProfileService(ctx.obj["db"])
    try:
        service.delete_profile(profile_id)
        click.echo(f"Deleted profile {profile_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@profile_group.command("list")
@click.option("--client-id", help="Profiler client ID(s), comma-separated")
@click.option("--bank-id", help="Profiler bank ID(s), comma-separated")
@click.option("--status", help="active, done, or both comma-separated")
@click.option("--carry-forward", "carry_forward_enabled", help="true/false")
@click.option("--positive-balance", "has_positive_balance", help="true/false")
@click.option("--negative-balance", "has_negative_balance", help="true/false")
@click.option("--balance-above", "balance_greater_than")
@click.option("--balance-below", "balance_less_than")
@click.option("--created-from", "created_at_start")
@click.option("--created-to", "created_at_end")
@click.option("--min-deposit", "min_deposit_amount")
@click.option("--max-deposit", "max_deposit_amount")
@list_options
@click.pass_context
def list_profiles(ctx, page, limit, search, sort_by, sort_order, as_json, **filters):
    """List profiles.

    Sort keys: client_name, bank_name, credit_card_number,
    pre_planned_deposit_amount, current_balance, total_withdrawn_amount,
    remaining_balance, created_at, transaction_count.
    """
    service = ProfileService(ctx.obj["db"])
    try:
        result = service.list_profiles(
            filters=filters, search=search, sort_by=sort_by, sort_order=sort_order, page=page, limit=limit
        )
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
    echo_page(
        result,
        as_json,
        [("ID", 5), ("Client", 20), ("Bank", 15), ("Status", 6), ("Balance", 12), ("Remaining", 12)],
        lambda p: [
            p.id,
            p.client_name,
            p.bank_name,
            p.status.value,
            format_amount(p.current_balance),
            format_amount(p.remaining_balance),
        ],
        "No profiles found.",
    )


@profile_group.command("autocomplete")
@click.argument("term", required=False)
@click.option("--limit", help="Maximum matches (1-10, default 5)")
@click.option("--client-id", help="Only this profiler client's profiles")
@click.option("--status", help="active or done")
@click.option("--json", "as_json", is_flag=True, help="Print matches as JSON")
@click.pass_context
def autocomplete_profiles(ctx, term, limit, client_id, status, as_json: bool):
    """Look up profiles by client name, bank name or card number."""
    try:
        result = ProfileService(ctx.obj["db"]).autocomplete(
            search=term, limit=limit, client_id=client_id, status=status
        )
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
    echo_matches(
        result,
        as_json,
        lambda p: f"{p.client_name} / {p.bank_name} [{p.status.value}] remaining {format_amount(p.remaining_balance)}",
    )


# Ledger transactions ---------------------------------------------------


@profiler_group.group("transaction")
def transaction_group():
    """Record deposits and withdrawals on a profile."""
    pass


@transaction_group.command("add")
@click.argument("profile_id", type=int)
@click.option("--type", "transaction_type", required=True, type=click.Choice(["deposit", "withdraw"]))
@click.option("--amount", required=True)
@click.option("--charges", "withdraw_charges_percentage", help="Withdraw charge percentage (0-100)")
@click.option("--notes")
@click.pass_context
def add_transaction(ctx, profile_id, transaction_type, amount, withdraw_charges_percentage, notes):
    """Append a transaction to an active profile.

    Examples:
        finops profiler transaction add 1 --type deposit --amount 10000
        finops profiler transaction add 1 --type withdraw --amount 5000 --charges 2
    """
    service = ProfilerTransactionService(ctx.obj["db"])
    try:
        created = service.create_transaction(
            profile_id=profile_id,
            transaction_type=transaction_type,
            amount=amount,
            withdraw_charges_percentage=withdraw_charges_percentage,
            notes=notes,
        )
        message = f"Recorded {created.transaction_type.value} of {format_amount(created.amount)} (ID: {created.id})"
        if created.withdraw_charges_amount:
            message += f", charge {format_amount(created.withdraw_charges_amount)}"
        click.echo(message)
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.pass_context
def delete_transaction(ctx, transaction_id):
    """Delete a transaction and reverse its balance effect."""
    service = ProfilerTransactionService(ctx.obj["db"])
    try:
        service.delete_transaction(transaction_id)
        click.echo(f"Deleted profiler transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("list")
@click.option("--profile-id", help="Profile ID(s), comma-separated")
@click.option("--client-id", help="Profiler client ID(s), comma-separated")
@click.option("--bank-id", help="Profiler bank ID(s), comma-separated")
@click.option("--type", "transaction_type", help="deposit, withdraw, or both comma-separated")
@click.option("--amount-above", "amount_greater_than")
@click.option("--amount-below", "amount_less_than")
@click.option("--date-from")
@click.option("--date-to")
@list_options
@click.pass_context
def list_transactions(ctx, page, limit, search, sort_by, sort_order, as_json, **filters):
    """List ledger transactions with totals over every matching row."""
    service = ProfilerTransactionService(ctx.obj["db"])
    try:
        result = service.list_transactions(
            filters=filters, search=search, sort_by=sort_by, sort_order=sort_order, page=page, limit=limit
        )
    except DomainError as e:
        handle_domain_error(ctx, e, as_json=as_json)
    echo_page(
        result,
        as_json,
        [("ID", 5), ("Profile", 7), ("Type", 8), ("Amount", 12), ("Charge", 10), ("Client", 20)],
        lambda t: [
            t.id,
            t.profile_id,
            t.transaction_type.value,
            format_amount(t.amount),
            format_amount(t.withdraw_charges_amount),
            t.client_name,
        ],
        "No profiler transactions found.",
    )
    if not as_json:
        summary = result.extra["summary"]
        click.echo(
            f"Deposits: {format_amount(summary['total_deposits'])} | "
            f"Withdrawals: {format_amount(summary['total_withdrawals'])} | "
            f"Charges: {format_amount(summary['total_charges'])} | "
            f"Net: {format_amount(summary['net_amount'])}"
        )


def register_commands(cli):
    """Register profiler commands with the CLI."""
    cli.add_command(profiler_group, name="profiler")
