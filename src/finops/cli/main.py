"""Main CLI entry point."""

import click

from finops.config import AppConfig
from finops.cli.error_handling import handle_domain_error
from finops.domain.errors import DomainError
from finops.database.factories import create_database
from finops.logging import get_logger, setup_logging

# Import and register all commands at module level
from finops.cli.commands import (
    bank,
    card,
    client,
    export,
    profiler,
    report,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINOPS_DB_PATH environment variable)",
    envvar="FINOPS_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Log level (overrides FINOPS_LOG_LEVEL)",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None):
    """Finops - Financial back-office ledger.

    Manage clients, banks, cards and their transactions; query them with
    filters, search and sorting; export and report on them; and track
    profiler profile balances.
    """
    ctx.ensure_object(dict)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            config = AppConfig.from_env(database_path=db_path)
        except DomainError as e:
            handle_domain_error(ctx, e)
        if log_level:
            config.log_level = log_level.upper()
        setup_logging(config.log_level, config.log_format)

        db = create_database(config, logger=get_logger("finops.database"))
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.obj["config"] = config
        ctx.call_on_close(db.disconnect)


# Register all commands
client.register_commands(cli)
bank.register_commands(cli)
card.register_commands(cli)
transaction.register_commands(cli)
export.register_commands(cli)
report.register_commands(cli)
profiler.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
