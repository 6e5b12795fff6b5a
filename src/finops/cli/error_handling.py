"""CLI error handling helpers."""

import json

import click

from finops.domain.errors import DomainError, serialize_error


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError, as_json: bool = False) -> None:
    """Render a domain error and exit with failure.

    With ``as_json`` the serialized error body is printed instead; the
    stack trace is only attached outside production.
    """
    if as_json and isinstance(error, DomainError):
        config = (ctx.obj or {}).get("config")
        include_trace = config.include_error_trace if config is not None else False
        click.echo(json.dumps(serialize_error(error, include_trace=include_trace), indent=2), err=True)
    else:
        click.echo(f"Error: {error}", err=True)
    ctx.exit(1)
