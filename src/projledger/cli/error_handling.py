"""CLI error handling and input parsing helpers."""

from datetime import date
from decimal import Decimal

import click

from projledger.domain.errors import DomainError
from projledger.utils.amount_parser import parse_amount
from projledger.utils.date_parser import get_date_range, parse_date


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def parse_date_or_exit(ctx: click.Context, value: str, label: str = "date") -> date:
    """Parse a date option, or exit with a CLI error."""
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def parse_amount_or_exit(ctx: click.Context, value: str, label: str = "amount") -> Decimal:
    """Parse an amount option, or exit with a CLI error."""
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def resolve_as_of(ctx: click.Context, as_of: str | None, period: str | None) -> date | None:
    """Resolve a reporting date from --as-of or the end of a --period."""
    if as_of and period:
        click.echo("Error: --as-of cannot be combined with --period.", err=True)
        ctx.exit(1)
    if period:
        try:
            return get_date_range(period)[1]
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
    if as_of:
        return parse_date_or_exit(ctx, as_of, "as-of date")
    return None
