"""Ledger posting and reporting commands."""

import click
from projledger.cli.error_handling import (
    handle_domain_error,
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_as_of,
)
from projledger.domain.entities import Direction, PostingEvent, side_for
from projledger.domain.errors import InvalidCombination
from projledger.domain.posting import PostingService
from projledger.utils.amount_parser import format_money

PERIODS = ["this-month", "last-month", "this-year", "last-year"]


def _echo_entries(posting: PostingService, entries) -> None:
    accounts = {acc.code: acc for acc in posting.db.list_accounts()}
    for entry in entries:
        account = accounts.get(entry.account_code)
        side = side_for(account.type, entry.direction).value if account else "?"
        name = account.name if account else ""
        click.echo(
            f"  {entry.date.isoformat()} | {entry.account_code:6s} {name:40s} | "
            f"{entry.direction.value:8s} ({side:6s}) | {format_money(entry.amount):>20s}"
        )


@click.command("post")
@click.option("--account", "account_code", required=True, help="Account code")
@click.option("--date", "date_str", required=True, help="Posting date (YYYY-MM-DD or 'today')")
@click.option("--amount", required=True, help="Amount (> 0)")
@click.option(
    "--direction",
    required=True,
    type=click.Choice([d.value for d in Direction], case_sensitive=False),
    help="Effect on the account's natural balance",
)
@click.option("--description", required=True, help="Description")
@click.option("--counter", "counter_code", help="Counter-account code (inferred if omitted)")
@click.option("--single", is_flag=True, help="Post a single entry without a counter entry")
@click.option("--project", "project_id", type=int, help="Project ID")
@click.option("--notes", help="Notes")
@click.option("--confirm-unusual", is_flag=True, help="Post even if the account pairing is unusual")
@click.pass_context
def post(
    ctx,
    account_code: str,
    date_str: str,
    amount: str,
    direction: str,
    description: str,
    counter_code: str | None,
    single: bool,
    project_id: int | None,
    notes: str | None,
    confirm_unusual: bool,
):
    """Post a financial event to the ledger.

    Examples:
        projledger post --account 6101 --date 2025-03-01 --amount 7500000 --direction increase --description "Office rent"
        projledger post --account 1501 --date today --amount 185000000 --direction increase --description "Boring machine" --counter 1102
    """
    if single and counter_code:
        click.echo("Error: --single cannot be combined with --counter.", err=True)
        ctx.exit(1)

    posting = PostingService(ctx.obj["db"], ctx.obj["settings"])
    event = PostingEvent(
        date=parse_date_or_exit(ctx, date_str),
        account_code=account_code,
        amount=parse_amount_or_exit(ctx, amount),
        direction=Direction(direction.lower()),
        description=description,
        create_counter_entry=not single,
        counter_account_code=counter_code,
        project_id=project_id,
        notes=notes,
    )

    try:
        result = posting.post(event, confirm_unusual=confirm_unusual)
    except InvalidCombination as e:
        click.echo(f"Error: {e}", err=True)
        click.echo("Use --confirm-unusual to post anyway.", err=True)
        ctx.exit(1)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Posted {len(result.entries)} entries (correlation ID: {result.correlation_id})")
    _echo_entries(posting, result.entries)


@click.command("reverse")
@click.argument("correlation_id")
@click.option("--date", "date_str", default="today", show_default=True, help="Reversal date")
@click.option("--description", help="Description of the reversal entries")
@click.pass_context
def reverse(ctx, correlation_id: str, date_str: str, description: str | None):
    """Reverse a posting by its correlation ID."""
    posting = PostingService(ctx.obj["db"], ctx.obj["settings"])
    reversal_date = parse_date_or_exit(ctx, date_str)

    try:
        result = posting.reverse(correlation_id, reversal_date, description=description)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Reversed posting {correlation_id} (correlation ID: {result.correlation_id})")
    _echo_entries(posting, result.entries)


@click.command("entries")
@click.option("--account", "account_code", help="Account code")
@click.option("--project", "project_id", type=int, help="Project ID")
@click.option("--start-date", help="Start date (YYYY-MM-DD)")
@click.option("--end-date", help="End date (YYYY-MM-DD)")
@click.option("--correlation-id", help="Correlation ID")
@click.pass_context
def list_entries(
    ctx,
    account_code: str | None,
    project_id: int | None,
    start_date: str | None,
    end_date: str | None,
    correlation_id: str | None,
):
    """List ledger entries, oldest first."""
    posting = PostingService(ctx.obj["db"], ctx.obj["settings"])
    entries = posting.list_entries(
        account_code=account_code,
        project_id=project_id,
        start_date=parse_date_or_exit(ctx, start_date, "start date") if start_date else None,
        end_date=parse_date_or_exit(ctx, end_date, "end date") if end_date else None,
        correlation_id=correlation_id,
    )
    if not entries:
        click.echo("No ledger entries found.")
        return

    click.echo(f"\nLedger entries ({len(entries)}):")
    click.echo("-" * 100)
    _echo_entries(posting, entries)


@click.command("trial-balance")
@click.option("--as-of", help="Include entries up to this date")
@click.option("--period", type=click.Choice(PERIODS), help="Use the last day of this period")
@click.pass_context
def trial_balance(ctx, as_of: str | None, period: str | None):
    """Show debit and credit balances of every account with entries."""
    posting = PostingService(ctx.obj["db"], ctx.obj["settings"])
    report = posting.trial_balance(resolve_as_of(ctx, as_of, period))

    if not report.rows:
        click.echo("No ledger entries found.")
        return

    title = "Trial balance"
    if report.as_of:
        title += f" as of {report.as_of.isoformat()}"
    click.echo(f"\n{title}:")
    click.echo("-" * 100)
    for row in report.rows:
        debit = format_money(row.debit) if row.debit else ""
        credit = format_money(row.credit) if row.credit else ""
        click.echo(f"{row.account_code:6s} | {row.account_name:45s} | {debit:>20s} | {credit:>20s}")
    click.echo("-" * 100)
    click.echo(
        f"{'Total':54s} | {format_money(report.total_debit):>20s} | "
        f"{format_money(report.total_credit):>20s}"
    )
    if not report.is_balanced:
        click.echo("Warning: total debits do not equal total credits", err=True)


def register_commands(cli):
    """Register posting commands with main CLI."""
    cli.add_command(post)
    cli.add_command(reverse)
    cli.add_command(list_entries)
    cli.add_command(trial_balance)
