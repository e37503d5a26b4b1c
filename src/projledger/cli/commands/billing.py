"""Billing lifecycle commands."""

import click
from projledger.cli.error_handling import handle_domain_error, parse_date_or_exit
from projledger.domain.billing import BillingService
from projledger.domain.entities import BillingStatus


@click.group()
def billing_group():
    """Move billings through their lifecycle."""
    pass


@billing_group.command("status")
@click.argument("billing_id", type=int)
@click.argument(
    "status",
    type=click.Choice([s.value for s in BillingStatus if s is not BillingStatus.PENDING]),
)
@click.option("--date", "date_str", default="today", show_default=True, help="Posting date")
@click.option("--cash-account", help="Cash or bank account receiving the payment (required for paid)")
@click.option("--notes", help="Notes for the status history")
@click.pass_context
def change_status(
    ctx,
    billing_id: int,
    status: str,
    date_str: str,
    cash_account: str | None,
    notes: str | None,
):
    """Change the status of a billing.

    Examples:
        projledger billing status 1 unpaid
        projledger billing status 1 paid --cash-account 1102
        projledger billing status 2 rejected --notes "Client disputed the invoice"
    """
    service = BillingService(ctx.obj["db"], ctx.obj["settings"])

    try:
        result = service.transition(
            billing_id,
            BillingStatus(status),
            parse_date_or_exit(ctx, date_str),
            cash_account_code=cash_account,
            notes=notes,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Billing {billing_id}: {result.old_status} -> {result.new_status}")
    for posting in result.postings:
        click.echo(f"  Posted {len(posting.entries)} entries (correlation ID: {posting.correlation_id})")


@billing_group.command("history")
@click.argument("billing_id", type=int)
@click.pass_context
def history(ctx, billing_id: int):
    """Show the status history of a billing, newest first."""
    service = BillingService(ctx.obj["db"], ctx.obj["settings"])

    try:
        changes = service.history(billing_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if not changes:
        click.echo("No status changes found.")
        return

    for change in changes:
        line = f"{change.changed_at:%Y-%m-%d %H:%M:%S} | {change.old_status} -> {change.new_status}"
        if change.notes:
            line += f" | {change.notes}"
        click.echo(line)


def register_commands(cli):
    """Register billing commands with main CLI."""
    cli.add_command(billing_group, name="billing")
