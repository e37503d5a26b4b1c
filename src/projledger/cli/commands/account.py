"""Chart of accounts commands."""

import click
from projledger.cli.error_handling import handle_domain_error, resolve_as_of
from projledger.domain.account import AccountService
from projledger.domain.entities import AccountType, CashflowActivity
from projledger.domain.posting import PostingService
from projledger.utils.amount_parser import format_money

ACCOUNT_TYPES = [t.value for t in AccountType]
ACTIVITIES = [a.value for a in CashflowActivity]


@click.group()
def account_group():
    """Manage the chart of accounts."""
    pass


@account_group.command("create")
@click.argument("code")
@click.argument("name")
@click.option(
    "--type",
    "account_type",
    required=True,
    type=click.Choice(ACCOUNT_TYPES, case_sensitive=False),
    help="Account type",
)
@click.option("--category", default="", help="Category (e.g., cash, bank, receivable)")
@click.pass_context
def create_account(ctx, code: str, name: str, account_type: str, category: str):
    """Create a new account.

    Examples:
        projledger account create 1106 "Bank BSI" --type Asset --category bank
        projledger account create 6106 "Insurance Expense" --type Expense
    """
    service = AccountService(ctx.obj["db"])

    try:
        service.create_account(code, name, AccountType(account_type), category)
        click.echo(f"Created account {code} '{name}' ({account_type})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(ACCOUNT_TYPES, case_sensitive=False),
    help="Only show accounts of this type",
)
@click.pass_context
def list_accounts(ctx, account_type: str | None):
    """List accounts."""
    service = AccountService(ctx.obj["db"])

    accounts = service.list_accounts(AccountType(account_type) if account_type else None)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 90)
    for acc in accounts:
        click.echo(f"{acc.code:6s} | {acc.name:45s} | {acc.type.value:11s} | {acc.category}")


@account_group.command("rename")
@click.argument("code")
@click.argument("new_name")
@click.option("--category", help="New category (optional)")
@click.pass_context
def rename_account(ctx, code: str, new_name: str, category: str | None):
    """Rename an account. The account code never changes."""
    service = AccountService(ctx.obj["db"])

    try:
        service.update_account(code, name=new_name, category=category)
        click.echo(f"Renamed account {code} to '{new_name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("code")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, code: str, yes: bool):
    """Delete an account that has no ledger entries."""
    service = AccountService(ctx.obj["db"])

    account_obj = service.get_account(code)
    if account_obj is None:
        click.echo(f"Error: Account '{code}' not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Are you sure you want to delete account {code} '{account_obj.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(code)
        click.echo(f"Deleted account {code} '{account_obj.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("balance")
@click.argument("code")
@click.option("--as-of", help="Balance date (YYYY-MM-DD or relative like 'end of last month')")
@click.option(
    "--period",
    type=click.Choice(["this-month", "last-month", "this-year", "last-year"]),
    help="Use the last day of this period as balance date",
)
@click.pass_context
def account_balance(ctx, code: str, as_of: str | None, period: str | None):
    """Show the natural balance of an account."""
    posting = PostingService(ctx.obj["db"], ctx.obj["settings"])
    as_of_date = resolve_as_of(ctx, as_of, period)

    try:
        account_obj = posting.accounts.require_account(code)
        balance = posting.account_balance(code, as_of_date)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    suffix = f" as of {as_of_date.isoformat()}" if as_of_date else ""
    click.echo(f"{account_obj.code} {account_obj.name}{suffix}: {format_money(balance)}")


@account_group.group("cashflow")
def cashflow_group():
    """Manage cashflow classification of accounts."""
    pass


@cashflow_group.command("set")
@click.argument("code")
@click.argument("activity", type=click.Choice(ACTIVITIES, case_sensitive=False))
@click.option("--subcategory", help="Free-form subcategory (e.g., revenue, project_cost)")
@click.pass_context
def set_cashflow(ctx, code: str, activity: str, subcategory: str | None):
    """Classify an account as operating, investing or financing."""
    service = AccountService(ctx.obj["db"])

    try:
        service.set_cashflow_category(code, CashflowActivity(activity.lower()), subcategory)
        click.echo(f"Account {code} classified as {activity.lower()}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@cashflow_group.command("list")
@click.pass_context
def list_cashflow(ctx):
    """List accounts grouped by cashflow activity."""
    service = AccountService(ctx.obj["db"])
    classified = {c.account_code: c for c in service.list_cashflow_categories()}

    groups = service.group_by_cashflow()
    if not any(groups.values()):
        click.echo("No cashflow categories found.")
        return

    for activity, accounts in groups.items():
        if not accounts:
            continue
        click.echo(f"\n{activity.value.capitalize()}:")
        for acc in accounts:
            subcategory = classified[acc.code].subcategory or ""
            click.echo(f"  {acc.code:6s} {acc.name:45s} {subcategory}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
