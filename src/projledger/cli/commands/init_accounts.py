"""Initialize the default chart of accounts."""

import click
from projledger.domain.account import AccountService
from projledger.domain.chart import install_default_chart


@click.command("init-accounts")
@click.pass_context
def init_accounts(ctx):
    """Create the default chart of accounts and cashflow categories.

    Accounts that already exist are left unchanged, so the command can be
    run again safely.
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    click.echo("Creating default chart of accounts...")
    try:
        created, skipped = install_default_chart(service)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    if skipped == 0:
        click.echo(f"Successfully created {created} accounts.")
    else:
        click.echo(f"Created {created} accounts ({skipped} already existed).")


def register_commands(cli):
    """Register init-accounts command with main CLI."""
    cli.add_command(init_accounts)
