"""Main CLI entry point."""

import logging

import click
from projledger.config import LedgerSettings
from projledger.database.factories import create_sqlite_database

# Import and register all commands at module level
from projledger.cli.commands import (
    account,
    init_accounts,
    posting,
    asset,
    project,
    billing,
    wip,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides PROJLEDGER_DB_PATH environment variable)",
    envvar="PROJLEDGER_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level (overrides PROJLEDGER_LOG_LEVEL environment variable)",
    envvar="PROJLEDGER_LOG_LEVEL",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Projledger - Project accounting ledger.

    Keep a chart of accounts, post balanced double-entry transactions,
    depreciate fixed assets and value project work in progress.
    """
    ctx.ensure_object(dict)

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            ctx.obj["settings"] = LedgerSettings.from_env()
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)

        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
init_accounts.register_commands(cli)
account.register_commands(cli)
posting.register_commands(cli)
asset.register_commands(cli)
project.register_commands(cli)
billing.register_commands(cli)
wip.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
