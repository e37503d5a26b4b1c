"""Fixed asset and depreciation commands."""

import click
from projledger.cli.error_handling import (
    handle_domain_error,
    parse_amount_or_exit,
    parse_date_or_exit,
    resolve_as_of,
)
from projledger.domain.depreciation import DepreciationService
from projledger.domain.entities import DepreciationOutcome, ScheduleGranularity
from projledger.utils.amount_parser import format_money

PERIODS = ["this-month", "last-month", "this-year", "last-year"]


def _service(ctx) -> DepreciationService:
    return DepreciationService(ctx.obj["db"], ctx.obj["settings"])


@click.group()
def asset_group():
    """Manage fixed assets and depreciation."""
    pass


@asset_group.command("create")
@click.argument("name")
@click.option("--date", "date_str", required=True, help="Acquisition date (YYYY-MM-DD)")
@click.option("--value", required=True, help="Acquisition value")
@click.option("--life", "useful_life", required=True, type=click.IntRange(min=1), help="Useful life in years")
@click.option("--accumulated", default="0", show_default=True, help="Opening accumulated depreciation")
@click.option("--category", help="Asset category (e.g., equipment, vehicle)")
@click.option("--asset-account", help="Fixed asset account code")
@click.option("--expense-account", help="Depreciation expense account code")
@click.option("--accumulated-account", help="Accumulated depreciation account code")
@click.option("--paid-from", help="Cash or bank account the purchase was paid from (posts the purchase)")
@click.pass_context
def create_asset(
    ctx,
    name: str,
    date_str: str,
    value: str,
    useful_life: int,
    accumulated: str,
    category: str | None,
    asset_account: str | None,
    expense_account: str | None,
    accumulated_account: str | None,
    paid_from: str | None,
):
    """Register a fixed asset.

    Examples:
        projledger asset create "Boring Machine" --date 2025-01-15 --value 185000000 --life 5
        projledger asset create "Truck" --date 2025-02-01 --value 350000000 --life 8 --asset-account 1503 --paid-from 1102
    """
    service = _service(ctx)

    try:
        asset_id = service.create_asset(
            asset_name=name,
            acquisition_date=parse_date_or_exit(ctx, date_str, "acquisition date"),
            value=parse_amount_or_exit(ctx, value, "value"),
            useful_life=useful_life,
            accumulated_depreciation=parse_amount_or_exit(ctx, accumulated, "accumulated depreciation"),
            category=category,
            asset_account_code=asset_account,
            depreciation_expense_account_code=expense_account,
            accumulated_depreciation_account_code=accumulated_account,
            payment_account_code=paid_from,
        )
        click.echo(f"Created fixed asset '{name}' (ID: {asset_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@asset_group.command("list")
@click.option("--depreciable", is_flag=True, help="Only show assets with a positive book value")
@click.pass_context
def list_assets(ctx, depreciable: bool):
    """List fixed assets."""
    assets = _service(ctx).list_assets(depreciable_only=depreciable)
    if not assets:
        click.echo("No fixed assets found.")
        return

    click.echo("\nFixed assets:")
    click.echo("-" * 110)
    for a in assets:
        click.echo(
            f"ID: {a.id:3d} | {a.asset_name:30s} | {a.acquisition_date.isoformat()} | "
            f"{a.useful_life:2d}y | value {format_money(a.value):>18s} | "
            f"book {format_money(a.book_value):>18s}"
        )


@asset_group.command("depreciation")
@click.argument("asset_id", type=int)
@click.option("--as-of", default="today", show_default=True, help="Valuation date")
@click.pass_context
def show_depreciation(ctx, asset_id: int, as_of: str):
    """Show depreciation of an asset as of a date without recording it."""
    service = _service(ctx)
    as_of_date = parse_date_or_exit(ctx, as_of, "as-of date")

    try:
        asset = service.require_asset(asset_id)
        result = service.depreciation_for(asset_id, as_of_date)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\n{asset.asset_name} as of {as_of_date.isoformat()}:")
    click.echo(f"  Value:                    {format_money(result.original_value):>20s}")
    click.echo(f"  Depreciation per year:    {format_money(result.depreciation_per_year):>20s}")
    click.echo(f"  Depreciation per month:   {format_money(result.depreciation_per_month):>20s}")
    click.echo(f"  Days elapsed:             {result.days_elapsed:>20d}")
    click.echo(f"  Accumulated depreciation: {format_money(result.accumulated_depreciation):>20s}")
    click.echo(f"  Book value:               {format_money(result.book_value):>20s}")
    click.echo(f"  Remaining months:         {format_money(result.remaining_months):>20s}")
    if result.is_fully_depreciated:
        click.echo("  Fully depreciated")


@asset_group.command("schedule")
@click.argument("asset_id", type=int)
@click.option(
    "--by",
    "granularity",
    type=click.Choice([g.value for g in ScheduleGranularity]),
    default=ScheduleGranularity.YEAR.value,
    show_default=True,
    help="Schedule period",
)
@click.pass_context
def show_schedule(ctx, asset_id: int, granularity: str):
    """Show the depreciation schedule of an asset."""
    try:
        schedule = _service(ctx).schedule_for(asset_id, ScheduleGranularity(granularity))
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nDepreciation schedule for {schedule.asset.asset_name}:")
    click.echo("-" * 110)
    for entry in schedule:
        click.echo(
            f"{entry.period:3d} | {entry.period_start.isoformat()} - {entry.period_end.isoformat()} | "
            f"{format_money(entry.beginning_value):>18s} | {format_money(entry.period_depreciation):>18s} | "
            f"{format_money(entry.ending_value):>18s} | {entry.ratio:.4f}"
        )


@asset_group.command("record")
@click.argument("asset_id", type=int)
@click.option("--date", "date_str", default="today", show_default=True, help="Depreciate up to this date")
@click.pass_context
def record_depreciation(ctx, asset_id: int, date_str: str):
    """Record depreciation of one asset up to a date."""
    service = _service(ctx)
    period_date = parse_date_or_exit(ctx, date_str)

    try:
        detail = service.record_period_depreciation(asset_id, period_date)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if detail.outcome is DepreciationOutcome.RECORDED:
        click.echo(
            f"Recorded depreciation of {format_money(detail.amount)} for '{detail.asset_name}' "
            f"(book value {format_money(detail.new_book_value)})"
        )
    elif detail.outcome is DepreciationOutcome.ALREADY_FULLY_DEPRECIATED:
        click.echo(f"'{detail.asset_name}' is already fully depreciated.")
    else:
        click.echo(f"Nothing to record for '{detail.asset_name}' as of {period_date.isoformat()}.")


@asset_group.command("run-depreciation")
@click.option("--as-of", help="Depreciate up to this date (defaults to today)")
@click.option("--period", type=click.Choice(PERIODS), help="Depreciate up to the last day of this period")
@click.pass_context
def run_depreciation(ctx, as_of: str | None, period: str | None):
    """Record depreciation for every asset with a positive book value."""
    as_of_date = resolve_as_of(ctx, as_of, period) or parse_date_or_exit(ctx, "today")
    report = _service(ctx).run_depreciation_batch(as_of_date)

    click.echo(f"Depreciation run as of {report.as_of.isoformat()}")
    for detail in report.details:
        line = f"  {detail.asset_id:3d} {detail.asset_name:30s} {detail.outcome.value}"
        if detail.outcome is DepreciationOutcome.RECORDED:
            line += f" {format_money(detail.amount)}"
        if detail.error:
            line += f": {detail.error}"
        click.echo(line)
    click.echo(f"Processed: {report.processed}, updated: {report.updated}, errors: {report.errors}")

    if report.errors:
        ctx.exit(1)


def register_commands(cli):
    """Register asset commands with main CLI."""
    cli.add_command(asset_group, name="asset")
