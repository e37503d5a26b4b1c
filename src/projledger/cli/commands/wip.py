"""Work-in-progress valuation commands."""

import click
from projledger.cli.error_handling import handle_domain_error, resolve_as_of
from projledger.domain.project import ProjectService
from projledger.domain.wip import WipService
from projledger.utils.amount_parser import format_money

PERIODS = ["this-month", "last-month", "this-year", "last-year"]


@click.group()
def wip_group():
    """Value unbilled project work."""
    pass


@wip_group.command("project")
@click.argument("project")
@click.option("--as-of", help="Only count costs and billings up to this date")
@click.option("--period", type=click.Choice(PERIODS), help="Use the last day of this period")
@click.pass_context
def project_wip(ctx, project: str, as_of: str | None, period: str | None):
    """Show WIP of one project. PROJECT is a project code or ID."""
    db = ctx.obj["db"]
    projects = ProjectService(db, ctx.obj["settings"])
    as_of_date = resolve_as_of(ctx, as_of, period)

    found = projects.get_project_by_code(project)
    if found is None and project.isdigit():
        found = projects.get_project(int(project))
    if found is None:
        click.echo(f"Error: Project '{project}' not found", err=True)
        ctx.exit(1)

    try:
        wip = WipService(db).project_wip(found.id, as_of=as_of_date)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\n{found.project_code} {found.name} ({wip.status.value}):")
    click.echo(f"  Approved costs: {format_money(wip.total_costs):>20s}")
    click.echo(f"  Billed:         {format_money(wip.total_billed):>20s}")
    click.echo(f"  WIP:            {format_money(wip.wip_value):>20s}")
    if wip.is_over_billed:
        click.echo("  Billed in excess of costs")


@wip_group.command("aggregate")
@click.option("--as-of", help="Only count costs and billings up to this date")
@click.option("--period", type=click.Choice(PERIODS), help="Use the last day of this period")
@click.pass_context
def aggregate(ctx, as_of: str | None, period: str | None):
    """Show total WIP of ongoing projects for the balance sheet."""
    report = WipService(ctx.obj["db"]).aggregate(as_of=resolve_as_of(ctx, as_of, period))

    if not report.projects:
        click.echo("No projects found.")
        return

    click.echo("\nWork in progress:")
    click.echo("-" * 90)
    for wip in report.projects:
        click.echo(
            f"{wip.project_code:12s} | {wip.status.value:9s} | costs {format_money(wip.total_costs):>18s} | "
            f"billed {format_money(wip.total_billed):>18s} | WIP {format_money(wip.wip_value):>18s}"
        )
    click.echo("-" * 90)
    click.echo(f"Total WIP:                  {format_money(report.total_wip):>20s}")
    click.echo(f"Billings in excess of cost: {format_money(report.total_billings_in_excess):>20s}")

    for wip in report.warnings:
        click.echo(
            f"Warning: completed project {wip.project_code} has non-zero WIP "
            f"{format_money(wip.wip_value)}",
            err=True,
        )


def register_commands(cli):
    """Register WIP commands with main CLI."""
    cli.add_command(wip_group, name="wip")
