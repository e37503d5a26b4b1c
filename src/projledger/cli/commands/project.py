"""Project, cost and billing record commands."""

import click
from projledger.cli.error_handling import (
    handle_domain_error,
    parse_amount_or_exit,
    parse_date_or_exit,
)
from projledger.domain.entities import CostStatus, ProjectStatus
from projledger.domain.project import COST_EXPENSE_ACCOUNTS, ProjectService
from projledger.utils.amount_parser import format_money


def _service(ctx) -> ProjectService:
    return ProjectService(ctx.obj["db"], ctx.obj["settings"])


def _project_id_or_exit(ctx, service: ProjectService, project: str) -> int:
    """Resolve a project code or ID, or exit with a CLI error."""
    found = service.get_project_by_code(project)
    if found is None and project.isdigit():
        found = service.get_project(int(project))
    if found is None:
        click.echo(f"Error: Project '{project}' not found", err=True)
        ctx.exit(1)
    return found.id


@click.group()
def project_group():
    """Manage projects, their costs and billings."""
    pass


@project_group.command("create")
@click.argument("code")
@click.argument("name")
@click.option("--value", required=True, help="Contract value")
@click.option(
    "--status",
    type=click.Choice([s.value for s in ProjectStatus]),
    default=ProjectStatus.ONGOING.value,
    show_default=True,
)
@click.option("--progress", default="0", show_default=True, help="Completion percentage (0-100)")
@click.pass_context
def create_project(ctx, code: str, name: str, value: str, status: str, progress: str):
    """Create a project.

    Examples:
        projledger project create PRJ-001 "Soil investigation Bekasi" --value 120000000
    """
    service = _service(ctx)

    try:
        project_id = service.create_project(
            project_code=code,
            name=name,
            total_value=parse_amount_or_exit(ctx, value, "value"),
            status=ProjectStatus(status),
            progress=parse_amount_or_exit(ctx, progress, "progress"),
        )
        click.echo(f"Created project {code} '{name}' (ID: {project_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@project_group.command("list")
@click.option("--status", type=click.Choice([s.value for s in ProjectStatus]), help="Filter by status")
@click.pass_context
def list_projects(ctx, status: str | None):
    """List projects."""
    projects = _service(ctx).list_projects(ProjectStatus(status) if status else None)
    if not projects:
        click.echo("No projects found.")
        return

    click.echo("\nProjects:")
    click.echo("-" * 100)
    for p in projects:
        click.echo(
            f"ID: {p.id:3d} | {p.project_code:12s} | {p.name:35s} | {p.status.value:9s} | "
            f"{format_money(p.total_value):>18s} | {p.progress:.0f}%"
        )


@project_group.command("update")
@click.argument("project")
@click.option("--status", type=click.Choice([s.value for s in ProjectStatus]), help="New status")
@click.option("--progress", help="New completion percentage (0-100)")
@click.pass_context
def update_project(ctx, project: str, status: str | None, progress: str | None):
    """Update project status or progress. PROJECT is a project code or ID."""
    service = _service(ctx)
    project_id = _project_id_or_exit(ctx, service, project)

    try:
        service.update_project(
            project_id,
            status=ProjectStatus(status) if status else None,
            progress=parse_amount_or_exit(ctx, progress, "progress") if progress else None,
        )
        click.echo(f"Updated project {project}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@project_group.command("add-cost")
@click.argument("project")
@click.option("--category", required=True, type=click.Choice(list(COST_EXPENSE_ACCOUNTS)))
@click.option("--amount", required=True, help="Cost amount")
@click.option("--date", "date_str", required=True, help="Cost date (YYYY-MM-DD)")
@click.option("--description", default="", help="Description")
@click.pass_context
def add_cost(ctx, project: str, category: str, amount: str, date_str: str, description: str):
    """Record a pending cost for a project. PROJECT is a project code or ID."""
    service = _service(ctx)
    project_id = _project_id_or_exit(ctx, service, project)
    cost_amount = parse_amount_or_exit(ctx, amount)

    try:
        cost_id = service.add_cost(
            project_id=project_id,
            category=category,
            amount=cost_amount,
            cost_date=parse_date_or_exit(ctx, date_str),
            description=description,
        )
        click.echo(f"Added {category} cost of {format_money(cost_amount)} (ID: {cost_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@project_group.command("costs")
@click.argument("project")
@click.pass_context
def list_costs(ctx, project: str):
    """List costs of a project. PROJECT is a project code or ID."""
    service = _service(ctx)
    costs = service.list_costs(_project_id_or_exit(ctx, service, project))
    if not costs:
        click.echo("No costs found.")
        return

    for c in costs:
        click.echo(
            f"ID: {c.id:3d} | {c.date.isoformat()} | {c.category:14s} | {c.status.value:8s} | "
            f"{format_money(c.amount):>18s} | {c.description}"
        )


@project_group.command("cost-status")
@click.argument("cost_id", type=int)
@click.argument("status", type=click.Choice([CostStatus.APPROVED.value, CostStatus.REJECTED.value]))
@click.option("--date", "date_str", default="today", show_default=True, help="Posting date")
@click.option("--notes", help="Notes for the status history")
@click.pass_context
def cost_status(ctx, cost_id: int, status: str, date_str: str, notes: str | None):
    """Approve or reject a project cost."""
    service = _service(ctx)

    try:
        result = service.transition_cost(
            cost_id, CostStatus(status), parse_date_or_exit(ctx, date_str), notes=notes
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Cost {cost_id}: {result.old_status} -> {result.new_status}")
    for posting in result.postings:
        click.echo(f"  Posted {len(posting.entries)} entries (correlation ID: {posting.correlation_id})")


@project_group.command("add-billing")
@click.argument("project")
@click.option("--date", "date_str", required=True, help="Billing date (YYYY-MM-DD)")
@click.option("--amount", help="Billed amount")
@click.option("--percentage", help="Percentage of the project value")
@click.option("--invoice", help="Invoice number")
@click.option("--no-journal", is_flag=True, help="Do not post status changes of this billing to the ledger")
@click.pass_context
def add_billing(
    ctx,
    project: str,
    date_str: str,
    amount: str | None,
    percentage: str | None,
    invoice: str | None,
    no_journal: bool,
):
    """Create a pending billing. PROJECT is a project code or ID.

    Examples:
        projledger project add-billing PRJ-001 --date 2025-03-31 --percentage 30 --invoice INV-001
    """
    service = _service(ctx)
    project_id = _project_id_or_exit(ctx, service, project)

    try:
        billing_id = service.create_billing(
            project_id=project_id,
            billing_date=parse_date_or_exit(ctx, date_str),
            amount=parse_amount_or_exit(ctx, amount) if amount else None,
            percentage=parse_amount_or_exit(ctx, percentage, "percentage") if percentage else None,
            invoice=invoice,
            post_journal_entries=not no_journal,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    billing = service.db.get_billing(billing_id)
    click.echo(f"Created billing of {format_money(billing.amount)} (ID: {billing_id})")


@project_group.command("billings")
@click.argument("project")
@click.pass_context
def list_billings(ctx, project: str):
    """List billings of a project. PROJECT is a project code or ID."""
    service = _service(ctx)
    billings = service.list_billings(_project_id_or_exit(ctx, service, project))
    if not billings:
        click.echo("No billings found.")
        return

    for b in billings:
        click.echo(
            f"ID: {b.id:3d} | {b.billing_date.isoformat()} | {b.invoice or '':12s} | "
            f"{b.status.value:8s} | {format_money(b.amount):>18s}"
        )


def register_commands(cli):
    """Register project commands with main CLI."""
    cli.add_command(project_group, name="project")
