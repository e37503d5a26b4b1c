"""Work-in-progress valuation of projects."""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from projledger.database.base import Database
from projledger.domain.entities import (
    Billing,
    BillingStatus,
    CostStatus,
    Project,
    ProjectCost,
    ProjectStatus,
    ProjectWip,
    WipAggregate,
)
from projledger.domain.errors import NotFoundError, project_not_found

ZERO = Decimal("0")

# Billings that count as billed work
BILLED_STATUSES = (BillingStatus.UNPAID, BillingStatus.PAID)


def compute_project_wip(
    project: Project,
    costs: Iterable[ProjectCost],
    billings: Iterable[Billing],
    as_of: Optional[date] = None,
) -> ProjectWip:
    """Compute the signed WIP of a project.

    WIP is the sum of approved costs minus the sum of unpaid and paid
    billings. A negative value means the project is billed in excess of
    its costs.

    Args:
        project: The project
        costs: Costs of the project
        billings: Billings of the project
        as_of: Only count costs and billings dated on or before this date

    Returns:
        Project WIP valuation
    """
    total_costs = sum(
        (
            c.amount
            for c in costs
            if c.status is CostStatus.APPROVED and (as_of is None or c.date <= as_of)
        ),
        ZERO,
    )
    total_billed = sum(
        (
            b.amount
            for b in billings
            if b.status in BILLED_STATUSES and (as_of is None or b.billing_date <= as_of)
        ),
        ZERO,
    )
    return ProjectWip(
        project_id=project.id,
        project_code=project.project_code,
        status=project.status,
        total_costs=total_costs,
        total_billed=total_billed,
        wip_value=total_costs - total_billed,
    )


def aggregate_wip(valuations: Iterable[ProjectWip]) -> WipAggregate:
    """Aggregate project valuations for the balance sheet.

    Only ongoing projects contribute: positive WIP to ``total_wip`` and
    negative WIP to ``total_billings_in_excess``. Completed projects with a
    non-zero WIP are returned as warnings.
    """
    valuations = tuple(valuations)
    total_wip = ZERO
    total_excess = ZERO
    warnings = []

    for wip in valuations:
        if wip.status is ProjectStatus.ONGOING:
            if wip.wip_value > 0:
                total_wip += wip.wip_value
            else:
                total_excess += -wip.wip_value
        elif wip.status is ProjectStatus.COMPLETED and wip.wip_value != 0:
            warnings.append(wip)

    return WipAggregate(
        total_wip=total_wip,
        total_billings_in_excess=total_excess,
        projects=valuations,
        warnings=tuple(warnings),
    )


class WipService:
    """Reads project records and values their work in progress."""

    def __init__(self, db: Database):
        self.db = db

    def project_wip(self, project_id: int, as_of: Optional[date] = None) -> ProjectWip:
        """Compute WIP of one project.

        Raises:
            NotFoundError: If project does not exist
        """
        project = self.db.get_project(project_id)
        if project is None:
            raise NotFoundError(project_not_found(project_id))
        return compute_project_wip(
            project,
            self.db.list_project_costs(project_id),
            self.db.list_billings(project_id),
            as_of=as_of,
        )

    def aggregate(self, as_of: Optional[date] = None) -> WipAggregate:
        """Compute WIP of every project and aggregate it."""
        valuations = [
            compute_project_wip(
                project,
                self.db.list_project_costs(project.id),
                self.db.list_billings(project.id),
                as_of=as_of,
            )
            for project in self.db.list_projects()
        ]
        return aggregate_wip(valuations)
