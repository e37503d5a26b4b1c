"""Project records: projects, costs, billings and cost approval."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from projledger.config import LedgerSettings
from projledger.database.base import Database
from projledger.domain.billing import reverse_open_postings
from projledger.domain.entities import (
    Billing,
    BillingStatus,
    CostStatus,
    Direction,
    PostingEvent,
    PostingResult,
    Project,
    ProjectCost,
    ProjectStatus,
    StatusChange,
    StatusTransitionResult,
)
from projledger.domain.errors import (
    ConflictError,
    InvalidTransition,
    NotFoundError,
    ValidationError,
    cost_not_found,
    invalid_transition,
    project_not_found,
)
from projledger.domain.posting import PostingService

logger = logging.getLogger(__name__)

COST_RECORD_TYPE = "project_cost"

# Expense account per project cost category
COST_EXPENSE_ACCOUNTS: dict[str, str] = {
    "material": "5101",
    "labor": "5102",
    "equipment": "5103",
    "transportation": "5104",
    "other": "5105",
}

COST_TRANSITIONS: dict[CostStatus, frozenset[CostStatus]] = {
    CostStatus.PENDING: frozenset({CostStatus.APPROVED, CostStatus.REJECTED}),
    CostStatus.APPROVED: frozenset({CostStatus.REJECTED}),
    CostStatus.REJECTED: frozenset(),
}

HUNDRED = Decimal("100")


class ProjectService:
    """Service for projects and the costs and billings recorded against them."""

    def __init__(
        self,
        db: Database,
        settings: Optional[LedgerSettings] = None,
        posting: Optional[PostingService] = None,
    ):
        """Initialize project service.

        Args:
            db: Database instance
            settings: Ledger settings (defaults are used if None)
            posting: Posting service (created from db if None)
        """
        self.db = db
        self.settings = settings or LedgerSettings()
        self.posting = posting or PostingService(db, self.settings)

    @staticmethod
    def _check_progress(progress: Decimal) -> Decimal:
        progress = Decimal(progress)
        if progress < 0 or progress > HUNDRED:
            raise ValidationError(f"Progress must be between 0 and 100, got {progress}")
        return progress

    def create_project(
        self,
        project_code: str,
        name: str,
        total_value: Decimal,
        status: ProjectStatus = ProjectStatus.ONGOING,
        progress: Decimal = Decimal("0"),
    ) -> int:
        """Create a project.

        Args:
            project_code: Unique project code
            name: Project name
            total_value: Contract value (>= 0)
            status: Project status
            progress: Completion percentage (0-100)

        Returns:
            Project ID

        Raises:
            ValidationError: If a value is invalid
            ConflictError: If the project code already exists
        """
        project_code = project_code.strip()
        name = name.strip()
        if not project_code:
            raise ValidationError("Project code cannot be empty")
        if not name:
            raise ValidationError("Project name cannot be empty")
        total_value = Decimal(total_value)
        if total_value < 0:
            raise ValidationError(f"Project value cannot be negative, got {total_value}")
        progress = self._check_progress(progress)

        if self.db.get_project_by_code(project_code) is not None:
            raise ConflictError(f"Project with code '{project_code}' already exists")

        return self.db.create_project(
            project_code=project_code,
            name=name,
            total_value=total_value,
            status=ProjectStatus(status).value,
            progress=progress,
        )

    def get_project(self, project_id: int) -> Optional[Project]:
        return self.db.get_project(project_id)

    def get_project_by_code(self, project_code: str) -> Optional[Project]:
        return self.db.get_project_by_code(project_code)

    def require_project(self, project_id: int) -> Project:
        project = self.db.get_project(project_id)
        if project is None:
            raise NotFoundError(project_not_found(project_id))
        return project

    def list_projects(self, status: Optional[ProjectStatus] = None) -> list[Project]:
        return self.db.list_projects(ProjectStatus(status).value if status is not None else None)

    def update_project(
        self,
        project_id: int,
        status: Optional[ProjectStatus] = None,
        progress: Optional[Decimal] = None,
    ) -> None:
        """Update project status and/or progress.

        Raises:
            NotFoundError: If project does not exist
            ValidationError: If progress is out of range
        """
        self.require_project(project_id)
        if progress is not None:
            progress = self._check_progress(progress)
        self.db.update_project(
            project_id,
            status=ProjectStatus(status).value if status is not None else None,
            progress=progress,
        )

    # Costs
    def add_cost(
        self,
        project_id: int,
        category: str,
        amount: Decimal,
        cost_date: date,
        description: str = "",
    ) -> int:
        """Record a pending project cost.

        Args:
            project_id: Project ID
            category: One of material, labor, equipment, transportation, other
            amount: Cost amount (> 0)
            cost_date: Date the cost was incurred
            description: Optional description

        Returns:
            Cost ID

        Raises:
            NotFoundError: If project does not exist
            ValidationError: If category or amount is invalid
        """
        self.require_project(project_id)
        category = category.strip().lower()
        if category not in COST_EXPENSE_ACCOUNTS:
            choices = ", ".join(COST_EXPENSE_ACCOUNTS)
            raise ValidationError(f"Unknown cost category '{category}'. Supported: {choices}")
        amount = Decimal(amount)
        if amount <= 0:
            raise ValidationError(f"Cost amount must be positive, got {amount}")

        return self.db.create_project_cost(
            project_id=project_id,
            category=category,
            description=description.strip(),
            amount=amount,
            cost_date=cost_date,
            status=CostStatus.PENDING.value,
        )

    def list_costs(self, project_id: int) -> list[ProjectCost]:
        self.require_project(project_id)
        return self.db.list_project_costs(project_id)

    def transition_cost(
        self,
        cost_id: int,
        new_status: CostStatus,
        transition_date: date,
        notes: Optional[str] = None,
    ) -> StatusTransitionResult:
        """Approve or reject a project cost.

        Approval posts the cost as an expense of its category against
        accounts payable. Rejecting an approved cost reverses that posting.

        Args:
            cost_id: Cost ID
            new_status: Target status
            transition_date: Date of the postings
            notes: Optional notes stored in the status history

        Returns:
            Transition result with the postings made

        Raises:
            NotFoundError: If cost does not exist
            InvalidTransition: If the status change is not allowed
            AccountNotFound: If the expense or payable account does not exist
        """
        new_status = CostStatus(new_status)

        with self.db.transaction():
            cost = self.db.get_project_cost(cost_id, for_update=True)
            if cost is None:
                raise NotFoundError(cost_not_found(cost_id))

            old_status = cost.status
            if new_status not in COST_TRANSITIONS[old_status]:
                raise InvalidTransition(
                    invalid_transition("cost", old_status.value, new_status.value)
                )

            postings: list[PostingResult] = []
            if new_status is CostStatus.APPROVED:
                postings.append(
                    self.posting.post(
                        PostingEvent(
                            date=transition_date,
                            account_code=COST_EXPENSE_ACCOUNTS[cost.category],
                            amount=cost.amount,
                            direction=Direction.INCREASE,
                            description=cost.description or f"Project {cost.category} cost",
                            counter_account_code=self.settings.payable_account_code,
                            project_id=cost.project_id,
                            source_type=COST_RECORD_TYPE,
                            source_id=cost.id,
                        )
                    )
                )
            elif old_status is CostStatus.APPROVED:
                postings.extend(
                    reverse_open_postings(
                        self.posting,
                        COST_RECORD_TYPE,
                        cost.id,
                        transition_date,
                        f"Project cost {cost.id} rejected",
                    )
                )

            self.db.update_project_cost_status(cost_id, new_status.value)
            self.db.add_status_change(
                COST_RECORD_TYPE, cost_id, old_status.value, new_status.value, notes
            )

        logger.info(f"Project cost {cost_id} moved from {old_status.value} to {new_status.value}")
        return StatusTransitionResult(
            record_id=cost_id,
            old_status=old_status.value,
            new_status=new_status.value,
            postings=tuple(postings),
        )

    def cost_history(self, cost_id: int) -> list[StatusChange]:
        """Return the status history of a cost, newest first.

        Raises:
            NotFoundError: If cost does not exist
        """
        if self.db.get_project_cost(cost_id) is None:
            raise NotFoundError(cost_not_found(cost_id))
        return self.db.list_status_changes(COST_RECORD_TYPE, cost_id)

    # Billings
    def create_billing(
        self,
        project_id: int,
        billing_date: date,
        amount: Optional[Decimal] = None,
        percentage: Optional[Decimal] = None,
        invoice: Optional[str] = None,
        post_journal_entries: bool = True,
    ) -> int:
        """Create a pending billing for a project.

        Give either an amount or a percentage of the project's total value.

        Args:
            project_id: Project ID
            billing_date: Billing date
            amount: Billed amount (> 0)
            percentage: Percentage of the project's total value (0-100]
            invoice: Optional invoice number
            post_journal_entries: Whether status changes of this billing post
                to the ledger

        Returns:
            Billing ID

        Raises:
            NotFoundError: If project does not exist
            ValidationError: If amount and percentage are both or neither
                given, or out of range
        """
        project = self.require_project(project_id)
        if (amount is None) == (percentage is None):
            raise ValidationError("Give either an amount or a percentage")

        if percentage is not None:
            percentage = Decimal(percentage)
            if percentage <= 0 or percentage > HUNDRED:
                raise ValidationError(f"Percentage must be above 0 and at most 100, got {percentage}")
            amount = project.total_value * percentage / HUNDRED
        amount = Decimal(amount)
        if amount <= 0:
            raise ValidationError(f"Billing amount must be positive, got {amount}")

        return self.db.create_billing(
            project_id=project_id,
            billing_date=billing_date,
            amount=amount,
            status=BillingStatus.PENDING.value,
            percentage=percentage,
            invoice=invoice.strip() if invoice else None,
            post_journal_entries=post_journal_entries,
        )

    def list_billings(self, project_id: int) -> list[Billing]:
        self.require_project(project_id)
        return self.db.list_billings(project_id)
