"""Tests for projects, project costs and billings creation."""

import pytest
from datetime import date
from decimal import Decimal

from projledger.domain.entities import BillingStatus, CostStatus, ProjectStatus
from projledger.domain.errors import (
    ConflictError,
    InvalidTransition,
    NotFoundError,
    ValidationError,
)
from projledger.domain.project import COST_RECORD_TYPE


class TestProjects:
    """Tests for project records."""

    def test_create_project(self, sample_project):
        """Test project defaults."""
        assert sample_project.project_code == "PRJ-001"
        assert sample_project.status is ProjectStatus.ONGOING
        assert sample_project.progress == Decimal("0")
        assert sample_project.total_value == Decimal("100000000")

    def test_duplicate_code(self, project_service, sample_project):
        """Test that project codes are unique."""
        with pytest.raises(ConflictError):
            project_service.create_project("PRJ-001", "Another", Decimal("1"))

    def test_progress_range(self, project_service):
        """Test that progress must be a percentage."""
        with pytest.raises(ValidationError):
            project_service.create_project("PRJ-002", "Too far", Decimal("1"), progress=Decimal("120"))

    def test_update_and_filter(self, project_service, sample_project):
        """Test updating status and listing by status."""
        project_service.update_project(
            sample_project.id, status=ProjectStatus.COMPLETED, progress=Decimal("100")
        )

        project = project_service.get_project_by_code("PRJ-001")
        assert project.status is ProjectStatus.COMPLETED
        assert project.progress == Decimal("100")
        assert project_service.list_projects(ProjectStatus.ONGOING) == []
        assert len(project_service.list_projects(ProjectStatus.COMPLETED)) == 1

    def test_missing_project(self, project_service):
        """Test operations on a missing project."""
        with pytest.raises(NotFoundError):
            project_service.require_project(42)
        with pytest.raises(NotFoundError):
            project_service.add_cost(42, "material", Decimal("1"), date(2025, 1, 1))


class TestProjectCosts:
    """Tests for project costs and their approval."""

    def test_add_cost_is_pending(self, project_service, sample_project):
        """Test that new costs start pending."""
        cost_id = project_service.add_cost(
            sample_project.id, "Material", Decimal("30000000"), date(2025, 2, 10), "Drilling pipes"
        )

        costs = project_service.list_costs(sample_project.id)
        assert [c.id for c in costs] == [cost_id]
        assert costs[0].status is CostStatus.PENDING
        assert costs[0].category == "material"

    def test_add_cost_validation(self, project_service, sample_project):
        """Test cost category and amount validation."""
        with pytest.raises(ValidationError):
            project_service.add_cost(sample_project.id, "catering", Decimal("1"), date(2025, 1, 1))
        with pytest.raises(ValidationError):
            project_service.add_cost(sample_project.id, "labor", Decimal("0"), date(2025, 1, 1))

    def test_approve_posts_expense_against_payable(
        self, chart, project_service, posting_service, sample_project
    ):
        """Test that approval posts the category expense against accounts payable."""
        cost_id = project_service.add_cost(
            sample_project.id, "labor", Decimal("20000000"), date(2025, 2, 10), "Drilling crew"
        )

        result = project_service.transition_cost(cost_id, CostStatus.APPROVED, date(2025, 2, 28))

        assert result.old_status == "pending"
        assert result.new_status == "approved"
        assert len(result.postings) == 1
        assert posting_service.account_balance("5102") == Decimal("20000000")
        assert posting_service.account_balance("2102") == Decimal("20000000")
        entries = posting_service.list_entries(source_type=COST_RECORD_TYPE, source_id=cost_id)
        assert all(e.project_id == sample_project.id for e in entries)

    def test_reject_approved_cost_reverses(
        self, chart, project_service, posting_service, sample_project
    ):
        """Test that rejecting an approved cost reverses its posting."""
        cost_id = project_service.add_cost(
            sample_project.id, "equipment", Decimal("5000000"), date(2025, 2, 10)
        )
        project_service.transition_cost(cost_id, CostStatus.APPROVED, date(2025, 2, 28))

        result = project_service.transition_cost(
            cost_id, CostStatus.REJECTED, date(2025, 3, 5), notes="Duplicate invoice"
        )

        assert len(result.postings) == 1
        assert posting_service.account_balance("5103") == Decimal("0")
        assert posting_service.account_balance("2102") == Decimal("0")
        history = project_service.cost_history(cost_id)
        assert [h.new_status for h in history] == ["rejected", "approved"]
        assert history[0].notes == "Duplicate invoice"

    def test_reject_pending_cost_posts_nothing(self, chart, project_service, sample_project):
        """Test rejecting a pending cost."""
        cost_id = project_service.add_cost(sample_project.id, "other", Decimal("1000"), date(2025, 2, 10))
        result = project_service.transition_cost(cost_id, CostStatus.REJECTED, date(2025, 2, 11))
        assert result.postings == ()

    def test_rejected_cost_is_final(self, chart, project_service, sample_project):
        """Test that a rejected cost cannot be approved."""
        cost_id = project_service.add_cost(sample_project.id, "other", Decimal("1000"), date(2025, 2, 10))
        project_service.transition_cost(cost_id, CostStatus.REJECTED, date(2025, 2, 11))

        with pytest.raises(InvalidTransition):
            project_service.transition_cost(cost_id, CostStatus.APPROVED, date(2025, 2, 12))
        assert project_service.list_costs(sample_project.id)[0].status is CostStatus.REJECTED


class TestBillingCreation:
    """Tests for creating billings."""

    def test_billing_by_percentage(self, project_service, sample_project):
        """Test that a percentage bills a share of the project value."""
        billing_id = project_service.create_billing(
            sample_project.id, date(2025, 3, 31), percentage=Decimal("30"), invoice="INV-001"
        )

        billing = project_service.list_billings(sample_project.id)[0]
        assert billing.id == billing_id
        assert billing.amount == Decimal("30000000")
        assert billing.percentage == Decimal("30")
        assert billing.status is BillingStatus.PENDING
        assert billing.invoice == "INV-001"

    def test_billing_by_amount(self, project_service, sample_project):
        """Test a fixed-amount billing."""
        project_service.create_billing(
            sample_project.id, date(2025, 3, 31), amount=Decimal("12500000"), post_journal_entries=False
        )
        billing = project_service.list_billings(sample_project.id)[0]
        assert billing.amount == Decimal("12500000")
        assert billing.percentage is None
        assert billing.post_journal_entries is False

    def test_billing_needs_amount_or_percentage(self, project_service, sample_project):
        """Test that exactly one of amount and percentage is accepted."""
        with pytest.raises(ValidationError):
            project_service.create_billing(sample_project.id, date(2025, 3, 31))
        with pytest.raises(ValidationError):
            project_service.create_billing(
                sample_project.id, date(2025, 3, 31), amount=Decimal("1"), percentage=Decimal("1")
            )
        with pytest.raises(ValidationError):
            project_service.create_billing(sample_project.id, date(2025, 3, 31), percentage=Decimal("101"))
