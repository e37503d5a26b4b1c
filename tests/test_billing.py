"""Tests for the billing lifecycle."""

import pytest
from datetime import date
from decimal import Decimal

from projledger.config import LedgerSettings
from projledger.domain.billing import RECORD_TYPE, BillingService
from projledger.domain.entities import BillingStatus, RevenueRecognition
from projledger.domain.errors import InvalidTransition, NotFoundError, ValidationError
from projledger.domain.posting import PostingService


@pytest.fixture
def billing_id(chart, project_service, sample_project):
    """A pending 30% billing of the sample project."""
    return project_service.create_billing(
        sample_project.id, date(2025, 3, 31), percentage=Decimal("30"), invoice="INV-001"
    )


@pytest.fixture
def on_payment_billing_service(temp_db):
    """BillingService recognizing revenue when payment is received."""
    settings = LedgerSettings(revenue_recognition=RevenueRecognition.ON_PAYMENT)
    return BillingService(temp_db, settings, PostingService(temp_db, settings))


class TestTransitions:
    """Tests for allowed and rejected status changes."""

    def test_issue_then_pay(self, billing_service, billing_id):
        """Test the normal pending, unpaid, paid lifecycle."""
        issued = billing_service.transition(billing_id, BillingStatus.UNPAID, date(2025, 3, 31))
        paid = billing_service.transition(
            billing_id, BillingStatus.PAID, date(2025, 4, 20), cash_account_code="1102"
        )

        assert (issued.old_status, issued.new_status) == ("pending", "unpaid")
        assert (paid.old_status, paid.new_status) == ("unpaid", "paid")
        assert billing_service.get_billing(billing_id).status is BillingStatus.PAID

    def test_pending_to_paid_is_invalid(self, billing_service, billing_id):
        """Test that a billing must be issued before it is paid."""
        with pytest.raises(InvalidTransition):
            billing_service.transition(
                billing_id, BillingStatus.PAID, date(2025, 4, 1), cash_account_code="1102"
            )
        assert billing_service.get_billing(billing_id).status is BillingStatus.PENDING

    def test_final_statuses(self, billing_service, billing_id):
        """Test that paid and rejected billings cannot change."""
        billing_service.transition(billing_id, BillingStatus.REJECTED, date(2025, 4, 1))
        with pytest.raises(InvalidTransition):
            billing_service.transition(billing_id, BillingStatus.UNPAID, date(2025, 4, 2))

    def test_paid_requires_cash_account(self, billing_service, billing_id):
        """Test that payment needs an Asset account."""
        billing_service.transition(billing_id, BillingStatus.UNPAID, date(2025, 3, 31))

        with pytest.raises(ValidationError):
            billing_service.transition(billing_id, BillingStatus.PAID, date(2025, 4, 20))
        with pytest.raises(ValidationError):
            billing_service.transition(
                billing_id, BillingStatus.PAID, date(2025, 4, 20), cash_account_code="4001"
            )
        assert billing_service.get_billing(billing_id).status is BillingStatus.UNPAID

    def test_missing_billing(self, chart, billing_service):
        """Test transitions of a missing billing."""
        with pytest.raises(NotFoundError):
            billing_service.transition(99, BillingStatus.UNPAID, date(2025, 3, 31))
        with pytest.raises(NotFoundError):
            billing_service.history(99)

    def test_history(self, billing_service, billing_id):
        """Test that every transition is recorded, newest first."""
        billing_service.transition(billing_id, BillingStatus.UNPAID, date(2025, 3, 31))
        billing_service.transition(
            billing_id, BillingStatus.PAID, date(2025, 4, 20), cash_account_code="1102", notes="Transfer"
        )

        history = billing_service.history(billing_id)
        assert [(h.old_status, h.new_status) for h in history] == [
            ("unpaid", "paid"),
            ("pending", "unpaid"),
        ]
        assert history[0].notes == "Transfer"


class TestRevenueOnIssue:
    """Tests for postings when revenue is recognized on issue."""

    def test_issue_posts_receivable_and_revenue(self, billing_service, posting_service, billing_id):
        """Test the issue posting."""
        result = billing_service.transition(billing_id, BillingStatus.UNPAID, date(2025, 3, 31))

        assert len(result.postings) == 1
        assert result.postings[0].primary.description == "Billing INV-001 for project PRJ-001 issued"
        assert posting_service.account_balance("1201") == Decimal("30000000")
        assert posting_service.account_balance("4001") == Decimal("30000000")

    def test_payment_clears_receivable(self, billing_service, posting_service, billing_id):
        """Test that payment moves the receivable into the bank account."""
        billing_service.transition(billing_id, BillingStatus.UNPAID, date(2025, 3, 31))
        billing_service.transition(
            billing_id, BillingStatus.PAID, date(2025, 4, 20), cash_account_code="1102"
        )

        assert posting_service.account_balance("1201") == Decimal("0")
        assert posting_service.account_balance("1102") == Decimal("30000000")
        assert posting_service.account_balance("4001") == Decimal("30000000")
        assert posting_service.trial_balance().is_balanced

    def test_rejection_reverses_issue(self, billing_service, posting_service, billing_id):
        """Test that rejecting an issued billing reverses its posting."""
        billing_service.transition(billing_id, BillingStatus.UNPAID, date(2025, 3, 31))
        result = billing_service.transition(billing_id, BillingStatus.REJECTED, date(2025, 4, 2))

        assert len(result.postings) == 1
        assert posting_service.account_balance("1201") == Decimal("0")
        assert posting_service.account_balance("4001") == Decimal("0")
        assert posting_service.open_postings(RECORD_TYPE, billing_id) == []

    def test_billing_without_journal(self, billing_service, posting_service, project_service, sample_project):
        """Test that billings created without journal entries post nothing."""
        billing_id = project_service.create_billing(
            sample_project.id, date(2025, 3, 31), amount=Decimal("1000"), post_journal_entries=False
        )

        result = billing_service.transition(billing_id, BillingStatus.UNPAID, date(2025, 3, 31))

        assert result.postings == ()
        assert posting_service.list_entries() == []


class TestRevenueOnPayment:
    """Tests for postings when revenue is recognized on payment."""

    def test_issue_posts_nothing(self, on_payment_billing_service, posting_service, billing_id):
        """Test that issuing posts nothing."""
        result = on_payment_billing_service.transition(billing_id, BillingStatus.UNPAID, date(2025, 3, 31))

        assert result.postings == ()
        assert posting_service.list_entries() == []

    def test_payment_posts_revenue(self, on_payment_billing_service, posting_service, billing_id):
        """Test that payment posts cash against revenue."""
        on_payment_billing_service.transition(billing_id, BillingStatus.UNPAID, date(2025, 3, 31))
        on_payment_billing_service.transition(
            billing_id, BillingStatus.PAID, date(2025, 4, 20), cash_account_code="1101"
        )

        assert posting_service.account_balance("1101") == Decimal("30000000")
        assert posting_service.account_balance("4001") == Decimal("30000000")
        assert posting_service.account_balance("1201") == Decimal("0")
