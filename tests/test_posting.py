"""Tests for the posting engine."""

import pytest
from datetime import date
from decimal import Decimal

from projledger.domain.entities import (
    AccountType,
    Direction,
    PostingEvent,
    Side,
    side_for,
)
from projledger.domain.errors import (
    AccountNotFound,
    ConflictError,
    InvalidCombination,
    NotFoundError,
    ValidationError,
)
from projledger.domain.posting import CombinationRules, CounterAccountPolicy


def _event(account_code="6101", amount="7500000", direction=Direction.INCREASE, **kwargs):
    return PostingEvent(
        date=kwargs.pop("event_date", date(2025, 3, 1)),
        account_code=account_code,
        amount=Decimal(amount),
        direction=direction,
        description=kwargs.pop("description", "Office rent March"),
        **kwargs,
    )


class TestCounterAccountPolicy:
    """Tests for counter-account inference."""

    def test_expense_paid_from_cash(self, chart, posting_service):
        """Test that an expense increase is balanced against the first cash account."""
        counter = posting_service.infer_counter_account("6101", Direction.INCREASE)
        assert counter.code == "1101"

    def test_cash_increase_uses_revenue(self, chart, posting_service):
        """Test that cash accounts use the cash rules before the asset rules."""
        counter = posting_service.infer_counter_account("1102", Direction.INCREASE)
        assert counter.type is AccountType.REVENUE

    def test_non_cash_asset_increase_uses_liability(self, chart, posting_service):
        """Test that a non-cash asset increase is financed by a liability."""
        counter = posting_service.infer_counter_account("1501", Direction.INCREASE)
        assert counter.code == "2101"

    def test_contra_asset_prefers_depreciation_expense(self, chart, posting_service):
        """Test that accumulated depreciation is balanced by depreciation expense."""
        counter = posting_service.infer_counter_account("1601", Direction.INCREASE)
        assert counter.code == "6105"

    def test_every_account_has_a_counter(self, chart, posting_service):
        """Test that the default chart yields a counter-account for every case."""
        for account in chart.list_accounts():
            for direction in Direction:
                counter = posting_service.infer_counter_account(account.code, direction)
                assert counter.code != account.code

    def test_fallback_to_opposite_side_type(self, account_service, posting_service):
        """Test the fallback when no selector matches."""
        account_service.create_account("2102", "Accounts Payable", AccountType.LIABILITY)
        account_service.create_account("1501", "Machine", AccountType.ASSET, "fixed asset")

        counter = posting_service.infer_counter_account("2102", Direction.DECREASE)
        assert counter.code == "1501"

    def test_no_counter_account(self, account_service, posting_service):
        """Test that inference fails on a chart with a single account."""
        account_service.create_account("6101", "Office", AccountType.EXPENSE)
        with pytest.raises(AccountNotFound):
            posting_service.infer_counter_account("6101", Direction.INCREASE)

    def test_custom_cash_categories(self, chart):
        """Test that the policy honors configured cash categories."""
        policy = CounterAccountPolicy(cash_categories=("bank",))
        accounts = chart.list_accounts()
        expense = chart.get_account("6101")

        assert policy.resolve(expense, Direction.INCREASE, accounts).code == "1102"


class TestPost:
    """Tests for PostingService.post."""

    def test_post_with_inferred_counter(self, chart, posting_service):
        """Test that an expense posting produces two balancing entries."""
        result = posting_service.post(_event())

        assert len(result.entries) == 2
        primary, counter = result.entries
        assert primary.account_code == "6101"
        assert counter.account_code == "1101"
        assert counter.is_counter_entry
        assert primary.correlation_id == counter.correlation_id == result.correlation_id
        assert primary.counterpart_code == "1101"
        assert counter.counterpart_code == "6101"
        assert counter.notes == "Counter transaction for Office Operating Expense (6101)"
        assert primary.amount == counter.amount == Decimal("7500000")

        primary_side = side_for(AccountType.EXPENSE, primary.direction)
        counter_side = side_for(AccountType.ASSET, counter.direction)
        assert primary_side is Side.DEBIT
        assert counter_side is Side.CREDIT

        balance = posting_service.trial_balance()
        assert balance.is_balanced
        assert balance.total_debit == Decimal("7500000")

    def test_post_with_explicit_counter(self, chart, posting_service):
        """Test posting against a chosen counter-account."""
        result = posting_service.post(
            _event("3101", "500000000", description="Paid-in capital", counter_account_code="1102")
        )
        assert result.counter.account_code == "1102"
        assert result.counter.direction is Direction.INCREASE

    def test_single_entry(self, chart, posting_service):
        """Test that a single-sided posting writes one entry."""
        result = posting_service.post(_event(create_counter_entry=False))

        assert len(result.entries) == 1
        assert result.counter is None
        assert not posting_service.trial_balance().is_balanced

    def test_non_positive_amount_rejected(self, chart, posting_service):
        """Test that amounts must be positive."""
        with pytest.raises(ValidationError):
            posting_service.post(_event(amount="0"))
        with pytest.raises(ValidationError):
            posting_service.post(_event(amount="-5"))

    def test_empty_description_rejected(self, chart, posting_service):
        """Test that a description is required."""
        with pytest.raises(ValidationError):
            posting_service.post(_event(description="   "))

    def test_unknown_account(self, chart, posting_service):
        """Test posting to a missing account."""
        with pytest.raises(AccountNotFound):
            posting_service.post(_event("9999"))

    def test_self_posting_rejected(self, chart, posting_service):
        """Test that an account cannot be posted against itself."""
        with pytest.raises(ValidationError):
            posting_service.post(_event(counter_account_code="6101"))

    def test_unusual_pairing_needs_confirmation(self, chart, posting_service):
        """Test that revenue against expense is flagged until confirmed."""
        event = _event("4001", description="Netting", counter_account_code="6101")

        with pytest.raises(InvalidCombination) as exc_info:
            posting_service.post(event)
        assert exc_info.value.rule == "revenue_expense"
        assert posting_service.list_entries() == []

        result = posting_service.post(event, confirm_unusual=True)
        assert len(result.entries) == 2

    def test_contra_asset_against_liability_flagged(self, chart):
        """Test the contra-asset pairing rule."""
        rules = CombinationRules()
        with pytest.raises(InvalidCombination) as exc_info:
            rules.check(chart.get_account("1601"), chart.get_account("2102"))
        assert exc_info.value.rule == "contra_asset_pairing"

        rules.check(chart.get_account("1601"), chart.get_account("6105"))

    def test_source_and_project_are_recorded(self, chart, posting_service, sample_project):
        """Test that source references are stored on every entry."""
        result = posting_service.post(_event(project_id=sample_project.id, source_type="project_cost", source_id=3))
        for entry in result.entries:
            assert entry.project_id == sample_project.id
            assert entry.source_type == "project_cost"
            assert entry.source_id == 3


class TestReverse:
    """Tests for reversing postings."""

    def test_reverse_restores_balances(self, chart, posting_service):
        """Test that a reversal brings both accounts back to zero."""
        original = posting_service.post(_event())

        reversal = posting_service.reverse(original.correlation_id, date(2025, 3, 5))

        assert len(reversal.entries) == 2
        assert reversal.correlation_id != original.correlation_id
        for entry in reversal.entries:
            assert entry.reverses_correlation_id == original.correlation_id
        assert reversal.primary.description == "Reversal of Office rent March"
        assert posting_service.account_balance("6101") == Decimal("0")
        assert posting_service.account_balance("1101") == Decimal("0")

    def test_reverse_twice_conflicts(self, chart, posting_service):
        """Test that a posting can only be reversed once."""
        original = posting_service.post(_event())
        posting_service.reverse(original.correlation_id, date(2025, 3, 5))

        with pytest.raises(ConflictError):
            posting_service.reverse(original.correlation_id, date(2025, 3, 6))

    def test_reversal_cannot_be_reversed(self, chart, posting_service):
        """Test that reversal postings are final."""
        original = posting_service.post(_event())
        reversal = posting_service.reverse(original.correlation_id, date(2025, 3, 5))

        with pytest.raises(ValidationError):
            posting_service.reverse(reversal.correlation_id, date(2025, 3, 6))

    def test_reverse_unknown_posting(self, chart, posting_service):
        """Test reversing a missing correlation id."""
        with pytest.raises(NotFoundError):
            posting_service.reverse("missing", date(2025, 3, 5))

    def test_open_postings(self, chart, posting_service):
        """Test that open_postings skips reversed postings and reversals."""
        first = posting_service.post(_event(source_type="billing", source_id=1))
        second = posting_service.post(_event(source_type="billing", source_id=1))
        posting_service.reverse(first.correlation_id, date(2025, 3, 5))

        assert posting_service.open_postings("billing", 1) == [second.correlation_id]
        assert posting_service.open_postings("billing", 2) == []


class TestBalances:
    """Tests for balances and the trial balance."""

    def test_account_balance_as_of(self, chart, posting_service):
        """Test natural balances with an as-of date."""
        posting_service.post(_event("4001", "30000000", description="Invoice 1", event_date=date(2025, 1, 31)))
        posting_service.post(_event("4001", "20000000", description="Invoice 2", event_date=date(2025, 2, 28)))

        assert posting_service.account_balance("4001") == Decimal("50000000")
        assert posting_service.account_balance("4001", as_of=date(2025, 1, 31)) == Decimal("30000000")
        assert posting_service.account_balance("1101") == Decimal("50000000")

    def test_amounts_reload_exactly(self, chart, posting_service):
        """Test that stored amounts keep every digit."""
        result = posting_service.post(_event("4001", "12345678.9", description="Invoice 3"))

        entries = posting_service.list_entries(account_code="4001")
        assert [e.amount for e in entries] == [Decimal("12345678.9")]
        assert posting_service.account_balance("1101") == Decimal("12345678.9")
        assert posting_service.trial_balance().total_debit == result.primary.amount

    def test_account_balance_unknown_account(self, chart, posting_service):
        """Test balance of a missing account."""
        with pytest.raises(AccountNotFound):
            posting_service.account_balance("9999")

    def test_trial_balance_rows(self, chart, posting_service):
        """Test that the trial balance lists accounts with entries in code order."""
        posting_service.post(_event("3101", "500000000", description="Capital", counter_account_code="1102"))
        posting_service.post(_event())

        balance = posting_service.trial_balance()

        assert [row.account_code for row in balance.rows] == ["1101", "1102", "3101", "6101"]
        rows = {row.account_code: row for row in balance.rows}
        assert rows["1101"].credit == Decimal("7500000")
        assert rows["1102"].debit == Decimal("500000000")
        assert rows["3101"].credit == Decimal("500000000")
        assert rows["6101"].debit == Decimal("7500000")
        assert balance.is_balanced
        assert balance.total_debit == Decimal("507500000")

    def test_trial_balance_as_of_excludes_later_entries(self, chart, posting_service):
        """Test the as-of cutoff of the trial balance."""
        posting_service.post(_event(event_date=date(2025, 4, 1)))

        balance = posting_service.trial_balance(as_of=date(2025, 3, 31))
        assert balance.rows == ()
        assert balance.total_debit == Decimal("0")
