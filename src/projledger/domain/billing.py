"""Billing lifecycle: status transitions and their ledger postings."""

import logging
from datetime import date
from typing import Optional

from projledger.config import LedgerSettings
from projledger.database.base import Database
from projledger.domain.account import AccountService
from projledger.domain.entities import (
    AccountType,
    Billing,
    BillingStatus,
    Direction,
    PostingEvent,
    PostingResult,
    RevenueRecognition,
    StatusChange,
    StatusTransitionResult,
)
from projledger.domain.errors import (
    InvalidTransition,
    NotFoundError,
    ValidationError,
    billing_not_found,
    invalid_transition,
)
from projledger.domain.posting import PostingService

logger = logging.getLogger(__name__)

RECORD_TYPE = "billing"

VALID_TRANSITIONS: dict[BillingStatus, frozenset[BillingStatus]] = {
    BillingStatus.PENDING: frozenset({BillingStatus.UNPAID, BillingStatus.REJECTED}),
    BillingStatus.UNPAID: frozenset({BillingStatus.PAID, BillingStatus.REJECTED}),
    BillingStatus.PAID: frozenset(),
    BillingStatus.REJECTED: frozenset(),
}


def reverse_open_postings(
    posting: PostingService,
    source_type: str,
    source_id: int,
    reversal_date: date,
    description: str,
) -> list[PostingResult]:
    """Reverse every posting of a source record that is not yet reversed."""
    return [
        posting.reverse(correlation_id, reversal_date, description=description)
        for correlation_id in posting.open_postings(source_type, source_id)
    ]


class BillingService:
    """Moves billings through their lifecycle and posts the accounting effect."""

    def __init__(
        self,
        db: Database,
        settings: Optional[LedgerSettings] = None,
        posting: Optional[PostingService] = None,
    ):
        """Initialize billing service.

        Args:
            db: Database instance
            settings: Ledger settings, including the revenue recognition policy
            posting: Posting service (created from db if None)
        """
        self.db = db
        self.settings = settings or LedgerSettings()
        self.accounts = AccountService(db)
        self.posting = posting or PostingService(db, self.settings)

    def get_billing(self, billing_id: int) -> Optional[Billing]:
        return self.db.get_billing(billing_id)

    def transition(
        self,
        billing_id: int,
        new_status: BillingStatus,
        transition_date: date,
        cash_account_code: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> StatusTransitionResult:
        """Change the status of a billing.

        Under the ``on_issue`` policy, issuing (pending to unpaid) posts
        Receivable against Revenue and payment posts Cash/Bank against
        Receivable. Under ``on_payment``, issuing posts nothing and payment
        posts Cash/Bank against Revenue. Rejection reverses every posting of
        the billing that is not reversed yet.

        Args:
            billing_id: Billing ID
            new_status: Target status
            transition_date: Date of the postings
            cash_account_code: Cash or bank account receiving the payment
                (required when the target status is paid)
            notes: Optional notes stored in the status history

        Returns:
            Transition result with the postings made

        Raises:
            NotFoundError: If billing does not exist
            InvalidTransition: If the status change is not allowed
            ValidationError: If the cash account is missing or not an Asset
            AccountNotFound: If a configured account does not exist
        """
        new_status = BillingStatus(new_status)

        with self.db.transaction():
            billing = self.db.get_billing(billing_id, for_update=True)
            if billing is None:
                raise NotFoundError(billing_not_found(billing_id))

            old_status = billing.status
            if new_status not in VALID_TRANSITIONS[old_status]:
                raise InvalidTransition(
                    invalid_transition(RECORD_TYPE, old_status.value, new_status.value)
                )

            if new_status is BillingStatus.PAID:
                self._check_cash_account(cash_account_code)

            postings: list[PostingResult] = []
            if billing.post_journal_entries:
                postings = self._post_transition(billing, new_status, transition_date, cash_account_code)

            self.db.update_billing_status(billing_id, new_status.value)
            self.db.add_status_change(
                RECORD_TYPE, billing_id, old_status.value, new_status.value, notes
            )

        logger.info(
            f"Billing {billing_id} moved from {old_status.value} to {new_status.value} "
            f"({len(postings)} postings)"
        )
        return StatusTransitionResult(
            record_id=billing_id,
            old_status=old_status.value,
            new_status=new_status.value,
            postings=tuple(postings),
        )

    def history(self, billing_id: int) -> list[StatusChange]:
        """Return the status history of a billing, newest first.

        Raises:
            NotFoundError: If billing does not exist
        """
        if self.db.get_billing(billing_id) is None:
            raise NotFoundError(billing_not_found(billing_id))
        return self.db.list_status_changes(RECORD_TYPE, billing_id)

    def _check_cash_account(self, cash_account_code: Optional[str]) -> None:
        if not cash_account_code:
            raise ValidationError("A cash or bank account is required to mark a billing as paid")
        account = self.accounts.require_account(cash_account_code)
        if account.type is not AccountType.ASSET:
            raise ValidationError(
                f"Payment account '{cash_account_code}' must be an Asset account, "
                f"not {account.type.value}"
            )

    def _label(self, billing: Billing) -> str:
        project = self.db.get_project(billing.project_id)
        code = project.project_code if project is not None else str(billing.project_id)
        return f"Billing {billing.invoice or billing.id} for project {code}"

    def _post(
        self,
        billing: Billing,
        account_code: str,
        counter_account_code: str,
        transition_date: date,
        description: str,
    ) -> PostingResult:
        return self.posting.post(
            PostingEvent(
                date=transition_date,
                account_code=account_code,
                amount=billing.amount,
                direction=Direction.INCREASE,
                description=description,
                counter_account_code=counter_account_code,
                project_id=billing.project_id,
                source_type=RECORD_TYPE,
                source_id=billing.id,
            )
        )

    def _post_transition(
        self,
        billing: Billing,
        new_status: BillingStatus,
        transition_date: date,
        cash_account_code: Optional[str],
    ) -> list[PostingResult]:
        settings = self.settings
        label = self._label(billing)

        if new_status is BillingStatus.REJECTED:
            return reverse_open_postings(
                self.posting, RECORD_TYPE, billing.id, transition_date, f"{label} rejected"
            )

        if new_status is BillingStatus.UNPAID:
            if settings.revenue_recognition is RevenueRecognition.ON_PAYMENT:
                return []
            return [
                self._post(
                    billing,
                    settings.receivable_account_code,
                    settings.revenue_account_code,
                    transition_date,
                    f"{label} issued",
                )
            ]

        # Paid
        if settings.revenue_recognition is RevenueRecognition.ON_PAYMENT:
            counter = settings.revenue_account_code
        else:
            counter = settings.receivable_account_code
        return [self._post(billing, cash_account_code, counter, transition_date, f"{label} paid")]
