"""Account registry domain service."""

from typing import Iterable, Optional
from projledger.database.base import Database
from projledger.domain.entities import (
    Account as AccountEntity,
    AccountType,
    CashflowActivity,
    CashflowCategory,
)
from projledger.domain.errors import (
    AccountNotFound,
    ConflictError,
    DependencyError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
    duplicate_account_code,
)


class AccountService:
    """Service for managing the chart of accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self, code: str, name: str, account_type: AccountType, category: str = ""
    ) -> str:
        """Create a new account.

        Args:
            code: Unique account code (e.g., "1101")
            name: Account name
            account_type: Account type
            category: Free-form category (e.g., "cash", "bank", "receivable")

        Returns:
            Account code

        Raises:
            ValidationError: If code or name is empty
            ConflictError: If an account with the same code exists
        """
        code = code.strip()
        name = name.strip()
        if not code:
            raise ValidationError("Account code cannot be empty")
        if not name:
            raise ValidationError("Account name cannot be empty")

        if self.db.get_account(code) is not None:
            raise ConflictError(duplicate_account_code(code))

        return self.db.create_account(
            code=code,
            name=name,
            account_type=AccountType(account_type),
            category=category.strip().lower(),
        )

    def get_account(self, code: str) -> Optional[AccountEntity]:
        """Get account by code.

        Args:
            code: Account code

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(code)

    def require_account(self, code: str) -> AccountEntity:
        """Get account by code, failing when it does not exist.

        Raises:
            AccountNotFound: If no account has this code
        """
        account = self.db.get_account(code)
        if account is None:
            raise AccountNotFound(account_not_found(code))
        return account

    def list_accounts(self, account_type: Optional[AccountType] = None) -> list[AccountEntity]:
        """List accounts ordered by code.

        Args:
            account_type: Optional type filter

        Returns:
            List of account entities
        """
        return self.db.list_accounts(account_type)

    def find_accounts(
        self, account_type: AccountType, categories: Optional[Iterable[str]] = None
    ) -> list[AccountEntity]:
        """Find accounts of a type, optionally restricted to categories.

        Args:
            account_type: Account type
            categories: Categories to match (case-insensitive)

        Returns:
            Matching accounts ordered by code
        """
        accounts = self.db.list_accounts(account_type)
        if categories is None:
            return accounts
        wanted = {c.lower() for c in categories}
        return [acc for acc in accounts if acc.category.lower() in wanted]

    def update_account(
        self, code: str, name: Optional[str] = None, category: Optional[str] = None
    ) -> None:
        """Rename or re-categorize an account. The code never changes.

        Raises:
            AccountNotFound: If account does not exist
            ValidationError: If the new name is empty
        """
        self.require_account(code)
        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Account name cannot be empty")
        if category is not None:
            category = category.strip().lower()
        self.db.update_account(code, name=name, category=category)

    def delete_account(self, code: str) -> None:
        """Delete an account that no ledger entry references.

        Raises:
            AccountNotFound: If account does not exist
            DependencyError: If ledger entries reference the account
        """
        self.require_account(code)
        entry_count = self.db.get_account_entry_count(code)
        if entry_count > 0:
            raise DependencyError(account_delete_blocked(code, entry_count))
        self.db.delete_account(code)

    def is_cash_account(self, account: AccountEntity, cash_categories: Iterable[str]) -> bool:
        """Check if an account is a cash or bank asset."""
        return account.type is AccountType.ASSET and account.category.lower() in {
            c.lower() for c in cash_categories
        }

    # Cashflow classification
    def set_cashflow_category(
        self,
        account_code: str,
        category: CashflowActivity,
        subcategory: Optional[str] = None,
    ) -> None:
        """Set the cashflow classification of an account.

        Raises:
            AccountNotFound: If account does not exist
            ValueError: If category is not a cashflow activity
        """
        self.require_account(account_code)
        self.db.set_cashflow_category(account_code, CashflowActivity(category), subcategory)

    def get_cashflow_category(self, account_code: str) -> Optional[CashflowCategory]:
        return self.db.get_cashflow_category(account_code)

    def list_cashflow_categories(
        self, category: Optional[CashflowActivity] = None
    ) -> list[CashflowCategory]:
        return self.db.list_cashflow_categories(category)

    def group_by_cashflow(self) -> dict[CashflowActivity, list[AccountEntity]]:
        """Group classified accounts by cashflow activity.

        Returns:
            Dict mapping each activity to its accounts, ordered by code
        """
        groups: dict[CashflowActivity, list[AccountEntity]] = {
            activity: [] for activity in CashflowActivity
        }
        for row in self.db.list_cashflow_categories():
            account = self.db.get_account(row.account_code)
            if account is not None:
                groups[row.category].append(account)
        return groups
