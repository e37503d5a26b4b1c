"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional, Any
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from projledger.domain.entities import (
    Account,
    AccountType,
    CashflowActivity,
    CashflowCategory,
    LedgerEntry,
    NewLedgerEntry,
    FixedAsset,
    Project,
    ProjectCost,
    Billing,
    StatusChange,
)


class Database(ABC):
    """Abstract database interface for projledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Group writes into a single commit.

        Writes made inside the block are committed together when the outermost
        block exits, or rolled back if it raises. Nested blocks join the
        outer one.
        """
        pass

    # Account operations
    @abstractmethod
    def create_account(self, code: str, name: str, account_type: AccountType, category: str) -> str:
        """Create an account. Returns account code."""
        pass

    @abstractmethod
    def get_account(self, code: str) -> Optional[Account]:
        """Get account by code."""
        pass

    @abstractmethod
    def list_accounts(self, account_type: Optional[AccountType] = None) -> list[Account]:
        """List accounts ordered by code, optionally filtered by type."""
        pass

    @abstractmethod
    def update_account(
        self, code: str, name: Optional[str] = None, category: Optional[str] = None
    ) -> None:
        """Update account name and/or category. The code never changes."""
        pass

    @abstractmethod
    def delete_account(self, code: str) -> None:
        """Delete an account."""
        pass

    @abstractmethod
    def get_account_entry_count(self, code: str) -> int:
        """Get count of ledger entries referencing an account."""
        pass

    # Cashflow category operations
    @abstractmethod
    def set_cashflow_category(
        self, account_code: str, category: CashflowActivity, subcategory: Optional[str] = None
    ) -> None:
        """Create or replace the cashflow classification of an account."""
        pass

    @abstractmethod
    def get_cashflow_category(self, account_code: str) -> Optional[CashflowCategory]:
        """Get cashflow classification of an account."""
        pass

    @abstractmethod
    def list_cashflow_categories(
        self, category: Optional[CashflowActivity] = None
    ) -> list[CashflowCategory]:
        """List cashflow classifications, optionally filtered by activity."""
        pass

    # Ledger operations
    @abstractmethod
    def create_ledger_entries(self, entries: list[NewLedgerEntry]) -> list[LedgerEntry]:
        """Write ledger entries all together or not at all."""
        pass

    @abstractmethod
    def list_ledger_entries(
        self,
        account_code: Optional[str] = None,
        project_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        correlation_id: Optional[str] = None,
        source_type: Optional[str] = None,
        source_id: Optional[int] = None,
    ) -> list[LedgerEntry]:
        """List ledger entries with optional filters, oldest first."""
        pass

    @abstractmethod
    def is_reversed(self, correlation_id: str) -> bool:
        """Check if a posting has been reversed."""
        pass

    # Fixed asset operations
    @abstractmethod
    def create_fixed_asset(
        self,
        asset_name: str,
        acquisition_date: date,
        value: Decimal,
        useful_life: int,
        accumulated_depreciation: Decimal,
        book_value: Decimal,
        category: Optional[str] = None,
        asset_account_code: Optional[str] = None,
        depreciation_expense_account_code: Optional[str] = None,
        accumulated_depreciation_account_code: Optional[str] = None,
    ) -> int:
        """Create a fixed asset. Returns asset ID."""
        pass

    @abstractmethod
    def get_fixed_asset(self, asset_id: int, for_update: bool = False) -> Optional[FixedAsset]:
        """Get fixed asset by ID, optionally locking its row."""
        pass

    @abstractmethod
    def list_fixed_assets(self, depreciable_only: bool = False) -> list[FixedAsset]:
        """List fixed assets; depreciable_only keeps assets with book value > 0."""
        pass

    @abstractmethod
    def update_fixed_asset(self, asset_id: int, **fields: Any) -> None:
        """Update descriptive fields of a fixed asset."""
        pass

    @abstractmethod
    def update_asset_depreciation(
        self, asset_id: int, accumulated_depreciation: Decimal, book_value: Decimal
    ) -> None:
        """Store new accumulated depreciation and book value."""
        pass

    # Project operations
    @abstractmethod
    def create_project(
        self, project_code: str, name: str, total_value: Decimal, status: str, progress: Decimal
    ) -> int:
        """Create a project. Returns project ID."""
        pass

    @abstractmethod
    def get_project(self, project_id: int) -> Optional[Project]:
        """Get project by ID."""
        pass

    @abstractmethod
    def get_project_by_code(self, project_code: str) -> Optional[Project]:
        """Get project by project code."""
        pass

    @abstractmethod
    def list_projects(self, status: Optional[str] = None) -> list[Project]:
        """List projects, optionally filtered by status."""
        pass

    @abstractmethod
    def update_project(
        self, project_id: int, status: Optional[str] = None, progress: Optional[Decimal] = None
    ) -> None:
        """Update project status and/or progress."""
        pass

    @abstractmethod
    def create_project_cost(
        self,
        project_id: int,
        category: str,
        description: str,
        amount: Decimal,
        cost_date: date,
        status: str,
    ) -> int:
        """Create a project cost. Returns cost ID."""
        pass

    @abstractmethod
    def get_project_cost(self, cost_id: int, for_update: bool = False) -> Optional[ProjectCost]:
        """Get project cost by ID, optionally locking its row."""
        pass

    @abstractmethod
    def list_project_costs(self, project_id: int) -> list[ProjectCost]:
        """List costs of a project."""
        pass

    @abstractmethod
    def update_project_cost_status(self, cost_id: int, status: str) -> None:
        """Update project cost status."""
        pass

    @abstractmethod
    def create_billing(
        self,
        project_id: int,
        billing_date: date,
        amount: Decimal,
        status: str,
        percentage: Optional[Decimal] = None,
        invoice: Optional[str] = None,
        post_journal_entries: bool = True,
    ) -> int:
        """Create a billing. Returns billing ID."""
        pass

    @abstractmethod
    def get_billing(self, billing_id: int, for_update: bool = False) -> Optional[Billing]:
        """Get billing by ID, optionally locking its row."""
        pass

    @abstractmethod
    def list_billings(self, project_id: int) -> list[Billing]:
        """List billings of a project."""
        pass

    @abstractmethod
    def update_billing_status(self, billing_id: int, status: str) -> None:
        """Update billing status."""
        pass

    # Status history operations
    @abstractmethod
    def add_status_change(
        self,
        record_type: str,
        record_id: int,
        old_status: str,
        new_status: str,
        notes: Optional[str] = None,
    ) -> int:
        """Record a status change. Returns history row ID."""
        pass

    @abstractmethod
    def list_status_changes(self, record_type: str, record_id: int) -> list[StatusChange]:
        """List status changes of a record, newest first."""
        pass
