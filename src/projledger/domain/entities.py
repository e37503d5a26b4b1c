"""Domain model entities for projledger.

These are pure data classes representing accounting concepts, independent of
database schema. Storage rows are converted into these by the mapper layer so
that the engines never touch ORM objects.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class AccountType(str, Enum):
    """Account type in the chart of accounts."""

    ASSET = "Asset"
    CONTRA_ASSET = "ContraAsset"
    LIABILITY = "Liability"
    EQUITY = "Equity"
    REVENUE = "Revenue"
    EXPENSE = "Expense"

    @property
    def is_debit_normal(self) -> bool:
        """True when an increase of this account type is a debit."""
        return self in (AccountType.ASSET, AccountType.EXPENSE)


class Direction(str, Enum):
    """Effect of a ledger entry on the account's natural balance."""

    INCREASE = "increase"
    DECREASE = "decrease"

    def opposite(self) -> "Direction":
        return Direction.DECREASE if self is Direction.INCREASE else Direction.INCREASE


class Side(str, Enum):
    """Debit/credit side, derived from account type and direction."""

    DEBIT = "debit"
    CREDIT = "credit"

    def opposite(self) -> "Side":
        return Side.CREDIT if self is Side.DEBIT else Side.DEBIT


def side_for(account_type: AccountType, direction: Direction) -> Side:
    """Return the debit/credit side of an entry."""
    if account_type.is_debit_normal:
        return Side.DEBIT if direction is Direction.INCREASE else Side.CREDIT
    return Side.CREDIT if direction is Direction.INCREASE else Side.DEBIT


def direction_for(account_type: AccountType, side: Side) -> Direction:
    """Return the direction that puts an entry of this account type on a side."""
    if side_for(account_type, Direction.INCREASE) is side:
        return Direction.INCREASE
    return Direction.DECREASE


class CashflowActivity(str, Enum):
    """Cashflow statement grouping."""

    OPERATING = "operating"
    INVESTING = "investing"
    FINANCING = "financing"


class ProjectStatus(str, Enum):
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CostStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class BillingStatus(str, Enum):
    PENDING = "pending"
    UNPAID = "unpaid"
    PAID = "paid"
    REJECTED = "rejected"


class RevenueRecognition(str, Enum):
    """When billing revenue is recognized in the ledger."""

    ON_ISSUE = "on_issue"
    ON_PAYMENT = "on_payment"


class ScheduleGranularity(str, Enum):
    YEAR = "year"
    MONTH = "month"


class DepreciationOutcome(str, Enum):
    """Result of recording depreciation for one asset."""

    RECORDED = "recorded"
    NOTHING_TO_DO = "nothing_to_do"
    ALREADY_FULLY_DEPRECIATED = "already_fully_depreciated"
    FAILED = "failed"


@dataclass(frozen=True)
class Account:
    """Chart of accounts entry."""

    code: str
    name: str
    type: AccountType
    category: str
    created_at: datetime


@dataclass(frozen=True)
class CashflowCategory:
    """Cashflow classification of one account."""

    account_code: str
    category: CashflowActivity
    subcategory: Optional[str]


@dataclass(frozen=True)
class LedgerEntry:
    """A single posted ledger entry."""

    id: int
    date: date
    account_code: str
    direction: Direction
    amount: Decimal
    description: str
    correlation_id: str
    is_counter_entry: bool
    project_id: Optional[int]
    notes: Optional[str]
    counterpart_code: Optional[str]
    reverses_correlation_id: Optional[str]
    source_type: Optional[str]
    source_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class NewLedgerEntry:
    """Ledger entry data before it is written."""

    date: date
    account_code: str
    direction: Direction
    amount: Decimal
    description: str
    correlation_id: str
    is_counter_entry: bool = False
    project_id: Optional[int] = None
    notes: Optional[str] = None
    counterpart_code: Optional[str] = None
    reverses_correlation_id: Optional[str] = None
    source_type: Optional[str] = None
    source_id: Optional[int] = None


@dataclass(frozen=True)
class PostingEvent:
    """A financial event submitted to the posting engine."""

    date: date
    account_code: str
    amount: Decimal
    direction: Direction
    description: str
    create_counter_entry: bool = True
    counter_account_code: Optional[str] = None
    project_id: Optional[int] = None
    notes: Optional[str] = None
    source_type: Optional[str] = None
    source_id: Optional[int] = None


@dataclass(frozen=True)
class PostingResult:
    """Entries written for one posting."""

    correlation_id: str
    entries: tuple[LedgerEntry, ...]

    @property
    def primary(self) -> LedgerEntry:
        return self.entries[0]

    @property
    def counter(self) -> Optional[LedgerEntry]:
        return self.entries[1] if len(self.entries) > 1 else None


@dataclass(frozen=True)
class TrialBalanceRow:
    account_code: str
    account_name: str
    account_type: AccountType
    debit: Decimal
    credit: Decimal


@dataclass(frozen=True)
class TrialBalance:
    as_of: Optional[date]
    rows: tuple[TrialBalanceRow, ...]
    total_debit: Decimal
    total_credit: Decimal

    @property
    def is_balanced(self) -> bool:
        return self.total_debit == self.total_credit


@dataclass(frozen=True)
class FixedAsset:
    """Fixed asset domain entity."""

    id: int
    asset_name: str
    acquisition_date: date
    value: Decimal
    useful_life: int
    accumulated_depreciation: Decimal
    book_value: Decimal
    category: Optional[str] = None
    asset_account_code: Optional[str] = None
    depreciation_expense_account_code: Optional[str] = None
    accumulated_depreciation_account_code: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Fixed asset fields that may change after creation; value never does
UPDATABLE_ASSET_FIELDS = (
    "asset_name",
    "category",
    "useful_life",
    "asset_account_code",
    "depreciation_expense_account_code",
    "accumulated_depreciation_account_code",
)


@dataclass(frozen=True)
class DepreciationResult:
    """Straight-line depreciation of an asset as of a date."""

    as_of: date
    original_value: Decimal
    depreciation_per_year: Decimal
    depreciation_per_month: Decimal
    depreciation_per_day: Decimal
    days_elapsed: int
    months_elapsed: Decimal
    years_elapsed: Decimal
    accumulated_depreciation: Decimal
    book_value: Decimal
    remaining_years: Decimal
    remaining_months: Decimal
    is_fully_depreciated: bool


@dataclass(frozen=True)
class ScheduleEntry:
    """One period of a depreciation schedule."""

    period: int
    period_start: date
    period_end: date
    beginning_value: Decimal
    period_depreciation: Decimal
    accumulated_depreciation: Decimal
    ending_value: Decimal
    ratio: Decimal


@dataclass(frozen=True)
class AssetDepreciationDetail:
    """Outcome of a depreciation run for one asset."""

    asset_id: int
    asset_name: str
    outcome: DepreciationOutcome
    previous_accumulated_depreciation: Decimal
    new_accumulated_depreciation: Decimal
    previous_book_value: Decimal
    new_book_value: Decimal
    amount: Decimal = Decimal("0")
    correlation_id: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class DepreciationBatchReport:
    """Report of a batch depreciation job."""

    as_of: date
    processed: int
    updated: int
    errors: int
    details: tuple[AssetDepreciationDetail, ...]
    cancelled: bool = False


@dataclass(frozen=True)
class Project:
    """Project domain entity."""

    id: int
    project_code: str
    name: str
    total_value: Decimal
    status: ProjectStatus
    progress: Decimal
    created_at: datetime


@dataclass(frozen=True)
class ProjectCost:
    id: int
    project_id: int
    category: str
    description: str
    amount: Decimal
    date: date
    status: CostStatus
    created_at: datetime


@dataclass(frozen=True)
class Billing:
    id: int
    project_id: int
    billing_date: date
    amount: Decimal
    status: BillingStatus
    percentage: Optional[Decimal] = None
    invoice: Optional[str] = None
    post_journal_entries: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class StatusChange:
    """History row for a billing or project cost status change."""

    id: int
    record_type: str
    record_id: int
    old_status: str
    new_status: str
    changed_at: datetime
    notes: Optional[str]


@dataclass(frozen=True)
class StatusTransitionResult:
    """Outcome of a billing or cost status transition."""

    record_id: int
    old_status: str
    new_status: str
    postings: tuple[PostingResult, ...] = ()


@dataclass(frozen=True)
class ProjectWip:
    """Signed WIP valuation of one project."""

    project_id: int
    project_code: str
    status: ProjectStatus
    total_costs: Decimal
    total_billed: Decimal
    wip_value: Decimal

    @property
    def is_over_billed(self) -> bool:
        return self.wip_value < 0


@dataclass(frozen=True)
class WipAggregate:
    """Balance-sheet WIP total and data-quality warnings."""

    total_wip: Decimal
    total_billings_in_excess: Decimal
    projects: tuple[ProjectWip, ...]
    warnings: tuple[ProjectWip, ...] = field(default_factory=tuple)
