"""Posting engine: turns financial events into balanced ledger entries."""

import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Iterable, Optional

from projledger.config import LedgerSettings
from projledger.database.base import Database
from projledger.domain.account import AccountService
from projledger.domain.entities import (
    Account,
    AccountType,
    Direction,
    LedgerEntry,
    NewLedgerEntry,
    PostingEvent,
    PostingResult,
    Side,
    TrialBalance,
    TrialBalanceRow,
    direction_for,
    side_for,
)
from projledger.domain.errors import (
    AccountNotFound,
    ConflictError,
    InvalidCombination,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountSelector:
    """Describes which accounts may serve as a counter-account.

    ``cash`` restricts to Asset accounts whose category is one of the
    configured cash categories; ``categories`` restricts to the given
    account categories.
    """

    account_type: AccountType
    categories: Optional[tuple[str, ...]] = None
    cash: bool = False

    def matches(self, account: Account, cash_categories: Iterable[str]) -> bool:
        if account.type is not self.account_type:
            return False
        category = account.category.lower()
        if self.cash and category not in {c.lower() for c in cash_categories}:
            return False
        if self.categories is not None and category not in self.categories:
            return False
        return True


CASH = AccountSelector(AccountType.ASSET, cash=True)

DEFAULT_COUNTER_RULES: dict[tuple[AccountType, Direction], tuple[AccountSelector, ...]] = {
    (AccountType.ASSET, Direction.INCREASE): (
        AccountSelector(AccountType.LIABILITY),
        AccountSelector(AccountType.EQUITY),
    ),
    (AccountType.ASSET, Direction.DECREASE): (AccountSelector(AccountType.EXPENSE),),
    (AccountType.CONTRA_ASSET, Direction.INCREASE): (
        AccountSelector(AccountType.EXPENSE, categories=("depreciation",)),
        AccountSelector(AccountType.EXPENSE),
    ),
    (AccountType.CONTRA_ASSET, Direction.DECREASE): (AccountSelector(AccountType.ASSET),),
    (AccountType.LIABILITY, Direction.INCREASE): (CASH, AccountSelector(AccountType.ASSET)),
    (AccountType.LIABILITY, Direction.DECREASE): (CASH,),
    (AccountType.EQUITY, Direction.INCREASE): (CASH,),
    (AccountType.EQUITY, Direction.DECREASE): (CASH,),
    (AccountType.REVENUE, Direction.INCREASE): (CASH, AccountSelector(AccountType.ASSET)),
    (AccountType.REVENUE, Direction.DECREASE): (CASH, AccountSelector(AccountType.ASSET)),
    (AccountType.EXPENSE, Direction.INCREASE): (CASH, AccountSelector(AccountType.LIABILITY)),
    (AccountType.EXPENSE, Direction.DECREASE): (CASH,),
}

# Rules for cash and bank accounts, which take precedence over the Asset rows
CASH_COUNTER_RULES: dict[Direction, tuple[AccountSelector, ...]] = {
    Direction.INCREASE: (AccountSelector(AccountType.REVENUE),),
    Direction.DECREASE: (AccountSelector(AccountType.EXPENSE),),
}

# Last resort: an account of a type on the other side of the entry
OPPOSITE_SIDE_FALLBACK: dict[AccountType, AccountType] = {
    AccountType.ASSET: AccountType.LIABILITY,
    AccountType.CONTRA_ASSET: AccountType.EXPENSE,
    AccountType.LIABILITY: AccountType.ASSET,
    AccountType.EQUITY: AccountType.ASSET,
    AccountType.REVENUE: AccountType.ASSET,
    AccountType.EXPENSE: AccountType.ASSET,
}


class CounterAccountPolicy:
    """Infers the balancing account of a posting.

    The table maps ``(account type, direction)`` to an ordered tuple of
    selectors; the first selector that matches any account wins, and the
    lowest account code among its matches is used.
    """

    def __init__(
        self,
        rules: Optional[dict[tuple[AccountType, Direction], tuple[AccountSelector, ...]]] = None,
        cash_rules: Optional[dict[Direction, tuple[AccountSelector, ...]]] = None,
        cash_categories: Iterable[str] = ("cash", "bank"),
    ):
        self.rules = dict(DEFAULT_COUNTER_RULES if rules is None else rules)
        self.cash_rules = dict(CASH_COUNTER_RULES if cash_rules is None else cash_rules)
        self.cash_categories = tuple(c.lower() for c in cash_categories)

    def is_cash(self, account: Account) -> bool:
        return CASH.matches(account, self.cash_categories)

    def selectors_for(self, account: Account, direction: Direction) -> tuple[AccountSelector, ...]:
        """Return the ordered selectors for a primary account and direction."""
        if self.is_cash(account) and direction in self.cash_rules:
            return self.cash_rules[direction]
        return self.rules.get((account.type, direction), ())

    def resolve(self, primary: Account, direction: Direction, accounts: list[Account]) -> Account:
        """Choose the counter-account for a primary account.

        Args:
            primary: Account of the primary entry
            direction: Direction of the primary entry
            accounts: Chart of accounts ordered by code

        Returns:
            The counter-account

        Raises:
            AccountNotFound: If no account can balance the entry
        """
        candidates = [acc for acc in accounts if acc.code != primary.code]

        for selector in self.selectors_for(primary, direction):
            for account in candidates:
                if selector.matches(account, self.cash_categories):
                    return account

        fallback_type = OPPOSITE_SIDE_FALLBACK[primary.type]
        for account in candidates:
            if account.type is fallback_type:
                return account

        raise AccountNotFound(
            f"No counter-account found for {primary.type.value} account "
            f"'{primary.code}' ({direction.value})"
        )


@dataclass(frozen=True)
class CombinationRule:
    """A flagged pairing of account types."""

    name: str
    message: str
    applies: Callable[[AccountType, AccountType], bool]


def _pair(first: AccountType, second: Iterable[AccountType]) -> Callable[[AccountType, AccountType], bool]:
    others = frozenset(second)

    def applies(a: AccountType, b: AccountType) -> bool:
        return (a is first and b in others) or (b is first and a in others)

    return applies


DEFAULT_COMBINATION_RULES: tuple[CombinationRule, ...] = (
    CombinationRule(
        name="revenue_expense",
        message="Revenue posted against Expense bypasses the balance sheet",
        applies=_pair(AccountType.REVENUE, [AccountType.EXPENSE]),
    ),
    CombinationRule(
        name="contra_asset_pairing",
        message="ContraAsset accounts are normally paired with Expense or Asset accounts",
        applies=_pair(
            AccountType.CONTRA_ASSET,
            [AccountType.CONTRA_ASSET, AccountType.LIABILITY, AccountType.EQUITY, AccountType.REVENUE],
        ),
    ),
    CombinationRule(
        name="equity_income",
        message="Equity posted against Revenue or Expense skips the income statement",
        applies=_pair(AccountType.EQUITY, [AccountType.REVENUE, AccountType.EXPENSE]),
    ),
)


class CombinationRules:
    """Validates account-type pairings of a posting."""

    def __init__(self, rules: Optional[Iterable[CombinationRule]] = None):
        self.rules = tuple(DEFAULT_COMBINATION_RULES if rules is None else rules)

    def flagged(self, primary: Account, counter: Account) -> list[CombinationRule]:
        return [rule for rule in self.rules if rule.applies(primary.type, counter.type)]

    def check(self, primary: Account, counter: Account, confirm_unusual: bool = False) -> None:
        """Validate a pairing.

        Raises:
            ValidationError: If both entries use the same account
            InvalidCombination: If a rule flags the pairing and it is not confirmed
        """
        if primary.code == counter.code:
            raise ValidationError(f"Cannot post account '{primary.code}' against itself")

        flagged = self.flagged(primary, counter)
        if not flagged:
            return
        if confirm_unusual:
            for rule in flagged:
                logger.warning(
                    f"Confirmed unusual pairing {primary.code} ({primary.type.value}) / "
                    f"{counter.code} ({counter.type.value}): {rule.name}"
                )
            return
        rule = flagged[0]
        raise InvalidCombination(
            f"{rule.message}: {primary.code} ({primary.type.value}) / "
            f"{counter.code} ({counter.type.value}). Confirm to post anyway.",
            rule=rule.name,
        )


def counter_direction(primary_type: AccountType, direction: Direction, counter_type: AccountType) -> Direction:
    """Return the direction that puts the counter entry on the opposite side."""
    side = side_for(primary_type, direction)
    return direction_for(counter_type, side.opposite())


def natural_amount(entry: LedgerEntry) -> Decimal:
    """Signed effect of an entry on its account's natural balance."""
    return entry.amount if entry.direction is Direction.INCREASE else -entry.amount


class PostingService:
    """Service for posting financial events to the ledger."""

    def __init__(
        self,
        db: Database,
        settings: Optional[LedgerSettings] = None,
        policy: Optional[CounterAccountPolicy] = None,
        combination_rules: Optional[CombinationRules] = None,
    ):
        """Initialize posting service.

        Args:
            db: Database instance
            settings: Ledger settings (defaults are used if None)
            policy: Counter-account policy (built from settings if None)
            combination_rules: Account pairing rules (defaults if None)
        """
        self.db = db
        self.settings = settings or LedgerSettings()
        self.accounts = AccountService(db)
        self.policy = policy or CounterAccountPolicy(cash_categories=self.settings.cash_categories)
        self.combination_rules = combination_rules or CombinationRules()

    def infer_counter_account(self, account_code: str, direction: Direction) -> Account:
        """Return the account the policy would use to balance an entry.

        Raises:
            AccountNotFound: If the account or a counter-account is missing
        """
        primary = self.accounts.require_account(account_code)
        return self.policy.resolve(primary, Direction(direction), self.db.list_accounts())

    def post(self, event: PostingEvent, confirm_unusual: bool = False) -> PostingResult:
        """Post a financial event.

        Args:
            event: The event to post
            confirm_unusual: Post even if the account pairing is flagged

        Returns:
            Posting result with all created entries and their correlation id

        Raises:
            ValidationError: If amount is not positive, description is empty or
                the event posts an account against itself
            AccountNotFound: If an account does not exist or no counter-account
                can be inferred
            InvalidCombination: If the pairing is flagged and not confirmed
        """
        amount = Decimal(event.amount)
        if amount <= 0:
            raise ValidationError(f"Amount must be positive, got {amount}")
        description = event.description.strip()
        if not description:
            raise ValidationError("Description cannot be empty")

        direction = Direction(event.direction)
        primary = self.accounts.require_account(event.account_code)
        correlation_id = uuid.uuid4().hex

        if not event.create_counter_entry:
            entries = [
                NewLedgerEntry(
                    date=event.date,
                    account_code=primary.code,
                    direction=direction,
                    amount=amount,
                    description=description,
                    correlation_id=correlation_id,
                    project_id=event.project_id,
                    notes=event.notes,
                    source_type=event.source_type,
                    source_id=event.source_id,
                )
            ]
        else:
            if event.counter_account_code is not None:
                if event.counter_account_code == primary.code:
                    raise ValidationError(f"Cannot post account '{primary.code}' against itself")
                counter = self.accounts.require_account(event.counter_account_code)
            else:
                counter = self.policy.resolve(primary, direction, self.db.list_accounts())
                logger.debug(f"Inferred counter-account {counter.code} for {primary.code}")

            self.combination_rules.check(primary, counter, confirm_unusual)

            entries = [
                NewLedgerEntry(
                    date=event.date,
                    account_code=primary.code,
                    direction=direction,
                    amount=amount,
                    description=description,
                    correlation_id=correlation_id,
                    project_id=event.project_id,
                    notes=event.notes,
                    counterpart_code=counter.code,
                    source_type=event.source_type,
                    source_id=event.source_id,
                ),
                NewLedgerEntry(
                    date=event.date,
                    account_code=counter.code,
                    direction=counter_direction(primary.type, direction, counter.type),
                    amount=amount,
                    description=description,
                    correlation_id=correlation_id,
                    is_counter_entry=True,
                    project_id=event.project_id,
                    notes=f"Counter transaction for {primary.name} ({primary.code})",
                    counterpart_code=primary.code,
                    source_type=event.source_type,
                    source_id=event.source_id,
                ),
            ]

        written = self.db.create_ledger_entries(entries)
        logger.info(
            f"Posted {amount} {direction.value} to {primary.code} "
            f"({len(written)} entries, correlation {correlation_id})"
        )
        return PostingResult(correlation_id=correlation_id, entries=tuple(written))

    def reverse(
        self,
        correlation_id: str,
        reversal_date: date,
        description: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> PostingResult:
        """Post equal and opposite entries for every entry of a posting.

        Args:
            correlation_id: Correlation id of the posting to reverse
            reversal_date: Date of the reversal entries
            description: Description (defaults to "Reversal of <original>")
            notes: Optional notes

        Returns:
            Posting result of the reversal

        Raises:
            NotFoundError: If no posting has this correlation id
            ValidationError: If the posting is itself a reversal
            ConflictError: If the posting has already been reversed
        """
        original = self.db.list_ledger_entries(correlation_id=correlation_id)
        if not original:
            raise NotFoundError(f"Posting '{correlation_id}' not found")
        if any(entry.reverses_correlation_id for entry in original):
            raise ValidationError(f"Posting '{correlation_id}' is a reversal and cannot be reversed")
        if self.db.is_reversed(correlation_id):
            raise ConflictError(f"Posting '{correlation_id}' has already been reversed")

        new_correlation_id = uuid.uuid4().hex
        entries = [
            NewLedgerEntry(
                date=reversal_date,
                account_code=entry.account_code,
                direction=entry.direction.opposite(),
                amount=entry.amount,
                description=description or f"Reversal of {entry.description}",
                correlation_id=new_correlation_id,
                is_counter_entry=entry.is_counter_entry,
                project_id=entry.project_id,
                notes=notes,
                counterpart_code=entry.counterpart_code,
                reverses_correlation_id=correlation_id,
                source_type=entry.source_type,
                source_id=entry.source_id,
            )
            for entry in original
        ]
        written = self.db.create_ledger_entries(entries)
        logger.info(f"Reversed posting {correlation_id} with {new_correlation_id}")
        return PostingResult(correlation_id=new_correlation_id, entries=tuple(written))

    def open_postings(self, source_type: str, source_id: int) -> list[str]:
        """Return correlation ids of a source's postings that are not reversed.

        Reversal postings themselves are excluded.
        """
        seen: list[str] = []
        for entry in self.db.list_ledger_entries(source_type=source_type, source_id=source_id):
            if entry.reverses_correlation_id or entry.correlation_id in seen:
                continue
            seen.append(entry.correlation_id)
        return [cid for cid in seen if not self.db.is_reversed(cid)]

    def list_entries(
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
        return self.db.list_ledger_entries(
            account_code=account_code,
            project_id=project_id,
            start_date=start_date,
            end_date=end_date,
            correlation_id=correlation_id,
            source_type=source_type,
            source_id=source_id,
        )

    def account_balance(self, account_code: str, as_of: Optional[date] = None) -> Decimal:
        """Natural balance of an account (increases minus decreases).

        Raises:
            AccountNotFound: If account does not exist
        """
        self.accounts.require_account(account_code)
        entries = self.db.list_ledger_entries(account_code=account_code, end_date=as_of)
        return sum((natural_amount(e) for e in entries), Decimal("0"))

    def trial_balance(self, as_of: Optional[date] = None) -> TrialBalance:
        """Derive debit/credit balances of every account with entries.

        Args:
            as_of: Include entries up to and including this date (all if None)

        Returns:
            Trial balance with per-account rows and totals
        """
        balances: dict[str, Decimal] = {}
        for entry in self.db.list_ledger_entries(end_date=as_of):
            balances[entry.account_code] = balances.get(entry.account_code, Decimal("0")) + natural_amount(entry)

        rows = []
        total_debit = Decimal("0")
        total_credit = Decimal("0")
        for account in self.db.list_accounts():
            if account.code not in balances:
                continue
            net = balances[account.code]
            side = side_for(account.type, Direction.INCREASE)
            if net < 0:
                side = side.opposite()
                net = -net
            debit = net if side is Side.DEBIT else Decimal("0")
            credit = net if side is Side.CREDIT else Decimal("0")
            total_debit += debit
            total_credit += credit
            rows.append(
                TrialBalanceRow(
                    account_code=account.code,
                    account_name=account.name,
                    account_type=account.type,
                    debit=debit,
                    credit=credit,
                )
            )

        return TrialBalance(
            as_of=as_of, rows=tuple(rows), total_debit=total_debit, total_credit=total_credit
        )
