"""Straight-line depreciation engine for fixed assets."""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Callable, Iterator, Optional

from dateutil.relativedelta import relativedelta

from projledger.config import LedgerSettings
from projledger.database.base import Database
from projledger.domain.account import AccountService
from projledger.domain.entities import (
    AccountType,
    AssetDepreciationDetail,
    DepreciationBatchReport,
    DepreciationOutcome,
    DepreciationResult,
    Direction,
    FixedAsset,
    PostingEvent,
    ScheduleEntry,
    ScheduleGranularity,
    UPDATABLE_ASSET_FIELDS,
)
from projledger.domain.errors import (
    InconsistentAsset,
    NotFoundError,
    ValidationError,
    asset_not_found,
    inconsistent_asset,
)
from projledger.domain.posting import PostingService

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = Decimal("365.25")
DAYS_PER_MONTH = Decimal("30.44")
ZERO = Decimal("0")

SOURCE_TYPE = "fixed_asset"


def calculate_depreciation(asset: FixedAsset, as_of: date) -> DepreciationResult:
    """Compute straight-line depreciation of an asset as of a date.

    Accumulated depreciation grows by ``value / useful_life / 365.25`` per day
    since acquisition and is capped at the asset value. Dates before the
    acquisition date count as zero days.

    Args:
        asset: The fixed asset
        as_of: Valuation date

    Returns:
        Depreciation result
    """
    value = asset.value
    life = Decimal(asset.useful_life)
    days = max(0, (as_of - asset.acquisition_date).days)

    per_year = value / life
    per_month = per_year / 12
    per_day = per_year / DAYS_PER_YEAR

    # value * days / (life * 365.25) reaches value exactly once capped
    accumulated = min(value, value * days / (life * DAYS_PER_YEAR))
    book_value = max(ZERO, value - accumulated)

    years_elapsed = Decimal(days) / DAYS_PER_YEAR
    months_elapsed = Decimal(days) / DAYS_PER_MONTH

    return DepreciationResult(
        as_of=as_of,
        original_value=value,
        depreciation_per_year=per_year,
        depreciation_per_month=per_month,
        depreciation_per_day=per_day,
        days_elapsed=days,
        months_elapsed=months_elapsed,
        years_elapsed=years_elapsed,
        accumulated_depreciation=accumulated,
        book_value=book_value,
        remaining_years=max(ZERO, life - years_elapsed),
        remaining_months=max(ZERO, life * 12 - months_elapsed),
        is_fully_depreciated=book_value == ZERO or years_elapsed >= life,
    )


def period_start_for(day: date, granularity: ScheduleGranularity) -> date:
    """Return the first day of the calendar period containing a date."""
    if granularity is ScheduleGranularity.YEAR:
        return date(day.year, 1, 1)
    return date(day.year, day.month, 1)


class DepreciationSchedule:
    """Lazy depreciation schedule of one asset.

    Periods are calendar years or months, starting with the period that
    contains the acquisition date. Iterating again starts over from the
    first period. The last entry always ends at a book value of exactly 0.
    """

    def __init__(self, asset: FixedAsset, granularity: ScheduleGranularity = ScheduleGranularity.YEAR):
        self.asset = asset
        self.granularity = ScheduleGranularity(granularity)

    def __iter__(self) -> Iterator[ScheduleEntry]:
        return self._entries()

    @property
    def step(self) -> relativedelta:
        if self.granularity is ScheduleGranularity.YEAR:
            return relativedelta(years=1)
        return relativedelta(months=1)

    @property
    def full_period_amount(self) -> Decimal:
        per_year = self.asset.value / Decimal(self.asset.useful_life)
        if self.granularity is ScheduleGranularity.YEAR:
            return per_year
        return per_year / 12

    def _entries(self) -> Iterator[ScheduleEntry]:
        asset = self.asset
        full_amount = self.full_period_amount
        start = period_start_for(asset.acquisition_date, self.granularity)
        beginning_value = asset.value
        accumulated = ZERO
        period = 1

        while True:
            next_start = start + self.step
            result = calculate_depreciation(asset, next_start)
            period_depreciation = result.accumulated_depreciation - accumulated
            ratio = period_depreciation / full_amount if full_amount else ZERO

            yield ScheduleEntry(
                period=period,
                period_start=start,
                period_end=next_start - timedelta(days=1),
                beginning_value=beginning_value,
                period_depreciation=period_depreciation,
                accumulated_depreciation=result.accumulated_depreciation,
                ending_value=result.book_value,
                ratio=ratio,
            )

            if result.book_value == ZERO:
                return
            accumulated = result.accumulated_depreciation
            beginning_value = result.book_value
            start = next_start
            period += 1


def generate_schedule(
    asset: FixedAsset, granularity: ScheduleGranularity = ScheduleGranularity.YEAR
) -> DepreciationSchedule:
    """Return the restartable depreciation schedule of an asset."""
    return DepreciationSchedule(asset, granularity)


class DepreciationService:
    """Service for fixed assets and their depreciation."""

    def __init__(
        self,
        db: Database,
        settings: Optional[LedgerSettings] = None,
        posting: Optional[PostingService] = None,
    ):
        """Initialize depreciation service.

        Args:
            db: Database instance
            settings: Ledger settings (defaults are used if None)
            posting: Posting service (created from db if None)
        """
        self.db = db
        self.settings = settings or LedgerSettings()
        self.accounts = AccountService(db)
        self.posting = posting or PostingService(db, self.settings)

    def _check_account(self, code: Optional[str], expected: AccountType, role: str) -> None:
        if code is None:
            return
        account = self.accounts.require_account(code)
        if account.type is not expected:
            raise ValidationError(
                f"{role} account '{code}' must be of type {expected.value}, "
                f"not {account.type.value}"
            )

    def _validate_useful_life(self, useful_life: Any) -> int:
        if isinstance(useful_life, bool) or not isinstance(useful_life, int) or useful_life <= 0:
            raise ValidationError(f"Useful life must be a positive whole number of years, got {useful_life}")
        return useful_life

    def create_asset(
        self,
        asset_name: str,
        acquisition_date: date,
        value: Decimal,
        useful_life: int,
        accumulated_depreciation: Decimal = ZERO,
        category: Optional[str] = None,
        asset_account_code: Optional[str] = None,
        depreciation_expense_account_code: Optional[str] = None,
        accumulated_depreciation_account_code: Optional[str] = None,
        payment_account_code: Optional[str] = None,
    ) -> int:
        """Register a fixed asset.

        When ``payment_account_code`` is given, the purchase is posted as an
        increase of the fixed-asset account against the payment account in
        the same transaction.

        Args:
            asset_name: Asset name
            acquisition_date: Acquisition date
            value: Acquisition value (> 0)
            useful_life: Useful life in whole years (> 0)
            accumulated_depreciation: Opening accumulated depreciation, in [0, value]
            category: Optional asset category
            asset_account_code: Fixed-asset account
            depreciation_expense_account_code: Override of the depreciation expense account
            accumulated_depreciation_account_code: Override of the accumulated depreciation account
            payment_account_code: Account the purchase was paid from

        Returns:
            Asset ID

        Raises:
            ValidationError: If a value is out of range or an account has the wrong type
            AccountNotFound: If a referenced account does not exist
        """
        asset_name = asset_name.strip()
        if not asset_name:
            raise ValidationError("Asset name cannot be empty")
        value = Decimal(value)
        if value <= 0:
            raise ValidationError(f"Asset value must be positive, got {value}")
        useful_life = self._validate_useful_life(useful_life)
        accumulated_depreciation = Decimal(accumulated_depreciation)
        if accumulated_depreciation < 0 or accumulated_depreciation > value:
            raise ValidationError(
                f"Opening accumulated depreciation must be between 0 and {value}, "
                f"got {accumulated_depreciation}"
            )

        self._check_account(asset_account_code, AccountType.ASSET, "Fixed asset")
        self._check_account(depreciation_expense_account_code, AccountType.EXPENSE, "Depreciation expense")
        self._check_account(
            accumulated_depreciation_account_code, AccountType.CONTRA_ASSET, "Accumulated depreciation"
        )
        if payment_account_code is not None and asset_account_code is None:
            raise ValidationError("A fixed asset account is required to post the purchase")

        with self.db.transaction():
            asset_id = self.db.create_fixed_asset(
                asset_name=asset_name,
                acquisition_date=acquisition_date,
                value=value,
                useful_life=useful_life,
                accumulated_depreciation=accumulated_depreciation,
                book_value=value - accumulated_depreciation,
                category=category,
                asset_account_code=asset_account_code,
                depreciation_expense_account_code=depreciation_expense_account_code,
                accumulated_depreciation_account_code=accumulated_depreciation_account_code,
            )
            if payment_account_code is not None:
                self.posting.post(
                    PostingEvent(
                        date=acquisition_date,
                        account_code=asset_account_code,
                        amount=value,
                        direction=Direction.INCREASE,
                        description=f"Purchase of {asset_name}",
                        counter_account_code=payment_account_code,
                        source_type=SOURCE_TYPE,
                        source_id=asset_id,
                    )
                )

        logger.info(f"Created fixed asset {asset_id} ({asset_name}, value {value})")
        return asset_id

    def update_asset(self, asset_id: int, **changes: Any) -> FixedAsset:
        """Update descriptive fields of an asset.

        Accepted fields: asset_name, category, useful_life and the account
        overrides. The acquisition value never changes.

        Raises:
            NotFoundError: If asset does not exist
            ValidationError: If a field cannot be changed or is invalid
        """
        self.require_asset(asset_id)
        if "value" in changes:
            raise ValidationError("Asset value cannot be changed")
        unknown = set(changes) - set(UPDATABLE_ASSET_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown asset fields: {', '.join(sorted(unknown))}")

        if "asset_name" in changes:
            changes["asset_name"] = changes["asset_name"].strip()
            if not changes["asset_name"]:
                raise ValidationError("Asset name cannot be empty")
        if "useful_life" in changes:
            self._validate_useful_life(changes["useful_life"])
        self._check_account(changes.get("asset_account_code"), AccountType.ASSET, "Fixed asset")
        self._check_account(
            changes.get("depreciation_expense_account_code"), AccountType.EXPENSE, "Depreciation expense"
        )
        self._check_account(
            changes.get("accumulated_depreciation_account_code"),
            AccountType.CONTRA_ASSET,
            "Accumulated depreciation",
        )

        if changes:
            self.db.update_fixed_asset(asset_id, **changes)
        return self.require_asset(asset_id)

    def get_asset(self, asset_id: int) -> Optional[FixedAsset]:
        return self.db.get_fixed_asset(asset_id)

    def require_asset(self, asset_id: int) -> FixedAsset:
        asset = self.db.get_fixed_asset(asset_id)
        if asset is None:
            raise NotFoundError(asset_not_found(asset_id))
        return asset

    def list_assets(self, depreciable_only: bool = False) -> list[FixedAsset]:
        return self.db.list_fixed_assets(depreciable_only=depreciable_only)

    def depreciation_for(self, asset_id: int, as_of: date) -> DepreciationResult:
        """Compute depreciation of a stored asset without recording it.

        Raises:
            NotFoundError: If asset does not exist
        """
        return calculate_depreciation(self.require_asset(asset_id), as_of)

    def schedule_for(
        self, asset_id: int, granularity: ScheduleGranularity = ScheduleGranularity.YEAR
    ) -> DepreciationSchedule:
        """Return the depreciation schedule of a stored asset.

        Raises:
            NotFoundError: If asset does not exist
        """
        return generate_schedule(self.require_asset(asset_id), granularity)

    def _detail(
        self,
        asset: FixedAsset,
        outcome: DepreciationOutcome,
        new_accumulated: Optional[Decimal] = None,
        amount: Decimal = ZERO,
        correlation_id: Optional[str] = None,
    ) -> AssetDepreciationDetail:
        if new_accumulated is None:
            new_accumulated = asset.accumulated_depreciation
        return AssetDepreciationDetail(
            asset_id=asset.id,
            asset_name=asset.asset_name,
            outcome=outcome,
            previous_accumulated_depreciation=asset.accumulated_depreciation,
            new_accumulated_depreciation=new_accumulated,
            previous_book_value=asset.book_value,
            new_book_value=asset.value - new_accumulated,
            amount=amount,
            correlation_id=correlation_id,
        )

    def record_period_depreciation(self, asset_id: int, period_date: date) -> AssetDepreciationDetail:
        """Bring an asset's stored depreciation up to a date and post the difference.

        The asset row is locked, its stored accumulated depreciation is
        compared with a fresh calculation, and a difference above the
        configured tolerance is stored and posted as Expense against the
        accumulated depreciation account in one transaction. Recording twice
        for the same date posts once.

        Args:
            asset_id: Asset ID
            period_date: Date to depreciate up to

        Returns:
            Detail with outcome RECORDED, NOTHING_TO_DO or ALREADY_FULLY_DEPRECIATED

        Raises:
            NotFoundError: If asset does not exist
            InconsistentAsset: If stored accumulated depreciation exceeds the value
            AccountNotFound: If a depreciation account does not exist
        """
        with self.db.transaction():
            asset = self.db.get_fixed_asset(asset_id, for_update=True)
            if asset is None:
                raise NotFoundError(asset_not_found(asset_id))

            stored = asset.accumulated_depreciation
            if stored > asset.value:
                message = inconsistent_asset(asset_id, stored, asset.value)
                logger.error(message)
                raise InconsistentAsset(message)
            if stored >= asset.value:
                return self._detail(asset, DepreciationOutcome.ALREADY_FULLY_DEPRECIATED)

            fresh = calculate_depreciation(asset, period_date)
            delta = fresh.accumulated_depreciation - stored
            if delta <= self.settings.depreciation_tolerance:
                if delta < -self.settings.depreciation_tolerance:
                    logger.warning(
                        f"Fixed asset {asset_id} has stored depreciation {stored} above "
                        f"the calculated {fresh.accumulated_depreciation} as of {period_date}"
                    )
                return self._detail(asset, DepreciationOutcome.NOTHING_TO_DO)

            self.db.update_asset_depreciation(
                asset_id, fresh.accumulated_depreciation, fresh.book_value
            )
            result = self.posting.post(
                PostingEvent(
                    date=period_date,
                    account_code=(
                        asset.depreciation_expense_account_code
                        or self.settings.depreciation_expense_account_code
                    ),
                    amount=delta,
                    direction=Direction.INCREASE,
                    description=f"Depreciation of {asset.asset_name}",
                    counter_account_code=(
                        asset.accumulated_depreciation_account_code
                        or self.settings.accumulated_depreciation_account_code
                    ),
                    notes=f"Depreciation up to {period_date.isoformat()}",
                    source_type=SOURCE_TYPE,
                    source_id=asset_id,
                )
            )

        logger.info(f"Recorded depreciation of {delta} for fixed asset {asset_id} as of {period_date}")
        return self._detail(
            asset,
            DepreciationOutcome.RECORDED,
            new_accumulated=fresh.accumulated_depreciation,
            amount=delta,
            correlation_id=result.correlation_id,
        )

    def run_depreciation_batch(
        self, as_of: date, should_continue: Optional[Callable[[], bool]] = None
    ) -> DepreciationBatchReport:
        """Record depreciation for every asset with a positive book value.

        Each asset is processed in its own transaction; a failing asset is
        reported and does not stop the run. ``should_continue`` is checked
        before each asset; when it returns False the run stops and already
        committed assets stay committed.

        Args:
            as_of: Date to depreciate up to
            should_continue: Optional cancellation check

        Returns:
            Batch report
        """
        logger.info(f"Starting depreciation run as of {as_of}")
        details: list[AssetDepreciationDetail] = []
        processed = updated = errors = 0
        cancelled = False

        for asset in self.db.list_fixed_assets(depreciable_only=True):
            if should_continue is not None and not should_continue():
                cancelled = True
                logger.warning(f"Depreciation run cancelled after {processed} assets")
                break

            processed += 1
            try:
                detail = self.record_period_depreciation(asset.id, as_of)
            except Exception as e:
                errors += 1
                logger.exception(f"Depreciation failed for fixed asset {asset.id}: {e}")
                detail = AssetDepreciationDetail(
                    asset_id=asset.id,
                    asset_name=asset.asset_name,
                    outcome=DepreciationOutcome.FAILED,
                    previous_accumulated_depreciation=asset.accumulated_depreciation,
                    new_accumulated_depreciation=asset.accumulated_depreciation,
                    previous_book_value=asset.book_value,
                    new_book_value=asset.book_value,
                    error=str(e),
                )
            else:
                if detail.outcome is DepreciationOutcome.RECORDED:
                    updated += 1
            details.append(detail)

        report = DepreciationBatchReport(
            as_of=as_of,
            processed=processed,
            updated=updated,
            errors=errors,
            details=tuple(details),
            cancelled=cancelled,
        )
        logger.info(
            f"Depreciation run as of {as_of} finished: processed={processed} "
            f"updated={updated} errors={errors}"
        )
        return report
