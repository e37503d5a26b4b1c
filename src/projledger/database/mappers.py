"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including the string columns that
back the domain enums.
"""

from decimal import Decimal
from typing import Optional

from projledger.domain import entities as domain
from projledger.database.models import (
    Account as ORMAccount,
    CashflowCategory as ORMCashflowCategory,
    LedgerEntry as ORMLedgerEntry,
    FixedAsset as ORMFixedAsset,
    Project as ORMProject,
    ProjectCost as ORMProjectCost,
    Billing as ORMBilling,
    StatusChange as ORMStatusChange,
)


def _decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _optional_decimal(value) -> Optional[Decimal]:
    return None if value is None else _decimal(value)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        code=orm_account.code,
        name=orm_account.name,
        type=domain.AccountType(orm_account.type),
        category=orm_account.category or "",
        created_at=orm_account.created_at,
    )


def cashflow_category_to_domain(orm_category: ORMCashflowCategory) -> domain.CashflowCategory:
    """Convert SQLAlchemy CashflowCategory model to domain entity."""
    return domain.CashflowCategory(
        account_code=orm_category.account_code,
        category=domain.CashflowActivity(orm_category.category),
        subcategory=orm_category.subcategory,
    )


def ledger_entry_to_domain(orm_entry: ORMLedgerEntry) -> domain.LedgerEntry:
    """Convert SQLAlchemy LedgerEntry model to domain LedgerEntry entity."""
    return domain.LedgerEntry(
        id=orm_entry.id,
        date=orm_entry.date,
        account_code=orm_entry.account_code,
        direction=domain.Direction(orm_entry.direction),
        amount=_decimal(orm_entry.amount),
        description=orm_entry.description,
        correlation_id=orm_entry.correlation_id,
        is_counter_entry=bool(orm_entry.is_counter_entry),
        project_id=orm_entry.project_id,
        notes=orm_entry.notes,
        counterpart_code=orm_entry.counterpart_code,
        reverses_correlation_id=orm_entry.reverses_correlation_id,
        source_type=orm_entry.source_type,
        source_id=orm_entry.source_id,
        created_at=orm_entry.created_at,
    )


def fixed_asset_to_domain(orm_asset: ORMFixedAsset) -> domain.FixedAsset:
    """Convert SQLAlchemy FixedAsset model to domain FixedAsset entity."""
    return domain.FixedAsset(
        id=orm_asset.id,
        asset_name=orm_asset.asset_name,
        acquisition_date=orm_asset.acquisition_date,
        value=_decimal(orm_asset.value),
        useful_life=orm_asset.useful_life,
        accumulated_depreciation=_decimal(orm_asset.accumulated_depreciation),
        book_value=_decimal(orm_asset.book_value),
        category=orm_asset.category,
        asset_account_code=orm_asset.asset_account_code,
        depreciation_expense_account_code=orm_asset.depreciation_expense_account_code,
        accumulated_depreciation_account_code=orm_asset.accumulated_depreciation_account_code,
        created_at=orm_asset.created_at,
        updated_at=orm_asset.updated_at,
    )


def project_to_domain(orm_project: ORMProject) -> domain.Project:
    """Convert SQLAlchemy Project model to domain Project entity."""
    return domain.Project(
        id=orm_project.id,
        project_code=orm_project.project_code,
        name=orm_project.name,
        total_value=_decimal(orm_project.total_value),
        status=domain.ProjectStatus(orm_project.status),
        progress=_decimal(orm_project.progress),
        created_at=orm_project.created_at,
    )


def project_cost_to_domain(orm_cost: ORMProjectCost) -> domain.ProjectCost:
    """Convert SQLAlchemy ProjectCost model to domain ProjectCost entity."""
    return domain.ProjectCost(
        id=orm_cost.id,
        project_id=orm_cost.project_id,
        category=orm_cost.category,
        description=orm_cost.description or "",
        amount=_decimal(orm_cost.amount),
        date=orm_cost.date,
        status=domain.CostStatus(orm_cost.status),
        created_at=orm_cost.created_at,
    )


def billing_to_domain(orm_billing: ORMBilling) -> domain.Billing:
    """Convert SQLAlchemy Billing model to domain Billing entity."""
    return domain.Billing(
        id=orm_billing.id,
        project_id=orm_billing.project_id,
        billing_date=orm_billing.billing_date,
        amount=_decimal(orm_billing.amount),
        status=domain.BillingStatus(orm_billing.status),
        percentage=_optional_decimal(orm_billing.percentage),
        invoice=orm_billing.invoice,
        post_journal_entries=bool(orm_billing.post_journal_entries),
        created_at=orm_billing.created_at,
    )


def status_change_to_domain(orm_change: ORMStatusChange) -> domain.StatusChange:
    """Convert SQLAlchemy StatusChange model to domain StatusChange entity."""
    return domain.StatusChange(
        id=orm_change.id,
        record_type=orm_change.record_type,
        record_id=orm_change.record_id,
        old_status=orm_change.old_status,
        new_status=orm_change.new_status,
        changed_at=orm_change.changed_at,
        notes=orm_change.notes,
    )
