"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class AccountNotFound(NotFoundError):
    """Account code is not in the chart of accounts."""


class InvalidCombination(ValidationError):
    """Unusual account pairing that needs explicit confirmation."""

    def __init__(self, message: str, rule: str):
        super().__init__(message)
        self.rule = rule


class InvalidTransition(ValidationError):
    """Illegal status change for a billing or project cost."""


class InconsistentAsset(DomainError):
    """Stored depreciation state of an asset violates its invariants."""


def account_not_found(code: str) -> str:
    """Return message for missing account."""
    return f"Account '{code}' not found"


def duplicate_account_code(code: str) -> str:
    """Return message for duplicate account code."""
    return f"Account with code '{code}' already exists"


def account_delete_blocked(code: str, entry_count: int) -> str:
    """Return message when account has ledger entries."""
    return (
        f"Cannot delete account '{code}': it has {entry_count} "
        f"ledger entr{'ies' if entry_count != 1 else 'y'}."
    )


def asset_not_found(asset_id: int) -> str:
    """Return message for missing fixed asset."""
    return f"Fixed asset {asset_id} not found"


def project_not_found(project_id: int) -> str:
    """Return message for missing project."""
    return f"Project {project_id} not found"


def billing_not_found(billing_id: int) -> str:
    """Return message for missing billing."""
    return f"Billing {billing_id} not found"


def cost_not_found(cost_id: int) -> str:
    """Return message for missing project cost."""
    return f"Project cost {cost_id} not found"


def invalid_transition(record: str, old_status: str, new_status: str) -> str:
    """Return message for an illegal status change."""
    return f"Invalid {record} status transition from {old_status} to {new_status}"


def inconsistent_asset(asset_id: int, accumulated: object, value: object) -> str:
    """Return message when stored accumulated depreciation exceeds value."""
    return (
        f"Fixed asset {asset_id} is inconsistent: accumulated depreciation "
        f"{accumulated} exceeds value {value}"
    )
