"""Ledger settings loaded from the environment."""

import os
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Mapping, Optional

from projledger.domain.entities import RevenueRecognition


@dataclass(frozen=True)
class LedgerSettings:
    """Account codes and policies used by the engines.

    Defaults follow the default chart of accounts created by
    ``projledger init-accounts``.
    """

    revenue_recognition: RevenueRecognition = RevenueRecognition.ON_ISSUE
    receivable_account_code: str = "1201"
    revenue_account_code: str = "4001"
    payable_account_code: str = "2102"
    depreciation_expense_account_code: str = "6105"
    accumulated_depreciation_account_code: str = "1601"
    cash_categories: tuple[str, ...] = ("cash", "bank")
    depreciation_tolerance: Decimal = Decimal("0.01")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LedgerSettings":
        """Build settings, overriding defaults with PROJLEDGER_* variables.

        Raises:
            ValueError: If PROJLEDGER_REVENUE_RECOGNITION is not a known policy
        """
        if environ is None:
            environ = os.environ

        settings = cls()
        overrides = {}

        policy = environ.get("PROJLEDGER_REVENUE_RECOGNITION")
        if policy:
            try:
                overrides["revenue_recognition"] = RevenueRecognition(policy.strip().lower())
            except ValueError:
                choices = ", ".join(p.value for p in RevenueRecognition)
                raise ValueError(
                    f"Unknown revenue recognition policy '{policy}'. Supported: {choices}"
                )

        account_vars = {
            "PROJLEDGER_RECEIVABLE_ACCOUNT": "receivable_account_code",
            "PROJLEDGER_REVENUE_ACCOUNT": "revenue_account_code",
            "PROJLEDGER_PAYABLE_ACCOUNT": "payable_account_code",
            "PROJLEDGER_DEPRECIATION_EXPENSE_ACCOUNT": "depreciation_expense_account_code",
            "PROJLEDGER_ACCUMULATED_DEPRECIATION_ACCOUNT": "accumulated_depreciation_account_code",
        }
        for var, attr in account_vars.items():
            value = environ.get(var)
            if value:
                overrides[attr] = value.strip()

        return replace(settings, **overrides)
