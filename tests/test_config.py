"""Tests for ledger settings."""

import pytest
from decimal import Decimal

from projledger.config import LedgerSettings
from projledger.domain.entities import RevenueRecognition


def test_defaults():
    """Test default settings match the default chart of accounts."""
    settings = LedgerSettings.from_env({})

    assert settings.revenue_recognition is RevenueRecognition.ON_ISSUE
    assert settings.receivable_account_code == "1201"
    assert settings.revenue_account_code == "4001"
    assert settings.cash_categories == ("cash", "bank")
    assert settings.depreciation_tolerance == Decimal("0.01")


def test_overrides_from_environment():
    """Test PROJLEDGER_* variables override defaults."""
    settings = LedgerSettings.from_env(
        {
            "PROJLEDGER_REVENUE_RECOGNITION": " ON_PAYMENT ",
            "PROJLEDGER_REVENUE_ACCOUNT": "4003",
            "PROJLEDGER_ACCUMULATED_DEPRECIATION_ACCOUNT": "1602",
            "UNRELATED": "x",
        }
    )

    assert settings.revenue_recognition is RevenueRecognition.ON_PAYMENT
    assert settings.revenue_account_code == "4003"
    assert settings.accumulated_depreciation_account_code == "1602"
    assert settings.payable_account_code == "2102"


def test_unknown_policy():
    """Test that an unknown revenue recognition policy is rejected."""
    with pytest.raises(ValueError, match="Unknown revenue recognition policy"):
        LedgerSettings.from_env({"PROJLEDGER_REVENUE_RECOGNITION": "on_contract"})
