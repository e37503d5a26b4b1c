"""Shared pytest fixtures for projledger tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from projledger.config import LedgerSettings
from projledger.database.factories import create_sqlite_database
from projledger.domain.account import AccountService
from projledger.domain.billing import BillingService
from projledger.domain.chart import install_default_chart
from projledger.domain.depreciation import DepreciationService
from projledger.domain.posting import PostingService
from projledger.domain.project import ProjectService
from projledger.domain.wip import WipService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def settings():
    """Default ledger settings."""
    return LedgerSettings()


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def chart(account_service):
    """Install the default chart of accounts."""
    install_default_chart(account_service)
    return account_service


@pytest.fixture
def posting_service(temp_db, settings):
    """Create a PostingService with a temporary database."""
    return PostingService(temp_db, settings)


@pytest.fixture
def depreciation_service(temp_db, settings, posting_service):
    """Create a DepreciationService with a temporary database."""
    return DepreciationService(temp_db, settings, posting_service)


@pytest.fixture
def project_service(temp_db, settings, posting_service):
    """Create a ProjectService with a temporary database."""
    return ProjectService(temp_db, settings, posting_service)


@pytest.fixture
def billing_service(temp_db, settings, posting_service):
    """Create a BillingService with a temporary database."""
    return BillingService(temp_db, settings, posting_service)


@pytest.fixture
def wip_service(temp_db):
    """Create a WipService with a temporary database."""
    return WipService(temp_db)


@pytest.fixture
def sample_project(project_service):
    """Create an ongoing project worth 100,000,000."""
    project_id = project_service.create_project(
        project_code="PRJ-001",
        name="Soil investigation Bekasi",
        total_value=Decimal("100000000"),
    )
    return project_service.get_project(project_id)


@pytest.fixture
def boring_machine(chart, depreciation_service):
    """Create a 185,000,000 asset with a five-year life acquired 2025-01-15."""
    asset_id = depreciation_service.create_asset(
        asset_name="Boring Machine",
        acquisition_date=date(2025, 1, 15),
        value=Decimal("185000000"),
        useful_life=5,
        category="equipment",
        asset_account_code="1501",
    )
    return depreciation_service.get_asset(asset_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
