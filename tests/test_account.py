"""Tests for account commands."""

from projledger.cli.main import cli


def test_init_accounts(cli_runner, temp_db):
    """Test installing the default chart of accounts twice."""
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "init-accounts"])

    assert result.exit_code == 0
    assert "Successfully created 38 accounts." in result.output

    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "init-accounts"])
    assert result.exit_code == 0
    assert "Created 0 accounts (38 already existed)." in result.output


def test_account_create(cli_runner, temp_db):
    """Test creating an account."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path", temp_db.database_path,
            "account", "create", "1106", "Bank BSI", "--type", "Asset", "--category", "bank",
        ],
    )

    assert result.exit_code == 0
    assert "Created account 1106 'Bank BSI' (Asset)" in result.output
    assert temp_db.get_account("1106").category == "bank"


def test_account_create_duplicate(cli_runner, temp_db, chart):
    """Test creating a duplicate account code fails."""
    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "account", "create", "1101", "Petty Cash", "--type", "Asset"],
    )

    assert result.exit_code == 1
    assert "already exists" in result.output


def test_account_list_empty(cli_runner, temp_db):
    """Test listing accounts when none exist."""
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list"])

    assert result.exit_code == 0
    assert "No accounts found" in result.output


def test_account_list_by_type(cli_runner, temp_db, chart):
    """Test listing accounts of one type."""
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "list", "--type", "ContraAsset"]
    )

    assert result.exit_code == 0
    assert "1601" in result.output
    assert "1101" not in result.output


def test_account_rename(cli_runner, temp_db, chart):
    """Test renaming an account."""
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "rename", "1102", "Bank BCA Payroll"]
    )

    assert result.exit_code == 0
    assert temp_db.get_account("1102").name == "Bank BCA Payroll"


def test_account_delete_with_entries_fails(cli_runner, temp_db, chart):
    """Test that accounts with ledger entries cannot be deleted."""
    cli_runner.invoke(
        cli,
        [
            "--db-path", temp_db.database_path,
            "post", "--account", "6101", "--date", "2025-03-01", "--amount", "7500000",
            "--direction", "increase", "--description", "Office rent",
        ],
    )

    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "delete", "1101", "--yes"]
    )

    assert result.exit_code == 1
    assert "ledger entr" in result.output


def test_account_delete_cancelled(cli_runner, temp_db, chart):
    """Test that deletion asks for confirmation."""
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "delete", "1105"], input="n\n"
    )

    assert result.exit_code == 0
    assert "Deletion cancelled." in result.output
    assert temp_db.get_account("1105") is not None


def test_account_balance(cli_runner, temp_db, chart):
    """Test showing an account balance."""
    cli_runner.invoke(
        cli,
        [
            "--db-path", temp_db.database_path,
            "post", "--account", "4001", "--date", "2025-03-01", "--amount", "Rp 30,000,000",
            "--direction", "increase", "--description", "Boring service",
        ],
    )

    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "account", "balance", "1101", "--as-of", "2025-03-31"]
    )

    assert result.exit_code == 0
    assert "1101 Cash as of 2025-03-31: 30,000,000.00" in result.output


def test_account_balance_rejects_as_of_with_period(cli_runner, temp_db, chart):
    """Test that --as-of and --period are exclusive."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path", temp_db.database_path,
            "account", "balance", "1101", "--as-of", "2025-03-31", "--period", "last-month",
        ],
    )

    assert result.exit_code == 1
    assert "cannot be combined" in result.output


def test_cashflow_set_and_list(cli_runner, temp_db, chart):
    """Test classifying an account and listing the groups."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path", temp_db.database_path,
            "account", "cashflow", "set", "2103", "operating", "--subcategory", "tax",
        ],
    )
    assert result.exit_code == 0
    assert "Account 2103 classified as operating" in result.output

    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "cashflow", "list"])
    assert result.exit_code == 0
    assert "Operating:" in result.output
    assert "Financing:" in result.output
    assert "2103" in result.output
