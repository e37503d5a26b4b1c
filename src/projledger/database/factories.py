"""Construct the ledger store from a path or the environment."""

import os
from pathlib import Path
from typing import Optional

from projledger.database.sqlalchemy_db import SQLAlchemyDatabase

DEFAULT_LEDGER_DIR = ".projledger"
DEFAULT_LEDGER_FILE = "ledger.db"


def default_ledger_path() -> Path:
    """Location of the ledger file when neither --db-path nor PROJLEDGER_DB_PATH is given."""
    ledger_dir = Path.home() / DEFAULT_LEDGER_DIR
    ledger_dir.mkdir(exist_ok=True)
    return ledger_dir / DEFAULT_LEDGER_FILE


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Open the SQLite ledger holding accounts, journal entries, assets and projects.

    The path is resolved from the argument, then PROJLEDGER_DB_PATH, then
    ``~/.projledger/ledger.db``. The schema is not created here; callers
    run ``initialize_schema()`` after connecting.
    """
    database_path = database_path or os.environ.get("PROJLEDGER_DB_PATH")
    if not database_path:
        database_path = str(default_ledger_path())
    return SQLAlchemyDatabase(f"sqlite:///{database_path}")
