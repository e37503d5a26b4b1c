"""Database layer for projledger application."""

from projledger.database.base import Database
from projledger.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
