"""Database layer for finops."""

from finops.database.base import Database
from finops.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
