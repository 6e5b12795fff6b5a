"""Database factory functions for creating database instances."""

import logging
import os
from typing import Optional

from finops.config import AppConfig, default_database_path
from finops.database.sqlalchemy_db import SQLAlchemyDatabase


def create_database(
    config: Optional[AppConfig] = None, logger: Optional[logging.Logger] = None
) -> SQLAlchemyDatabase:
    """Create a database instance from configuration.

    Args:
        config: Application configuration. If None, it is read from the
            FINOPS_* environment variables.
        logger: Logger handed to the database for storage failures

    Returns:
        SQLAlchemyDatabase instance
    """
    config = config or AppConfig.from_env()
    return SQLAlchemyDatabase(config.database_url, logger=logger)


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks FINOPS_DB_PATH
            environment variable, then defaults to ~/.finops/finops.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("FINOPS_DB_PATH") or str(default_database_path())
    return create_database(AppConfig.from_env(database_path=database_path))
