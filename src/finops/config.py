"""Configuration management for finops."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from finops.domain.query import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from finops.utils.params import parse_int

PRODUCTION_ENVIRONMENTS = ("production", "prod")


def default_database_path() -> Path:
    """Return ~/.finops/finops.db, creating the directory if needed."""
    db_dir = Path.home() / ".finops"
    db_dir.mkdir(exist_ok=True)
    return db_dir / "finops.db"


def _page_size(value: Optional[str]) -> int:
    """Parse FINOPS_PAGE_SIZE, clamped into [1, MAX_PAGE_SIZE]."""
    if not value:
        return DEFAULT_PAGE_SIZE
    return min(max(1, parse_int(value, "FINOPS_PAGE_SIZE")), MAX_PAGE_SIZE)


@dataclass
class AppConfig:
    """Application configuration."""

    database_url: str
    environment: str = "development"
    log_level: str = "INFO"
    log_format: str = "standard"
    default_page_size: int = DEFAULT_PAGE_SIZE

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in PRODUCTION_ENVIRONMENTS

    @property
    def include_error_trace(self) -> bool:
        """Stack traces are only shown outside production."""
        return not self.is_production

    @classmethod
    def from_env(cls, database_path: Optional[str] = None) -> "AppConfig":
        """Build configuration from FINOPS_* environment variables.

        Args:
            database_path: SQLite file path; takes precedence over
                FINOPS_DATABASE_URL and FINOPS_DB_PATH.
        """
        if database_path is not None:
            database_url = f"sqlite:///{database_path}"
        elif os.environ.get("FINOPS_DATABASE_URL"):
            database_url = os.environ["FINOPS_DATABASE_URL"]
        else:
            path = os.environ.get("FINOPS_DB_PATH") or str(default_database_path())
            database_url = f"sqlite:///{path}"

        return cls(
            database_url=database_url,
            environment=os.environ.get("FINOPS_ENV", "development"),
            log_level=os.environ.get("FINOPS_LOG_LEVEL", "INFO").upper(),
            log_format=os.environ.get("FINOPS_LOG_FORMAT", "standard").lower(),
            default_page_size=_page_size(os.environ.get("FINOPS_PAGE_SIZE")),
        )
