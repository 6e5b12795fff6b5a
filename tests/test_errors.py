"""Tests for error serialization, configuration and logging."""

import json
import logging

import pytest

from finops.config import AppConfig
from finops.domain.errors import (
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
    delete_blocked,
    serialize_error,
)
from finops.logging import JsonFormatter


def test_validation_error_body():
    error = ValidationError("limit must be an integer", field="limit", details={"got": "x"})

    assert serialize_error(error) == {
        "error": {
            "code": "validation_error",
            "message": "limit must be an integer",
            "field": "limit",
            "details": {"got": "x"},
        }
    }


def test_error_codes():
    assert serialize_error(NotFoundError("gone"))["error"]["code"] == "not_found"
    assert serialize_error(ConflictError("busy"))["error"]["code"] == "conflict"
    assert serialize_error(StorageError("down"))["error"]["code"] == "storage_error"


def test_trace_only_when_requested():
    try:
        raise ConflictError("busy")
    except ConflictError as e:
        error = e

    assert "trace" not in serialize_error(error)["error"]
    assert "ConflictError" in serialize_error(error, include_trace=True)["error"]["trace"]


def test_delete_blocked_message():
    assert delete_blocked("bank", 3, 1, "transaction") == (
        "Cannot delete bank 3: it has 1 transaction. Please delete them first."
    )


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("FINOPS_ENV", "production")
    monkeypatch.setenv("FINOPS_LOG_LEVEL", "debug")
    monkeypatch.setenv("FINOPS_LOG_FORMAT", "JSON")

    config = AppConfig.from_env(database_path="/tmp/finops-test.db")

    assert config.database_url == "sqlite:////tmp/finops-test.db"
    assert config.is_production
    assert not config.include_error_trace
    assert config.log_level == "DEBUG"
    assert config.log_format == "json"


def test_config_database_url_env(monkeypatch):
    monkeypatch.delenv("FINOPS_ENV", raising=False)
    monkeypatch.setenv("FINOPS_DATABASE_URL", "sqlite:///:memory:")

    config = AppConfig.from_env()

    assert config.database_url == "sqlite:///:memory:"
    assert config.include_error_trace


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("finops.export", logging.INFO, __file__, 1, "Exported %d rows", (3,), None)
    record.export_format = "csv"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "Exported 3 rows"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "finops.export"
    assert payload["export_format"] == "csv"


def test_page_size_from_env_is_clamped(monkeypatch):
    monkeypatch.setenv("FINOPS_PAGE_SIZE", "500")

    assert AppConfig.from_env(database_path="x.db").default_page_size == 100

    monkeypatch.setenv("FINOPS_PAGE_SIZE", "20")

    assert AppConfig.from_env(database_path="x.db").default_page_size == 20


def test_page_size_must_be_numeric(monkeypatch):
    monkeypatch.setenv("FINOPS_PAGE_SIZE", "lots")

    with pytest.raises(ValidationError) as exc_info:
        AppConfig.from_env(database_path="x.db")

    assert exc_info.value.field == "FINOPS_PAGE_SIZE"
