"""
Unit tests for environment configuration and the logging setup.
"""

import json
import logging
from pathlib import Path

import pytest

from clinic_records.core import config
from clinic_records.core.logging_config import (
    ConsoleFormatter,
    JSONFormatter,
    log_performance,
    setup_logging,
)


@pytest.mark.unit
class TestDatabaseConfig:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("postgres://u:p@db/clinic", "postgresql+asyncpg://u:p@db/clinic"),
            ("postgresql://u:p@db/clinic", "postgresql+asyncpg://u:p@db/clinic"),
            ("sqlite:///./local.db", "sqlite+aiosqlite:///./local.db"),
            ("sqlite+aiosqlite:///./local.db", "sqlite+aiosqlite:///./local.db"),
            ("postgresql+asyncpg://u:p@db/clinic", "postgresql+asyncpg://u:p@db/clinic"),
        ],
    )
    def test_normalize_database_url(self, url, expected):
        assert config.normalize_database_url(url) == expected

    def test_database_url_default(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        assert config.get_database_url() == config.DEFAULT_DATABASE_URL

    def test_database_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db/clinic")
        assert config.get_database_url() == "postgresql+asyncpg://u:p@db/clinic"


@pytest.mark.unit
class TestLoggingConfig:
    @pytest.mark.parametrize("value", ["1", "true", "YES", " on "])
    def test_truthy_values(self, monkeypatch, value):
        monkeypatch.setenv("LOG_JSON", value)
        assert config.get_log_json() is True

    @pytest.mark.parametrize("value", ["0", "false", "no", ""])
    def test_falsy_values(self, monkeypatch, value):
        monkeypatch.setenv("SQL_ECHO", value)
        assert config.get_sql_echo() is False

    def test_invalid_log_level_falls_back(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        assert config.get_log_level() == "INFO"

    def test_log_level_upper_cased(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert config.get_log_level() == "DEBUG"

    def test_log_dir(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LOG_DIR", str(tmp_path))
        assert config.get_log_dir() == Path(tmp_path)


@pytest.mark.unit
class TestFormatters:
    def _record(self, **extra):
        record = logging.LogRecord(
            "clinic_records.test", logging.WARNING, __file__, 10, "Rejected %s", ("doctor",), None
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_formatter_includes_context(self):
        payload = json.loads(
            JSONFormatter().format(self._record(context={"field": "license_number"}))
        )

        assert payload["level"] == "WARNING"
        assert payload["logger"] == "clinic_records.test"
        assert payload["message"] == "Rejected doctor"
        assert payload["context"] == {"field": "license_number"}

    def test_console_formatter_leaves_record_untouched(self):
        record = self._record()

        output = ConsoleFormatter("%(levelname)s %(message)s").format(record)

        assert "Rejected doctor" in output
        assert record.levelname == "WARNING"


@pytest.mark.unit
class TestSetupLogging:
    def test_file_handlers_written(self, tmp_path, restore_root_logger):
        setup_logging(log_level="INFO", log_to_file=True, log_dir=tmp_path)
        logging.getLogger("clinic_records.test").error("Storage failed")

        for handler in restore_root_logger.handlers:
            handler.flush()

        assert (tmp_path / "clinic_records.log").exists()
        errors = (tmp_path / "clinic_records_errors.log").read_text(encoding="utf-8")
        assert "Storage failed" in errors

    def test_log_performance_context(self, caplog):
        with caplog.at_level(logging.INFO, logger="clinic_records.performance"):
            log_performance("list_prescriptions", 12.5, row_count=3)

        [record] = [r for r in caplog.records if r.name == "clinic_records.performance"]
        assert record.context == {
            "operation": "list_prescriptions",
            "duration_ms": 12.5,
            "row_count": 3,
        }
