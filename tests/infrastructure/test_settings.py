"""Tests for environment-driven settings and logging setup."""

import json
import logging

from preop_risk.infrastructure.logging_config import StructuredFormatter, setup_logging
from preop_risk.infrastructure.settings import APP_NAME, Settings


class TestSettings:
    """Test PREOP_* environment variables."""

    def test_defaults(self, monkeypatch):
        for name in ("PREOP_APP_NAME", "PREOP_SLOT_CATALOG", "PREOP_CHUNK_SIZE", "PREOP_CIRCUIT_BREAKER_ENABLED",
                     "PREOP_CIRCUIT_BREAKER_ABORT"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings()

        assert settings.app_name == APP_NAME
        assert settings.slot_catalog_path is None
        assert settings.chunk_size == 1000
        assert settings.circuit_breaker_enabled is True
        assert settings.circuit_breaker_abort is True

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("PREOP_SLOT_CATALOG", "/etc/preop/slots.json")
        monkeypatch.setenv("PREOP_CHUNK_SIZE", "250")
        monkeypatch.setenv("PREOP_CIRCUIT_BREAKER_ENABLED", "false")
        monkeypatch.setenv("PREOP_CIRCUIT_BREAKER_THRESHOLD", "25")
        monkeypatch.setenv("PREOP_JSON_LOGS", "true")
        monkeypatch.setenv("PREOP_CIRCUIT_BREAKER_ABORT", "no")

        settings = Settings()

        assert settings.slot_catalog_path == "/etc/preop/slots.json"
        assert settings.chunk_size == 250
        assert settings.circuit_breaker_enabled is False
        assert settings.circuit_breaker_threshold == 25.0
        assert settings.json_logs is True
        assert settings.circuit_breaker_abort is False
        assert settings.as_dict()["chunk_size"] == 250


class TestLogging:
    """Test log formatting."""

    def test_structured_formatter_includes_extra_fields(self):
        record = logging.LogRecord("preop_risk.test", logging.WARNING, __file__, 10, "rejected", None, None)
        record.record_index = 3
        record.source = "patients.csv"

        data = json.loads(StructuredFormatter().format(record))

        assert data["level"] == "WARNING"
        assert data["message"] == "rejected"
        assert data["record_index"] == 3
        assert data["source"] == "patients.csv"
        assert data["timestamp"].endswith("Z")

    def test_setup_logging_installs_one_handler(self):
        setup_logging(use_json=True, log_level="debug")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)
