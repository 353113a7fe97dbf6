"""Application Settings and Configuration.

Settings are read from ``PREOP_*`` environment variables with defaults
suitable for local use. Clinical weights, thresholds and resource names are
code constants in the domain layer and are deliberately not configurable
here.
"""

import os
from pathlib import Path
from typing import Optional

from preop_risk import __version__

# Application metadata
APP_NAME = "Preop-Risk"
APP_VERSION = __version__

# Default chunk size for CSV ingestion
DEFAULT_CHUNK_SIZE = 1000


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Application settings loaded from the environment.

    Values are read once at construction; build a new ``Settings()`` after
    changing the environment (tests do this with ``monkeypatch``).
    """

    def __init__(self):
        self.app_name = os.getenv("PREOP_APP_NAME", APP_NAME)
        self.app_version = APP_VERSION

        # Logging
        self.log_level = os.getenv("PREOP_LOG_LEVEL", "INFO")
        self.json_logs = _env_flag("PREOP_JSON_LOGS", "false")

        # Slot catalog file; None means the built-in reference catalog
        self.slot_catalog_path: Optional[str] = os.getenv("PREOP_SLOT_CATALOG") or None

        # Batch ingestion
        self.chunk_size = int(os.getenv("PREOP_CHUNK_SIZE", str(DEFAULT_CHUNK_SIZE)))
        self.report_dir = os.getenv("PREOP_REPORT_DIR", "reports")

        # Circuit breaker settings
        self.circuit_breaker_enabled = _env_flag("PREOP_CIRCUIT_BREAKER_ENABLED", "true")
        self.circuit_breaker_threshold = float(os.getenv("PREOP_CIRCUIT_BREAKER_THRESHOLD", "50.0"))
        self.circuit_breaker_min_records = int(os.getenv("PREOP_CIRCUIT_BREAKER_MIN_RECORDS", "10"))
        self.circuit_breaker_window = int(os.getenv("PREOP_CIRCUIT_BREAKER_WINDOW", "100"))
        # False: record an open circuit and keep assessing instead of aborting
        self.circuit_breaker_abort = _env_flag("PREOP_CIRCUIT_BREAKER_ABORT", "true")

    @property
    def report_path(self) -> Path:
        """Directory for batch result files (not created here)."""
        return Path(self.report_dir)

    def as_dict(self) -> dict:
        """Settings as a flat dict, for display."""
        return {
            "app_name": self.app_name,
            "app_version": self.app_version,
            "log_level": self.log_level,
            "json_logs": self.json_logs,
            "slot_catalog_path": self.slot_catalog_path,
            "chunk_size": self.chunk_size,
            "report_dir": self.report_dir,
            "circuit_breaker_enabled": self.circuit_breaker_enabled,
            "circuit_breaker_threshold": self.circuit_breaker_threshold,
            "circuit_breaker_min_records": self.circuit_breaker_min_records,
            "circuit_breaker_window": self.circuit_breaker_window,
            "circuit_breaker_abort": self.circuit_breaker_abort,
        }


# Global settings instance
settings = Settings()
