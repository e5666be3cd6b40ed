"""
Configuration module for Field Jobs API
"""

# Application configuration
import os

def env_bool(key: str, default: bool = False) -> bool:
    """Get boolean value from environment variable"""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")

def env_int(key: str, default: int) -> int:
    """Get integer value from environment variable"""
    return int(os.getenv(key, str(default)))

# Version information
from pathlib import Path

def _read_version_from_repo(default: str = "dev") -> str:
    try:
        # repo root: fieldjobs/.. (two parents up)
        version_file = Path(__file__).resolve().parents[1] / "VERSION"
        v = version_file.read_text(encoding="utf-8").strip()
        if v:
            return v
    except OSError:
        pass
    return os.getenv("APP_VERSION", default)

API_VERSION = _read_version_from_repo()

# Database configuration
SQLITE_PATH = os.getenv("SQLITE_PATH", "./fieldjobs.db")
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{SQLITE_PATH}")

# API configuration
APP_PORT = env_int("APP_PORT", 80)
API_PREFIX = "/v1"

# Status thresholds (minutes)
TRAVEL_WARNING_MINUTES = env_int("TRAVEL_WARNING_MINUTES", 20)
ONSITE_DEADLINE_MINUTES = env_int("ONSITE_DEADLINE_MINUTES", 60)
DEFAULT_TARGET_COMPLETION_MINUTES = env_int("DEFAULT_TARGET_COMPLETION_MINUTES", 60)

# Periodic re-evaluation
REEVALUATE_ENABLED: bool = env_bool("REEVALUATE_ENABLED", True)
REEVALUATE_INTERVAL_SECONDS = env_int("REEVALUATE_INTERVAL_SECONDS", 60)

# Logging configuration
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")
LOG_CONFIG_FILE = os.getenv("LOG_CONFIG_FILE", "LOGGING.yaml")
LOG_SAMPLE_RATE = float(os.getenv("LOG_SAMPLE_RATE", "1.0"))
LOG_EXCLUDE_PATHS = os.getenv("LOG_EXCLUDE_PATHS", "/v1/health,/v1/metrics/prometheus").split(",")

# Startup
AUTO_MIGRATE: bool = env_bool("AUTO_MIGRATE", False)
