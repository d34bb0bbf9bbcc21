"""
Configuration module for Flagdeck API
"""

# Application configuration
import os
from pathlib import Path


def env_bool(key: str, default: bool = False) -> bool:
    """Get boolean value from environment variable"""
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def env_list(key: str, default: str = "") -> list:
    """Get comma-separated list from environment variable"""
    return [item.strip() for item in os.getenv(key, default).split(",") if item.strip()]


def _read_version_from_repo(default: str = "dev") -> str:
    try:
        # repo root: flagdeck/.. (two parents up)
        version_file = Path(__file__).resolve().parents[1] / "VERSION"
        v = version_file.read_text(encoding="utf-8").strip()
        if v:
            return v
    except OSError:
        pass
    return os.getenv("APP_VERSION", default)


API_VERSION = _read_version_from_repo()

# Database configuration
sqlite_path = os.getenv("SQLITE_PATH", "./flagdeck.db")
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{sqlite_path}")
AUTO_CREATE_SCHEMA = env_bool("AUTO_CREATE_SCHEMA", True)

# API configuration
API_PREFIX = "/api/v1"
MANAGEMENT_PREFIX = "/api"
APP_PORT = int(os.getenv("APP_PORT", "8000"))

# Logging configuration
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")
LOG_SAMPLE_RATE = float(os.getenv("LOG_SAMPLE_RATE", "1.0"))
LOG_EXCLUDE_PATHS = set(env_list("LOG_EXCLUDE_PATHS", f"{API_PREFIX}/metrics/prometheus"))

# Credentials
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

# Management access (stands in for the dashboard session)
ADMIN_KEYS = set(env_list("ADMIN_KEYS"))

# Tenancy
ALLOW_MULTIPLE_TENANTS = env_bool("ALLOW_MULTIPLE_TENANTS", False)

# Security configuration
CORS_ORIGINS = env_list("CORS_ORIGINS", "*")
