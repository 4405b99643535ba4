"""
Centralized configuration module for application-wide settings.

Values come from environment variables; a local ``.env`` file is loaded
once at import time so developers don't have to export variables by hand.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./clinic_records.db"

_TRUTHY = {"1", "true", "yes", "on"}


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


# ===========================
# Database Configuration
# ===========================


def normalize_database_url(url: str) -> str:
    """
    Rewrite synchronous driver URLs to their async counterparts.

    Examples:
        >>> normalize_database_url("postgresql://u:p@db/clinic")
        'postgresql+asyncpg://u:p@db/clinic'
        >>> normalize_database_url("sqlite:///./local.db")
        'sqlite+aiosqlite:///./local.db'
    """
    if url.startswith("postgres://"):
        return "postgresql+asyncpg://" + url[len("postgres://") :]
    if url.startswith("postgresql://"):
        return "postgresql+asyncpg://" + url[len("postgresql://") :]
    if url.startswith("sqlite://"):
        return "sqlite+aiosqlite://" + url[len("sqlite://") :]
    return url


def get_database_url() -> str:
    """Get the async SQLAlchemy database URL from DATABASE_URL."""
    return normalize_database_url(os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL))


def get_sql_echo() -> bool:
    return _get_bool("SQL_ECHO")


# ===========================
# Logging Configuration
# ===========================


def get_log_level() -> str:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    if not isinstance(getattr(logging, level, None), int):
        logger.warning(f"Invalid LOG_LEVEL '{level}', falling back to INFO")
        return "INFO"
    return level


def get_log_json() -> bool:
    return _get_bool("LOG_JSON")


def get_log_to_file() -> bool:
    return _get_bool("LOG_TO_FILE")


def get_log_dir() -> Path:
    return Path(os.getenv("LOG_DIR", "./logs"))
