"""
Runtime settings for the battery decider
Values come from the environment, optionally seeded from a .env file
"""
import os
import logging
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.enphaseenergy.com/api/v2"
DEFAULT_MAX_QUERY_DAYS = 6  # API rejects spans of 7 days or more
DEFAULT_QUERY_DELAY = 30
DEFAULT_REQUEST_TIMEOUT = 30
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SettingsError(ValueError):
    """Raised when an environment value cannot be used"""


def _int_from_env(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise SettingsError(f"{name} must be an integer, got {raw!r}") from e
    if value < minimum:
        raise SettingsError(f"{name} must be >= {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    max_query_days: int = DEFAULT_MAX_QUERY_DAYS
    query_delay: int = DEFAULT_QUERY_DELAY
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT
    log_level: str = "INFO"
    log_format: str = "text"

    @classmethod
    def from_env(cls, env_path: Optional[str] = None) -> "Settings":
        """
        Build settings from environment variables

        Args:
            env_path: Optional .env file to load first (existing variables win)

        Returns:
            Validated Settings
        """
        load_dotenv(env_path)

        log_format = os.getenv("LOG_FORMAT", "text").strip().lower()
        if log_format not in ("text", "json"):
            raise SettingsError(f"LOG_FORMAT must be 'text' or 'json', got {log_format!r}")

        log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
        if log_level not in LOG_LEVELS:
            raise SettingsError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

        return cls(
            base_url=os.getenv("ENPHASE_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            max_query_days=_int_from_env("ENPHASE_MAX_QUERY_DAYS", DEFAULT_MAX_QUERY_DAYS, 1),
            query_delay=_int_from_env("ENPHASE_QUERY_DELAY", DEFAULT_QUERY_DELAY, 0),
            request_timeout=_int_from_env("ENPHASE_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT, 1),
            log_level=log_level,
            log_format=log_format,
        )
