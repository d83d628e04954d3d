"""
Settings for the assessment client, read from the environment and an
optional .env file.
"""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_BASE_URL = "https://assessment.ksensetech.com/api"
DEFAULT_TIMEOUT = 30.0
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when the environment does not hold a usable configuration."""


@dataclass(frozen=True)
class Settings:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"


def load_settings(env_file=None):
    """Build Settings from the process environment.

    Values already exported in the shell win over the .env file.
    """
    load_dotenv(env_file)

    api_key = (os.getenv("API_KEY") or "").strip()
    if not api_key:
        raise ConfigError("API_KEY is missing")

    raw_timeout = os.getenv("KSENSE_TIMEOUT")
    timeout = DEFAULT_TIMEOUT
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ConfigError(f"KSENSE_TIMEOUT must be a number, got {raw_timeout!r}")

    log_level = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ConfigError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

    return Settings(
        api_key=api_key,
        base_url=(os.getenv("KSENSE_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
        timeout=timeout,
        log_level=log_level,
    )
