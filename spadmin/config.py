"""
Runtime settings read from the environment.

Variables:
    SPADMIN_API_URL       API base URL (legacy: SPADMIN_API_BASE_URL)
    SPADMIN_TOKEN         Bearer token for authenticated calls
    SPADMIN_TIMEOUT       Request timeout in seconds
    SPADMIN_PAGE_SIZE     Rows per page for list views
    SPADMIN_LOG_LEVEL     DEBUG, INFO, WARNING, ERROR, CRITICAL
"""

import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigError

DEFAULT_API_URL = "http://localhost:5000/api/v1"
DEFAULT_TIMEOUT = 15.0
DEFAULT_PAGE_SIZE = 15
MAX_PAGE_SIZE = 100
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def clamp_page_size(page_size: int) -> int:
    return max(1, min(page_size, MAX_PAGE_SIZE))


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")


def _timeout(env: Mapping[str, str]) -> float:
    timeout = _float(env, "SPADMIN_TIMEOUT", DEFAULT_TIMEOUT)
    if not math.isfinite(timeout) or timeout <= 0:
        raise ConfigError(f"SPADMIN_TIMEOUT must be a positive number of seconds, got {timeout!r}")
    return timeout


def _log_level(env: Mapping[str, str]) -> str:
    level = (env.get("SPADMIN_LOG_LEVEL") or "INFO").strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"SPADMIN_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {level!r}")
    return level


@dataclass
class Settings:
    api_url: str = DEFAULT_API_URL
    token: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    page_size: int = DEFAULT_PAGE_SIZE
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        api_url = (
            env.get("SPADMIN_API_URL")
            or env.get("SPADMIN_API_BASE_URL")
            or DEFAULT_API_URL
        )
        return cls(
            api_url=api_url.rstrip("/"),
            token=env.get("SPADMIN_TOKEN") or None,
            timeout=_timeout(env),
            page_size=clamp_page_size(_int(env, "SPADMIN_PAGE_SIZE", DEFAULT_PAGE_SIZE)),
            log_level=_log_level(env),
        )
