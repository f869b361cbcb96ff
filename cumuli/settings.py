"""
Cumuli Settings

File Purpose: Process-wide configuration loaded once at startup
Primary Functions/Classes: Settings, load_settings
Inputs and Outputs (I/O): Reads environment variables (optionally from a .env file)

Settings are created once and passed into the fetcher, aggregator and
service constructors; nothing in the core reads the environment itself.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

import dotenv

from .exceptions import ConfigurationError

DEFAULT_API_BASE = "https://api.soundcloud.com"
DEFAULT_PAGE_SIZE = 50
DEFAULT_CACHE_DIR = "~/.cumuli/graph_cache"
DEFAULT_CACHE_TTL = 60

FAILURE_POLICIES = ("abort", "exclude")


@dataclass(frozen=True)
class Settings:
    """Read-only configuration shared by every request."""

    client_id: str = ""
    api_base: str = DEFAULT_API_BASE
    page_size: int = DEFAULT_PAGE_SIZE
    max_workers: int = 8
    page_workers: int = 4
    fetch_timeout: float = 120.0
    request_timeout: int = 30
    max_retries: int = 3
    failure_policy: str = "abort"
    cache_dir: str = DEFAULT_CACHE_DIR
    cache_ttl: int = DEFAULT_CACHE_TTL
    cache_enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False

    def __post_init__(self):
        if self.page_size < 1:
            raise ConfigurationError("page_size must be at least 1")
        if self.max_workers < 1 or self.page_workers < 1:
            raise ConfigurationError("Worker counts must be at least 1")
        if self.fetch_timeout <= 0:
            raise ConfigurationError("fetch_timeout must be positive")
        if self.failure_policy not in FAILURE_POLICIES:
            raise ConfigurationError(
                f"Unknown failure policy '{self.failure_policy}'",
                details=f"Expected one of: {', '.join(FAILURE_POLICIES)}",
            )


def _env_flag(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    """Return True when an env var is set to a truthy value."""
    value = env.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(
            f"{name} must be an integer", details=value, original_error=e
        )


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    value = env.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigurationError(
            f"{name} must be a number", details=value, original_error=e
        )


def load_settings(
    env_file: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
) -> Settings:
    """Build Settings from CUMULI_* environment variables.

    A .env file is loaded first (without overriding variables that are
    already set). Passing ``environ`` skips the .env lookup entirely.
    """
    if environ is None:
        dotenv.load_dotenv(env_file)
        environ = os.environ
    env = environ

    return Settings(
        client_id=env.get("CUMULI_CLIENT_ID") or env.get("SC_CLIENT_ID", ""),
        api_base=env.get("CUMULI_API_BASE", DEFAULT_API_BASE),
        page_size=_env_int(env, "CUMULI_PAGE_SIZE", DEFAULT_PAGE_SIZE),
        max_workers=_env_int(env, "CUMULI_MAX_WORKERS", 8),
        page_workers=_env_int(env, "CUMULI_PAGE_WORKERS", 4),
        fetch_timeout=_env_float(env, "CUMULI_FETCH_TIMEOUT", 120.0),
        request_timeout=_env_int(env, "CUMULI_REQUEST_TIMEOUT", 30),
        max_retries=_env_int(env, "CUMULI_MAX_RETRIES", 3),
        failure_policy=env.get("CUMULI_FAILURE_POLICY", "abort").strip().lower(),
        cache_dir=env.get("CUMULI_CACHE_DIR", DEFAULT_CACHE_DIR),
        cache_ttl=_env_int(env, "CUMULI_CACHE_TTL", DEFAULT_CACHE_TTL),
        cache_enabled=_env_flag(env, "CUMULI_CACHE_ENABLED", True),
        host=env.get("CUMULI_HOST", "0.0.0.0"),
        port=_env_int(env, "CUMULI_PORT", 8080),
        debug=_env_flag(env, "CUMULI_DEBUG"),
    )
