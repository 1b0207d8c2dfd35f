"""
Utilities to centralize configuration handling for the catalog services.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


@dataclass
class AppConfig:
    """Simple container for application level settings."""

    app_name: str
    database_url: str
    db_supports_transactions: bool
    log_level: str
    debug_mode: bool
    default_page_size: int
    max_page_size: int
    pricing_revalidate_on_read: bool
    slow_query_seconds: float

    def get_bool(self, key: str, default: bool = False) -> bool:
        """
        Get boolean config value from AppConfig.

        Args:
            key: Configuration key (e.g., 'debug_mode')
            default: Default value if not set (defaults to False)

        Returns:
            bool: Configuration value
        """
        value = getattr(self, key, default)
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    def get_int(self, key: str, default: int = 0) -> int:
        value = getattr(self, key, default)
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                return default
        return value if isinstance(value, int) else default

    def get_string(self, key: str, default: str = "") -> str:
        value = getattr(self, key, default)
        return str(value) if value is not None else default


def _read_env(name: str, default: str | None = None) -> str:
    """
    Internal helper to fetch environment variables with support for defaults.
    """
    value = os.getenv(name)
    if value is None:
        if default is None:
            raise RuntimeError(f"Missing required environment variable '{name}'")
        value = default
    return value


def read_bool(name: str, default: str = "false") -> bool:
    value = _read_env(name, default)
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_config(app_name: str, **overrides) -> AppConfig:
    """
    Produce an AppConfig instance populated from environment variables.

    Keyword overrides win over the environment, which keeps tests from having
    to patch os.environ.
    """
    config = AppConfig(
        app_name=app_name,
        database_url=_read_env("DATABASE_URL", "sqlite:///catalog.db"),
        db_supports_transactions=read_bool("DB_SUPPORTS_TRANSACTIONS", "true"),
        log_level=_read_env("LOG_LEVEL", "INFO"),
        debug_mode=read_bool("DEBUG_MODE", "false"),
        default_page_size=int(_read_env("DEFAULT_PAGE_SIZE", str(DEFAULT_PAGE_SIZE))),
        max_page_size=int(_read_env("MAX_PAGE_SIZE", str(MAX_PAGE_SIZE))),
        pricing_revalidate_on_read=read_bool("PRICING_REVALIDATE_ON_READ", "false"),
        slow_query_seconds=float(_read_env("SLOW_QUERY_SECONDS", "1.0")),
    )
    for key, value in overrides.items():
        if not hasattr(config, key):
            raise AttributeError(f"Unknown config key '{key}'")
        setattr(config, key, value)
    return config
