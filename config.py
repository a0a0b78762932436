"""Configuration helpers.

Settings come from environment variables (optionally from a ``.env`` file)
and are passed explicitly to the page fetchers. ``BRIGHT_DATA_API_KEY`` is
only required by the SERP API fetcher, so its absence is reported when that
fetcher is built rather than at startup.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

from constants import (
    BRIGHT_DATA_API_URL,
    BRIGHT_DATA_ZONE,
    CITATION_POLICIES,
    DEFAULT_PANEL_TIMEOUT_MS,
    DEFAULT_POLICY,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT,
    FETCHER_SERP_API,
    LOG_LEVELS,
    OVERVIEW_SELECTOR,
    PAGE_FETCHERS,
)
from errors import CheckerError

logger = logging.getLogger(__name__)

__all__ = ["ConfigurationError", "Settings", "get_settings"]


class ConfigurationError(CheckerError):
    """Raised when mandatory configuration is missing or invalid."""

    kind = "configuration"
    status_code = 500


@dataclass(frozen=True)
class Settings:
    bright_data_api_key: str = ""
    bright_data_zone: str = BRIGHT_DATA_ZONE
    bright_data_api_url: str = BRIGHT_DATA_API_URL
    page_fetcher: str = FETCHER_SERP_API
    proxy_server: Optional[str] = None
    proxy_username: Optional[str] = None
    proxy_password: Optional[str] = None
    overview_selector: str = OVERVIEW_SELECTOR
    citation_policy: str = DEFAULT_POLICY
    request_timeout: int = DEFAULT_TIMEOUT
    panel_timeout_ms: int = DEFAULT_PANEL_TIMEOUT_MS
    port: int = DEFAULT_PORT
    log_level: str = "INFO"


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _get_choice_env(name: str, default: str, choices: tuple) -> str:
    value = (os.getenv(name) or default).strip().lower()
    if value not in choices:
        raise ConfigurationError(f"{name} must be one of {', '.join(choices)}, got {value!r}")
    return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load, validate and cache settings to avoid repeated env lookups."""
    load_dotenv()

    bright_data_api_key = os.getenv("BRIGHT_DATA_API_KEY", "")
    page_fetcher = _get_choice_env("PAGE_FETCHER", FETCHER_SERP_API, PAGE_FETCHERS)

    if page_fetcher == FETCHER_SERP_API and not bright_data_api_key:
        logger.warning("BRIGHT_DATA_API_KEY is not configured; SERP API requests will be refused.")

    return Settings(
        bright_data_api_key=bright_data_api_key,
        bright_data_zone=os.getenv("BRIGHT_DATA_ZONE") or BRIGHT_DATA_ZONE,
        bright_data_api_url=os.getenv("BRIGHT_DATA_API_URL") or BRIGHT_DATA_API_URL,
        page_fetcher=page_fetcher,
        proxy_server=os.getenv("PROXY_SERVER") or None,
        proxy_username=os.getenv("PROXY_USERNAME") or None,
        proxy_password=os.getenv("PROXY_PASSWORD") or None,
        overview_selector=os.getenv("OVERVIEW_SELECTOR") or OVERVIEW_SELECTOR,
        citation_policy=_get_choice_env("CITATION_POLICY", DEFAULT_POLICY, CITATION_POLICIES),
        request_timeout=_get_int_env("REQUEST_TIMEOUT", DEFAULT_TIMEOUT),
        panel_timeout_ms=_get_int_env("PANEL_TIMEOUT_MS", DEFAULT_PANEL_TIMEOUT_MS),
        port=_get_int_env("PORT", DEFAULT_PORT),
        log_level=_get_choice_env("LOG_LEVEL", "info", LOG_LEVELS).upper(),
    )
