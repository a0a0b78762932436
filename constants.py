"""Shared configuration constants for the application."""

from __future__ import annotations

from typing import Tuple

DEFAULT_TIMEOUT = 30
DEFAULT_PANEL_TIMEOUT_MS = 15000
DEFAULT_PORT = 3000
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

BRIGHT_DATA_API_URL = "https://api.brightdata.com/request"
BRIGHT_DATA_ZONE = "serp_api_aio"
SEARCH_URL_TEMPLATE = "https://www.{region}/search?q={query}&hl=en"

OVERVIEW_SELECTOR = '[data-sgrd="true"]'
NOT_FOUND_TEXT = "Live AI Overview not found on the page for this keyword."
NOT_APPLICABLE = "not-applicable"

POLICY_TEXT = "text"
POLICY_LINKS = "links"
POLICY_LINKS_THEN_TEXT = "links-then-text"
CITATION_POLICIES: Tuple[str, ...] = (POLICY_TEXT, POLICY_LINKS, POLICY_LINKS_THEN_TEXT)
DEFAULT_POLICY = POLICY_LINKS_THEN_TEXT

FETCHER_SERP_API = "serp-api"
FETCHER_BROWSER = "browser"
PAGE_FETCHERS: Tuple[str, ...] = (FETCHER_SERP_API, FETCHER_BROWSER)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
LOG_LEVELS: Tuple[str, ...] = ("debug", "info", "warning", "error", "critical")

_EXPORTED_NAMES = (
    "DEFAULT_TIMEOUT",
    "DEFAULT_PANEL_TIMEOUT_MS",
    "DEFAULT_PORT",
    "USER_AGENT",
    "BRIGHT_DATA_API_URL",
    "BRIGHT_DATA_ZONE",
    "SEARCH_URL_TEMPLATE",
    "OVERVIEW_SELECTOR",
    "NOT_FOUND_TEXT",
    "NOT_APPLICABLE",
    "POLICY_TEXT",
    "POLICY_LINKS",
    "POLICY_LINKS_THEN_TEXT",
    "CITATION_POLICIES",
    "DEFAULT_POLICY",
    "FETCHER_SERP_API",
    "FETCHER_BROWSER",
    "PAGE_FETCHERS",
    "LOG_FORMAT",
    "LOG_LEVELS",
)

__all__ = [name for name in _EXPORTED_NAMES if name in globals()]
