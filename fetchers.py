"""Page fetchers that turn a keyword and a search region into results HTML."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Type
from urllib.parse import quote

import requests
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from config import ConfigurationError, Settings
from constants import FETCHER_BROWSER, FETCHER_SERP_API, SEARCH_URL_TEMPLATE, USER_AGENT
from detector import normalize_domain
from errors import FetchError

logger = logging.getLogger(__name__)

__all__ = [
    "build_session",
    "build_search_url",
    "PageFetcher",
    "SerpApiFetcher",
    "BrowserFetcher",
    "build_fetcher",
]


def build_session() -> requests.Session:
    """Create a configured `requests.Session` with retries and headers.

    Retries only cover idempotent methods, so the SERP API POST is sent once.
    """
    session = requests.Session()
    retry = Retry(
        total=3,
        backoff_factor=0.6,
        status_forcelist=[429, 500, 502, 503, 504],
        # POST is not listed, so the Bright Data call is never retried
        allowed_methods=frozenset(["GET", "HEAD"]),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({
        "User-Agent": USER_AGENT,
        "Accept-Language": "en-US,en;q=0.9",
    })
    return session


def build_search_url(keyword: str, region: str) -> str:
    """Build the Google search URL for ``keyword`` on the ``region`` host."""
    host = normalize_domain(region)
    return SEARCH_URL_TEMPLATE.format(region=host, query=quote(keyword, safe="!~*'()"))


class PageFetcher:
    """Base class for fetchers; subclasses implement `fetch`."""

    name = "base"

    def fetch(self, keyword: str, region: str) -> str:
        raise NotImplementedError

    def close(self) -> None:
        """Release any resource held by the fetcher."""

    def __enter__(self) -> "PageFetcher":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class SerpApiFetcher(PageFetcher):
    """Fetch raw results HTML through the Bright Data request API."""

    name = FETCHER_SERP_API

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None) -> None:
        if not settings.bright_data_api_key:
            raise ConfigurationError("Bright Data API key is not configured on the server.")
        self.settings = settings
        self.session = session if session is not None else build_session()

    def fetch(self, keyword: str, region: str) -> str:
        search_url = build_search_url(keyword, region)
        body = {
            "zone": self.settings.bright_data_zone,
            "url": search_url,
            "format": "raw",
        }
        headers = {"Authorization": f"Bearer {self.settings.bright_data_api_key}"}
        logger.info("Requesting %s through Bright Data zone %s", search_url, self.settings.bright_data_zone)

        try:
            resp = self.session.post(
                self.settings.bright_data_api_url,
                json=body,
                headers=headers,
                timeout=self.settings.request_timeout,
            )
        except requests.exceptions.Timeout as exc:
            raise FetchError(f"Bright Data request timed out: {exc}") from exc
        except requests.exceptions.RequestException as exc:
            raise FetchError(f"Bright Data request failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            logger.warning("Bright Data returned HTTP %s for %s", resp.status_code, search_url)
            raise FetchError(
                f"Failed to fetch from Bright Data: {resp.status_code} - {resp.text}",
                upstream_status=resp.status_code,
            )
        return resp.text

    def close(self) -> None:
        self.session.close()


class BrowserFetcher(PageFetcher):
    """Render the results page in headless Chromium, optionally via a proxy.

    A browser is launched for every fetch and closed before returning, whether
    the navigation succeeded or not.
    """

    name = FETCHER_BROWSER

    def __init__(self, settings: Settings, playwright_factory: Callable[[], Any] = sync_playwright) -> None:
        self.settings = settings
        self._playwright_factory = playwright_factory

    def _launch_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {"headless": True}
        if self.settings.proxy_server:
            proxy = {"server": self.settings.proxy_server}
            if self.settings.proxy_username:
                proxy["username"] = self.settings.proxy_username
            if self.settings.proxy_password:
                proxy["password"] = self.settings.proxy_password
            options["proxy"] = proxy
        return options

    def fetch(self, keyword: str, region: str) -> str:
        search_url = build_search_url(keyword, region)
        timeout = self.settings.panel_timeout_ms
        selector = self.settings.overview_selector
        logger.info("Opening %s in headless browser (proxy=%s)", search_url, bool(self.settings.proxy_server))

        try:
            with self._playwright_factory() as playwright:
                browser = playwright.chromium.launch(**self._launch_options())
                try:
                    context = browser.new_context(user_agent=USER_AGENT, locale="en-US")
                    page = context.new_page()
                    response = page.goto(search_url, wait_until="domcontentloaded", timeout=timeout)
                    if response is not None and response.status >= 400:
                        raise FetchError(
                            f"Search page returned HTTP {response.status}",
                            upstream_status=response.status,
                        )
                    page.wait_for_selector(selector, timeout=timeout)
                    return page.content()
                finally:
                    browser.close()
        except PlaywrightTimeoutError as exc:
            raise FetchError(f"Timed out after {timeout} ms waiting for the AI Overview: {exc}") from exc
        except PlaywrightError as exc:
            raise FetchError(f"Browser navigation failed: {exc}") from exc


_FETCHERS: Dict[str, Type[PageFetcher]] = {
    FETCHER_SERP_API: SerpApiFetcher,
    FETCHER_BROWSER: BrowserFetcher,
}


def build_fetcher(settings: Settings) -> PageFetcher:
    """Instantiate the fetcher named by ``settings.page_fetcher``."""
    fetcher_cls = _FETCHERS.get(settings.page_fetcher)
    if fetcher_cls is None:
        raise ConfigurationError(f"Unknown page fetcher: {settings.page_fetcher!r}")
    return fetcher_cls(settings)
