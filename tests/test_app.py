"""Tests for the Flask HTTP surface."""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Tuple

import pytest

from app import app as flask_app
from config import Settings
from constants import NOT_APPLICABLE, NOT_FOUND_TEXT
from errors import FetchError
from fetchers import PageFetcher

SALESFORCE_HTML = """
<div data-sgrd="true">
  Salesforce is a leading CRM.
  <a href="https://www.salesforce.com/crm">salesforce.com</a>
</div>
"""


class _DummyFetcher(PageFetcher):
    def __init__(self, html: str = "", *, raise_exc: Optional[Exception] = None) -> None:
        self._html = html
        self._exc = raise_exc
        self.calls: List[Tuple[str, str]] = []
        self.closed = False

    def fetch(self, keyword: str, region: str) -> str:
        self.calls.append((keyword, region))
        if self._exc is not None:
            raise self._exc
        return self._html

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    current = Settings(bright_data_api_key="secret-key")
    monkeypatch.setattr("app.get_settings", lambda: current)
    return current


@pytest.fixture
def install_fetcher(monkeypatch: pytest.MonkeyPatch, settings: Settings):
    def _install(fetcher: _DummyFetcher) -> _DummyFetcher:
        monkeypatch.setattr("app.build_fetcher", lambda _settings: fetcher)
        return fetcher

    return _install


def _post(payload: Any):
    client = flask_app.test_client()
    return client.post("/scrape", json=payload)


def test_health_endpoint(settings: Settings) -> None:
    response = flask_app.test_client().get("/healthz")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok", "fetcher": "serp-api"}


def test_scrape_reports_citation(install_fetcher) -> None:
    fetcher = install_fetcher(_DummyFetcher(SALESFORCE_HTML))

    response = _post({"keyword": "best crm", "domain": "salesforce.com", "region": "google.com"})

    assert response.status_code == 200
    body = response.get_json()
    assert body["keyword"] == "best crm"
    assert body["found"] is True
    assert body["overviewText"].strip()
    assert fetcher.calls == [("best crm", "google.com")]
    assert fetcher.closed is True


def test_scrape_without_overview_is_not_applicable(install_fetcher) -> None:
    install_fetcher(_DummyFetcher("<html><body>No panel here</body></html>"))

    response = _post({"keyword": "weather", "domain": "example.com", "region": "google.com"})

    assert response.status_code == 200
    assert response.get_json() == {
        "keyword": "weather",
        "overviewText": NOT_FOUND_TEXT,
        "found": NOT_APPLICABLE,
    }


def test_scrape_validates_payload_before_fetching(install_fetcher) -> None:
    fetcher = install_fetcher(_DummyFetcher(SALESFORCE_HTML))

    assert _post({}).status_code == 400
    response = _post({"keyword": "", "domain": "example.com", "region": "google.com"})

    assert response.status_code == 400
    assert response.get_json()["kind"] == "validation"
    assert fetcher.calls == []
    assert fetcher.closed is True


def test_scrape_rejects_non_json_body(install_fetcher) -> None:
    fetcher = install_fetcher(_DummyFetcher(SALESFORCE_HTML))

    response = flask_app.test_client().post("/scrape", data="keyword=crm")

    assert response.status_code == 400
    assert fetcher.calls == []


@pytest.mark.parametrize("payload", [["keyword"], "best crm", 5])
def test_scrape_rejects_json_that_is_not_an_object(install_fetcher, payload: Any) -> None:
    fetcher = install_fetcher(_DummyFetcher(SALESFORCE_HTML))

    response = _post(payload)

    assert response.status_code == 400
    assert response.get_json()["kind"] == "validation"
    assert fetcher.calls == []


def test_scrape_without_api_key_is_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("app.get_settings", lambda: Settings(bright_data_api_key=""))

    response = _post({"keyword": "crm", "domain": "example.com", "region": "google.com"})

    assert response.status_code == 500
    body = response.get_json()
    assert body["kind"] == "configuration"
    assert "API key" in body["error"]


def test_scrape_surfaces_fetch_errors(install_fetcher) -> None:
    fetcher = install_fetcher(
        _DummyFetcher(raise_exc=FetchError("Failed to fetch from Bright Data: 503 - busy", upstream_status=503))
    )

    response = _post({"keyword": "crm", "domain": "example.com", "region": "google.com"})

    assert response.status_code == 502
    assert response.get_json() == {
        "error": "Failed to fetch from Bright Data: 503 - busy",
        "kind": "fetch",
        "upstreamStatus": 503,
    }
    assert fetcher.closed is True


def test_scrape_reports_unexpected_errors_as_internal(install_fetcher) -> None:
    install_fetcher(_DummyFetcher(raise_exc=RuntimeError("parser exploded")))

    response = _post({"keyword": "crm", "domain": "example.com", "region": "google.com"})

    assert response.status_code == 500
    assert response.get_json() == {"error": "parser exploded", "kind": "internal"}


def test_unknown_route_stays_404(settings: Settings) -> None:
    assert flask_app.test_client().get("/nope").status_code == 404


def test_cors_headers_are_sent(install_fetcher) -> None:
    install_fetcher(_DummyFetcher(SALESFORCE_HTML))
    client = flask_app.test_client()

    response = client.post(
        "/scrape",
        json={"keyword": "crm", "domain": "salesforce.com", "region": "google.com"},
        headers={"Origin": "http://localhost:5173"},
    )

    assert response.headers.get("Access-Control-Allow-Origin") in ("*", "http://localhost:5173")


def test_log_level_is_applied_per_request(monkeypatch: pytest.MonkeyPatch) -> None:
    root = logging.getLogger()
    previous = root.level
    monkeypatch.setattr("app.get_settings", lambda: Settings(log_level="DEBUG"))
    try:
        assert flask_app.test_client().get("/healthz").status_code == 200
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(previous)
