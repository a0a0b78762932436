"""Citation detection inside the AI Overview panel of a results page."""

from __future__ import annotations

import re
from typing import Optional

from bs4 import BeautifulSoup

from constants import (
    NOT_APPLICABLE,
    NOT_FOUND_TEXT,
    OVERVIEW_SELECTOR,
    POLICY_LINKS,
    POLICY_LINKS_THEN_TEXT,
    POLICY_TEXT,
)
from models import OverviewPanel, ScrapeResult, Verdict

__all__ = [
    "normalize_domain",
    "brand_token",
    "extract_overview",
    "cited_in_links",
    "cited_in_text",
    "detect_citation",
    "evaluate_panel",
]

_PREFIX_REGEX = re.compile(r"^(?:https?://|www\.)", flags=re.IGNORECASE)
_SUFFIX_REGEX = re.compile(r"[/?#]")


def normalize_domain(domain: str) -> str:
    """Strip scheme, ``www.`` and any path, query or fragment so only the bare host remains.

    Prefixes are removed until none is left, which keeps the function
    idempotent for inputs such as ``www.www.example.com``.
    """
    host = domain.strip()
    while True:
        stripped = _PREFIX_REGEX.sub("", host, count=1).lstrip()
        if stripped == host:
            break
        host = stripped
    return _SUFFIX_REGEX.split(host, 1)[0].rstrip().lower()


def brand_token(normalized_domain: str) -> str:
    """Return the first label of a normalized domain (``example`` for ``example.com``)."""
    return normalized_domain.split(".", 1)[0]


def extract_overview(html: str, selector: str = OVERVIEW_SELECTOR) -> Optional[OverviewPanel]:
    """Locate the first panel matching ``selector`` and collect its text and links."""
    soup = BeautifulSoup(html, "html.parser")
    element = soup.select_one(selector)
    if element is None:
        return None
    links = [str(a["href"]) for a in element.find_all("a", href=True)]
    return {
        "overviewText": element.get_text(),
        "citationLinks": links,
    }


def cited_in_links(panel: OverviewPanel, domain: str) -> bool:
    return any(domain in href.lower() for href in panel["citationLinks"])


def cited_in_text(panel: OverviewPanel, domain: str) -> bool:
    text = panel["overviewText"].lower()
    brand = brand_token(domain)
    return domain in text or (bool(brand) and brand in text)


def detect_citation(
    panel: Optional[OverviewPanel],
    normalized_domain: str,
    policy: str = POLICY_LINKS_THEN_TEXT,
) -> Verdict:
    """Decide whether ``normalized_domain`` is cited in ``panel``.

    ``links`` looks for the domain in anchor targets, ``text`` looks for the
    domain or its brand token in the visible text, and ``links-then-text``
    applies the text check only when the panel has no anchors at all.
    Returns ``"not-applicable"`` when there is no panel.
    """
    if not normalized_domain:
        raise ValueError("normalized domain must not be empty")
    if panel is None:
        return NOT_APPLICABLE

    domain = normalized_domain.lower()
    if policy == POLICY_LINKS:
        return cited_in_links(panel, domain)
    if policy == POLICY_TEXT:
        return cited_in_text(panel, domain)
    if policy == POLICY_LINKS_THEN_TEXT:
        if panel["citationLinks"]:
            return cited_in_links(panel, domain)
        return cited_in_text(panel, domain)
    raise ValueError(f"unknown citation policy: {policy!r}")


def evaluate_panel(
    keyword: str,
    panel: Optional[OverviewPanel],
    normalized_domain: str,
    policy: str = POLICY_LINKS_THEN_TEXT,
) -> ScrapeResult:
    """Build the caller-facing result for one keyword."""
    found = detect_citation(panel, normalized_domain, policy)
    overview_text = NOT_FOUND_TEXT if panel is None else panel["overviewText"]
    return {"keyword": keyword, "overviewText": overview_text, "found": found}
