"""Data structures used across the application."""

from __future__ import annotations

from typing import List, Literal, Optional, TypedDict, Union

NotApplicable = Literal["not-applicable"]
Verdict = Union[bool, NotApplicable]


class ScrapeRequest(TypedDict):
    """Validated input for a single AI Overview check."""

    keyword: str
    domain: str
    region: str


class OverviewPanel(TypedDict):
    """Text and citation links extracted from an AI Overview panel."""

    overviewText: str
    citationLinks: List[str]


class ScrapeResult(TypedDict):
    """Verdict returned to the caller for one keyword."""

    keyword: str
    overviewText: str
    found: Verdict


class BatchRow(TypedDict):
    """A line of the batch report, including fetch failures."""

    keyword: str
    found: Optional[Verdict]
    overview_text: str
    error: Optional[str]


__all__ = [
    "BatchRow",
    "NotApplicable",
    "OverviewPanel",
    "ScrapeRequest",
    "ScrapeResult",
    "Verdict",
]
