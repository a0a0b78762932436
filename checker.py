"""Core checking utilities: validation, single checks and batch reports."""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from constants import DEFAULT_POLICY, OVERVIEW_SELECTOR
from detector import evaluate_panel, extract_overview, normalize_domain
from errors import FetchError, ValidationError
from fetchers import PageFetcher
from models import BatchRow, ScrapeRequest, ScrapeResult

logger = logging.getLogger(__name__)

__all__ = [
    "REQUIRED_FIELDS",
    "validate_request",
    "check_keyword",
    "read_keywords",
    "check_keywords",
    "to_csv_bytes",
]

REQUIRED_FIELDS = ("keyword", "domain", "region")


def validate_request(payload: Optional[Mapping[str, Any]]) -> ScrapeRequest:
    """Return a clean `ScrapeRequest` or raise `ValidationError`."""
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be a JSON object")
    missing = [
        field for field in REQUIRED_FIELDS
        if not isinstance(payload.get(field), str) or not payload[field].strip()
    ]
    if missing:
        raise ValidationError(f"Missing required parameters: {', '.join(missing)}")

    request: ScrapeRequest = {
        "keyword": payload["keyword"].strip(),
        "domain": payload["domain"].strip(),
        "region": payload["region"].strip(),
    }
    if not normalize_domain(request["domain"]):
        raise ValidationError(f"Domain {request['domain']!r} does not contain a host name")
    if not normalize_domain(request["region"]):
        raise ValidationError(f"Region {request['region']!r} does not contain a host name")
    return request


def check_keyword(
    fetcher: PageFetcher,
    request: ScrapeRequest,
    *,
    selector: str = OVERVIEW_SELECTOR,
    policy: str = DEFAULT_POLICY,
) -> ScrapeResult:
    """Fetch the results page for one keyword and report the citation verdict."""
    html = fetcher.fetch(request["keyword"], request["region"])
    panel = extract_overview(html, selector)
    result = evaluate_panel(request["keyword"], panel, normalize_domain(request["domain"]), policy)
    logger.info(
        "keyword=%r domain=%s panel=%s found=%s",
        request["keyword"],
        request["domain"],
        panel is not None,
        result["found"],
    )
    return result


def read_keywords(input_path: Path) -> List[str]:
    """Load keywords from a text file, skipping blanks and comments."""
    if not input_path.exists():
        return []
    lines = input_path.read_text(encoding="utf-8").splitlines()
    return [ln.strip() for ln in lines if ln.strip() and not ln.strip().startswith("#")]


def check_keywords(
    fetcher: PageFetcher,
    keywords: Sequence[str],
    domain: str,
    region: str,
    *,
    selector: str = OVERVIEW_SELECTOR,
    policy: str = DEFAULT_POLICY,
) -> List[BatchRow]:
    """Run `check_keyword` for every keyword with a shared fetcher.

    A fetch failure is recorded on its row and the batch carries on.
    """
    rows: List[BatchRow] = []
    for keyword in keywords:
        request = validate_request({"keyword": keyword, "domain": domain, "region": region})
        try:
            result = check_keyword(fetcher, request, selector=selector, policy=policy)
        except FetchError as exc:
            logger.warning("Fetch failed for keyword=%r: %s", keyword, exc)
            rows.append({"keyword": request["keyword"], "found": None, "overview_text": "", "error": str(exc)})
            continue
        rows.append({
            "keyword": result["keyword"],
            "found": result["found"],
            "overview_text": result["overviewText"],
            "error": None,
        })
    return rows


def to_csv_bytes(rows: Iterable[BatchRow]) -> bytes:
    """Serialize batch rows into CSV and return the encoded bytes."""
    output = io.StringIO()
    fieldnames = ["keyword", "found", "error", "overview_text"]
    writer = csv.DictWriter(output, fieldnames=fieldnames)
    writer.writeheader()
    for r in rows:
        row: Dict[str, Any] = dict(r)
        row["found"] = "" if r["found"] is None else r["found"]
        row["error"] = r["error"] or ""
        row["overview_text"] = " ".join(r["overview_text"].split())
        writer.writerow(row)
    return output.getvalue().encode("utf-8")
