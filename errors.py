"""Error taxonomy shared by the checker, the fetchers and the HTTP layer."""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__ = ["CheckerError", "ValidationError", "FetchError"]


class CheckerError(Exception):
    """Base class for errors that terminate a check and reach the caller."""

    kind = "internal"
    status_code = 500

    def to_payload(self) -> Dict[str, Any]:
        return {"error": str(self), "kind": self.kind}


class ValidationError(CheckerError):
    """Raised when the request is missing keyword, domain or region."""

    kind = "validation"
    status_code = 400


class FetchError(CheckerError):
    """Raised when the results page could not be fetched."""

    kind = "fetch"
    status_code = 502

    def __init__(self, message: str, *, upstream_status: Optional[int] = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        if self.upstream_status is not None:
            payload["upstreamStatus"] = self.upstream_status
        return payload
