#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""HTTP entrypoint for the AI Overview checker."""

from __future__ import annotations

import logging
from typing import Any

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from checker import check_keyword, validate_request
from config import get_settings
from constants import LOG_FORMAT
from errors import CheckerError
from fetchers import build_fetcher

# ---------- Logging ----------
logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)
CORS(app)


@app.before_request
def apply_log_level() -> None:
    """Apply LOG_LEVEL whether served by `python app.py` or a WSGI server."""
    logging.getLogger().setLevel(get_settings().log_level)


# ---------- Errors ----------
@app.errorhandler(CheckerError)
def handle_checker_error(exc: CheckerError) -> Any:
    if exc.status_code >= 500:
        logger.error("Check failed (%s): %s", exc.kind, exc)
    return jsonify(exc.to_payload()), exc.status_code


@app.errorhandler(Exception)
def handle_unexpected_error(exc: Exception) -> Any:
    if isinstance(exc, HTTPException):
        return exc
    logger.exception("Unexpected error while handling %s", request.path)
    return jsonify({"error": str(exc) or "An internal server error occurred.", "kind": "internal"}), 500


# ---------- Routes ----------
@app.get("/healthz")
def healthcheck() -> Any:
    """Lightweight health endpoint; only reads settings."""
    settings = get_settings()
    return jsonify({"status": "ok", "fetcher": settings.page_fetcher}), 200


@app.post("/scrape")
def scrape() -> Any:
    """
    Check whether a domain is cited in the AI Overview for a keyword.
    Required JSON fields: keyword, domain, region
    """
    settings = get_settings()
    with build_fetcher(settings) as fetcher:
        scrape_request = validate_request(request.get_json(silent=True))
        result = check_keyword(
            fetcher,
            scrape_request,
            selector=settings.overview_selector,
            policy=settings.citation_policy,
        )
    return jsonify(result), 200


# ---------- CLI entry ----------
if __name__ == "__main__":
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level)
    logger.info("AI Overview Checker backend listening at http://localhost:%s", settings.port)
    app.run(host="0.0.0.0", port=settings.port)
