"""Shared HTTP settings for the source adapters and the renderer."""

from __future__ import annotations

import os
from typing import Any

import requests

REQUEST_TIMEOUT_SECONDS = 20
_DEFAULT_USER_AGENT = "citeease/1.2.0 (+https://github.com/ganemedelabs/citeease-cli)"


class SourceNotFoundError(RuntimeError):
    """The upstream source reports that the identifier does not exist."""


class SourceForbiddenError(RuntimeError):
    """The upstream source refused the request (HTTP 403)."""


def request_timeout() -> float:
    return float(os.getenv("CITEEASE_TIMEOUT_SECONDS", REQUEST_TIMEOUT_SECONDS))


def proxied(url: str) -> str:
    """Prefix ``url`` with CITEEASE_CORS_PROXY when one is configured."""
    proxy = os.getenv("CITEEASE_CORS_PROXY", "")
    return f"{proxy}{url}" if proxy else url


def default_headers(accept: str | None = None) -> dict[str, str]:
    headers = {"User-Agent": os.getenv("CITEEASE_USER_AGENT", _DEFAULT_USER_AGENT)}
    if accept:
        headers["Accept"] = accept
    return headers


def get(url: str, *, params: dict[str, Any] | None = None, accept: str | None = None) -> requests.Response:
    """GET ``url`` through the optional proxy with the shared timeout and headers.

    Status handling is left to the caller since each source signals
    "not found" differently.
    """
    return requests.get(
        proxied(url),
        params=params,
        headers=default_headers(accept),
        timeout=request_timeout(),
    )


def json_object(response: requests.Response, source: str) -> dict[str, Any]:
    """Decode a JSON object body or raise a parse failure."""
    try:
        body = response.json()
    except ValueError as exc:
        raise RuntimeError(f"{source} returned a non-JSON body (HTTP {response.status_code})") from exc
    if not isinstance(body, dict):
        raise RuntimeError(f"Unexpected {source} payload shape: expected an object")
    return body
