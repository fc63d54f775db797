"""Crossref works API client: DOI -> canonical citation record."""

from __future__ import annotations

import logging
from typing import Any

import http_client
from http_client import SourceNotFoundError
from models import (
    CitationRecord,
    accessed_now,
    clean_authors,
    clean_date,
    clean_str,
    clean_str_list,
    first_str,
)

CROSSREF_WORKS_URL = "https://api.crossref.org/works"

_RESOLVER_PREFIXES = (
    "https://doi.org/",
    "http://doi.org/",
    "https://dx.doi.org/",
    "http://dx.doi.org/",
    "doi.org/",
    "dx.doi.org/",
)

LOGGER = logging.getLogger(__name__)


def fetch_doi(doi: str) -> CitationRecord:
    """Fetch one DOI from Crossref and map it into a CitationRecord."""
    normalized = normalize_doi(doi)
    LOGGER.debug("Crossref lookup: doi=%s", normalized)

    response = http_client.get(f"{CROSSREF_WORKS_URL}/{normalized}", accept="application/json")
    if response.status_code == 404:
        raise SourceNotFoundError(f'Unable to retrieve data for DOI "{doi}". Crossref responded with HTTP 404')
    response.raise_for_status()

    body = http_client.json_object(response, "Crossref")
    message = body.get("message")
    if not isinstance(message, dict):
        raise RuntimeError(f'Unexpected Crossref payload for DOI "{doi}": missing message object')

    return _parse_work(message)


def normalize_doi(value: str) -> str:
    """Strip resolver URL and ``doi:`` prefixes from a DOI string."""
    candidate = value.strip()
    lowered = candidate.lower()
    for prefix in _RESOLVER_PREFIXES:
        if lowered.startswith(prefix):
            candidate = candidate[len(prefix):]
            break
    if candidate.lower().startswith("doi:"):
        candidate = candidate.split(":", 1)[1]
    return candidate.strip().strip("/")


def _parse_work(message: dict[str, Any]) -> CitationRecord:
    doi = clean_str(message.get("DOI"))
    return CitationRecord(
        DOI=doi,
        URL=clean_str(message.get("URL")) or (f"https://doi.org/{doi}" if doi else None),
        ISSN=clean_str_list(message.get("ISSN")),
        container_title=first_str(message.get("container-title")),
        issue=clean_str(message.get("issue")),
        issued=clean_date(message.get("issued")),
        page=clean_str(message.get("page")),
        publisher=clean_str(message.get("publisher")),
        publisher_place=clean_str(message.get("publisher-place")),
        source=clean_str(message.get("source")),
        title=first_str(message.get("title")),
        volume=clean_str(message.get("volume")),
        type=clean_str(message.get("type")),
        accessed=accessed_now(),
        author=clean_authors(message.get("author")),
    )
