"""NCBI Literature Citation Exporter client: PMID / PMCID -> citation record.

The exporter already answers in CSL-JSON. When the answer carries a DOI the
record is not built here; the caller gets a redirect to the DOI source so the
same work always ends up keyed by its DOI.
"""

from __future__ import annotations

import logging
from typing import Any

import http_client
from http_client import SourceNotFoundError
from models import (
    CitationRecord,
    IdentifierType,
    Redirect,
    accessed_now,
    clean_authors,
    clean_date,
    clean_str,
    clean_str_list,
    first_str,
)

CTXP_API_URL = "https://api.ncbi.nlm.nih.gov/lit/ctxp/v1"

LOGGER = logging.getLogger(__name__)


def fetch_pmid(pmid: str) -> CitationRecord | Redirect:
    return _fetch("pubmed", pmid.strip(), label="PMID", original=pmid)


def fetch_pmcid(pmcid: str) -> CitationRecord | Redirect:
    stripped = pmcid.strip()
    if stripped.startswith("PMC"):
        stripped = stripped[3:]
    return _fetch("pmc", stripped, label="PMCID", original=pmcid)


def _fetch(database: str, value: str, *, label: str, original: str) -> CitationRecord | Redirect:
    LOGGER.debug("NCBI ctxp lookup: db=%s id=%s", database, value)
    response = http_client.get(
        f"{CTXP_API_URL}/{database}/",
        params={"format": "csl", "id": value},
        accept="application/json",
    )
    body = http_client.json_object(response, "NCBI")

    if body.get("status") == "error":
        raise SourceNotFoundError(
            f'Unable to retrieve data for {label} "{original}". NCBI responded with: {body.get("message", body)}'
        )
    response.raise_for_status()

    doi = clean_str(body.get("DOI"))
    if doi:
        LOGGER.info("%s %s carries DOI %s; redirecting", label, original, doi)
        return Redirect(IdentifierType.DOI, doi)

    return _parse_csl(body)


def _parse_csl(data: dict[str, Any]) -> CitationRecord:
    return CitationRecord(
        URL=clean_str(data.get("URL")),
        ISSN=clean_str_list(data.get("ISSN")),
        PMID=clean_str(data.get("PMID")),
        PMCID=clean_str(data.get("PMCID")),
        container_title=first_str(data.get("container-title")),
        issue=clean_str(data.get("issue")),
        issued=clean_date(data.get("issued")),
        page=clean_str(data.get("page")),
        publisher=clean_str(data.get("publisher")),
        publisher_place=clean_str(data.get("publisher-place")),
        source=clean_str(data.get("source")),
        title=first_str(data.get("title")),
        type=clean_str(data.get("type")),
        volume=clean_str(data.get("volume")),
        accessed=accessed_now(),
        author=clean_authors(data.get("author")),
    )
