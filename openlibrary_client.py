"""Open Library search API client: ISBN -> canonical book record."""

from __future__ import annotations

import logging
from typing import Any

import http_client
from http_client import SourceNotFoundError
from models import CitationRecord, accessed_now, authors_from_names, clean_str, first_str, parse_date_text

OPENLIBRARY_SEARCH_URL = "https://openlibrary.org/search.json"

LOGGER = logging.getLogger(__name__)


def fetch_isbn(isbn: str) -> CitationRecord:
    """Search Open Library by ISBN and map the first match into a book record."""
    LOGGER.debug("Open Library lookup: isbn=%s", isbn)
    response = http_client.get(
        OPENLIBRARY_SEARCH_URL,
        params={"q": f"isbn:{isbn}", "mode": "everything", "fields": "*,editions"},
        accept="application/json",
    )
    response.raise_for_status()
    body = http_client.json_object(response, "Open Library")

    num_found = body.get("numFound")
    if not isinstance(num_found, int):
        raise RuntimeError(f'Unexpected Open Library payload for ISBN "{isbn}": missing numFound')
    docs = body.get("docs")
    if num_found == 0 or not isinstance(docs, list) or not docs:
        raise SourceNotFoundError(f'Unable to retrieve data for ISBN "{isbn}". Open Library found no match')

    return _parse_doc(docs[0], isbn)


def _parse_doc(doc: Any, isbn: str) -> CitationRecord:
    if not isinstance(doc, dict):
        raise RuntimeError("Unexpected Open Library document shape: expected an object")

    edition = _first_edition(doc)
    pages = doc.get("number_of_pages_median")

    return CitationRecord(
        type="book",
        title=clean_str(doc.get("title")),
        number_of_pages=pages if isinstance(pages, int) and pages > 0 else None,
        author=authors_from_names(doc.get("author_name")),
        publisher=first_str(edition.get("publisher")),
        publisher_place=first_str(edition.get("publish_place")),
        ISBN=first_str(edition.get("isbn")) or isbn,
        issued=parse_date_text(first_str(edition.get("publish_date"))),
        accessed=accessed_now(),
    )


def _first_edition(doc: dict[str, Any]) -> dict[str, Any]:
    editions = doc.get("editions")
    edition_docs = editions.get("docs") if isinstance(editions, dict) else None
    if isinstance(edition_docs, list) and edition_docs and isinstance(edition_docs[0], dict):
        return edition_docs[0]
    return {}
