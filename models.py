"""Shared typed models for the citation pipeline."""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from enum import Enum
from typing import Any

_UID_ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_"

# CSL-JSON uses hyphenated keys; dataclass fields cannot.
_CSL_KEY_OVERRIDES = {
    "container_title": "container-title",
    "number_of_pages": "number-of-pages",
    "publisher_place": "publisher-place",
}

FAILED_STATUS = "failed"


class IdentifierType(str, Enum):
    """Closed set of identifier kinds the classifier can produce."""

    URL = "URL"
    DOI = "DOI"
    ISBN = "ISBN"
    PMID = "PMID"
    PMCID = "PMCID"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True, slots=True)
class ClassifiedIdentifier:
    """A raw identifier after classification.

    ``index`` is the position of the identifier in the user's input and is
    carried through resolution so output order can follow input order.
    """

    type: IdentifierType
    value: str
    index: int = 0


@dataclass(slots=True)
class CitationRecord:
    """Canonical, source-independent citation record (CSL-JSON shaped).

    Every field except ``id`` is optional; ``None`` means unknown.
    """

    id: str = field(default_factory=lambda: uid())
    DOI: str | None = None
    URL: str | None = None
    ISSN: list[str] | None = None
    ISBN: str | None = None
    PMID: str | None = None
    PMCID: str | None = None
    container_title: str | None = None
    issue: str | None = None
    issued: dict[str, Any] | None = None
    page: str | None = None
    number_of_pages: int | None = None
    publisher: str | None = None
    publisher_place: str | None = None
    source: str | None = None
    title: str | None = None
    volume: str | None = None
    type: str | None = None
    accessed: dict[str, Any] | None = None
    author: list[dict[str, str]] | None = None

    def to_csl_json(self) -> dict[str, Any]:
        """Return the record as a CSL-JSON dict, omitting unknown fields."""
        data: dict[str, Any] = {}
        for item in fields(self):
            value = getattr(self, item.name)
            if value is None:
                continue
            data[_CSL_KEY_OVERRIDES.get(item.name, item.name)] = value
        return data


@dataclass(frozen=True, slots=True)
class FailureMarker:
    """Non-fatal per-identifier failure; never handed to the renderer."""

    identifier: str
    type: IdentifierType
    id: str = field(default_factory=lambda: uid())
    status: str = FAILED_STATUS


@dataclass(frozen=True, slots=True)
class Redirect:
    """Instruction from an adapter to re-resolve through another identifier."""

    type: IdentifierType
    value: str


def uid(length: int = 16) -> str:
    """Return a random id of ``length`` characters from ``[a-zA-Z0-9_]``."""
    if length <= 0:
        raise ValueError("Length must be a positive number")
    return "".join(secrets.choice(_UID_ALPHABET) for _ in range(length))


def date_object(year: int, month: int | None = None, day: int | None = None) -> dict[str, Any]:
    """Build a CSL date object; unknown month/day are omitted, not defaulted."""
    parts = [year]
    if month:
        parts.append(month)
        if day:
            parts.append(day)
    return {"date-parts": [parts]}


def date_object_from(value: date | datetime) -> dict[str, Any]:
    return date_object(value.year, value.month, value.day)


def accessed_now() -> dict[str, Any]:
    """Date object stamped at resolution time."""
    return date_object_from(datetime.now())


def author_from_name(name: str) -> dict[str, str]:
    """Split a display name on whitespace: first token given, rest family."""
    tokens = name.split()
    given = tokens[0] if tokens else ""
    return {"given": given, "family": " ".join(tokens[1:])}


def authors_from_names(names: list[str] | None) -> list[dict[str, str]] | None:
    if not names:
        return None
    authors = [author_from_name(name) for name in names if isinstance(name, str) and name.strip()]
    return authors or None


def clean_str(value: Any) -> str | None:
    """Stripped string, or None for empty / non-string values (ints are kept)."""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value.strip() if isinstance(value, str) and value.strip() else None


def clean_str_list(value: Any) -> list[str] | None:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return None
    items = [item.strip() for item in value if isinstance(item, str) and item.strip()]
    return items or None


def clean_date(value: Any) -> dict[str, Any] | None:
    """Pass through a CSL date object when it carries at least a year."""
    if not isinstance(value, dict):
        return None
    parts = value.get("date-parts")
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], list):
        return None
    first: list[int] = []
    for part in parts[0]:
        try:
            first.append(int(part))
        except (TypeError, ValueError):
            break
    if not first:
        return None
    return {"date-parts": [first]}


def clean_authors(value: Any) -> list[dict[str, str]] | None:
    """Reduce CSL-style name objects to given/family pairs.

    Organisation names (``name`` / ``literal``) are kept as the family part.
    """
    if not isinstance(value, list):
        return None
    authors: list[dict[str, str]] = []
    for item in value:
        if not isinstance(item, dict):
            continue
        given = clean_str(item.get("given")) or ""
        family = clean_str(item.get("family")) or clean_str(item.get("name")) or clean_str(item.get("literal")) or ""
        if given or family:
            authors.append({"given": given, "family": family})
    return authors or None


# (format, has_month, has_day) in the order they are tried.
_DATE_FORMATS: tuple[tuple[str, bool, bool], ...] = (
    ("%Y-%m-%d", True, True),
    ("%Y/%m/%d", True, True),
    ("%B %d, %Y", True, True),
    ("%b %d, %Y", True, True),
    ("%d %B %Y", True, True),
    ("%d %b %Y", True, True),
    ("%m/%d/%Y", True, True),
    ("%Y-%m", True, False),
    ("%B %Y", True, False),
    ("%b %Y", True, False),
    ("%b. %Y", True, False),
    ("%Y", False, False),
)


def parse_date_text(raw: str | None) -> dict[str, Any] | None:
    """Parse a free-form publication date into a CSL date object.

    Returns None when nothing parseable is found. Parts that the text does
    not carry (e.g. the day in "March 2005") are left out.
    """
    if not raw or not raw.strip():
        return None

    value = raw.strip()
    # RFC3339 timestamps (meta tags) with trailing Z.
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        pass
    else:
        return date_object_from(parsed)

    for fmt, has_month, has_day in _DATE_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        return date_object(
            parsed.year,
            parsed.month if has_month else None,
            parsed.day if has_day else None,
        )
    return None


def first_str(value: Any) -> str | None:
    """First element of a list-valued upstream field, or the scalar itself."""
    if isinstance(value, list):
        return clean_str(value[0]) if value else None
    return clean_str(value)
