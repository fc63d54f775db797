"""Identifier classification: raw user strings -> (type, value)."""

from __future__ import annotations

import re

from models import ClassifiedIdentifier, IdentifierType

# Explicit "type:" tags force the type without pattern validation.
_PREFIXES: tuple[tuple[str, IdentifierType], ...] = (
    ("url:", IdentifierType.URL),
    ("doi:", IdentifierType.DOI),
    ("pmcid:", IdentifierType.PMCID),
    ("pmid:", IdentifierType.PMID),
    ("isbn:", IdentifierType.ISBN),
)

# Order matters: a doi.org URL also matches the URL pattern, so DOI goes first.
_PATTERNS: tuple[tuple[IdentifierType, re.Pattern[str]], ...] = (
    (
        IdentifierType.DOI,
        re.compile(r"^((https?://)?(?:dx\.)?doi\.org/)?10\.\d{4,9}/[-._;()/:a-zA-Z0-9]+$"),
    ),
    (
        IdentifierType.URL,
        re.compile(r"^(https?://)[a-zA-Z0-9\-._~:/?#\[\]@!$&'()*+,;=]+$"),
    ),
    (IdentifierType.PMCID, re.compile(r"^PMC\d+$")),
    (IdentifierType.PMID, re.compile(r"^\d{7,10}$")),
    (IdentifierType.ISBN, re.compile(r"^(97[89])\d{9}(\d|X)$")),
)


def classify(raw: str, index: int = 0) -> ClassifiedIdentifier:
    """Classify one raw identifier.

    Hyphens are stripped only for pattern matching; the returned value keeps
    them.
    """
    trimmed = raw.strip()

    for prefix, identifier_type in _PREFIXES:
        if trimmed.startswith(prefix):
            return ClassifiedIdentifier(identifier_type, trimmed[len(prefix):].strip(), index)

    cleaned = trimmed.replace("-", "")
    for identifier_type, pattern in _PATTERNS:
        if pattern.match(cleaned):
            return ClassifiedIdentifier(identifier_type, trimmed, index)

    return ClassifiedIdentifier(IdentifierType.UNKNOWN, trimmed, index)


def classify_all(raw_identifiers: list[str]) -> list[ClassifiedIdentifier]:
    return [classify(raw, index) for index, raw in enumerate(raw_identifiers)]


def partition_identifiers(
    classified: list[ClassifiedIdentifier],
) -> tuple[list[ClassifiedIdentifier], list[ClassifiedIdentifier]]:
    """Split into (resolvable, unknown) keeping input order in both lists."""
    known = [item for item in classified if item.type is not IdentifierType.UNKNOWN]
    unknown = [item for item in classified if item.type is IdentifierType.UNKNOWN]
    return known, unknown
