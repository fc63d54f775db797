"""Identifier resolution: dispatch, cross-identifier redirects and fan-out."""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field

from crossref_client import fetch_doi
from models import CitationRecord, ClassifiedIdentifier, FailureMarker, IdentifierType, Redirect
from openlibrary_client import fetch_isbn
from pubmed_client import fetch_pmcid, fetch_pmid
from record_store import CitationRecordStore
from webpage_client import fetch_url

# URL -> PMID -> DOI is the longest chain the sources produce.
MAX_REDIRECTS = 2
MAX_WORKERS = 8

LOGGER = logging.getLogger(__name__)

Fetcher = Callable[[str], "CitationRecord | Redirect"]

FETCHERS: dict[IdentifierType, Fetcher] = {
    IdentifierType.DOI: fetch_doi,
    IdentifierType.URL: fetch_url,
    IdentifierType.ISBN: fetch_isbn,
    IdentifierType.PMID: fetch_pmid,
    IdentifierType.PMCID: fetch_pmcid,
}


class RedirectLimitError(RuntimeError):
    """A source kept pointing at other identifiers beyond MAX_REDIRECTS."""


@dataclass(frozen=True, slots=True)
class ResolveOptions:
    log_errors: bool = False
    max_workers: int = MAX_WORKERS


@dataclass(slots=True)
class ResolveResult:
    store: CitationRecordStore = field(default_factory=CitationRecordStore)
    failures: list[tuple[int, FailureMarker]] = field(default_factory=list)

    @property
    def records(self) -> list[CitationRecord]:
        return self.store.records()

    @property
    def failed(self) -> list[FailureMarker]:
        """Failures in input order."""
        return [marker for _, marker in sorted(self.failures, key=lambda item: item[0])]


class Resolver:
    """Resolve classified identifiers into canonical records.

    ``resolve`` never raises: any failure inside an adapter, including a
    failure in a redirected lookup, is returned as a FailureMarker for the
    identifier the caller asked about.
    """

    def __init__(
        self,
        options: ResolveOptions | None = None,
        fetchers: dict[IdentifierType, Fetcher] | None = None,
    ) -> None:
        self.options = options or ResolveOptions()
        self._fetchers = fetchers if fetchers is not None else FETCHERS

    def resolve(self, identifier_type: IdentifierType, value: str) -> CitationRecord | FailureMarker:
        try:
            return self._follow(identifier_type, value)
        except Exception as exc:  # adapter boundary: every failure becomes data
            if self.options.log_errors:
                LOGGER.error("%s %s: %s", identifier_type.value, value, exc)
            else:
                LOGGER.debug("Lookup failed for %s %s: %s", identifier_type.value, value, exc)
            return FailureMarker(identifier=value, type=identifier_type)

    def resolve_all(self, identifiers: list[ClassifiedIdentifier]) -> ResolveResult:
        """Resolve every identifier concurrently and wait for all of them.

        Successful records go into the store in completion order; the store
        hands them back in input order.
        """
        result = ResolveResult()
        if not identifiers:
            return result

        workers = max(1, min(self.options.max_workers, len(identifiers)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(self.resolve, item.type, item.value): item
                for item in identifiers
                if item.type is not IdentifierType.UNKNOWN
            }
            for future in as_completed(futures):
                item = futures[future]
                outcome = future.result()
                if isinstance(outcome, FailureMarker):
                    result.failures.append((item.index, outcome))
                else:
                    result.store.append(outcome, index=item.index)

        LOGGER.info(
            "Resolution complete: requested=%s resolved=%s failed=%s",
            len(identifiers),
            len(result.store),
            len(result.failures),
        )
        return result

    def _follow(self, identifier_type: IdentifierType, value: str) -> CitationRecord:
        current_type, current_value = identifier_type, value
        for _ in range(MAX_REDIRECTS + 1):
            fetcher = self._fetchers.get(current_type)
            if fetcher is None:
                raise ValueError(f"No source for identifier type {current_type.value}")

            outcome = fetcher(current_value)
            if not isinstance(outcome, Redirect):
                return outcome

            LOGGER.debug(
                "Redirect %s %s -> %s %s",
                current_type.value,
                current_value,
                outcome.type.value,
                outcome.value,
            )
            current_type, current_value = outcome.type, outcome.value

        raise RedirectLimitError(
            f"Too many identifier redirects starting from {identifier_type.value} {value}"
        )
