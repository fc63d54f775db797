"""Ordered, append-only collection of citation records for one run."""

from __future__ import annotations

from collections.abc import Iterator

from models import CitationRecord


class CitationRecordStore:
    """Records accumulated across a batch of identifiers.

    Records arrive in completion order from parallel lookups. Each append
    carries the input position of the identifier that produced it, and
    iteration returns records in that input order.
    """

    def __init__(self) -> None:
        self._entries: list[tuple[int, int, CitationRecord]] = []
        self._by_id: dict[str, CitationRecord] = {}

    def append(self, record: CitationRecord, index: int | None = None) -> None:
        """Add a record; without ``index`` it sorts after everything seen so far."""
        if record.id in self._by_id:
            raise ValueError(f"Duplicate citation record id: {record.id}")
        arrival = len(self._entries)
        if index is None:
            index = max((entry[0] for entry in self._entries), default=-1) + 1
        self._entries.append((index, arrival, record))
        self._by_id[record.id] = record

    def get(self, record_id: str) -> CitationRecord | None:
        return self._by_id.get(record_id)

    def records(self) -> list[CitationRecord]:
        """Records sorted by input index; ties keep arrival order."""
        return [record for _, _, record in sorted(self._entries, key=lambda entry: (entry[0], entry[1]))]

    def completion_order(self) -> list[CitationRecord]:
        return [record for _, _, record in self._entries]

    def __iter__(self) -> Iterator[CitationRecord]:
        return iter(self.records())

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)
