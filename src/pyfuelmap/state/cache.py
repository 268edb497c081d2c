"""Id-keyed station cache.

This is the only component allowed to hold fetched station records.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from pyfuelmap.models.station import StationRecord

_logger = logging.getLogger(__name__)


class GeoIndexCache:
    """In-memory set of stations keyed by id.

    Bounded-box fetches are merged in as they arrive. Merge is
    last-write-wins per id with no field-level merge, so it is idempotent
    and commutative for records with different ids. Nothing is evicted
    while the cache is alive; the set only grows until :meth:`dispose`.

    The cache is used from a single event loop and does no locking.
    """

    def __init__(self) -> None:
        self._records: dict[str, StationRecord] = {}
        self._active = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init(self) -> None:
        self._records.clear()
        self._active = True

    def refresh(self, records: Iterable[StationRecord]) -> int:
        """Merge a fresh batch; alias of :meth:`merge` for lifecycle callers."""
        return self.merge(records)

    def dispose(self) -> None:
        _logger.debug("Disposing station cache with %d records", len(self._records))
        self._records.clear()
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def merge(self, incoming: Iterable[StationRecord]) -> int:
        """Union *incoming* into the set, overwriting by id.

        Returns the number of ids that were not cached before.
        """
        added = 0
        for record in incoming:
            if record.id not in self._records:
                added += 1
            self._records[record.id] = record
        if added:
            _logger.debug("Station cache grew by %d to %d", added, len(self._records))
        return added

    def upsert(self, record: StationRecord) -> None:
        self._records[record.id] = record

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def all(self) -> list[StationRecord]:
        """Snapshot of every cached record (a new list on each call)."""
        return list(self._records.values())

    def get(self, station_id: str) -> StationRecord | None:
        return self._records.get(station_id)

    def brands(self) -> list[str]:
        """Sorted distinct non-empty brands across the cached records."""
        return sorted({record.brand for record in self._records.values() if record.brand})

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, station_id: object) -> bool:
        return station_id in self._records

    def __iter__(self) -> Iterator[StationRecord]:
        return iter(self.all())
