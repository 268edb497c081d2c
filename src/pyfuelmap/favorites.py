"""Bounded favorites set synchronized with the user profile."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable

from pyfuelmap._constants import MAX_FAVORITES
from pyfuelmap.exceptions import FuelMapCapacityError
from pyfuelmap.state.tentative import Tentative

_logger = logging.getLogger(__name__)

FavoritesWriter = Callable[[frozenset[str]], Awaitable[None]]


class FavoritesLedger:
    """The signed-in user's favorite station ids.

    Every change writes the complete resulting set in one remote update.
    The change is visible immediately and reverted if the write fails.

    Parameters
    ----------
    write : callable
        Coroutine persisting the full set (``favorite_stations``).
    capacity : int
        Maximum number of favorites.
    """

    def __init__(self, write: FavoritesWriter, *, capacity: int = MAX_FAVORITES) -> None:
        self._write = write
        self._capacity = capacity
        self._state: Tentative[frozenset[str]] = Tentative(frozenset())

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def members(self) -> frozenset[str]:
        return self._state.value

    def load(self, station_ids: Iterable[str]) -> None:
        """Replace the set with the ids read from the profile."""
        ids = frozenset(station_ids)
        if len(ids) > self._capacity:
            _logger.warning("Profile holds %d favorites, above the limit of %d", len(ids), self._capacity)
        self._state.reset(ids)

    def clear(self) -> None:
        self._state.reset(frozenset())

    async def toggle(self, station_id: str) -> frozenset[str]:
        """Add *station_id* if absent, remove it otherwise.

        Raises
        ------
        FuelMapCapacityError
            If adding would exceed the limit; nothing is written.
        """
        current = self._state.value
        if station_id in current:
            return await self._commit(current - {station_id})
        if len(current) >= self._capacity:
            raise FuelMapCapacityError(f"Max {self._capacity} favorites allowed.", capacity=self._capacity)
        return await self._commit(current | {station_id})

    async def remove(self, station_id: str) -> frozenset[str]:
        current = self._state.value
        if station_id not in current:
            return current
        return await self._commit(current - {station_id})

    async def _commit(self, updated: frozenset[str]) -> frozenset[str]:
        return await self._state.apply(updated, lambda: self._write(updated))

    def __contains__(self, station_id: object) -> bool:
        return station_id in self._state.value

    def __len__(self) -> int:
        return len(self._state.value)
