"""Optimistic local state with commit/rollback."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class Tentative(Generic[T]):
    """A value that can be changed ahead of a remote write.

    :meth:`apply` shows the new value immediately, runs the remote
    commit, and keeps the value on success. If the commit raises, the
    last confirmed value is restored and the exception propagates.

    Overlapping applies are tracked by generation. The shown value is
    the newest in-flight value started after the last successful commit,
    or the confirmed value when there is none. The confirmed value is the
    last commit to succeed.

    Usage::

        favorites = Tentative(frozenset())
        await favorites.apply(new_set, lambda: write_remote(new_set))
    """

    def __init__(self, initial: T) -> None:
        self._confirmed = initial
        self._value = initial
        self._generation = 0
        self._confirmed_generation = 0
        self._in_flight: dict[int, T] = {}

    @property
    def value(self) -> T:
        """Current value, including a change whose commit is in flight."""
        return self._value

    @property
    def confirmed(self) -> T:
        return self._confirmed

    @property
    def pending(self) -> bool:
        return bool(self._in_flight)

    def reset(self, value: T) -> None:
        """Replace both the shown and the confirmed value (e.g. after a reload).

        Commits still in flight no longer change the shown value.
        """
        self._confirmed = value
        self._confirmed_generation = self._generation
        self._value = value

    async def apply(self, new: T, commit: Callable[[], Awaitable[object]]) -> T:
        self._generation += 1
        generation = self._generation
        self._in_flight[generation] = new
        self._value = new
        try:
            await commit()
        except BaseException:
            # Cancellation must roll back too.
            _logger.debug("Tentative change %d rolled back", generation)
            del self._in_flight[generation]
            self._settle()
            raise
        del self._in_flight[generation]
        self._confirmed = new
        self._confirmed_generation = generation
        self._settle()
        return new

    def _settle(self) -> None:
        newer = [generation for generation in self._in_flight if generation > self._confirmed_generation]
        self._value = self._in_flight[max(newer)] if newer else self._confirmed
