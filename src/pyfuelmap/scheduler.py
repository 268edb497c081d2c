"""Debounced viewport fetching.

Map movement produces a burst of region changes. The scheduler keeps only
the latest region, waits for a quiet period, then issues one bounded-box
query and merges the result into the station cache.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from pyfuelmap._constants import DEBOUNCE_SECONDS, MAX_STATIONS, ZOOM_THRESHOLD
from pyfuelmap.exceptions import FuelMapError
from pyfuelmap.models.region import BoundingBox, ViewportRegion
from pyfuelmap.models.station import StationRecord
from pyfuelmap.state.cache import GeoIndexCache

_logger = logging.getLogger(__name__)

RegionFetcher = Callable[[BoundingBox, int], Awaitable[list[StationRecord]]]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Timer(Protocol):
    """Schedules a callback after a delay; the returned handle cancels it."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class LoopTimer:
    """:class:`Timer` backed by the running event loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)


class ViewportFetchScheduler:
    """Turn region changes into at most one fetch per quiet period.

    Parameters
    ----------
    fetch : callable
        ``fetch(box, limit)`` coroutine returning the stations in *box*.
    cache : GeoIndexCache
        Destination of every successful fetch.
    timer : Timer or None
        Defaults to :class:`LoopTimer`.
    quiet_period : float
        Seconds without a new region before the fetch fires.
    zoom_threshold : float
        Regions whose latitude span exceeds this issue no query.
    max_results : int
        Row cap passed to *fetch*.

    Notes
    -----
    In-flight fetches are never cancelled; a late result for an older
    region is merged like any other. Rows whose coordinates fall outside
    the requested box are not merged. Fetch errors are logged and dropped,
    and the cache keeps what it already had.
    """

    def __init__(
        self,
        fetch: RegionFetcher,
        cache: GeoIndexCache,
        *,
        timer: Timer | None = None,
        quiet_period: float = DEBOUNCE_SECONDS,
        zoom_threshold: float = ZOOM_THRESHOLD,
        max_results: int = MAX_STATIONS,
    ) -> None:
        self._fetch = fetch
        self._cache = cache
        self._timer: Timer = timer or LoopTimer()
        self._quiet_period = quiet_period
        self._zoom_threshold = zoom_threshold
        self._max_results = max_results
        self._latest_region: ViewportRegion | None = None
        self._handle: TimerHandle | None = None
        self._tasks: set[asyncio.Task[int]] = set()

    @property
    def latest_region(self) -> ViewportRegion | None:
        return self._latest_region

    @property
    def armed(self) -> bool:
        return self._handle is not None

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def on_region_change(self, region: ViewportRegion) -> None:
        """Record *region* and restart the quiet period."""
        self._latest_region = region
        if self._handle is not None:
            self._handle.cancel()
        self._handle = self._timer.call_later(self._quiet_period, self._fire)

    async def fetch_now(self, region: ViewportRegion | None = None) -> int:
        """Fetch *region* (default: the latest one) without debouncing.

        Returns the number of stations that were new to the cache.
        """
        target = region or self._latest_region
        if target is None:
            return 0
        if region is not None:
            self._latest_region = region
        if self._too_wide(target):
            return 0
        return await self._fetch_into_cache(target)

    async def wait_idle(self) -> None:
        """Wait until every fetch started by the timer has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def close(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _fire(self) -> None:
        self._handle = None
        region = self._latest_region
        if region is None or self._too_wide(region):
            return
        task = asyncio.get_running_loop().create_task(self._fetch_into_cache(region))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _too_wide(self, region: ViewportRegion) -> bool:
        if region.is_too_wide(self._zoom_threshold):
            _logger.debug(
                "Region span %.4f exceeds zoom threshold %.4f; not fetching",
                region.lat_span,
                self._zoom_threshold,
            )
            return True
        return False

    async def _fetch_into_cache(self, region: ViewportRegion) -> int:
        box = region.bounding_box()
        try:
            records = await self._fetch(box, self._max_results)
        except FuelMapError:
            _logger.warning("Station fetch failed for box=%s", box, exc_info=True)
            return 0
        inside = [record for record in records if box.contains(record.latitude, record.longitude)]
        if len(inside) != len(records):
            _logger.debug("Dropped %d stations outside box=%s", len(records) - len(inside), box)
        return self._cache.merge(inside)
