"""High-level async client for the fuel station map."""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import aiohttp

from pyfuelmap._api import profiles as _profiles_api
from pyfuelmap._api import reference as _reference_api
from pyfuelmap._api import stations as _stations_api
from pyfuelmap._transport import RestTransport, Transport
from pyfuelmap.config import FuelMapConfig
from pyfuelmap.contributors import ContributorDirectory
from pyfuelmap.exceptions import (
    FuelMapAuthenticationError,
    FuelMapError,
    FuelMapValidationError,
)
from pyfuelmap.favorites import FavoritesLedger
from pyfuelmap.filtering import FilterCriteria, apply_filters
from pyfuelmap.gazetteer import MunicipalityDirectory
from pyfuelmap.lifecycle import PendingReportLifecycle
from pyfuelmap.models.catalog import BrandConfig, Municipality
from pyfuelmap.models.contributor import Contributor, ContributorVoteResult, ContributorVoteType
from pyfuelmap.models.forecast import PriceForecast
from pyfuelmap.models.profile import UserProfile
from pyfuelmap.models.region import BoundingBox, ViewportRegion
from pyfuelmap.models.report import LocationReportRequest, PendingReport, ReportDraft, VoteOutcome
from pyfuelmap.models.station import FuelSubtype, StationRecord, build_price_report
from pyfuelmap.scheduler import Timer, ViewportFetchScheduler
from pyfuelmap.session import Session
from pyfuelmap.state.cache import GeoIndexCache
from pyfuelmap.state.catalog import BrandCatalog

_logger = logging.getLogger(__name__)


class DetailStatus(enum.StrEnum):
    LOADED = "loaded"
    FETCH_ERROR = "fetch_error"


@dataclass(frozen=True, slots=True)
class StationDetailView:
    """Result of opening a station.

    On ``FETCH_ERROR`` ``station`` is the last cached record, if any, and
    ``error`` holds the failure.
    """

    status: DetailStatus
    station: StationRecord | None
    error: FuelMapError | None = None


@dataclass(slots=True)
class _Runtime:
    """Components that live for one ``async with`` block."""

    transport: Transport
    cache: GeoIndexCache
    catalog: BrandCatalog
    scheduler: ViewportFetchScheduler
    lifecycle: PendingReportLifecycle
    favorites: FavoritesLedger
    contributors: ContributorDirectory
    municipalities: MunicipalityDirectory


class FuelMapClient:
    """Async client for the fuel station map.

    Usage::

        async with FuelMapClient(config) as client:
            client.set_session(Session(user_id=uid, access_token=token))
            client.on_region_change(ViewportRegion(latitude=14.6, longitude=121.0, lat_span=0.03))
            stations = client.visible_stations(FilterCriteria(brands={"Petron"}))

    Parameters
    ----------
    config : FuelMapConfig
        Client configuration.
    session : aiohttp.ClientSession or None
        Shared HTTP session; created and closed by the client when omitted.
    transport : Transport or None
        Replaces the HTTP transport entirely (tests).
    timer : Timer or None
        Debounce timer for viewport fetching.
    """

    def __init__(
        self,
        config: FuelMapConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        timer: Timer | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._custom_transport = transport
        self._timer = timer
        self._runtime: _Runtime | None = None
        self._session: Session | None = None
        self._profile: UserProfile | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FuelMapClient:
        transport = self._custom_transport
        if transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            transport = RestTransport(self._config, self._http_session)
        self._runtime = self._build_runtime(transport)
        self._runtime.cache.init()
        if self._session is not None:
            transport.set_access_token(self._session.access_token)
        if self._config.load_catalog_on_start:
            await self._runtime.catalog.init()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        runtime = self._runtime
        self._runtime = None
        if runtime is not None:
            runtime.scheduler.close()
            await runtime.scheduler.wait_idle()
            runtime.cache.dispose()
            runtime.catalog.dispose()
            runtime.lifecycle.clear()
            runtime.contributors.clear()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    def _build_runtime(self, transport: Transport) -> _Runtime:
        config = self._config
        cache = GeoIndexCache()

        async def fetch_box(box: BoundingBox, limit: int) -> list[StationRecord]:
            return await _stations_api.fetch_stations_in_box(transport, box, limit=limit)

        async def fetch_catalog() -> list[BrandConfig]:
            return await _reference_api.fetch_brand_configs(transport)

        async def write_favorites(ids: frozenset[str]) -> None:
            user_id = self._require_session().user_id
            await _profiles_api.update_favorite_stations(transport, user_id, sorted(ids))

        catalog_path = Path(config.catalog_cache_path) if config.catalog_cache_path else None
        catalog = BrandCatalog(fetch_catalog, cache_path=catalog_path)
        return _Runtime(
            transport=transport,
            cache=cache,
            catalog=catalog,
            scheduler=ViewportFetchScheduler(
                fetch_box,
                cache,
                timer=self._timer,
                quiet_period=config.debounce_seconds,
                zoom_threshold=config.zoom_threshold,
                max_results=config.max_stations,
            ),
            lifecycle=PendingReportLifecycle(
                transport,
                catalog,
                incorrect_report_threshold=config.incorrect_report_threshold,
            ),
            favorites=FavoritesLedger(write_favorites, capacity=config.max_favorites),
            contributors=ContributorDirectory(transport),
            municipalities=MunicipalityDirectory(transport, config.gazetteer_url),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_runtime(self) -> _Runtime:
        if self._runtime is None:
            raise FuelMapError("Client not initialized. Use 'async with FuelMapClient(...) as client:'")
        return self._runtime

    def _require_session(self) -> Session:
        if self._session is None:
            raise FuelMapAuthenticationError("Not signed in", code="no_session")
        if self._session.is_expired:
            raise FuelMapAuthenticationError("Session expired; hand over a refreshed token", code="session_expired")
        return self._session

    # ------------------------------------------------------------------
    # Components
    # ------------------------------------------------------------------

    @property
    def cache(self) -> GeoIndexCache:
        return self._require_runtime().cache

    @property
    def catalog(self) -> BrandCatalog:
        return self._require_runtime().catalog

    @property
    def scheduler(self) -> ViewportFetchScheduler:
        return self._require_runtime().scheduler

    @property
    def favorites(self) -> FavoritesLedger:
        return self._require_runtime().favorites

    @property
    def lifecycle(self) -> PendingReportLifecycle:
        return self._require_runtime().lifecycle

    # ------------------------------------------------------------------
    # Session and profile
    # ------------------------------------------------------------------

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def profile(self) -> UserProfile | None:
        return self._profile

    def set_session(self, session: Session) -> None:
        """Use *session* for every following call."""
        if self._session is not None and self._session.user_id != session.user_id:
            self._forget_user()
        self._session = session
        if self._runtime is not None:
            self._runtime.transport.set_access_token(session.access_token)

    def clear_session(self) -> None:
        """Sign out locally; later calls use the anon key only."""
        self._session = None
        self._forget_user()
        if self._runtime is not None:
            self._runtime.transport.set_access_token(None)

    def _forget_user(self) -> None:
        self._profile = None
        if self._runtime is not None:
            self._runtime.favorites.clear()

    async def load_profile(self) -> UserProfile:
        """Read the signed-in user's profile and seed the favorites set."""
        runtime = self._require_runtime()
        session = self._require_session()
        profile = await _profiles_api.fetch_profile(runtime.transport, session.user_id)
        self._profile = profile
        runtime.favorites.load(profile.favorite_stations)
        return profile

    async def update_visibility(self, *, show_name: bool, show_gcash: bool, show_maya: bool) -> None:
        """Choose what other users see on the signed-in user's contributor card.

        The loaded profile, if any, is updated after the write succeeds.
        """
        runtime = self._require_runtime()
        session = self._require_session()
        await _profiles_api.update_visibility(
            runtime.transport,
            session.user_id,
            show_name=show_name,
            show_gcash=show_gcash,
            show_maya=show_maya,
        )
        if self._profile is not None:
            self._profile = self._profile.model_copy(
                update={"show_name": show_name, "show_gcash": show_gcash, "show_maya": show_maya}
            )
        runtime.contributors.forget(session.user_id)

    # ------------------------------------------------------------------
    # Map
    # ------------------------------------------------------------------

    def on_region_change(self, region: ViewportRegion) -> None:
        self._require_runtime().scheduler.on_region_change(region)

    async def refresh_region(self, region: ViewportRegion | None = None) -> int:
        """Fetch *region* (default: the last one seen) immediately."""
        return await self._require_runtime().scheduler.fetch_now(region)

    def visible_stations(self, criteria: FilterCriteria | None = None) -> list[StationRecord]:
        return apply_filters(self._require_runtime().cache.all(), criteria or FilterCriteria())

    def available_brands(self) -> list[str]:
        return self._require_runtime().cache.brands()

    async def all_brands(self) -> list[str]:
        """Brand names across every station, including ones never fetched into the cache."""
        return await _stations_api.fetch_station_brands(self._require_runtime().transport)

    async def open_station(self, station_id: str) -> StationDetailView:
        """Read one station with its last contributor.

        Failures are returned as a ``FETCH_ERROR`` view, never raised.
        """
        runtime = self._require_runtime()
        try:
            station = await _stations_api.fetch_station(runtime.transport, station_id)
        except FuelMapError as exc:
            _logger.warning("Could not load station %s: %s", station_id, exc)
            return StationDetailView(DetailStatus.FETCH_ERROR, runtime.cache.get(station_id), exc)
        runtime.cache.upsert(station)
        return StationDetailView(DetailStatus.LOADED, station)

    async def submit_prices(
        self,
        station_id: str,
        inputs: Mapping[FuelSubtype | str, Any],
    ) -> StationRecord:
        """Report prices for a station and update the cached record.

        Subtypes missing from *inputs* keep the station's current price.
        """
        runtime = self._require_runtime()
        session = self._require_session()
        station = runtime.cache.get(station_id)
        if station is None:
            station = await _stations_api.fetch_station(runtime.transport, station_id)
        try:
            report = build_price_report(station, inputs)
        except ValueError as exc:
            raise FuelMapValidationError(str(exc)) from exc

        await _stations_api.submit_price_report(
            runtime.transport,
            station_id=station_id,
            user_id=session.user_id,
            prices=report,
        )
        updated = station.with_prices(report, updated_at=datetime.now(UTC), updated_by=session.user_id)
        runtime.cache.upsert(updated)
        _logger.info("Prices updated for station %s", station_id)
        return updated

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    async def toggle_favorite(self, station_id: str) -> frozenset[str]:
        self._require_session()
        return await self._require_runtime().favorites.toggle(station_id)

    async def get_favorite_stations(self, criteria: FilterCriteria | None = None) -> list[StationRecord]:
        """Fetch the favorite stations and filter them, category by catalog."""
        runtime = self._require_runtime()
        records = await _stations_api.fetch_stations_by_ids(runtime.transport, sorted(runtime.favorites.members))
        runtime.cache.merge(records)
        return apply_filters(records, criteria or FilterCriteria(), catalog=runtime.catalog)

    # ------------------------------------------------------------------
    # Pending reports
    # ------------------------------------------------------------------

    async def refresh_pending(self) -> list[PendingReport]:
        return await self._require_runtime().lifecycle.refresh()

    def pending_reports(self) -> list[PendingReport]:
        return self._require_runtime().lifecycle.reports()

    async def submit_location_report(self, draft: ReportDraft) -> LocationReportRequest:
        """Submit a new station location for community verification.

        Raises
        ------
        FuelMapEligibilityError
            When not signed in, the user has an outstanding report, or too
            many of their reports were incorrect.
        FuelMapValidationError
            When the draft is incomplete.
        """
        runtime = self._require_runtime()
        if self._session is None:
            return await runtime.lifecycle.submit(None, None, draft)
        reporter_id = self._require_session().user_id
        runtime.lifecycle.prepare(draft, reporter_id)
        profile = await self.load_profile()
        return await runtime.lifecycle.submit(reporter_id, profile, draft)

    async def vote_on_report(self, report_id: str, is_confirm: bool) -> VoteOutcome:
        """Confirm or deny a pending report; a promotion refetches the map."""
        runtime = self._require_runtime()
        session = self._require_session()
        outcome = await runtime.lifecycle.vote(report_id, session.user_id, is_confirm)
        if outcome is VoteOutcome.STATION_PROMOTED:
            await runtime.scheduler.fetch_now()
        return outcome

    async def withdraw_report(self, report_id: str, *, confirmed: bool) -> bool:
        session = self._require_session()
        return await self._require_runtime().lifecycle.withdraw(report_id, session.user_id, confirmed=confirmed)

    # ------------------------------------------------------------------
    # Contributors
    # ------------------------------------------------------------------

    async def get_contributor(self, contributor_id: str) -> Contributor:
        return await self._require_runtime().contributors.get(contributor_id)

    async def vote_on_contributor(
        self,
        contributor_id: str,
        vote_type: ContributorVoteType | str,
    ) -> ContributorVoteResult:
        session = self._require_session()
        return await self._require_runtime().contributors.vote(session.user_id, contributor_id, vote_type)

    # ------------------------------------------------------------------
    # Reference data
    # ------------------------------------------------------------------

    async def search_municipalities(self, query: str) -> list[Municipality]:
        directory = self._require_runtime().municipalities
        if not directory.loaded:
            await directory.load()
        return directory.search(query)

    async def get_price_forecast(self) -> PriceForecast | None:
        """The current weekly price forecast, or ``None`` when none is published."""
        return await _reference_api.fetch_latest_forecast(self._require_runtime().transport)
