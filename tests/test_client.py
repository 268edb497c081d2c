from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import pytest

from pyfuelmap._transport import Response
from pyfuelmap.client import DetailStatus, FuelMapClient
from pyfuelmap.config import FuelMapConfig
from pyfuelmap.exceptions import (
    FuelMapAuthenticationError,
    FuelMapError,
    FuelMapStaleRecordError,
    FuelMapValidationError,
)
from pyfuelmap.filtering import FilterCriteria, SortOrder
from pyfuelmap.models.region import ViewportRegion
from pyfuelmap.models.report import ReportDraft, VoteOutcome
from pyfuelmap.models.station import FuelSubtype
from pyfuelmap.session import Session

STATIONS = "/fuel_stations"
PENDING = "/user_reported_locations"
USERS = "/users"
FORECAST = "/fuel_price_forecast"
GAZETTEER = "https://gazetteer.test/cities.json"


@dataclass
class _Call:
    method: str
    path: str
    params: list[tuple[str, str]]
    json_body: Any


class _RoutedTransport:
    def __init__(
        self,
        routes: dict[tuple[str, str], Response | list[Response]],
        gazetteer: Any = None,
    ) -> None:
        self._routes = routes
        self._gazetteer = gazetteer
        self.calls: list[_Call] = []
        self.tokens: list[str | None] = []
        self.gazetteer_reads = 0

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        json_body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        self.calls.append(_Call(method, path, list(params or []), json_body))
        reply = self._routes.get((method, path))
        if isinstance(reply, list):
            return reply.pop(0)
        if reply is None:
            return Response(status=404, body={"code": "PGRST205", "message": f"no route {method} {path}"})
        return reply

    async def get_json(self, url: str) -> Any:
        assert url == GAZETTEER
        self.gazetteer_reads += 1
        return self._gazetteer

    def set_access_token(self, token: str | None) -> None:
        self.tokens.append(token)

    def calls_to(self, method: str, path: str) -> list[_Call]:
        return [call for call in self.calls if call.method == method and call.path == path]


def _config() -> FuelMapConfig:
    return FuelMapConfig(
        supabase_url="https://abc.supabase.co",
        anon_key="anon",
        gazetteer_url=GAZETTEER,
        load_catalog_on_start=False,
    )


def _station_row(station_id: str, **extra: Any) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": station_id,
        "brand": "Petron",
        "city": "Pasig",
        "latitude": 14.6,
        "longitude": 121.0,
        "regular_gas": 60.0,
        "premium_gas": 65.0,
    }
    row.update(extra)
    return row


_REGION = ViewportRegion(latitude=14.6, longitude=121.0, lat_span=0.03)


def test_calls_outside_context_raise() -> None:
    client = FuelMapClient(_config(), transport=_RoutedTransport({}))

    with pytest.raises(FuelMapError, match="not initialized"):
        client.visible_stations()


@pytest.mark.asyncio
async def test_session_token_reaches_transport() -> None:
    transport = _RoutedTransport({})

    async with FuelMapClient(_config(), transport=transport) as client:
        client.set_session(Session(user_id="u1", access_token="jwt-1"))
        client.clear_session()

    assert transport.tokens == ["jwt-1", None]


@pytest.mark.asyncio
async def test_refresh_region_fills_cache_and_filters() -> None:
    transport = _RoutedTransport(
        {
            ("GET", STATIONS): Response(
                status=200,
                body=[_station_row("a", regular_gas=62.0), _station_row("b", brand="Shell", regular_gas=58.0)],
            )
        }
    )

    async with FuelMapClient(_config(), transport=transport) as client:
        added = await client.refresh_region(_REGION)
        criteria = FilterCriteria(
            brands={"Petron", "Shell"},
            fuel_subtype=FuelSubtype.REGULAR_GAS,
            sort_order=SortOrder.ASC,
        )
        visible = client.visible_stations(criteria)
        brands = client.available_brands()

    assert added == 2
    assert [station.id for station in visible] == ["b", "a"]
    assert brands == ["Petron", "Shell"]


@pytest.mark.asyncio
async def test_open_station_falls_back_to_cached_record() -> None:
    transport = _RoutedTransport(
        {
            ("GET", STATIONS): [
                Response(status=200, body=[_station_row("a")]),
                Response(status=500, body={"message": "upstream timeout"}),
            ]
        }
    )

    async with FuelMapClient(_config(), transport=transport) as client:
        await client.refresh_region(_REGION)
        view = await client.open_station("a")

    assert view.status is DetailStatus.FETCH_ERROR
    assert view.station is not None
    assert view.station.id == "a"
    assert view.error is not None


@pytest.mark.asyncio
async def test_open_station_missing_row_reports_error() -> None:
    transport = _RoutedTransport(
        {("GET", STATIONS): Response(status=406, body={"code": "PGRST116", "message": "no rows"})}
    )

    async with FuelMapClient(_config(), transport=transport) as client:
        view = await client.open_station("gone")

    assert view.status is DetailStatus.FETCH_ERROR
    assert view.station is None
    assert isinstance(view.error, FuelMapStaleRecordError)


@pytest.mark.asyncio
async def test_submit_prices_requires_session() -> None:
    async with FuelMapClient(_config(), transport=_RoutedTransport({})) as client:
        with pytest.raises(FuelMapAuthenticationError):
            await client.submit_prices("a", {FuelSubtype.REGULAR_GAS: 59})


@pytest.mark.asyncio
async def test_submit_prices_patches_cached_record() -> None:
    transport = _RoutedTransport(
        {
            ("GET", STATIONS): Response(status=200, body=[_station_row("a")]),
            ("POST", "/rpc/submit_price_report"): Response(status=204),
        }
    )

    async with FuelMapClient(_config(), transport=transport) as client:
        client.set_session(Session(user_id="u1", access_token="jwt"))
        await client.refresh_region(_REGION)
        updated = await client.submit_prices("a", {"regular_gas": "59.25"})
        cached = client.cache.get("a")

    body = transport.calls_to("POST", "/rpc/submit_price_report")[0].json_body
    assert body["_regular_gas"] == 59.25
    assert body["_premium_gas"] == 65.0
    assert body["_sports_gas"] == 0.0
    assert cached is updated
    assert updated.price(FuelSubtype.REGULAR_GAS) == 59.25
    assert updated.last_updated_by_id == "u1"


@pytest.mark.asyncio
async def test_toggle_favorite_writes_sorted_ids() -> None:
    transport = _RoutedTransport({("PATCH", USERS): Response(status=204)})

    async with FuelMapClient(_config(), transport=transport) as client:
        client.set_session(Session(user_id="u1", access_token="jwt"))
        await client.toggle_favorite("s2")
        members = await client.toggle_favorite("s1")

    writes = transport.calls_to("PATCH", USERS)
    assert members == frozenset({"s1", "s2"})
    assert writes[-1].json_body == {"favorite_stations": ["s1", "s2"]}
    assert ("id", "eq.u1") in writes[-1].params


@pytest.mark.asyncio
async def test_failed_favorite_write_keeps_previous_set() -> None:
    transport = _RoutedTransport(
        {("PATCH", USERS): [Response(status=204), Response(status=500, body={"message": "boom"})]}
    )

    async with FuelMapClient(_config(), transport=transport) as client:
        client.set_session(Session(user_id="u1", access_token="jwt"))
        await client.toggle_favorite("s1")
        with pytest.raises(FuelMapError):
            await client.toggle_favorite("s2")
        members = client.favorites.members

    assert members == frozenset({"s1"})


@pytest.mark.asyncio
async def test_promoted_report_refetches_last_region() -> None:
    report = {
        "id": "r1",
        "reporter_id": "alice",
        "latitude": 14.6,
        "longitude": 121.0,
        "brand": "Seaoil",
        "city": "Pasig",
        "verifiers": ["carol"],
        "deniers": [],
    }
    transport = _RoutedTransport(
        {
            ("GET", STATIONS): [
                Response(status=200, body=[_station_row("a")]),
                Response(status=200, body=[_station_row("a"), _station_row("new", brand="Seaoil")]),
            ],
            ("GET", PENDING): Response(status=200, body=[report]),
            ("POST", "/rpc/verify_or_deny_report"): Response(status=200, body="STATION_PROMOTED"),
        }
    )

    async with FuelMapClient(_config(), transport=transport) as client:
        client.set_session(Session(user_id="bob", access_token="jwt"))
        await client.refresh_region(_REGION)
        await client.refresh_pending()
        outcome = await client.vote_on_report("r1", True)
        pending = client.pending_reports()
        promoted_cached = "new" in client.cache

    assert outcome is VoteOutcome.STATION_PROMOTED
    assert pending == []
    assert promoted_cached
    assert len(transport.calls_to("GET", STATIONS)) == 2


@pytest.mark.asyncio
async def test_search_municipalities_loads_once() -> None:
    gazetteer = [
        {"code": "137401000", "name": "City of Pasig", "provinceCode": False},
        {"code": "137405000", "name": "City of Pasay", "provinceCode": False},
        {"code": "072217000", "name": "City of Cebu", "provinceCode": "072200000"},
    ]
    transport = _RoutedTransport({}, gazetteer=gazetteer)

    async with FuelMapClient(_config(), transport=transport) as client:
        too_short = await client.search_municipalities("p")
        matches = await client.search_municipalities("pas")
        cebu = await client.search_municipalities("CEBU")

    assert too_short == []
    assert [item.name for item in matches] == ["City of Pasig", "City of Pasay"]
    assert [item.code for item in cebu] == ["072217000"]
    assert transport.gazetteer_reads == 1


@pytest.mark.asyncio
async def test_incomplete_location_report_sends_nothing() -> None:
    transport = _RoutedTransport({("GET", USERS): Response(status=200, body={"id": "bob"})})
    draft = ReportDraft(latitude=14.6, longitude=121.0, brand="Unioil", municipality="Pasig")
    draft.toggle(FuelSubtype.PREMIUM_DIESEL)

    async with FuelMapClient(_config(), transport=transport) as client:
        client.set_session(Session(user_id="bob", access_token="jwt"))
        with pytest.raises(FuelMapValidationError, match="marketing name"):
            await client.submit_location_report(draft)

    assert transport.calls == []


@pytest.mark.asyncio
async def test_update_visibility_writes_flags_and_refreshes_own_card() -> None:
    transport = _RoutedTransport(
        {
            ("GET", USERS): [
                Response(status=200, body={"id": "u1", "b_show_name": True}),
                Response(status=200, body={"id": "u1", "full_name": "Maria Santos", "b_show_name": True}),
                Response(status=200, body={"id": "u1", "full_name": "Maria Santos", "b_show_name": False}),
            ],
            ("PATCH", USERS): Response(status=204),
        }
    )

    async with FuelMapClient(_config(), transport=transport) as client:
        client.set_session(Session(user_id="u1", access_token="jwt"))
        await client.load_profile()
        before = await client.get_contributor("u1")
        await client.update_visibility(show_name=False, show_gcash=True, show_maya=False)
        after = await client.get_contributor("u1")
        profile = client.profile

    write = transport.calls_to("PATCH", USERS)[0]
    assert write.json_body == {"b_show_name": False, "b_show_gcash": True, "b_show_maya": False}
    assert ("id", "eq.u1") in write.params
    assert profile is not None
    assert (profile.show_name, profile.show_gcash, profile.show_maya) == (False, True, False)
    assert before.display_name == "Maria Santos"
    assert after.display_name == "M*****"


@pytest.mark.asyncio
async def test_update_visibility_requires_session() -> None:
    transport = _RoutedTransport({})

    async with FuelMapClient(_config(), transport=transport) as client:
        with pytest.raises(FuelMapAuthenticationError):
            await client.update_visibility(show_name=True, show_gcash=False, show_maya=False)

    assert transport.calls == []


@pytest.mark.asyncio
async def test_price_forecast_reads_newest_row() -> None:
    row = {
        "id": 3,
        "gas_amount": 1.1,
        "b_gas_increase": False,
        "diesel_amount": 0.5,
        "b_diesel_increase": True,
        "kerosene_amount": 0.25,
        "b_kerosene_increase": True,
        "effective_date": "2026-10-20",
        "last_updated": "2026-10-17T08:00:00+00:00",
    }
    transport = _RoutedTransport({("GET", FORECAST): [Response(status=200, body=[row]), Response(status=200, body=[])]})

    async with FuelMapClient(_config(), transport=transport) as client:
        forecast = await client.get_price_forecast()
        missing = await client.get_price_forecast()

    params = transport.calls_to("GET", FORECAST)[0].params
    assert ("order", "last_updated.desc") in params
    assert ("limit", "1") in params
    assert forecast is not None
    assert forecast.delta("gas") == -1.1
    assert forecast.delta("kerosene") == 0.25
    assert missing is None


@pytest.mark.asyncio
async def test_all_brands_covers_uncached_stations() -> None:
    transport = _RoutedTransport(
        {
            ("GET", STATIONS): Response(
                status=200,
                body=[{"brand": "Shell"}, {"brand": " Petron "}, {"brand": "Shell"}, {"brand": None}],
            )
        }
    )

    async with FuelMapClient(_config(), transport=transport) as client:
        brands = await client.all_brands()
        cached = client.available_brands()

    assert brands == ["Petron", "Shell"]
    assert cached == []
    assert ("select", "brand") in transport.calls_to("GET", STATIONS)[0].params
