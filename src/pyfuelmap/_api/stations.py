"""Station endpoints.

Endpoints:
  - GET  /fuel_stations (bounded box, point read with contributor join, id set)
  - POST /rpc/submit_price_report
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from pyfuelmap._api._common import SINGLE_OBJECT, as_rows, call_rpc, eq, gte, in_, lte, request_json
from pyfuelmap._constants import RPC_SUBMIT_PRICE_REPORT, STATIONS_TABLE
from pyfuelmap._transport import Transport
from pyfuelmap.exceptions import FuelMapApiError
from pyfuelmap.models.region import BoundingBox
from pyfuelmap.models.station import FuelSubtype, StationRecord

_logger = logging.getLogger(__name__)

_PRICE_COLUMNS = ",".join(subtype.value for subtype in FuelSubtype)
BOX_COLUMNS = f"id,brand,city,latitude,longitude,{_PRICE_COLUMNS},updated_at"
DETAIL_COLUMNS = "*,last_updated_by_profile:users!last_updated_by(id,full_name,b_show_name)"
FAVORITE_COLUMNS = "*,users:last_updated_by(*)"


def _parse_stations(rows: Iterable[dict[str, Any]], endpoint: str) -> list[StationRecord]:
    stations: list[StationRecord] = []
    for row in rows:
        try:
            stations.append(StationRecord.model_validate(row))
        except ValidationError:
            _logger.debug("Skipping malformed station row from %s: id=%s", endpoint, row.get("id"), exc_info=True)
    return stations


async def fetch_stations_in_box(
    transport: Transport,
    box: BoundingBox,
    *,
    limit: int,
) -> list[StationRecord]:
    """Fetch at most *limit* stations inside *box*."""
    path = f"/{STATIONS_TABLE}"
    params = [
        ("select", BOX_COLUMNS),
        gte("latitude", box.min_lat),
        lte("latitude", box.max_lat),
        gte("longitude", box.min_lon),
        lte("longitude", box.max_lon),
        ("limit", str(limit)),
    ]
    decoded = await request_json(transport, "GET", path, params=params)
    stations = _parse_stations(as_rows(decoded), path)
    _logger.debug("Fetched %d stations in box=%s", len(stations), box)
    return stations


async def fetch_station(transport: Transport, station_id: str) -> StationRecord:
    """Fetch one station with its last contributor joined.

    Raises
    ------
    FuelMapStaleRecordError
        If the station no longer exists.
    """
    path = f"/{STATIONS_TABLE}"
    decoded = await request_json(
        transport,
        "GET",
        path,
        params=[("select", DETAIL_COLUMNS), eq("id", station_id)],
        headers=SINGLE_OBJECT,
    )
    if not isinstance(decoded, dict):
        raise FuelMapApiError(f"{path} returned a non-object for id={station_id}", code="invalid_body", endpoint=path)
    try:
        return StationRecord.model_validate(decoded)
    except ValidationError as exc:
        raise FuelMapApiError(
            f"{path} returned a malformed station id={station_id}",
            code="invalid_body",
            endpoint=path,
        ) from exc


async def fetch_stations_by_ids(transport: Transport, station_ids: Iterable[str]) -> list[StationRecord]:
    """Fetch the given stations (with contributor join), in no particular order."""
    ids = list(station_ids)
    if not ids:
        return []
    path = f"/{STATIONS_TABLE}"
    decoded = await request_json(
        transport,
        "GET",
        path,
        params=[("select", FAVORITE_COLUMNS), in_("id", ids)],
    )
    return _parse_stations(as_rows(decoded), path)


async def fetch_station_brands(transport: Transport) -> list[str]:
    """Distinct, sorted brand names across all stations."""
    path = f"/{STATIONS_TABLE}"
    decoded = await request_json(transport, "GET", path, params=[("select", "brand")])
    brands = {str(row["brand"]).strip() for row in as_rows(decoded) if row.get("brand")}
    return sorted(brand for brand in brands if brand)


async def submit_price_report(
    transport: Transport,
    *,
    station_id: str,
    user_id: str,
    prices: Mapping[FuelSubtype, float],
) -> None:
    """Submit a full five-subtype price report for a station."""
    params: dict[str, Any] = {"_station_id": station_id, "_user_id": user_id}
    for subtype in FuelSubtype:
        params[f"_{subtype.value}"] = float(prices[subtype])
    await call_rpc(transport, RPC_SUBMIT_PRICE_REPORT, params)
    _logger.debug("Price report accepted station=%s user=%s", station_id, user_id)
