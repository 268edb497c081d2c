"""Read-only reference data.

Endpoints:
  - GET /fuel_brand_configs
  - GET /fuel_price_forecast (newest row)
  - GET {gazetteer_url} (public municipality list, outside the data service)
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from pyfuelmap._api._common import as_rows, request_json
from pyfuelmap._constants import BRAND_CONFIGS_TABLE, FORECAST_TABLE
from pyfuelmap._transport import Transport
from pyfuelmap.models.catalog import BrandConfig, Municipality
from pyfuelmap.models.forecast import PriceForecast
from pyfuelmap.models.station import FuelSubtype

_logger = logging.getLogger(__name__)

BRAND_CONFIG_COLUMNS = ",".join(["brand_name", *(f"{subtype.value}_label" for subtype in FuelSubtype)])


async def fetch_brand_configs(transport: Transport) -> list[BrandConfig]:
    path = f"/{BRAND_CONFIGS_TABLE}"
    decoded = await request_json(transport, "GET", path, params=[("select", BRAND_CONFIG_COLUMNS)])
    configs: list[BrandConfig] = []
    for row in as_rows(decoded):
        try:
            configs.append(BrandConfig.model_validate(row))
        except ValidationError:
            _logger.debug("Skipping malformed brand config %s", row.get("brand_name"), exc_info=True)
    return configs


async def fetch_municipalities(transport: Transport, url: str) -> list[Municipality]:
    decoded = await transport.get_json(url)
    items = decoded if isinstance(decoded, list) else []
    municipalities: list[Municipality] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            municipalities.append(Municipality.model_validate(item))
        except ValidationError:
            _logger.debug("Skipping malformed municipality %r", item.get("code"), exc_info=True)
    return municipalities


async def fetch_latest_forecast(transport: Transport) -> PriceForecast | None:
    """The most recently updated forecast row, or ``None`` when there is none."""
    path = f"/{FORECAST_TABLE}"
    decoded = await request_json(
        transport,
        "GET",
        path,
        params=[("select", "*"), ("order", "last_updated.desc"), ("limit", "1")],
    )
    rows = as_rows(decoded)
    if not rows:
        return None
    return PriceForecast.model_validate(rows[0])
