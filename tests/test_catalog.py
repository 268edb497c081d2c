from __future__ import annotations

import json
from pathlib import Path

import pytest

from pyfuelmap.exceptions import FuelMapTransportError
from pyfuelmap.models.catalog import BrandConfig
from pyfuelmap.models.station import FuelCategory, FuelSubtype
from pyfuelmap.state.catalog import BrandCatalog

_ROWS = [
    {
        "brand_name": "Petron",
        "regular_gas_label": "Xtra Advance",
        "premium_gas_label": "XCS",
        "sports_gas_label": "Blaze 100",
        "regular_diesel_label": "Turbo Diesel",
        "premium_diesel_label": "",
    },
    {"brand_name": "Jetti", "regular_diesel_label": "Diesel Max", "regular_gas_label": None},
]


class _Fetcher:
    def __init__(self, rows: list[dict[str, object]], *, fail: bool = False) -> None:
        self.rows = rows
        self.fail = fail
        self.calls = 0

    async def __call__(self) -> list[BrandConfig]:
        self.calls += 1
        if self.fail:
            raise FuelMapTransportError("offline", endpoint="/fuel_brand_configs")
        return [BrandConfig.model_validate(row) for row in self.rows]


@pytest.mark.asyncio
async def test_lookup_is_case_insensitive() -> None:
    catalog = BrandCatalog(_Fetcher(_ROWS))
    await catalog.init()

    config = catalog.find("  PETRON ")
    assert config is not None
    assert config.brand_name == "Petron"
    assert "jetti" in catalog
    assert catalog.brands() == ["Jetti", "Petron"]


@pytest.mark.asyncio
async def test_blank_labels_are_not_offered() -> None:
    catalog = BrandCatalog(_Fetcher(_ROWS))
    await catalog.refresh()

    assert FuelSubtype.PREMIUM_DIESEL not in catalog.offered_subtypes("Petron")
    assert catalog.offered_subtypes("Jetti") == frozenset({FuelSubtype.REGULAR_DIESEL})
    assert catalog.label("Petron", FuelSubtype.SPORTS_GAS) == "Blaze 100"
    assert catalog.label("Nope", FuelSubtype.SPORTS_GAS) is None
    assert catalog.has_category("Jetti", FuelCategory.DIESEL)
    assert not catalog.has_category("Jetti", FuelCategory.GAS)


@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_entries() -> None:
    fetcher = _Fetcher(_ROWS)
    catalog = BrandCatalog(fetcher)
    assert await catalog.refresh() is True

    fetcher.fail = True
    assert await catalog.refresh() is False
    assert len(catalog) == 2


@pytest.mark.asyncio
async def test_file_cache_round_trip(tmp_path: Path) -> None:
    cache_path = tmp_path / "catalog" / "brands.json"
    first = BrandCatalog(_Fetcher(_ROWS), cache_path=cache_path)
    await first.init()
    assert cache_path.exists()

    offline = _Fetcher([], fail=True)
    second = BrandCatalog(offline, cache_path=cache_path)
    await second.init()

    assert offline.calls == 1
    assert second.brands() == ["Jetti", "Petron"]
    assert second.label("petron", FuelSubtype.REGULAR_GAS) == "Xtra Advance"


@pytest.mark.asyncio
async def test_unreadable_file_cache_is_ignored(tmp_path: Path) -> None:
    cache_path = tmp_path / "brands.json"
    cache_path.write_text("{not json", encoding="utf-8")
    catalog = BrandCatalog(_Fetcher(_ROWS), cache_path=cache_path)

    await catalog.init()

    assert len(catalog) == 2
    assert isinstance(json.loads(cache_path.read_text(encoding="utf-8")), list)


def test_dispose_clears_entries() -> None:
    catalog = BrandCatalog(_Fetcher(_ROWS))
    catalog.dispose()

    assert len(catalog) == 0
    assert catalog.find("Petron") is None
