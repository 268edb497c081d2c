from __future__ import annotations

import pytest

from pyfuelmap.config import FuelMapConfig
from pyfuelmap.exceptions import FuelMapConfigError

_ENV_KEYS = (
    "FUELMAP_SUPABASE_URL",
    "FUELMAP_ANON_KEY",
    "FUELMAP_ZOOM_THRESHOLD",
    "FUELMAP_DEBOUNCE_SECONDS",
    "FUELMAP_MAX_STATIONS",
    "FUELMAP_MAX_FAVORITES",
    "FUELMAP_INCORRECT_REPORT_THRESHOLD",
    "FUELMAP_REQUEST_TIMEOUT",
    "FUELMAP_GAZETTEER_URL",
    "FUELMAP_CATALOG_CACHE_PATH",
    "FUELMAP_LOAD_CATALOG_ON_START",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    config = FuelMapConfig(supabase_url="https://abc.supabase.co/", anon_key="anon")

    assert config.zoom_threshold == 0.05
    assert config.debounce_seconds == 0.8
    assert config.max_stations == 150
    assert config.max_favorites == 5
    assert config.incorrect_report_threshold == 3
    assert config.rest_url == "https://abc.supabase.co"


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FUELMAP_SUPABASE_URL", "https://abc.supabase.co")
    monkeypatch.setenv("FUELMAP_ANON_KEY", "anon")
    monkeypatch.setenv("FUELMAP_MAX_STATIONS", "75")
    monkeypatch.setenv("FUELMAP_DEBOUNCE_SECONDS", "1.5")
    monkeypatch.setenv("FUELMAP_LOAD_CATALOG_ON_START", "no")

    config = FuelMapConfig.from_env()

    assert config.max_stations == 75
    assert config.debounce_seconds == 1.5
    assert config.load_catalog_on_start is False


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FUELMAP_SUPABASE_URL", "https://abc.supabase.co")
    monkeypatch.setenv("FUELMAP_ANON_KEY", "anon")
    monkeypatch.setenv("FUELMAP_MAX_FAVORITES", "9")

    config = FuelMapConfig.from_env(max_favorites=3, anon_key="other")

    assert config.max_favorites == 3
    assert config.anon_key == "other"


def test_missing_url_raises() -> None:
    with pytest.raises(FuelMapConfigError, match="supabase_url"):
        FuelMapConfig.from_env(anon_key="anon")


def test_malformed_number_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FUELMAP_MAX_STATIONS", "lots")

    with pytest.raises(FuelMapConfigError):
        FuelMapConfig.from_env(supabase_url="https://abc.supabase.co", anon_key="anon")


def test_invalid_values_rejected() -> None:
    with pytest.raises(FuelMapConfigError):
        FuelMapConfig(supabase_url="https://abc.supabase.co", anon_key="anon", max_favorites=0)
