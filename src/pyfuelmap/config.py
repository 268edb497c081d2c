"""Client configuration for pyfuelmap."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyfuelmap._constants import (
    DEBOUNCE_SECONDS,
    GAZETTEER_URL,
    INCORRECT_REPORT_THRESHOLD,
    MAX_FAVORITES,
    MAX_STATIONS,
    ZOOM_THRESHOLD,
)
from pyfuelmap.exceptions import FuelMapConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class FuelMapConfig:
    """Client configuration.

    Parameters
    ----------
    supabase_url : str
        Project URL of the data service (e.g. ``"https://xyz.supabase.co"``).
    anon_key : str
        Public (anon) API key sent as the ``apikey`` header.
    zoom_threshold : float
        Maximum latitude span, in degrees, at which the map fetches
        stations. Wider viewports issue no query.
    debounce_seconds : float
        Quiet period after the last region change before a fetch.
    max_stations : int
        Row cap for bounded-box station queries.
    max_favorites : int
        Maximum number of favorite stations per user.
    incorrect_report_threshold : int
        Users with this many incorrect-location reports (or more) may not
        submit new locations.
    request_timeout : float
        Total HTTP timeout per request, in seconds.
    gazetteer_url : str
        URL of the public municipality list (PSGC JSON).
    catalog_cache_path : str or None
        File used to persist the brand catalog between runs.
        ``None`` disables the file cache.
    load_catalog_on_start : bool
        Load the brand catalog when the client context is entered.
    """

    supabase_url: str
    anon_key: str
    zoom_threshold: float = ZOOM_THRESHOLD
    debounce_seconds: float = DEBOUNCE_SECONDS
    max_stations: int = MAX_STATIONS
    max_favorites: int = MAX_FAVORITES
    incorrect_report_threshold: int = INCORRECT_REPORT_THRESHOLD
    request_timeout: float = 15.0
    gazetteer_url: str = GAZETTEER_URL
    catalog_cache_path: str | None = None
    load_catalog_on_start: bool = True

    def __post_init__(self) -> None:
        if not self.supabase_url:
            raise FuelMapConfigError("supabase_url must be non-empty")
        if not self.anon_key:
            raise FuelMapConfigError("anon_key must be non-empty")
        if self.zoom_threshold <= 0:
            raise FuelMapConfigError(f"zoom_threshold must be positive, got {self.zoom_threshold}")
        if self.max_stations < 1:
            raise FuelMapConfigError(f"max_stations must be at least 1, got {self.max_stations}")
        if self.max_favorites < 1:
            raise FuelMapConfigError(f"max_favorites must be at least 1, got {self.max_favorites}")

    @property
    def rest_url(self) -> str:
        return self.supabase_url.rstrip("/")

    @classmethod
    def from_env(cls, **overrides: Any) -> FuelMapConfig:
        """Create configuration from environment variables.

        Reads ``FUELMAP_SUPABASE_URL``, ``FUELMAP_ANON_KEY`` and the optional
        ``FUELMAP_*`` tuning variables. Explicit keyword arguments override
        environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        FuelMapConfig
            Populated configuration.

        Raises
        ------
        FuelMapConfigError
            If the URL or key is missing, or a numeric variable is malformed.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "FUELMAP_SUPABASE_URL": "supabase_url",
            "FUELMAP_ANON_KEY": "anon_key",
            "FUELMAP_GAZETTEER_URL": "gazetteer_url",
            "FUELMAP_CATALOG_CACHE_PATH": "catalog_cache_path",
        }
        _ENV_FLOAT_MAP = {
            "FUELMAP_ZOOM_THRESHOLD": "zoom_threshold",
            "FUELMAP_DEBOUNCE_SECONDS": "debounce_seconds",
            "FUELMAP_REQUEST_TIMEOUT": "request_timeout",
        }
        _ENV_INT_MAP = {
            "FUELMAP_MAX_STATIONS": "max_stations",
            "FUELMAP_MAX_FAVORITES": "max_favorites",
            "FUELMAP_INCORRECT_REPORT_THRESHOLD": "incorrect_report_threshold",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        try:
            for env_key, field_name in _ENV_FLOAT_MAP.items():
                val = env.get(env_key)
                if val is not None and field_name not in overrides:
                    config_kwargs[field_name] = float(val)
            for env_key, field_name in _ENV_INT_MAP.items():
                val = env.get(env_key)
                if val is not None and field_name not in overrides:
                    config_kwargs[field_name] = int(val)
        except ValueError as exc:
            raise FuelMapConfigError(f"Invalid numeric environment value: {exc}") from exc

        if "load_catalog_on_start" not in overrides:
            config_kwargs["load_catalog_on_start"] = _env_bool(env.get("FUELMAP_LOAD_CATALOG_ON_START"), True)

        config_kwargs.update(overrides)

        for required in ("supabase_url", "anon_key"):
            if not config_kwargs.get(required):
                raise FuelMapConfigError(f"Missing required setting {required!r} (FUELMAP_{required.upper()})")

        return cls(**config_kwargs)
