"""Brand catalog: which fuel subtypes each brand sells, and under what label."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Iterable
from pathlib import Path

from pydantic import ValidationError

from pyfuelmap.exceptions import FuelMapError
from pyfuelmap.models.catalog import BrandConfig
from pyfuelmap.models.station import FuelCategory, FuelSubtype

_logger = logging.getLogger(__name__)

CatalogFetcher = Callable[[], Awaitable[list[BrandConfig]]]


class BrandCatalog:
    """Case-insensitive lookup over ``fuel_brand_configs``.

    Parameters
    ----------
    fetch : callable
        Coroutine factory returning the current brand configs.
    cache_path : Path or None
        JSON file used to seed the catalog before the first refresh and
        rewritten after every successful one. ``None`` disables it.
    """

    def __init__(self, fetch: CatalogFetcher, *, cache_path: Path | None = None) -> None:
        self._fetch = fetch
        self._cache_path = cache_path
        self._entries: dict[str, BrandConfig] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def init(self, *, refresh: bool = True) -> None:
        self._load_file_cache()
        if refresh:
            await self.refresh()

    async def refresh(self) -> bool:
        """Reload from the data service.

        On failure the previous entries are kept and ``False`` is
        returned.
        """
        try:
            configs = await self._fetch()
        except FuelMapError:
            _logger.warning("Brand catalog refresh failed; keeping %d cached brands", len(self._entries), exc_info=True)
            return False
        self._replace(configs)
        self._write_file_cache()
        _logger.debug("Brand catalog refreshed with %d brands", len(self._entries))
        return True

    def dispose(self) -> None:
        self._entries.clear()

    def _replace(self, configs: Iterable[BrandConfig]) -> None:
        self._entries = {config.brand_name.casefold(): config for config in configs}

    # ------------------------------------------------------------------
    # File cache
    # ------------------------------------------------------------------

    def _load_file_cache(self) -> None:
        if self._cache_path is None:
            return
        try:
            rows = json.loads(self._cache_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            _logger.debug("No brand catalog cache at %s", self._cache_path)
            return
        except (OSError, ValueError):
            _logger.warning("Ignoring unreadable brand catalog cache %s", self._cache_path, exc_info=True)
            return
        configs: list[BrandConfig] = []
        for row in rows if isinstance(rows, list) else []:
            try:
                configs.append(BrandConfig.model_validate(row))
            except ValidationError:
                _logger.debug("Skipping malformed cached brand config %r", row)
        self._replace(configs)
        _logger.debug("Loaded %d brands from %s", len(configs), self._cache_path)

    def _write_file_cache(self) -> None:
        if self._cache_path is None:
            return
        rows = [config.to_row() for config in self._entries.values()]
        try:
            self._cache_path.parent.mkdir(parents=True, exist_ok=True)
            self._cache_path.write_text(json.dumps(rows, ensure_ascii=False), encoding="utf-8")
        except OSError:
            _logger.warning("Could not write brand catalog cache %s", self._cache_path, exc_info=True)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def find(self, brand: str) -> BrandConfig | None:
        """Catalog entry for *brand*, ignoring case and surrounding spaces."""
        return self._entries.get(brand.strip().casefold())

    def brands(self) -> list[str]:
        return sorted((config.brand_name for config in self._entries.values()), key=str.casefold)

    def offered_subtypes(self, brand: str) -> frozenset[FuelSubtype]:
        config = self.find(brand)
        if config is None:
            return frozenset()
        return frozenset(config.labels)

    def label(self, brand: str, subtype: FuelSubtype) -> str | None:
        config = self.find(brand)
        if config is None:
            return None
        return config.labels.get(subtype)

    def has_category(self, brand: str, category: FuelCategory) -> bool:
        config = self.find(brand)
        return config is not None and config.offers_category(category)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, brand: object) -> bool:
        return isinstance(brand, str) and self.find(brand) is not None
