"""Municipality search over the public gazetteer."""

from __future__ import annotations

import logging

from pyfuelmap._api import reference as _reference_api
from pyfuelmap._transport import Transport
from pyfuelmap.exceptions import FuelMapError
from pyfuelmap.models.catalog import Municipality

_logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
MAX_RESULTS = 25


class MunicipalityDirectory:
    """Loads the municipality list once and searches it locally."""

    def __init__(self, transport: Transport, url: str) -> None:
        self._transport = transport
        self._url = url
        self._municipalities: list[Municipality] = []
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    async def load(self, *, force: bool = False) -> int:
        """Fetch the list if not loaded yet; failures leave it empty."""
        if self._loaded and not force:
            return len(self._municipalities)
        try:
            municipalities = await _reference_api.fetch_municipalities(self._transport, self._url)
        except FuelMapError:
            _logger.warning("Municipality list could not be loaded from %s", self._url, exc_info=True)
            return len(self._municipalities)
        self._municipalities = municipalities
        self._loaded = True
        return len(self._municipalities)

    def search(self, query: str, *, limit: int = MAX_RESULTS) -> list[Municipality]:
        needle = query.strip().casefold()
        if len(needle) < MIN_QUERY_LENGTH:
            return []
        matches = (item for item in self._municipalities if needle in item.name.casefold())
        return [item for _, item in zip(range(limit), matches)]
