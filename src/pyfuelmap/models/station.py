"""Fuel station models."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from pyfuelmap.ingestion.normalize import parse_timestamp, positive_or_none, safe_float, safe_str
from pyfuelmap.models._base import FuelMapBaseModel
from pyfuelmap.models.contributor import Contributor


class FuelSubtype(enum.StrEnum):
    """The five priced fuel products tracked per station.

    Values double as the price column names on ``fuel_stations``.
    """

    REGULAR_GAS = "regular_gas"
    PREMIUM_GAS = "premium_gas"
    SPORTS_GAS = "sports_gas"
    REGULAR_DIESEL = "regular_diesel"
    PREMIUM_DIESEL = "premium_diesel"

    @property
    def category(self) -> FuelCategory:
        if self.value.endswith("_diesel"):
            return FuelCategory.DIESEL
        return FuelCategory.GAS


class FuelCategory(enum.StrEnum):
    GAS = "gas"
    DIESEL = "diesel"

    @property
    def subtypes(self) -> tuple[FuelSubtype, ...]:
        if self is FuelCategory.GAS:
            return (FuelSubtype.REGULAR_GAS, FuelSubtype.PREMIUM_GAS, FuelSubtype.SPORTS_GAS)
        return (FuelSubtype.REGULAR_DIESEL, FuelSubtype.PREMIUM_DIESEL)

    @property
    def default_subtype(self) -> FuelSubtype:
        """Subtype used when only the category is selected."""
        return self.subtypes[0]


ALL_SUBTYPES: tuple[FuelSubtype, ...] = tuple(FuelSubtype)


class GeoPoint(BaseModel):
    """A WGS84 coordinate."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class StationRecord(FuelMapBaseModel):
    """A verified fuel station with crowd-reported prices.

    Price columns arrive flat on the row (``regular_gas``, ``premium_gas``
    …) and are gathered into :attr:`prices`. Any price that is ``0``,
    negative, blank or missing is stored as ``None`` ("unknown").

    Parameters
    ----------
    id : str
        Opaque station id.
    brand : str
        Retail brand (e.g. ``"Petron"``).
    municipality : str
        City or municipality (``city`` column).
    latitude, longitude : float
        Station location.
    prices : dict
        Resolved price per :class:`FuelSubtype`; always has all five keys.
    updated_at : datetime or None
        Time of the last price report.
    last_updated_by : Contributor or None
        Joined contributor profile of the last reporter, when requested.
    last_updated_by_id : str or None
        Id of the last reporter, when only the foreign key was selected.
    """

    id: str
    brand: str = ""
    municipality: str = Field(default="", validation_alias=AliasChoices("municipality", "city"))
    latitude: float
    longitude: float
    prices: dict[FuelSubtype, float | None] = Field(default_factory=dict)
    updated_at: datetime | None = None
    last_updated_by: Contributor | None = None
    last_updated_by_id: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _gather_columns(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        merged = dict(values)

        prices = dict(merged.get("prices") or {})
        for subtype in FuelSubtype:
            if subtype.value in merged:
                prices[subtype] = merged.pop(subtype.value)
        merged["prices"] = prices

        # The contributor join is aliased differently per screen query.
        for key in ("last_updated_by_profile", "users", "last_updated_by"):
            candidate = merged.get(key)
            if isinstance(candidate, list):
                candidate = candidate[0] if candidate else None
            if isinstance(candidate, dict):
                merged["last_updated_by"] = candidate
                merged.setdefault("last_updated_by_id", candidate.get("id"))
                break
        else:
            reporter = merged.pop("last_updated_by", None)
            if reporter is not None and "last_updated_by_id" not in merged:
                merged["last_updated_by_id"] = reporter
        return merged

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        text = safe_str(value)
        if text is None:
            raise ValueError("station id must be non-empty")
        return text

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_coordinate(cls, value: Any) -> float:
        parsed = safe_float(value)
        if parsed is None:
            raise ValueError(f"invalid coordinate {value!r}")
        return parsed

    @field_validator("prices", mode="before")
    @classmethod
    def _coerce_prices(cls, value: Any) -> dict[FuelSubtype, float | None]:
        incoming: Mapping[Any, Any] = value if isinstance(value, Mapping) else {}
        prices: dict[FuelSubtype, float | None] = {}
        for subtype in FuelSubtype:
            raw = incoming.get(subtype, incoming.get(subtype.value))
            prices[subtype] = positive_or_none(raw)
        return prices

    @field_validator("updated_at", mode="before")
    @classmethod
    def _coerce_updated_at(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)

    @field_validator("last_updated_by_id", mode="before")
    @classmethod
    def _coerce_reporter_id(cls, value: Any) -> str | None:
        return safe_str(value)

    @property
    def location(self) -> GeoPoint:
        return GeoPoint(latitude=self.latitude, longitude=self.longitude)

    def price(self, subtype: FuelSubtype) -> float | None:
        """Resolved price for *subtype*; ``None`` means unknown."""
        return self.prices.get(subtype)

    def with_prices(
        self,
        prices: Mapping[FuelSubtype, float | None],
        *,
        updated_at: datetime,
        updated_by: str | None,
    ) -> StationRecord:
        """Return a copy reflecting an accepted price report."""
        resolved = {subtype: positive_or_none(prices.get(subtype)) for subtype in FuelSubtype}
        update: dict[str, Any] = {
            "prices": resolved,
            "updated_at": updated_at,
            "last_updated_by_id": updated_by,
        }
        if self.last_updated_by is not None and self.last_updated_by.id != updated_by:
            update["last_updated_by"] = None
        return self.model_copy(update=update)


def build_price_report(
    station: StationRecord,
    inputs: Mapping[FuelSubtype | str, Any],
) -> dict[FuelSubtype, float]:
    """Build the full five-subtype price set for a price report.

    An input that is missing, blank or not a number falls back to the
    station's current price, and to ``0`` (unknown) when that is unknown
    too. Explicit inputs are taken as typed, so ``0`` clears a price.

    Raises
    ------
    ValueError
        If an explicit input is negative.
    """
    normalized: dict[FuelSubtype, Any] = {}
    for key, value in inputs.items():
        normalized[FuelSubtype(key)] = value

    report: dict[FuelSubtype, float] = {}
    for subtype in FuelSubtype:
        parsed = safe_float(normalized.get(subtype))
        if parsed is None:
            report[subtype] = station.price(subtype) or 0.0
            continue
        if parsed < 0:
            raise ValueError(f"{subtype.value} price must not be negative, got {parsed}")
        report[subtype] = parsed
    return report
