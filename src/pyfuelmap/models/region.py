"""Viewport region model."""

from __future__ import annotations

from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BoundingBox(NamedTuple):
    """Axis-aligned latitude/longitude box (inclusive bounds)."""

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def contains(self, latitude: float, longitude: float) -> bool:
        return self.min_lat <= latitude <= self.max_lat and self.min_lon <= longitude <= self.max_lon


class ViewportRegion(BaseModel):
    """The visible map area: a center point plus latitude/longitude spans.

    ``lon_span`` defaults to ``lat_span`` when omitted. Regions are
    transient and never persisted.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    lat_span: float = Field(gt=0, alias="latitude_delta")
    lon_span: float = Field(gt=0, alias="longitude_delta")

    @model_validator(mode="before")
    @classmethod
    def _default_lon_span(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        if "lon_span" in values or "longitude_delta" in values:
            return values
        merged = dict(values)
        lat_span = merged.get("lat_span", merged.get("latitude_delta"))
        if lat_span is not None:
            merged["lon_span"] = lat_span
        return merged

    def bounding_box(self) -> BoundingBox:
        half_lat = self.lat_span / 2
        half_lon = self.lon_span / 2
        return BoundingBox(
            min_lat=self.latitude - half_lat,
            max_lat=self.latitude + half_lat,
            min_lon=self.longitude - half_lon,
            max_lon=self.longitude + half_lon,
        )

    def is_too_wide(self, zoom_threshold: float) -> bool:
        return self.lat_span > zoom_threshold
