"""Client-side station filtering and price sorting.

Everything here is pure: no I/O, and inputs are never mutated.
"""

from __future__ import annotations

import enum
import math
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pyfuelmap._constants import EARTH_RADIUS_KM
from pyfuelmap.models.station import FuelCategory, FuelSubtype, GeoPoint, StationRecord

if TYPE_CHECKING:
    from pyfuelmap.state.catalog import BrandCatalog


class SortOrder(enum.StrEnum):
    ASC = "asc"
    DESC = "desc"


class FilterCriteria(BaseModel):
    """Filter and sort settings for the station list.

    Every field is optional; the default instance keeps every record in
    its original order.
    """

    model_config = ConfigDict(frozen=True)

    brands: frozenset[str] = frozenset()
    fuel_category: FuelCategory | None = None
    fuel_subtype: FuelSubtype | None = None
    price_ceiling: float | None = Field(default=None, gt=0)
    radius_km: float | None = Field(default=None, gt=0)
    user_location: GeoPoint | None = None
    sort_order: SortOrder | None = None

    @field_validator("brands", mode="before")
    @classmethod
    def _coerce_brands(cls, value: Any) -> frozenset[str]:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            return frozenset({value})
        return frozenset(str(brand) for brand in value)


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance between two points, in kilometres."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def resolve_price(record: StationRecord, subtype: FuelSubtype) -> float | None:
    """Price used for filtering and sorting; ``None`` means unknown."""
    price = record.price(subtype)
    if price is None or price <= 0:
        return None
    return price


def effective_subtype(criteria: FilterCriteria) -> FuelSubtype:
    """Subtype the price ceiling applies to.

    The explicit subtype wins, then the category's default subtype, then
    regular gas.
    """
    if criteria.fuel_subtype is not None:
        return criteria.fuel_subtype
    if criteria.fuel_category is not None:
        return criteria.fuel_category.default_subtype
    return FuelSubtype.REGULAR_GAS


def _sorted_by_price(records: list[StationRecord], subtype: FuelSubtype, order: SortOrder) -> list[StationRecord]:
    priced = [record for record in records if resolve_price(record, subtype) is not None]
    unpriced = [record for record in records if resolve_price(record, subtype) is None]
    # sorted() is stable in both directions, so ties keep their input order.
    priced = sorted(priced, key=lambda record: resolve_price(record, subtype) or 0.0, reverse=order is SortOrder.DESC)
    return priced + unpriced


def apply_filters(
    records: Iterable[StationRecord],
    criteria: FilterCriteria,
    *,
    catalog: BrandCatalog | None = None,
) -> list[StationRecord]:
    """Return the records that pass *criteria*, in display order.

    Steps, in order:

    1. brand allow list (empty means every brand);
    2. fuel category, only when a *catalog* is given: the brand must
       have a label in that category;
    3. price ceiling on the effective subtype (see
       :func:`effective_subtype`); unknown prices are dropped;
    4. radius around ``user_location``; skipped when the location is
       unknown;
    5. price sort, only when both ``sort_order`` and ``fuel_subtype``
       are set. Unpriced records go last in their original order.
    """
    result = list(records)

    if criteria.brands:
        result = [record for record in result if record.brand in criteria.brands]

    if criteria.fuel_category is not None and catalog is not None:
        category = criteria.fuel_category
        result = [record for record in result if catalog.has_category(record.brand, category)]

    if criteria.price_ceiling is not None:
        subtype = effective_subtype(criteria)
        ceiling = criteria.price_ceiling
        kept: list[StationRecord] = []
        for record in result:
            price = resolve_price(record, subtype)
            if price is not None and price <= ceiling:
                kept.append(record)
        result = kept

    if criteria.radius_km is not None and criteria.user_location is not None:
        origin = criteria.user_location
        radius = criteria.radius_km
        result = [record for record in result if haversine_km(origin, record.location) <= radius]

    if criteria.sort_order is not None and criteria.fuel_subtype is not None:
        result = _sorted_by_price(result, criteria.fuel_subtype, criteria.sort_order)

    return result
