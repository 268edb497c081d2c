"""Trip fuel-cost estimate."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from pyfuelmap.exceptions import FuelMapValidationError
from pyfuelmap.ingestion.normalize import safe_float


class TripEstimate(BaseModel):
    model_config = ConfigDict(frozen=True)

    distance_km: float
    price_per_liter: float
    km_per_liter: float
    liters_needed: float
    cost: float


def _positive(value: Any, label: str) -> float:
    parsed = safe_float(value)
    if parsed is None or parsed <= 0:
        raise FuelMapValidationError(f"Enter a valid {label}.")
    return parsed


def estimate_trip(distance_km: Any, price_per_liter: Any, km_per_liter: Any) -> TripEstimate:
    """Fuel needed and cost for a trip.

    Inputs may be numbers or strings such as ``"1,250.5"``.

    Raises
    ------
    FuelMapValidationError
        If any input is missing, not a finite number, or not positive.
    """
    distance = _positive(distance_km, "distance")
    price = _positive(price_per_liter, "fuel price")
    efficiency = _positive(km_per_liter, "efficiency")
    liters = distance / efficiency
    return TripEstimate(
        distance_km=distance,
        price_per_liter=price,
        km_per_liter=efficiency,
        liters_needed=liters,
        cost=liters * price,
    )
