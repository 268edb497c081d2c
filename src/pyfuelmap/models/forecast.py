"""Weekly pump price forecast model."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pyfuelmap.ingestion.normalize import parse_timestamp, safe_float, safe_str
from pyfuelmap.models._base import FuelMapBaseModel


class ForecastProduct(enum.StrEnum):
    GASOLINE = "gas"
    DIESEL = "diesel"
    KEROSENE = "kerosene"


class PriceForecast(FuelMapBaseModel):
    """The announced price movement per product for the coming week.

    Each product has an unsigned amount (per liter) and a direction flag.
    The flags default to an increase when the row leaves them out.

    Attributes
    ----------
    effective_date : str or None
        Free-form date text as entered by the editor.
    last_updated : datetime or None
        When the row was last written; the newest row is the current one.
    """

    id: int | str | None = None
    gas_amount: float = 0.0
    gas_increase: bool = Field(default=True, validation_alias=AliasChoices("gas_increase", "b_gas_increase"))
    diesel_amount: float = 0.0
    diesel_increase: bool = Field(default=True, validation_alias=AliasChoices("diesel_increase", "b_diesel_increase"))
    kerosene_amount: float = 0.0
    kerosene_increase: bool = Field(
        default=True,
        validation_alias=AliasChoices("kerosene_increase", "b_kerosene_increase"),
    )
    effective_date: str | None = None
    last_updated: datetime | None = None

    @field_validator("gas_amount", "diesel_amount", "kerosene_amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> float:
        parsed = safe_float(value)
        return abs(parsed) if parsed is not None else 0.0

    @field_validator("effective_date", mode="before")
    @classmethod
    def _coerce_effective_date(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("last_updated", mode="before")
    @classmethod
    def _coerce_last_updated(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)

    def delta(self, product: ForecastProduct | str) -> float:
        """Signed change per liter: positive for an increase."""
        key = ForecastProduct(product).value
        amount: float = getattr(self, f"{key}_amount")
        return amount if getattr(self, f"{key}_increase") else -amount

    def deltas(self) -> dict[ForecastProduct, float]:
        return {product: self.delta(product) for product in ForecastProduct}
