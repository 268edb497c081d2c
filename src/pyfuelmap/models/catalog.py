"""Reference data models: brand catalog entries and municipalities."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator, model_validator

from pyfuelmap.ingestion.normalize import safe_str
from pyfuelmap.models._base import FuelMapBaseModel
from pyfuelmap.models.station import FuelCategory, FuelSubtype


class BrandConfig(FuelMapBaseModel):
    """Marketing labels a brand uses for each fuel subtype.

    A brand offers a subtype when it has a label for it, e.g. Petron
    sells ``regular_gas`` as "Xtra Advance".
    """

    brand_name: str = Field(validation_alias=AliasChoices("brand_name", "brand"))
    labels: dict[FuelSubtype, str] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _gather_labels(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        merged = dict(values)
        labels = dict(merged.get("labels") or {})
        for subtype in FuelSubtype:
            column = f"{subtype.value}_label"
            if column in merged:
                labels[subtype.value] = merged.pop(column)
        merged["labels"] = labels
        return merged

    @field_validator("brand_name", mode="before")
    @classmethod
    def _coerce_brand(cls, value: Any) -> str:
        text = safe_str(value)
        if text is None:
            raise ValueError("brand_name must be non-empty")
        return text

    @field_validator("labels", mode="before")
    @classmethod
    def _drop_blank_labels(cls, value: Any) -> dict[str, str]:
        if not isinstance(value, dict):
            return {}
        labels: dict[str, str] = {}
        for key, label in value.items():
            text = safe_str(label)
            if text is not None:
                labels[str(key)] = text
        return labels

    def offers(self, subtype: FuelSubtype) -> bool:
        return subtype in self.labels

    def offers_category(self, category: FuelCategory) -> bool:
        return any(self.offers(subtype) for subtype in category.subtypes)

    def to_row(self) -> dict[str, Any]:
        """Serialize back to the ``fuel_brand_configs`` column layout."""
        row: dict[str, Any] = {"brand_name": self.brand_name}
        for subtype in FuelSubtype:
            row[f"{subtype.value}_label"] = self.labels.get(subtype)
        return row


class Municipality(FuelMapBaseModel):
    """A city or municipality from the public gazetteer."""

    code: str
    name: str
    province_code: str | None = Field(default=None, validation_alias=AliasChoices("province_code", "provinceCode"))
    region_code: str | None = Field(default=None, validation_alias=AliasChoices("region_code", "regionCode"))

    @field_validator("code", "name", mode="before")
    @classmethod
    def _required_text(cls, value: Any) -> str:
        text = safe_str(value)
        if text is None:
            raise ValueError("must be non-empty")
        return text

    @field_validator("province_code", "region_code", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> str | None:
        # The gazetteer sends ``false`` for cities without a province.
        if isinstance(value, bool):
            return None
        return safe_str(value)
