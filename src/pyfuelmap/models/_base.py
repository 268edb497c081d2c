"""Base model for data-service rows.

Every row model inherits from :class:`FuelMapBaseModel` which provides:

* frozen instances, so records can be shared between the cache and
  filtered views without defensive copies;
* a ``model_validator(mode="before")`` that drops placeholder values
  (``""``, ``"--"``, NaN) so the field default is used;
* a ``raw`` dict that captures the original row.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

_PLACEHOLDERS = frozenset({"", "--", "NaN", "nan"})


class FuelMapBaseModel(BaseModel):
    """Base for data-service row models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True, repr=False)
    """Original row as returned by the data service."""

    @classmethod
    def _clean_dict(cls, values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _PLACEHOLDERS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_row(cls, values: Any) -> Any:
        """Drop placeholder values and stash the raw row."""
        if not isinstance(values, dict):
            return values
        cleaned = cls._clean_dict(values)
        # Keep an explicitly passed raw= (e.g. model_copy paths).
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
