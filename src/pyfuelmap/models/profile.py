"""Signed-in user profile model."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pyfuelmap.ingestion.normalize import non_negative_or_zero, safe_str, string_id_list
from pyfuelmap.models._base import FuelMapBaseModel


class UserProfile(FuelMapBaseModel):
    """The parts of the ``users`` row the client reads and writes.

    The ``show_*`` flags control what other users see on the contributor
    card: the full name, and the phone number as a GCash or Maya wallet.
    """

    id: str
    favorite_stations: list[str] = Field(default_factory=list)
    no_incorrect_location_report: int = 0
    show_name: bool = Field(default=True, validation_alias=AliasChoices("show_name", "b_show_name"))
    show_gcash: bool = Field(default=False, validation_alias=AliasChoices("show_gcash", "b_show_gcash"))
    show_maya: bool = Field(default=False, validation_alias=AliasChoices("show_maya", "b_show_maya"))

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        text = safe_str(value)
        if text is None:
            raise ValueError("profile id must be non-empty")
        return text

    @field_validator("favorite_stations", mode="before")
    @classmethod
    def _coerce_favorites(cls, value: Any) -> list[str]:
        # Keep first-seen order, drop duplicates.
        return list(dict.fromkeys(string_id_list(value)))

    @field_validator("no_incorrect_location_report", mode="before")
    @classmethod
    def _coerce_counter(cls, value: Any) -> int:
        return non_negative_or_zero(value)
