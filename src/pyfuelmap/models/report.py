"""Pending (user-submitted) station report models."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from pyfuelmap.ingestion.normalize import parse_timestamp, safe_float, safe_str, string_id_list
from pyfuelmap.models._base import FuelMapBaseModel
from pyfuelmap.models.station import FuelSubtype


class ReportState(enum.StrEnum):
    DRAFT = "draft"
    PENDING = "pending"
    PROMOTED = "promoted"
    DENIED = "denied"
    WITHDRAWN = "withdrawn"


class VoteOutcome(enum.StrEnum):
    """Verdict returned by the ``verify_or_deny_report`` procedure.

    ``ALREADY_VOTED`` is produced locally; ``UNKNOWN`` stands in for any
    tag this client does not recognize.
    """

    VERIFICATION_ADDED = "VERIFICATION_ADDED"
    DENIAL_ADDED = "DENIAL_ADDED"
    STATION_PROMOTED = "STATION_PROMOTED"
    REPORT_DELETED_BY_DENIALS = "REPORT_DELETED_BY_DENIALS"
    ALREADY_VOTED = "ALREADY_VOTED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def _missing_(cls, value: object) -> VoteOutcome:
        return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in (VoteOutcome.STATION_PROMOTED, VoteOutcome.REPORT_DELETED_BY_DENIALS)


class PendingReport(FuelMapBaseModel):
    """A candidate station awaiting community verification.

    Invariants (checked on construction): ``verifiers`` and ``deniers``
    are disjoint, and the reporter appears in neither.
    """

    id: str
    reporter_id: str
    latitude: float
    longitude: float
    brand: str = ""
    municipality: str = Field(default="", validation_alias=AliasChoices("municipality", "city"))
    marketing_names: dict[FuelSubtype, str | None] = Field(default_factory=dict)
    verifiers: frozenset[str] = frozenset()
    deniers: frozenset[str] = frozenset()
    created_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _gather_names(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        merged = dict(values)
        names = dict(merged.get("marketing_names") or {})
        for subtype in FuelSubtype:
            column = f"{subtype.value}_name"
            if column in merged:
                names[subtype.value] = merged.pop(column)
        merged["marketing_names"] = names
        return merged

    @field_validator("id", "reporter_id", mode="before")
    @classmethod
    def _coerce_ids(cls, value: Any) -> str:
        text = safe_str(value)
        if text is None:
            raise ValueError("must be non-empty")
        return text

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_coordinate(cls, value: Any) -> float:
        parsed = safe_float(value)
        if parsed is None:
            raise ValueError(f"invalid coordinate {value!r}")
        return parsed

    @field_validator("marketing_names", mode="before")
    @classmethod
    def _coerce_names(cls, value: Any) -> dict[str, str | None]:
        if not isinstance(value, dict):
            return {}
        return {str(key): safe_str(name) for key, name in value.items()}

    @field_validator("verifiers", "deniers", mode="before")
    @classmethod
    def _coerce_voters(cls, value: Any) -> frozenset[str]:
        return frozenset(string_id_list(value))

    @field_validator("created_at", mode="before")
    @classmethod
    def _coerce_created_at(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)

    @model_validator(mode="after")
    def _check_voters(self) -> PendingReport:
        overlap = self.verifiers & self.deniers
        if overlap:
            raise ValueError(f"users both verified and denied report {self.id}: {sorted(overlap)}")
        if self.reporter_id in self.verifiers or self.reporter_id in self.deniers:
            raise ValueError(f"reporter {self.reporter_id} voted on their own report {self.id}")
        return self

    def has_voted(self, user_id: str) -> bool:
        return user_id in self.verifiers or user_id in self.deniers

    def with_vote(self, voter_id: str, *, is_confirm: bool) -> PendingReport:
        """Return a copy with *voter_id* added to verifiers or deniers."""
        if voter_id == self.reporter_id:
            raise ValueError("reporters cannot vote on their own report")
        if self.has_voted(voter_id):
            return self
        if is_confirm:
            return self.model_copy(update={"verifiers": self.verifiers | {voter_id}})
        return self.model_copy(update={"deniers": self.deniers | {voter_id}})


class ReportDraft(BaseModel):
    """Client-side form state for a new station location."""

    model_config = ConfigDict(validate_assignment=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    brand: str = ""
    municipality: str = ""
    offered: dict[FuelSubtype, bool] = Field(default_factory=dict)
    marketing_names: dict[FuelSubtype, str] = Field(default_factory=dict)

    def toggle(self, subtype: FuelSubtype, offered: bool = True, marketing_name: str | None = None) -> None:
        self.offered = {**self.offered, subtype: offered}
        if marketing_name is not None:
            self.marketing_names = {**self.marketing_names, subtype: marketing_name}


class LocationReportRequest(BaseModel):
    """A validated location report, ready for ``submit_location_report``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    reporter_id: str = Field(min_length=1)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    brand: str = Field(min_length=1)
    municipality: str = Field(min_length=1)
    is_existing_brand: bool
    offered: frozenset[FuelSubtype]
    marketing_names: dict[FuelSubtype, str | None]

    def to_rpc_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {
            "_reporter_id": self.reporter_id,
            "_latitude": self.latitude,
            "_longitude": self.longitude,
            "_brand": self.brand,
            "_city": self.municipality,
        }
        for subtype in FuelSubtype:
            params[f"_{subtype.value}_name"] = self.marketing_names.get(subtype)
        return params
