"""Contributor (community member) models."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pyfuelmap.ingestion.normalize import non_negative_or_zero, safe_str
from pyfuelmap.models._base import FuelMapBaseModel

ANONYMOUS = "Anonymous"
_MASK = "*****"


def mask_display_name(full_name: str | None, show_name: bool) -> str:
    """Return the public name for a contributor.

    No name gives ``"Anonymous"``; a hidden name keeps only its first
    character (``"J*****"``).
    """
    name = (full_name or "").strip()
    if not name:
        return ANONYMOUS
    if show_name:
        return name
    return f"{name[0]}{_MASK}"


class ContributorVoteType(enum.StrEnum):
    LIKE = "like"
    DISLIKE = "dislike"


class ContributorVoteResult(enum.StrEnum):
    RECORDED = "recorded"
    ALREADY_VOTED = "already_voted"


class Contributor(FuelMapBaseModel):
    """A user who contributes price or location reports.

    Rows come either from the ``users`` table directly or as a join
    embedded in a station row, so every field except ``id`` is optional.
    """

    id: str
    full_name: str | None = None
    phone: str | None = None
    show_name: bool = Field(default=False, validation_alias=AliasChoices("show_name", "b_show_name"))
    show_gcash: bool = Field(default=False, validation_alias=AliasChoices("show_gcash", "b_show_gcash"))
    show_maya: bool = Field(default=False, validation_alias=AliasChoices("show_maya", "b_show_maya"))
    no_contributions: int = 0
    no_incorrect_reports: int = 0
    no_likes: int = 0
    no_dislikes: int = 0

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        text = safe_str(value)
        if text is None:
            raise ValueError("contributor id must be non-empty")
        return text

    @field_validator("full_name", "phone", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("no_contributions", "no_incorrect_reports", "no_likes", "no_dislikes", mode="before")
    @classmethod
    def _coerce_counters(cls, value: Any) -> int:
        return non_negative_or_zero(value)

    @property
    def display_name(self) -> str:
        return mask_display_name(self.full_name, self.show_name)

    @property
    def e_wallet_phone(self) -> str | None:
        """Phone number, only when the contributor shares an e-wallet."""
        if self.show_gcash or self.show_maya:
            return self.phone
        return None

    def with_vote(self, vote_type: ContributorVoteType) -> Contributor:
        if vote_type is ContributorVoteType.LIKE:
            return self.model_copy(update={"no_likes": self.no_likes + 1})
        return self.model_copy(update={"no_dislikes": self.no_dislikes + 1})
