"""Contributor profiles and like/dislike votes."""

from __future__ import annotations

import logging

from pyfuelmap._api import profiles as _profiles_api
from pyfuelmap._transport import Transport
from pyfuelmap.exceptions import FuelMapUniqueViolationError, FuelMapValidationError
from pyfuelmap.models.contributor import Contributor, ContributorVoteResult, ContributorVoteType
from pyfuelmap.state.tentative import Tentative

_logger = logging.getLogger(__name__)


class ContributorDirectory:
    """Read-through cache of contributor profiles."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._profiles: dict[str, Tentative[Contributor]] = {}

    async def get(self, contributor_id: str, *, refresh: bool = False) -> Contributor:
        cached = self._profiles.get(contributor_id)
        if cached is not None and not refresh:
            return cached.value
        contributor = await _profiles_api.fetch_contributor(self._transport, contributor_id)
        if cached is None:
            self._profiles[contributor_id] = Tentative(contributor)
        else:
            cached.reset(contributor)
        return contributor

    def cached(self, contributor_id: str) -> Contributor | None:
        entry = self._profiles.get(contributor_id)
        return entry.value if entry is not None else None

    async def vote(
        self,
        voter_id: str,
        target_id: str,
        vote_type: ContributorVoteType | str,
    ) -> ContributorVoteResult:
        """Like or dislike a contributor.

        A duplicate vote is reported as ``ALREADY_VOTED`` rather than an
        error. The cached counter is bumped while the call is in flight
        and restored if it fails.

        Raises
        ------
        FuelMapValidationError
            When voting on yourself or the vote type is unknown.
        """
        if not voter_id:
            raise FuelMapValidationError("Please log in to vote.")
        if voter_id == target_id:
            raise FuelMapValidationError("You cannot vote on your own contributions.")
        try:
            kind = ContributorVoteType(vote_type)
        except ValueError as exc:
            raise FuelMapValidationError(f"Unknown vote type {vote_type!r}") from exc

        async def commit() -> None:
            await _profiles_api.vote_on_contributor(
                self._transport,
                voter_id=voter_id,
                target_id=target_id,
                vote_type=kind,
            )

        entry = self._profiles.get(target_id)
        try:
            if entry is None:
                await commit()
            else:
                await entry.apply(entry.value.with_vote(kind), commit)
        except FuelMapUniqueViolationError:
            _logger.debug("Duplicate %s on contributor=%s by %s", kind, target_id, voter_id)
            return ContributorVoteResult.ALREADY_VOTED
        return ContributorVoteResult.RECORDED

    def forget(self, contributor_id: str) -> None:
        """Drop *contributor_id* so the next :meth:`get` reads it again."""
        self._profiles.pop(contributor_id, None)

    def clear(self) -> None:
        self._profiles.clear()
