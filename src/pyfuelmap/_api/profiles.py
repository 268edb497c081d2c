"""User profile and contributor endpoints.

Endpoints:
  - GET   /users (own profile, contributor profile)
  - PATCH /users (favorite_stations, visibility flags)
  - POST  /rpc/vote_on_contributor
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pyfuelmap._api._common import RETURN_MINIMAL, SINGLE_OBJECT, call_rpc, eq, request_json
from pyfuelmap._constants import RPC_VOTE_ON_CONTRIBUTOR, USERS_TABLE
from pyfuelmap._transport import Transport
from pyfuelmap.exceptions import FuelMapApiError
from pyfuelmap.models.contributor import Contributor, ContributorVoteType
from pyfuelmap.models.profile import UserProfile

_logger = logging.getLogger(__name__)

PROFILE_COLUMNS = "id,favorite_stations,no_incorrect_location_report,b_show_name,b_show_gcash,b_show_maya"
CONTRIBUTOR_COLUMNS = (
    "id,phone,full_name,no_contributions,no_incorrect_reports,no_likes,no_dislikes,b_show_name,b_show_gcash,b_show_maya"
)


async def fetch_profile(transport: Transport, user_id: str) -> UserProfile:
    path = f"/{USERS_TABLE}"
    decoded = await request_json(
        transport,
        "GET",
        path,
        params=[("select", PROFILE_COLUMNS), eq("id", user_id)],
        headers=SINGLE_OBJECT,
    )
    if not isinstance(decoded, dict):
        raise FuelMapApiError(f"{path} returned a non-object for id={user_id}", code="invalid_body", endpoint=path)
    return UserProfile.model_validate(decoded)


async def update_favorite_stations(transport: Transport, user_id: str, station_ids: Iterable[str]) -> None:
    """Overwrite the whole ``favorite_stations`` array in one write."""
    ids = list(station_ids)
    await request_json(
        transport,
        "PATCH",
        f"/{USERS_TABLE}",
        params=[eq("id", user_id)],
        json_body={"favorite_stations": ids},
        headers=RETURN_MINIMAL,
    )
    _logger.debug("Favorites written user=%s count=%d", user_id, len(ids))


async def update_visibility(
    transport: Transport,
    user_id: str,
    *,
    show_name: bool,
    show_gcash: bool,
    show_maya: bool,
) -> None:
    """Write all three visibility flags in one write."""
    await request_json(
        transport,
        "PATCH",
        f"/{USERS_TABLE}",
        params=[eq("id", user_id)],
        json_body={"b_show_name": show_name, "b_show_gcash": show_gcash, "b_show_maya": show_maya},
        headers=RETURN_MINIMAL,
    )
    _logger.debug("Visibility written user=%s name=%s gcash=%s maya=%s", user_id, show_name, show_gcash, show_maya)


async def fetch_contributor(transport: Transport, contributor_id: str) -> Contributor:
    path = f"/{USERS_TABLE}"
    decoded = await request_json(
        transport,
        "GET",
        path,
        params=[("select", CONTRIBUTOR_COLUMNS), eq("id", contributor_id)],
        headers=SINGLE_OBJECT,
    )
    if not isinstance(decoded, dict):
        raise FuelMapApiError(
            f"{path} returned a non-object for id={contributor_id}",
            code="invalid_body",
            endpoint=path,
        )
    return Contributor.model_validate(decoded)


async def vote_on_contributor(
    transport: Transport,
    *,
    voter_id: str,
    target_id: str,
    vote_type: ContributorVoteType,
) -> None:
    """Record a like/dislike.

    Raises
    ------
    FuelMapUniqueViolationError
        If the voter already voted on this contributor.
    """
    await call_rpc(
        transport,
        RPC_VOTE_ON_CONTRIBUTOR,
        {"_voter_id": voter_id, "_target_id": target_id, "_vote_type": vote_type.value},
    )
