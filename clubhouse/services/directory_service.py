"""
Team and player directory queries for listing and search screens.

Results are ordered (teams by name, players by first name, ties broken by id)
and paginated with an opaque "last seen" cursor, so pages stay stable while
rows are inserted ahead of the cursor.
"""

import base64
import json
from collections import defaultdict
from typing import Dict, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_
from clubhouse.database.models import Team, TeamPlayer, UserProfile
from clubhouse.services.team_service import team_to_dict
from clubhouse.services.user_service import profile_to_dict
from clubhouse.utils.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, PREFIX_SEARCH_SENTINEL
import logging

logger = logging.getLogger(__name__)


def encode_cursor(sort_value: str, row_id: int) -> str:
    """Encode the last row of a page as an opaque cursor."""
    raw = json.dumps([sort_value, row_id]).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii")


def decode_cursor(cursor: str) -> Tuple[str, int]:
    """
    Decode a cursor produced by encode_cursor.

    Raises:
        ValueError: If the cursor is malformed
    """
    try:
        sort_value, row_id = json.loads(base64.urlsafe_b64decode(cursor.encode("ascii")))
    except (ValueError, TypeError) as e:
        # binascii, unicode and JSON decode errors are all ValueErrors
        raise ValueError("Invalid cursor") from e
    if not isinstance(sort_value, str) or not isinstance(row_id, int):
        raise ValueError("Invalid cursor")
    return sort_value, row_id


def _clamp_limit(limit: int) -> int:
    if limit < 1:
        raise ValueError("limit must be at least 1")
    return min(limit, MAX_PAGE_SIZE)


async def _rosters_for(session: AsyncSession, team_ids: List[int]) -> Dict[int, List[int]]:
    """Batch-fetch roster ids for a page of teams."""
    rosters: Dict[int, List[int]] = defaultdict(list)
    if not team_ids:
        return rosters
    result = await session.execute(
        select(TeamPlayer.team_id, TeamPlayer.player_id)
        .where(TeamPlayer.team_id.in_(team_ids))
        .order_by(TeamPlayer.id)
    )
    for team_id, player_id in result.all():
        rosters[team_id].append(player_id)
    return rosters


async def list_teams(
    session: AsyncSession,
    status: Optional[str] = None,
    name_prefix: Optional[str] = None,
    manager_id: Optional[int] = None,
    cursor: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
) -> Dict:
    """
    List teams ordered by name.

    A name prefix matches names in the half-open range
    [prefix, prefix + PREFIX_SEARCH_SENTINEL).

    Args:
        session: Database session
        status: Optional status filter (pending/approved/rejected)
        name_prefix: Optional case-sensitive name prefix
        manager_id: Optional owning manager filter
        cursor: Cursor returned as next_cursor by the previous page
        limit: Page size (capped at MAX_PAGE_SIZE)

    Returns:
        Dict with "items" (team dicts) and "next_cursor" (None on the last page)
    """
    limit = _clamp_limit(limit)
    query = select(Team)
    if status:
        query = query.where(Team.status == status)
    if manager_id is not None:
        query = query.where(Team.manager_id == manager_id)
    if name_prefix:
        query = query.where(
            and_(Team.name >= name_prefix, Team.name < name_prefix + PREFIX_SEARCH_SENTINEL)
        )
    if cursor:
        last_name, last_id = decode_cursor(cursor)
        query = query.where(
            or_(Team.name > last_name, and_(Team.name == last_name, Team.id > last_id))
        )

    result = await session.execute(query.order_by(Team.name, Team.id).limit(limit + 1))
    teams = list(result.scalars().all())
    has_more = len(teams) > limit
    teams = teams[:limit]

    rosters = await _rosters_for(session, [team.id for team in teams])
    items = [team_to_dict(team, rosters.get(team.id, [])) for team in teams]
    next_cursor = encode_cursor(teams[-1].name, teams[-1].id) if has_more else None
    return {"items": items, "next_cursor": next_cursor}


async def list_players(
    session: AsyncSession,
    role: Optional[str] = None,
    team_id: Optional[int] = None,
    status: Optional[str] = None,
    cursor: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
) -> Dict:
    """
    List user profiles ordered by first name.

    Args:
        session: Database session
        role: Optional role filter (e.g. "player", "manager")
        team_id: Optional team filter (profile team pointer)
        status: Optional status filter (e.g. "pending_team_approval")
        cursor: Cursor returned as next_cursor by the previous page
        limit: Page size (capped at MAX_PAGE_SIZE)

    Returns:
        Dict with "items" (profile dicts) and "next_cursor" (None on the last page)
    """
    limit = _clamp_limit(limit)
    query = select(UserProfile)
    if role:
        query = query.where(UserProfile.role == role)
    if team_id is not None:
        query = query.where(UserProfile.team_id == team_id)
    if status:
        query = query.where(UserProfile.status == status)
    if cursor:
        last_name, last_id = decode_cursor(cursor)
        query = query.where(
            or_(
                UserProfile.first_name > last_name,
                and_(UserProfile.first_name == last_name, UserProfile.id > last_id),
            )
        )

    result = await session.execute(
        query.order_by(UserProfile.first_name, UserProfile.id).limit(limit + 1)
    )
    profiles = list(result.scalars().all())
    has_more = len(profiles) > limit
    profiles = profiles[:limit]

    next_cursor = (
        encode_cursor(profiles[-1].first_name, profiles[-1].id) if has_more else None
    )
    return {"items": [profile_to_dict(p) for p in profiles], "next_cursor": next_cursor}
