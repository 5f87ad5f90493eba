"""
Team service for team registration and admin review.

Roster changes are owned by membership_service; this module only creates
teams, moves them through pending/approved/rejected and deletes them.
"""

from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete
from clubhouse.database.models import (
    Team,
    TeamPlayer,
    TeamStatus,
    TeamRequest,
    TeamRequestStatus,
    ProfileStatus,
    UserProfile,
    UserRole,
)
from clubhouse.services.errors import NotFoundError, PreconditionError
from clubhouse.utils.constants import MIN_TEAM_NAME_LENGTH
from clubhouse.utils.datetime_utils import utcnow, isoformat_or_none
import logging

logger = logging.getLogger(__name__)

VALID_TEAM_STATUSES = {status.value for status in TeamStatus}


async def get_roster_ids(session: AsyncSession, team_id: int) -> List[int]:
    """
    Get the player ids on a team's roster, in the order they were added.

    Args:
        session: Database session
        team_id: Team ID

    Returns:
        List of player profile ids
    """
    result = await session.execute(
        select(TeamPlayer.player_id).where(TeamPlayer.team_id == team_id).order_by(TeamPlayer.id)
    )
    return list(result.scalars().all())


def team_to_dict(team: Team, players: List[int]) -> Dict:
    """Convert a Team row plus its roster ids into the API/document representation."""
    return {
        "id": team.id,
        "name": team.name,
        "club": team.club,
        "description": team.description,
        "manager_id": team.manager_id,
        "status": team.status,
        "max_players": team.max_players,
        "players": players,
        "player_count": len(players),
        "created_at": isoformat_or_none(team.created_at),
        "updated_at": isoformat_or_none(team.updated_at),
    }


async def get_team(session: AsyncSession, team_id: int) -> Optional[Dict]:
    """
    Get a team with its roster.

    Returns:
        Team dictionary or None if not found
    """
    team = await session.get(Team, team_id)
    if team is None:
        return None
    return team_to_dict(team, await get_roster_ids(session, team_id))


async def register_team(
    session: AsyncSession,
    manager_id: int,
    name: str,
    club: str,
    description: Optional[str] = None,
    max_players: Optional[int] = None,
) -> Dict:
    """
    Register a new team; it waits in ``pending`` until an admin reviews it.

    Args:
        session: Database session
        manager_id: Profile id of the registering manager/admin
        name: Team name
        club: Club name
        description: Optional description
        max_players: Optional roster capacity

    Returns:
        Team dictionary

    Raises:
        NotFoundError: If the manager has no profile
        PreconditionError: If the registrant is not a manager or admin
        ValueError: If the names are too short or capacity is invalid
    """
    name = (name or "").strip()
    club = (club or "").strip()
    if not name or not club:
        raise ValueError("Team name and club name are required")
    if len(name) < MIN_TEAM_NAME_LENGTH or len(club) < MIN_TEAM_NAME_LENGTH:
        raise ValueError(
            f"Team and club names must be at least {MIN_TEAM_NAME_LENGTH} characters"
        )
    if max_players is not None and max_players < 1:
        raise ValueError("max_players must be at least 1")

    manager = await session.get(UserProfile, manager_id)
    if manager is None:
        raise NotFoundError("Manager profile not found")
    if manager.role not in (UserRole.MANAGER.value, UserRole.ADMIN.value):
        raise PreconditionError("Only managers and admins can register teams")

    team = Team(
        name=name,
        club=club,
        description=description.strip() if description else None,
        manager_id=manager_id,
        status=TeamStatus.PENDING.value,
        max_players=max_players,
    )
    session.add(team)
    await session.flush()
    await session.refresh(team)

    logger.info(f"Team {team.id} '{name}' registered by manager {manager_id}")
    return team_to_dict(team, [])


async def set_team_status(session: AsyncSession, team_id: int, status: str) -> Dict:
    """
    Move a team to a new review status (admin action).

    Args:
        session: Database session
        team_id: Team ID
        status: One of pending, approved, rejected

    Returns:
        Updated team dictionary

    Raises:
        ValueError: If the status is unknown
        NotFoundError: If the team does not exist
    """
    if status not in VALID_TEAM_STATUSES:
        raise ValueError(f"Invalid team status: {status}")

    team = await session.get(Team, team_id)
    if team is None:
        raise NotFoundError("Team not found")

    if team.status != status:
        logger.info(f"Team {team_id} status {team.status} -> {status}")
        team.status = status
        await session.flush()
        await session.refresh(team)

    return team_to_dict(team, await get_roster_ids(session, team_id))


async def delete_team(session: AsyncSession, team_id: int) -> Dict:
    """
    Delete a team and release its players.

    Rostered profiles are detached (team cleared, status inactive) before the
    roster rows and the team go. Pending requests for the team are rejected;
    all of its requests are kept with their team reference cleared.

    Args:
        session: Database session
        team_id: Team ID

    Returns:
        Dict with the deleted team id, the released player ids and the ids of
        the requests that were still pending

    Raises:
        NotFoundError: If the team does not exist
    """
    team = await session.get(Team, team_id)
    if team is None:
        raise NotFoundError("Team not found")

    released = await get_roster_ids(session, team_id)
    result = await session.execute(
        select(TeamRequest.id).where(
            TeamRequest.team_id == team_id,
            TeamRequest.status == TeamRequestStatus.PENDING.value,
        )
    )
    rejected = list(result.scalars().all())

    await session.execute(
        update(UserProfile)
        .where(UserProfile.team_id == team_id)
        .values(team_id=None, team_name=None, status=ProfileStatus.INACTIVE.value)
    )
    await session.execute(delete(TeamPlayer).where(TeamPlayer.team_id == team_id))
    if rejected:
        await session.execute(
            update(TeamRequest)
            .where(TeamRequest.id.in_(rejected))
            .values(status=TeamRequestStatus.REJECTED.value, responded_at=utcnow())
        )
    await session.execute(
        update(TeamRequest).where(TeamRequest.team_id == team_id).values(team_id=None)
    )
    await session.execute(delete(Team).where(Team.id == team_id))
    await session.flush()

    logger.info(
        f"Team {team_id} deleted; released players {released}, rejected requests {rejected}"
    )
    return {"team_id": team_id, "released_player_ids": released, "rejected_request_ids": rejected}
