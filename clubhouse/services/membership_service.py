"""
Membership workflow for team join requests and invitations.

A request moves pending -> approved or pending -> rejected and is never
deleted. Approval touches three documents (roster, player profile, request)
with no cross-document transaction guarantee, so every step is written to be
safe to repeat: the roster insert is a set union, profile fields are plain
overwrites, and an already-approved request short-circuits. If a caller's
unit of work fails part-way, the request is still pending and approving it
again converges to the same state.

Known gap: the "no pending request for this (player, team)" check is a read
before the insert, so two concurrent requests from the same player can both
pass it.
"""

from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_
from clubhouse.database.models import (
    Team,
    TeamPlayer,
    TeamStatus,
    TeamRequest,
    TeamRequestStatus,
    TeamRequestType,
    UserProfile,
    UserRole,
    ProfileStatus,
)
from clubhouse.services.errors import NotFoundError, PreconditionError
from clubhouse.services.user_service import profile_to_dict
from clubhouse.utils.datetime_utils import utcnow, isoformat_or_none
import logging

logger = logging.getLogger(__name__)


def request_to_dict(
    request: TeamRequest,
    team_name: Optional[str] = None,
    player_name: Optional[str] = None,
) -> Dict:
    """Convert a TeamRequest row into the API/document representation."""
    return {
        "id": request.id,
        "player_id": request.player_id,
        "team_id": request.team_id,
        "manager_id": request.manager_id,
        "type": request.type,
        "status": request.status,
        "team_name": team_name,
        "player_name": player_name,
        "created_at": isoformat_or_none(request.created_at),
        "updated_at": isoformat_or_none(request.updated_at),
        "responded_at": isoformat_or_none(request.responded_at),
    }


async def _get_team(session: AsyncSession, team_id: int) -> Team:
    team = await session.get(Team, team_id)
    if team is None:
        raise NotFoundError("Team not found")
    return team


async def _get_player(session: AsyncSession, player_id: int) -> UserProfile:
    player = await session.get(UserProfile, player_id)
    if player is None:
        raise NotFoundError("Player profile not found")
    return player


async def _get_request(session: AsyncSession, request_id: int) -> TeamRequest:
    request = await session.get(TeamRequest, request_id)
    if request is None:
        raise NotFoundError("Team request not found")
    return request


async def _get_roster_entry(
    session: AsyncSession, team_id: int, player_id: int
) -> Optional[TeamPlayer]:
    result = await session.execute(
        select(TeamPlayer).where(
            and_(TeamPlayer.team_id == team_id, TeamPlayer.player_id == player_id)
        )
    )
    return result.scalar_one_or_none()


async def _roster_size(session: AsyncSession, team_id: int) -> int:
    result = await session.execute(
        select(func.count()).select_from(TeamPlayer).where(TeamPlayer.team_id == team_id)
    )
    return result.scalar() or 0


async def get_pending_request(
    session: AsyncSession, player_id: int, team_id: int
) -> Optional[TeamRequest]:
    """
    Get the pending request for a (player, team) pair, of either type.

    Args:
        session: Database session
        player_id: Player profile id
        team_id: Team ID

    Returns:
        TeamRequest or None
    """
    result = await session.execute(
        select(TeamRequest)
        .where(
            and_(
                TeamRequest.player_id == player_id,
                TeamRequest.team_id == team_id,
                TeamRequest.status == TeamRequestStatus.PENDING.value,
            )
        )
        .order_by(TeamRequest.id)
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _check_can_enter_team(session: AsyncSession, team: Team, player: UserProfile) -> None:
    """Shared preconditions for creating a join request or an invitation."""
    if player.role != UserRole.PLAYER.value:
        raise PreconditionError("Only players can join teams")
    if await _get_roster_entry(session, team.id, player.id) is not None:
        raise PreconditionError("Player is already a member of this team")
    if team.status != TeamStatus.APPROVED.value:
        raise PreconditionError("Team is not accepting players until it is approved")
    if team.max_players is not None and await _roster_size(session, team.id) >= team.max_players:
        raise PreconditionError("Team is full")
    if await get_pending_request(session, player.id, team.id) is not None:
        raise PreconditionError("A pending request for this team already exists")


async def create_join_request(session: AsyncSession, player_id: int, team_id: int) -> Dict:
    """
    Create a pending join request from a player to a team.

    All preconditions are checked before anything is written.

    Args:
        session: Database session
        player_id: Requesting player's profile id
        team_id: Target team

    Returns:
        Dict with the request data

    Raises:
        NotFoundError: If the team or player does not exist
        PreconditionError: If the player is already a member, the team is not
            approved or is full, or a pending request already exists
    """
    team = await _get_team(session, team_id)
    player = await _get_player(session, player_id)
    await _check_can_enter_team(session, team, player)

    request = TeamRequest(
        player_id=player_id,
        team_id=team_id,
        manager_id=team.manager_id,
        type=TeamRequestType.JOIN.value,
        status=TeamRequestStatus.PENDING.value,
    )
    session.add(request)
    await session.flush()
    await session.refresh(request)

    logger.info(f"Join request {request.id}: player {player_id} -> team {team_id}")
    return request_to_dict(request, team_name=team.name, player_name=player.full_name)


async def create_invitation(
    session: AsyncSession, manager_id: int, team_id: int, player_id: int
) -> Dict:
    """
    Create a pending invitation from a team's manager to a player.

    Args:
        session: Database session
        manager_id: Inviting manager's profile id
        team_id: Team the player is invited to
        player_id: Invited player's profile id

    Returns:
        Dict with the request data

    Raises:
        NotFoundError: If the team or player does not exist
        PreconditionError: Same preconditions as create_join_request
    """
    team = await _get_team(session, team_id)
    player = await _get_player(session, player_id)
    await _check_can_enter_team(session, team, player)

    request = TeamRequest(
        player_id=player_id,
        team_id=team_id,
        manager_id=manager_id,
        type=TeamRequestType.INVITATION.value,
        status=TeamRequestStatus.PENDING.value,
    )
    session.add(request)
    await session.flush()
    await session.refresh(request)

    logger.info(f"Invitation {request.id}: team {team_id} -> player {player_id}")
    return request_to_dict(request, team_name=team.name, player_name=player.full_name)


async def approve_request(session: AsyncSession, request_id: int) -> Dict:
    """
    Approve a pending request and make the player a member of the team.

    Effects, each safe to repeat:
      1. add the player to the team roster (set union)
      2. set the profile's team_id/team_name and status=active
      3. mark the request approved

    Approving an already-approved request is a no-op that returns the request.

    Args:
        session: Database session
        request_id: Team request ID

    Returns:
        Dict with the request data

    Raises:
        NotFoundError: If the request, team or player does not exist
        PreconditionError: If the request was rejected, the player belongs to
            another team, or the team is full; the request stays pending
    """
    request = await _get_request(session, request_id)
    if request.status == TeamRequestStatus.APPROVED.value:
        logger.info(f"Team request {request_id} already approved; nothing to do")
        return request_to_dict(request)
    if request.status != TeamRequestStatus.PENDING.value:
        raise PreconditionError("Only pending requests can be approved")

    team = await _get_team(session, request.team_id)
    player = await _get_player(session, request.player_id)

    if player.team_id is not None and player.team_id != team.id:
        raise PreconditionError(
            f"Player already belongs to {player.team_name or 'another team'}"
        )

    on_roster = await _get_roster_entry(session, team.id, player.id) is not None
    if not on_roster and team.max_players is not None:
        if await _roster_size(session, team.id) >= team.max_players:
            raise PreconditionError("Team is full")

    if not on_roster:
        session.add(TeamPlayer(team_id=team.id, player_id=player.id))

    player.team_id = team.id
    player.team_name = team.name
    player.status = ProfileStatus.ACTIVE.value

    request.status = TeamRequestStatus.APPROVED.value
    request.responded_at = utcnow()

    await session.flush()
    await session.refresh(request)

    logger.info(f"Team request {request_id} approved: player {player.id} joined team {team.id}")
    return request_to_dict(request, team_name=team.name, player_name=player.full_name)


async def reject_request(session: AsyncSession, request_id: int) -> Dict:
    """
    Reject a pending request. No other document is touched.

    Rejecting an already-rejected request is a no-op.

    Raises:
        NotFoundError: If the request does not exist
        PreconditionError: If the request was already approved
    """
    request = await _get_request(session, request_id)
    if request.status == TeamRequestStatus.REJECTED.value:
        return request_to_dict(request)
    if request.status != TeamRequestStatus.PENDING.value:
        raise PreconditionError("Only pending requests can be rejected")

    request.status = TeamRequestStatus.REJECTED.value
    request.responded_at = utcnow()
    await session.flush()
    await session.refresh(request)

    logger.info(f"Team request {request_id} rejected")
    return request_to_dict(request)


async def remove_player(session: AsyncSession, team_id: int, player_id: int) -> Dict:
    """
    Remove a player from a team's roster and detach their profile.

    Safe to repeat after a partial failure: a missing roster entry is skipped
    as long as the profile still points at this team.

    Args:
        session: Database session
        team_id: Team ID
        player_id: Player profile id

    Returns:
        Updated player profile dictionary

    Raises:
        NotFoundError: If the team or player does not exist
        PreconditionError: If the player is not a member of the team
    """
    team = await _get_team(session, team_id)
    player = await _get_player(session, player_id)

    entry = await _get_roster_entry(session, team.id, player.id)
    if entry is None and player.team_id != team.id:
        raise PreconditionError("Player is not a member of this team")

    if entry is not None:
        await session.delete(entry)

    if player.team_id in (None, team.id):
        player.team_id = None
        player.team_name = None
        player.status = ProfileStatus.INACTIVE.value

    await session.flush()
    await session.refresh(player)

    logger.info(f"Player {player_id} removed from team {team_id}")
    return profile_to_dict(player)


async def get_request(session: AsyncSession, request_id: int) -> Optional[Dict]:
    """
    Get a team request with its team and player names.

    Returns:
        Request dictionary or None if not found
    """
    result = await session.execute(
        select(TeamRequest, Team.name, UserProfile)
        .outerjoin(Team, Team.id == TeamRequest.team_id)
        .join(UserProfile, UserProfile.id == TeamRequest.player_id)
        .where(TeamRequest.id == request_id)
    )
    row = result.first()
    if row is None:
        return None
    request, team_name, player = row
    return request_to_dict(request, team_name=team_name, player_name=player.full_name)


async def list_team_requests(
    session: AsyncSession, team_id: int, status: Optional[str] = TeamRequestStatus.PENDING.value
) -> List[Dict]:
    """
    List requests for a team, oldest first (pending only by default).

    Args:
        session: Database session
        team_id: Team ID
        status: Status filter, or None for every status

    Returns:
        List of request dictionaries with player names
    """
    query = (
        select(TeamRequest, Team.name, UserProfile)
        .join(Team, Team.id == TeamRequest.team_id)
        .join(UserProfile, UserProfile.id == TeamRequest.player_id)
        .where(TeamRequest.team_id == team_id)
    )
    if status is not None:
        query = query.where(TeamRequest.status == status)
    result = await session.execute(query.order_by(TeamRequest.id))
    return [
        request_to_dict(request, team_name=team_name, player_name=player.full_name)
        for request, team_name, player in result.all()
    ]


async def list_player_requests(
    session: AsyncSession, player_id: int, status: Optional[str] = None
) -> List[Dict]:
    """
    List a player's requests and invitations, newest first.

    Args:
        session: Database session
        player_id: Player profile id
        status: Optional status filter

    Returns:
        List of request dictionaries with team names
    """
    query = (
        select(TeamRequest, Team.name)
        .outerjoin(Team, Team.id == TeamRequest.team_id)
        .where(TeamRequest.player_id == player_id)
    )
    if status is not None:
        query = query.where(TeamRequest.status == status)
    result = await session.execute(query.order_by(TeamRequest.id.desc()))
    return [request_to_dict(request, team_name=team_name) for request, team_name in result.all()]


async def get_roster(session: AsyncSession, team_id: int) -> List[Dict]:
    """
    Get the profiles of a team's players in the order they joined.

    Raises:
        NotFoundError: If the team does not exist
    """
    await _get_team(session, team_id)
    result = await session.execute(
        select(UserProfile)
        .join(TeamPlayer, TeamPlayer.player_id == UserProfile.id)
        .where(TeamPlayer.team_id == team_id)
        .order_by(TeamPlayer.id)
    )
    return [profile_to_dict(profile) for profile in result.scalars().all()]
