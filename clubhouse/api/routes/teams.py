"""Team registration, review and roster route handlers."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from clubhouse.database.db import get_db_session
from clubhouse.services import team_service, membership_service, directory_service
from clubhouse.database.models import TeamStatus, UserRole
from clubhouse.services.errors import NotFoundError
from clubhouse.api.auth_dependencies import (
    get_current_user_optional,
    require_user,
    require_admin,
    require_manager_or_admin,
    require_team_manager_or_admin,
)
from clubhouse.models.schemas import (
    TeamCreate,
    TeamStatusUpdate,
    TeamResponse,
    TeamListResponse,
    ProfileResponse,
    InvitationCreate,
    TeamRequestResponse,
)
from clubhouse.utils.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/teams", response_model=TeamListResponse)
async def list_teams(
    status: Optional[str] = Query(None, pattern="^(pending|approved|rejected)$"),
    name_prefix: Optional[str] = None,
    manager_id: Optional[int] = None,
    cursor: Optional[str] = None,
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    user: Optional[dict] = Depends(get_current_user_optional),
    session: AsyncSession = Depends(get_db_session),
):
    """
    List teams ordered by name.

    Public: the sign-up team picker calls it signed out. Guests and players
    only see approved teams; managers and admins may filter by any status.
    """
    if user is None or user.get("role") not in (UserRole.MANAGER.value, UserRole.ADMIN.value):
        status = TeamStatus.APPROVED.value
    try:
        return await directory_service.list_teams(
            session,
            status=status,
            name_prefix=name_prefix,
            manager_id=manager_id,
            cursor=cursor,
            limit=limit,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error listing teams: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error listing teams")


@router.post("/api/teams", response_model=TeamResponse)
async def register_team(
    payload: TeamCreate,
    user: dict = Depends(require_manager_or_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Register a team owned by the current manager; it starts pending review."""
    try:
        return await team_service.register_team(
            session,
            manager_id=user["id"],
            name=payload.name,
            club=payload.club,
            description=payload.description,
            max_players=payload.max_players,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error registering team: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error registering team")


@router.get("/api/teams/{team_id}", response_model=TeamResponse)
async def get_team(team_id: int, session: AsyncSession = Depends(get_db_session)):
    """Get a team with its roster ids."""
    try:
        team = await team_service.get_team(session, team_id)
        if team is None:
            raise HTTPException(status_code=404, detail="Team not found")
        return team
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching team {team_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching team")


@router.put("/api/teams/{team_id}/status", response_model=TeamResponse)
async def set_team_status(
    team_id: int,
    payload: TeamStatusUpdate,
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Approve, reject or reset a team registration (admin only)."""
    try:
        return await team_service.set_team_status(session, team_id, payload.status)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating team {team_id} status: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error updating team status")


@router.delete("/api/teams/{team_id}")
async def delete_team(
    team_id: int,
    user: dict = Depends(require_team_manager_or_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Delete a team and release its players (team manager or admin)."""
    try:
        result = await team_service.delete_team(session, team_id)
        return {"success": True, "message": "Team deleted", **result}
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error deleting team {team_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error deleting team")


@router.get("/api/teams/{team_id}/players", response_model=List[ProfileResponse])
async def get_roster(
    team_id: int,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Get the profiles on a team's roster in join order."""
    try:
        return await membership_service.get_roster(session, team_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error fetching roster for team {team_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching roster")


@router.delete("/api/teams/{team_id}/players/{player_id}", response_model=ProfileResponse)
async def remove_player(
    team_id: int,
    player_id: int,
    user: dict = Depends(require_team_manager_or_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Remove a player from the team (team manager or admin)."""
    try:
        return await membership_service.remove_player(session, team_id, player_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error removing player {player_id} from team {team_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error removing player")


@router.get("/api/teams/{team_id}/requests", response_model=List[TeamRequestResponse])
async def list_team_requests(
    team_id: int,
    status: Optional[str] = Query("pending", pattern="^(pending|approved|rejected|all)$"),
    user: dict = Depends(require_team_manager_or_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """List a team's requests and invitations (pending by default)."""
    try:
        return await membership_service.list_team_requests(
            session, team_id, status=None if status == "all" else status
        )
    except Exception as e:
        logger.error(f"Error fetching requests for team {team_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching team requests")


@router.post("/api/teams/{team_id}/invitations", response_model=TeamRequestResponse)
async def invite_player(
    team_id: int,
    payload: InvitationCreate,
    user: dict = Depends(require_team_manager_or_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Invite a player to the team (team manager or admin)."""
    try:
        return await membership_service.create_invitation(
            session, manager_id=user["id"], team_id=team_id, player_id=payload.player_id
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error inviting player to team {team_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error creating invitation")
