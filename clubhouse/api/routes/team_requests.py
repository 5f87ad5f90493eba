"""Join request and invitation route handlers."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clubhouse.database.db import get_db_session
from clubhouse.database.models import TeamRequestType, UserRole
from clubhouse.services import membership_service, team_service
from clubhouse.services.errors import NotFoundError
from clubhouse.api.auth_dependencies import require_user, require_player
from clubhouse.models.schemas import JoinRequestCreate, TeamRequestResponse

logger = logging.getLogger(__name__)
router = APIRouter()


async def _require_responder(session: AsyncSession, request_id: int, user: dict) -> dict:
    """
    Check that ``user`` may answer the request.

    Join requests are answered by the team's manager (or an admin);
    invitations by the invited player (or an admin).
    """
    request = await membership_service.get_request(session, request_id)
    if request is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team request not found")
    if user.get("role") == UserRole.ADMIN.value:
        return request

    if request["type"] == TeamRequestType.INVITATION.value:
        allowed = request["player_id"] == user["id"]
    elif request["team_id"] is None:
        allowed = False
    else:
        team = await team_service.get_team(session, request["team_id"])
        allowed = team is not None and team["manager_id"] == user["id"]

    if not allowed:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
    return request


@router.post("/api/team-requests", response_model=TeamRequestResponse)
async def create_join_request(
    payload: JoinRequestCreate,
    user: dict = Depends(require_player),
    session: AsyncSession = Depends(get_db_session),
):
    """Ask to join a team as the current player."""
    try:
        return await membership_service.create_join_request(session, user["id"], payload.team_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating join request: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error creating join request")


@router.get("/api/team-requests/mine", response_model=List[TeamRequestResponse])
async def list_my_requests(
    status: Optional[str] = Query(None, pattern="^(pending|approved|rejected)$"),
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """List the current player's join requests and invitations."""
    try:
        return await membership_service.list_player_requests(session, user["id"], status=status)
    except Exception as e:
        logger.error(f"Error fetching requests for user {user['id']}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching team requests")


@router.post("/api/team-requests/{request_id}/approve", response_model=TeamRequestResponse)
async def approve_request(
    request_id: int,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Approve a request; the player joins the team."""
    try:
        await _require_responder(session, request_id, user)
        return await membership_service.approve_request(session, request_id)
    except HTTPException:
        raise
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error approving team request {request_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error approving team request")


@router.post("/api/team-requests/{request_id}/reject", response_model=TeamRequestResponse)
async def reject_request(
    request_id: int,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Reject a request."""
    try:
        await _require_responder(session, request_id, user)
        return await membership_service.reject_request(session, request_id)
    except HTTPException:
        raise
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error rejecting team request {request_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error rejecting team request")
