"""Player directory route handlers."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from clubhouse.database.db import get_db_session
from clubhouse.services import directory_service, user_service
from clubhouse.api.auth_dependencies import require_user, require_manager_or_admin
from clubhouse.models.schemas import PlayerListResponse, ProfileResponse
from clubhouse.utils.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/players", response_model=PlayerListResponse)
async def list_players(
    role: Optional[str] = Query(None, pattern="^(admin|manager|player|guest)$"),
    team_id: Optional[int] = None,
    status: Optional[str] = Query(None, pattern="^(active|inactive|pending_team_approval)$"),
    cursor: Optional[str] = None,
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    user: dict = Depends(require_manager_or_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """
    List profiles ordered by first name. Always returns { items, next_cursor }.

    Query params: role, team_id, status, cursor (from the previous page), limit.
    """
    try:
        return await directory_service.list_players(
            session, role=role, team_id=team_id, status=status, cursor=cursor, limit=limit
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error loading players: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error loading players")


@router.get("/api/players/{player_id}", response_model=ProfileResponse)
async def get_player(
    player_id: int,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Get a single profile."""
    try:
        profile = await user_service.get_profile(session, player_id)
        if profile is None:
            raise HTTPException(status_code=404, detail="Player not found")
        return profile
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching player {player_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching player")
