"""Admin dashboard route handlers."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from clubhouse.database.db import get_db_session
from clubhouse.services import stats_service
from clubhouse.api.auth_dependencies import require_admin
from clubhouse.models.schemas import DashboardStatsResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/admin/stats", response_model=DashboardStatsResponse)
async def get_dashboard_stats(
    user: dict = Depends(require_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Team, player and event counts for the admin dashboard."""
    try:
        return await stats_service.get_dashboard_stats(session)
    except Exception as e:
        logger.error(f"Error fetching dashboard stats: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching dashboard stats")
