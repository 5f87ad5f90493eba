"""
Aggregate counts for the admin dashboard.
"""

from typing import Dict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from clubhouse.database.models import Event, Team, TeamStatus, UserProfile, UserRole


async def _count_by(session: AsyncSession, column, keys) -> Dict[str, int]:
    result = await session.execute(select(column, func.count()).group_by(column))
    counts = {key: 0 for key in keys}
    for key, count in result.all():
        counts[key] = count
    return counts


async def get_dashboard_stats(session: AsyncSession) -> Dict:
    """
    Count teams by review status, profiles by role, and events.

    Every known status and role is present in the result, with 0 when
    nothing matches.
    """
    teams_by_status = await _count_by(
        session, Team.status, [status.value for status in TeamStatus]
    )
    profiles_by_role = await _count_by(
        session, UserProfile.role, [role.value for role in UserRole]
    )
    result = await session.execute(select(func.count()).select_from(Event))
    total_events = result.scalar() or 0

    return {
        "total_teams": sum(teams_by_status.values()),
        "pending_teams": teams_by_status[TeamStatus.PENDING.value],
        "total_players": profiles_by_role[UserRole.PLAYER.value],
        "total_events": total_events,
        "teams_by_status": teams_by_status,
        "profiles_by_role": profiles_by_role,
    }
