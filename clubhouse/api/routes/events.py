"""Club event route handlers."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from clubhouse.database.db import get_db_session
from clubhouse.services import event_service
from clubhouse.api.auth_dependencies import require_user, require_manager_or_admin
from clubhouse.models.schemas import EventCreate, EventResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/api/events", response_model=List[EventResponse])
async def list_events(
    upcoming: bool = True,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """List upcoming events (soonest first), or every event with upcoming=false."""
    try:
        return await event_service.list_events(session, upcoming=upcoming)
    except Exception as e:
        logger.error(f"Error fetching events: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching events")


@router.post("/api/events", response_model=EventResponse)
async def create_event(
    payload: EventCreate,
    user: dict = Depends(require_manager_or_admin),
    session: AsyncSession = Depends(get_db_session),
):
    """Create an event (managers and admins)."""
    try:
        return await event_service.create_event(
            session,
            created_by=user["id"],
            title=payload.title,
            description=payload.description,
            date=payload.date,
            location=payload.location,
            registration_deadline=payload.registration_deadline,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error creating event: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error creating event")


@router.get("/api/events/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: int,
    user: dict = Depends(require_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Get an event."""
    try:
        event = await event_service.get_event(session, event_id)
        if event is None:
            raise HTTPException(status_code=404, detail="Event not found")
        return event
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching event {event_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error fetching event")
