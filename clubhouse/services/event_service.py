"""
Event service for club events.
"""

from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from clubhouse.database.models import Event
from clubhouse.utils.datetime_utils import utcnow, ensure_utc, isoformat_or_none
import logging

logger = logging.getLogger(__name__)


def event_to_dict(event: Event) -> Dict:
    return {
        "id": event.id,
        "title": event.title,
        "description": event.description,
        "location": event.location,
        "date": isoformat_or_none(event.date),
        "registration_deadline": isoformat_or_none(event.registration_deadline),
        "created_by": event.created_by,
        "created_at": isoformat_or_none(event.created_at),
    }


async def create_event(
    session: AsyncSession,
    created_by: int,
    title: str,
    description: str,
    date: datetime,
    location: Optional[str] = None,
    registration_deadline: Optional[datetime] = None,
) -> Dict:
    """
    Create a club event.

    Args:
        session: Database session
        created_by: Profile id of the admin/manager creating the event
        title: Event title
        description: Event description
        date: When the event takes place
        location: Optional location
        registration_deadline: Optional deadline, must not be after the event

    Returns:
        Event dictionary

    Raises:
        ValueError: If required fields are missing or the deadline is after the event
    """
    if not title or not title.strip() or not description or not description.strip():
        raise ValueError("Title and description are required")

    date = ensure_utc(date)
    if registration_deadline is not None:
        registration_deadline = ensure_utc(registration_deadline)
        if registration_deadline > date:
            raise ValueError("Registration deadline must be before the event date")

    event = Event(
        title=title.strip(),
        description=description.strip(),
        location=location.strip() if location else None,
        date=date,
        registration_deadline=registration_deadline,
        created_by=created_by,
    )
    session.add(event)
    await session.flush()
    await session.refresh(event)

    logger.info(f"Event {event.id} created by {created_by}")
    return event_to_dict(event)


async def list_events(session: AsyncSession, upcoming: bool = True) -> List[Dict]:
    """
    List events.

    Args:
        session: Database session
        upcoming: True for events from now on (soonest first), False for all
            events (latest first)

    Returns:
        List of event dictionaries
    """
    query = select(Event)
    if upcoming:
        query = query.where(Event.date >= utcnow()).order_by(Event.date.asc(), Event.id)
    else:
        query = query.order_by(Event.date.desc(), Event.id.desc())
    result = await session.execute(query)
    return [event_to_dict(event) for event in result.scalars().all()]


async def get_event(session: AsyncSession, event_id: int) -> Optional[Dict]:
    event = await session.get(Event, event_id)
    return event_to_dict(event) if event else None
