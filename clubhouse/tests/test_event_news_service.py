"""
Tests for event_service and news_service.
"""
import pytest
from datetime import timedelta
from clubhouse.services import event_service, news_service
from clubhouse.utils.datetime_utils import utcnow
from clubhouse.tests.factories import make_profile


@pytest.mark.asyncio
async def test_create_event(db_session):
    admin = await make_profile(db_session, "a@club.com", "Ada", "Admin", role="admin")
    when = utcnow() + timedelta(days=7)

    event = await event_service.create_event(
        db_session,
        created_by=admin.id,
        title=" Summer Cup ",
        description="Round robin",
        date=when,
        location="Main beach",
        registration_deadline=when - timedelta(days=2),
    )

    assert event["title"] == "Summer Cup"
    assert event["location"] == "Main beach"
    assert event["created_by"] == admin.id
    assert event["date"] is not None


@pytest.mark.asyncio
async def test_create_event_deadline_after_date(db_session):
    when = utcnow() + timedelta(days=7)
    with pytest.raises(ValueError, match="deadline"):
        await event_service.create_event(
            db_session, None, "Cup", "Desc", when, registration_deadline=when + timedelta(hours=1)
        )


@pytest.mark.asyncio
async def test_create_event_requires_title(db_session):
    with pytest.raises(ValueError):
        await event_service.create_event(db_session, None, "  ", "Desc", utcnow())


@pytest.mark.asyncio
async def test_list_events_upcoming_and_all(db_session):
    now = utcnow()
    await event_service.create_event(db_session, None, "Past", "d", now - timedelta(days=3))
    await event_service.create_event(db_session, None, "Later", "d", now + timedelta(days=10))
    await event_service.create_event(db_session, None, "Soon", "d", now + timedelta(days=1))

    upcoming = await event_service.list_events(db_session)
    everything = await event_service.list_events(db_session, upcoming=False)

    assert [e["title"] for e in upcoming] == ["Soon", "Later"]
    assert [e["title"] for e in everything] == ["Later", "Soon", "Past"]


@pytest.mark.asyncio
async def test_get_event(db_session):
    event = await event_service.create_event(db_session, None, "Cup", "d", utcnow())
    assert (await event_service.get_event(db_session, event["id"]))["title"] == "Cup"
    assert await event_service.get_event(db_session, 999) is None


@pytest.mark.asyncio
async def test_news_newest_first(db_session):
    manager = await make_profile(db_session, "m@club.com", "Maria", "Lopez", role="manager")
    first = await news_service.create_news(db_session, manager.id, "m@club.com", "First", "Body")
    second = await news_service.create_news(db_session, manager.id, "m@club.com", "Second", "Body")

    articles = await news_service.list_news(db_session)

    # Same-second timestamps fall back to id order
    assert [a["id"] for a in articles] == [second["id"], first["id"]]
    assert articles[0]["author"] == "m@club.com"


@pytest.mark.asyncio
async def test_news_requires_content(db_session):
    with pytest.raises(ValueError):
        await news_service.create_news(db_session, None, "x", "Title", " ")


@pytest.mark.asyncio
async def test_get_news(db_session):
    article = await news_service.create_news(db_session, None, "x", "Title", "Body")
    assert (await news_service.get_news(db_session, article["id"]))["title"] == "Title"
    assert await news_service.get_news(db_session, 999) is None
