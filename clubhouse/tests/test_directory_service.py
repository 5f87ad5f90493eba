"""
Tests for directory_service: ordered team/player listings, prefix search
and cursor pagination.
"""
import pytest
import pytest_asyncio
from clubhouse.services import directory_service
from clubhouse.tests.factories import make_profile, make_team, add_to_roster


@pytest_asyncio.fixture
async def manager(db_session):
    return await make_profile(db_session, "m@club.com", "Maria", "Lopez", role="manager")


@pytest.mark.asyncio
async def test_list_teams_ordered_by_name(db_session, manager):
    for name in ["Sharks", "Barracudas", "Orcas"]:
        await make_team(db_session, manager, name=name)

    page = await directory_service.list_teams(db_session)

    assert [t["name"] for t in page["items"]] == ["Barracudas", "Orcas", "Sharks"]
    assert page["next_cursor"] is None


@pytest.mark.asyncio
async def test_list_teams_status_filter(db_session, manager):
    await make_team(db_session, manager, name="Approved One")
    await make_team(db_session, manager, name="Pending One", status="pending")

    page = await directory_service.list_teams(db_session, status="pending")

    assert [t["name"] for t in page["items"]] == ["Pending One"]


@pytest.mark.asyncio
async def test_list_teams_manager_filter(db_session, manager):
    other = await make_profile(db_session, "o@club.com", "Omar", "Diaz", role="manager")
    await make_team(db_session, manager, name="Mine")
    await make_team(db_session, other, name="Theirs")

    page = await directory_service.list_teams(db_session, manager_id=other.id)

    assert [t["name"] for t in page["items"]] == ["Theirs"]


@pytest.mark.asyncio
async def test_list_teams_name_prefix(db_session, manager):
    for name in ["Sharks", "Shrimps", "Sea Lions", "sharpshooters", "Orcas"]:
        await make_team(db_session, manager, name=name)

    page = await directory_service.list_teams(db_session, name_prefix="Sh")

    # Case-sensitive: "sharpshooters" does not match
    assert [t["name"] for t in page["items"]] == ["Sharks", "Shrimps"]


@pytest.mark.asyncio
async def test_list_teams_includes_rosters(db_session, manager):
    team = await make_team(db_session, manager, name="Sharks")
    player = await make_profile(db_session, "p@club.com", "Pat", "Jones")
    await add_to_roster(db_session, team, player)

    page = await directory_service.list_teams(db_session)

    assert page["items"][0]["players"] == [player.id]
    assert page["items"][0]["player_count"] == 1


@pytest.mark.asyncio
async def test_list_teams_cursor_pagination(db_session, manager):
    names = ["Alpha", "Bravo", "Charlie", "Delta", "Echo"]
    for name in names:
        await make_team(db_session, manager, name=name)

    seen = []
    cursor = None
    pages = 0
    while True:
        page = await directory_service.list_teams(db_session, cursor=cursor, limit=2)
        seen.extend(t["name"] for t in page["items"])
        pages += 1
        cursor = page["next_cursor"]
        if cursor is None:
            break

    assert seen == names
    assert pages == 3


@pytest.mark.asyncio
async def test_list_teams_cursor_breaks_name_ties_by_id(db_session, manager):
    first = await make_team(db_session, manager, name="Twins")
    second = await make_team(db_session, manager, name="Twins")

    page1 = await directory_service.list_teams(db_session, limit=1)
    page2 = await directory_service.list_teams(db_session, cursor=page1["next_cursor"], limit=1)

    assert page1["items"][0]["id"] == first.id
    assert page2["items"][0]["id"] == second.id
    assert page2["next_cursor"] is None


@pytest.mark.asyncio
async def test_cursor_is_stable_under_inserts_before_it(db_session, manager):
    for name in ["Bravo", "Charlie", "Delta"]:
        await make_team(db_session, manager, name=name)
    page1 = await directory_service.list_teams(db_session, limit=2)

    await make_team(db_session, manager, name="Alpha")
    page2 = await directory_service.list_teams(db_session, cursor=page1["next_cursor"], limit=2)

    assert [t["name"] for t in page2["items"]] == ["Delta"]


@pytest.mark.asyncio
async def test_invalid_cursor(db_session):
    with pytest.raises(ValueError, match="Invalid cursor"):
        await directory_service.list_teams(db_session, cursor="not-a-cursor")


@pytest.mark.asyncio
async def test_invalid_limit(db_session):
    with pytest.raises(ValueError):
        await directory_service.list_teams(db_session, limit=0)


def test_cursor_round_trip():
    cursor = directory_service.encode_cursor("Sharks", 7)
    assert directory_service.decode_cursor(cursor) == ("Sharks", 7)


@pytest.mark.asyncio
async def test_list_players_ordered_by_first_name(db_session, manager):
    await make_profile(db_session, "z@club.com", "Zoe", "Adams")
    await make_profile(db_session, "b@club.com", "Ben", "Young")

    page = await directory_service.list_players(db_session, role="player")

    assert [p["first_name"] for p in page["items"]] == ["Ben", "Zoe"]


@pytest.mark.asyncio
async def test_list_players_filters(db_session, manager):
    team = await make_team(db_session, manager, name="Sharks")
    member = await make_profile(db_session, "a@club.com", "Ana", "Silva")
    await make_profile(db_session, "b@club.com", "Ben", "Young")
    await add_to_roster(db_session, team, member)

    on_team = await directory_service.list_players(db_session, team_id=team.id)
    waiting = await directory_service.list_players(db_session, status="pending_team_approval")

    assert [p["first_name"] for p in on_team["items"]] == ["Ana"]
    assert [p["first_name"] for p in waiting["items"]] == ["Ben"]


@pytest.mark.asyncio
async def test_list_players_pagination(db_session):
    for i, name in enumerate(["Cat", "Abe", "Bea"]):
        await make_profile(db_session, f"{i}@club.com", name, "Player")

    page1 = await directory_service.list_players(db_session, limit=2)
    page2 = await directory_service.list_players(db_session, cursor=page1["next_cursor"], limit=2)

    assert [p["first_name"] for p in page1["items"]] == ["Abe", "Bea"]
    assert [p["first_name"] for p in page2["items"]] == ["Cat"]
    assert page2["next_cursor"] is None
