"""
Tests for membership_service: join requests, invitations, approval,
rejection and roster removal.
"""
import random
import pytest
import pytest_asyncio
from sqlalchemy import select, func
from clubhouse.database.models import TeamPlayer, TeamRequest, UserProfile
from clubhouse.services import membership_service
from clubhouse.services.errors import NotFoundError, PreconditionError
from clubhouse.tests.factories import make_profile, make_team, add_to_roster


@pytest_asyncio.fixture
async def manager(db_session):
    return await make_profile(db_session, "manager@club.com", "Maria", "Lopez", role="manager")


@pytest_asyncio.fixture
async def player(db_session):
    return await make_profile(db_session, "player@club.com", "Pat", "Jones")


@pytest_asyncio.fixture
async def team(db_session, manager):
    return await make_team(db_session, manager, name="Sharks", max_players=2)


async def _request_count(session):
    result = await session.execute(select(func.count()).select_from(TeamRequest))
    return result.scalar()


async def _roster(session, team_id):
    result = await session.execute(
        select(TeamPlayer.player_id).where(TeamPlayer.team_id == team_id)
    )
    return list(result.scalars().all())


# ============================================================================
# create_join_request / create_invitation
# ============================================================================

@pytest.mark.asyncio
async def test_create_join_request(db_session, team, player, manager):
    request = await membership_service.create_join_request(db_session, player.id, team.id)

    assert request["status"] == "pending"
    assert request["type"] == "join"
    assert request["player_id"] == player.id
    assert request["team_id"] == team.id
    assert request["manager_id"] == manager.id
    assert request["team_name"] == "Sharks"
    assert request["player_name"] == "Pat Jones"
    assert request["responded_at"] is None


@pytest.mark.asyncio
async def test_create_join_request_unknown_team(db_session, player):
    with pytest.raises(NotFoundError):
        await membership_service.create_join_request(db_session, player.id, 9999)


@pytest.mark.asyncio
async def test_create_join_request_rejects_non_player(db_session, team, manager):
    with pytest.raises(PreconditionError, match="Only players"):
        await membership_service.create_join_request(db_session, manager.id, team.id)
    assert await _request_count(db_session) == 0


@pytest.mark.asyncio
async def test_create_join_request_team_not_approved(db_session, manager, player):
    pending_team = await make_team(db_session, manager, name="Pending FC", status="pending")

    with pytest.raises(PreconditionError, match="approved"):
        await membership_service.create_join_request(db_session, player.id, pending_team.id)
    assert await _request_count(db_session) == 0


@pytest.mark.asyncio
async def test_create_join_request_already_member(db_session, team, player):
    await add_to_roster(db_session, team, player)

    with pytest.raises(PreconditionError, match="already a member"):
        await membership_service.create_join_request(db_session, player.id, team.id)


@pytest.mark.asyncio
async def test_create_join_request_team_full(db_session, team, player):
    for i in range(2):
        other = await make_profile(db_session, f"p{i}@club.com", f"Other{i}", "Player")
        await add_to_roster(db_session, team, other)

    with pytest.raises(PreconditionError, match="full"):
        await membership_service.create_join_request(db_session, player.id, team.id)
    assert await _request_count(db_session) == 0


@pytest.mark.asyncio
async def test_create_join_request_duplicate_pending(db_session, team, player):
    await membership_service.create_join_request(db_session, player.id, team.id)

    with pytest.raises(PreconditionError, match="pending"):
        await membership_service.create_join_request(db_session, player.id, team.id)
    assert await _request_count(db_session) == 1


@pytest.mark.asyncio
async def test_pending_invitation_blocks_join_request(db_session, team, player, manager):
    await membership_service.create_invitation(db_session, manager.id, team.id, player.id)

    with pytest.raises(PreconditionError):
        await membership_service.create_join_request(db_session, player.id, team.id)


@pytest.mark.asyncio
async def test_new_request_allowed_after_rejection(db_session, team, player):
    first = await membership_service.create_join_request(db_session, player.id, team.id)
    await membership_service.reject_request(db_session, first["id"])

    second = await membership_service.create_join_request(db_session, player.id, team.id)
    assert second["id"] != first["id"]
    assert second["status"] == "pending"


@pytest.mark.asyncio
async def test_create_invitation(db_session, team, player, manager):
    invitation = await membership_service.create_invitation(
        db_session, manager.id, team.id, player.id
    )

    assert invitation["type"] == "invitation"
    assert invitation["status"] == "pending"
    assert invitation["manager_id"] == manager.id


# ============================================================================
# approve_request
# ============================================================================

@pytest.mark.asyncio
async def test_approve_request_joins_team(db_session, team, player):
    request = await membership_service.create_join_request(db_session, player.id, team.id)

    approved = await membership_service.approve_request(db_session, request["id"])

    assert approved["status"] == "approved"
    assert approved["responded_at"] is not None
    assert await _roster(db_session, team.id) == [player.id]

    profile = await db_session.get(UserProfile, player.id)
    assert profile.team_id == team.id
    assert profile.team_name == "Sharks"
    assert profile.status == "active"


@pytest.mark.asyncio
async def test_approve_request_twice_is_noop(db_session, team, player):
    request = await membership_service.create_join_request(db_session, player.id, team.id)
    first = await membership_service.approve_request(db_session, request["id"])

    second = await membership_service.approve_request(db_session, request["id"])

    assert second["status"] == "approved"
    assert second["responded_at"] == first["responded_at"]
    assert await _roster(db_session, team.id) == [player.id]


@pytest.mark.asyncio
async def test_approve_request_resumes_after_partial_failure(db_session, team, player):
    """A roster row written by an interrupted approval does not block a retry."""
    request = await membership_service.create_join_request(db_session, player.id, team.id)
    db_session.add(TeamPlayer(team_id=team.id, player_id=player.id))
    await db_session.flush()

    approved = await membership_service.approve_request(db_session, request["id"])

    assert approved["status"] == "approved"
    assert await _roster(db_session, team.id) == [player.id]
    profile = await db_session.get(UserProfile, player.id)
    assert profile.team_id == team.id
    assert profile.status == "active"


@pytest.mark.asyncio
async def test_approve_request_team_full_leaves_request_pending(db_session, team, player):
    request = await membership_service.create_join_request(db_session, player.id, team.id)
    for i in range(2):
        other = await make_profile(db_session, f"p{i}@club.com", f"Other{i}", "Player")
        await add_to_roster(db_session, team, other)

    with pytest.raises(PreconditionError, match="full"):
        await membership_service.approve_request(db_session, request["id"])

    stored = await db_session.get(TeamRequest, request["id"])
    assert stored.status == "pending"
    assert player.id not in await _roster(db_session, team.id)


@pytest.mark.asyncio
async def test_approve_request_player_on_another_team(db_session, team, player, manager):
    request = await membership_service.create_join_request(db_session, player.id, team.id)
    other_team = await make_team(db_session, manager, name="Dolphins")
    await add_to_roster(db_session, other_team, player)

    with pytest.raises(PreconditionError, match="Dolphins"):
        await membership_service.approve_request(db_session, request["id"])

    stored = await db_session.get(TeamRequest, request["id"])
    assert stored.status == "pending"


@pytest.mark.asyncio
async def test_approve_rejected_request(db_session, team, player):
    request = await membership_service.create_join_request(db_session, player.id, team.id)
    await membership_service.reject_request(db_session, request["id"])

    with pytest.raises(PreconditionError):
        await membership_service.approve_request(db_session, request["id"])
    assert await _roster(db_session, team.id) == []


@pytest.mark.asyncio
async def test_approve_unknown_request(db_session):
    with pytest.raises(NotFoundError):
        await membership_service.approve_request(db_session, 12345)


@pytest.mark.asyncio
async def test_approve_invitation(db_session, team, player, manager):
    invitation = await membership_service.create_invitation(
        db_session, manager.id, team.id, player.id
    )

    approved = await membership_service.approve_request(db_session, invitation["id"])

    assert approved["type"] == "invitation"
    assert approved["status"] == "approved"
    assert await _roster(db_session, team.id) == [player.id]


# ============================================================================
# reject_request
# ============================================================================

@pytest.mark.asyncio
async def test_reject_request(db_session, team, player):
    request = await membership_service.create_join_request(db_session, player.id, team.id)

    rejected = await membership_service.reject_request(db_session, request["id"])

    assert rejected["status"] == "rejected"
    assert rejected["responded_at"] is not None
    assert await _roster(db_session, team.id) == []
    profile = await db_session.get(UserProfile, player.id)
    assert profile.team_id is None
    assert profile.status == "pending_team_approval"


@pytest.mark.asyncio
async def test_reject_request_twice_is_noop(db_session, team, player):
    request = await membership_service.create_join_request(db_session, player.id, team.id)
    await membership_service.reject_request(db_session, request["id"])

    again = await membership_service.reject_request(db_session, request["id"])
    assert again["status"] == "rejected"


@pytest.mark.asyncio
async def test_reject_approved_request(db_session, team, player):
    request = await membership_service.create_join_request(db_session, player.id, team.id)
    await membership_service.approve_request(db_session, request["id"])

    with pytest.raises(PreconditionError):
        await membership_service.reject_request(db_session, request["id"])


# ============================================================================
# remove_player
# ============================================================================

@pytest.mark.asyncio
async def test_remove_player(db_session, team, player):
    await add_to_roster(db_session, team, player)

    profile = await membership_service.remove_player(db_session, team.id, player.id)

    assert profile["team_id"] is None
    assert profile["team_name"] is None
    assert profile["status"] == "inactive"
    assert await _roster(db_session, team.id) == []


@pytest.mark.asyncio
async def test_remove_player_not_on_team(db_session, team, player):
    with pytest.raises(PreconditionError, match="not a member"):
        await membership_service.remove_player(db_session, team.id, player.id)


@pytest.mark.asyncio
async def test_remove_player_resumes_after_partial_failure(db_session, team, player):
    """Roster row already gone but the profile still points at the team."""
    player.team_id = team.id
    player.team_name = team.name
    player.status = "active"
    await db_session.flush()

    profile = await membership_service.remove_player(db_session, team.id, player.id)

    assert profile["team_id"] is None
    assert profile["status"] == "inactive"


@pytest.mark.asyncio
async def test_removed_player_can_request_again(db_session, team, player):
    request = await membership_service.create_join_request(db_session, player.id, team.id)
    await membership_service.approve_request(db_session, request["id"])
    await membership_service.remove_player(db_session, team.id, player.id)

    again = await membership_service.create_join_request(db_session, player.id, team.id)
    assert again["status"] == "pending"


# ============================================================================
# Listing helpers
# ============================================================================

@pytest.mark.asyncio
async def test_list_team_requests(db_session, team, manager):
    first = await make_profile(db_session, "a@club.com", "Ana", "Silva")
    second = await make_profile(db_session, "b@club.com", "Ben", "Ode")
    r1 = await membership_service.create_join_request(db_session, first.id, team.id)
    r2 = await membership_service.create_join_request(db_session, second.id, team.id)
    await membership_service.reject_request(db_session, r2["id"])

    pending = await membership_service.list_team_requests(db_session, team.id)
    everything = await membership_service.list_team_requests(db_session, team.id, status=None)

    assert [r["id"] for r in pending] == [r1["id"]]
    assert pending[0]["player_name"] == "Ana Silva"
    assert [r["id"] for r in everything] == [r1["id"], r2["id"]]


@pytest.mark.asyncio
async def test_list_player_requests_newest_first(db_session, team, player, manager):
    other_team = await make_team(db_session, manager, name="Dolphins")
    r1 = await membership_service.create_join_request(db_session, player.id, team.id)
    r2 = await membership_service.create_invitation(
        db_session, manager.id, other_team.id, player.id
    )

    requests = await membership_service.list_player_requests(db_session, player.id)

    assert [r["id"] for r in requests] == [r2["id"], r1["id"]]
    assert requests[0]["team_name"] == "Dolphins"


@pytest.mark.asyncio
async def test_get_request(db_session, team, player):
    request = await membership_service.create_join_request(db_session, player.id, team.id)

    fetched = await membership_service.get_request(db_session, request["id"])

    assert fetched["id"] == request["id"]
    assert fetched["team_name"] == "Sharks"
    assert await membership_service.get_request(db_session, 9999) is None


@pytest.mark.asyncio
async def test_get_roster_in_join_order(db_session, team):
    second = await make_profile(db_session, "z@club.com", "Zoe", "Last")
    first = await make_profile(db_session, "a@club.com", "Amy", "First")
    await add_to_roster(db_session, team, second)
    await add_to_roster(db_session, team, first)

    roster = await membership_service.get_roster(db_session, team.id)

    assert [p["id"] for p in roster] == [second.id, first.id]


@pytest.mark.asyncio
async def test_get_roster_unknown_team(db_session):
    with pytest.raises(NotFoundError):
        await membership_service.get_roster(db_session, 4242)


# ============================================================================
# Multi-step workflows
# ============================================================================

@pytest.mark.asyncio
async def test_last_slot_race_between_two_requests(db_session, team):
    """Two players ask for the last slot; the second approval fails and stays pending."""
    p1 = await make_profile(db_session, "p1@club.com", "Ann", "One")
    p2 = await make_profile(db_session, "p2@club.com", "Ben", "Two")
    p3 = await make_profile(db_session, "p3@club.com", "Cat", "Three")

    r1 = await membership_service.create_join_request(db_session, p1.id, team.id)
    approved = await membership_service.approve_request(db_session, r1["id"])
    assert approved["status"] == "approved"
    assert await _roster(db_session, team.id) == [p1.id]
    assert (await db_session.get(UserProfile, p1.id)).team_id == team.id

    r2 = await membership_service.create_join_request(db_session, p2.id, team.id)
    r3 = await membership_service.create_join_request(db_session, p3.id, team.id)
    assert r2["status"] == "pending"
    assert r3["status"] == "pending"

    await membership_service.approve_request(db_session, r2["id"])
    assert await _roster(db_session, team.id) == [p1.id, p2.id]

    with pytest.raises(PreconditionError, match="full"):
        await membership_service.approve_request(db_session, r3["id"])

    assert (await db_session.get(TeamRequest, r3["id"])).status == "pending"
    assert sorted(await _roster(db_session, team.id)) == sorted([p1.id, p2.id])
    assert (await db_session.get(UserProfile, p3.id)).team_id is None


async def _assert_roster_invariant(session, teams):
    rows = await session.execute(select(TeamPlayer.team_id, TeamPlayer.player_id))
    memberships = {}
    sizes = {t.id: 0 for t in teams}
    for team_id, player_id in rows.all():
        memberships.setdefault(player_id, []).append(team_id)
        sizes[team_id] += 1

    for t in teams:
        if t.max_players is not None:
            assert sizes[t.id] <= t.max_players

    profiles = await session.execute(
        select(UserProfile.id, UserProfile.team_id).where(UserProfile.role == "player")
    )
    for player_id, team_id in profiles.all():
        on = memberships.get(player_id, [])
        if team_id is None:
            assert on == []
        else:
            assert on == [team_id]


@pytest.mark.asyncio
@pytest.mark.parametrize("seed", [1, 7, 42])
async def test_random_workflow_keeps_roster_and_profiles_in_sync(db_session, manager, seed):
    rng = random.Random(seed)
    teams = [
        await make_team(db_session, manager, name="Sharks", max_players=2),
        await make_team(db_session, manager, name="Dolphins", max_players=1),
        await make_team(db_session, manager, name="Orcas"),
    ]
    players = [
        await make_profile(db_session, f"p{i}@club.com", f"Player{i}", "Test") for i in range(6)
    ]

    for _ in range(120):
        action = rng.choice(["join", "invite", "approve", "reject", "remove"])
        team = rng.choice(teams)
        player = rng.choice(players)
        try:
            if action == "join":
                await membership_service.create_join_request(db_session, player.id, team.id)
            elif action == "invite":
                await membership_service.create_invitation(
                    db_session, manager.id, team.id, player.id
                )
            elif action in ("approve", "reject"):
                result = await db_session.execute(
                    select(TeamRequest.id).where(TeamRequest.status == "pending")
                )
                pending = list(result.scalars().all())
                if not pending:
                    continue
                request_id = rng.choice(pending)
                if action == "approve":
                    await membership_service.approve_request(db_session, request_id)
                else:
                    await membership_service.reject_request(db_session, request_id)
            else:
                await membership_service.remove_player(db_session, team.id, player.id)
        except PreconditionError:
            pass

        await _assert_roster_invariant(db_session, teams)
