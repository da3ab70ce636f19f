import asyncio
from datetime import datetime

import pytest

from sqlalchemy.exc import IntegrityError

from eventhub.exceptions import (
    AlreadyApproved,
    AlreadyWaiting,
    CapacityExceeded,
    DuplicateResource,
    Forbidden,
    NotFound,
)
from eventhub.services import events as event_store
from eventhub.services import participation
from eventhub.services.locks import EventLockRegistry
from eventhub.services.participation import ParticipationState, state_of


@pytest.fixture
def locks():
    return EventLockRegistry(timeout=5)


@pytest.fixture
def new_event(session):
    async def _new_event(owner, capacity=None):
        return await event_store.create_event(session, owner, {
            "title": "Match de foot",
            "description": "Five a side",
            "category": "sport",
            "date": datetime(2026, 6, 1, 18, 0),
            "participants_number": capacity,
        })

    return _new_event


@pytest.mark.asyncio
async def test_postulate_puts_user_on_waiting_list(session, locks, make_user, new_event):
    owner = await make_user("owner")
    alice = await make_user("alice")
    event = await new_event(owner)

    event = await participation.postulate(session, locks, event.id, alice)

    assert event.waiting_list == [alice.id]
    assert event.participants == []
    assert state_of(event, alice.id) is ParticipationState.WAITING


@pytest.mark.asyncio
async def test_postulate_twice_raises(session, locks, make_user, new_event):
    owner = await make_user("owner")
    alice = await make_user("alice")
    event = await new_event(owner)
    await participation.postulate(session, locks, event.id, alice)

    with pytest.raises(AlreadyWaiting):
        await participation.postulate(session, locks, event.id, alice)


@pytest.mark.asyncio
async def test_postulate_when_approved_raises(session, locks, make_user, new_event):
    owner = await make_user("owner")
    alice = await make_user("alice")
    event = await new_event(owner)
    await participation.postulate(session, locks, event.id, alice)
    await participation.validate(session, locks, event.id, owner, alice.id)

    with pytest.raises(AlreadyApproved):
        await participation.postulate(session, locks, event.id, alice)


@pytest.mark.asyncio
async def test_waiting_list_is_not_capped(session, locks, make_user, new_event):
    owner = await make_user("owner")
    event = await new_event(owner, capacity=1)

    for name in ("alice", "bob", "carol"):
        user = await make_user(name)
        event = await participation.postulate(session, locks, event.id, user)

    assert len(event.waiting_list) == 3


@pytest.mark.asyncio
async def test_postulate_unknown_event(session, locks, make_user):
    alice = await make_user("alice")

    with pytest.raises(NotFound):
        await participation.postulate(session, locks, 404, alice)


@pytest.mark.asyncio
async def test_unpostulate_twice_is_a_no_op(session, locks, make_user, new_event):
    owner = await make_user("owner")
    alice = await make_user("alice")
    event = await new_event(owner)
    await participation.postulate(session, locks, event.id, alice)

    first = await participation.unpostulate(session, locks, event.id, alice)
    second = await participation.unpostulate(session, locks, event.id, alice)

    assert first.waiting_list == []
    assert second.waiting_list == []
    assert state_of(second, alice.id) is ParticipationState.NONE


@pytest.mark.asyncio
async def test_unpostulate_leaves_approved_user_in_place(session, locks, make_user, new_event):
    owner = await make_user("owner")
    alice = await make_user("alice")
    event = await new_event(owner)
    await participation.postulate(session, locks, event.id, alice)
    await participation.validate(session, locks, event.id, owner, alice.id)

    event = await participation.unpostulate(session, locks, event.id, alice)

    assert event.participants == [alice.id]


@pytest.mark.asyncio
async def test_validate_moves_user_from_waiting_to_participants(session, locks, make_user, new_event):
    owner = await make_user("owner")
    alice = await make_user("alice")
    event = await new_event(owner, capacity=2)
    await participation.postulate(session, locks, event.id, alice)

    event = await participation.validate(session, locks, event.id, owner, alice.id)

    assert event.participants == [alice.id]
    assert event.waiting_list == []


@pytest.mark.asyncio
async def test_validate_errors(session, locks, make_user, new_event):
    owner = await make_user("owner")
    alice = await make_user("alice")
    bob = await make_user("bob")
    event = await new_event(owner)
    await participation.postulate(session, locks, event.id, alice)

    with pytest.raises(Forbidden):
        await participation.validate(session, locks, event.id, alice, alice.id)
    with pytest.raises(NotFound):
        await participation.validate(session, locks, event.id, owner, bob.id)

    await participation.validate(session, locks, event.id, owner, alice.id)
    with pytest.raises(AlreadyApproved):
        await participation.validate(session, locks, event.id, owner, alice.id)


@pytest.mark.asyncio
async def test_validate_never_exceeds_capacity(session, locks, make_user, new_event):
    owner = await make_user("owner")
    event = await new_event(owner, capacity=2)
    users = [await make_user(name) for name in ("alice", "bob", "carol", "dave")]
    for user in users:
        await participation.postulate(session, locks, event.id, user)

    outcomes = []
    for user in users:
        try:
            event = await participation.validate(session, locks, event.id, owner, user.id)
            outcomes.append("approved")
        except CapacityExceeded:
            outcomes.append("full")
        assert len(event.participants) <= 2

    assert outcomes == ["approved", "approved", "full", "full"]
    assert event.waiting_list == [users[2].id, users[3].id]


@pytest.mark.asyncio
async def test_unvalidate_frees_a_seat(session, locks, make_user, new_event):
    owner = await make_user("owner")
    alice = await make_user("alice")
    bob = await make_user("bob")
    event = await new_event(owner, capacity=1)
    for user in (alice, bob):
        await participation.postulate(session, locks, event.id, user)
    await participation.validate(session, locks, event.id, owner, alice.id)

    with pytest.raises(Forbidden):
        await participation.unvalidate(session, locks, event.id, bob, alice.id)
    with pytest.raises(NotFound):
        await participation.unvalidate(session, locks, event.id, owner, bob.id)

    event = await participation.unvalidate(session, locks, event.id, owner, alice.id)
    assert state_of(event, alice.id) is ParticipationState.WAITING

    event = await participation.validate(session, locks, event.id, owner, bob.id)
    assert event.participants == [bob.id]


@pytest.mark.asyncio
async def test_concurrent_validations_share_the_last_seat(session_factory, session, locks, make_user, new_event):
    owner = await make_user("owner")
    alice = await make_user("alice")
    bob = await make_user("bob")
    event = await new_event(owner, capacity=1)
    for user in (alice, bob):
        await participation.postulate(session, locks, event.id, user)

    async def _validate(target):
        async with session_factory() as db:
            return await participation.validate(db, locks, event.id, owner, target.id)

    results = await asyncio.gather(_validate(alice), _validate(bob), return_exceptions=True)

    approved = [r for r in results if not isinstance(r, Exception)]
    refused = [r for r in results if isinstance(r, Exception)]
    assert len(approved) == 1
    assert len(refused) == 1
    assert isinstance(refused[0], CapacityExceeded)

    async with session_factory() as db:
        final = await event_store.get_event(db, event.id)
    assert len(final.participants) == 1


@pytest.mark.asyncio
async def test_concurrent_postulations_by_same_user(session_factory, session, locks, make_user, new_event):
    owner = await make_user("owner")
    alice = await make_user("alice")
    event = await new_event(owner)

    async def _postulate():
        async with session_factory() as db:
            return await participation.postulate(db, locks, event.id, alice)

    results = await asyncio.gather(_postulate(), _postulate(), return_exceptions=True)

    assert sum(isinstance(r, AlreadyWaiting) for r in results) == 1
    async with session_factory() as db:
        final = await event_store.get_event(db, event.id)
    assert final.waiting_list == [alice.id]


@pytest.mark.asyncio
async def test_delete_event_removes_memberships(session, locks, make_user, new_event):
    owner = await make_user("owner")
    alice = await make_user("alice")
    event = await new_event(owner)
    await participation.postulate(session, locks, event.id, alice)

    await event_store.delete_event(session, locks, event.id, owner)

    assert await event_store.list_events_by_membership(
        session, alice.id, participation.ParticipationStatus.waiting
    ) == []


async def _conflicting_commit():
    raise IntegrityError("INSERT INTO participations", {}, Exception("UNIQUE constraint failed"))


@pytest.mark.asyncio
async def test_postulate_commit_conflict_reports_already_waiting(session, locks, make_user, new_event, monkeypatch):
    owner = await make_user("owner")
    alice = await make_user("alice")
    event = await new_event(owner)
    event_id = event.id

    monkeypatch.setattr(session, "commit", _conflicting_commit)

    with pytest.raises(AlreadyWaiting):
        await participation.postulate(session, locks, event_id, alice)


@pytest.mark.asyncio
async def test_validate_commit_conflict_is_not_reported_as_waiting(session, locks, make_user, new_event, monkeypatch):
    owner = await make_user("owner")
    alice = await make_user("alice")
    event = await new_event(owner)
    event_id, alice_id = event.id, alice.id
    await participation.postulate(session, locks, event_id, alice)

    monkeypatch.setattr(session, "commit", _conflicting_commit)

    with pytest.raises(DuplicateResource):
        await participation.validate(session, locks, event_id, owner, alice_id)
