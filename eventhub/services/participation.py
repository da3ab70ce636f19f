"""Participation state machine.

Each (event, user) pair is in one of three states::

    NONE --postulate--> WAITING --validate--> APPROVED
    NONE <-unpostulate- WAITING <-unvalidate- APPROVED

WAITING and APPROVED are stored as a single ``Participation`` row, so a user
can never sit in both lists. Capacity (``participants_number``) limits the
APPROVED list only; the waiting list is unbounded. Only the event owner may
validate or unvalidate, and the target user is always passed explicitly.

Every transition runs under the event's lock from the first read to the
commit, so two requests cannot both claim the last free seat.
"""
import enum
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eventhub.exceptions import (
    AlreadyApproved,
    AlreadyWaiting,
    CapacityExceeded,
    DuplicateResource,
    EventHubError,
    NotFound,
)
from eventhub.models.event import Event
from eventhub.models.participation import Participation, ParticipationStatus
from eventhub.models.user import User
from eventhub.services.events import ensure_owner, get_event
from eventhub.services.locks import EventLockRegistry

logger = logging.getLogger(__name__)


class ParticipationState(str, enum.Enum):
    NONE = "none"
    WAITING = "waiting"
    APPROVED = "approved"


def _find(event: Event, user_id: int) -> Participation | None:
    for participation in event.participations:
        if participation.user_id == user_id:
            return participation
    return None


def state_of(event: Event, user_id: int) -> ParticipationState:
    participation = _find(event, user_id)
    if participation is None:
        return ParticipationState.NONE
    return ParticipationState(participation.status.value)


async def _commit(
    db: AsyncSession, event: Event, action: str, user_id: int, conflict: EventHubError | None = None
) -> Event:
    event_id = event.id
    try:
        await db.commit()
    except IntegrityError as e_integrity:
        await db.rollback()
        logger.warning(f"IntegrityError on {action} for user ID {user_id}, event ID {event_id}: {str(e_integrity)}")
        raise conflict or DuplicateResource(f"Conflicting membership change on event {event_id}.")
    logger.info(f"{action} succeeded for user ID {user_id} on event ID {event_id}.")
    return event


async def postulate(db: AsyncSession, locks: EventLockRegistry, event_id: int, user: User) -> Event:
    async with locks.hold(event_id):
        event = await get_event(db, event_id)
        state = state_of(event, user.id)
        if state is ParticipationState.WAITING:
            raise AlreadyWaiting()
        if state is ParticipationState.APPROVED:
            raise AlreadyApproved()

        event.participations.append(
            Participation(user_id=user.id, status=ParticipationStatus.waiting)
        )
        return await _commit(db, event, "postulate", user.id, conflict=AlreadyWaiting())


async def unpostulate(db: AsyncSession, locks: EventLockRegistry, event_id: int, user: User) -> Event:
    async with locks.hold(event_id):
        event = await get_event(db, event_id)
        participation = _find(event, user.id)
        if participation is None or participation.status != ParticipationStatus.waiting:
            return event

        event.participations.remove(participation)
        return await _commit(db, event, "unpostulate", user.id)


async def validate(
    db: AsyncSession, locks: EventLockRegistry, event_id: int, owner: User, target_user_id: int
) -> Event:
    async with locks.hold(event_id):
        event = await get_event(db, event_id)
        ensure_owner(event, owner, "validate participants of")

        participation = _find(event, target_user_id)
        if participation is not None and participation.status == ParticipationStatus.approved:
            raise AlreadyApproved(f"User {target_user_id} already participates in this event.")
        if participation is None:
            raise NotFound(f"User {target_user_id} is not on the waiting list of event {event_id}.")
        if event.is_full():
            logger.warning(f"Validation of user ID {target_user_id} refused: event ID {event_id} is full.")
            raise CapacityExceeded()

        participation.status = ParticipationStatus.approved
        return await _commit(db, event, "validate", target_user_id)


async def unvalidate(
    db: AsyncSession, locks: EventLockRegistry, event_id: int, owner: User, target_user_id: int
) -> Event:
    async with locks.hold(event_id):
        event = await get_event(db, event_id)
        ensure_owner(event, owner, "unvalidate participants of")

        participation = _find(event, target_user_id)
        if participation is None or participation.status != ParticipationStatus.approved:
            raise NotFound(f"User {target_user_id} is not a participant of event {event_id}.")

        participation.status = ParticipationStatus.waiting
        return await _commit(db, event, "unvalidate", target_user_id)
