"""Event store: CRUD plus the membership-based listings."""
from typing import Any, List, Mapping
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from eventhub.auth.validators import validate_event
from eventhub.exceptions import CapacityExceeded, Forbidden, NotFound, ValidationError
from eventhub.models.event import Event
from eventhub.models.participation import Participation, ParticipationStatus
from eventhub.models.user import User
from eventhub.services.locks import EventLockRegistry

logger = logging.getLogger(__name__)


def _event_query():
    # Membership lists must reflect the database, not a stale identity map entry.
    return select(Event).execution_options(populate_existing=True)


async def get_event(db: AsyncSession, event_id: int) -> Event:
    result = await db.execute(_event_query().filter(Event.id == event_id))
    event = result.scalars().first()
    if event is None:
        raise NotFound(f"Event with id {event_id} not found.")
    return event


async def list_events(db: AsyncSession, skip: int = 0, limit: int = 100) -> List[Event]:
    result = await db.execute(_event_query().order_by(Event.date).offset(skip).limit(limit))
    return result.scalars().all()


async def list_events_by_owner(db: AsyncSession, owner_id: int) -> List[Event]:
    result = await db.execute(_event_query().where(Event.owner_id == owner_id).order_by(Event.date))
    return result.scalars().all()


async def list_events_by_category(db: AsyncSession, category: str) -> List[Event]:
    result = await db.execute(_event_query().where(Event.category == category).order_by(Event.date))
    return result.scalars().all()


async def list_events_by_membership(
    db: AsyncSession, user_id: int, status: ParticipationStatus
) -> List[Event]:
    query = (
        _event_query()
        .join(Event.participations)
        .where(Participation.user_id == user_id, Participation.status == status)
        .order_by(Event.date)
    )
    result = await db.execute(query)
    return result.scalars().all()


def ensure_owner(event: Event, user: User, action: str) -> None:
    if event.owner_id != user.id:
        logger.warning(
            f"User ID {user.id} attempted to {action} event ID {event.id} owned by user ID {event.owner_id}."
        )
        raise Forbidden(f"Only the owner of the event may {action} it.")


async def create_event(db: AsyncSession, owner: User, payload: Mapping[str, Any]) -> Event:
    result = validate_event(payload)
    if not result.is_valid:
        raise ValidationError(result.errors)

    db_event = Event(
        title=payload["title"],
        description=payload["description"],
        category=payload["category"],
        date=payload["date"],
        time=payload.get("time"),
        period=payload.get("period"),
        location=payload.get("location"),
        participants_number=payload.get("participants_number"),
        coordinates=list(payload.get("coordinates") or []),
        owner_id=owner.id,
        participations=[],
    )
    db.add(db_event)
    await db.commit()
    logger.info(f"Event '{db_event.title}' created by user ID {owner.id}")
    return await get_event(db, db_event.id)


async def update_event(
    db: AsyncSession,
    locks: EventLockRegistry,
    event_id: int,
    actor: User,
    update_data: Mapping[str, Any],
) -> Event:
    """Merge ``update_data`` into the event. Only keys present are written."""
    async with locks.hold(event_id):
        db_event = await get_event(db, event_id)
        ensure_owner(db_event, actor, "edit")

        capacity = update_data.get("participants_number")
        if capacity is not None and len(db_event.participants) > capacity:
            raise CapacityExceeded(
                f"Event already has {len(db_event.participants)} participants, cannot lower capacity to {capacity}."
            )

        for key, value in update_data.items():
            setattr(db_event, key, value)
        await db.commit()
        logger.info(f"Event ID {event_id} (title: '{db_event.title}') updated by user ID {actor.id}.")
        return db_event


async def delete_event(
    db: AsyncSession, locks: EventLockRegistry, event_id: int, actor: User
) -> Event:
    async with locks.hold(event_id):
        db_event = await get_event(db, event_id)
        ensure_owner(db_event, actor, "delete")
        await db.delete(db_event)
        await db.commit()
        logger.info(f"Event '{db_event.title}' (ID: {event_id}) deleted by user ID {actor.id}.")
        return db_event
