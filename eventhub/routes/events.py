from fastapi import APIRouter, Depends, HTTPException, status, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from eventhub.database import get_db
from eventhub.models.user import User
from eventhub.models.participation import ParticipationStatus
from eventhub.schemas.event import (
    EventCreateSchema,
    EventUpdateSchema,
    EventResponseSchema,
    ParticipationTargetSchema,
)
from eventhub.auth.dependencies import get_current_active_user
from eventhub.exceptions import EventHubError, InternalError
from eventhub.services import events as event_store
from eventhub.services import participation
from eventhub.services.locks import EventLockRegistry, get_event_locks

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/event",
    tags=["Events"]
)

def _internal_error(action: str) -> InternalError:
    return InternalError(f"An unexpected error occurred while {action}.")

@router.post(
    "/create",
    response_model=EventResponseSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new event owned by the current user"
)
async def create_event(
    event_data: EventCreateSchema,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    user_id = current_user.id
    try:
        return await event_store.create_event(db, current_user, event_data.model_dump())
    except EventHubError:
        raise
    except Exception as e_general:
        await db.rollback()
        logger.error(
            f"Unexpected error creating event with title '{event_data.title}' by user ID {user_id}: {str(e_general)}",
            exc_info=True
        )
        raise _internal_error("creating the event")

@router.get(
    "/",
    response_model=List[EventResponseSchema],
    summary="Get all events",
    dependencies=[Depends(get_current_active_user)]
)
async def get_all_events(
    db: AsyncSession = Depends(get_db),
    skip: int = 0,
    limit: int = 100
):
    try:
        return await event_store.list_events(db, skip=skip, limit=limit)
    except Exception as e:
        logger.error(f"Error fetching events: {str(e)}", exc_info=True)
        raise _internal_error("fetching events")

@router.get(
    "/owner",
    response_model=List[EventResponseSchema],
    summary="Get events owned by the current user"
)
async def get_my_events(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return await event_store.list_events_by_owner(db, current_user.id)

@router.get(
    "/participating",
    response_model=List[EventResponseSchema],
    summary="Get events the current user has been approved for"
)
async def get_participating_events(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return await event_store.list_events_by_membership(db, current_user.id, ParticipationStatus.approved)

@router.get(
    "/postulating",
    response_model=List[EventResponseSchema],
    summary="Get events the current user is waiting for"
)
async def get_postulating_events(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    return await event_store.list_events_by_membership(db, current_user.id, ParticipationStatus.waiting)

@router.get(
    "/id/{event_id}",
    response_model=EventResponseSchema,
    summary="Get a specific event by ID",
    dependencies=[Depends(get_current_active_user)]
)
async def get_event_by_id(
    event_id: int,
    db: AsyncSession = Depends(get_db)
):
    return await event_store.get_event(db, event_id)

@router.put(
    "/edit/{event_id}",
    response_model=EventResponseSchema,
    summary="Update an event (owner only)"
)
async def update_event(
    event_id: int,
    event_update_data: EventUpdateSchema,
    db: AsyncSession = Depends(get_db),
    locks: EventLockRegistry = Depends(get_event_locks),
    current_user: User = Depends(get_current_active_user)
):
    updated_data = event_update_data.model_dump(exclude_unset=True, exclude_none=True)
    if not updated_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields provided for update."
        )
    try:
        return await event_store.update_event(db, locks, event_id, current_user, updated_data)
    except EventHubError:
        raise
    except Exception as e_general:
        await db.rollback()
        logger.error(
            f"Unexpected error updating event id {event_id} with fields {sorted(updated_data)}: {str(e_general)}",
            exc_info=True
        )
        raise _internal_error(f"updating event {event_id}")

@router.delete(
    "/delete/{event_id}",
    summary="Delete an event (owner only)",
    status_code=status.HTTP_204_NO_CONTENT
)
async def delete_event(
    event_id: int,
    db: AsyncSession = Depends(get_db),
    locks: EventLockRegistry = Depends(get_event_locks),
    current_user: User = Depends(get_current_active_user)
):
    try:
        await event_store.delete_event(db, locks, event_id, current_user)
    except EventHubError:
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Error deleting event with id {event_id}: {str(e)}", exc_info=True)
        raise _internal_error(f"deleting event {event_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.put(
    "/postulate/{event_id}",
    response_model=EventResponseSchema,
    summary="Join the waiting list of an event"
)
async def postulate(
    event_id: int,
    db: AsyncSession = Depends(get_db),
    locks: EventLockRegistry = Depends(get_event_locks),
    current_user: User = Depends(get_current_active_user)
):
    return await participation.postulate(db, locks, event_id, current_user)

@router.put(
    "/unpostulate/{event_id}",
    response_model=EventResponseSchema,
    summary="Leave the waiting list of an event"
)
async def unpostulate(
    event_id: int,
    db: AsyncSession = Depends(get_db),
    locks: EventLockRegistry = Depends(get_event_locks),
    current_user: User = Depends(get_current_active_user)
):
    return await participation.unpostulate(db, locks, event_id, current_user)

@router.put(
    "/validate/{event_id}",
    response_model=EventResponseSchema,
    summary="Approve a waiting user as participant (owner only)"
)
async def validate_participant(
    event_id: int,
    target: ParticipationTargetSchema,
    db: AsyncSession = Depends(get_db),
    locks: EventLockRegistry = Depends(get_event_locks),
    current_user: User = Depends(get_current_active_user)
):
    return await participation.validate(db, locks, event_id, current_user, target.user_id)

@router.put(
    "/unvalidate/{event_id}",
    response_model=EventResponseSchema,
    summary="Move a participant back to the waiting list (owner only)"
)
async def unvalidate_participant(
    event_id: int,
    target: ParticipationTargetSchema,
    db: AsyncSession = Depends(get_db),
    locks: EventLockRegistry = Depends(get_event_locks),
    current_user: User = Depends(get_current_active_user)
):
    return await participation.unvalidate(db, locks, event_id, current_user, target.user_id)
