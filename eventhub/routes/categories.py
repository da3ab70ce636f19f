from fastapi import APIRouter, Depends, status, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from eventhub.database import get_db
from eventhub.schemas.category import (
    CategorySchema,
    CategoryUpdateSchema,
    CategoryIdSchema,
    CategoryResponseSchema,
)
from eventhub.schemas.event import EventResponseSchema
from eventhub.auth.dependencies import get_current_active_user
from eventhub.services import categories as category_registry
from eventhub.services import events as event_store

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/category",
    tags=["Categories"]
)

@router.post(
    "/create",
    summary="Create new category",
    response_model=CategoryResponseSchema,
    status_code=status.HTTP_201_CREATED
)
async def create_category(
    new_category_data: CategorySchema,
    db: AsyncSession = Depends(get_db)
):
    return await category_registry.create_category(db, new_category_data.name)

@router.get(
    "/read",
    summary="Find a category by name",
    response_model=CategoryResponseSchema,
    dependencies=[Depends(get_current_active_user)]
)
async def read_category(
    name: str,
    db: AsyncSession = Depends(get_db)
):
    return await category_registry.find_by_name(db, name)

@router.put(
    "/update",
    summary="Rename a category",
    response_model=CategoryResponseSchema,
    dependencies=[Depends(get_current_active_user)]
)
async def update_category(
    category_update_data: CategoryUpdateSchema,
    db: AsyncSession = Depends(get_db)
):
    return await category_registry.update_category(
        db, category_update_data.id, category_update_data.name
    )

@router.delete(
    "/delete",
    summary="Delete a category",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(get_current_active_user)]
)
async def delete_category(
    category_ref: CategoryIdSchema,
    db: AsyncSession = Depends(get_db)
):
    await category_registry.delete_category(db, category_ref.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.get(
    "/all",
    summary="Get all categories",
    response_model=List[CategoryResponseSchema],
    dependencies=[Depends(get_current_active_user)]
)
async def get_all_categories(
    db: AsyncSession = Depends(get_db)
):
    return await category_registry.list_categories(db)

@router.get(
    "/{category}",
    summary="Get events of a category",
    response_model=List[EventResponseSchema],
    dependencies=[Depends(get_current_active_user)]
)
async def get_category_events(
    category: str,
    db: AsyncSession = Depends(get_db)
):
    return await event_store.list_events_by_category(db, category)
