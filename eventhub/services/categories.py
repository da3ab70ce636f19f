from typing import List
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select

from eventhub.models.category import Category, CATEGORY_NAMES
from eventhub.exceptions import DuplicateResource, InvalidCategory, NotFound

logger = logging.getLogger(__name__)


def ensure_allowed_name(name: str) -> None:
    if name not in CATEGORY_NAMES:
        raise InvalidCategory(
            f"'{name}' is not an allowed category. Allowed: {', '.join(CATEGORY_NAMES)}."
        )


async def list_categories(db: AsyncSession) -> List[Category]:
    result = await db.execute(select(Category).order_by(Category.name))
    return result.scalars().all()


async def get_category(db: AsyncSession, category_id: int) -> Category:
    category = await db.get(Category, category_id)
    if category is None:
        raise NotFound(f"Category with id {category_id} not found.")
    return category


async def find_by_name(db: AsyncSession, name: str) -> Category:
    result = await db.execute(select(Category).filter(Category.name == name))
    category = result.scalars().first()
    if category is None:
        raise NotFound(f"Category '{name}' not found.")
    return category


async def _ensure_name_free(db: AsyncSession, name: str, exclude_id: int | None = None) -> None:
    query = select(Category).filter(Category.name == name)
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    existing = await db.execute(query)
    if existing.scalars().first():
        raise DuplicateResource(f"A category with the name '{name}' already exists.")


async def _commit(db: AsyncSession, name: str) -> None:
    try:
        await db.commit()
    except IntegrityError as e_integrity:
        await db.rollback()
        logger.warning(f"IntegrityError saving category '{name}': {str(e_integrity)}")
        raise DuplicateResource(f"A category with the name '{name}' already exists.")


async def create_category(db: AsyncSession, name: str) -> Category:
    ensure_allowed_name(name)
    await _ensure_name_free(db, name)

    db_category = Category(name=name)
    db.add(db_category)
    await _commit(db, name)
    await db.refresh(db_category)
    logger.info(f"Category '{db_category.name}' created.")
    return db_category


async def update_category(db: AsyncSession, category_id: int, name: str) -> Category:
    db_category = await get_category(db, category_id)
    ensure_allowed_name(name)
    if name != db_category.name:
        await _ensure_name_free(db, name, exclude_id=category_id)

    db_category.name = name
    await _commit(db, name)
    await db.refresh(db_category)
    logger.info(f"Category ID {category_id} renamed to '{name}'.")
    return db_category


async def delete_category(db: AsyncSession, category_id: int) -> Category:
    db_category = await get_category(db, category_id)
    await db.delete(db_category)
    await db.commit()
    logger.info(f"Category '{db_category.name}' (ID: {category_id}) deleted.")
    return db_category
