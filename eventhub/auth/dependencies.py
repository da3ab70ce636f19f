from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from eventhub.database import get_db
from eventhub.models.user import User
from eventhub.auth import security
from eventhub.auth import user_crud
from eventhub.exceptions import InactiveUser

logger = logging.getLogger(__name__)

async def get_current_user(
    token: str | None = Depends(security.token_header_scheme),
    db: AsyncSession = Depends(get_db)
) -> User:
    return await user_crud.authenticate(db, token)

async def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    if not current_user.is_active:
        logger.warning(f"Inactive user access attempt: {current_user.email} (ID: {current_user.id})")
        raise InactiveUser()
    return current_user
