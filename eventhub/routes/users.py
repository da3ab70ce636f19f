from fastapi import APIRouter, Depends, HTTPException, status, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import logging

from eventhub.config import settings
from eventhub.database import get_db
from eventhub.models.user import User
from eventhub.schemas.user import (
    UserRegisterSchema,
    UserLoginSchema,
    UserUpdateSchema,
    UserResponseSchema,
    UserWithTokenResponse,
)
from eventhub.auth import user_crud
from eventhub.auth.dependencies import get_current_active_user
from eventhub.exceptions import EventHubError, InternalError, NotFound

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/user",
    tags=["Users"]
)

@router.post(
    "/create",
    response_model=UserResponseSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user"
)
async def register_user(
    user_in: UserRegisterSchema,
    db: AsyncSession = Depends(get_db)
):
    try:
        return await user_crud.register_user(db, user_in.model_dump(by_alias=True))
    except EventHubError:
        raise
    except Exception as e_general:
        await db.rollback()
        logger.error(
            f"Unexpected error during user registration for email {user_in.email}: {str(e_general)}",
            exc_info=True
        )
        raise InternalError("An unexpected error occurred during registration.")

@router.post(
    "/login",
    response_model=UserWithTokenResponse,
    summary="Log in and receive an access token"
)
async def login_user(
    credentials: UserLoginSchema,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    user, access_token = await user_crud.login(db, credentials.email, credentials.password)
    response.headers[settings.AUTH_HEADER] = access_token
    return {**UserResponseSchema.model_validate(user).model_dump(), "token": access_token}

@router.get(
    "/read",
    response_model=UserResponseSchema,
    summary="Get current authenticated user's details"
)
async def read_users_me(current_user: User = Depends(get_current_active_user)):
    return current_user

@router.get(
    "/users",
    response_model=List[UserResponseSchema],
    summary="List users",
    dependencies=[Depends(get_current_active_user)]
)
async def get_all_users(
    db: AsyncSession = Depends(get_db),
    skip: int = 0,
    limit: int = 100
):
    try:
        return await user_crud.get_users(db, skip=skip, limit=limit)
    except Exception as e:
        logger.error(f"Error fetching users: {str(e)}", exc_info=True)
        raise InternalError("An error occurred while fetching users.")

@router.get(
    "/{user_id}",
    response_model=UserResponseSchema,
    summary="Get a specific user by ID",
    dependencies=[Depends(get_current_active_user)]
)
async def get_user_by_id(
    user_id: int,
    db: AsyncSession = Depends(get_db)
):
    user = await user_crud.get_user_by_id(db, user_id=user_id)
    if not user:
        raise NotFound(f"User with id {user_id} not found.")
    return user

@router.put(
    "/update",
    response_model=UserResponseSchema,
    summary="Update current user's profile"
)
async def update_users_me(
    user_update: UserUpdateSchema,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    user_id = current_user.id
    update_data = user_update.model_dump(exclude_unset=True, exclude_none=True)
    if not update_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields provided for update."
        )
    try:
        updated_user = await user_crud.update_user_profile(db, current_user, update_data)
        logger.info(f"User ID {user_id} updated fields: {sorted(update_data)}")
        return updated_user
    except EventHubError:
        raise
    except Exception as e_general:
        await db.rollback()
        logger.error(f"Unexpected error updating user ID {user_id}: {str(e_general)}", exc_info=True)
        raise InternalError("An unexpected error occurred while updating the profile.")

@router.delete(
    "/delete",
    summary="Delete current user's account",
    status_code=status.HTTP_204_NO_CONTENT
)
async def delete_users_me(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user)
):
    user_id = current_user.id
    user_email_for_log = current_user.email
    try:
        await user_crud.delete_user(db, current_user)
    except Exception as e:
        await db.rollback()
        logger.error(f"Error deleting user ID {user_id}: {str(e)}", exc_info=True)
        raise InternalError("An error occurred while deleting the account.")
    logger.info(f"User '{user_email_for_log}' deleted their account.")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
