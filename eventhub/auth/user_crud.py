from datetime import timedelta
from typing import Any, List, Mapping, Tuple
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select

from eventhub.config import settings
from eventhub.models.user import User
from eventhub.auth import security
from eventhub.auth.validators import validate_login, validate_register
from eventhub.exceptions import (
    DuplicateResource,
    InactiveUser,
    InvalidCredentials,
    NotFound,
    Unauthorized,
    ValidationError,
)

logger = logging.getLogger(__name__)

async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    user = await db.get(User, user_id)
    return user

async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).filter(User.email == email))
    return result.scalars().first()

async def get_users(db: AsyncSession, skip: int = 0, limit: int = 100) -> List[User]:
    result = await db.execute(
        select(User).offset(skip).limit(limit).order_by(User.id)
    )
    return result.scalars().all()

async def _commit_user(db: AsyncSession, db_user: User) -> User:
    email = db_user.email
    try:
        await db.commit()
    except IntegrityError as e_integrity:
        await db.rollback()
        logger.warning(f"IntegrityError saving user {email}: {str(e_integrity)}")
        raise DuplicateResource("Email already exists")
    await db.refresh(db_user)
    return db_user

async def register_user(db: AsyncSession, payload: Mapping[str, Any]) -> User:
    """Validate ``payload`` (wire field names) and persist a new user.

    Raises ``ValidationError`` with per-field messages, or ``DuplicateResource``
    if the email is already registered.
    """
    result = validate_register(payload)
    if not result.is_valid:
        raise ValidationError(result.errors)

    email = payload["email"]
    if await get_user_by_email(db, email=email):
        logger.warning(f"Registration attempt with existing email: {email}")
        raise DuplicateResource("Email already exists")

    db_user = User(
        username=payload["username"],
        email=email,
        hashed_password=await security.hash_password(payload["password"]),
        birthdate=payload.get("birthdate"),
        description=payload.get("description"),
        location=payload.get("location"),
        interests=list(payload.get("interests") or []),
        is_active=True,
    )
    db.add(db_user)
    db_user = await _commit_user(db, db_user)
    logger.info(f"User registered successfully: {db_user.email}")
    return db_user

async def authenticate_credentials(db: AsyncSession, email: Any, password: Any) -> User:
    result = validate_login({"email": email, "password": password})
    if not result.is_valid:
        raise ValidationError(result.errors)

    user = await get_user_by_email(db, email=email)
    if user is None:
        logger.warning(f"Login attempt for unknown email: {email}")
        raise NotFound("Email not found")
    if not await security.check_password(password, user.hashed_password):
        logger.warning(f"Failed login attempt for email: {email}")
        raise InvalidCredentials("Password incorrect")
    if not user.is_active:
        logger.warning(f"Inactive user login attempt: {email}")
        raise InactiveUser("Inactive user. Please contact support.")
    return user

async def login(db: AsyncSession, email: Any, password: Any) -> Tuple[User, str]:
    user = await authenticate_credentials(db, email, password)
    access_token = security.create_access_token(
        data={"sub": str(user.id)},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    logger.info(f"User logged in successfully: {user.email}")
    return user, access_token

async def authenticate(db: AsyncSession, token: str | None) -> User:
    """Resolve the user behind an access token or raise ``Unauthorized``."""
    if not token:
        raise Unauthorized("Access denied. No token provided.")
    user_id = security.decode_access_token(token)
    if user_id is None:
        raise Unauthorized("Invalid token.")
    user = await get_user_by_id(db, user_id=user_id)
    if user is None:
        logger.warning(f"User not found for ID {user_id} from token.")
        raise Unauthorized("Invalid token.")
    return user

async def update_user_profile(db: AsyncSession, db_user: User, update_data: Mapping[str, Any]) -> User:
    update_data = dict(update_data)
    new_email = update_data.get("email")
    if new_email and new_email != db_user.email:
        existing = await get_user_by_email(db, email=new_email)
        if existing is not None and existing.id != db_user.id:
            logger.warning(f"User ID {db_user.id} attempted to take email {new_email} already in use.")
            raise DuplicateResource("Email already exists")

    password = update_data.pop("password", None)
    if password:
        db_user.hashed_password = await security.hash_password(password)

    for key, value in update_data.items():
        setattr(db_user, key, value)
    return await _commit_user(db, db_user)

async def delete_user(db: AsyncSession, db_user: User) -> None:
    await db.delete(db_user)
    await db.commit()
    return None
