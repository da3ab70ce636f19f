import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi.security import APIKeyHeader
from jose import JWTError, jwt
from passlib.context import CryptContext

from eventhub.config import settings
from eventhub.exceptions import InternalError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)
token_header_scheme = APIKeyHeader(name=settings.AUTH_HEADER, auto_error=False)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

async def _run_with_timeout(func, *args):
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(func, *args),
            timeout=settings.HASH_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.error(f"Password hashing did not finish within {settings.HASH_TIMEOUT_SECONDS}s.")
        raise InternalError("Password processing timed out.")

async def hash_password(password: str) -> str:
    """Hash ``password`` off the event loop, bounded by HASH_TIMEOUT_SECONDS."""
    return await _run_with_timeout(get_password_hash, password)

async def check_password(plain_password: str, hashed_password: str) -> bool:
    return await _run_with_timeout(verify_password, plain_password, hashed_password)

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt

def decode_access_token(token: str) -> int | None:
    """Return the user id carried by ``token``, or None if it is not acceptable."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"Token validation error: {str(e)}")
        return None
    user_id_from_sub = payload.get("sub")
    if user_id_from_sub is None:
        logger.warning("Token decoding error: 'sub' claim missing.")
        return None
    try:
        return int(user_id_from_sub)
    except (TypeError, ValueError):
        logger.warning(f"Token decoding error: 'sub' claim '{user_id_from_sub}' is not a valid integer.")
        return None
