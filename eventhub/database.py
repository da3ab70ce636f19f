from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from eventhub.config import settings

# "timeout" is honoured by both aiosqlite (busy timeout) and asyncpg (connect timeout)
engine = create_async_engine(
    settings.DATABASE_URL,
    connect_args={"timeout": settings.DB_TIMEOUT_SECONDS},
)

SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncIterator[AsyncSession]:
    async with SessionLocal() as session:
        yield session
