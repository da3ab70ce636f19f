import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Request

from eventhub.config import settings
from eventhub.exceptions import InternalError

logger = logging.getLogger(__name__)


class EventLockRegistry:
    """One ``asyncio.Lock`` per event id, created on demand.

    Locks are held weakly and disappear once no coroutine references them.
    Serialization only covers coroutines running in this process.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = settings.LOCK_TIMEOUT_SECONDS if timeout is None else timeout
        self._locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, event_id: int) -> asyncio.Lock:
        lock = self._locks.get(event_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[event_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, event_id: int) -> AsyncIterator[None]:
        lock = self._lock_for(event_id)
        try:
            await asyncio.wait_for(lock.acquire(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Timed out after {self.timeout}s waiting for the lock on event ID {event_id}.")
            raise InternalError("The event is busy, please retry.")
        try:
            yield
        finally:
            lock.release()


def get_event_locks(request: Request) -> EventLockRegistry:
    return request.app.state.event_locks
