from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
import logging
import sys

from eventhub.config import settings
from eventhub.database import engine
from eventhub.exceptions import setup_exception_handlers
from eventhub.models import Base
from eventhub.routes import users, events, categories
from eventhub.services.locks import EventLockRegistry

LOG_LEVEL = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s (%(filename)s:%(lineno)d)"
stream_handler = logging.StreamHandler(sys.stdout)
stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
logging.basicConfig(level=LOG_LEVEL, handlers=[stream_handler], force=True)

logger = logging.getLogger(__name__)


def ensure_secret_key() -> None:
    if not settings.SECRET_KEY:
        logger.critical("FATAL ERROR: SECRET_KEY is not defined.")
        sys.exit(1)


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_secret_key()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready.")
    yield
    await engine.dispose()


app = FastAPI(title="EventHub API", lifespan=lifespan)
app.state.event_locks = EventLockRegistry()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[settings.AUTH_HEADER],
)
setup_exception_handlers(app)

app.include_router(users.router, tags=["Users"])
app.include_router(events.router, tags=["Events"])
app.include_router(categories.router, tags=["Categories"])


@app.get("/")
def root():
    return "Hello"


def run() -> None:
    ensure_secret_key()
    logger.info(f"Server is running on port: {settings.PORT}")
    uvicorn.run("eventhub.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
