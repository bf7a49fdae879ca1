import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from notebuilder.config import settings
from notebuilder.database import init_db
from notebuilder.routes import exports, notes, sessions

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Create SQLite tables on startup. Nothing to tear down on shutdown."""
    await init_db()
    yield


app = FastAPI(
    title="note-builder",
    description="Rule-based study notes from uploaded text, exported as Markdown, HTML or plain text",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(sessions.router)
app.include_router(notes.router)
app.include_router(exports.router)
