import aiosqlite

from notebuilder.config import settings

DB_PATH = settings.database_path

CREATE_SESSIONS = """
CREATE TABLE IF NOT EXISTS sessions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    markup TEXT NOT NULL DEFAULT '',
    data_dir TEXT NOT NULL DEFAULT '',
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""

CREATE_SOURCES = """
CREATE TABLE IF NOT EXISTS sources (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id INTEGER NOT NULL,
    name TEXT NOT NULL,
    kind TEXT NOT NULL,
    content TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (session_id) REFERENCES sessions(id)
)
"""

_DDL = [CREATE_SESSIONS, CREATE_SOURCES]


async def init_db() -> None:
    """Create all tables. Called once at server startup via FastAPI lifespan."""
    async with aiosqlite.connect(DB_PATH) as db:
        for stmt in _DDL:
            await db.execute(stmt)
        await db.commit()


async def get_async_conn() -> aiosqlite.Connection:
    """Async connection for use in FastAPI route handlers."""
    conn = await aiosqlite.connect(DB_PATH)
    await conn.execute("PRAGMA busy_timeout = 5000")
    conn.row_factory = aiosqlite.Row
    return conn
