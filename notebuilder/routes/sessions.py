from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from notebuilder.database import get_async_conn
from notebuilder.models import SourceKind
from notebuilder.services.storage import StorageService

router = APIRouter(prefix="/api", tags=["sessions"])


# ------------------------------------------------------------------
# Request bodies
# ------------------------------------------------------------------


class SessionCreate(BaseModel):
    title: str = "Untitled notes"


class SourceCreate(BaseModel):
    name: str
    kind: SourceKind | None = None
    content: str | None = None


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


async def _ensure_session(conn, session_id: int) -> None:
    row = await conn.execute("SELECT id FROM sessions WHERE id = ?", (session_id,))
    if not await row.fetchone():
        raise HTTPException(
            status_code=404, detail=f"Session {session_id} not found"
        )


# ------------------------------------------------------------------
# Session endpoints
# ------------------------------------------------------------------


@router.post("/sessions")
async def create_session(body: SessionCreate) -> dict:
    conn = await get_async_conn()
    try:
        cursor = await conn.execute(
            "INSERT INTO sessions (title) VALUES (?)", (body.title,)
        )
        session_id = cursor.lastrowid
        data_dir = StorageService.session_dir(session_id)
        StorageService.ensure_dirs(data_dir)
        await conn.execute(
            "UPDATE sessions SET data_dir = ? WHERE id = ?", (data_dir, session_id)
        )
        await conn.commit()
        row = await conn.execute(
            "SELECT * FROM sessions WHERE id = ?", (session_id,)
        )
        return dict(await row.fetchone())
    finally:
        await conn.close()


@router.get("/sessions/{session_id}")
async def get_session(session_id: int) -> dict:
    conn = await get_async_conn()
    try:
        row = await conn.execute(
            "SELECT * FROM sessions WHERE id = ?", (session_id,)
        )
        session = await row.fetchone()
        if not session:
            raise HTTPException(
                status_code=404, detail=f"Session {session_id} not found"
            )
        return dict(session)
    finally:
        await conn.close()


@router.get("/sessions")
async def list_sessions() -> list[dict]:
    conn = await get_async_conn()
    try:
        rows = await conn.execute("SELECT * FROM sessions ORDER BY id DESC")
        return [dict(row) for row in await rows.fetchall()]
    finally:
        await conn.close()


# ------------------------------------------------------------------
# Source endpoints
# ------------------------------------------------------------------


@router.post("/sessions/{session_id}/sources")
async def add_source(session_id: int, body: SourceCreate) -> dict:
    """Attach an already-extracted source to a session.

    When ``kind`` is omitted it is inferred from the file extension.
    """
    kind = body.kind
    if kind is None:
        try:
            kind = SourceKind.from_filename(body.name)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    conn = await get_async_conn()
    try:
        await _ensure_session(conn, session_id)
        cursor = await conn.execute(
            "INSERT INTO sources (session_id, name, kind, content) VALUES (?, ?, ?, ?)",
            (session_id, body.name, kind.value, body.content),
        )
        await conn.commit()
        row = await conn.execute(
            "SELECT * FROM sources WHERE id = ?", (cursor.lastrowid,)
        )
        return dict(await row.fetchone())
    finally:
        await conn.close()


@router.get("/sessions/{session_id}/sources")
async def list_sources(session_id: int) -> list[dict]:
    conn = await get_async_conn()
    try:
        await _ensure_session(conn, session_id)
        rows = await conn.execute(
            "SELECT * FROM sources WHERE session_id = ? ORDER BY id", (session_id,)
        )
        return [dict(row) for row in await rows.fetchall()]
    finally:
        await conn.close()
