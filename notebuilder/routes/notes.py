import logging

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from notebuilder.database import get_async_conn
from notebuilder.models import (
    Highlight,
    NoteStyle,
    RichDocument,
    SourceFile,
    SourceKind,
    StyleConfig,
)
from notebuilder.services.notes import NotesService
from notebuilder.services.serializer import DocumentSerializer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["notes"])


class StyleRequest(BaseModel):
    style: NoteStyle = NoteStyle.SIMPLIFIED
    highlights: list[Highlight] = [Highlight.KEY_POINTS, Highlight.DATES]
    custom_instructions: str = ""

    def to_config(self) -> StyleConfig:
        return StyleConfig(
            style=self.style,
            highlights=frozenset(self.highlights),
            custom_instructions=self.custom_instructions,
        )


class MarkupUpdate(BaseModel):
    markup: str


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


async def _get_session_or_404(conn, session_id: int) -> dict:
    row = await conn.execute(
        "SELECT * FROM sessions WHERE id = ?", (session_id,)
    )
    session = await row.fetchone()
    if not session:
        raise HTTPException(
            status_code=404, detail=f"Session {session_id} not found"
        )
    return dict(session)


async def _get_sources(conn, session_id: int) -> list[SourceFile]:
    rows = await conn.execute(
        "SELECT * FROM sources WHERE session_id = ? ORDER BY id", (session_id,)
    )
    return [
        SourceFile(name=row["name"], kind=SourceKind(row["kind"]), content=row["content"])
        for row in await rows.fetchall()
    ]


async def _save_document(conn, session_id: int, doc: RichDocument) -> dict:
    markup = DocumentSerializer.to_markup(doc)
    await conn.execute(
        "UPDATE sessions SET markup = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
        (markup, session_id),
    )
    await conn.commit()
    return {
        "session_id": session_id,
        "markup": markup,
        "markdown": DocumentSerializer.to_markdown(doc),
    }


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------


@router.get("/sessions/{session_id}/notes")
async def get_notes(session_id: int) -> dict:
    """Return the current document as markup, Markdown and plain text."""
    conn = await get_async_conn()
    try:
        session = await _get_session_or_404(conn, session_id)
        source = session["markup"] or RichDocument()
        return {
            "session_id": session_id,
            "markup": session["markup"],
            "markdown": DocumentSerializer.to_markdown(source),
            "plain": DocumentSerializer.to_plain_text(source),
        }
    finally:
        await conn.close()


@router.post("/sessions/{session_id}/notes/generate")
async def generate_notes(session_id: int, body: StyleRequest) -> dict:
    """Generate fresh notes from the session's sources, replacing the current ones."""
    conn = await get_async_conn()
    try:
        await _get_session_or_404(conn, session_id)
        sources = await _get_sources(conn, session_id)
        doc = NotesService().generate_from_sources(sources, body.to_config())
        logger.info("Session %d: generated %d blocks", session_id, len(doc.blocks))
        return await _save_document(conn, session_id, doc)
    finally:
        await conn.close()


@router.post("/sessions/{session_id}/notes/regenerate")
async def regenerate_notes(session_id: int, body: StyleRequest) -> dict:
    """Regenerate from the sources plus the text of the current (edited) notes."""
    conn = await get_async_conn()
    try:
        session = await _get_session_or_404(conn, session_id)
        sources = await _get_sources(conn, session_id)
        doc = NotesService().regenerate(sources, session["markup"], body.to_config())
        logger.info("Session %d: regenerated %d blocks", session_id, len(doc.blocks))
        return await _save_document(conn, session_id, doc)
    finally:
        await conn.close()


@router.put("/sessions/{session_id}/notes")
async def update_notes(session_id: int, body: MarkupUpdate) -> dict:
    """Store markup edited by the user verbatim."""
    conn = await get_async_conn()
    try:
        await _get_session_or_404(conn, session_id)
        await conn.execute(
            "UPDATE sessions SET markup = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (body.markup, session_id),
        )
        await conn.commit()
        return {"session_id": session_id, "markup": body.markup}
    finally:
        await conn.close()
