import asyncio

from fastapi import APIRouter, HTTPException
from fastapi.responses import HTMLResponse, Response

from notebuilder.database import get_async_conn
from notebuilder.models import RichDocument
from notebuilder.services.export import ExportChannel, ExportService
from notebuilder.services.storage import StorageService

router = APIRouter(prefix="/api", tags=["exports"])


async def _get_session_or_404(session_id: int) -> dict:
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


@router.get("/sessions/{session_id}/export/{kind}")
async def download_export(session_id: int, kind: str) -> Response:
    """Download the notes as plain, markdown or markup-with-wrapper.

    A copy of the artifact is kept under the session's exports/ directory.
    """
    session = await _get_session_or_404(session_id)
    try:
        export_kind = ExportService.kind_for_channel(ExportChannel.DOWNLOAD, kind)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unsupported export kind: {kind}")

    artifact = ExportService.export(session["markup"] or RichDocument(), export_kind)
    await asyncio.to_thread(StorageService.write_artifact, session["data_dir"], artifact)

    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


@router.get("/sessions/{session_id}/print", response_class=HTMLResponse)
async def print_view(session_id: int) -> HTMLResponse:
    """Full HTML page of the notes for the print channel."""
    session = await _get_session_or_404(session_id)
    kind = ExportService.kind_for_channel(ExportChannel.PRINT)
    artifact = ExportService.export(session["markup"] or RichDocument(), kind)
    return HTMLResponse(artifact.content)
