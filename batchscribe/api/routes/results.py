"""
Transcript REST endpoints: listing and plain-text downloads.
"""

from urllib.parse import quote

from fastapi import APIRouter
from fastapi.responses import Response

from batchscribe.core.models import ExportArtifact, ResultEntry
from batchscribe.services.storage.export import export_all, export_one
from batchscribe.services.storage.session import get_session_store

router = APIRouter(prefix="/results", tags=["results"])


def content_disposition(filename: str) -> str:
    """Build an attachment header the way ``FileResponse`` does.

    Names that are not plain ASCII (or that contain quotes) go out in the
    RFC 5987 ``filename*=utf-8''...`` form so the header stays latin-1 safe.
    """
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


def _download(artifact: ExportArtifact) -> Response:
    return Response(
        content=artifact.to_bytes(),
        media_type=f"{artifact.media_type}; charset=utf-8",
        headers={"Content-Disposition": content_disposition(artifact.filename)},
    )


@router.get("", response_model=list[ResultEntry])
async def list_results():
    """List completed transcripts in completion order."""
    return get_session_store().results.entries()


# Declared before "/{file_id}/export" so "export" is not taken as an id
@router.get("/export")
async def export_all_results():
    """Download every transcript as ``all_transcriptions.txt``."""
    return _download(export_all(get_session_store().results))


@router.get("/{file_id}", response_model=ResultEntry)
async def get_result(file_id: str):
    return get_session_store().results.get(file_id)


@router.get("/{file_id}/export")
async def export_result(file_id: str):
    """Download one transcript as ``<stem>_transcription.txt``."""
    result = get_session_store().results.get(file_id)
    return _download(export_one(result.file_name, result.transcription))
