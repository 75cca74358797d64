"""
File queue REST endpoints.

Upload (drag-and-drop or picker), local folder import, listing and removal.
All endpoints delegate to the session store; no business logic here.
"""

import logging

from fastapi import APIRouter, File, Query, UploadFile

from batchscribe.core.exceptions import ValidationError
from batchscribe.core.models import (
    AdmissionSource,
    AudioFile,
    FileEntryResponse,
    FolderImportRequest,
    RemoveFileResponse,
)
from batchscribe.services.intake import collect_folder
from batchscribe.services.storage.session import get_session_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["files"])


@router.get("", response_model=list[FileEntryResponse])
async def list_files():
    """List every queued file with its status and progress."""
    store = get_session_store()
    return [FileEntryResponse.from_entry(e) for e in store.queue]


@router.post("", response_model=list[FileEntryResponse])
async def upload_files(
    files: list[UploadFile] = File(...),
    source: AdmissionSource = Query(AdmissionSource.drop),
):
    """Admit uploaded files. Returns only the entries that were queued."""
    if source == AdmissionSource.folder:
        raise ValidationError("Use /files/folder to import a folder")

    audio_files = []
    for upload in files:
        content = await upload.read()
        audio_files.append(
            AudioFile(name=upload.filename or "upload", content=content, size=len(content))
        )

    entries = get_session_store().admit(audio_files, source=source)
    return [FileEntryResponse.from_entry(e) for e in entries]


@router.post("/folder", response_model=list[FileEntryResponse])
async def import_folder(body: FolderImportRequest):
    """Recursively import a local folder; only accepted audio formats are queued."""
    try:
        audio_files = list(collect_folder(body.path))
    except NotADirectoryError as exc:
        raise ValidationError(str(exc)) from exc

    entries = get_session_store().admit(audio_files, source=AdmissionSource.folder)
    logger.info("Imported %d file(s) from %s", len(entries), body.path)
    return [FileEntryResponse.from_entry(e) for e in entries]


@router.get("/{file_id}", response_model=FileEntryResponse)
async def get_file(file_id: str):
    """Return one queued file (404 if unknown)."""
    return FileEntryResponse.from_entry(get_session_store().queue.get(file_id))


@router.delete("/{file_id}", response_model=RemoveFileResponse)
async def remove_file(file_id: str):
    """Remove a file and its transcript. Removing an unknown id is a no-op."""
    removed = get_session_store().remove(file_id)
    return RemoveFileResponse(id=file_id, removed=removed)
