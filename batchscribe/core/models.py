"""
Pydantic v2 models shared by the batch pipeline and the API layer.

Pipeline records (FileEntry, ResultEntry) are owned by the session store
and mutated in place; the ``*Response`` / ``*Request`` models are the
JSON shapes exchanged over HTTP.
"""

import uuid
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field, model_validator

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: datetime


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


class FileStatus(StrEnum):
    """Lifecycle states of a queued file."""

    pending = "pending"
    processing = "processing"
    completed = "completed"
    error = "error"


class AdmissionSource(StrEnum):
    """How a set of files reached the queue."""

    drop = "drop"
    picker = "picker"
    folder = "folder"


class AudioFile(BaseModel):
    """Raw audio payload plus its name; never decoded by the pipeline."""

    name: str
    content: bytes = Field(default=b"", repr=False)
    size: int | None = None

    @model_validator(mode="after")
    def _default_size(self) -> "AudioFile":
        if self.size is None:
            self.size = len(self.content)
        return self


def _new_file_id() -> str:
    return uuid.uuid4().hex


class FileEntry(BaseModel):
    """One submitted file and its processing state."""

    id: str = Field(default_factory=_new_file_id)
    file: AudioFile
    status: FileStatus = FileStatus.pending
    progress: int = 0
    transcription: str | None = None
    error: str | None = None
    added_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def file_name(self) -> str:
        return self.file.name


class FileEntryResponse(BaseModel):
    """File entry as exposed over HTTP (payload bytes omitted)."""

    id: str
    file_name: str
    size: int
    status: FileStatus
    progress: int
    transcription: str | None = None
    error: str | None = None
    added_at: datetime

    @classmethod
    def from_entry(cls, entry: FileEntry) -> "FileEntryResponse":
        return cls(
            id=entry.id,
            file_name=entry.file_name,
            size=entry.file.size or 0,
            status=entry.status,
            progress=entry.progress,
            transcription=entry.transcription,
            error=entry.error,
            added_at=entry.added_at,
        )


class FolderImportRequest(BaseModel):
    """POST /files/folder request body."""

    path: str


class RemoveFileResponse(BaseModel):
    """DELETE /files/{id} response."""

    id: str
    removed: bool


# ---------------------------------------------------------------------------
# Results & export
# ---------------------------------------------------------------------------


class ResultEntry(BaseModel):
    """A completed transcript, keyed by the originating file id."""

    id: str
    file_name: str
    transcription: str
    timestamp: datetime


class ExportArtifact(BaseModel):
    """A downloadable text artifact."""

    filename: str
    content: str
    media_type: str = "text/plain"

    def to_bytes(self) -> bytes:
        return self.content.encode("utf-8")


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------


class BatchRunRequest(BaseModel):
    """POST /batch/run request body. Missing credentials fall back to settings."""

    model: str | None = None
    api_key: str | None = None
    base_url: str | None = None


class BatchSummary(BaseModel):
    """Outcome of one batch run."""

    processed: list[str] = Field(default_factory=list)
    completed: int = 0
    failed: int = 0


class BatchStatusResponse(BaseModel):
    """GET /batch/status response."""

    running: bool
    counts: dict[str, int] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Model catalog
# ---------------------------------------------------------------------------


class ModelDescriptor(BaseModel):
    """A transcription model offered to the user.

    Only ``identifier`` affects behavior: it is sent as the ``model`` form field.
    """

    identifier: str
    display_name: str
    description: str = ""
    provider: str = ""
    speed: str = ""
    accuracy: str = ""


class ModelRefreshRequest(BaseModel):
    """POST /models/refresh request body."""

    api_key: str | None = None
    base_url: str | None = None
