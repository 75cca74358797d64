"""
BatchScribe exception hierarchy.

All application-specific exceptions inherit from BatchScribeError,
enabling centralized error handling in the API middleware layer.
"""

from datetime import UTC, datetime


class BatchScribeError(Exception):
    """Base exception for all BatchScribe errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "BATCHSCRIBE_ERROR",
        status_code: int = 500,
    ) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        self.timestamp = datetime.now(UTC).isoformat()
        super().__init__(detail)


class ValidationError(BatchScribeError):
    """Raised when a batch run is attempted without files or without an API key."""

    def __init__(self, detail: str = "Invalid request", status_code: int = 400) -> None:
        super().__init__(
            detail=detail,
            code="VALIDATION_ERROR",
            status_code=status_code,
        )


class BatchAlreadyRunningError(ValidationError):
    """Raised when a batch run is requested while another one is in progress."""

    def __init__(self) -> None:
        super().__init__(detail="A batch is already running", status_code=409)
        self.code = "BATCH_ALREADY_RUNNING"


class ApiError(BatchScribeError):
    """Raised when the transcription endpoint answers with a non-success status.

    ``upstream_status`` is the remote HTTP status, or None when the request
    never got a response (connection refused, DNS failure, timeout).
    """

    def __init__(self, detail: str, upstream_status: int | None = None) -> None:
        super().__init__(
            detail=detail,
            code="TRANSCRIPTION_API_ERROR",
            status_code=502,
        )
        self.upstream_status = upstream_status


class ModelDiscoveryError(BatchScribeError):
    """Raised when the remote model catalog cannot be fetched."""

    def __init__(self, detail: str = "Failed to fetch models") -> None:
        super().__init__(
            detail=detail,
            code="MODEL_DISCOVERY_ERROR",
            status_code=502,
        )


class FileEntryNotFoundError(BatchScribeError):
    """Raised when a file id does not exist in the queue."""

    def __init__(self, file_id: str) -> None:
        super().__init__(
            detail=f"File not found: {file_id}",
            code="FILE_NOT_FOUND",
            status_code=404,
        )


class ResultNotFoundError(BatchScribeError):
    """Raised when no transcript exists for a file id."""

    def __init__(self, file_id: str) -> None:
        super().__init__(
            detail=f"Transcription not found: {file_id}",
            code="RESULT_NOT_FOUND",
            status_code=404,
        )


class InvalidTransitionError(BatchScribeError):
    """Raised when a file entry is moved along an edge the lifecycle does not allow."""

    def __init__(self, file_id: str, current: str, target: str) -> None:
        super().__init__(
            detail=f"Cannot move file {file_id} from {current} to {target}",
            code="INVALID_TRANSITION",
            status_code=409,
        )


class ExportError(BatchScribeError):
    """Raised when writing an export artifact fails."""

    def __init__(self, detail: str = "Export failed") -> None:
        super().__init__(detail=detail, code="EXPORT_ERROR", status_code=500)
