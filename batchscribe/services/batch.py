"""Sequential batch processor.

Takes every ``pending`` entry of a session's queue, in insertion order, and
transcribes them one at a time. A failed file is marked ``error`` and the
batch moves on; a successful one is marked ``completed`` and its transcript
is appended to the session's result store.

Usage::

    processor = BatchProcessor(notify=push_status)
    summary = await processor.run(store, "whisper-1", api_key, base_url)
"""

import logging
from collections.abc import Awaitable, Callable

from batchscribe.core.config import get_settings
from batchscribe.core.exceptions import (
    BatchAlreadyRunningError,
    BatchScribeError,
    ValidationError,
)
from batchscribe.core.models import BatchSummary, FileEntry
from batchscribe.services.storage.session import SessionStore
from batchscribe.services.transcription import BaseTranscriber, create_transcriber

logger = logging.getLogger(__name__)

Notify = Callable[[FileEntry], Awaitable[None]]


class BatchProcessor:
    """Drives queued files through the transcriber, one request in flight at a time.

    Args:
        transcriber: Provider used for each file (defaults to the HTTP client).
        notify: Optional async callback invoked after every status change.
        initial_progress: Progress set when a file starts processing
            (defaults to the ``initial_progress`` setting).
    """

    def __init__(
        self,
        transcriber: BaseTranscriber | None = None,
        notify: Notify | None = None,
        initial_progress: int | None = None,
    ) -> None:
        settings = get_settings()
        self._transcriber = transcriber or create_transcriber()
        self._notify = notify
        self._initial_progress = (
            initial_progress if initial_progress is not None else settings.initial_progress
        )
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def validate(self, session: SessionStore, api_key: str) -> None:
        """Check the run preconditions without touching any entry.

        Raises:
            BatchAlreadyRunningError: If this processor is already running.
            ValidationError: If the queue is empty or the API key is blank.
        """
        if self._running:
            raise BatchAlreadyRunningError()
        if len(session.queue) == 0:
            raise ValidationError("No files to transcribe")
        if not api_key or not api_key.strip():
            raise ValidationError("API key is required")

    async def run(
        self,
        session: SessionStore,
        model_id: str,
        api_key: str,
        base_url: str,
    ) -> BatchSummary:
        """Process every pending entry of ``session`` sequentially.

        Raises:
            BatchAlreadyRunningError: If this processor is already running.
            ValidationError: If the queue is empty or the API key is blank.
                Nothing is sent and no entry changes state.
        """
        batch = self.reserve(session, api_key)
        return await self.process(session, batch, model_id, api_key, base_url)

    def reserve(self, session: SessionStore, api_key: str) -> list[FileEntry]:
        """Validate and claim the processor; returns the pending snapshot.

        Synchronous so a caller can reject a concurrent run before it
        schedules anything. The claim is released by :meth:`process`.
        """
        self.validate(session, api_key)
        self._running = True
        return session.queue.pending()

    async def process(
        self,
        session: SessionStore,
        batch: list[FileEntry],
        model_id: str,
        api_key: str,
        base_url: str,
    ) -> BatchSummary:
        """Transcribe a snapshot taken by :meth:`reserve`, then release the processor."""
        summary = BatchSummary()
        try:
            if not batch:
                logger.info("No pending files; nothing to do")
                return summary

            logger.info("Batch started: %d file(s), model=%s", len(batch), model_id)
            for entry in batch:
                outcome = await self._process_one(session, entry, model_id, api_key, base_url)
                if outcome is None:
                    continue
                summary.processed.append(entry.id)
                if outcome:
                    summary.completed += 1
                else:
                    summary.failed += 1
        finally:
            self._running = False

        logger.info(
            "Batch finished: %d completed, %d failed", summary.completed, summary.failed
        )
        return summary

    async def _process_one(
        self,
        session: SessionStore,
        entry: FileEntry,
        model_id: str,
        api_key: str,
        base_url: str,
    ) -> bool | None:
        """Transcribe one entry. Returns True/False for success/failure, None if discarded."""
        queue = session.queue
        if entry.id not in queue:
            logger.debug("Skipping removed file %s", entry.id)
            return None

        queue.mark_processing(entry, self._initial_progress)
        await self._emit(entry)

        try:
            transcription = await self._transcriber.transcribe(
                entry.file, model_id, api_key, base_url
            )
        except Exception as exc:
            if entry.id not in queue:
                logger.info("File %s was removed mid-flight; dropping its error", entry.id)
                return None
            message = exc.detail if isinstance(exc, BatchScribeError) else str(exc)
            logger.warning("Transcription failed for %s: %s", entry.file_name, message)
            queue.mark_failed(entry, message)
            await self._emit(entry)
            return False

        if entry.id not in queue:
            logger.info("File %s was removed mid-flight; dropping its transcript", entry.id)
            return None

        queue.mark_completed(entry, transcription)
        session.results.append(entry.id, entry.file_name, transcription)
        logger.info("Transcribed %s (%d chars)", entry.file_name, len(transcription))
        await self._emit(entry)
        return True

    async def _emit(self, entry: FileEntry) -> None:
        if self._notify is None:
            return
        try:
            await self._notify(entry)
        except Exception:
            logger.exception("Notify callback failed for file %s (non-fatal)", entry.id)


_processor: BatchProcessor | None = None


def get_batch_processor() -> BatchProcessor:
    """Return the process-wide BatchProcessor so concurrent runs are rejected."""
    global _processor  # noqa: PLW0603
    if _processor is None:
        _processor = BatchProcessor()
    return _processor


def reset_batch_processor() -> None:
    global _processor  # noqa: PLW0603
    _processor = None
