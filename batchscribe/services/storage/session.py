"""
Session-scoped store: one FileQueue plus one ResultStore.

The store is the single object passed to the batch processor and the export
helpers. It owns admission (format filtering + enqueue) and cascading
removal so a ResultEntry never outlives its FileEntry.

Usage::

    store = SessionStore()
    store.admit(files, source=AdmissionSource.drop)
    await BatchProcessor().run(store, "whisper-1", api_key, base_url)
"""

import logging
from collections.abc import Iterable

from batchscribe.core.config import get_settings
from batchscribe.core.models import AdmissionSource, AudioFile, FileEntry
from batchscribe.services.intake import filter_accepted
from batchscribe.services.storage.queue import FileQueue
from batchscribe.services.storage.results import ResultStore

logger = logging.getLogger(__name__)


class SessionStore:
    """Holds the file queue and the transcripts for one user session.

    Args:
        strict_format_check: Filter picker uploads too. Defaults to the
            ``strict_format_check`` setting.
    """

    def __init__(self, strict_format_check: bool | None = None) -> None:
        if strict_format_check is None:
            strict_format_check = get_settings().strict_format_check
        self.strict_format_check = strict_format_check
        self.queue = FileQueue()
        self.results = ResultStore()

    def admit(
        self,
        files: Iterable[AudioFile],
        source: AdmissionSource = AdmissionSource.drop,
    ) -> list[FileEntry]:
        """Filter ``files`` according to ``source`` and enqueue the survivors.

        Drag-and-drop and folder admissions are always filtered by extension.
        Picker admissions are filtered only when ``strict_format_check`` is on.
        """
        candidates = list(files)
        if source != AdmissionSource.picker or self.strict_format_check:
            admitted = filter_accepted(candidates)
        else:
            admitted = candidates

        dropped = len(candidates) - len(admitted)
        if dropped:
            logger.info("Ignored %d unsupported file(s) from %s", dropped, source.value)
        return self.queue.add(admitted)

    def remove(self, file_id: str) -> bool:
        """Remove a file and its transcript. Unknown ids are a no-op."""
        removed = self.queue.remove(file_id)
        self.results.remove(file_id)
        return removed

    def reset(self) -> None:
        self.queue.clear()
        self.results.clear()


_session: SessionStore | None = None


def get_session_store() -> SessionStore:
    """Return the process-wide SessionStore, creating it on first use."""
    global _session  # noqa: PLW0603
    if _session is None:
        _session = SessionStore()
    return _session


def reset_session_store() -> None:
    """Forget the process-wide store (used by tests and app shutdown)."""
    global _session  # noqa: PLW0603
    _session = None
