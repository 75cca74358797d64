"""
In-memory file queue with the per-file lifecycle state machine.

Entries move ``pending -> processing -> completed | error``. Only the
batch processor drives transitions; removal is allowed from any state and
is not a transition.
"""

import logging
from collections.abc import Iterable, Iterator

from batchscribe.core.exceptions import FileEntryNotFoundError, InvalidTransitionError
from batchscribe.core.models import AudioFile, FileEntry, FileStatus

logger = logging.getLogger(__name__)

_ALLOWED_TRANSITIONS: dict[FileStatus, frozenset[FileStatus]] = {
    FileStatus.pending: frozenset({FileStatus.processing}),
    FileStatus.processing: frozenset({FileStatus.completed, FileStatus.error}),
    FileStatus.completed: frozenset(),
    FileStatus.error: frozenset(),
}


class FileQueue:
    """Ordered collection of FileEntry records keyed by id.

    Insertion order is preserved (dict order), which is also the order a
    batch run processes pending entries in.
    """

    def __init__(self) -> None:
        self._entries: dict[str, FileEntry] = {}

    # -- collection protocol --

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[FileEntry]:
        return iter(list(self._entries.values()))

    def __contains__(self, file_id: object) -> bool:
        return file_id in self._entries

    # -- admission / removal --

    def add(self, files: Iterable[AudioFile]) -> list[FileEntry]:
        """Enqueue each file as a new ``pending`` entry and return the entries."""
        added = []
        for audio in files:
            entry = FileEntry(file=audio)
            self._entries[entry.id] = entry
            added.append(entry)
        if added:
            logger.info("Queued %d file(s)", len(added))
        return added

    def get(self, file_id: str) -> FileEntry:
        try:
            return self._entries[file_id]
        except KeyError:
            raise FileEntryNotFoundError(file_id) from None

    def remove(self, file_id: str) -> bool:
        """Drop an entry in any state. Returns False if the id was unknown."""
        entry = self._entries.pop(file_id, None)
        if entry is None:
            return False
        logger.info("Removed file %s (%s, status=%s)", file_id, entry.file_name, entry.status)
        return True

    def clear(self) -> None:
        self._entries.clear()

    # -- queries --

    def pending(self) -> list[FileEntry]:
        """Entries still waiting to be processed, in insertion order."""
        return [e for e in self._entries.values() if e.status == FileStatus.pending]

    def counts(self) -> dict[str, int]:
        counts = {status.value: 0 for status in FileStatus}
        for entry in self._entries.values():
            counts[entry.status.value] += 1
        return counts

    # -- transitions (batch processor only) --

    def _transition(self, entry: FileEntry, target: FileStatus) -> None:
        if target not in _ALLOWED_TRANSITIONS[entry.status]:
            raise InvalidTransitionError(entry.id, entry.status.value, target.value)
        entry.status = target

    def mark_processing(self, entry: FileEntry, progress: int) -> None:
        self._transition(entry, FileStatus.processing)
        entry.progress = max(entry.progress, min(progress, 100))

    def mark_completed(self, entry: FileEntry, transcription: str) -> None:
        self._transition(entry, FileStatus.completed)
        entry.progress = 100
        entry.transcription = transcription
        entry.error = None

    def mark_failed(self, entry: FileEntry, message: str) -> None:
        self._transition(entry, FileStatus.error)
        entry.transcription = None
        entry.error = message or "Transcription failed"
