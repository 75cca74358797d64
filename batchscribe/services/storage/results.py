"""In-memory store of completed transcripts, in completion order."""

from collections.abc import Iterator
from datetime import UTC, datetime

from batchscribe.core.exceptions import ResultNotFoundError
from batchscribe.core.models import ResultEntry


class ResultStore:
    """Append-only list of ResultEntry records, at most one per file id."""

    def __init__(self) -> None:
        self._results: dict[str, ResultEntry] = {}

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[ResultEntry]:
        return iter(list(self._results.values()))

    def __contains__(self, file_id: object) -> bool:
        return file_id in self._results

    def append(
        self,
        file_id: str,
        file_name: str,
        transcription: str,
        timestamp: datetime | None = None,
    ) -> ResultEntry:
        if file_id in self._results:
            raise ValueError(f"Result already recorded for file {file_id}")
        result = ResultEntry(
            id=file_id,
            file_name=file_name,
            transcription=transcription,
            timestamp=timestamp or datetime.now(UTC),
        )
        self._results[file_id] = result
        return result

    def get(self, file_id: str) -> ResultEntry:
        try:
            return self._results[file_id]
        except KeyError:
            raise ResultNotFoundError(file_id) from None

    def remove(self, file_id: str) -> bool:
        return self._results.pop(file_id, None) is not None

    def entries(self) -> list[ResultEntry]:
        return list(self._results.values())

    def clear(self) -> None:
        self._results.clear()
