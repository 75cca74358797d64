"""
File intake: extension allowlist and local folder collection.

Only the file name is inspected; payloads are never decoded or sniffed.
"""

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from batchscribe.core.models import AudioFile

logger = logging.getLogger(__name__)

ACCEPTED_FORMATS: tuple[str, ...] = (
    ".mp3",
    ".wav",
    ".mp4",
    ".m4a",
    ".flac",
    ".ogg",
    ".webm",
    ".aac",
)


def is_accepted(name: str) -> bool:
    """Return True if ``name`` ends with an accepted audio extension (case-insensitive)."""
    return name.lower().endswith(ACCEPTED_FORMATS)


def filter_accepted(files: Iterable[AudioFile]) -> list[AudioFile]:
    """Keep only files whose names pass :func:`is_accepted`, preserving order."""
    accepted = []
    for audio in files:
        if is_accepted(audio.name):
            accepted.append(audio)
        else:
            logger.debug("Dropping unsupported file: %s", audio.name)
    return accepted


def collect_folder(folder: str | Path) -> Iterator[AudioFile]:
    """Walk ``folder`` recursively and yield every regular file as an AudioFile.

    No filtering happens here; folder admissions are filtered by the session
    store like drag-and-drop uploads.

    Raises:
        NotADirectoryError: If ``folder`` is not an existing directory.
    """
    root = Path(folder).expanduser()
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")

    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        content = path.read_bytes()
        yield AudioFile(name=path.name, content=content, size=len(content))
