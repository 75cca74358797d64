"""
Plain-text transcript export.

Both builders are pure: they read results and return an ExportArtifact
without touching the queue or the result store.
"""

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from batchscribe.core.exceptions import ExportError
from batchscribe.core.models import ExportArtifact, ResultEntry

logger = logging.getLogger(__name__)

SINGLE_SUFFIX = "_transcription.txt"
ALL_FILENAME = "all_transcriptions.txt"

_EXTENSION_RE = re.compile(r"\.[^/.]+$")


def export_one(file_name: str, transcription: str) -> ExportArtifact:
    """Build the artifact for one transcript, named ``<stem>_transcription.txt``."""
    stem = _EXTENSION_RE.sub("", file_name)
    return ExportArtifact(filename=f"{stem}{SINGLE_SUFFIX}", content=transcription)


def export_all(results: Iterable[ResultEntry]) -> ExportArtifact:
    """Concatenate every transcript under a ``=== <file name> ===`` header."""
    sections = [f"=== {r.file_name} ===\n{r.transcription}\n\n" for r in results]
    return ExportArtifact(filename=ALL_FILENAME, content="".join(sections))


def write_artifact(artifact: ExportArtifact, directory: str | Path) -> Path:
    """Write ``artifact`` into ``directory`` as UTF-8 and return the file path.

    Raises:
        ExportError: If the directory cannot be created or the file written.
    """
    target_dir = Path(directory).expanduser()
    path = target_dir / artifact.filename
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(artifact.to_bytes())
    except OSError as exc:
        raise ExportError(f"Failed to write {path}: {exc}") from exc
    logger.info("Exported %s", path)
    return path
