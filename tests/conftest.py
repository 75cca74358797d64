"""Shared pytest fixtures for BatchScribe test suite.

Provides audio payload helpers, a mock transcriber, and isolation of the
process-wide singletons (settings cache, session store, batch processor,
model catalog).
"""

from unittest.mock import AsyncMock

import pytest

from batchscribe.core.config import get_settings
from batchscribe.core.models import AudioFile
from batchscribe.services.batch import reset_batch_processor
from batchscribe.services.catalog import reset_model_catalog
from batchscribe.services.storage.session import SessionStore, reset_session_store

# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolate_singletons(monkeypatch):
    """Fresh settings and process-wide state for every test."""
    for var in (
        "API_KEY",
        "BASE_URL",
        "AUTH_SCHEME",
        "STRICT_FORMAT_CHECK",
        "REQUEST_TIMEOUT",
        "INITIAL_PROGRESS",
    ):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    reset_session_store()
    reset_batch_processor()
    reset_model_catalog()
    yield
    get_settings.cache_clear()
    reset_session_store()
    reset_batch_processor()
    reset_model_catalog()


# ---------------------------------------------------------------------------
# Audio Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_audio():
    """Factory for small in-memory AudioFile payloads.

    Returns:
        Callable[[str, bytes], AudioFile]
    """

    def _make(name: str, content: bytes = b"RIFF....WAVEfmt ") -> AudioFile:
        return AudioFile(name=name, content=content)

    return _make


@pytest.fixture
def store():
    """A SessionStore with the default (non-strict) picker behavior."""
    return SessionStore(strict_format_check=False)


# ---------------------------------------------------------------------------
# Transcriber Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_transcriber():
    """Create a mock transcriber for unit testing.

    Returns:
        AsyncMock: A mock implementing the BaseTranscriber interface that
        returns "transcript of <file name>" for every call.
    """
    from batchscribe.services.transcription.base import BaseTranscriber

    transcriber = AsyncMock(spec=BaseTranscriber)

    async def _transcribe(file, model_id, api_key, base_url):
        return f"transcript of {file.name}"

    transcriber.transcribe.side_effect = _transcribe
    return transcriber
