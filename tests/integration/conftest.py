"""Integration test fixtures for BatchScribe.

Provides an async HTTP client bound to a fresh FastAPI app, with the
process-wide batch processor wired to a mock transcriber so no request
leaves the test process.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from batchscribe.api.app import create_app
from batchscribe.services import batch
from batchscribe.services.batch import BatchProcessor


@pytest.fixture
def app():
    """Create a fresh FastAPI application instance."""
    return create_app()


@pytest.fixture
def processor(mock_transcriber):
    """Install a BatchProcessor backed by the mock transcriber as the app-wide one."""
    instance = BatchProcessor(transcriber=mock_transcriber)
    batch._processor = instance
    return instance


@pytest.fixture
async def async_client(app, processor):
    """AsyncClient talking to the app in-process."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
