"""
Batch run REST endpoints.

``POST /batch/run`` waits for the whole batch by default. With
``background=true`` the preconditions are checked, the run is scheduled on
the event loop and the request returns immediately; clients then poll
``GET /files`` or ``GET /batch/status``.
"""

import asyncio
import logging

from fastapi import APIRouter, Query

from batchscribe.core.config import get_settings
from batchscribe.core.models import BatchRunRequest, BatchStatusResponse, BatchSummary, FileEntry
from batchscribe.services.batch import BatchProcessor, get_batch_processor
from batchscribe.services.storage.session import SessionStore, get_session_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/batch", tags=["batch"])

# Strong references so scheduled runs are not garbage-collected mid-flight
_background_tasks: set[asyncio.Task] = set()


async def _run_in_background(
    processor: BatchProcessor,
    store: SessionStore,
    batch: list[FileEntry],
    model: str,
    api_key: str,
    base_url: str,
) -> None:
    try:
        await processor.process(store, batch, model, api_key, base_url)
    except Exception:
        logger.exception("Background batch crashed")


@router.post("/run", response_model=BatchSummary)
async def run_batch(
    body: BatchRunRequest | None = None,
    background: bool = Query(False),
):
    """Transcribe every pending file sequentially.

    Missing ``model``, ``api_key`` or ``base_url`` fall back to settings.
    """
    settings = get_settings()
    body = body or BatchRunRequest()
    model = body.model or settings.default_model
    api_key = body.api_key if body.api_key is not None else settings.api_key
    base_url = body.base_url or settings.base_url

    processor = get_batch_processor()
    store = get_session_store()

    if not background:
        return await processor.run(store, model, api_key, base_url)

    # Claimed before scheduling so a concurrent request gets 409
    batch = processor.reserve(store, api_key)
    task = asyncio.create_task(
        _run_in_background(processor, store, batch, model, api_key, base_url)
    )
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return BatchSummary(processed=[e.id for e in batch])


@router.get("/status", response_model=BatchStatusResponse)
async def batch_status():
    """Report whether a run is in progress and how many files are in each state."""
    return BatchStatusResponse(
        running=get_batch_processor().is_running,
        counts=get_session_store().queue.counts(),
    )
