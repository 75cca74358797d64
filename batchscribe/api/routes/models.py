"""
Model catalog REST endpoints.
"""

from fastapi import APIRouter

from batchscribe.core.config import get_settings
from batchscribe.core.models import ModelDescriptor, ModelRefreshRequest
from batchscribe.services.catalog import get_model_catalog

router = APIRouter(prefix="/models", tags=["models"])


@router.get("", response_model=list[ModelDescriptor])
async def list_models():
    """Return the active catalog (static defaults until a refresh succeeds)."""
    return get_model_catalog().models


@router.post("/refresh", response_model=list[ModelDescriptor])
async def refresh_models(body: ModelRefreshRequest | None = None):
    """Discover transcription models from the remote ``/v1/models`` endpoint.

    A discovery failure returns a 502 envelope and leaves the catalog as it was.
    """
    settings = get_settings()
    body = body or ModelRefreshRequest()
    api_key = body.api_key if body.api_key is not None else settings.api_key
    base_url = body.base_url or settings.base_url
    return await get_model_catalog().refresh(
        api_key, base_url, timeout=settings.request_timeout
    )
