"""
Transcription model catalog.

A static default list is always available. ``ModelCatalog.refresh`` asks the
remote ``/v1/models`` endpoint for the models it serves and keeps only the
speech-to-text ones (identifiers containing "whisper" or "transcribe").
"""

import logging

import httpx

from batchscribe.core.config import get_settings
from batchscribe.core.exceptions import ModelDiscoveryError
from batchscribe.core.models import ModelDescriptor

logger = logging.getLogger(__name__)

MODELS_PATH = "/v1/models"
_TRANSCRIPTION_MARKERS = ("whisper", "transcribe")

DEFAULT_MODELS: tuple[ModelDescriptor, ...] = (
    ModelDescriptor(
        identifier="whisper-1",
        display_name="Whisper-1 (Standard)",
        description="OpenAI's standard production Whisper model - best for most use cases",
        provider="OpenAI",
        speed="Fast",
        accuracy="High",
    ),
    ModelDescriptor(
        identifier="whisper-large-v3",
        display_name="Whisper Large v3",
        description="Latest and most accurate Whisper model - best for challenging audio",
        provider="OpenAI",
        speed="Slower",
        accuracy="Highest",
    ),
    ModelDescriptor(
        identifier="whisper-large-v2",
        display_name="Whisper Large v2",
        description="Previous generation large model - good balance of speed and accuracy",
        provider="OpenAI",
        speed="Medium",
        accuracy="Very High",
    ),
    ModelDescriptor(
        identifier="azure/whisper-1",
        display_name="Azure Whisper",
        description="Azure OpenAI Whisper - good for enterprise use cases",
        provider="Azure",
        speed="Fast",
        accuracy="High",
    ),
)


def is_transcription_model(identifier: str) -> bool:
    lowered = identifier.lower()
    return any(marker in lowered for marker in _TRANSCRIPTION_MARKERS)


def _descriptor_from_payload(item: dict) -> ModelDescriptor:
    identifier = str(item["id"])
    owner = str(item.get("owned_by") or "")
    return ModelDescriptor(
        identifier=identifier,
        display_name=identifier,
        description=f"Served by {owner}" if owner else "",
        provider=owner,
    )


async def fetch_models(
    api_key: str,
    base_url: str,
    api_key_header: str | None = None,
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[ModelDescriptor]:
    """Fetch the remote model list and keep the transcription models.

    Args:
        api_key: Credential sent in the API-key header.
        base_url: Root URL of the remote API.
        api_key_header: Header name (falls back to settings).
        timeout: Request timeout in seconds; None waits indefinitely.
        transport: Optional ``httpx`` transport for tests.

    Returns:
        Descriptors in the order the server listed them (possibly empty).

    Raises:
        ModelDiscoveryError: On transport failure, non-success status, or a
            body that is not a model list.
    """
    settings = get_settings()
    header = api_key_header or settings.api_key_header
    url = f"{base_url.rstrip('/')}{MODELS_PATH}"

    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        try:
            response = await client.get(url, headers={header: api_key})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise ModelDiscoveryError(
                f"Failed to fetch models: {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise ModelDiscoveryError(f"Failed to fetch models: {exc}") from exc

    items = payload.get("data") if isinstance(payload, dict) else payload
    if not isinstance(items, list):
        raise ModelDiscoveryError("Failed to fetch models: unexpected response shape")

    return [
        _descriptor_from_payload(item)
        for item in items
        if isinstance(item, dict) and "id" in item and is_transcription_model(str(item["id"]))
    ]


class ModelCatalog:
    """The models currently offered to the user.

    Starts with :data:`DEFAULT_MODELS`; a successful non-empty discovery
    replaces it.
    """

    def __init__(
        self, models: tuple[ModelDescriptor, ...] | list[ModelDescriptor] = DEFAULT_MODELS
    ) -> None:
        self._models = list(models)
        self.discovered = False

    @property
    def models(self) -> list[ModelDescriptor]:
        return list(self._models)

    def identifiers(self) -> list[str]:
        return [m.identifier for m in self._models]

    def get(self, identifier: str) -> ModelDescriptor | None:
        return next((m for m in self._models if m.identifier == identifier), None)

    async def refresh(self, api_key: str, base_url: str, **kwargs) -> list[ModelDescriptor]:
        """Replace the catalog with the remote transcription models, if any.

        Raises:
            ModelDiscoveryError: Propagated from :func:`fetch_models`; the
                current catalog is left untouched.
        """
        found = await fetch_models(api_key, base_url, **kwargs)
        if found:
            self._models = found
            self.discovered = True
            logger.info("Discovered %d transcription model(s)", len(found))
        else:
            logger.info("No transcription models discovered; keeping current catalog")
        return self.models


_catalog: ModelCatalog | None = None


def get_model_catalog() -> ModelCatalog:
    """Return the process-wide ModelCatalog."""
    global _catalog  # noqa: PLW0603
    if _catalog is None:
        _catalog = ModelCatalog()
    return _catalog


def reset_model_catalog() -> None:
    global _catalog  # noqa: PLW0603
    _catalog = None
