"""HTTP transcription client for OpenAI-compatible ``/audio/transcriptions`` endpoints.

One POST per call, no retries. The request asks for ``response_format=text``
but proxies in front of the model may still answer with a JSON envelope,
so both response shapes are accepted.
"""

import json
import logging
import mimetypes

import httpx

from batchscribe.core.config import get_settings
from batchscribe.core.exceptions import ApiError
from batchscribe.core.models import AudioFile
from batchscribe.services.transcription.base import BaseTranscriber

logger = logging.getLogger(__name__)

TRANSCRIPTIONS_PATH = "/audio/transcriptions"


def build_auth_headers(api_key: str, scheme: str, api_key_header: str) -> dict[str, str]:
    """Return the header carrying ``api_key`` for the given auth scheme.

    Args:
        api_key: The credential.
        scheme: "bearer" (``Authorization: Bearer <key>``) or "api_key".
        api_key_header: Header name used by the "api_key" scheme.
    """
    if scheme == "bearer":
        return {"Authorization": f"Bearer {api_key}"}
    if scheme == "api_key":
        return {api_key_header: api_key}
    raise ValueError(f"Unknown auth scheme: {scheme}")


def extract_error_message(response: httpx.Response) -> str:
    """Pull a readable message out of an error response.

    Prefers the OpenAI envelope ``{"error": {"message": ...}}``; falls back
    to a generic status-code message.
    """
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        for key in ("detail", "message"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value

    return f"API request failed: {response.status_code}"


def extract_transcript(body: str) -> str:
    """Return the transcript from a raw-text or JSON response body."""
    try:
        payload = json.loads(body)
    except ValueError:
        return body.strip()

    if isinstance(payload, dict) and isinstance(payload.get("text"), str):
        return payload["text"].strip()
    if isinstance(payload, str):
        return payload.strip()
    # Some other JSON value (a bare number, a list): keep the literal body
    return body.strip()


class TranscriptionClient(BaseTranscriber):
    """Sends audio files to a remote transcription API with ``httpx``.

    Args:
        auth_scheme: "bearer" or "api_key" (falls back to settings).
        api_key_header: Header name for the "api_key" scheme (falls back to settings).
        timeout: Seconds before giving up on a request; None waits indefinitely.
        transport: Optional ``httpx`` transport (tests inject ``httpx.MockTransport``).
        settings: Optional Settings instance (defaults to get_settings()).
    """

    def __init__(
        self,
        auth_scheme: str | None = None,
        api_key_header: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        settings=None,
    ) -> None:
        self._settings = settings or get_settings()
        self._auth_scheme = auth_scheme or self._settings.auth_scheme
        self._api_key_header = api_key_header or self._settings.api_key_header
        self._timeout = timeout if timeout is not None else self._settings.request_timeout
        self._transport = transport

    async def transcribe(
        self,
        file: AudioFile,
        model_id: str,
        api_key: str,
        base_url: str,
    ) -> str:
        url = f"{base_url.rstrip('/')}{TRANSCRIPTIONS_PATH}"
        content_type = mimetypes.guess_type(file.name)[0] or "application/octet-stream"
        headers = build_auth_headers(api_key, self._auth_scheme, self._api_key_header)

        logger.info("Transcribing %s with model %s", file.name, model_id)
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    url,
                    headers=headers,
                    data={"model": model_id, "response_format": "text"},
                    files={"file": (file.name, file.content, content_type)},
                )
            except httpx.HTTPError as exc:
                logger.warning("Transcription request for %s failed: %s", file.name, exc)
                raise ApiError(f"Network error: {exc}") from exc

        if not response.is_success:
            message = extract_error_message(response)
            logger.warning(
                "Transcription API returned %s for %s: %s",
                response.status_code,
                file.name,
                message,
            )
            raise ApiError(message, upstream_status=response.status_code)

        return extract_transcript(response.text)
