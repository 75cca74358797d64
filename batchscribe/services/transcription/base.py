"""
Abstract base class for speech-to-text providers.

The batch processor only depends on this interface, so tests and
alternative backends can stand in for the HTTP client.
"""

from abc import ABC, abstractmethod

from batchscribe.core.models import AudioFile


class BaseTranscriber(ABC):
    """Interface that every transcription provider must implement."""

    @abstractmethod
    async def transcribe(
        self,
        file: AudioFile,
        model_id: str,
        api_key: str,
        base_url: str,
    ) -> str:
        """Transcribe one audio file.

        Args:
            file: Audio payload and its name.
            model_id: Identifier of the remote model.
            api_key: Credential for the remote API.
            base_url: Root URL of the remote API.

        Returns:
            The trimmed transcript text.

        Raises:
            ApiError: If the remote service rejects the request.
        """
