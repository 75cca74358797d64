"""
Transcription module - Speech-to-text abstraction layer.

Factory function for creating transcriber instances based on configuration.
"""

from .base import BaseTranscriber

__all__ = ["BaseTranscriber", "create_transcriber"]


def create_transcriber(provider: str = "http", **kwargs) -> BaseTranscriber:
    """
    Factory function to create a transcriber instance.

    Args:
        provider: Transcriber name ("http" / "openai" for the remote API)
        **kwargs: Provider-specific configuration

    Returns:
        BaseTranscriber implementation instance

    Raises:
        ValueError: If provider is unknown
    """
    if provider in ("http", "openai"):
        from .client import TranscriptionClient

        return TranscriptionClient(**kwargs)
    else:
        raise ValueError(f"Unknown transcription provider: {provider}")
