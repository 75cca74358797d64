"""BatchScribe: batch speech-to-text over an OpenAI-compatible API."""

__version__ = "0.1.0"
