"""Service layer: intake, queue/result storage, transcription and batch processing."""
