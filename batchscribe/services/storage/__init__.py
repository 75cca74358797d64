"""
Storage module - In-memory session state and transcript export.
"""

from batchscribe.services.storage.export import export_all, export_one, write_artifact
from batchscribe.services.storage.queue import FileQueue
from batchscribe.services.storage.results import ResultStore
from batchscribe.services.storage.session import (
    SessionStore,
    get_session_store,
    reset_session_store,
)

__all__ = [
    "FileQueue",
    "ResultStore",
    "SessionStore",
    "export_all",
    "export_one",
    "get_session_store",
    "reset_session_store",
    "write_artifact",
]
