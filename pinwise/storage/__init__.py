"""Session persistence — per-conversation allocation maps and history."""

from pinwise.storage.scheduler import CleanupScheduler
from pinwise.storage.sessions import (
    SessionNotFound,
    SessionStore,
    SessionStoreError,
    new_session_id,
)

__all__ = [
    "CleanupScheduler",
    "SessionNotFound",
    "SessionStore",
    "SessionStoreError",
    "new_session_id",
]
