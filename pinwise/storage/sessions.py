"""SessionStore — SQLite-backed conversation sessions.

Each session row holds its allocation map and chat history as JSON.
Every write is a single transaction: a failed write leaves the previous
row untouched and surfaces as :class:`SessionStoreError`.
"""

from __future__ import annotations

import json
import logging
import secrets
import sqlite3
import threading
import time
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping

from pinwise.config import MAX_STORED_HISTORY, SESSION_MAX_AGE
from pinwise.models.allocation import Allocation, AllocationMap, dump_allocations, load_allocations
from pinwise.models.pins import normalize_pin
from pinwise.models.session import ChatMessage, Session

logger = logging.getLogger(__name__)

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS sessions (
    id            TEXT PRIMARY KEY,
    created_at    REAL NOT NULL,
    last_activity REAL NOT NULL,
    allocations   TEXT NOT NULL DEFAULT '{}',
    history       TEXT NOT NULL DEFAULT '[]',
    metadata      TEXT NOT NULL DEFAULT '{}'
);

CREATE INDEX IF NOT EXISTS idx_sessions_activity ON sessions(last_activity);
"""


class SessionStoreError(RuntimeError):
    """Raised when the backing database fails a read or write."""


class SessionNotFound(KeyError):
    """Raised when an operation addresses a session that does not exist."""

    def __init__(self, session_id: str) -> None:
        super().__init__(session_id)
        self.session_id = session_id

    def __str__(self) -> str:
        return f"Session not found: {self.session_id}"


def new_session_id() -> str:
    """32 hex characters from the OS random source."""
    return secrets.token_hex(16)


class SessionStore:
    """Persistent sessions with per-session serialization.

    Parameters
    ----------
    db_path:
        Path to the SQLite file.  Defaults to ``':memory:'``.
    clock:
        Returns the current time in epoch seconds; injectable for tests.
    """

    def __init__(
        self,
        db_path: str | Path = ":memory:",
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._db_path = str(db_path)
        self._clock = clock
        self._db_lock = threading.RLock()
        self._key_locks: dict[str, threading.Lock] = {}
        self._key_locks_guard = threading.Lock()
        try:
            self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(_SCHEMA)
            self._conn.commit()
        except sqlite3.Error as exc:
            raise SessionStoreError(f"Cannot open session database {self._db_path}: {exc}") from exc

    def close(self) -> None:
        with self._db_lock:
            self._conn.close()

    # ------------------------------------------------------------------
    # Locking
    # ------------------------------------------------------------------

    def lock(self, session_id: str) -> threading.Lock:
        """Lock serializing read-modify-write cycles on one session.

        Use as a context manager around load, process and :meth:`put`.
        """
        with self._key_locks_guard:
            return self._key_locks.setdefault(session_id, threading.Lock())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create(self, metadata: Mapping[str, Any] | None = None, *, session_id: str | None = None) -> Session:
        """Create and persist an empty session."""
        now = self._clock()
        session = Session(
            id=session_id or new_session_id(),
            created_at=now,
            last_activity=now,
            metadata=dict(metadata or {}),
        )
        self._execute(
            """\
            INSERT INTO sessions (id, created_at, last_activity, allocations, history, metadata)
            VALUES (?, ?, ?, '{}', '[]', ?)
            """,
            (session.id, now, now, json.dumps(session.metadata)),
        )
        logger.info("Created session %s", session.id)
        return session

    def get(self, session_id: str) -> Session | None:
        """Load a session, or *None* if it does not exist."""
        with self._db_lock:
            try:
                row = self._conn.execute(
                    "SELECT * FROM sessions WHERE id = ?", (session_id,)
                ).fetchone()
            except sqlite3.Error as exc:
                raise SessionStoreError(f"Cannot read session {session_id}: {exc}") from exc
        return self._row_to_session(row) if row is not None else None

    def get_or_create(
        self,
        session_id: str | None,
        metadata: Mapping[str, Any] | None = None,
    ) -> Session:
        """Load *session_id* and touch its activity time, or create a new session.

        An unknown id creates a session under that same id.
        """
        if session_id:
            session = self.get(session_id)
            if session is not None:
                session.last_activity = self._clock()
                self._execute(
                    "UPDATE sessions SET last_activity = ? WHERE id = ?",
                    (session.last_activity, session_id),
                )
                return session
        return self.create(metadata, session_id=session_id or None)

    def delete(self, session_id: str) -> bool:
        """Delete a session.  Returns True if a row was deleted."""
        deleted = self._execute("DELETE FROM sessions WHERE id = ?", (session_id,)) > 0
        with self._key_locks_guard:
            self._key_locks.pop(session_id, None)
        if deleted:
            logger.info("Deleted session %s", session_id)
        return deleted

    def cleanup_expired(self, max_age: float = SESSION_MAX_AGE) -> int:
        """Delete sessions idle for longer than *max_age* seconds."""
        cutoff = self._clock() - max_age
        with self._db_lock:
            try:
                with self._conn:
                    rows = self._conn.execute(
                        "SELECT id FROM sessions WHERE last_activity < ?", (cutoff,)
                    ).fetchall()
                    self._conn.execute("DELETE FROM sessions WHERE last_activity < ?", (cutoff,))
            except sqlite3.Error as exc:
                raise SessionStoreError(f"Session cleanup failed: {exc}") from exc

        expired = [row["id"] for row in rows]
        with self._key_locks_guard:
            for session_id in expired:
                self._key_locks.pop(session_id, None)
        if expired:
            logger.info("Cleaned up %d expired sessions", len(expired))
        return len(expired)

    def count(self) -> int:
        with self._db_lock:
            return self._conn.execute("SELECT COUNT(*) FROM sessions").fetchone()[0]

    def list_ids(self) -> list[str]:
        """Ids of every stored session, most recently active first."""
        with self._db_lock:
            rows = self._conn.execute(
                "SELECT id FROM sessions ORDER BY last_activity DESC"
            ).fetchall()
        return [row["id"] for row in rows]

    # ------------------------------------------------------------------
    # Allocation state
    # ------------------------------------------------------------------

    def put(
        self,
        session_id: str,
        allocations: Mapping[str, Allocation],
        history_delta: Iterable[ChatMessage] = (),
    ) -> Session:
        """Atomically store a new allocation map and append to the history.

        History is trimmed to the most recent messages.  On failure
        nothing is written.
        """
        with self._db_lock:
            session = self._require(session_id)
            history = (session.history + list(history_delta))[-MAX_STORED_HISTORY:]
            session.allocations = dict(allocations)
            session.history = history
            session.last_activity = self._clock()
            self._execute(
                """\
                UPDATE sessions SET allocations = ?, history = ?, last_activity = ?
                WHERE id = ?
                """,
                (
                    json.dumps(dump_allocations(session.allocations)),
                    json.dumps([msg.model_dump() for msg in history]),
                    session.last_activity,
                    session_id,
                ),
            )
        return session

    def replace_allocations(self, session_id: str, allocations: Mapping[str, Allocation]) -> Session:
        """Overwrite the allocation map, leaving history alone."""
        return self.put(session_id, allocations)

    def remove_pin(self, session_id: str, pin: str) -> bool:
        """Release one pin.  Returns True if it was allocated.

        Raises :class:`~pinwise.models.pins.MalformedPin` for an invalid pin.
        """
        name = normalize_pin(pin)
        with self._db_lock:
            session = self._require(session_id)
            if name not in session.allocations:
                return False
            allocations = dict(session.allocations)
            del allocations[name]
            self.put(session_id, allocations)
        logger.info("Released %s from session %s", name, session_id)
        return True

    def clear_allocations(self, session_id: str) -> Session:
        """Release every pin in the session."""
        return self.put(session_id, {})

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _require(self, session_id: str) -> Session:
        session = self.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def _execute(self, sql: str, params: tuple[Any, ...]) -> int:
        """Run one write in its own transaction and return the row count."""
        with self._db_lock:
            try:
                with self._conn:
                    cur = self._conn.execute(sql, params)
            except sqlite3.Error as exc:
                raise SessionStoreError(f"Session write failed: {exc}") from exc
            return cur.rowcount

    @staticmethod
    def _row_to_session(row: sqlite3.Row) -> Session:
        allocations: AllocationMap = load_allocations(json.loads(row["allocations"]))
        return Session(
            id=row["id"],
            created_at=row["created_at"],
            last_activity=row["last_activity"],
            allocations=allocations,
            history=[ChatMessage.model_validate(msg) for msg in json.loads(row["history"])],
            metadata=json.loads(row["metadata"]),
        )

