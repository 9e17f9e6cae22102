"""ReferenceDatabase — SQLite-backed pin, knowledge and device-pattern lookup.

Uses stdlib sqlite3 only.  The database is read-only to the rest of the
package; it is populated from :mod:`pinwise.reference.seed` on first access.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any

from pinwise.config import (
    CONTEXT_MAX_DEVICES,
    CONTEXT_MAX_KNOWLEDGE,
    CONTEXT_MAX_PINS,
    CONTEXT_SEARCH_WORDS,
)
from pinwise.models.pins import MalformedPin, normalize_pin
from pinwise.reference.records import (
    DevicePattern,
    KnowledgeChunk,
    PinInfo,
    ReferenceContext,
)

logger = logging.getLogger(__name__)

_SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS pins (
    pin TEXT PRIMARY KEY,
    port TEXT NOT NULL,
    number INTEGER NOT NULL,
    lqfp48 INTEGER,
    type TEXT NOT NULL DEFAULT 'I/O',
    five_tolerant INTEGER NOT NULL DEFAULT 0,
    reset_state TEXT NOT NULL DEFAULT '',
    functions TEXT NOT NULL DEFAULT '[]',
    notes TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS knowledge (
    id TEXT PRIMARY KEY,
    topic TEXT NOT NULL,
    content TEXT NOT NULL,
    keywords TEXT NOT NULL DEFAULT '[]'
);

CREATE TABLE IF NOT EXISTS device_patterns (
    id TEXT PRIMARY KEY,
    device_name TEXT NOT NULL,
    device_type TEXT NOT NULL DEFAULT '',
    interface_type TEXT NOT NULL,
    default_pins TEXT NOT NULL DEFAULT '{}',
    requirements TEXT NOT NULL DEFAULT '',
    notes TEXT NOT NULL DEFAULT '',
    keywords TEXT NOT NULL DEFAULT ''
);

CREATE INDEX IF NOT EXISTS idx_pins_port ON pins(port);
CREATE INDEX IF NOT EXISTS idx_knowledge_topic ON knowledge(topic);
"""

# Rows taken per search word when gathering context for a message
_PER_WORD_PINS = 3
_PER_WORD_KNOWLEDGE = 2
_PER_WORD_DEVICES = 2


class ReferenceDatabase:
    """Read-only microcontroller reference data.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file.  Use ``':memory:'`` for
        in-memory databases (useful for testing).
    auto_seed:
        If *True* (default), seed the database with the bundled reference
        data on first access if the pins table is empty.
    """

    def __init__(self, db_path: str | Path = ":memory:", *, auto_seed: bool = True) -> None:
        self._db_path = str(db_path)
        self._conn: sqlite3.Connection | None = None
        self._auto_seed = auto_seed
        self._lock = threading.RLock()

    @property
    def conn(self) -> sqlite3.Connection:
        """Lazy-initialise and return the database connection."""
        with self._lock:
            if self._conn is None:
                self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
                self._conn.row_factory = sqlite3.Row
                self._conn.executescript(_SCHEMA_SQL)
                self._conn.commit()
                if self._auto_seed and self._is_empty():
                    self._seed()
            return self._conn

    def _is_empty(self) -> bool:
        cur = self.conn.execute("SELECT COUNT(*) FROM pins")
        return cur.fetchone()[0] == 0

    def _seed(self) -> None:
        """Seed with the bundled pin, knowledge and device data."""
        from pinwise.reference.seed import DEVICE_PATTERNS, KNOWLEDGE, PINS

        for row in PINS:
            self.add_pin(PinInfo(**row))
        for row in KNOWLEDGE:
            self.add_knowledge(KnowledgeChunk(**row))
        for row in DEVICE_PATTERNS:
            self.add_device_pattern(DevicePattern(**row))
        logger.info(
            "Seeded reference data: %d pins, %d knowledge chunks, %d device patterns.",
            len(PINS), len(KNOWLEDGE), len(DEVICE_PATTERNS),
        )

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    # -- Loading -------------------------------------------------------------

    def add_pin(self, info: PinInfo) -> None:
        """Insert or replace a pin row."""
        with self._lock:
            self.conn.execute(
                """\
                INSERT OR REPLACE INTO pins (pin, port, number, lqfp48, type,
                                             five_tolerant, reset_state, functions, notes)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    info.pin,
                    info.port,
                    info.number,
                    info.lqfp48,
                    info.type,
                    int(info.five_tolerant),
                    info.reset_state,
                    json.dumps(info.functions),
                    info.notes,
                ),
            )
            self.conn.commit()

    def add_knowledge(self, chunk: KnowledgeChunk) -> None:
        """Insert or replace a knowledge chunk."""
        with self._lock:
            self.conn.execute(
                "INSERT OR REPLACE INTO knowledge (id, topic, content, keywords) VALUES (?, ?, ?, ?)",
                (chunk.id, chunk.topic, chunk.content, json.dumps(chunk.keywords)),
            )
            self.conn.commit()

    def add_device_pattern(self, pattern: DevicePattern) -> None:
        """Insert or replace a device connection pattern."""
        with self._lock:
            self.conn.execute(
                """\
                INSERT OR REPLACE INTO device_patterns (id, device_name, device_type,
                                                        interface_type, default_pins,
                                                        requirements, notes, keywords)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    pattern.id,
                    pattern.device_name,
                    pattern.device_type,
                    pattern.interface_type,
                    json.dumps(pattern.default_pins),
                    pattern.requirements,
                    pattern.notes,
                    pattern.keywords,
                ),
            )
            self.conn.commit()

    # -- Pins ----------------------------------------------------------------

    def get_pin(self, pin: str) -> PinInfo | None:
        """Fetch a single pin by name; spelling variants like ``pb06`` are accepted."""
        try:
            name = normalize_pin(pin)
        except MalformedPin:
            return None
        rows = self._query("SELECT * FROM pins WHERE pin = ?", (str(name),))
        return self._row_to_pin(rows[0]) if rows else None

    def list_pins(self) -> list[PinInfo]:
        """Return every pin in package order."""
        rows = self._query("SELECT * FROM pins ORDER BY lqfp48")
        return [self._row_to_pin(row) for row in rows]

    def search_pins(self, query: str, *, limit: int | None = None) -> list[PinInfo]:
        """Substring search over pin name, alternate functions and notes."""
        like = f"%{query}%"
        sql = "SELECT * FROM pins WHERE functions LIKE ? OR pin LIKE ? OR notes LIKE ?"
        rows = self._query(_limited(sql, limit), (like, like, like))
        return [self._row_to_pin(row) for row in rows]

    # -- Knowledge -----------------------------------------------------------

    def search_knowledge(self, query: str, *, limit: int | None = None) -> list[KnowledgeChunk]:
        """Substring search over knowledge keywords, content and topic."""
        like = f"%{query}%"
        sql = "SELECT * FROM knowledge WHERE keywords LIKE ? OR content LIKE ? OR topic LIKE ?"
        rows = self._query(_limited(sql, limit), (like, like, like))
        return [self._row_to_knowledge(row) for row in rows]

    def knowledge_by_topic(self, topic: str) -> list[KnowledgeChunk]:
        """Return every chunk filed under *topic*."""
        rows = self._query("SELECT * FROM knowledge WHERE topic = ?", (topic,))
        return [self._row_to_knowledge(row) for row in rows]

    # -- Device patterns -----------------------------------------------------

    def search_devices(self, query: str, *, limit: int | None = None) -> list[DevicePattern]:
        """Substring search over device keywords and names."""
        like = f"%{query}%"
        sql = "SELECT * FROM device_patterns WHERE keywords LIKE ? OR device_name LIKE ?"
        rows = self._query(_limited(sql, limit), (like, like))
        return [self._row_to_device(row) for row in rows]

    def find_device(self, name: str) -> DevicePattern | None:
        """Exact (case-insensitive) lookup of a device pattern by name."""
        rows = self._query(
            "SELECT * FROM device_patterns WHERE device_name = ? COLLATE NOCASE",
            (name.strip(),),
        )
        return self._row_to_device(rows[0]) if rows else None

    # -- Context -------------------------------------------------------------

    def context_for(self, message: str) -> ReferenceContext:
        """Gather reference rows relevant to a user message.

        The first few words longer than two characters are each searched
        across all three tables; results are deduplicated in first-seen
        order and capped per table.
        """
        words = [word for word in message.split() if len(word) > 2][:CONTEXT_SEARCH_WORDS]

        pins: dict[str, PinInfo] = {}
        knowledge: dict[str, KnowledgeChunk] = {}
        devices: dict[str, DevicePattern] = {}
        for word in words:
            for info in self.search_pins(word, limit=_PER_WORD_PINS):
                pins.setdefault(info.pin, info)
            for chunk in self.search_knowledge(word, limit=_PER_WORD_KNOWLEDGE):
                knowledge.setdefault(chunk.id, chunk)
            for pattern in self.search_devices(word, limit=_PER_WORD_DEVICES):
                devices.setdefault(pattern.id, pattern)

        return ReferenceContext(
            pins=list(pins.values())[:CONTEXT_MAX_PINS],
            knowledge=list(knowledge.values())[:CONTEXT_MAX_KNOWLEDGE],
            devices=list(devices.values())[:CONTEXT_MAX_DEVICES],
        )

    def count(self) -> dict[str, int]:
        """Row counts per table."""
        return {
            table: self._query(f"SELECT COUNT(*) FROM {table}")[0][0]
            for table in ("pins", "knowledge", "device_patterns")
        }

    # -- Internal ------------------------------------------------------------

    def _query(self, sql: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        with self._lock:
            return self.conn.execute(sql, params).fetchall()

    @staticmethod
    def _row_to_pin(row: sqlite3.Row) -> PinInfo:
        return PinInfo(
            pin=row["pin"],
            port=row["port"],
            number=row["number"],
            lqfp48=row["lqfp48"],
            type=row["type"],
            five_tolerant=bool(row["five_tolerant"]),
            reset_state=row["reset_state"],
            functions=json.loads(row["functions"]),
            notes=row["notes"],
        )

    @staticmethod
    def _row_to_knowledge(row: sqlite3.Row) -> KnowledgeChunk:
        return KnowledgeChunk(
            id=row["id"],
            topic=row["topic"],
            content=row["content"],
            keywords=json.loads(row["keywords"]),
        )

    @staticmethod
    def _row_to_device(row: sqlite3.Row) -> DevicePattern:
        return DevicePattern(
            id=row["id"],
            device_name=row["device_name"],
            device_type=row["device_type"],
            interface_type=row["interface_type"],
            default_pins=json.loads(row["default_pins"]),
            requirements=row["requirements"],
            notes=row["notes"],
            keywords=row["keywords"],
        )


def _limited(sql: str, limit: int | None) -> str:
    return f"{sql} LIMIT {int(limit)}" if limit is not None else sql
