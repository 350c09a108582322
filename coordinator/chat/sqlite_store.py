"""SQLite-backed message store."""

import logging
import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path

from coordinator.exceptions import StoreUnavailable
from .models import Message
from .store import MessageStore, new_room_id

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS rooms (
    room_id TEXT PRIMARY KEY,
    debate_id INTEGER UNIQUE,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS messages (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    room_id TEXT NOT NULL,
    sender TEXT NOT NULL,
    content TEXT NOT NULL,
    timestamp TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_messages_room ON messages (room_id, seq);
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    expires_at REAL
);
"""


class SqliteMessageStore(MessageStore):
    """Durable store keeping rooms, messages and key/values in one SQLite file.

    Message order is the AUTOINCREMENT sequence, never the timestamp.
    """

    def __init__(self, db_path: str = "coordinator.db", clock=time.time):
        self.db_path = Path(db_path)
        self._clock = clock
        self._init_database()

    def _init_database(self) -> None:
        """Create tables and indexes if they do not exist yet."""
        with self._get_connection() as conn:
            conn.executescript(SCHEMA)
            columns = {row["name"] for row in conn.execute("PRAGMA table_info(kv)")}
            if "expires_at" not in columns:
                conn.execute("ALTER TABLE kv ADD COLUMN expires_at REAL")
            conn.commit()
            logger.info(f"Message store initialized at {self.db_path}")

    @contextmanager
    def _get_connection(self):
        """Get a database connection, translating driver errors."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            logger.error(f"Database error: {e}")
            raise StoreUnavailable(f"SQLite store failed: {e}") from e
        finally:
            if conn:
                conn.close()

    async def create_room(self) -> str:
        room_id = new_room_id()
        with self._get_connection() as conn:
            conn.execute("INSERT INTO rooms (room_id) VALUES (?)", (room_id,))
            conn.commit()
        return room_id

    async def map_debate_to_room(self, debate_id: int, room_id: str) -> str:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            # debate_id is UNIQUE: the first mapping wins, later ones are ignored.
            cursor.execute(
                "UPDATE OR IGNORE rooms SET debate_id = ? WHERE room_id = ? AND debate_id IS NULL",
                (debate_id, room_id),
            )
            conn.commit()
            cursor.execute("SELECT room_id FROM rooms WHERE debate_id = ?", (debate_id,))
            row = cursor.fetchone()
            if row is None:
                raise StoreUnavailable(
                    f"Room {room_id} could not be mapped to debate {debate_id}"
                )
            return row["room_id"]

    async def room_id_for(self, debate_id: int) -> str | None:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT room_id FROM rooms WHERE debate_id = ?", (debate_id,)
            ).fetchone()
            return row["room_id"] if row else None

    async def debate_id_for(self, room_id: str) -> int | None:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT debate_id FROM rooms WHERE room_id = ?", (room_id,)
            ).fetchone()
            return row["debate_id"] if row else None

    async def append(self, room_id: str, message: Message) -> None:
        with self._get_connection() as conn:
            conn.execute(
                "INSERT INTO messages (room_id, sender, content, timestamp) VALUES (?, ?, ?, ?)",
                (room_id, message.sender, message.content, message.timestamp),
            )
            conn.commit()

    async def all_messages(self, room_id: str) -> list[Message]:
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT sender, content, timestamp FROM messages WHERE room_id = ? ORDER BY seq",
                (room_id,),
            ).fetchall()
        return [
            Message(sender=row["sender"], content=row["content"], timestamp=row["timestamp"])
            for row in rows
        ]

    async def get(self, key: str) -> str | None:
        with self._get_connection() as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return row["value"] if row else None

    async def put(self, key: str, value: str) -> None:
        with self._get_connection() as conn:
            conn.execute(
                "INSERT INTO kv (key, value, expires_at) VALUES (?, ?, NULL) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, expires_at = NULL",
                (key, value),
            )
            conn.commit()

    async def claim(self, key: str, token: str, ttl: float | None = None) -> bool:
        now = self._clock()
        expires_at = now + ttl if ttl is not None else None
        with self._get_connection() as conn:
            # Only a claim whose expiry has passed may be taken over.
            cursor = conn.execute(
                "INSERT INTO kv (key, value, expires_at) VALUES (?, ?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value, "
                "expires_at = excluded.expires_at "
                "WHERE kv.expires_at IS NOT NULL AND kv.expires_at <= ?",
                (key, token, expires_at, now),
            )
            conn.commit()
            return cursor.rowcount == 1

    async def release(self, key: str, token: str) -> bool:
        with self._get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM kv WHERE key = ? AND value = ?", (key, token)
            )
            conn.commit()
            return cursor.rowcount == 1
