import logging
import queue
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, List, Mapping, Optional, Sequence, Union

from ...domain.errors import ServerError

logger = logging.getLogger(__name__)

Params = Union[Sequence[Any], Mapping[str, Any]]

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    name TEXT,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    location TEXT,
    profession TEXT,
    about TEXT,
    qualities TEXT,
    looking_for TEXT,
    joined TEXT,
    photo TEXT,
    dob TEXT,
    show_age INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS messages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    sender_id TEXT NOT NULL,
    receiver_id TEXT NOT NULL,
    content TEXT,
    timestamp TEXT NOT NULL,
    is_read INTEGER NOT NULL DEFAULT 0,
    FOREIGN KEY(sender_id) REFERENCES users(id) ON DELETE CASCADE,
    FOREIGN KEY(receiver_id) REFERENCES users(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_messages_sender_receiver
    ON messages(sender_id, receiver_id);

CREATE INDEX IF NOT EXISTS idx_messages_receiver_unread
    ON messages(receiver_id, is_read);
"""

# Columns added after the first release. Each statement must stay additive
# so that it can be replayed against any older database.
_MIGRATIONS = (
    "ALTER TABLE users ADD COLUMN show_photo INTEGER NOT NULL DEFAULT 1",
    "ALTER TABLE users ADD COLUMN is_verified INTEGER NOT NULL DEFAULT 0",
    "ALTER TABLE users ADD COLUMN verification_code TEXT",
)


@dataclass(slots=True)
class ExecuteResult:
    last_row_id: Optional[int]
    row_count: int


class SQLiteDatabase:
    """SQLite store accessed through a bounded pool of connections."""

    def __init__(self, path: Path, pool_size: int = 5, timeout: float = 10.0) -> None:
        if pool_size < 1:
            raise ValueError("pool_size must be at least 1")
        path.parent.mkdir(parents=True, exist_ok=True)
        self._path = path
        self._timeout = timeout
        self._pool_size = pool_size
        self._pool: "queue.Queue[sqlite3.Connection]" = queue.Queue(maxsize=pool_size)
        self._created = 0
        self._create_lock = threading.Lock()
        self._closed = False
        self._initialize()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, timeout=self._timeout, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        if self._closed:
            raise ServerError("Database is closed")
        conn: Optional[sqlite3.Connection] = None
        try:
            conn = self._pool.get_nowait()
        except queue.Empty:
            with self._create_lock:
                if self._created < self._pool_size:
                    conn = self._connect()
                    self._created += 1
        if conn is None:
            try:
                conn = self._pool.get(timeout=self._timeout)
            except queue.Empty as exc:
                raise ServerError("Database connection pool exhausted") from exc
        try:
            yield conn
        finally:
            if self._closed:
                conn.close()
            else:
                self._pool.put(conn)

    def _initialize(self) -> None:
        with self._connection() as conn:
            with conn:
                conn.executescript(_SCHEMA)
            self._apply_migrations(conn)
        logger.info("Database ready at %s", self._path)

    @staticmethod
    def _apply_migrations(conn: sqlite3.Connection) -> None:
        for statement in _MIGRATIONS:
            try:
                with conn:
                    conn.execute(statement)
                logger.info("Applied migration: %s", statement)
            except sqlite3.OperationalError as exc:
                if "duplicate column" not in str(exc).lower():
                    raise
                logger.debug("Migration already applied: %s", statement)

    # Query interface ------------------------------------------------------
    def execute(self, sql: str, params: Params = ()) -> ExecuteResult:
        with self._connection() as conn:
            with conn:
                cur = conn.execute(sql, params)
            return ExecuteResult(last_row_id=cur.lastrowid, row_count=cur.rowcount)

    def fetch_one(self, sql: str, params: Params = ()) -> Optional[sqlite3.Row]:
        with self._connection() as conn:
            cur = conn.execute(sql, params)
            return cur.fetchone()

    def fetch_all(self, sql: str, params: Params = ()) -> List[sqlite3.Row]:
        with self._connection() as conn:
            cur = conn.execute(sql, params)
            return cur.fetchall()

    def close(self) -> None:
        self._closed = True
        while True:
            try:
                conn = self._pool.get_nowait()
            except queue.Empty:
                break
            conn.close()
