"""Thread-local SQLite connections.

Flask serves requests from a thread pool and the rain-alert loop runs in its
own thread, so every thread gets its own sqlite3 connection which is reused
until the pool is closed.

Usage:
    pool = ConnectionPool("/path/to/aeris.db")

    with pool.get_connection() as conn:
        conn.execute("SELECT * FROM weather_cache")
"""

import sqlite3
import threading
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from src.utils.logging import get_logger

logger = get_logger(__name__)

# Seconds to wait for a write lock held by another connection
BUSY_TIMEOUT_SECONDS = 30.0


class ConnectionPool:
    """One SQLite connection per thread, opened lazily."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        self._local = threading.local()
        self._lock = threading.Lock()
        self._connections: dict[int, sqlite3.Connection] = {}

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self.db_path,
            check_same_thread=False,
            timeout=BUSY_TIMEOUT_SECONDS,
        )
        conn.row_factory = sqlite3.Row
        # WAL lets the API keep reading while the alert job writes
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _thread_connection(self) -> sqlite3.Connection:
        conn: sqlite3.Connection | None = getattr(self._local, "connection", None)
        if conn is not None:
            try:
                conn.execute("SELECT 1")
                return conn
            except sqlite3.Error:
                logger.warning(
                    "Discarding broken SQLite connection",
                    extra={"db_path": str(self.db_path)},
                )

        conn = self._open()
        self._local.connection = conn
        with self._lock:
            # Drop connections left behind by threads that have exited
            alive = {t.ident for t in threading.enumerate()}
            for thread_id in [tid for tid in self._connections if tid not in alive]:
                self._close_quietly(self._connections.pop(thread_id))
            self._connections[threading.get_ident()] = conn

        logger.debug(
            "Opened SQLite connection",
            extra={"db_path": str(self.db_path), "open_connections": len(self._connections)},
        )
        return conn

    @staticmethod
    def _close_quietly(conn: sqlite3.Connection) -> None:
        try:
            conn.close()
        except sqlite3.Error:
            pass

    @contextmanager
    def get_connection(self) -> Generator[sqlite3.Connection]:
        """Yield this thread's connection, rolling back if the block raises.

        The connection stays open after the block so the next call reuses it.
        """
        conn = self._thread_connection()
        try:
            yield conn
        except Exception:
            try:
                conn.rollback()
            except sqlite3.Error:
                pass
            raise

    def close_all(self) -> None:
        """Close every connection in the pool (application shutdown)."""
        with self._lock:
            for conn in self._connections.values():
                self._close_quietly(conn)
            self._connections.clear()
        self._local.connection = None
        logger.info("SQLite connections closed", extra={"db_path": str(self.db_path)})

    def connection_count(self) -> int:
        """Return the number of open connections."""
        with self._lock:
            return len(self._connections)
