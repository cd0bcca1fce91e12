"""SQLite plumbing shared by the weather cache and subscription mixins.

The schema lives in yoyo migration files under migrations/ and is brought
up to date whenever a Database is constructed.
"""

import sqlite3
from pathlib import Path
from typing import Any

from yoyo import get_backend, read_migrations

from src.config import Config
from src.utils.connection_pool import ConnectionPool
from src.utils.db_helpers import execute_with_timing, init_query_logging
from src.utils.logging import get_logger

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"


def apply_migrations(db_path: Path, migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
    """Apply pending yoyo migrations to a database file.

    Returns:
        Ids of the migrations that were applied (empty when up to date)
    """
    backend = get_backend(f"sqlite:///{db_path}")
    try:
        with backend.lock():
            pending = backend.to_apply(read_migrations(str(migrations_dir)))
            if pending:
                backend.apply_migrations(pending)
    finally:
        backend.connection.close()

    applied = [migration.id for migration in pending]
    if applied:
        logger.info("Database migrations applied", extra={"db_path": str(db_path), "migrations": applied})
    return applied


class DatabaseBase:
    """Connection pool, timed queries and schema setup."""

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = db_path or Config.DATABASE_PATH
        self._should_log_queries, self._slow_query_threshold_ms = init_query_logging()
        self._pool = ConnectionPool(self.db_path)
        apply_migrations(self.db_path)

    def close(self) -> None:
        self._pool.close_all()

    def _execute_with_timing(
        self,
        conn: sqlite3.Connection,
        query: str,
        params: tuple[Any, ...] = (),
    ) -> sqlite3.Cursor:
        return execute_with_timing(
            conn,
            query,
            params,
            should_log=self._should_log_queries,
            slow_query_threshold_ms=self._slow_query_threshold_ms,
        )

    def vacuum(self) -> int:
        """Rebuild the database file to release pages freed by deleted cache rows.

        VACUUM cannot run inside a transaction, so it uses its own
        autocommit connection rather than the pool.

        Returns:
            Bytes reclaimed

        Raises:
            sqlite3.Error: If the database is busy or unreadable
        """
        size_before = self.db_path.stat().st_size
        conn = sqlite3.connect(str(self.db_path), isolation_level=None)
        try:
            conn.execute("VACUUM")
        finally:
            conn.close()
        reclaimed = size_before - self.db_path.stat().st_size

        logger.info("VACUUM completed", extra={"db_path": str(self.db_path), "reclaimed_bytes": reclaimed})
        return reclaimed
