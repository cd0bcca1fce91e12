"""Shared helper functions for database operations."""

import os
import sqlite3
from pathlib import Path

from src.config import Config
from src.utils.logging import get_logger

logger = get_logger(__name__)


def check_database_connectivity(db_path: Path | None = None) -> tuple[bool, str | None]:
    """Check if the database is accessible.

    Checks that the directory exists and is writable, that an existing file is
    readable/writable, and that a trivial query succeeds.

    Args:
        db_path: Optional path to database file. Uses Config.DATABASE_PATH if not provided.

    Returns:
        Tuple of (success: bool, error_message: str | None)
    """
    db_path = db_path or Config.DATABASE_PATH
    logger.debug("Checking database connectivity", extra={"db_path": str(db_path)})

    parent_dir = db_path.parent
    if not parent_dir.exists():
        error = f"Database directory does not exist: {parent_dir}"
        logger.error("Database connectivity check failed", extra={"error": error})
        return False, error

    if not os.access(parent_dir, os.W_OK):
        error = f"Database directory is not writable: {parent_dir}"
        logger.error("Database connectivity check failed", extra={"error": error})
        return False, error

    if db_path.exists() and not os.access(db_path, os.R_OK | os.W_OK):
        error = f"Database file is not readable/writable: {db_path}"
        logger.error("Database connectivity check failed", extra={"error": error})
        return False, error

    try:
        conn = sqlite3.connect(db_path)
        try:
            conn.execute("SELECT 1")
        finally:
            conn.close()
    except sqlite3.OperationalError as e:
        message = str(e)
        if "unable to open database file" in message:
            error = f"Cannot open database file: {db_path}. Check file permissions."
        elif "database is locked" in message:
            error = f"Database is locked: {db_path}. Another process may be using it."
        elif "disk I/O error" in message:
            error = f"Disk I/O error on {db_path}. Check disk health and free space."
        else:
            error = f"Database error: {message}"
        logger.error("Database connectivity check failed", extra={"error": error})
        return False, error
    except Exception as e:
        error = f"Unexpected database error: {e}"
        logger.error("Database connectivity check failed", extra={"error": error}, exc_info=True)
        return False, error

    logger.debug("Database connectivity check passed", extra={"db_path": str(db_path)})
    return True, None
