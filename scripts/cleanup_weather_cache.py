#!/usr/bin/env python3
"""Weather cache cleanup for Aeris.

Deletes cached forecasts older than the cache TTL (they are never served
again) and then runs VACUUM to give the space back to the filesystem.

Usage:
    python scripts/cleanup_weather_cache.py [--max-age SECONDS]

Designed to run from a systemd timer (daily) or by hand.
"""

import argparse
import sqlite3
import sys
from pathlib import Path

# Add parent directory to path so we can import from src
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import Config
from src.db.models import db
from src.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


def cleanup(max_age_seconds: int) -> int:
    """Delete stale cache rows and vacuum.

    Returns:
        Process exit code (0 on success)
    """
    deleted = db.cleanup_stale_weather_cache(max_age_seconds)
    logger.info("Stale weather cache deleted", extra={"rows": deleted, "max_age_seconds": max_age_seconds})

    try:
        db.vacuum()
    except sqlite3.Error as e:
        logger.error("VACUUM failed", extra={"path": str(db.db_path), "error": str(e)}, exc_info=True)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Delete stale cached forecasts")
    parser.add_argument(
        "--max-age",
        type=int,
        default=Config.WEATHER_CACHE_TTL_SECONDS,
        help="Delete entries older than this many seconds (default: cache TTL)",
    )
    args = parser.parse_args(argv)

    setup_logging()
    return cleanup(args.max_age)


if __name__ == "__main__":
    sys.exit(main())
