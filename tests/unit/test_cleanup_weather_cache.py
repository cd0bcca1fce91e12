"""Unit tests for the weather cache cleanup script."""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING
from unittest.mock import patch

from scripts.cleanup_weather_cache import cleanup, main

if TYPE_CHECKING:
    from src.db.models import Database


def _backdate(db: Database, location_id: str, seconds: int) -> None:
    updated = datetime.now(UTC).replace(tzinfo=None) - timedelta(seconds=seconds)
    with db._pool.get_connection() as conn:
        conn.execute(
            "UPDATE weather_cache SET updated_at = ? WHERE location_id = ?",
            (updated.isoformat(timespec="microseconds"), location_id),
        )
        conn.commit()


class TestCleanup:
    def test_deletes_only_stale_rows(self, test_database: Database) -> None:
        test_database.cache_weather("old", {"v": 1})
        test_database.cache_weather("fresh", {"v": 2})
        _backdate(test_database, "old", 7200)

        with patch("scripts.cleanup_weather_cache.db", test_database):
            exit_code = cleanup(max_age_seconds=3600)

        assert exit_code == 0
        assert test_database.get_cached_weather_entry("old") is None
        assert test_database.get_cached_weather_entry("fresh") is not None

    def test_vacuum_failure_sets_exit_code(self, test_database: Database) -> None:
        with (
            patch("scripts.cleanup_weather_cache.db", test_database),
            patch.object(test_database, "vacuum", side_effect=sqlite3.OperationalError("database is locked")),
        ):
            assert cleanup(max_age_seconds=3600) == 1


class TestMain:
    def test_max_age_argument(self) -> None:
        with (
            patch("scripts.cleanup_weather_cache.setup_logging"),
            patch("scripts.cleanup_weather_cache.cleanup", return_value=0) as mock_cleanup,
        ):
            assert main(["--max-age", "60"]) == 0

        mock_cleanup.assert_called_once_with(60)

    def test_defaults_to_cache_ttl(self) -> None:
        with (
            patch("scripts.cleanup_weather_cache.setup_logging"),
            patch("scripts.cleanup_weather_cache.Config.WEATHER_CACHE_TTL_SECONDS", 1234),
            patch("scripts.cleanup_weather_cache.cleanup", return_value=0) as mock_cleanup,
        ):
            main([])

        mock_cleanup.assert_called_once_with(1234)
