"""Weather cache database operations mixin.

One row per location id. Freshness is decided by the caller's max age rather
than a stored expiry, so changing WEATHER_CACHE_TTL_SECONDS applies to rows
that are already cached.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from src.db.models.dataclasses import CachedWeather
from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.utils.connection_pool import ConnectionPool

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)  # Naive UTC for DB comparison


class WeatherCacheMixin:
    """Mixin providing weather cache database operations."""

    _pool: ConnectionPool

    def _execute_with_timing(
        self,
        conn: sqlite3.Connection,
        query: str,
        params: tuple[Any, ...] = (),
    ) -> sqlite3.Cursor:
        """Execute query with timing (defined in base class)."""
        raise NotImplementedError

    def get_cached_weather_entry(self, location_id: str) -> CachedWeather | None:
        """Get the cached row for a location regardless of its age."""
        with self._pool.get_connection() as conn:
            row = self._execute_with_timing(
                conn,
                "SELECT location_id, data, updated_at FROM weather_cache WHERE location_id = ?",
                (location_id,),
            ).fetchone()

        if not row:
            return None

        try:
            data = json.loads(row["data"])
        except json.JSONDecodeError:
            logger.warning("Corrupt weather cache row", extra={"location_id": location_id})
            self.delete_cached_weather(location_id)
            return None

        return CachedWeather(
            location_id=row["location_id"],
            data=data,
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def get_cached_weather(self, location_id: str, max_age_seconds: int) -> dict[str, Any] | None:
        """Get cached weather data if it is younger than max_age_seconds.

        Args:
            location_id: Location id ("lat,lon" or municipality code)
            max_age_seconds: Freshness window

        Returns:
            The cached document, or None on a miss or stale row
        """
        entry = self.get_cached_weather_entry(location_id)
        if entry is None:
            logger.debug("Weather cache miss", extra={"location_id": location_id})
            return None

        age = _utcnow() - entry.updated_at
        if age >= timedelta(seconds=max_age_seconds):
            logger.debug(
                "Weather cache stale",
                extra={"location_id": location_id, "age_seconds": int(age.total_seconds())},
            )
            return None

        logger.debug("Weather cache hit", extra={"location_id": location_id})
        return entry.data

    def cache_weather(self, location_id: str, data: dict[str, Any]) -> None:
        """Insert or replace the cached document for a location."""
        with self._pool.get_connection() as conn:
            self._execute_with_timing(
                conn,
                """
                INSERT INTO weather_cache (location_id, data, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(location_id) DO UPDATE SET
                    data = excluded.data,
                    updated_at = excluded.updated_at
                """,
                (location_id, json.dumps(data), _utcnow().isoformat(timespec="microseconds")),
            )
            conn.commit()

        logger.debug("Weather cached", extra={"location_id": location_id})

    def delete_cached_weather(self, location_id: str) -> bool:
        """Delete the cached document for a location. Returns True if one existed."""
        with self._pool.get_connection() as conn:
            cursor = self._execute_with_timing(
                conn,
                "DELETE FROM weather_cache WHERE location_id = ?",
                (location_id,),
            )
            conn.commit()
            return cursor.rowcount > 0

    def cleanup_stale_weather_cache(self, max_age_seconds: int) -> int:
        """Delete rows older than max_age_seconds.

        Returns:
            Number of rows deleted
        """
        cutoff = _utcnow() - timedelta(seconds=max_age_seconds)
        with self._pool.get_connection() as conn:
            cursor = self._execute_with_timing(
                conn,
                "DELETE FROM weather_cache WHERE updated_at < ?",
                (cutoff.isoformat(timespec="microseconds"),),
            )
            conn.commit()
            return cursor.rowcount
