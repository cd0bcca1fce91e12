"""Push subscription database operations mixin.

Contains all methods for the push_subscriptions table: one row per push
endpoint, carrying the coordinates the rain alerts are computed for and the
time of the last notification (for throttling).
"""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from src.db.models.dataclasses import Subscription
from src.utils.logging import get_logger

if TYPE_CHECKING:
    from src.utils.connection_pool import ConnectionPool

logger = get_logger(__name__)


def _to_db_time(value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value.isoformat(timespec="microseconds")


def _row_to_subscription(row: sqlite3.Row) -> Subscription:
    last = row["last_notification"]
    return Subscription(
        endpoint=row["endpoint"],
        p256dh=row["p256dh"],
        auth=row["auth"],
        lat=row["lat"],
        lon=row["lon"],
        city=row["city"],
        created_at=datetime.fromisoformat(row["created_at"]),
        last_notification=datetime.fromisoformat(last) if last else None,
    )


class SubscriptionMixin:
    """Mixin providing push subscription database operations."""

    _pool: ConnectionPool

    def _execute_with_timing(
        self,
        conn: sqlite3.Connection,
        query: str,
        params: tuple[Any, ...] = (),
    ) -> sqlite3.Cursor:
        """Execute query with timing (defined in base class)."""
        raise NotImplementedError

    def upsert_subscription(
        self,
        endpoint: str,
        p256dh: str,
        auth: str,
        lat: float,
        lon: float,
        city: str | None = None,
    ) -> Subscription:
        """Create a subscription or update the existing one for this endpoint.

        Re-subscribing refreshes keys and location but keeps last_notification,
        so a client cannot reset its throttle by subscribing again.

        Returns:
            The stored subscription
        """
        now = _to_db_time(datetime.now(UTC))
        with self._pool.get_connection() as conn:
            self._execute_with_timing(
                conn,
                """
                INSERT INTO push_subscriptions
                (endpoint, p256dh, auth, lat, lon, city, created_at, last_notification)
                VALUES (?, ?, ?, ?, ?, ?, ?, NULL)
                ON CONFLICT(endpoint) DO UPDATE SET
                    p256dh = excluded.p256dh,
                    auth = excluded.auth,
                    lat = excluded.lat,
                    lon = excluded.lon,
                    city = excluded.city
                """,
                (endpoint, p256dh, auth, lat, lon, city, now),
            )
            conn.commit()

        logger.info("Push subscription stored", extra={"city": city, "lat": lat, "lon": lon})
        subscription = self.get_subscription(endpoint)
        assert subscription is not None
        return subscription

    def get_subscription(self, endpoint: str) -> Subscription | None:
        """Get a subscription by its push endpoint."""
        with self._pool.get_connection() as conn:
            row = self._execute_with_timing(
                conn,
                "SELECT * FROM push_subscriptions WHERE endpoint = ?",
                (endpoint,),
            ).fetchone()
        return _row_to_subscription(row) if row else None

    def list_subscriptions(self) -> list[Subscription]:
        """List all subscriptions, oldest first."""
        with self._pool.get_connection() as conn:
            rows = self._execute_with_timing(
                conn,
                "SELECT * FROM push_subscriptions ORDER BY created_at",
            ).fetchall()
        return [_row_to_subscription(row) for row in rows]

    def delete_subscription(self, endpoint: str) -> bool:
        """Delete a subscription.

        Returns:
            True if a row was deleted
        """
        with self._pool.get_connection() as conn:
            cursor = self._execute_with_timing(
                conn,
                "DELETE FROM push_subscriptions WHERE endpoint = ?",
                (endpoint,),
            )
            conn.commit()
            deleted = cursor.rowcount > 0

        if deleted:
            logger.info("Push subscription deleted")
        return deleted

    def mark_notified(self, endpoint: str, at: datetime | None = None) -> None:
        """Record that a notification was sent to this endpoint."""
        when = _to_db_time(at or datetime.now(UTC))
        with self._pool.get_connection() as conn:
            self._execute_with_timing(
                conn,
                "UPDATE push_subscriptions SET last_notification = ? WHERE endpoint = ?",
                (when, endpoint),
            )
            conn.commit()
