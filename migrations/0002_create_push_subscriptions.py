"""
Create push_subscriptions table for rain alerts.

The push endpoint is the primary key so a browser can only hold one
subscription. last_notification drives the per-subscription throttle.
"""

from yoyo import step

__depends__ = {"0001_create_weather_cache"}

steps = [
    step(
        """
        CREATE TABLE IF NOT EXISTS push_subscriptions (
            endpoint TEXT PRIMARY KEY,
            p256dh TEXT NOT NULL,
            auth TEXT NOT NULL,
            lat REAL NOT NULL,
            lon REAL NOT NULL,
            city TEXT,
            created_at TEXT NOT NULL,
            last_notification TEXT
        )
        """,
        "DROP TABLE IF EXISTS push_subscriptions",
    ),
]
