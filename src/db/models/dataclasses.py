"""Database model dataclasses.

These dataclasses represent the rows stored in the database.
They are returned by Database methods and used throughout the application.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class CachedWeather:
    """A cached canonical weather document for one location."""

    location_id: str  # "lat,lon" or municipality code
    data: dict[str, Any]
    updated_at: datetime  # Naive UTC


@dataclass
class Subscription:
    """A Web Push subscription for rain alerts.

    The push endpoint is the identity: one row per endpoint.
    """

    endpoint: str
    p256dh: str
    auth: str
    lat: float
    lon: float
    city: str | None
    created_at: datetime
    last_notification: datetime | None = None  # Naive UTC, None = never notified

    def to_subscription_info(self) -> dict[str, Any]:
        """Return the dict shape pywebpush expects."""
        return {
            "endpoint": self.endpoint,
            "keys": {"p256dh": self.p256dh, "auth": self.auth},
        }
