"""Database models package.

The Database class is composed of mixins for the weather cache and push
subscriptions.

Usage:
    from src.db.models import Database, Subscription, db

    # Use the global instance
    data = db.get_cached_weather("40.4168,-3.7038", max_age_seconds=300)

    # Or create your own instance
    custom_db = Database(custom_path)
"""

from pathlib import Path

from src.db.models.base import DatabaseBase
from src.db.models.cache import WeatherCacheMixin
from src.db.models.dataclasses import CachedWeather, Subscription
from src.db.models.helpers import check_database_connectivity
from src.db.models.subscription import SubscriptionMixin


class Database(DatabaseBase, WeatherCacheMixin, SubscriptionMixin):
    """Main database class combining all mixins."""

    def __init__(self, db_path: Path | None = None) -> None:
        """Initialize the database.

        Args:
            db_path: Optional path to the database file.
                    Defaults to Config.DATABASE_PATH.
        """
        super().__init__(db_path)


# Global database instance
db = Database()

__all__ = [
    "Database",
    "db",
    "CachedWeather",
    "Subscription",
    "check_database_connectivity",
]
