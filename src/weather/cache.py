"""Short-lived forecast cache.

Two backends share one interface: the SQLite Database (WeatherCacheMixin),
which survives restarts and is shared between workers, and an in-process
MemoryWeatherCache for single-process deployments and tests.
"""

import copy
import threading
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

from src.config import Config


class WeatherCache(Protocol):
    def get_cached_weather(self, location_id: str, max_age_seconds: int) -> dict[str, Any] | None: ...

    def cache_weather(self, location_id: str, data: dict[str, Any]) -> None: ...

    def delete_cached_weather(self, location_id: str) -> bool: ...

    def cleanup_stale_weather_cache(self, max_age_seconds: int) -> int: ...


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class MemoryWeatherCache:
    """Thread-safe dict cache. Entries are copied in and out."""

    def __init__(self) -> None:
        self._entries: dict[str, tuple[datetime, dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def get_cached_weather(self, location_id: str, max_age_seconds: int) -> dict[str, Any] | None:
        with self._lock:
            entry = self._entries.get(location_id)
        if entry is None:
            return None
        stored_at, data = entry
        if _utcnow() - stored_at >= timedelta(seconds=max_age_seconds):
            return None
        return copy.deepcopy(data)

    def cache_weather(self, location_id: str, data: dict[str, Any]) -> None:
        with self._lock:
            self._entries[location_id] = (_utcnow(), copy.deepcopy(data))

    def delete_cached_weather(self, location_id: str) -> bool:
        with self._lock:
            return self._entries.pop(location_id, None) is not None

    def cleanup_stale_weather_cache(self, max_age_seconds: int) -> int:
        cutoff = _utcnow() - timedelta(seconds=max_age_seconds)
        with self._lock:
            stale = [key for key, (stored_at, _) in self._entries.items() if stored_at < cutoff]
            for key in stale:
                del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


memory_cache = MemoryWeatherCache()


def get_weather_cache() -> WeatherCache:
    """The cache backend selected by WEATHER_CACHE_BACKEND."""
    if Config.WEATHER_CACHE_BACKEND == "memory":
        return memory_cache

    from src.db.models import db

    return db
