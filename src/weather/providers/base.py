"""Common interface and helpers for weather providers.

A provider turns a resolved Location into the canonical weather document,
except for air quality and pollen which the weather service adds for every
provider. Providers may fill "alerts"; otherwise the service derives them
from the document.
"""

import math
from abc import ABC, abstractmethod
from typing import Any

from src.weather.geocoding import Location


class ProviderError(Exception):
    """The provider was asked but failed (HTTP error, bad payload)."""


class ProviderUnavailableError(ProviderError):
    """The provider cannot serve this request (no API key, out of coverage)."""


class AllProvidersFailedError(Exception):
    """Every provider in the fallback chain failed."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = errors
        summary = "; ".join(f"{name}: {error}" for name, error in errors.items())
        super().__init__(f"All weather providers failed ({summary or 'none configured'})")


def round_half_up(value: float | None) -> int | None:
    """Round like the front-end does (0.5 goes up), keeping None."""
    if value is None:
        return None
    return math.floor(float(value) + 0.5)


def find_start_index(times: list[str], current_time: str) -> int:
    """Index of the hourly slot containing current_time.

    Times are local ISO strings ("2026-10-17T14:00"). Falls back to the first
    slot at or after the current time, then to 0.
    """
    current_hour = current_time[:13]
    for index, slot in enumerate(times):
        if slot.startswith(current_hour):
            return index
    for index, slot in enumerate(times):
        if slot >= current_time:
            return index
    return 0


def empty_nowcast() -> dict[str, list[Any]]:
    return {"time": [], "precipitation": []}


def base_document(location: Location, timezone: str | None) -> dict[str, Any]:
    """Skeleton of the canonical document with the location filled in."""
    return {
        "location": {
            "name": location.name,
            "region": location.region,
            "lat": location.lat,
            "lon": location.lon,
            "timezone": timezone,
        },
        "current": {},
        "nowcast": empty_nowcast(),
        "hourly": [],
        "daily": [],
    }


class WeatherProvider(ABC):
    """A third-party forecast source."""

    #: Key used in WEATHER_PROVIDERS
    name: str = ""
    #: Value reported in the document's "source" field
    source: str = ""

    def is_configured(self) -> bool:
        """Whether the provider has what it needs (API keys) to be tried."""
        return True

    @abstractmethod
    def fetch_forecast(self, location: Location) -> dict[str, Any]:
        """Fetch and normalize a forecast.

        Raises:
            ProviderUnavailableError: Provider cannot serve this location
            ProviderError: Upstream failure or unexpected payload
        """
