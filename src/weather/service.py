"""Weather service: one call from a location id to a canonical forecast."""

from concurrent.futures import ThreadPoolExecutor
from typing import Any

from src.config import Config
from src.utils.logging import get_logger
from src.weather.air_quality import fetch_air_quality, fetch_pollen
from src.weather.alerts import alerts_from_document
from src.weather.cache import get_weather_cache
from src.weather.geocoding import GENERIC_LOCATION_NAME, Location, resolve_location, reverse_geocode
from src.weather.providers import fetch_with_fallback

logger = get_logger(__name__)


def _assemble(
    document: dict[str, Any],
    source: str,
    location: Location,
    air: dict[str, Any],
    pollen: dict[str, float],
) -> dict[str, Any]:
    document["location"]["name"] = location.name or GENERIC_LOCATION_NAME
    document["location"]["region"] = location.region
    if air:
        document["current"].update(air)
    document["pollen"] = pollen
    if "alerts" not in document:
        document["alerts"] = alerts_from_document(document)
    document["source"] = source
    return document


def get_weather(
    location_id: str,
    name: str | None = None,
    region: str | None = None,
    force_refresh: bool = False,
) -> dict[str, Any]:
    """Current conditions, forecast, air quality, pollen and alerts for a location.

    Forecasts are cached per location for WEATHER_CACHE_TTL_SECONDS. On a cache
    hit, a real name supplied by the caller replaces the cached one, and
    reverse geocoding is skipped.

    Args:
        location_id: "lat,lon", an INE municipality code, or a place name
        name: Display name the client already knows (placeholders are ignored)
        region: Display region the client already knows
        force_refresh: Bypass the cache

    Raises:
        ValueError: Malformed coordinates
        LocationNotFoundError: Unknown place
        AllProvidersFailedError: No provider could produce a forecast
    """
    location = resolve_location(location_id, name, region)
    cache = get_weather_cache()

    if not force_refresh:
        cached = cache.get_cached_weather(location.id, Config.WEATHER_CACHE_TTL_SECONDS)
        if cached is not None:
            if location.name:
                cached["location"]["name"] = location.name
            logger.debug("Weather cache hit", extra={"location_id": location.id})
            return cached

    if location.name is None:
        geo_name, geo_region = reverse_geocode(location.lat, location.lon)
        location.name = geo_name
        location.region = location.region or geo_region

    with ThreadPoolExecutor(max_workers=3) as executor:
        forecast_future = executor.submit(fetch_with_fallback, location)
        air_future = executor.submit(fetch_air_quality, location.lat, location.lon)
        pollen_future = executor.submit(fetch_pollen, location.lat, location.lon)

        source, document = forecast_future.result()
        air = air_future.result()
        pollen = pollen_future.result()

    document = _assemble(document, source, location, air, pollen)
    cache.cache_weather(location.id, document)
    logger.info(
        "Weather served",
        extra={"location_id": location.id, "source": source, "refresh": force_refresh},
    )
    return document
