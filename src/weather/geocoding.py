"""Location resolution: coordinates, municipality codes and place names.

A location id arrives in one of three forms:
- "lat,lon" (browser geolocation); the display name comes from the caller or
  from reverse geocoding
- a 5-digit INE municipality code from the static city list
- free text ("Cádiz"), forward-geocoded with Open-Meteo

Reverse geocoding tries Open-Meteo, then Nominatim, then the nearest known
city, and finally settles for the generic "Tu ubicación".
"""

import math
import re
from dataclasses import dataclass
from typing import Any

import requests

from src.config import Config
from src.utils.logging import get_logger
from src.weather.cities import (
    City,
    find_cities_by_name,
    find_city_by_name,
    get_city_by_code,
    nearest_city,
    normalize_name,
)
from src.weather.upstream import get_json

logger = get_logger(__name__)

OPEN_METEO_SEARCH_URL = "https://geocoding-api.open-meteo.com/v1/search"
OPEN_METEO_REVERSE_URL = "https://geocoding-api.open-meteo.com/v1/reverse"
NOMINATIM_REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"

GENERIC_LOCATION_NAME = "Tu ubicación"

# Names the front-end sends when it does not know the place yet
PLACEHOLDER_NAMES = frozenset(
    {
        "undefined",
        "null",
        "Ubicación",
        "Tu ubicación",
        "Ubicación detectada",
        "Ubicación Detectada",
        "",
        "My Location",
    }
)

MUNICIPALITY_CODE_RE = re.compile(r"^\d{5}$")


class LocationNotFoundError(Exception):
    """Raised when a place name or municipality code cannot be resolved."""


@dataclass
class Location:
    """A resolved location.

    name is None until a display name has been decided (see resolve_location).
    """

    id: str
    lat: float
    lon: float
    name: str | None = None
    region: str = ""
    municipality_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name or GENERIC_LOCATION_NAME,
            "region": self.region,
            "lat": self.lat,
            "lon": self.lon,
        }


def format_location_id(lat: float, lon: float) -> str:
    """Cache/location key for coordinates, rounded to ~11 m."""
    return f"{round(lat, 4)},{round(lon, 4)}"


def parse_coordinates(text: str) -> tuple[float, float]:
    """Parse "lat,lon".

    Raises:
        ValueError: If the text is not two finite numbers in range
    """
    parts = text.split(",")
    if len(parts) != 2:
        raise ValueError(f"Expected 'lat,lon', got '{text}'")

    lat = float(parts[0].strip())
    lon = float(parts[1].strip())
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ValueError("Coordinates must be finite numbers")
    if not -90 <= lat <= 90:
        raise ValueError(f"Latitude out of range: {lat}")
    if not -180 <= lon <= 180:
        raise ValueError(f"Longitude out of range: {lon}")
    return lat, lon


def is_placeholder_name(name: str | None) -> bool:
    """True when the caller did not supply a real place name."""
    return name is None or name.strip() in PLACEHOLDER_NAMES


def _join_region(*parts: str | None) -> str:
    return ", ".join(p for p in parts if p)


def _location_from_city(city: City) -> Location:
    return Location(
        id=format_location_id(city.lat, city.lon),
        lat=city.lat,
        lon=city.lon,
        name=city.name,
        region=city.region,
        municipality_code=city.code,
    )


def _open_meteo_search(query: str, count: int) -> list[dict[str, Any]]:
    data = get_json(
        OPEN_METEO_SEARCH_URL,
        {"name": query, "count": count, "language": Config.GEOCODING_LANGUAGE, "format": "json"},
        service="Open-Meteo geocoding",
        timeout=Config.GEOCODING_TIMEOUT,
    )
    results: list[dict[str, Any]] = data.get("results") or []
    return results


def _location_from_search_result(result: dict[str, Any]) -> Location:
    lat = float(result["latitude"])
    lon = float(result["longitude"])
    return Location(
        id=format_location_id(lat, lon),
        lat=lat,
        lon=lon,
        name=result.get("name"),
        region=_join_region(result.get("admin1"), result.get("country")),
    )


def search_location(query: str) -> Location:
    """Forward-geocode a place name to its best match.

    Raises:
        LocationNotFoundError: If neither Open-Meteo nor the static list knows it
    """
    try:
        results = _open_meteo_search(query, count=1)
    except (requests.RequestException, ValueError) as e:
        logger.warning("Open-Meteo search failed", extra={"query": query, "error": str(e)})
        results = []

    if results:
        return _location_from_search_result(results[0])

    city = find_city_by_name(query)
    if city is not None:
        logger.info("Resolved place from static city list", extra={"query": query})
        return _location_from_city(city)

    raise LocationNotFoundError(f"Ciudad no encontrada: {query}")


def search_locations(query: str, limit: int = 5) -> list[Location]:
    """Suggestions for a search box: Open-Meteo matches plus static cities."""
    try:
        results = _open_meteo_search(query, count=limit)
    except (requests.RequestException, ValueError) as e:
        logger.warning("Open-Meteo search failed", extra={"query": query, "error": str(e)})
        results = []

    locations = [_location_from_search_result(r) for r in results]
    seen = {normalize_name(loc.name or "") for loc in locations}
    for city in find_cities_by_name(query, limit=limit):
        if normalize_name(city.name) not in seen:
            locations.append(_location_from_city(city))
    return locations[:limit]


def _reverse_open_meteo(lat: float, lon: float) -> tuple[str, str] | None:
    data = get_json(
        OPEN_METEO_REVERSE_URL,
        {
            "latitude": lat,
            "longitude": lon,
            "count": 1,
            "language": Config.GEOCODING_LANGUAGE,
            "format": "json",
        },
        service="Open-Meteo reverse geocoding",
        timeout=Config.GEOCODING_TIMEOUT,
    )
    results = data.get("results") or []
    if not results:
        return None
    first = results[0]
    return first["name"], _join_region(first.get("admin1"), first.get("country"))


def _reverse_nominatim(lat: float, lon: float) -> tuple[str | None, str] | None:
    data = get_json(
        NOMINATIM_REVERSE_URL,
        {"lat": lat, "lon": lon, "format": "json", "zoom": 10},
        service="Nominatim",
        timeout=Config.GEOCODING_TIMEOUT,
        headers={"Accept-Language": Config.GEOCODING_LANGUAGE},
    )
    address = data.get("address")
    if not address:
        return None
    place = (
        address.get("city")
        or address.get("town")
        or address.get("village")
        or address.get("municipality")
    )
    return place, _join_region(address.get("state"), address.get("country"))


def reverse_geocode(lat: float, lon: float) -> tuple[str, str]:
    """Name the place at the given coordinates.

    Returns:
        (display name, region). The display name is "Tu ubicación (<place>)",
        or just "Tu ubicación" when no geocoder could name the place.
    """
    try:
        found = _reverse_open_meteo(lat, lon)
        if found:
            return f"{GENERIC_LOCATION_NAME} ({found[0]})", found[1]
    except (requests.RequestException, ValueError, KeyError) as e:
        logger.debug("Open-Meteo reverse geocoding failed", extra={"error": str(e)})

    try:
        found_place = _reverse_nominatim(lat, lon)
        if found_place:
            place, region = found_place
            name = f"{GENERIC_LOCATION_NAME} ({place})" if place else GENERIC_LOCATION_NAME
            return name, region
    except (requests.RequestException, ValueError) as e:
        logger.warning("Nominatim reverse geocoding failed", extra={"error": str(e)})

    nearest = nearest_city(lat, lon, max_distance_km=Config.AEMET_MAX_DISTANCE_KM)
    if nearest:
        city, distance = nearest
        logger.info(
            "Reverse geocoded from static city list",
            extra={"city": city.name, "distance_km": round(distance, 1)},
        )
        return f"{GENERIC_LOCATION_NAME} ({city.name})", city.region

    return GENERIC_LOCATION_NAME, ""


def resolve_location(
    location_id: str,
    name: str | None = None,
    region: str | None = None,
) -> Location:
    """Resolve a location id without reverse geocoding.

    For coordinates with a placeholder name the returned Location has
    name=None; call reverse_geocode() if a name is actually needed (the
    weather service skips it when the forecast is served from cache).

    Raises:
        ValueError: Malformed or out-of-range coordinates
        LocationNotFoundError: Unknown municipality code or place name
    """
    location_id = location_id.strip()
    usable_name = None if is_placeholder_name(name) else name

    if "," in location_id:
        lat, lon = parse_coordinates(location_id)
        return Location(
            id=format_location_id(lat, lon),
            lat=lat,
            lon=lon,
            name=usable_name,
            region=region or "",
        )

    if MUNICIPALITY_CODE_RE.match(location_id):
        city = get_city_by_code(location_id)
        if city is None:
            raise LocationNotFoundError(f"Municipio desconocido: {location_id}")
        return Location(
            id=city.code,
            lat=city.lat,
            lon=city.lon,
            name=usable_name or city.name,
            region=region or city.region,
            municipality_code=city.code,
        )

    if not location_id:
        raise LocationNotFoundError("Ubicación vacía")

    location = search_location(location_id)
    if usable_name:
        location.name = usable_name
    if region:
        location.region = region
    return location
