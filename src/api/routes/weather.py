"""Weather routes: forecasts, place search and nearest city."""

from typing import Any

from apiflask import APIBlueprint
from flask import request

from src.api.errors import (
    raise_external_service_error,
    raise_not_found_error,
    raise_validation_error,
)
from src.api.rate_limiting import rate_limit_weather
from src.config import Config
from src.utils.logging import get_logger
from src.weather.cities import nearest_city
from src.weather.geocoding import LocationNotFoundError, parse_coordinates, search_locations
from src.weather.providers import AllProvidersFailedError
from src.weather.service import get_weather

logger = get_logger(__name__)

api = APIBlueprint("weather", __name__, url_prefix="/api", tag="Weather")

SEARCH_MIN_LENGTH = 2
SEARCH_MAX_LENGTH = 100


def _is_truthy(value: str | None) -> bool:
    return (value or "").lower() in {"1", "true", "yes"}


@api.route("/weather/<path:location_id>", methods=["GET"])
@api.doc(responses=[400, 404, 429, 502])
@rate_limit_weather
def weather(location_id: str) -> dict[str, Any]:
    """Forecast for a location.

    The id is "lat,lon", an INE municipality code, or a place name. Optional
    query parameters: name and region (what the client already displays) and
    refresh=1 to bypass the cache.
    """
    try:
        return get_weather(
            location_id,
            name=request.args.get("name"),
            region=request.args.get("region"),
            force_refresh=_is_truthy(request.args.get("refresh")),
        )
    except ValueError as e:
        raise_validation_error(f"Coordenadas no válidas: {e}", field="location_id")
    except LocationNotFoundError as e:
        raise_not_found_error("Location", message=str(e))
    except AllProvidersFailedError as e:
        raise_external_service_error(
            "No se pudo obtener el pronóstico. Inténtalo de nuevo.",
            service="weather",
            details={"providers": e.errors},
        )


@api.route("/search", methods=["GET"])
@api.doc(responses=[400, 429])
@rate_limit_weather
def search() -> list[dict[str, Any]]:
    """Location suggestions for the search box."""
    query = (request.args.get("q") or "").strip()
    if len(query) < SEARCH_MIN_LENGTH:
        raise_validation_error(f"Query must be at least {SEARCH_MIN_LENGTH} characters", field="q")
    if len(query) > SEARCH_MAX_LENGTH:
        raise_validation_error(f"Query must be at most {SEARCH_MAX_LENGTH} characters", field="q")

    return [location.to_dict() for location in search_locations(query)]


@api.route("/cities/nearest", methods=["GET"])
@api.doc(responses=[400, 404])
def nearest() -> dict[str, Any]:
    """Nearest city from the static list (the one AEMET forecasts would use)."""
    lat = request.args.get("lat")
    lon = request.args.get("lon")
    if lat is None or lon is None:
        raise_validation_error("lat and lon are required", field="lat" if lat is None else "lon")
    try:
        lat_value, lon_value = parse_coordinates(f"{lat},{lon}")
    except ValueError as e:
        raise_validation_error(str(e))

    found = nearest_city(lat_value, lon_value)
    if found is None:
        raise_not_found_error("City")
    city, distance = found
    return {
        "code": city.code,
        "name": city.name,
        "region": city.region,
        "lat": city.lat,
        "lon": city.lon,
        "distanceKm": round(distance, 1),
        "withinAemetRange": distance <= Config.AEMET_MAX_DISTANCE_KM,
    }
