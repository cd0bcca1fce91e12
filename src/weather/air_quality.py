"""Air quality and pollen from the Open-Meteo air-quality API.

API Documentation: https://open-meteo.com/en/docs/air-quality-api

Both lookups are best-effort: a failure is logged and the forecast is served
without them. Pollen is only modelled for Europe; elsewhere every value is 0.
"""

from typing import Any

import requests

from src.utils.logging import get_logger
from src.weather.upstream import get_json

logger = get_logger(__name__)

AIR_QUALITY_URL = "https://air-quality-api.open-meteo.com/v1/air-quality"

# Canonical key -> Open-Meteo variable
POLLEN_VARIABLES: dict[str, str] = {
    "alder": "alder_pollen",
    "birch": "birch_pollen",
    "grass": "grass_pollen",
    "mugwort": "mugwort_pollen",
    "olive": "olive_pollen",
    "ragweed": "ragweed_pollen",
    "oak": "oak_pollen",
    "pine": "pine_pollen",
    "cypress": "cypress_pollen",
    "hazel": "hazel_pollen",
    "plane": "plane_tree_pollen",
    "poplar": "poplar_pollen",
    "ash": "ash_pollen",
}


def empty_pollen() -> dict[str, float]:
    return dict.fromkeys(POLLEN_VARIABLES, 0)


def fetch_air_quality(lat: float, lon: float) -> dict[str, Any]:
    """Current US AQI, PM2.5 and PM10.

    Returns:
        {"aqi", "pm25", "pm10"}, or {} if the lookup failed
    """
    try:
        data = get_json(
            AIR_QUALITY_URL,
            {"latitude": lat, "longitude": lon, "current": "us_aqi,pm10,pm2_5", "timezone": "auto"},
            service="Open-Meteo air quality",
        )
        current = data["current"]
    except (requests.RequestException, ValueError, KeyError) as e:
        logger.warning("Air quality lookup failed", extra={"lat": lat, "lon": lon, "error": str(e)})
        return {}

    return {
        "aqi": current.get("us_aqi") or 0,
        "pm25": current.get("pm2_5") or 0,
        "pm10": current.get("pm10") or 0,
    }


def fetch_pollen(lat: float, lon: float) -> dict[str, float]:
    """Current pollen concentrations (grains/m³), zero where unknown."""
    try:
        data = get_json(
            AIR_QUALITY_URL,
            {
                "latitude": lat,
                "longitude": lon,
                "current": ",".join(POLLEN_VARIABLES.values()),
                "timezone": "auto",
            },
            service="Open-Meteo pollen",
        )
        current = data.get("current") or {}
    except (requests.RequestException, ValueError) as e:
        logger.warning("Pollen lookup failed", extra={"lat": lat, "lon": lon, "error": str(e)})
        return empty_pollen()

    return {key: current.get(variable) or 0 for key, variable in POLLEN_VARIABLES.items()}
