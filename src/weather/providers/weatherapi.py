"""WeatherAPI.com forecast provider.

API Documentation: https://www.weatherapi.com/docs/
"""

from datetime import datetime
from typing import Any

import requests

from src.config import Config
from src.utils.logging import get_logger, log_payload_snippet
from src.weather.codes import UNKNOWN, decode_weatherapi
from src.weather.geocoding import Location
from src.weather.providers.base import (
    ProviderError,
    ProviderUnavailableError,
    WeatherProvider,
    base_document,
    find_start_index,
    round_half_up,
)
from src.weather.upstream import get_json

logger = get_logger(__name__)

FORECAST_URL = "https://api.weatherapi.com/v1/forecast.json"
FORECAST_DAYS = 3
HOURLY_WINDOW = 24


def to_24h(value: str | None) -> str:
    """Convert "07:45 AM" to "07:45"; anything unparseable becomes ""."""
    if not value:
        return ""
    try:
        return datetime.strptime(value.strip(), "%I:%M %p").strftime("%H:%M")
    except ValueError:
        # "No sunrise" / "No moonset" in polar regions
        return ""


def to_iso_minute(value: str) -> str:
    """WeatherAPI local times look like "2026-10-17 9:05"; pad to ISO form."""
    date, clock = value.strip().split(" ")
    hour, minute = clock.split(":")
    return f"{date}T{int(hour):02d}:{minute}"


def _hour_entry(hour: dict[str, Any]) -> dict[str, Any]:
    condition = hour.get("condition") or {}
    return {
        "time": to_iso_minute(hour["time"]),
        "temp": hour.get("temp_c"),
        "rainProb": hour.get("chance_of_rain"),
        "precip": hour.get("precip_mm"),
        "icon": decode_weatherapi(condition.get("code"), hour.get("is_day")).icon,
    }


def normalize_forecast(raw: dict[str, Any], location: Location) -> dict[str, Any]:
    """Map a forecast.json payload onto the canonical document."""
    try:
        current = raw["current"]
        days = raw["forecast"]["forecastday"]
        current_time = to_iso_minute(raw["location"]["localtime"])
        today = current_time[:10]

        hours = [_hour_entry(hour) for day in days for hour in day.get("hour", [])]
        start = find_start_index([h["time"] for h in hours], current_time)

        condition_info = current.get("condition") or {}
        condition = decode_weatherapi(condition_info.get("code"), current.get("is_day"))
        air = current.get("air_quality") or {}
        today_uv = next((d["day"].get("uv") for d in days if d["date"] == today), None)

        document = base_document(location, raw["location"].get("tz_id"))
        document["current"] = {
            "temp": round_half_up(current["temp_c"]),
            "feelsLike": round_half_up(current.get("feelslike_c", current["temp_c"])),
            "humidity": current.get("humidity"),
            "windSpeed": round_half_up(current.get("wind_kph") or 0),
            "desc": (condition_info.get("text") or condition.text) if condition is UNKNOWN else condition.text,
            "icon": condition.icon,
            "isDay": current.get("is_day") == 1,
            "uv": today_uv if today_uv is not None else current.get("uv", 0),
            "aqi": 0,
            "pm25": round(air["pm2_5"], 1) if air.get("pm2_5") is not None else 0,
            "pm10": round(air["pm10"], 1) if air.get("pm10") is not None else 0,
            "time": current_time,
            "cloudCover": current.get("cloud") or 0,
            "comparison": "",
        }
        document["hourly"] = [
            {
                "fullDate": h["time"],
                "hour": int(h["time"][11:13]),
                "displayTime": h["time"][11:],
                "temp": round_half_up(h["temp"]),
                "rainProb": h["rainProb"],
                "precip": h["precip"],
                "icon": h["icon"],
            }
            for h in hours[start : start + HOURLY_WINDOW]
        ]
        document["daily"] = [
            {
                "fecha": day["date"],
                "tempMax": round_half_up(day["day"].get("maxtemp_c")),
                "tempMin": round_half_up(day["day"].get("mintemp_c")),
                "sunrise": to_24h((day.get("astro") or {}).get("sunrise")),
                "sunset": to_24h((day.get("astro") or {}).get("sunset")),
                "icon": decode_weatherapi((day["day"].get("condition") or {}).get("code"), 1).icon,
                "rainProbMax": day["day"].get("daily_chance_of_rain"),
                "dayHours": [
                    {
                        "time": h["time"][11:],
                        "temp": round_half_up(h["temp"]),
                        "rainProb": h["rainProb"],
                        "icon": h["icon"],
                    }
                    for h in hours
                    if h["time"].startswith(day["date"])
                ],
            }
            for day in days
            if day["date"] >= today
        ]
    except (KeyError, IndexError, TypeError, ValueError) as e:
        log_payload_snippet(logger, raw)
        raise ProviderError(f"Unexpected WeatherAPI response: {e!r}") from e

    return document


class WeatherApiProvider(WeatherProvider):
    """WeatherAPI.com. Needs WEATHERAPI_KEY."""

    name = "weatherapi"
    source = "weatherapi"

    def is_configured(self) -> bool:
        return bool(Config.WEATHERAPI_KEY)

    def fetch_forecast(self, location: Location) -> dict[str, Any]:
        if not self.is_configured():
            raise ProviderUnavailableError("WEATHERAPI_KEY is not set")

        try:
            raw = get_json(
                FORECAST_URL,
                {
                    "key": Config.WEATHERAPI_KEY,
                    "q": f"{location.lat},{location.lon}",
                    "days": FORECAST_DAYS,
                    "aqi": "yes",
                    "alerts": "no",
                    "lang": "es",
                },
                service="WeatherAPI",
            )
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(f"WeatherAPI request failed: {e}") from e

        return normalize_forecast(raw, location)
