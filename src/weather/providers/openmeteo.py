"""Open-Meteo forecast provider.

API Documentation: https://open-meteo.com/en/docs

One request returns current conditions, hourly and daily series and a
15-minute precipitation series. past_days=1 adds yesterday's hours, which the
day-over-day temperature comparison needs; it also shifts the daily arrays so
index 0 is yesterday.
"""

from typing import Any

import requests

from src.utils.logging import get_logger, log_payload_snippet
from src.weather.alerts import generate_alerts
from src.weather.codes import decode_wmo
from src.weather.geocoding import Location
from src.weather.providers.base import (
    ProviderError,
    WeatherProvider,
    base_document,
    find_start_index,
    round_half_up,
)
from src.weather.upstream import get_json

logger = get_logger(__name__)

FORECAST_URL = "https://api.open-meteo.com/v1/forecast"

CURRENT_FIELDS = (
    "temperature_2m,relative_humidity_2m,apparent_temperature,is_day,"
    "precipitation,weather_code,wind_speed_10m,cloud_cover"
)
HOURLY_FIELDS = "temperature_2m,precipitation_probability,precipitation,weather_code,is_day"
DAILY_FIELDS = (
    "weather_code,temperature_2m_max,temperature_2m_min,sunrise,sunset,"
    "uv_index_max,precipitation_probability_max"
)

HOURLY_WINDOW = 24


def fetch_raw_forecast(lat: float, lon: float) -> dict[str, Any]:
    """Fetch the raw Open-Meteo forecast payload."""
    data: dict[str, Any] = get_json(
        FORECAST_URL,
        {
            "latitude": lat,
            "longitude": lon,
            "current": CURRENT_FIELDS,
            "hourly": HOURLY_FIELDS,
            "daily": DAILY_FIELDS,
            "minutely_15": "precipitation",
            "timezone": "auto",
            "past_days": 1,
        },
        service="Open-Meteo",
    )
    return data


def fetch_nowcast(lat: float, lon: float, forecast_minutes: int = 120) -> dict[str, Any]:
    """Fetch only the 15-minute precipitation series (used by rain alerts)."""
    data: dict[str, Any] = get_json(
        FORECAST_URL,
        {
            "latitude": lat,
            "longitude": lon,
            "current": "precipitation",
            "minutely_15": "precipitation",
            "forecast_minutely_15": max(1, forecast_minutes // 15),
            "timezone": "auto",
        },
        service="Open-Meteo",
    )
    return data


def temperature_comparison(temperatures: list[float | None], start: int) -> str:
    """Describe how the current hour compares with the same hour yesterday."""
    if start < 24:
        return ""
    today = temperatures[start]
    yesterday = temperatures[start - 24]
    if today is None or yesterday is None:
        return ""

    diff = today - yesterday
    if abs(diff) < 1:
        return "Misma temperatura que ayer"
    rounded = round_half_up(diff) or 0
    if diff > 0:
        return f"{rounded}° más calor que ayer"
    return f"{abs(rounded)}° más frío que ayer"


def build_nowcast(minutely: dict[str, Any] | None, current_time: str) -> dict[str, list[Any]]:
    """15-minute precipitation slots from the current time onward."""
    if not minutely:
        return {"time": [], "precipitation": []}
    times: list[str] = minutely.get("time") or []
    values: list[float | None] = minutely.get("precipitation") or []
    keep = [i for i, slot in enumerate(times) if slot >= current_time]
    return {
        "time": [times[i] for i in keep],
        "precipitation": [values[i] if i < len(values) else None for i in keep],
    }


def _time_of_day(iso: str | None) -> str:
    return iso.split("T")[1] if iso and "T" in iso else ""


def _build_hourly(hourly: dict[str, Any], start: int) -> list[dict[str, Any]]:
    times: list[str] = hourly["time"]
    entries = []
    for i in range(start, min(start + HOURLY_WINDOW, len(times))):
        slot = times[i]
        entries.append(
            {
                "fullDate": slot,
                "hour": int(slot[11:13]),
                "displayTime": _time_of_day(slot),
                "temp": round_half_up(hourly["temperature_2m"][i]),
                "rainProb": hourly["precipitation_probability"][i],
                "precip": hourly["precipitation"][i],
                "icon": decode_wmo(hourly["weather_code"][i], hourly["is_day"][i]).icon,
            }
        )
    return entries


def _day_hours(hourly: dict[str, Any], day: str) -> list[dict[str, Any]]:
    return [
        {
            "time": _time_of_day(slot),
            "temp": round_half_up(hourly["temperature_2m"][i]),
            "rainProb": hourly["precipitation_probability"][i],
            "icon": decode_wmo(hourly["weather_code"][i], 1).icon,
        }
        for i, slot in enumerate(hourly["time"])
        if slot.startswith(day)
    ]


def _build_daily(daily: dict[str, Any], hourly: dict[str, Any], today: str) -> list[dict[str, Any]]:
    entries = []
    for i, day in enumerate(daily["time"]):
        if day < today:
            continue
        entries.append(
            {
                "fecha": day,
                "tempMax": round_half_up(daily["temperature_2m_max"][i]),
                "tempMin": round_half_up(daily["temperature_2m_min"][i]),
                "sunrise": _time_of_day(daily["sunrise"][i]),
                "sunset": _time_of_day(daily["sunset"][i]),
                "icon": decode_wmo(daily["weather_code"][i], 1).icon,
                "rainProbMax": daily["precipitation_probability_max"][i],
                "dayHours": _day_hours(hourly, day),
            }
        )
    return entries


def normalize_forecast(raw: dict[str, Any], location: Location) -> dict[str, Any]:
    """Map an Open-Meteo payload onto the canonical document.

    Raises:
        ProviderError: If required sections are missing or malformed
    """
    try:
        current = raw["current"]
        hourly = raw["hourly"]
        daily = raw["daily"]
        current_time: str = current["time"]
        today = current_time.split("T")[0]

        start = find_start_index(hourly["time"], current_time)
        condition = decode_wmo(current["weather_code"], current["is_day"])

        # past_days=1 puts yesterday first; report today's UV
        today_index = daily["time"].index(today) if today in daily["time"] else 0
        uv = daily["uv_index_max"][today_index] or 0

        document = base_document(location, raw.get("timezone"))
        document["current"] = {
            "temp": round_half_up(current["temperature_2m"]),
            "feelsLike": round_half_up(current["apparent_temperature"]),
            "humidity": current["relative_humidity_2m"],
            "windSpeed": round_half_up(current["wind_speed_10m"]),
            "desc": condition.text,
            "icon": condition.icon,
            "isDay": current["is_day"] == 1,
            "uv": uv,
            "aqi": 0,
            "pm25": 0,
            "pm10": 0,
            "time": current_time,
            "cloudCover": current.get("cloud_cover") or 0,
            "comparison": temperature_comparison(hourly["temperature_2m"], start),
        }
        document["nowcast"] = build_nowcast(raw.get("minutely_15"), current_time)
        document["hourly"] = _build_hourly(hourly, start)
        document["daily"] = _build_daily(daily, hourly, today)
        document["alerts"] = generate_alerts(raw)
    except (KeyError, IndexError, TypeError, ValueError) as e:
        log_payload_snippet(logger, raw)
        raise ProviderError(f"Unexpected Open-Meteo response: {e!r}") from e

    return document


class OpenMeteoProvider(WeatherProvider):
    """Open-Meteo: free, keyless, global coverage."""

    name = "openmeteo"
    source = "open-meteo"

    def fetch_forecast(self, location: Location) -> dict[str, Any]:
        try:
            raw = fetch_raw_forecast(location.lat, location.lon)
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(f"Open-Meteo request failed: {e}") from e

        document = normalize_forecast(raw, location)
        logger.debug(
            "Open-Meteo forecast normalized",
            extra={"location_id": location.id, "hours": len(document["hourly"])},
        )
        return document
