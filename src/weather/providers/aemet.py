"""AEMET OpenData forecast provider (Spain only).

API Documentation: https://opendata.aemet.es/dist/index.html

Every product is fetched in two steps: the API answers with a small envelope
({"estado": 200, "datos": "<url>"}) and the forecast itself lives at the
"datos" URL. Forecasts are keyed by INE municipality code.

Periods in the daily product are "00-24", "00-12", "12-24", "00-06"...; later
days carry a single entry without a period. Hourly values carry a two-digit
hour ("07"); precipitation probability comes in six-hour windows ("0107",
"0713", "1319", "1901").
"""

from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

import requests

from src.config import Config
from src.utils.logging import get_logger, log_payload_snippet
from src.weather.cities import nearest_city
from src.weather.codes import decode_aemet
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

BASE_URL = "https://opendata.aemet.es/opendata/api"
DAILY_PATH = "/prediccion/especifica/municipio/diaria/{code}"
HOURLY_PATH = "/prediccion/especifica/municipio/horaria/{code}"

TIMEZONE = "Europe/Madrid"
HOURLY_WINDOW = 24


def _to_number(value: Any) -> float | None:
    """AEMET sends numbers as strings; "Ip" means trace precipitation."""
    if value is None or value == "":
        return None
    if value == "Ip":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _whole_day(entries: list[dict[str, Any]] | None) -> dict[str, Any] | None:
    """Pick the 00-24 entry, else the first entry that has a value."""
    if not entries:
        return None
    for entry in entries:
        if entry.get("periodo") == "00-24" and entry.get("value") not in (None, ""):
            return entry
    for entry in entries:
        if entry.get("value") not in (None, ""):
            return entry
    return entries[0]


def _by_hour(entries: list[dict[str, Any]] | None) -> dict[int, dict[str, Any]]:
    result = {}
    for entry in entries or []:
        period = entry.get("periodo")
        if period and len(period) == 2 and period.isdigit():
            result[int(period)] = entry
    return result


def _window_value(entries: list[dict[str, Any]] | None, hour: int) -> float | None:
    """Value of the six-hour window ("0107") containing the hour."""
    for entry in entries or []:
        period = entry.get("periodo") or ""
        if len(period) != 4 or not period.isdigit():
            continue
        start, end = int(period[:2]), int(period[2:])
        if end <= start:
            end += 24
        if start <= hour < end or start <= hour + 24 < end:
            return _to_number(entry.get("value"))
    return None


def _wind_speed(entries: list[dict[str, Any]] | None, hour: int) -> float | None:
    # vientoAndRachaMax alternates {direccion, velocidad} and {value} (gust) entries
    for entry in entries or []:
        if entry.get("periodo") == f"{hour:02d}" and entry.get("velocidad"):
            return _to_number(entry["velocidad"][0])
    return None


def build_hourly_series(days: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Flatten the horaria product into one entry per forecast hour."""
    series = []
    for day in days:
        date = day["fecha"][:10]
        skies = _by_hour(day.get("estadoCielo"))
        precipitation = _by_hour(day.get("precipitacion"))
        feels_like = _by_hour(day.get("sensTermica"))
        humidity = _by_hour(day.get("humedadRelativa"))

        for hour, temp_entry in sorted(_by_hour(day.get("temperatura")).items()):
            sky = skies.get(hour, {})
            series.append(
                {
                    "time": f"{date}T{hour:02d}:00",
                    "date": date,
                    "hour": hour,
                    "temp": _to_number(temp_entry.get("value")),
                    "feelsLike": _to_number(feels_like.get(hour, {}).get("value")),
                    "humidity": _to_number(humidity.get(hour, {}).get("value")),
                    "precip": _to_number(precipitation.get(hour, {}).get("value")) or 0.0,
                    "rainProb": _window_value(day.get("probPrecipitacion"), hour),
                    "wind": _wind_speed(day.get("vientoAndRachaMax"), hour),
                    "sky": sky.get("value"),
                    "skyText": sky.get("descripcion"),
                }
            )
    return series


def _rain_prob_max(entries: list[dict[str, Any]] | None) -> float | None:
    values = [v for v in (_to_number(e.get("value")) for e in entries or []) if v is not None]
    return max(values) if values else None


def normalize_forecast(
    daily_days: list[dict[str, Any]],
    hourly_days: list[dict[str, Any]],
    location: Location,
    now: datetime,
) -> dict[str, Any]:
    """Map AEMET daily and hourly products onto the canonical document.

    Args:
        daily_days: prediccion.dia of the diaria product
        hourly_days: prediccion.dia of the horaria product
        location: Resolved location
        now: Current local time in Europe/Madrid
    """
    series = build_hourly_series(hourly_days)
    if not series:
        raise ProviderError("AEMET hourly forecast is empty")

    current_time = now.strftime("%Y-%m-%dT%H:%M")
    today = current_time[:10]
    start = find_start_index([entry["time"] for entry in series], current_time)
    now_entry = series[start]
    condition = decode_aemet(now_entry["sky"])
    sun_times = {day["fecha"][:10]: (day.get("orto") or "", day.get("ocaso") or "") for day in hourly_days}

    document = base_document(location, TIMEZONE)
    document["current"] = {
        "temp": round_half_up(now_entry["temp"]),
        "feelsLike": round_half_up(now_entry["feelsLike"] if now_entry["feelsLike"] is not None else now_entry["temp"]),
        "humidity": now_entry["humidity"],
        "windSpeed": round_half_up(now_entry["wind"] or 0),
        "desc": now_entry["skyText"] or condition.text,
        "icon": condition.icon,
        "isDay": not str(now_entry["sky"] or "").endswith("n"),
        "uv": 0,
        "aqi": 0,
        "pm25": 0,
        "pm10": 0,
        "time": current_time,
        "cloudCover": 0,
        "comparison": "",
    }
    document["hourly"] = [
        {
            "fullDate": entry["time"],
            "hour": entry["hour"],
            "displayTime": entry["time"][11:],
            "temp": round_half_up(entry["temp"]),
            "rainProb": entry["rainProb"],
            "precip": entry["precip"],
            "icon": decode_aemet(entry["sky"]).icon,
        }
        for entry in series[start : start + HOURLY_WINDOW]
    ]

    daily = []
    for day in daily_days:
        date = day["fecha"][:10]
        if date < today:
            continue
        sky = _whole_day(day.get("estadoCielo")) or {}
        temperature = day.get("temperatura") or {}
        sunrise, sunset = sun_times.get(date, ("", ""))
        if date == today and day.get("uvMax") is not None:
            document["current"]["uv"] = _to_number(day["uvMax"]) or 0
        daily.append(
            {
                "fecha": date,
                "tempMax": round_half_up(_to_number(temperature.get("maxima"))),
                "tempMin": round_half_up(_to_number(temperature.get("minima"))),
                "sunrise": sunrise,
                "sunset": sunset,
                "icon": decode_aemet(sky.get("value")).icon,
                "rainProbMax": _rain_prob_max(day.get("probPrecipitacion")),
                "dayHours": [
                    {
                        "time": entry["time"][11:],
                        "temp": round_half_up(entry["temp"]),
                        "rainProb": entry["rainProb"],
                        "icon": decode_aemet(entry["sky"]).icon,
                    }
                    for entry in series
                    if entry["date"] == date
                ],
            }
        )
    document["daily"] = daily
    return document


class AemetProvider(WeatherProvider):
    """Agencia Estatal de Meteorología. Needs AEMET_API_KEY."""

    name = "aemet"
    source = "aemet"

    def is_configured(self) -> bool:
        return bool(Config.AEMET_API_KEY)

    def municipality_code(self, location: Location) -> str:
        """INE code for the location, or the nearest known city within range.

        Raises:
            ProviderUnavailableError: If the location is outside AEMET coverage
        """
        if location.municipality_code:
            return location.municipality_code
        nearest = nearest_city(location.lat, location.lon, max_distance_km=Config.AEMET_MAX_DISTANCE_KM)
        if nearest is None:
            raise ProviderUnavailableError("No AEMET municipality near this location")
        return nearest[0].code

    def _fetch_product(self, path: str) -> list[dict[str, Any]]:
        try:
            envelope = get_json(
                BASE_URL + path,
                {"api_key": Config.AEMET_API_KEY},
                service="AEMET",
            )
            if envelope.get("estado") != 200 or not envelope.get("datos"):
                raise ProviderError(f"AEMET: {envelope.get('descripcion') or 'no data URL'}")
            data = get_json(envelope["datos"], service="AEMET datos")
        except (requests.RequestException, ValueError) as e:
            raise ProviderError(f"AEMET request failed: {e}") from e

        if not isinstance(data, list) or not data:
            raise ProviderError("AEMET returned an empty product")
        try:
            days: list[dict[str, Any]] = data[0]["prediccion"]["dia"]
        except (KeyError, TypeError) as e:
            log_payload_snippet(logger, data)
            raise ProviderError("Unexpected AEMET response") from e
        return days

    def fetch_forecast(self, location: Location) -> dict[str, Any]:
        if not self.is_configured():
            raise ProviderUnavailableError("AEMET_API_KEY is not set")

        code = self.municipality_code(location)
        daily_days = self._fetch_product(DAILY_PATH.format(code=code))
        hourly_days = self._fetch_product(HOURLY_PATH.format(code=code))

        try:
            document = normalize_forecast(daily_days, hourly_days, location, datetime.now(ZoneInfo(TIMEZONE)))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise ProviderError(f"Unexpected AEMET forecast shape: {e!r}") from e

        logger.debug("AEMET forecast normalized", extra={"location_id": location.id, "municipality": code})
        return document
