"""Weather alerts derived from forecast data.

Alerts are computed locally from the forecast (not official AEMET warnings):
storms and heavy rain in the next 24 hours, heat and frost today, high UV and
strong wind now.
"""

from dataclasses import dataclass
from typing import Any

from src.weather.codes import ICON_STORM, WMO_STORM_CODES

HEAVY_RAIN_MM = 10.0
TORRENTIAL_RAIN_MM = 30.0
HEAT_WARNING_C = 35
HEAT_DANGER_C = 40
FROST_C = 0
UV_WARNING = 8
UV_DANGER = 11
WIND_WARNING_KMH = 50
WIND_DANGER_KMH = 70

LOOKAHEAD_HOURS = 24


@dataclass
class _Indicators:
    """The handful of values the alert rules look at."""

    storm_time: str | None = None
    max_precip: float = 0.0
    max_precip_time: str | None = None
    temp_max: float | None = None
    temp_min: float | None = None
    uv: float | None = None
    wind: float | None = None


def _alert(kind: str, level: str, title: str, message: str) -> dict[str, str]:
    return {"type": kind, "level": level, "title": title, "message": message}


def _evaluate(ind: _Indicators) -> list[dict[str, str]]:
    alerts = []

    if ind.storm_time:
        alerts.append(
            _alert("storm", "warning", "Tormentas", f"Posibles tormentas a partir de las {ind.storm_time}")
        )

    if ind.max_precip >= HEAVY_RAIN_MM:
        level = "danger" if ind.max_precip >= TORRENTIAL_RAIN_MM else "warning"
        alerts.append(
            _alert(
                "rain",
                level,
                "Lluvia intensa",
                f"Hasta {ind.max_precip:.1f} mm en una hora hacia las {ind.max_precip_time}",
            )
        )

    if ind.temp_max is not None and ind.temp_max >= HEAT_WARNING_C:
        if ind.temp_max >= HEAT_DANGER_C:
            alerts.append(_alert("heat", "danger", "Calor extremo", f"Máxima de {ind.temp_max:.0f}° hoy"))
        else:
            alerts.append(_alert("heat", "warning", "Calor intenso", f"Máxima de {ind.temp_max:.0f}° hoy"))

    if ind.temp_min is not None and ind.temp_min <= FROST_C:
        alerts.append(_alert("frost", "warning", "Heladas", f"Mínima de {ind.temp_min:.0f}° hoy"))

    if ind.uv is not None and ind.uv >= UV_WARNING:
        if ind.uv >= UV_DANGER:
            alerts.append(_alert("uv", "danger", "UV extremo", f"Índice UV {ind.uv:.0f}: evita el sol"))
        else:
            alerts.append(_alert("uv", "warning", "UV muy alto", f"Índice UV {ind.uv:.0f}: protégete del sol"))

    if ind.wind is not None and ind.wind >= WIND_WARNING_KMH:
        level = "danger" if ind.wind >= WIND_DANGER_KMH else "warning"
        alerts.append(_alert("wind", level, "Viento fuerte", f"Rachas de {ind.wind:.0f} km/h"))

    return alerts


def generate_alerts(payload: dict[str, Any]) -> list[dict[str, str]]:
    """Alerts from a raw Open-Meteo forecast payload (see providers.openmeteo)."""
    current = payload.get("current") or {}
    hourly = payload.get("hourly") or {}
    daily = payload.get("daily") or {}
    now = current.get("time") or ""
    today = now.split("T")[0]

    ind = _Indicators(wind=current.get("wind_speed_10m"))

    times: list[str] = hourly.get("time") or []
    codes = hourly.get("weather_code") or []
    precip = hourly.get("precipitation") or []
    upcoming = [i for i, slot in enumerate(times) if slot[:13] >= now[:13]][:LOOKAHEAD_HOURS]
    for i in upcoming:
        slot_time = times[i].split("T")[1]
        if ind.storm_time is None and i < len(codes) and codes[i] in WMO_STORM_CODES:
            ind.storm_time = slot_time
        amount = precip[i] if i < len(precip) else None
        if amount is not None and amount > ind.max_precip:
            ind.max_precip = amount
            ind.max_precip_time = slot_time

    days: list[str] = daily.get("time") or []
    if today in days:
        index = days.index(today)
        ind.temp_max = (daily.get("temperature_2m_max") or [None])[index]
        ind.temp_min = (daily.get("temperature_2m_min") or [None])[index]
        ind.uv = (daily.get("uv_index_max") or [None])[index]

    return _evaluate(ind)


def alerts_from_document(document: dict[str, Any]) -> list[dict[str, str]]:
    """Alerts from a canonical weather document (any provider)."""
    current = document.get("current") or {}
    ind = _Indicators(uv=current.get("uv"), wind=current.get("windSpeed"))

    for entry in (document.get("hourly") or [])[:LOOKAHEAD_HOURS]:
        if ind.storm_time is None and entry.get("icon") == ICON_STORM:
            ind.storm_time = entry.get("displayTime")
        amount = entry.get("precip")
        if amount is not None and amount > ind.max_precip:
            ind.max_precip = amount
            ind.max_precip_time = entry.get("displayTime")

    daily = document.get("daily") or []
    if daily:
        ind.temp_max = daily[0].get("tempMax")
        ind.temp_min = daily[0].get("tempMin")

    return _evaluate(ind)
