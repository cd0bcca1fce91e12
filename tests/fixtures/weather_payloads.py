"""Upstream payload builders for weather tests.

All payloads describe the same scene: Madrid, 2026-10-17 around 14:15 local
time, a mild partly cloudy afternoon two degrees warmer than the day before.
Keyword arguments override the interesting bits.
"""

from typing import Any

DAYS = ["2026-10-16", "2026-10-17", "2026-10-18"]


def _is_day(hour: int) -> int:
    return 1 if 8 <= hour < 20 else 0


def open_meteo_forecast(
    *,
    current_time: str = "2026-10-17T14:15",
    hourly_codes: dict[int, int] | None = None,
    hourly_precip: dict[int, float] | None = None,
    minutely_precip: dict[int, float] | None = None,
    temp_max_today: float = 25.4,
    temp_min_today: float = 9.6,
    uv_today: float = 5.5,
    wind_speed: float = 12.3,
) -> dict[str, Any]:
    """Open-Meteo /v1/forecast response with past_days=1 (3 days of hours).

    hourly_codes / hourly_precip are keyed by index into the hourly arrays
    (0 = yesterday 00:00, 24 = today 00:00, 38 = today 14:00).
    """
    times = [f"{day}T{hour:02d}:00" for day in DAYS for hour in range(24)]
    temperatures = [10.0 + (i % 24) * 0.5 + (2.0 if i >= 24 else 0.0) for i in range(len(times))]
    codes = [1] * len(times)
    precip = [0.0] * len(times)
    for index, code in (hourly_codes or {}).items():
        codes[index] = code
    for index, amount in (hourly_precip or {}).items():
        precip[index] = amount

    minutely_times = [f"2026-10-17T{13 + q // 4:02d}:{(q % 4) * 15:02d}" for q in range(16)]
    minutely_values = [0.0] * len(minutely_times)
    for index, amount in (minutely_precip or {}).items():
        minutely_values[index] = amount

    return {
        "latitude": 40.42,
        "longitude": -3.7,
        "timezone": "Europe/Madrid",
        "current": {
            "time": current_time,
            "temperature_2m": 17.4,
            "relative_humidity_2m": 60,
            "apparent_temperature": 16.6,
            "is_day": 1,
            "precipitation": 0.0,
            "weather_code": 2,
            "wind_speed_10m": wind_speed,
            "cloud_cover": 40,
        },
        "hourly": {
            "time": times,
            "temperature_2m": temperatures,
            "precipitation_probability": [20] * len(times),
            "precipitation": precip,
            "weather_code": codes,
            "is_day": [_is_day(i % 24) for i in range(len(times))],
        },
        "daily": {
            "time": DAYS,
            "weather_code": [3, 61, 0],
            "temperature_2m_max": [20.0, temp_max_today, 22.0],
            "temperature_2m_min": [8.0, temp_min_today, 7.0],
            "sunrise": [f"{day}T08:2{i}" for i, day in enumerate(DAYS)],
            "sunset": [f"{day}T19:2{i}" for i, day in enumerate(DAYS)],
            "uv_index_max": [3.0, uv_today, 4.0],
            "precipitation_probability_max": [10, 40, 0],
        },
        "minutely_15": {"time": minutely_times, "precipitation": minutely_values},
    }


def open_meteo_nowcast(
    *,
    current_time: str = "2026-10-17T14:15",
    precipitation: list[float] | None = None,
) -> dict[str, Any]:
    """Open-Meteo response for the rain alert nowcast (current + minutely_15)."""
    values = precipitation if precipitation is not None else [0.0] * 6
    hour, minute = int(current_time[11:13]), int(current_time[14:16])
    times = []
    for step in range(len(values)):
        total = hour * 60 + minute + step * 15
        times.append(f"{current_time[:10]}T{total // 60:02d}:{total % 60:02d}")
    return {
        "timezone": "Europe/Madrid",
        "current": {"time": current_time, "precipitation": 0.0},
        "minutely_15": {"time": times, "precipitation": values},
    }


def air_quality_current() -> dict[str, Any]:
    return {"current": {"time": "2026-10-17T14:00", "us_aqi": 42, "pm2_5": 9.1, "pm10": 15.3}}


def pollen_current() -> dict[str, Any]:
    return {
        "current": {
            "time": "2026-10-17T14:00",
            "alder_pollen": 0.0,
            "birch_pollen": 1.2,
            "grass_pollen": 7.5,
            "plane_tree_pollen": 12.0,
            "olive_pollen": None,
        }
    }


def _aemet_hour_entries(day: str, night_hours: range) -> dict[str, list[dict[str, Any]]]:
    hours = range(24)
    return {
        "estadoCielo": [
            {
                "value": f"12{'n' if h in night_hours else ''}",
                "periodo": f"{h:02d}",
                "descripcion": "Poco nuboso",
            }
            for h in hours
        ],
        "precipitacion": [{"value": "Ip" if h == 18 else "0", "periodo": f"{h:02d}"} for h in hours],
        "probPrecipitacion": [
            {"value": "0", "periodo": "0107"},
            {"value": "10", "periodo": "0713"},
            {"value": "35", "periodo": "1319"},
            {"value": "5", "periodo": "1901"},
        ],
        "temperatura": [{"value": str(12 + h // 2), "periodo": f"{h:02d}"} for h in hours],
        "sensTermica": [{"value": str(11 + h // 2), "periodo": f"{h:02d}"} for h in hours],
        "humedadRelativa": [{"value": "65", "periodo": f"{h:02d}"} for h in hours],
        "vientoAndRachaMax": [
            entry
            for h in hours
            for entry in (
                {"direccion": ["O"], "velocidad": ["14"], "periodo": f"{h:02d}"},
                {"value": "25", "periodo": f"{h:02d}"},
            )
        ],
    }


def aemet_hourly_days() -> list[dict[str, Any]]:
    """prediccion.dia of the AEMET horaria product (today and tomorrow)."""
    night = range(0, 8)
    return [
        {"fecha": f"{day}T00:00:00", "orto": "08:21", "ocaso": "19:25", **_aemet_hour_entries(day, night)}
        for day in DAYS[1:]
    ]


def aemet_daily_days() -> list[dict[str, Any]]:
    """prediccion.dia of the AEMET diaria product."""
    return [
        {
            "fecha": "2026-10-16T00:00:00",
            "temperatura": {"maxima": 20, "minima": 8},
            "probPrecipitacion": [{"value": 0, "periodo": "00-24"}],
            "estadoCielo": [{"value": "11", "periodo": "00-24", "descripcion": "Despejado"}],
            "uvMax": 3,
        },
        {
            "fecha": "2026-10-17T00:00:00",
            "temperatura": {"maxima": 24, "minima": 12},
            "probPrecipitacion": [
                {"value": 30, "periodo": "00-24"},
                {"value": 10, "periodo": "00-12"},
                {"value": 35, "periodo": "12-24"},
            ],
            "estadoCielo": [
                {"value": "", "periodo": "00-24", "descripcion": ""},
                {"value": "12", "periodo": "00-12", "descripcion": "Poco nuboso"},
            ],
            "uvMax": 6,
        },
        {
            "fecha": "2026-10-18T00:00:00",
            "temperatura": {"maxima": 22, "minima": 11},
            "probPrecipitacion": [{"value": 80}],
            "estadoCielo": [{"value": "25", "descripcion": "Muy nuboso con lluvia"}],
            "uvMax": 3,
        },
    ]


def aemet_envelope(datos_url: str) -> dict[str, Any]:
    return {"descripcion": "exito", "estado": 200, "datos": datos_url, "metadatos": datos_url + "-meta"}


def aemet_product(days: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [{"nombre": "Madrid", "provincia": "Madrid", "prediccion": {"dia": days}}]


def weatherapi_forecast(*, wind_kph: float = 55.0, localtime: str = "2026-10-17 9:05") -> dict[str, Any]:
    """WeatherAPI forecast.json response (two days, 24 hours each)."""

    def hours(day: str) -> list[dict[str, Any]]:
        return [
            {
                "time": f"{day} {h:02d}:00",
                "temp_c": 10.0 + h * 0.5,
                "chance_of_rain": 60 if h >= 18 else 0,
                "precip_mm": 1.5 if h >= 18 else 0.0,
                "condition": {"code": 1183 if h >= 18 else 1003},
                "is_day": _is_day(h),
            }
            for h in range(24)
        ]

    return {
        "location": {"name": "Madrid", "tz_id": "Europe/Madrid", "localtime": localtime},
        "current": {
            "last_updated": "2026-10-17 09:00",
            "temp_c": 14.5,
            "feelslike_c": 13.2,
            "humidity": 70,
            "wind_kph": wind_kph,
            "condition": {"code": 1063, "text": "Lluvia  moderada a intervalos"},
            "is_day": 1,
            "uv": 3.0,
            "cloud": 75,
            "air_quality": {"pm2_5": 8.26, "pm10": 12.44},
        },
        "forecast": {
            "forecastday": [
                {
                    "date": day,
                    "day": {
                        "maxtemp_c": 21.5,
                        "mintemp_c": 9.4,
                        "daily_chance_of_rain": 60,
                        "condition": {"code": 1183},
                        "uv": 4.0,
                    },
                    "astro": {"sunrise": "08:21 AM", "sunset": "07:25 PM"},
                    "hour": hours(day),
                }
                for day in DAYS[1:]
            ]
        },
    }


def geocoding_search(name: str = "Cádiz", lat: float = 36.52978, lon: float = -6.29471) -> dict[str, Any]:
    return {
        "results": [
            {
                "id": 2520600,
                "name": name,
                "latitude": lat,
                "longitude": lon,
                "country": "España",
                "admin1": "Andalucía",
            }
        ]
    }


def nominatim_reverse(city: str = "Getafe") -> dict[str, Any]:
    return {
        "display_name": f"{city}, Comunidad de Madrid, España",
        "address": {"town": city, "state": "Comunidad de Madrid", "country": "España"},
    }
