"""Weather code lookup tables.

Each provider reports the sky state with its own code system. These tables
translate them to a Spanish description plus a Bootstrap Icons class name,
which is what the front-end renders.

- Open-Meteo: WMO 4677 weather interpretation codes (0-99)
- AEMET: estadoCielo codes ("11".."83"), an "n" suffix marks night
- WeatherAPI: condition codes (1000-1282)
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class WeatherCondition:
    """Human-readable condition with its icon."""

    text: str
    icon: str


UNKNOWN = WeatherCondition("Desconocido", "bi-question-circle")

# Icons shared by all three tables
ICON_CLEAR_DAY = "bi-sun"
ICON_CLEAR_NIGHT = "bi-moon-stars"
ICON_PARTLY_DAY = "bi-cloud-sun"
ICON_PARTLY_NIGHT = "bi-cloud-moon"
ICON_CLOUDY = "bi-clouds"
ICON_FOG = "bi-cloud-fog2"
ICON_HAZE = "bi-cloud-haze2"
ICON_DRIZZLE = "bi-cloud-drizzle"
ICON_RAIN = "bi-cloud-rain"
ICON_HEAVY_RAIN = "bi-cloud-rain-heavy"
ICON_SLEET = "bi-cloud-sleet"
ICON_SNOW = "bi-cloud-snow"
ICON_STORM = "bi-cloud-lightning-rain"

# code -> (text, day icon, night icon)
WMO_CODES: dict[int, tuple[str, str, str]] = {
    0: ("Despejado", ICON_CLEAR_DAY, ICON_CLEAR_NIGHT),
    1: ("Mayormente despejado", ICON_PARTLY_DAY, ICON_PARTLY_NIGHT),
    2: ("Parcialmente nuboso", ICON_PARTLY_DAY, ICON_PARTLY_NIGHT),
    3: ("Nublado", ICON_CLOUDY, ICON_CLOUDY),
    45: ("Niebla", ICON_FOG, ICON_FOG),
    48: ("Niebla con escarcha", ICON_FOG, ICON_FOG),
    51: ("Llovizna ligera", ICON_DRIZZLE, ICON_DRIZZLE),
    53: ("Llovizna moderada", ICON_DRIZZLE, ICON_DRIZZLE),
    55: ("Llovizna intensa", ICON_DRIZZLE, ICON_DRIZZLE),
    56: ("Llovizna helada ligera", ICON_SLEET, ICON_SLEET),
    57: ("Llovizna helada intensa", ICON_SLEET, ICON_SLEET),
    61: ("Lluvia ligera", ICON_RAIN, ICON_RAIN),
    63: ("Lluvia moderada", ICON_RAIN, ICON_RAIN),
    65: ("Lluvia intensa", ICON_HEAVY_RAIN, ICON_HEAVY_RAIN),
    66: ("Lluvia helada ligera", ICON_SLEET, ICON_SLEET),
    67: ("Lluvia helada intensa", ICON_SLEET, ICON_SLEET),
    71: ("Nevada ligera", ICON_SNOW, ICON_SNOW),
    73: ("Nevada moderada", ICON_SNOW, ICON_SNOW),
    75: ("Nevada intensa", ICON_SNOW, ICON_SNOW),
    77: ("Granos de nieve", ICON_SNOW, ICON_SNOW),
    80: ("Chubascos ligeros", ICON_RAIN, ICON_RAIN),
    81: ("Chubascos moderados", ICON_RAIN, ICON_RAIN),
    82: ("Chubascos violentos", ICON_HEAVY_RAIN, ICON_HEAVY_RAIN),
    85: ("Chubascos de nieve ligeros", ICON_SNOW, ICON_SNOW),
    86: ("Chubascos de nieve intensos", ICON_SNOW, ICON_SNOW),
    95: ("Tormenta", ICON_STORM, ICON_STORM),
    96: ("Tormenta con granizo ligero", ICON_STORM, ICON_STORM),
    99: ("Tormenta con granizo intenso", ICON_STORM, ICON_STORM),
}

# WMO codes that mean thunderstorms
WMO_STORM_CODES = frozenset({95, 96, 99})

# AEMET estadoCielo base code (without the night suffix) -> (text, day icon, night icon)
AEMET_SKY_STATES: dict[str, tuple[str, str, str]] = {
    "11": ("Despejado", ICON_CLEAR_DAY, ICON_CLEAR_NIGHT),
    "12": ("Poco nuboso", ICON_PARTLY_DAY, ICON_PARTLY_NIGHT),
    "13": ("Intervalos nubosos", ICON_PARTLY_DAY, ICON_PARTLY_NIGHT),
    "14": ("Nuboso", ICON_CLOUDY, ICON_CLOUDY),
    "15": ("Muy nuboso", ICON_CLOUDY, ICON_CLOUDY),
    "16": ("Cubierto", ICON_CLOUDY, ICON_CLOUDY),
    "17": ("Nubes altas", ICON_PARTLY_DAY, ICON_PARTLY_NIGHT),
    "23": ("Intervalos nubosos con lluvia", ICON_RAIN, ICON_RAIN),
    "24": ("Nuboso con lluvia", ICON_RAIN, ICON_RAIN),
    "25": ("Muy nuboso con lluvia", ICON_RAIN, ICON_RAIN),
    "26": ("Cubierto con lluvia", ICON_HEAVY_RAIN, ICON_HEAVY_RAIN),
    "33": ("Intervalos nubosos con nieve", ICON_SNOW, ICON_SNOW),
    "34": ("Nuboso con nieve", ICON_SNOW, ICON_SNOW),
    "35": ("Muy nuboso con nieve", ICON_SNOW, ICON_SNOW),
    "36": ("Cubierto con nieve", ICON_SNOW, ICON_SNOW),
    "43": ("Intervalos nubosos con lluvia escasa", ICON_DRIZZLE, ICON_DRIZZLE),
    "44": ("Nuboso con lluvia escasa", ICON_DRIZZLE, ICON_DRIZZLE),
    "45": ("Muy nuboso con lluvia escasa", ICON_DRIZZLE, ICON_DRIZZLE),
    "46": ("Cubierto con lluvia escasa", ICON_DRIZZLE, ICON_DRIZZLE),
    "51": ("Intervalos nubosos con tormenta", ICON_STORM, ICON_STORM),
    "52": ("Nuboso con tormenta", ICON_STORM, ICON_STORM),
    "53": ("Muy nuboso con tormenta", ICON_STORM, ICON_STORM),
    "54": ("Cubierto con tormenta", ICON_STORM, ICON_STORM),
    "61": ("Intervalos nubosos con tormenta y lluvia escasa", ICON_STORM, ICON_STORM),
    "62": ("Nuboso con tormenta y lluvia escasa", ICON_STORM, ICON_STORM),
    "63": ("Muy nuboso con tormenta y lluvia escasa", ICON_STORM, ICON_STORM),
    "64": ("Cubierto con tormenta y lluvia escasa", ICON_STORM, ICON_STORM),
    "71": ("Intervalos nubosos con nieve escasa", ICON_SNOW, ICON_SNOW),
    "72": ("Nuboso con nieve escasa", ICON_SNOW, ICON_SNOW),
    "73": ("Muy nuboso con nieve escasa", ICON_SNOW, ICON_SNOW),
    "74": ("Cubierto con nieve escasa", ICON_SNOW, ICON_SNOW),
    "81": ("Niebla", ICON_FOG, ICON_FOG),
    "82": ("Bruma", ICON_FOG, ICON_FOG),
    "83": ("Calima", ICON_HAZE, ICON_HAZE),
}

# WeatherAPI condition code -> (text, day icon, night icon)
WEATHERAPI_CODES: dict[int, tuple[str, str, str]] = {
    1000: ("Despejado", ICON_CLEAR_DAY, ICON_CLEAR_NIGHT),
    1003: ("Parcialmente nublado", ICON_PARTLY_DAY, ICON_PARTLY_NIGHT),
    1006: ("Nublado", ICON_CLOUDY, ICON_CLOUDY),
    1009: ("Cubierto", ICON_CLOUDY, ICON_CLOUDY),
    1030: ("Neblina", ICON_FOG, ICON_FOG),
    1063: ("Lluvia dispersa", ICON_DRIZZLE, ICON_DRIZZLE),
    1066: ("Nieve dispersa", ICON_SNOW, ICON_SNOW),
    1069: ("Aguanieve dispersa", ICON_SLEET, ICON_SLEET),
    1072: ("Llovizna helada dispersa", ICON_SLEET, ICON_SLEET),
    1087: ("Tormentas dispersas", ICON_STORM, ICON_STORM),
    1114: ("Ventisca", ICON_SNOW, ICON_SNOW),
    1117: ("Tormenta de nieve", ICON_SNOW, ICON_SNOW),
    1135: ("Niebla", ICON_FOG, ICON_FOG),
    1147: ("Niebla helada", ICON_FOG, ICON_FOG),
    1150: ("Llovizna ligera dispersa", ICON_DRIZZLE, ICON_DRIZZLE),
    1153: ("Llovizna ligera", ICON_DRIZZLE, ICON_DRIZZLE),
    1168: ("Llovizna helada", ICON_SLEET, ICON_SLEET),
    1171: ("Llovizna helada intensa", ICON_SLEET, ICON_SLEET),
    1180: ("Lluvia ligera dispersa", ICON_DRIZZLE, ICON_DRIZZLE),
    1183: ("Lluvia ligera", ICON_RAIN, ICON_RAIN),
    1186: ("Lluvia moderada a ratos", ICON_RAIN, ICON_RAIN),
    1189: ("Lluvia moderada", ICON_RAIN, ICON_RAIN),
    1192: ("Lluvia intensa a ratos", ICON_HEAVY_RAIN, ICON_HEAVY_RAIN),
    1195: ("Lluvia intensa", ICON_HEAVY_RAIN, ICON_HEAVY_RAIN),
    1198: ("Lluvia helada ligera", ICON_SLEET, ICON_SLEET),
    1201: ("Lluvia helada intensa", ICON_SLEET, ICON_SLEET),
    1204: ("Aguanieve ligera", ICON_SLEET, ICON_SLEET),
    1207: ("Aguanieve intensa", ICON_SLEET, ICON_SLEET),
    1210: ("Nevada ligera dispersa", ICON_SNOW, ICON_SNOW),
    1213: ("Nevada ligera", ICON_SNOW, ICON_SNOW),
    1216: ("Nevada moderada dispersa", ICON_SNOW, ICON_SNOW),
    1219: ("Nevada moderada", ICON_SNOW, ICON_SNOW),
    1222: ("Nevada intensa dispersa", ICON_SNOW, ICON_SNOW),
    1225: ("Nevada intensa", ICON_SNOW, ICON_SNOW),
    1237: ("Granizo", ICON_SLEET, ICON_SLEET),
    1240: ("Chubascos ligeros", ICON_RAIN, ICON_RAIN),
    1243: ("Chubascos moderados o intensos", ICON_HEAVY_RAIN, ICON_HEAVY_RAIN),
    1246: ("Chubascos torrenciales", ICON_HEAVY_RAIN, ICON_HEAVY_RAIN),
    1249: ("Chubascos de aguanieve ligeros", ICON_SLEET, ICON_SLEET),
    1252: ("Chubascos de aguanieve intensos", ICON_SLEET, ICON_SLEET),
    1255: ("Chubascos de nieve ligeros", ICON_SNOW, ICON_SNOW),
    1258: ("Chubascos de nieve intensos", ICON_SNOW, ICON_SNOW),
    1261: ("Chubascos de granizo ligeros", ICON_SLEET, ICON_SLEET),
    1264: ("Chubascos de granizo intensos", ICON_SLEET, ICON_SLEET),
    1273: ("Tormenta con lluvia ligera", ICON_STORM, ICON_STORM),
    1276: ("Tormenta con lluvia intensa", ICON_STORM, ICON_STORM),
    1279: ("Tormenta con nieve ligera", ICON_STORM, ICON_STORM),
    1282: ("Tormenta con nieve intensa", ICON_STORM, ICON_STORM),
}


def _pick(entry: tuple[str, str, str] | None, is_day: bool) -> WeatherCondition:
    if entry is None:
        return UNKNOWN
    text, day_icon, night_icon = entry
    return WeatherCondition(text, day_icon if is_day else night_icon)


def decode_wmo(code: int | None, is_day: int | bool | None = 1) -> WeatherCondition:
    """Decode an Open-Meteo (WMO) weather code.

    is_day follows Open-Meteo's convention (1 = day, 0 = night); None is day.
    """
    if code is None:
        return UNKNOWN
    return _pick(WMO_CODES.get(int(code)), is_day is None or bool(is_day))


def decode_aemet(sky_state: str | None) -> WeatherCondition:
    """Decode an AEMET estadoCielo value such as "12" or "12n"."""
    if not sky_state:
        return UNKNOWN
    value = str(sky_state).strip()
    is_night = value.endswith("n")
    return _pick(AEMET_SKY_STATES.get(value.rstrip("n")), not is_night)


def decode_weatherapi(code: int | None, is_day: int | bool | None = 1) -> WeatherCondition:
    """Decode a WeatherAPI condition code."""
    if code is None:
        return UNKNOWN
    return _pick(WEATHERAPI_CODES.get(int(code)), is_day is None or bool(is_day))
