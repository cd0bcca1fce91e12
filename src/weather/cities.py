"""Static list of Spanish cities with their INE municipality codes.

Used for three things:
- AEMET forecasts are keyed by municipality code, so coordinates are mapped to
  the nearest known city
- last-resort reverse geocoding when both remote geocoders fail
- offline fallback for text search
"""

import math
import unicodedata
from dataclasses import dataclass, field

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class City:
    """A municipality AEMET publishes forecasts for."""

    code: str  # INE municipality code (5 digits)
    name: str
    province: str
    community: str
    lat: float
    lon: float
    aliases: tuple[str, ...] = field(default=())

    @property
    def region(self) -> str:
        if self.community == self.province:
            return f"{self.community}, España"
        return f"{self.province}, {self.community}, España"


CITIES: tuple[City, ...] = (
    City("28079", "Madrid", "Madrid", "Comunidad de Madrid", 40.4168, -3.7038),
    City("08019", "Barcelona", "Barcelona", "Cataluña", 41.3874, 2.1686),
    City("46250", "Valencia", "Valencia", "Comunidad Valenciana", 39.4699, -0.3763, ("València",)),
    City("41091", "Sevilla", "Sevilla", "Andalucía", 37.3891, -5.9845),
    City("50297", "Zaragoza", "Zaragoza", "Aragón", 41.6488, -0.8891),
    City("29067", "Málaga", "Málaga", "Andalucía", 36.7213, -4.4214),
    City("30030", "Murcia", "Murcia", "Región de Murcia", 37.9922, -1.1307),
    City("07040", "Palma", "Illes Balears", "Illes Balears", 39.5696, 2.6502, ("Palma de Mallorca",)),
    City(
        "35016",
        "Las Palmas de Gran Canaria",
        "Las Palmas",
        "Canarias",
        28.1235,
        -15.4363,
        ("Las Palmas",),
    ),
    City("48020", "Bilbao", "Bizkaia", "País Vasco", 43.2630, -2.9350),
    City("03014", "Alicante", "Alicante", "Comunidad Valenciana", 38.3452, -0.4810, ("Alacant",)),
    City("14021", "Córdoba", "Córdoba", "Andalucía", 37.8882, -4.7794),
    City("47186", "Valladolid", "Valladolid", "Castilla y León", 41.6523, -4.7245),
    City("36057", "Vigo", "Pontevedra", "Galicia", 42.2406, -8.7207),
    City("33024", "Gijón", "Asturias", "Principado de Asturias", 43.5322, -5.6611, ("Xixón",)),
    City("15030", "A Coruña", "A Coruña", "Galicia", 43.3623, -8.4115, ("La Coruña",)),
    City("01059", "Vitoria-Gasteiz", "Araba/Álava", "País Vasco", 42.8467, -2.6716, ("Vitoria",)),
    City("18087", "Granada", "Granada", "Andalucía", 37.1773, -3.5986),
    City("33044", "Oviedo", "Asturias", "Principado de Asturias", 43.3614, -5.8494),
    City(
        "38038",
        "Santa Cruz de Tenerife",
        "Santa Cruz de Tenerife",
        "Canarias",
        28.4636,
        -16.2518,
        ("Tenerife",),
    ),
    City("31201", "Pamplona", "Navarra", "Comunidad Foral de Navarra", 42.8125, -1.6458, ("Iruña",)),
    City("04013", "Almería", "Almería", "Andalucía", 36.8340, -2.4637),
    City(
        "20069",
        "Donostia/San Sebastián",
        "Gipuzkoa",
        "País Vasco",
        43.3183,
        -1.9812,
        ("San Sebastián", "Donostia"),
    ),
    City("39075", "Santander", "Cantabria", "Cantabria", 43.4623, -3.8100),
    City("09059", "Burgos", "Burgos", "Castilla y León", 42.3439, -3.6969),
    City(
        "12040",
        "Castellón de la Plana",
        "Castellón",
        "Comunidad Valenciana",
        39.9864,
        -0.0513,
        ("Castellón", "Castelló"),
    ),
    City("02003", "Albacete", "Albacete", "Castilla-La Mancha", 38.9943, -1.8585),
    City("26089", "Logroño", "La Rioja", "La Rioja", 42.4627, -2.4450),
    City("06015", "Badajoz", "Badajoz", "Extremadura", 38.8794, -6.9707),
    City("37274", "Salamanca", "Salamanca", "Castilla y León", 40.9701, -5.6635),
    City("21041", "Huelva", "Huelva", "Andalucía", 37.2614, -6.9447),
    City("25120", "Lleida", "Lleida", "Cataluña", 41.6176, 0.6200, ("Lérida",)),
    City("43148", "Tarragona", "Tarragona", "Cataluña", 41.1189, 1.2445),
    City("24089", "León", "León", "Castilla y León", 42.5987, -5.5671),
    City("11012", "Cádiz", "Cádiz", "Andalucía", 36.5271, -6.2886),
    City("23050", "Jaén", "Jaén", "Andalucía", 37.7796, -3.7849),
    City("32054", "Ourense", "Ourense", "Galicia", 42.3358, -7.8639, ("Orense",)),
    City("17079", "Girona", "Girona", "Cataluña", 41.9794, 2.8214, ("Gerona",)),
    City("27028", "Lugo", "Lugo", "Galicia", 43.0097, -7.5568),
    City("10037", "Cáceres", "Cáceres", "Extremadura", 39.4753, -6.3724),
    City("19130", "Guadalajara", "Guadalajara", "Castilla-La Mancha", 40.6333, -3.1667),
    City("45168", "Toledo", "Toledo", "Castilla-La Mancha", 39.8628, -4.0273),
    City("36038", "Pontevedra", "Pontevedra", "Galicia", 42.4310, -8.6444),
    City("34120", "Palencia", "Palencia", "Castilla y León", 42.0095, -4.5288),
    City("13034", "Ciudad Real", "Ciudad Real", "Castilla-La Mancha", 38.9848, -3.9274),
    City("49275", "Zamora", "Zamora", "Castilla y León", 41.5034, -5.7467),
    City("05019", "Ávila", "Ávila", "Castilla y León", 40.6565, -4.6818),
    City("16078", "Cuenca", "Cuenca", "Castilla-La Mancha", 40.0704, -2.1374),
    City("22125", "Huesca", "Huesca", "Aragón", 42.1401, -0.4089),
    City("40194", "Segovia", "Segovia", "Castilla y León", 40.9429, -4.1088),
    City("42173", "Soria", "Soria", "Castilla y León", 41.7666, -2.4790),
    City("44216", "Teruel", "Teruel", "Aragón", 40.3456, -1.1065),
    City("51001", "Ceuta", "Ceuta", "Ceuta", 35.8894, -5.3213),
    City("52001", "Melilla", "Melilla", "Melilla", 35.2923, -2.9381),
)

_CITIES_BY_CODE: dict[str, City] = {city.code: city for city in CITIES}


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))


def nearest_city(
    lat: float,
    lon: float,
    max_distance_km: float | None = None,
) -> tuple[City, float] | None:
    """Find the closest known city.

    Args:
        lat: Latitude
        lon: Longitude
        max_distance_km: Ignore cities further away than this

    Returns:
        (city, distance_km), or None if no city is within range
    """
    best: tuple[City, float] | None = None
    for city in CITIES:
        distance = haversine_km(lat, lon, city.lat, city.lon)
        if best is None or distance < best[1]:
            best = (city, distance)

    if best is None or (max_distance_km is not None and best[1] > max_distance_km):
        return None
    return best


def get_city_by_code(code: str) -> City | None:
    """Look up a city by INE municipality code."""
    return _CITIES_BY_CODE.get(code)


def normalize_name(name: str) -> str:
    """Lowercase and strip accents so "Cádiz" matches "cadiz"."""
    decomposed = unicodedata.normalize("NFKD", name.strip().lower())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def find_cities_by_name(query: str, limit: int = 5) -> list[City]:
    """Find cities whose name or alias matches the query.

    Exact matches come first, then prefix matches, in table order.
    """
    needle = normalize_name(query)
    if not needle:
        return []

    exact: list[City] = []
    prefix: list[City] = []
    for city in CITIES:
        names = [normalize_name(n) for n in (city.name, *city.aliases)]
        if needle in names:
            exact.append(city)
        elif any(n.startswith(needle) for n in names):
            prefix.append(city)
    return (exact + prefix)[:limit]


def find_city_by_name(query: str) -> City | None:
    """Best static match for a place name, or None."""
    matches = find_cities_by_name(query, limit=1)
    return matches[0] if matches else None
