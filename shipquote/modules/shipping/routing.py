"""
Route distance collaborator.

A RouteCalculator answers "how far is it from A to B". The quote engine never
calls it directly; a carrier may use it to scale its price by distance.
Live geocoding/routing services are out of scope, so the bundled
implementation reads a static city-distance table.
"""
import logging
import unicodedata
from typing import Dict, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)


class RouteCalculator(Protocol):
    async def get_distance_km(self, origin: str, destination: str) -> float:
        ...


def normalize_place(value: str) -> str:
    """Lowercase and strip accents so "Bogotá" and "bogota" compare equal."""
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).lower().strip()


# Road distances in km between major cities (symmetric)
CITY_DISTANCES_KM: Dict[Tuple[str, str], float] = {
    ("bogota", "medellin"): 415.0,
    ("bogota", "cali"): 460.0,
    ("bogota", "barranquilla"): 1000.0,
    ("bogota", "cartagena"): 1050.0,
    ("bogota", "bucaramanga"): 395.0,
    ("bogota", "pereira"): 320.0,
    ("bogota", "leticia"): 1100.0,
    ("medellin", "cali"): 420.0,
    ("medellin", "barranquilla"): 700.0,
    ("medellin", "cartagena"): 640.0,
    ("medellin", "pereira"): 215.0,
    ("cali", "pereira"): 215.0,
    ("cali", "barranquilla"): 1110.0,
    ("barranquilla", "cartagena"): 120.0,
}


def distance_factor(distance_km: float) -> float:
    """
    Price multiplier by distance band.

    < 100 km: 1.0, < 500 km: 1.2, < 1000 km: 1.5, otherwise 2.0
    """
    if distance_km < 100:
        return 1.0
    if distance_km < 500:
        return 1.2
    if distance_km < 1000:
        return 1.5
    return 2.0


def distance_category(distance_km: float) -> str:
    if distance_km < 100:
        return "local"
    if distance_km < 500:
        return "regional"
    if distance_km < 1000:
        return "national"
    return "long_distance"


class StaticRouteCalculator:
    """RouteCalculator backed by CITY_DISTANCES_KM."""

    def __init__(self, distances: Optional[Dict[Tuple[str, str], float]] = None):
        self._distances = distances if distances is not None else CITY_DISTANCES_KM

    def _find_city(self, place: str) -> Optional[str]:
        normalized = normalize_place(place)
        for a, b in self._distances:
            if a in normalized:
                return a
            if b in normalized:
                return b
        return None

    async def get_distance_km(self, origin: str, destination: str) -> float:
        a = self._find_city(origin)
        b = self._find_city(destination)
        if a is None or b is None:
            raise LookupError(f"No route known between {origin!r} and {destination!r}")
        if a == b:
            return 0.0

        distance = self._distances.get((a, b), self._distances.get((b, a)))
        if distance is None:
            raise LookupError(f"No route known between {origin!r} and {destination!r}")

        logger.debug(f"[ROUTE] {a} -> {b}: {distance:.0f} km")
        return distance
