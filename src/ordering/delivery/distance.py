"""Approximate delivery distance from the store.

A rough, offline geocode: a handful of known cities map to fixed coordinates,
anything else falls back to the store's own location. A six-digit postal code
nudges the point slightly to simulate variance within a city. The result is
informational metadata only; nothing routes or prices on it.
"""

import hashlib
import math
import random
from typing import Literal

from ordering.order.order import DistanceInfo

EARTH_RADIUS_KM = 6371.0
LOCAL_THRESHOLD_KM = 50.0

# Navi Mumbai
STORE_ORIGIN = (19.0330, 73.0297)

CITY_COORDINATES = {
    "navi mumbai": (19.0330, 73.0297),
    "mumbai": (19.0760, 72.8777),
    "thane": (19.2183, 72.9781),
    "pune": (18.5204, 73.8567),
    "delhi": (28.7041, 77.1025),
    "bangalore": (12.9716, 77.5946),
    "hyderabad": (17.3850, 78.4867),
    "chennai": (13.0827, 80.2707),
    "kolkata": (22.5726, 88.3639),
    "ahmedabad": (23.0225, 72.5714),
}


def haversine_km(origin: tuple[float, float], destination: tuple[float, float]) -> float:
    """Great-circle distance in kilometers between two (lat, lng) points."""
    lat1, lng1 = origin
    lat2, lng2 = destination
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)

    a = math.sin(d_lat / 2) ** 2 + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(
        d_lng / 2
    ) ** 2
    a = min(a, 1.0)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


class DistanceEstimator:
    """Estimate how far a delivery address is from the store.

    With ``jitter="deterministic"`` the postal-code nudge is derived from a
    hash of the postal code, so the same address always lands on the same
    point. ``jitter="random"`` draws it from ``rng`` instead.
    """

    def __init__(
        self,
        origin: tuple[float, float] = STORE_ORIGIN,
        jitter: Literal["deterministic", "random"] = "deterministic",
        rng: random.Random | None = None,
    ) -> None:
        self.origin = origin
        self.jitter = jitter
        self._rng = rng or random.Random()

    def _draws(self, postal_code: str) -> tuple[float, float]:
        if self.jitter == "random":
            return self._rng.random(), self._rng.random()
        digest = hashlib.sha256(postal_code.encode()).digest()
        scale = float(2**32)
        return int.from_bytes(digest[:4], "big") / scale, int.from_bytes(digest[4:8], "big") / scale

    def locate(self, city: str, postal_code: str | None) -> tuple[float, float]:
        lat, lng = CITY_COORDINATES.get((city or "").strip().lower(), self.origin)

        postal_code = (postal_code or "").strip()
        if len(postal_code) == 6 and postal_code[-2:].isdigit():
            offset = int(postal_code[-2:]) / 100
            lat_draw, lng_draw = self._draws(postal_code)
            lat += (lat_draw - 0.5) * offset * 0.1
            lng += (lng_draw - 0.5) * offset * 0.1
        return lat, lng

    def estimate(self, address_line: str, city: str, postal_code: str | None) -> DistanceInfo:
        # address_line is not used by the city table
        kilometers = round(haversine_km(self.origin, self.locate(city, postal_code)), 2)
        return DistanceInfo(kilometers=kilometers, is_local=kilometers <= LOCAL_THRESHOLD_KM)
