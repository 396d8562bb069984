"""
Purpose: Domain models for route geometry.
What it does:
- Defines Coordinate (lat, lng) as an immutable value type
- Defines Path as an ordered list of coordinates (traversal order)

Rule: No distance maths, no HTTP. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Dict, List, Mapping, Tuple


@dataclass(frozen=True)
class Coordinate:
    """
    A single observed or snapped point.

    Equality and hashing are by value, so two coordinates read from
    different sources compare equal when lat/lng match exactly.
    """

    lat: float
    lng: float

    @property
    def is_valid(self) -> bool:
        """True when both values are finite and inside WGS84 bounds."""
        if not (math.isfinite(self.lat) and math.isfinite(self.lng)):
            return False
        return -90.0 <= self.lat <= 90.0 and -180.0 <= self.lng <= 180.0

    def as_lng_lat(self) -> Tuple[float, float]:
        # routing providers expect (lon, lat)
        return (self.lng, self.lat)

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    @staticmethod
    def from_dict(payload: Mapping[str, Any]) -> Coordinate:
        """Build from the {"lat": .., "lng": ..} shape used by the roads API."""
        return Coordinate(lat=float(payload["lat"]), lng=float(payload["lng"]))

    @staticmethod
    def from_lat_lng(pair: Tuple[float, float]) -> Coordinate:
        lat, lng = pair
        return Coordinate(lat=float(lat), lng=float(lng))


# Internal path type: ordered, no implicit interpolation
Path = List[Coordinate]
