"""
Purpose: Great-circle distance helpers.
Used for path validation (max length) and for the adaptive map-matching
parameters (search radius / overview detail).
"""
from __future__ import annotations

import math
from typing import Sequence

from .models import Coordinate

EARTH_RADIUS_M = 6_371_000.0


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """
    Haversine distance between two coordinates in meters.

    The atan2 form is used with the haversine term clamped to [0, 1], so
    points less than a meter apart never produce NaN.
    """
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    h = min(1.0, max(0.0, h))

    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def path_length_m(path: Sequence[Coordinate]) -> float:
    """Sum of consecutive-pair distances. 0 for paths shorter than 2."""
    if len(path) < 2:
        return 0.0

    return sum(distance_meters(path[i], path[i + 1]) for i in range(len(path) - 1))


def path_length_km(path: Sequence[Coordinate]) -> float:
    return path_length_m(path) / 1000.0
