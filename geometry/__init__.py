"""
Geometry package.

Public API:
- Domain models: Coordinate, Path
- Distance helpers: distance_meters, path_length_m, path_length_km
- Polyline codec: encode_polyline, decode_polyline (+ codec errors)
- Point reduction: rdp_simplify, simplify_path, select_waypoints

No HTTP here. Pure functions over coordinate lists.
"""
from .models import Coordinate, Path
from .geo_math import distance_meters, path_length_m, path_length_km
from .polyline import (
    decode_polyline,
    encode_polyline,
    PolylineCodecError,
    TruncatedPolylineError,
    InvalidPolylineCharacterError,
)
from .simplify import rdp_simplify, simplify_path
from .waypoints import select_waypoints

__all__ = [
    "Coordinate",
    "Path",
    "distance_meters",
    "path_length_m",
    "path_length_km",
    "decode_polyline",
    "encode_polyline",
    "PolylineCodecError",
    "TruncatedPolylineError",
    "InvalidPolylineCharacterError",
    "rdp_simplify",
    "simplify_path",
    "select_waypoints",
]
