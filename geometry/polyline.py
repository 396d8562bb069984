"""
Encoded polyline codec (Google polyline algorithm).

Map-matching services return their geometry in this format: every
coordinate is the signed delta from the previous one, zigzag encoded,
split into 5-bit groups (continuation bit 0x20) and shifted into printable
ASCII by +63. Precision 5 is the standard `polyline`, precision 6 is
`polyline6`.
"""
from __future__ import annotations

from typing import List, Sequence, Tuple

from .models import Coordinate, Path


class PolylineCodecError(ValueError):
    """Base error for malformed polyline strings."""
    pass


class TruncatedPolylineError(PolylineCodecError):
    """The string ended in the middle of a value or a coordinate pair."""
    pass


class InvalidPolylineCharacterError(PolylineCodecError):
    """A character outside the '?'..'~' alphabet was found."""
    pass


def decode_polyline(encoded: str, precision: int = 5) -> Path:
    """
    Decode a polyline string into a list of coordinates.

    Args:
        encoded: polyline encoded string
        precision: number of decimal digits (5 for polyline, 6 for polyline6)

    Returns:
        List of Coordinate in traversal order

    Raises:
        TruncatedPolylineError: the stream ends mid-value or after a latitude
        InvalidPolylineCharacterError: a byte outside the encoding alphabet
    """
    factor = 10 ** precision
    coordinates: List[Coordinate] = []
    index = 0
    lat = 0
    lng = 0

    while index < len(encoded):
        dlat, index = _decode_value(encoded, index)
        if index >= len(encoded):
            raise TruncatedPolylineError(
                f"polyline ends after a latitude with no longitude (offset {index})"
            )
        dlng, index = _decode_value(encoded, index)

        lat += dlat
        lng += dlng
        coordinates.append(Coordinate(lat=lat / factor, lng=lng / factor))

    return coordinates


def encode_polyline(path: Sequence[Coordinate], precision: int = 5) -> str:
    """
    Encode coordinates into a polyline string.

    Deltas are taken between the rounded integer values, so rounding
    errors do not accumulate along the path.
    """
    factor = 10 ** precision
    encoded: List[str] = []
    prev_lat = 0
    prev_lng = 0

    for coordinate in path:
        lat_int = int(round(coordinate.lat * factor))
        lng_int = int(round(coordinate.lng * factor))

        encoded.extend(_encode_value(lat_int - prev_lat))
        encoded.extend(_encode_value(lng_int - prev_lng))

        prev_lat = lat_int
        prev_lng = lng_int

    return "".join(encoded)


def _decode_value(encoded: str, index: int) -> Tuple[int, int]:
    """Read one zigzag value starting at index. Returns (value, next_index)."""
    result = 0
    shift = 0

    while True:
        if index >= len(encoded):
            raise TruncatedPolylineError(
                f"polyline ends inside a continuation group (offset {index})"
            )
        chunk = ord(encoded[index]) - 63
        if chunk < 0 or chunk > 0x3F:
            raise InvalidPolylineCharacterError(
                f"invalid polyline character {encoded[index]!r} at offset {index}"
            )
        index += 1
        result |= (chunk & 0x1F) << shift
        shift += 5
        if chunk < 0x20:
            break

    value = ~(result >> 1) if (result & 1) else (result >> 1)
    return value, index


def _encode_value(value: int) -> List[str]:
    """Encode a single signed delta."""
    # zigzag: non-negative values map to even numbers, negatives to odd
    value = ~(value << 1) if value < 0 else (value << 1)

    chunks = []
    while value >= 0x20:
        chunks.append(chr((0x20 | (value & 0x1F)) + 63))
        value >>= 5

    chunks.append(chr(value + 63))
    return chunks
