"""
Snap error taxonomy.

Fatal input errors (InsufficientPointsError, PathTooLongError,
InvalidCoordinateError) are raised before any network call. The others come
out of the provider tiers; only the fallback tier's error ever reaches the
caller of the orchestrator.
"""
from __future__ import annotations

from typing import Optional

from geometry.models import Coordinate
from routing.osrm_client import (
    OSRMCancelledError,
    OSRMError,
    OSRMHTTPError,
    OSRMInvalidURLError,
    OSRMResponseError,
    OSRMTransportError,
)


class SnapError(Exception):
    """Base class for every snapping failure."""
    pass


class InsufficientPointsError(SnapError):
    def __init__(self, count: int = 0):
        self.count = count
        super().__init__(f"At least 2 points are required (got {count})")


class PathTooLongError(SnapError):
    def __init__(self, length_km: float, max_km: float):
        self.length_km = length_km
        self.max_km = max_km
        super().__init__(f"Road path cannot exceed {max_km:g}km (got {length_km:.2f}km)")


class InvalidCoordinateError(SnapError):
    def __init__(self, index: int, coordinate: Coordinate):
        self.index = index
        self.coordinate = coordinate
        super().__init__(f"Invalid coordinate at index {index}: {coordinate}")


class InvalidURLError(SnapError):
    """Request URL could not be built (configuration error)."""
    pass


class ServerError(SnapError):
    def __init__(self, status_code: Optional[int] = None, message: str = "Server error occurred"):
        self.status_code = status_code
        super().__init__(message if status_code is None else f"{message} (HTTP {status_code})")


class NoMatchError(SnapError):
    """The provider found no plausible road alignment."""
    pass


class DecodingFailedError(SnapError):
    """Malformed or empty geometry in an otherwise successful response."""
    pass


class NetworkError(SnapError):
    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Network error: {cause}")


class SnapCancelledError(SnapError):
    """The caller cancelled the snap operation."""
    pass


def from_osrm_error(exc: OSRMError) -> SnapError:
    """Translate a routing adapter error into the snap taxonomy."""
    if isinstance(exc, OSRMCancelledError):
        return SnapCancelledError(str(exc))
    if isinstance(exc, OSRMInvalidURLError):
        return InvalidURLError(str(exc))
    if isinstance(exc, OSRMHTTPError):
        return ServerError(exc.status_code)
    if isinstance(exc, OSRMResponseError):
        return DecodingFailedError(str(exc))
    if isinstance(exc, OSRMTransportError):
        return NetworkError(exc.__cause__ or exc)
    return NetworkError(exc)
