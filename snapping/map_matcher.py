"""
Purpose: Fallback snapping tier.
What it does:
Submits the (simplified) trace to the map-matching endpoint in one request
and decodes the matched geometry from its encoded polyline.

Adaptive parameters:
- search radius per point widens for long paths (GPS drift accumulates)
- overview detail is full for long paths, simplified for short ones
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
import threading
from typing import Any, Dict, List, Optional, Sequence

from geometry.models import Coordinate, Path
from geometry.polyline import PolylineCodecError, decode_polyline
from geometry.simplify import simplify_path
from routing.osrm_client import OSRMClient, OSRMError

from .errors import DecodingFailedError, InsufficientPointsError, NoMatchError, from_osrm_error
from .policy import SnappingPolicy, default_policy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Matching:
    """One entry of the match response's `matchings` array."""

    geometry: str
    confidence: Optional[float] = None
    distance: Optional[float] = None  # in meters
    duration: Optional[float] = None  # in seconds

    @staticmethod
    def from_json(payload: Dict[str, Any]) -> Matching:
        geometry = payload.get("geometry")
        return Matching(
            geometry=geometry if isinstance(geometry, str) else "",
            confidence=payload.get("confidence"),
            distance=payload.get("distance"),
            duration=payload.get("duration"),
        )


def first_matching(data: Dict[str, Any]) -> Matching:
    """
    Validate a match response and return its first matching.

    Raises NoMatchError unless code == "Ok" and the first matching carries
    a non-empty geometry string.
    """
    if data.get("code") != "Ok":
        raise NoMatchError(f"Could not match path to road ({data.get('code')}: {data.get('message', '')})")

    matchings = data.get("matchings") or []
    if not isinstance(matchings, list) or not matchings or not isinstance(matchings[0], dict):
        raise NoMatchError("Could not match path to road (no matchings)")

    matching = Matching.from_json(matchings[0])
    if not matching.geometry:
        raise NoMatchError("Could not match path to road (empty geometry)")

    return matching


class MapMatcher:
    """
    Snaps a path with a single map-matching request.
    """
    def __init__(self, client: Optional[OSRMClient] = None, policy: Optional[SnappingPolicy] = None):
        self.client = client or OSRMClient()
        self.policy = policy or default_policy()

    def prepare_trace(self, path: Sequence[Coordinate]) -> Path:
        # matching endpoints cap the number of coordinates per request
        return simplify_path(
            path,
            self.policy.match_max_points,
            epsilon_min=self.policy.simplify_epsilon_min,
            epsilon_max=self.policy.simplify_epsilon_max,
            max_iterations=self.policy.simplify_max_iterations,
            count_tolerance=self.policy.simplify_count_tolerance,
        )

    def snap(
        self,
        path: Sequence[Coordinate],
        path_length_km: float,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> Path:
        """
        Args:
            path: original trace
            path_length_km: precomputed Haversine length of `path`

        Returns:
            the matched, non-empty road path

        Raises:
            InvalidURLError, ServerError, NoMatchError, DecodingFailedError,
            NetworkError, SnapCancelledError
        """
        if len(path) < 2:
            raise InsufficientPointsError(len(path))

        trace = self.prepare_trace(path)
        radius = self.policy.match_radius_m(path_length_km)
        radiuses: List[int] = [radius] * len(trace)
        overview = self.policy.match_overview(path_length_km)

        logger.debug(
            f"Matching {len(trace)} points (from {len(path)}), radius={radius}, overview={overview}"
        )

        try:
            data = self.client.match(
                trace,
                radiuses=radiuses,
                overview=overview,
                geometries=self.policy.match_geometries,
                timeout=(self.policy.match_request_timeout_s, self.policy.match_request_timeout_s),
                total_timeout=self.policy.match_total_timeout_s,
                cancel_event=cancel_event,
            )
        except OSRMError as exc:
            raise from_osrm_error(exc) from exc

        matching = first_matching(data)
        logger.debug(
            f"Matched geometry: confidence={matching.confidence}, "
            f"distance={matching.distance}, duration={matching.duration}"
        )

        try:
            snapped = decode_polyline(matching.geometry, precision=self.policy.geometry_precision)
        except PolylineCodecError as exc:
            raise DecodingFailedError(f"Failed to decode road data: {exc}") from exc

        if not snapped:
            raise DecodingFailedError("Failed to decode road data (empty geometry)")

        return snapped
