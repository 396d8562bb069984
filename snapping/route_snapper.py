"""
Purpose: Primary snapping tier.
What it does:
Reduces the path to a handful of waypoints and asks the routing provider for
driving directions between each consecutive pair. The concatenated route
geometries follow real roads by construction.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional, Sequence

from geometry.geo_math import path_length_km
from geometry.models import Coordinate, Path
from geometry.waypoints import select_waypoints
from routing.osrm_client import OSRMClient, OSRMError

from .errors import InsufficientPointsError, PathTooLongError, SnapCancelledError, from_osrm_error
from .policy import SnappingPolicy, default_policy

logger = logging.getLogger(__name__)


class RouteSnapper:
    """
    Snaps a path by routing between evenly spaced waypoints.

    Legs are requested one after another (each leg starts where the previous
    one ended). Any failed leg fails the whole attempt; the orchestrator
    decides whether to fall back.
    """
    def __init__(self, client: Optional[OSRMClient] = None, policy: Optional[SnappingPolicy] = None):
        self.client = client or OSRMClient()
        self.policy = policy or default_policy()

    def snap(self, path: Sequence[Coordinate], *, cancel_event: Optional[threading.Event] = None) -> Path:
        """
        Returns:
            the road-following path, or an empty list when the provider
            returned no route geometry at all

        Raises:
            SnapError subclasses for invalid input or a failed leg
        """
        if len(path) < 2:
            raise InsufficientPointsError(len(path))

        length_km = path_length_km(path)
        if length_km > self.policy.max_path_km:
            raise PathTooLongError(length_km, self.policy.max_path_km)

        waypoints = select_waypoints(path, self.policy.max_waypoints)
        snapped: Path = []

        for leg_index in range(len(waypoints) - 1):
            if cancel_event is not None and cancel_event.is_set():
                raise SnapCancelledError(f"Cancelled before leg {leg_index + 1} of {len(waypoints) - 1}")

            source = waypoints[leg_index]
            destination = waypoints[leg_index + 1]

            try:
                leg = self.client.route(
                    source,
                    destination,
                    timeout=self.policy.route_leg_timeout_s,
                    cancel_event=cancel_event,
                )
            except OSRMError as exc:
                raise from_osrm_error(exc) from exc

            logger.debug(f"Leg {leg_index + 1}/{len(waypoints) - 1}: {len(leg)} points")

            if leg_index == 0:
                snapped.extend(leg)
            elif leg:
                # first point duplicates the previous leg's last point
                snapped.extend(leg[1:])

        return snapped
