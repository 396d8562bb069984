"""
Purpose: Orchestrator / decision pipeline (the "glue").
What it does:
Validates a drawn or recorded path once, tries the routing tier, and falls
back to map matching when routing fails or comes back empty.

State machine (nothing persisted between calls):
START -> VALIDATE -> TRY_PRIMARY -> DONE
TRY_PRIMARY (failed or empty) -> TRY_FALLBACK -> DONE | FAILED

Only the fallback error is ever raised to the caller. On failure the caller
is expected to keep the unsnapped path and warn, not to reject the drawing.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import threading
from typing import Callable, Optional, Sequence, Tuple

from geometry.geo_math import path_length_km
from geometry.models import Coordinate, Path
from routing.osrm_client import OSRMClient

from .errors import (
    InsufficientPointsError,
    InvalidCoordinateError,
    PathTooLongError,
    SnapCancelledError,
    SnapError,
)
from .map_matcher import MapMatcher
from .policy import SnappingPolicy, default_policy
from .route_snapper import RouteSnapper

logger = logging.getLogger(__name__)


class SnapStage(Enum):
    START = "START"
    VALIDATE = "VALIDATE"
    TRY_PRIMARY = "TRY_PRIMARY"
    TRY_FALLBACK = "TRY_FALLBACK"
    DONE = "DONE"
    FAILED = "FAILED"


class SnapSource(Enum):
    ROUTE = "ROUTE"
    MATCH = "MATCH"


@dataclass(frozen=True)
class SnapResult:
    """
    Successful outcome of a snap call.
    """
    path: Path
    source: SnapSource
    path_length_km: float

    # Why the routing tier was skipped over, if it was. Informational only.
    primary_error: Optional[SnapError] = None


def resolve_with_fallback(
    primary: Callable[[], Path],
    fallback: Callable[[], Path],
) -> Tuple[Path, SnapSource, Optional[SnapError]]:
    """
    Run primary, and fallback only when primary fails or returns nothing.

    A primary SnapError is swallowed and returned alongside the result; a
    fallback SnapError propagates. Cancellation is never swallowed.

    Returns:
        (path, source, primary_error)
    """
    primary_error: Optional[SnapError] = None

    try:
        snapped = primary()
        if snapped:
            return snapped, SnapSource.ROUTE, None
        logger.warning("Route snapping returned no geometry, trying map matching fallback")
    except SnapCancelledError:
        raise
    except SnapError as exc:
        primary_error = exc
        logger.warning(f"Route snapping failed: {exc}, trying map matching fallback")

    return fallback(), SnapSource.MATCH, primary_error


class SnappingOrchestrator:
    """
    Stateless entry point for snapping. Build one per process and share it;
    concurrent snap calls do not interact.
    """
    def __init__(
        self,
        route_snapper: Optional[RouteSnapper] = None,
        map_matcher: Optional[MapMatcher] = None,
        policy: Optional[SnappingPolicy] = None,
        client: Optional[OSRMClient] = None,
    ):
        self.policy = policy or default_policy()
        client = client or OSRMClient()
        self.route_snapper = route_snapper or RouteSnapper(client, self.policy)
        self.map_matcher = map_matcher or MapMatcher(client, self.policy)

    def validate(self, path: Sequence[Coordinate]) -> float:
        """
        Input gate, run once before any network call.

        Returns:
            the path length in km (reused by the fallback tier)
        """
        if len(path) < 2:
            raise InsufficientPointsError(len(path))

        for index, coordinate in enumerate(path):
            if not coordinate.is_valid:
                raise InvalidCoordinateError(index, coordinate)

        length_km = path_length_km(path)
        if length_km > self.policy.max_path_km:
            raise PathTooLongError(length_km, self.policy.max_path_km)

        return length_km

    def snap(self, path: Sequence[Coordinate], *, cancel_event: Optional[threading.Event] = None) -> SnapResult:
        """
        Snap a path to roads.

        Raises:
            InsufficientPointsError, InvalidCoordinateError, PathTooLongError
            from validation; the map matcher's SnapError when both tiers
            fail; SnapCancelledError when cancel_event is set.
        """
        path = list(path)
        stage = SnapStage.VALIDATE
        length_km = self.validate(path)

        def try_primary() -> Path:
            nonlocal stage
            stage = SnapStage.TRY_PRIMARY
            return self.route_snapper.snap(path, cancel_event=cancel_event)

        def try_fallback() -> Path:
            nonlocal stage
            stage = SnapStage.TRY_FALLBACK
            return self.map_matcher.snap(path, length_km, cancel_event=cancel_event)

        try:
            snapped, source, primary_error = resolve_with_fallback(try_primary, try_fallback)
        except SnapError as exc:
            logger.error(f"Snapping failed during {stage.value}: {exc}")
            raise

        logger.info(
            f"Snapped {len(path)} points ({length_km:.2f} km) to {len(snapped)} points via {source.value}"
        )
        return SnapResult(path=snapped, source=source, path_length_km=length_km, primary_error=primary_error)

    def snap_to_road(self, path: Sequence[Coordinate], *, cancel_event: Optional[threading.Event] = None) -> Path:
        return self.snap(path, cancel_event=cancel_event).path


def snap_to_road(path: Sequence[Coordinate], *, cancel_event: Optional[threading.Event] = None) -> Path:
    """
    Convenience wrapper using the default policy and environment-configured
    OSRM endpoints.
    """
    return SnappingOrchestrator().snap_to_road(path, cancel_event=cancel_event)
