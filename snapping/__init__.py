#Expose the high-level pipeline pieces:
#Primary tier (routing between waypoints)
#Fallback tier (map matching)
#Orchestrator (the "one call" entry point) + error taxonomy

from .errors import (
    SnapError,
    InsufficientPointsError,
    PathTooLongError,
    InvalidCoordinateError,
    InvalidURLError,
    ServerError,
    NoMatchError,
    DecodingFailedError,
    NetworkError,
    SnapCancelledError,
)
from .policy import SnappingPolicy, default_policy
from .route_snapper import RouteSnapper
from .map_matcher import MapMatcher, Matching
from .orchestrator import (
    SnappingOrchestrator,
    SnapResult,
    SnapSource,
    SnapStage,
    resolve_with_fallback,
    snap_to_road,  #the main function to call to snap a drawn path
)

__all__ = [
    "SnapError",
    "InsufficientPointsError",
    "PathTooLongError",
    "InvalidCoordinateError",
    "InvalidURLError",
    "ServerError",
    "NoMatchError",
    "DecodingFailedError",
    "NetworkError",
    "SnapCancelledError",
    "SnappingPolicy",
    "default_policy",
    "RouteSnapper",
    "MapMatcher",
    "Matching",
    "SnappingOrchestrator",
    "SnapResult",
    "SnapSource",
    "SnapStage",
    "resolve_with_fallback",
    "snap_to_road",
]
