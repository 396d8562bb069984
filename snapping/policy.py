"""
Purpose: Central configuration for snapping behavior (single source of truth).
What it does:

Stores all tunable thresholds/caps:

MAX_PATH_KM = 20

MAX_WAYPOINTS = 10 (one directions request per consecutive pair)

MATCH_MAX_POINTS = 100 (matching endpoint payload cap)

MATCH radius / overview thresholds, request timeouts, RDP search bounds

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass

_GEOMETRY_PRECISION = {"polyline": 5, "polyline6": 6}


@dataclass(frozen=True)
class SnappingPolicy:
    """
    Central configuration for road snapping.

    Keep all snapping thresholds here so behavior can be tuned without
    touching the snapper/matcher/orchestrator logic.
    """

    # --- Validation ---
    max_path_km: float = 20.0

    # --- Primary tier (routing between waypoints) ---
    max_waypoints: int = 10
    # Per-leg bound; providers otherwise apply their own defaults.
    route_leg_timeout_s: float = 15.0

    # --- Fallback tier (map matching) ---
    match_max_points: int = 100

    # Paths longer than this get the wide search radius.
    match_long_path_km: float = 10.0
    match_long_radius_m: int = 75
    match_short_radius_m: int = 50

    # Paths longer than this request overview=full, otherwise simplified.
    match_full_overview_km: float = 5.0

    match_request_timeout_s: float = 30.0
    match_total_timeout_s: float = 60.0

    # "polyline" (1e5) or "polyline6" (1e6)
    match_geometries: str = "polyline"

    # --- RDP epsilon search (degrees) ---
    simplify_epsilon_min: float = 0.00001
    simplify_epsilon_max: float = 0.01
    simplify_max_iterations: int = 10
    simplify_count_tolerance: int = 10

    @property
    def geometry_precision(self) -> int:
        return _GEOMETRY_PRECISION[self.match_geometries]

    def match_radius_m(self, path_length_km: float) -> int:
        if path_length_km > self.match_long_path_km:
            return self.match_long_radius_m
        return self.match_short_radius_m

    def match_overview(self, path_length_km: float) -> str:
        return "full" if path_length_km > self.match_full_overview_km else "simplified"

    def validate(self) -> None:
        """
        Basic sanity checks. Call once at startup if you want.
        """
        if self.max_path_km <= 0:
            raise ValueError("max_path_km must be > 0")

        if self.max_waypoints < 2:
            raise ValueError("max_waypoints must be >= 2")

        if self.match_max_points < 2:
            raise ValueError("match_max_points must be >= 2")

        if self.match_short_radius_m <= 0 or self.match_long_radius_m <= 0:
            raise ValueError("match radiuses must be > 0")

        if self.route_leg_timeout_s <= 0 or self.match_request_timeout_s <= 0:
            raise ValueError("timeouts must be > 0")

        if self.match_total_timeout_s < self.match_request_timeout_s:
            raise ValueError("match_total_timeout_s must be >= match_request_timeout_s")

        if self.match_geometries not in _GEOMETRY_PRECISION:
            raise ValueError(f"match_geometries must be one of {sorted(_GEOMETRY_PRECISION)}")

        if not 0 < self.simplify_epsilon_min < self.simplify_epsilon_max:
            raise ValueError("simplify epsilon bounds must satisfy 0 < min < max")

        if self.simplify_max_iterations < 1:
            raise ValueError("simplify_max_iterations must be >= 1")

        if self.simplify_count_tolerance < 0:
            raise ValueError("simplify_count_tolerance must be >= 0")


def default_policy() -> SnappingPolicy:
    """
    Convenience factory for the default policy.
    """
    p = SnappingPolicy()
    p.validate()
    return p
