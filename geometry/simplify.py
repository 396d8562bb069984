"""
Purpose: Ramer-Douglas-Peucker path simplification.
What it does:
- rdp_simplify: classic RDP with a fixed tolerance
- simplify_path: searches the tolerance so the result lands near a target
  point count (map-matching endpoints cap the number of coordinates)

Distances here are measured in raw (lat, lng) degrees, not meters. This
keeps simplification independent of latitude and is a known approximation:
path validation elsewhere uses Haversine meters.
"""
from __future__ import annotations

import logging
import math
from typing import Sequence

from .models import Coordinate, Path

logger = logging.getLogger(__name__)

DEFAULT_EPSILON_MIN = 0.00001
DEFAULT_EPSILON_MAX = 0.01
DEFAULT_MAX_ITERATIONS = 10
DEFAULT_COUNT_TOLERANCE = 10


def _perpendicular_distance(point: Coordinate, line_start: Coordinate, line_end: Coordinate) -> float:
    """Distance (degrees) from point to the segment line_start -> line_end."""
    dx = line_end.lng - line_start.lng
    dy = line_end.lat - line_start.lat

    if dx == 0 and dy == 0:
        return math.hypot(point.lng - line_start.lng, point.lat - line_start.lat)

    t = ((point.lng - line_start.lng) * dx + (point.lat - line_start.lat) * dy) / (dx * dx + dy * dy)
    t = max(0.0, min(1.0, t))

    proj_x = line_start.lng + t * dx
    proj_y = line_start.lat + t * dy
    return math.hypot(point.lng - proj_x, point.lat - proj_y)


def rdp_simplify(path: Sequence[Coordinate], epsilon: float) -> Path:
    """
    Simplify a path with tolerance epsilon (degrees).

    Each range [first, last] is split at its farthest point from the chord
    while that distance exceeds epsilon; otherwise only the range endpoints
    survive. Ranges are processed from an explicit stack so very long traces
    do not hit the recursion limit.
    """
    count = len(path)
    if count < 3:
        return list(path)

    keep = [False] * count
    keep[0] = True
    keep[-1] = True

    stack = [(0, count - 1)]
    while stack:
        first, last = stack.pop()
        if last - first < 2:
            continue

        max_distance = 0.0
        max_index = first
        for index in range(first + 1, last):
            distance = _perpendicular_distance(path[index], path[first], path[last])
            if distance > max_distance:
                max_distance = distance
                max_index = index

        if max_distance > epsilon:
            keep[max_index] = True
            stack.append((first, max_index))
            stack.append((max_index, last))

    return [point for point, kept in zip(path, keep) if kept]


def simplify_path(
    path: Sequence[Coordinate],
    target_count: int,
    *,
    epsilon_min: float = DEFAULT_EPSILON_MIN,
    epsilon_max: float = DEFAULT_EPSILON_MAX,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    count_tolerance: int = DEFAULT_COUNT_TOLERANCE,
) -> Path:
    """
    Reduce a path to roughly target_count points.

    Binary search over epsilon in [epsilon_min, epsilon_max]: a trial that
    keeps too many points raises the lower bound, anything else lowers the
    upper bound. The search stops after max_iterations trials or as soon as
    a trial is within count_tolerance of the target. The last trial is
    returned, so the result may land slightly above target_count. This is
    approximate on purpose; the exact count is not guaranteed.

    Args:
        path: input coordinates
        target_count: desired number of points

    Returns:
        The input unchanged when it already fits, otherwise a subsequence
        that always keeps the first and last coordinate.
    """
    if len(path) <= target_count:
        return list(path)

    low = epsilon_min
    high = epsilon_max
    result: Path = list(path)

    for _ in range(max_iterations):
        epsilon = (low + high) / 2
        result = rdp_simplify(path, epsilon)

        if len(result) > target_count:
            low = epsilon
        else:
            high = epsilon

        if abs(len(result) - target_count) <= count_tolerance:
            break

    logger.debug(f"Simplified path from {len(path)} to {len(result)} points (target {target_count})")
    return result
