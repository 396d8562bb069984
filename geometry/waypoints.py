"""
Purpose: Reduce a long path to a bounded set of routing waypoints.
Each consecutive waypoint pair becomes one directions request, so the
waypoint count bounds the number of outbound calls per snap.
"""
from __future__ import annotations

from typing import Sequence

from .models import Coordinate, Path


def select_waypoints(path: Sequence[Coordinate], max_count: int) -> Path:
    """
    Pick evenly spaced waypoints, always keeping the first and last point.

    Interior points are taken at int(i * step) with
    step = (len - 1) / (max_count - 1). The result is an ordered
    subsequence of the input; no points are synthesized.
    """
    if max_count < 2:
        raise ValueError("max_count must be >= 2")

    if len(path) <= max_count:
        return list(path)

    step = (len(path) - 1) / (max_count - 1)

    waypoints = [path[0]]
    for i in range(1, max_count - 1):
        waypoints.append(path[int(i * step)])
    waypoints.append(path[-1])

    return waypoints
