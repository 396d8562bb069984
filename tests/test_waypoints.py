import pytest

from geometry.models import Coordinate
from geometry.waypoints import select_waypoints


def make_path(count):
    return [Coordinate(53.0 + i * 0.001, -1.0 - i * 0.001) for i in range(count)]


def test_short_path_is_returned_unchanged():
    path = make_path(10)
    assert select_waypoints(path, 10) == path


def test_evenly_spaced_indices():
    path = make_path(100)

    waypoints = select_waypoints(path, 10)

    assert waypoints == [path[i] for i in (0, 11, 22, 33, 44, 55, 66, 77, 88, 99)]


@pytest.mark.parametrize("count,max_count", [(25, 10), (11, 10), (3, 2), (1000, 7), (5, 5)])
def test_cardinality_and_endpoints(count, max_count):
    path = make_path(count)

    waypoints = select_waypoints(path, max_count)

    assert len(waypoints) == min(count, max_count)
    assert waypoints[0] == path[0]
    assert waypoints[-1] == path[-1]

    indices = [path.index(point) for point in waypoints]
    assert indices == sorted(set(indices))


def test_max_count_below_two_is_rejected():
    with pytest.raises(ValueError):
        select_waypoints(make_path(5), 1)
