import pytest

from geometry.models import Coordinate
from geometry.polyline import encode_polyline


class MockOSRM:
    """
    In-memory stand-in for routing.osrm_client.OSRMClient.

    route() returns a straight "road" with a midpoint unless a canned
    result or error is configured; match() returns the trace itself,
    polyline encoded, unless a payload or error is configured.
    """

    def __init__(self, route_error=None, route_result=None, match_error=None, match_payload=None):
        self.route_error = route_error
        self.route_result = route_result
        self.match_error = match_error
        self.match_payload = match_payload
        self.route_calls = []
        self.match_calls = []

    def route(self, source, destination, *, timeout=None, cancel_event=None):
        self.route_calls.append((source, destination, timeout))
        if self.route_error is not None:
            raise self.route_error
        if self.route_result is not None:
            return list(self.route_result)
        midpoint = Coordinate(
            round((source.lat + destination.lat) / 2, 5),
            round((source.lng + destination.lng) / 2, 5),
        )
        return [source, midpoint, destination]

    def match(self, coordinates, *, radiuses, overview="full", geometries="polyline",
              timeout=None, total_timeout=None, cancel_event=None):
        self.match_calls.append({
            "coordinates": list(coordinates),
            "radiuses": list(radiuses),
            "overview": overview,
            "geometries": geometries,
            "timeout": timeout,
            "total_timeout": total_timeout,
        })
        if self.match_error is not None:
            raise self.match_error
        if self.match_payload is not None:
            return self.match_payload
        return {
            "code": "Ok",
            "matchings": [{"geometry": encode_polyline(coordinates), "confidence": 0.9}],
            "tracepoints": [],
        }


@pytest.fixture
def short_drawn_path():
    return [
        Coordinate(53.40, -1.82),
        Coordinate(53.41, -1.83),
        Coordinate(53.42, -1.84),
    ]
