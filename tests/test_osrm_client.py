import itertools
import json
import threading
from types import SimpleNamespace

import pytest
import requests

from geometry.models import Coordinate
from routing import osrm_client
from routing.osrm_client import (
    OSRMCancelledError,
    OSRMClient,
    OSRMHTTPError,
    OSRMInvalidURLError,
    OSRMResponseError,
    OSRMTransportError,
)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, body=None, chunks=None):
        self.status_code = status_code
        if chunks is not None:
            self._chunks = chunks
        else:
            raw = body if body is not None else json.dumps(payload).encode("utf-8")
            self._chunks = [raw[i:i + 16] for i in range(0, len(raw), 16)]

    def iter_content(self, chunk_size=1):
        return iter(self._chunks)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


class FakeHTTP:
    """Stands in for the requests module; replays canned responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None, stream=False):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout, "stream": stream})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


SOURCE = Coordinate(53.40, -1.82)
DESTINATION = Coordinate(53.41, -1.83)


def make_client(*responses, **kwargs):
    http = FakeHTTP(*responses)
    return OSRMClient(base_url="https://osrm.test", http=http, user_agent="test-agent", **kwargs), http


def test_route_parses_geojson_geometry():
    client, http = make_client(
        FakeResponse(payload={
            "code": "Ok",
            "routes": [{"geometry": {"type": "LineString", "coordinates": [[-1.82, 53.40], [-1.825, 53.405], [-1.83, 53.41]]}}],
        })
    )

    coordinates = client.route(SOURCE, DESTINATION, timeout=15.0)

    assert coordinates == [SOURCE, Coordinate(53.405, -1.825), DESTINATION]
    call = http.calls[0]
    assert call["url"] == "https://osrm.test/route/v1/driving/-1.82,53.4;-1.83,53.41"
    assert call["params"]["alternatives"] == "false"
    assert call["params"]["geometries"] == "geojson"
    assert call["headers"] == {"User-Agent": "test-agent"}
    assert call["timeout"] == 15.0
    assert call["stream"] is True


def test_route_without_routes_is_empty():
    client, _ = make_client(FakeResponse(status_code=400, payload={"code": "NoRoute", "message": "Impossible route"}))

    assert client.route(SOURCE, DESTINATION) == []


def test_route_http_error():
    client, _ = make_client(FakeResponse(status_code=502, body=b"<html>bad gateway</html>"))

    with pytest.raises(OSRMHTTPError) as excinfo:
        client.route(SOURCE, DESTINATION)

    assert excinfo.value.status_code == 502


def test_route_malformed_geometry():
    client, _ = make_client(FakeResponse(payload={"code": "Ok", "routes": [{"geometry": {"coordinates": [["x"]]}}]}))

    with pytest.raises(OSRMResponseError):
        client.route(SOURCE, DESTINATION)


def test_transport_failure_is_wrapped():
    cause = requests.exceptions.ConnectionError("name resolution failed")
    client, _ = make_client(cause)

    with pytest.raises(OSRMTransportError) as excinfo:
        client.route(SOURCE, DESTINATION)

    assert excinfo.value.__cause__ is cause


def test_non_json_success_body():
    client, _ = make_client(FakeResponse(status_code=200, body=b"not json"))

    with pytest.raises(OSRMResponseError):
        client.match([SOURCE, DESTINATION], radiuses=[50, 50])


def test_invalid_base_url():
    client = OSRMClient(base_url="router.project-osrm.org", http=FakeHTTP())

    with pytest.raises(OSRMInvalidURLError):
        client.route(SOURCE, DESTINATION)


def test_match_builds_query():
    client, http = make_client(FakeResponse(payload={"code": "Ok", "matchings": [{"geometry": "abc"}]}))

    data = client.match(
        [SOURCE, DESTINATION],
        radiuses=[75, 75],
        overview="simplified",
        timeout=(30.0, 30.0),
        total_timeout=60.0,
    )

    assert data["code"] == "Ok"
    call = http.calls[0]
    assert call["url"] == "https://osrm.test/match/v1/driving/-1.82,53.4;-1.83,53.41"
    assert call["params"] == {"overview": "simplified", "geometries": "polyline", "radiuses": "75;75"}
    assert call["timeout"] == (30.0, 30.0)


def test_match_uses_separate_match_url():
    client, http = make_client(FakeResponse(payload={"code": "Ok"}), match_url="http://localhost:5000/")

    client.match([SOURCE, DESTINATION], radiuses=[50, 50])

    assert http.calls[0]["url"].startswith("http://localhost:5000/match/v1/driving/")


def test_match_non_2xx():
    client, _ = make_client(FakeResponse(status_code=429, payload={"code": "TooBig", "message": "slow down"}))

    with pytest.raises(OSRMHTTPError) as excinfo:
        client.match([SOURCE, DESTINATION], radiuses=[50, 50])

    assert excinfo.value.status_code == 429


def test_cancelled_before_request():
    cancel = threading.Event()
    cancel.set()
    client, http = make_client()

    with pytest.raises(OSRMCancelledError):
        client.route(SOURCE, DESTINATION, cancel_event=cancel)

    assert http.calls == []


def test_cancelled_while_reading_body():
    cancel = threading.Event()

    def chunks():
        yield b'{"code": '
        cancel.set()
        yield b'"Ok"}'

    client, _ = make_client(FakeResponse(chunks=chunks()))

    with pytest.raises(OSRMCancelledError):
        client.match([SOURCE, DESTINATION], radiuses=[50, 50], cancel_event=cancel)


def test_overall_deadline(monkeypatch):
    clock = itertools.count(0.0, 100.0)
    monkeypatch.setattr(osrm_client, "time", SimpleNamespace(monotonic=lambda: next(clock)))
    client, _ = make_client(FakeResponse(payload={"code": "Ok", "matchings": []}))

    with pytest.raises(OSRMTransportError):
        client.match([SOURCE, DESTINATION], radiuses=[50, 50], total_timeout=60.0)
