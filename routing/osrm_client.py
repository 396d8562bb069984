#Purpose: The OSRM "adapter/client".
#Sole responsibility: talk to OSRM via HTTP and return normalized outputs.
#Encapsulates OSRM-specific details:
#coordinate formatting (lon,lat)
#URL construction (/route, /match)
#timeouts, overall deadline, cancellation while reading the body
#parsing response JSON into internal shapes
#It should not contain snapping rules or fallback decisions.

from dotenv import load_dotenv
import json
import logging
import os
import threading
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from urllib.parse import urlsplit

import requests

from geometry.models import Coordinate

# Read OSRM base URLs from environment
# Example in .env:
# OSRM_BASE_URL=http://router.project-osrm.org
# OSRM_MATCH_URL=http://localhost:5000
load_dotenv()
BASE_URL = os.getenv("OSRM_BASE_URL", "https://router.project-osrm.org")
MATCH_URL = os.getenv("OSRM_MATCH_URL", BASE_URL)
PROFILE = os.getenv("OSRM_PROFILE", "driving")
USER_AGENT = os.getenv("SNAP_USER_AGENT", "RoadRank-Snapper/1.0")

logger = logging.getLogger(__name__)

Timeout = Union[float, Tuple[float, float]]

_CHUNK_SIZE = 8192


class OSRMError(Exception):
    """Custom exception for OSRM client errors."""
    pass


class OSRMInvalidURLError(OSRMError, ValueError):
    """The configured base URL cannot produce a valid request URL."""
    pass


class OSRMHTTPError(OSRMError):
    """OSRM answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        super().__init__(f"OSRM returned HTTP {status_code}" + (f": {message}" if message else ""))


class OSRMTransportError(OSRMError):
    """DNS, TLS, connection, timeout or deadline failure."""
    pass


class OSRMResponseError(OSRMError):
    """The body was not the JSON shape OSRM documents."""
    pass


class OSRMCancelledError(OSRMError):
    """The caller cancelled the request."""
    pass


class OSRMClient:
    """
    OSRM Adapter / Client

    Sole responsibility:
    - Talk to OSRM via HTTP
    - Convert internal Coordinate(lat, lng) -> OSRM "lon,lat"
    - Return normalized outputs

    Holds no per-request state, so one instance can be shared between
    threads. `http` is anything exposing requests' `get` (the requests
    module by default, or a requests.Session).
    """
    def __init__(
        self,
        base_url: Optional[str] = None,
        match_url: Optional[str] = None,
        profile: str = PROFILE,
        user_agent: str = USER_AGENT,
        http: Any = None,
    ):
        self.base_url = (base_url or BASE_URL).rstrip("/")
        self.match_url = (match_url or MATCH_URL or self.base_url).rstrip("/")
        self.profile = profile  #the mode of transportation (driving, walking, cycling)
        self.user_agent = user_agent
        self.http = http or requests

    #----------------
    # Internal helper methods for coordinate formatting, URL construction, error handling
    #----------------
    def format_coordinates(self, coords: Sequence[Coordinate]) -> str:
        """Convert coordinates to OSRM format 'lon,lat;lon,lat;...'"""
        return ";".join(f"{c.lng},{c.lat}" for c in coords)

    def build_url(self, base_url: str, service: str, coords: Sequence[Coordinate]) -> str:
        parts = urlsplit(base_url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise OSRMInvalidURLError(f"Invalid OSRM base URL: {base_url!r}")

        return f"{base_url}/{service}/v1/{self.profile}/{self.format_coordinates(coords)}"

    def _get(
        self,
        url: str,
        params: Dict[str, str],
        *,
        timeout: Timeout,
        total_timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> Tuple[int, Any]:
        """
        GET url and decode the JSON body.

        The body is streamed so that cancellation and the overall deadline
        can abort the transfer. Returns (status_code, payload); payload is
        None when a non-2xx response has no JSON body.
        """
        _raise_if_cancelled(cancel_event)
        deadline = time.monotonic() + total_timeout if total_timeout else None

        try:
            with self.http.get(
                url,
                params=params,
                headers={"User-Agent": self.user_agent},
                timeout=timeout,
                stream=True,
            ) as response:
                status_code = response.status_code
                chunks = []
                for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                    _raise_if_cancelled(cancel_event)
                    if deadline is not None and time.monotonic() > deadline:
                        raise OSRMTransportError(f"OSRM request exceeded {total_timeout}s overall timeout")
                    chunks.append(chunk)
        except requests.exceptions.RequestException as exc:
            raise OSRMTransportError(str(exc)) from exc

        body = b"".join(chunks)
        ok = 200 <= status_code < 300

        try:
            payload = json.loads(body.decode("utf-8")) if body else None
        except ValueError as exc:
            if not ok:
                return status_code, None
            raise OSRMResponseError(f"OSRM returned a non-JSON body: {exc}") from exc

        return status_code, payload

    #----------------
    # Public methods for route, match
    #----------------
    def route(
        self,
        source: Coordinate,
        destination: Coordinate,
        *,
        timeout: Timeout = 15.0,
        cancel_event: Optional[threading.Event] = None,
    ) -> List[Coordinate]:
        """
        calls the OSRM /route endpoint between two waypoints and returns the
        road-following geometry of the single best route.

        Returns:
            list of Coordinate, empty when OSRM finds no route
        """
        url = self.build_url(self.base_url, "route", [source, destination])

        status_code, data = self._get(
            url,
            params={
                "alternatives": "false",  # single route only
                "overview": "full",
                "geometries": "geojson",  # native [lon, lat] arrays
                "steps": "false",
            },
            timeout=timeout,
            cancel_event=cancel_event,
        )

        code = data.get("code") if isinstance(data, dict) else None

        # OSRM reports unroutable pairs as NoRoute / NoSegment; not an error for us
        if code in ("NoRoute", "NoSegment"):
            logger.debug(f"OSRM found no route between {source} and {destination} ({code})")
            return []

        if not 200 <= status_code < 300:
            raise OSRMHTTPError(status_code, data.get("message", "") if isinstance(data, dict) else "")

        if code != "Ok":
            raise OSRMResponseError(f"OSRM error: {data.get('message', 'Unknown error') if isinstance(data, dict) else data}")

        routes = data.get("routes") or []
        if not routes:
            return []

        try:
            geometry = routes[0].get("geometry") or {}
            raw_coordinates = geometry.get("coordinates") or []
            #OSRM returns [lon, lat]
            return [Coordinate(lat=float(point[1]), lng=float(point[0])) for point in raw_coordinates]
        except (AttributeError, IndexError, KeyError, TypeError, ValueError) as exc:
            raise OSRMResponseError(f"Malformed OSRM route geometry: {exc}") from exc

    def match(
        self,
        coordinates: Sequence[Coordinate],
        *,
        radiuses: Sequence[int],
        overview: str = "full",
        geometries: str = "polyline",
        timeout: Timeout = (30.0, 30.0),
        total_timeout: Optional[float] = 60.0,
        cancel_event: Optional[threading.Event] = None,
    ) -> Dict[str, Any]:
        """
        calls the OSRM /match endpoint with a trace and returns the decoded
        JSON response as-is; interpretation belongs to the caller.

        Raises:
            OSRMHTTPError on non-2xx, OSRMTransportError on transport failure,
            OSRMResponseError when the body is not a JSON object.
        """
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required to match a trace.")

        url = self.build_url(self.match_url, "match", coordinates)

        status_code, data = self._get(
            url,
            params={
                "overview": overview,
                "geometries": geometries,
                "radiuses": ";".join(str(radius) for radius in radiuses),
            },
            timeout=timeout,
            total_timeout=total_timeout,
            cancel_event=cancel_event,
        )

        if not 200 <= status_code < 300:
            raise OSRMHTTPError(status_code, data.get("message", "") if isinstance(data, dict) else "")

        if not isinstance(data, dict):
            raise OSRMResponseError("OSRM match response is not a JSON object")

        return data


def _raise_if_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise OSRMCancelledError("OSRM request cancelled")
