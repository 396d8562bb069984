#Marks routing as a package.
#Re-exports the OSRM adapter and its errors so other modules import from
#routing without knowing internal file names.
#No business logic.

from .osrm_client import (
    OSRMClient,
    OSRMError,
    OSRMInvalidURLError,
    OSRMHTTPError,
    OSRMTransportError,
    OSRMResponseError,
    OSRMCancelledError,
)

__all__ = [
    "OSRMClient",
    "OSRMError",
    "OSRMInvalidURLError",
    "OSRMHTTPError",
    "OSRMTransportError",
    "OSRMResponseError",
    "OSRMCancelledError",
]
