"""Single-shot position providers."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from mapty.core.errors import GeolocationError
from mapty.workout.model import Coordinates

logger = logging.getLogger(__name__)

_BROWSER_LOCATE_JS = """
return new Promise((resolve) => {
  if (!navigator.geolocation) {
    resolve({error: 'Geolocation is not supported by this browser'});
    return;
  }
  navigator.geolocation.getCurrentPosition(
    (pos) => resolve({latitude: pos.coords.latitude, longitude: pos.coords.longitude}),
    (err) => resolve({error: err.message || 'Permission denied'}),
  );
});
"""


class Geolocator(Protocol):
    async def locate(self) -> Coordinates: ...


class FixedGeolocator:
    """Always reports the configured position."""

    def __init__(self, latitude: float, longitude: float) -> None:
        self._position = (float(latitude), float(longitude))

    async def locate(self) -> Coordinates:
        return self._position


class UnavailableGeolocator:
    def __init__(self, reason: str = "Could not get your position") -> None:
        self._reason = reason

    async def locate(self) -> Coordinates:
        raise GeolocationError(self._reason)


class BrowserGeolocator:
    """Asks the connected browser for its position once."""

    def __init__(self, timeout_sec: float = 60.0) -> None:
        self._timeout_sec = timeout_sec

    async def locate(self) -> Coordinates:
        from nicegui import ui

        try:
            result: Any = await ui.run_javascript(_BROWSER_LOCATE_JS, timeout=self._timeout_sec)
        except TimeoutError as exc:
            raise GeolocationError("Timed out waiting for the browser position") from exc
        return parse_browser_position(result)


def parse_browser_position(result: Any) -> Coordinates:
    if not isinstance(result, dict):
        raise GeolocationError("Could not get your position")
    if "error" in result:
        logger.warning("Browser geolocation failed: %s", result["error"])
        raise GeolocationError(f"Could not get your position: {result['error']}")
    try:
        return float(result["latitude"]), float(result["longitude"])
    except (KeyError, TypeError, ValueError) as exc:
        raise GeolocationError("Browser returned an invalid position") from exc
