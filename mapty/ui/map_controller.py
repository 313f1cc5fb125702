"""Map ownership: widget handle, workout markers and click capture."""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

from mapty.core.errors import MapUnavailableError
from mapty.workout.model import Coordinates, WorkoutRecord

logger = logging.getLogger(__name__)

ClickHandler = Callable[[Coordinates], None]

TILE_URL = "https://{s}.tile.openstreetmap.fr/hot/{z}/{x}/{y}.png"
TILE_ATTRIBUTION = (
    '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
)

POPUP_OPTIONS: dict[str, Any] = {
    "maxWidth": 250,
    "minWidth": 100,
    "autoClose": False,
    "closeOnClick": False,
}


class MapWidget(Protocol):
    def on_click(self, handler: ClickHandler) -> None: ...

    def add_marker(self, coordinates: Coordinates, popup: str, popup_class: str) -> Any: ...

    def remove_marker(self, marker: Any) -> None: ...

    def set_view(self, coordinates: Coordinates, zoom_level: int, pan_duration_sec: float) -> None: ...


MapWidgetFactory = Callable[[Coordinates, int], MapWidget]


class LeafletMapWidget:
    """``MapWidget`` backed by NiceGUI's Leaflet element."""

    def __init__(self, center: Coordinates, zoom_level: int) -> None:
        from nicegui import ui

        self._map = ui.leaflet(center=center, zoom=zoom_level).classes("w-full h-full")
        self._map.clear_layers()
        self._map.tile_layer(
            url_template=TILE_URL,
            options={"attribution": TILE_ATTRIBUTION, "maxZoom": 19},
        )

    def on_click(self, handler: ClickHandler) -> None:
        def _on_map_click(e: Any) -> None:
            latlng = e.args["latlng"]
            handler((float(latlng["lat"]), float(latlng["lng"])))

        self._map.on("map-click", _on_map_click)

    def add_marker(self, coordinates: Coordinates, popup: str, popup_class: str) -> Any:
        marker = self._map.marker(latlng=coordinates)
        marker.run_method("bindPopup", popup, {**POPUP_OPTIONS, "className": popup_class})
        marker.run_method("openPopup")
        return marker

    def remove_marker(self, marker: Any) -> None:
        self._map.remove_layer(marker)

    def set_view(self, coordinates: Coordinates, zoom_level: int, pan_duration_sec: float) -> None:
        self._map.run_map_method(
            "setView",
            list(coordinates),
            zoom_level,
            {"animate": True, "pan": {"duration": pan_duration_sec}},
        )


def marker_popup(record: WorkoutRecord) -> str:
    return f"{record.spec.icon} {record.description}"


class MapController:
    def __init__(
        self,
        widget_factory: MapWidgetFactory = LeafletMapWidget,
        pan_duration_sec: float = 1.0,
    ) -> None:
        self._widget_factory = widget_factory
        self._pan_duration_sec = pan_duration_sec
        self._widget: MapWidget | None = None
        self._markers: dict[str, Any] = {}
        self._click_handler: ClickHandler | None = None

    @property
    def is_ready(self) -> bool:
        return self._widget is not None

    @property
    def marker_ids(self) -> tuple[str, ...]:
        return tuple(self._markers)

    def initialize(self, center: Coordinates | None, zoom_level: int) -> MapWidget:
        if self._widget is not None:
            return self._widget
        if center is None:
            raise MapUnavailableError("Map needs a position to be created")
        self._widget = self._widget_factory(center, zoom_level)
        self._widget.on_click(self._on_widget_click)
        logger.info("Map ready at %.5f,%.5f (zoom %d)", center[0], center[1], zoom_level)
        return self._widget

    def on_map_clicked(self, handler: ClickHandler) -> None:
        self._click_handler = handler

    def _on_widget_click(self, coordinates: Coordinates) -> None:
        if self._click_handler is not None:
            self._click_handler(coordinates)

    def render_marker(self, record: WorkoutRecord) -> None:
        widget = self._require_widget()
        previous = self._markers.pop(record.id, None)
        if previous is not None:
            widget.remove_marker(previous)
        self._markers[record.id] = widget.add_marker(
            record.coordinates,
            marker_popup(record),
            f"{record.type}-popup",
        )

    def remove_marker(self, workout_id: str) -> bool:
        marker = self._markers.pop(workout_id, None)
        if marker is None or self._widget is None:
            return False
        self._widget.remove_marker(marker)
        return True

    def clear_markers(self) -> None:
        for workout_id in list(self._markers):
            self.remove_marker(workout_id)

    def pan_to(self, coordinates: Coordinates, zoom_level: int) -> None:
        if self._widget is None:
            return
        self._widget.set_view(coordinates, zoom_level, self._pan_duration_sec)

    def _require_widget(self) -> MapWidget:
        if self._widget is None:
            raise MapUnavailableError("Map is not initialized yet")
        return self._widget
