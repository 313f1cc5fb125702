from __future__ import annotations

from datetime import datetime

import pytest

from mapty.core.errors import MapUnavailableError
from mapty.ui.map_controller import MapController
from mapty.workout.model import create_workout


def test_initialize_requires_position(widget_factory) -> None:
    controller = MapController(widget_factory)
    with pytest.raises(MapUnavailableError):
        controller.initialize(None, 13)
    assert controller.is_ready is False


def test_initialize_once(widget_factory, widgets) -> None:
    controller = MapController(widget_factory)
    first = controller.initialize((51.5, -0.1), 13)
    second = controller.initialize((10.0, 10.0), 5)
    assert first is second
    assert len(widgets) == 1
    assert widgets[0].zoom_level == 13


def test_click_forwards_coordinates_to_handler(widget_factory, widgets) -> None:
    controller = MapController(widget_factory)
    clicks: list[tuple[float, float]] = []
    controller.on_map_clicked(clicks.append)
    controller.initialize((51.5, -0.1), 13)

    widgets[0].click((51.51, -0.12))

    assert clicks == [(51.51, -0.12)]


def test_render_marker_uses_icon_and_replaces_same_id(
    widget_factory, widgets, created_at: datetime
) -> None:
    controller = MapController(widget_factory)
    controller.initialize((51.5, -0.1), 13)
    swim = create_workout((40.4, -3.7), 1000, 20, "swimming", 20, created_at=created_at)

    controller.render_marker(swim)
    controller.render_marker(swim)

    markers = list(widgets[0].markers.values())
    assert len(markers) == 1
    coords, popup, popup_class = markers[0]
    assert coords == (40.4, -3.7)
    assert popup.startswith("🏊")
    assert popup.endswith("Swimming on March 14")
    assert popup_class == "swimming-popup"
    assert controller.marker_ids == (swim.id,)


def test_render_marker_before_initialize(widget_factory, created_at: datetime) -> None:
    controller = MapController(widget_factory)
    run = create_workout((51.5, -0.1), 5, 25, "running", 180, created_at=created_at)
    with pytest.raises(MapUnavailableError):
        controller.render_marker(run)


def test_remove_and_clear_markers(widget_factory, widgets, created_at: datetime) -> None:
    controller = MapController(widget_factory)
    controller.initialize((51.5, -0.1), 13)
    run = create_workout((51.5, -0.1), 5, 25, "running", 180, created_at=created_at)
    ride = create_workout((51.6, -0.2), 20, 60, "cycling", 10, created_at=created_at.replace(minute=31))
    controller.render_marker(run)
    controller.render_marker(ride)

    assert controller.remove_marker(run.id) is True
    assert controller.remove_marker(run.id) is False
    assert controller.marker_ids == (ride.id,)

    controller.clear_markers()
    assert widgets[0].markers == {}


def test_pan_to_is_noop_before_initialize(widget_factory, widgets) -> None:
    controller = MapController(widget_factory, pan_duration_sec=1.0)
    controller.pan_to((51.5, -0.1), 13)
    assert widgets == []

    controller.initialize((0.0, 0.0), 13)
    controller.pan_to((51.5, -0.1), 13)
    assert widgets[0].views == [((51.5, -0.1), 13, 1.0)]
