from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest

from mapty.core.errors import GeolocationError
from mapty.workout.model import Coordinates


class FakeMapWidget:
    def __init__(self, center: Coordinates, zoom_level: int) -> None:
        self.center = center
        self.zoom_level = zoom_level
        self.click_handler: Callable[[Coordinates], None] | None = None
        self.markers: dict[int, tuple[Coordinates, str, str]] = {}
        self.views: list[tuple[Coordinates, int, float]] = []
        self._next_handle = 0

    def on_click(self, handler: Callable[[Coordinates], None]) -> None:
        self.click_handler = handler

    def click(self, coordinates: Coordinates) -> None:
        assert self.click_handler is not None
        self.click_handler(coordinates)

    def add_marker(self, coordinates: Coordinates, popup: str, popup_class: str) -> int:
        self._next_handle += 1
        self.markers[self._next_handle] = (coordinates, popup, popup_class)
        return self._next_handle

    def remove_marker(self, marker: Any) -> None:
        del self.markers[marker]

    def set_view(self, coordinates: Coordinates, zoom_level: int, pan_duration_sec: float) -> None:
        self.views.append((coordinates, zoom_level, pan_duration_sec))


class FakeGeolocator:
    def __init__(self, position: Coordinates | None) -> None:
        self.position = position
        self.calls = 0

    async def locate(self) -> Coordinates:
        self.calls += 1
        if self.position is None:
            raise GeolocationError("Could not get your position")
        return self.position


class FakeListView:
    def __init__(self) -> None:
        self.entries: list[str] = []
        self.reloads = 0

    def render_entry(self, record: Any) -> None:
        self.entries.append(record.id)

    def remove_entry(self, workout_id: str) -> None:
        self.entries.remove(workout_id)

    def reload(self) -> None:
        self.reloads += 1


class StepClock:
    """Returns a new timestamp one second later on every call."""

    def __init__(self, start: datetime) -> None:
        self._now = start

    def __call__(self) -> datetime:
        current = self._now
        self._now = current + timedelta(seconds=1)
        return current


@pytest.fixture
def created_at() -> datetime:
    return datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def widgets() -> list[FakeMapWidget]:
    return []


@pytest.fixture
def widget_factory(widgets: list[FakeMapWidget]) -> Callable[[Coordinates, int], FakeMapWidget]:
    def _factory(center: Coordinates, zoom_level: int) -> FakeMapWidget:
        widget = FakeMapWidget(center, zoom_level)
        widgets.append(widget)
        return widget

    return _factory


@pytest.fixture
def geolocator_factory() -> Callable[[Coordinates | None], FakeGeolocator]:
    return FakeGeolocator


@pytest.fixture
def list_view() -> FakeListView:
    return FakeListView()


@pytest.fixture
def list_view_factory() -> Callable[[], FakeListView]:
    return FakeListView


@pytest.fixture
def clock(created_at: datetime) -> StepClock:
    return StepClock(created_at)
