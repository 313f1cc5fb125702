"""Workout entry form: visible-field state and input validation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Literal, Mapping, Protocol

from mapty.core.errors import ValidationError
from mapty.workout.model import (
    ACTIVITIES,
    ActivitySpec,
    Coordinates,
    check_workout_values,
    get_activity,
)

FormState = Literal["hidden", "visible"]
Scheduler = Callable[[float, Callable[[], None]], None]

FIELD_NAMES = ("distance", "duration", "cadence", "elevation_gain", "laps")

_FIELD_LABELS = {
    "distance": "Distance",
    "duration": "Duration",
    "cadence": "Cadence",
    "elevation_gain": "Elevation gain",
    "laps": "Laps",
}


class FormView(Protocol):
    def show_fields(self, active_field: str) -> None: ...

    def set_displayed(self, displayed: bool) -> None: ...

    def set_values(self, values: Mapping[str, str]) -> None: ...

    def focus(self, field_name: str) -> None: ...


@dataclass(frozen=True)
class ValidatedInput:
    activity_type: str
    coordinates: Coordinates
    distance: float
    duration: float
    extra: float


def _run_now(_delay: float, callback: Callable[[], None]) -> None:
    callback()


def parse_number(raw: object, field_name: str) -> float:
    label = _FIELD_LABELS.get(field_name, field_name)
    if raw is None or (isinstance(raw, str) and raw.strip() == ""):
        raise ValidationError(field_name, f"{label} is required")
    if isinstance(raw, bool):
        raise ValidationError(field_name, f"{label} must be a number")
    try:
        value = float(raw.strip() if isinstance(raw, str) else raw)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValidationError(field_name, f"{label} must be a number") from exc
    if not math.isfinite(value):
        raise ValidationError(field_name, f"{label} must be a finite number")
    return value


class FormController:
    def __init__(
        self,
        view: FormView | None = None,
        schedule: Scheduler | None = None,
        cooldown_sec: float = 1.0,
    ) -> None:
        self._view = view
        self._schedule = schedule or _run_now
        self._cooldown_sec = cooldown_sec
        self._state: FormState = "hidden"
        self._spec: ActivitySpec = ACTIVITIES["running"]
        self._location: Coordinates | None = None
        self._values: dict[str, str] = {name: "" for name in FIELD_NAMES}
        self._cooling_down = False

    @property
    def state(self) -> FormState:
        return self._state

    @property
    def activity_type(self) -> str:
        return self._spec.type

    @property
    def active_field(self) -> str:
        return self._spec.extra_field

    @property
    def location(self) -> Coordinates | None:
        return self._location

    @property
    def values(self) -> dict[str, str]:
        return dict(self._values)

    @property
    def is_displayed(self) -> bool:
        return self._state == "visible" and not self._cooling_down

    def select_type(self, activity_type: str) -> None:
        self._spec = get_activity(activity_type)
        if self._view is not None:
            self._view.show_fields(self._spec.extra_field)

    def show(self, location: Coordinates) -> None:
        self._location = location
        self._state = "visible"
        self._sync_display()
        if self._view is not None:
            self._view.show_fields(self._spec.extra_field)
            self._view.focus("distance")

    def hide(self) -> None:
        self._values = {name: "" for name in FIELD_NAMES}
        self._state = "hidden"
        self._location = None
        self._cooling_down = True
        if self._view is not None:
            self._view.set_values(self._values)
        self._sync_display()
        self._schedule(self._cooldown_sec, self._end_cooldown)

    def _end_cooldown(self) -> None:
        self._cooling_down = False
        self._sync_display()

    def _sync_display(self) -> None:
        if self._view is not None:
            self._view.set_displayed(self.is_displayed)

    def update_values(self, values: Mapping[str, object]) -> None:
        for name, raw in values.items():
            if name in self._values:
                self._values[name] = "" if raw is None else str(raw)

    def validate_and_extract(self, activity_type: str | None = None) -> ValidatedInput:
        """Parse the entered values for ``activity_type``.

        Raises ``ValidationError`` naming the first field that fails; the
        entered values are kept as they are.
        """
        spec = self._spec if activity_type is None else get_activity(activity_type)
        if self._location is None:
            raise ValidationError("location", "Click on the map to choose a location")

        distance = parse_number(self._values["distance"], "distance")
        duration = parse_number(self._values["duration"], "duration")
        extra = parse_number(self._values[spec.extra_field], spec.extra_field)

        check_workout_values(spec, distance, duration, extra)

        return ValidatedInput(
            activity_type=spec.type,
            coordinates=self._location,
            distance=distance,
            duration=duration,
            extra=extra,
        )
