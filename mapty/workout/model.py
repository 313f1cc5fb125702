"""Workout domain models.

A workout is a single record type tagged by ``type``. Everything that varies
per activity (extra input, derived metric, units, icons) lives in the
``ACTIVITIES`` dispatch table, so creation and rehydration share one path.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Literal, Union

from mapty.core.errors import UnknownActivityError, ValidationError

ActivityType = Literal["running", "cycling", "swimming"]
Coordinates = tuple[float, float]

POOL_LENGTH_M = 50

MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


@dataclass(frozen=True)
class RunningDetails:
    cadence: int
    pace: float  # min/km


@dataclass(frozen=True)
class CyclingDetails:
    elevation_gain: float
    speed: float  # km/h


@dataclass(frozen=True)
class SwimmingDetails:
    laps: int
    pace: float  # m/min


WorkoutDetails = Union[RunningDetails, CyclingDetails, SwimmingDetails]


def _running_pace(distance: float, duration: float) -> float:
    return duration / distance


def _cycling_speed(distance: float, duration: float) -> float:
    return distance / (duration / 60)


def _swimming_pace(distance: float, duration: float) -> float:
    return (distance / POOL_LENGTH_M / duration) * 60


@dataclass(frozen=True)
class ActivitySpec:
    type: ActivityType
    label: str
    icon: str
    distance_unit: str
    extra_field: str
    extra_label: str
    extra_unit: str
    extra_icon: str
    extra_is_integer: bool
    extra_allows_zero: bool
    metric_name: str
    metric_unit: str
    metric_icon: str
    compute_metric: Callable[[float, float], float]
    build_details: Callable[[float, float], WorkoutDetails]


ACTIVITIES: dict[str, ActivitySpec] = {
    "running": ActivitySpec(
        type="running",
        label="Running",
        icon="🏃‍♂️",
        distance_unit="km",
        extra_field="cadence",
        extra_label="Cadence",
        extra_unit="spm",
        extra_icon="🦶🏼",
        extra_is_integer=True,
        extra_allows_zero=False,
        metric_name="pace",
        metric_unit="min/km",
        metric_icon="⚡️",
        compute_metric=_running_pace,
        build_details=lambda extra, metric: RunningDetails(cadence=int(extra), pace=metric),
    ),
    "cycling": ActivitySpec(
        type="cycling",
        label="Cycling",
        icon="🚴‍♂️",
        distance_unit="km",
        extra_field="elevation_gain",
        extra_label="Elev Gain",
        extra_unit="m",
        extra_icon="⛰",
        extra_is_integer=False,
        extra_allows_zero=True,
        metric_name="speed",
        metric_unit="km/h",
        metric_icon="⚡️",
        compute_metric=_cycling_speed,
        build_details=lambda extra, metric: CyclingDetails(
            elevation_gain=float(extra), speed=metric
        ),
    ),
    "swimming": ActivitySpec(
        type="swimming",
        label="Swimming",
        icon="🏊🏻‍♂️",
        distance_unit="m",
        extra_field="laps",
        extra_label="Laps",
        extra_unit="laps",
        extra_icon="🔁",
        extra_is_integer=True,
        extra_allows_zero=False,
        metric_name="pace",
        metric_unit="m/min",
        metric_icon="🏊🏻‍♀️",
        compute_metric=_swimming_pace,
        build_details=lambda extra, metric: SwimmingDetails(laps=int(extra), pace=metric),
    ),
}


def get_activity(activity_type: str) -> ActivitySpec:
    try:
        return ACTIVITIES[activity_type]
    except KeyError as exc:
        raise UnknownActivityError(f"Unknown activity type '{activity_type}'") from exc


def check_workout_values(
    spec: ActivitySpec, distance: float, duration: float, extra: float
) -> None:
    """Raise ``ValidationError`` unless the base and extra values are usable.

    Distance and duration must be finite and positive. The extra value must
    be finite, positive (or zero where the activity allows it) and whole
    where the activity counts something.
    """
    for name, label, value in (
        ("distance", "Distance", distance),
        ("duration", "Duration", duration),
        (spec.extra_field, spec.extra_label, extra),
    ):
        if not math.isfinite(value):
            raise ValidationError(name, f"{label} must be a finite number")
    if distance <= 0:
        raise ValidationError("distance", "Distance must be a positive number")
    if duration <= 0:
        raise ValidationError("duration", "Duration must be a positive number")
    if spec.extra_allows_zero and extra < 0:
        raise ValidationError(spec.extra_field, f"{spec.extra_label} cannot be negative")
    if not spec.extra_allows_zero and extra <= 0:
        raise ValidationError(spec.extra_field, f"{spec.extra_label} must be a positive number")
    if spec.extra_is_integer and not float(extra).is_integer():
        raise ValidationError(spec.extra_field, f"{spec.extra_label} must be a whole number")


def workout_id_for(created_at: datetime) -> str:
    return str(int(created_at.timestamp() * 1_000_000))


def describe(activity_type: str, created_at: datetime) -> str:
    spec = get_activity(activity_type)
    return f"{spec.label} on {MONTHS[created_at.month - 1]} {created_at.day}"


@dataclass
class WorkoutRecord:
    id: str
    created_at: datetime
    coordinates: Coordinates
    distance: float
    duration: float
    type: ActivityType
    details: WorkoutDetails
    description: str
    interaction_count: int = field(default=0, compare=False)

    @property
    def spec(self) -> ActivitySpec:
        return ACTIVITIES[self.type]

    @property
    def metric(self) -> float:
        return getattr(self.details, self.spec.metric_name)

    @property
    def extra(self) -> float:
        return getattr(self.details, self.spec.extra_field)

    def register_selection(self) -> int:
        self.interaction_count += 1
        return self.interaction_count

    def metric_details(self) -> list[tuple[str, str, str]]:
        """Rows of ``(icon, value, unit)`` shown for the workout in the list."""
        spec = self.spec
        return [
            (spec.icon, _fmt_value(self.distance), spec.distance_unit),
            ("⏱", _fmt_value(self.duration), "min"),
            (spec.metric_icon, f"{self.metric:.1f}", spec.metric_unit),
            (spec.extra_icon, _fmt_value(self.extra), spec.extra_unit),
        ]


def _fmt_value(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def _build(
    *,
    workout_id: str,
    created_at: datetime,
    coordinates: Coordinates,
    distance: float,
    duration: float,
    activity_type: str,
    extra: float,
    interaction_count: int,
) -> WorkoutRecord:
    spec = get_activity(activity_type)
    metric = spec.compute_metric(distance, duration)
    return WorkoutRecord(
        id=workout_id,
        created_at=created_at,
        coordinates=(float(coordinates[0]), float(coordinates[1])),
        distance=float(distance),
        duration=float(duration),
        type=spec.type,
        details=spec.build_details(extra, metric),
        description=describe(spec.type, created_at),
        interaction_count=interaction_count,
    )


def create_workout(
    coordinates: Coordinates,
    distance: float,
    duration: float,
    activity_type: str,
    extra: float,
    *,
    created_at: datetime | None = None,
) -> WorkoutRecord:
    """Build a new workout from validated input.

    ``created_at`` defaults to the current local time; the id is derived
    from it.
    """
    stamp = created_at or datetime.now().astimezone()
    return _build(
        workout_id=workout_id_for(stamp),
        created_at=stamp,
        coordinates=coordinates,
        distance=distance,
        duration=duration,
        activity_type=activity_type,
        extra=extra,
        interaction_count=0,
    )


def restore_workout(
    *,
    workout_id: str,
    created_at: datetime,
    coordinates: Coordinates,
    distance: float,
    duration: float,
    activity_type: str,
    extra: float,
    interaction_count: int = 0,
) -> WorkoutRecord:
    """Rebuild a stored workout, recomputing the metric and description.

    Stored values are checked like form input; ``ValidationError`` is raised
    for an entry that could not have been created.
    """
    check_workout_values(get_activity(activity_type), distance, duration, extra)
    if interaction_count < 0:
        raise ValidationError("interaction_count", "Interaction count cannot be negative")
    return _build(
        workout_id=workout_id,
        created_at=created_at,
        coordinates=coordinates,
        distance=distance,
        duration=duration,
        activity_type=activity_type,
        extra=extra,
        interaction_count=interaction_count,
    )
