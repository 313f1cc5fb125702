"""Session controller tying geolocation, map, form and storage together."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Mapping, Protocol

from mapty.core.config import AppSettings
from mapty.core.errors import GeolocationError, ValidationError
from mapty.core.geolocation import Geolocator
from mapty.ui.form_controller import FormController
from mapty.ui.map_controller import MapController
from mapty.workout.model import Coordinates, WorkoutRecord, create_workout
from mapty.workout.store import WorkoutStore

logger = logging.getLogger(__name__)

ErrorReporter = Callable[[Exception], None]


class WorkoutListView(Protocol):
    def render_entry(self, record: WorkoutRecord) -> None: ...

    def remove_entry(self, workout_id: str) -> None: ...

    def reload(self) -> None: ...


def _log_error(exc: Exception) -> None:
    logger.warning("%s", exc)


class AppController:
    def __init__(
        self,
        store: WorkoutStore,
        map_controller: MapController,
        form: FormController,
        geolocator: Geolocator,
        list_view: WorkoutListView | None = None,
        settings: AppSettings | None = None,
        clock: Callable[[], datetime] | None = None,
        on_error: ErrorReporter | None = None,
    ) -> None:
        self._store = store
        self._map = map_controller
        self._form = form
        self._geolocator = geolocator
        self._list_view = list_view
        self._settings = settings or AppSettings()
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._on_error = on_error or _log_error
        self._workouts: list[WorkoutRecord] = []
        self._started = False
        self._synced_ids: set[str] = set()

    @property
    def workouts(self) -> tuple[WorkoutRecord, ...]:
        return tuple(self._workouts)

    @property
    def map_ready(self) -> bool:
        return self._map.is_ready

    async def start(self) -> None:
        if self._started:
            return
        self._started = True

        self._workouts = self._store.load()
        self._synced_ids = {w.id for w in self._workouts}
        if self._list_view is not None:
            for record in self._workouts:
                self._list_view.render_entry(record)

        try:
            position = await self._geolocator.locate()
        except GeolocationError as exc:
            logger.warning("Map disabled for this session: %s", exc)
            self._on_error(exc)
            return

        self._map.on_map_clicked(self.on_map_clicked)
        self._map.initialize(position, self._settings.zoom_level)
        for record in self._workouts:
            self._map.render_marker(record)

    def on_map_clicked(self, coords: Coordinates) -> None:
        self._form.show(coords)

    def on_form_submitted(
        self,
        activity_type: str | None = None,
        raw_inputs: Mapping[str, object] | None = None,
    ) -> WorkoutRecord | None:
        if activity_type is not None:
            self._form.select_type(activity_type)
        if raw_inputs is not None:
            self._form.update_values(raw_inputs)
        try:
            data = self._form.validate_and_extract(activity_type)
        except ValidationError as exc:
            self._on_error(exc)
            return None

        record = create_workout(
            data.coordinates,
            data.distance,
            data.duration,
            data.activity_type,
            data.extra,
            created_at=self._clock(),
        )
        self._workouts.append(record)
        self._map.render_marker(record)
        if self._list_view is not None:
            self._list_view.render_entry(record)
        self._form.hide()
        self._persist()
        logger.info("Logged %s workout %s", record.type, record.id)
        return record

    def find(self, workout_id: str) -> WorkoutRecord | None:
        return next((w for w in self._workouts if w.id == workout_id), None)

    def on_workout_selected(self, workout_id: str) -> WorkoutRecord | None:
        record = self.find(workout_id)
        if record is None:
            return None
        record.register_selection()
        self._map.pan_to(record.coordinates, self._settings.zoom_level)
        self._persist()
        return record

    def delete_workout(self, workout_id: str) -> bool:
        record = self.find(workout_id)
        if record is None:
            return False
        self._drop(record)
        self._persist()
        return True

    def reset(self) -> None:
        self._store.clear()
        self._workouts = []
        self._synced_ids = set()
        self._map.clear_markers()
        if self._list_view is not None:
            # List entries are not removed one by one here.
            self._list_view.reload()

    def _persist(self) -> None:
        """Save the list after merging what other sessions wrote to the same slot.

        Stored workouts this session has never seen are adopted; workouts it
        saw in storage before that are gone now were deleted elsewhere.
        """
        stored = self._store.load()
        stored_ids = {w.id for w in stored}
        for record in list(self._workouts):
            if record.id in self._synced_ids and record.id not in stored_ids:
                self._drop(record)
        known = {w.id for w in self._workouts} | self._synced_ids
        for record in stored:
            if record.id not in known:
                self._adopt(record)
        if self._store.save(self._workouts):
            self._synced_ids = {w.id for w in self._workouts}

    def _adopt(self, record: WorkoutRecord) -> None:
        self._workouts.append(record)
        if self._map.is_ready:
            self._map.render_marker(record)
        if self._list_view is not None:
            self._list_view.render_entry(record)

    def _drop(self, record: WorkoutRecord) -> None:
        self._workouts.remove(record)
        self._map.remove_marker(record.id)
        if self._list_view is not None:
            self._list_view.remove_entry(record.id)
