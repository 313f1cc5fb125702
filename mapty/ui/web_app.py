"""NiceGUI web UI for Mapty."""

from __future__ import annotations

from typing import Any, Callable, Mapping

from nicegui import app, ui

from mapty.core.config import AppSettings
from mapty.core.geolocation import BrowserGeolocator, FixedGeolocator, Geolocator
from mapty.ui.controller import AppController
from mapty.ui.form_controller import FIELD_NAMES, FormController
from mapty.ui.map_controller import LeafletMapWidget, MapController
from mapty.workout.model import ACTIVITIES, Coordinates, WorkoutRecord
from mapty.workout.store import JsonFileBackend, KeyValueBackend, MappingBackend, WorkoutStore

_STYLE = """
<style>
  :root {
    --mp-dark-1: #2d3439;
    --mp-dark-2: #42484d;
    --mp-light-1: #aaa;
    --mp-light-2: #ececec;
    --mp-running: #00c46a;
    --mp-cycling: #ffb545;
    --mp-swimming: #38bdf8;
  }
  body { background: var(--mp-dark-1); color: var(--mp-light-2); font-family: Manrope, Arial, sans-serif; }
  .mp-sidebar { background: var(--mp-dark-1); width: 34rem; max-width: 45vw; }
  .mp-card { background: var(--mp-dark-2); border-radius: 6px; }
  .mp-workout--running { border-left: 5px solid var(--mp-running); }
  .mp-workout--cycling { border-left: 5px solid var(--mp-cycling); }
  .mp-workout--swimming { border-left: 5px solid var(--mp-swimming); }
  .leaflet-popup .leaflet-popup-content-wrapper { background: var(--mp-dark-1); color: var(--mp-light-2); border-radius: 5px; }
  .running-popup .leaflet-popup-content-wrapper { border-left: 5px solid var(--mp-running); }
  .cycling-popup .leaflet-popup-content-wrapper { border-left: 5px solid var(--mp-cycling); }
  .swimming-popup .leaflet-popup-content-wrapper { border-left: 5px solid var(--mp-swimming); }
</style>
"""

_EXTRA_INPUT_LABELS = {
    "cadence": "Cadence (step/min)",
    "elevation_gain": "Elev Gain (meters)",
    "laps": "Laps",
}


class NiceFormView:
    """Workout form built from NiceGUI inputs."""

    def __init__(self) -> None:
        self.on_submit: Callable[[str, Mapping[str, object]], object] | None = None
        self.on_type_change: Callable[[str], None] | None = None

        with ui.card().classes("w-full mp-card") as self.card:
            with ui.grid(columns=2).classes("w-full gap-2"):
                self.type_select = ui.select(
                    {key: spec.label for key, spec in ACTIVITIES.items()},
                    value="running",
                    label="Type",
                )
                self.inputs: dict[str, Any] = {
                    "distance": ui.input("Distance (km / m)", placeholder="km"),
                    "duration": ui.input("Duration (min)", placeholder="min"),
                }
                for name, label in _EXTRA_INPUT_LABELS.items():
                    self.inputs[name] = ui.input(label)
            with ui.row().classes("w-full justify-end"):
                submit_btn = ui.button("OK").props("color=positive")

        for element in self.inputs.values():
            element.on("keydown.enter", lambda _: self._submit())
        submit_btn.on_click(self._submit)
        self.type_select.on_value_change(self._type_changed)
        self.card.set_visibility(False)

    def _type_changed(self, e: Any) -> None:
        if self.on_type_change is not None:
            self.on_type_change(str(e.value))

    def _submit(self) -> None:
        if self.on_submit is None:
            return
        values = {name: self.inputs[name].value for name in FIELD_NAMES}
        self.on_submit(str(self.type_select.value), values)

    def show_fields(self, active_field: str) -> None:
        for name in _EXTRA_INPUT_LABELS:
            self.inputs[name].set_visibility(name == active_field)

    def set_displayed(self, displayed: bool) -> None:
        self.card.set_visibility(displayed)

    def set_values(self, values: Mapping[str, str]) -> None:
        for name, value in values.items():
            if name in self.inputs:
                self.inputs[name].value = value

    def focus(self, field_name: str) -> None:
        self.inputs[field_name].run_method("focus")


class NiceWorkoutList:
    """Workout entries rendered as cards, newest first."""

    def __init__(
        self,
        container: Any,
        on_select: Callable[[str], None],
        on_delete: Callable[[str], None],
    ) -> None:
        self._container = container
        self._on_select = on_select
        self._on_delete = on_delete
        self._cards: dict[str, Any] = {}

    def render_entry(self, record: WorkoutRecord) -> None:
        with self._container:
            with ui.card().classes(
                f"w-full mp-card mp-workout--{record.type} cursor-pointer"
            ) as card:
                with ui.row().classes("w-full items-center justify-between"):
                    ui.label(record.description).classes("text-lg font-semibold")
                    ui.button(icon="delete").props("flat dense round color=grey").on(
                        "click.stop", lambda _, wid=record.id: self._on_delete(wid)
                    )
                with ui.row().classes("w-full gap-6"):
                    for icon, value, unit in record.metric_details():
                        with ui.row().classes("items-baseline gap-1"):
                            ui.label(icon)
                            ui.label(value).classes("text-base")
                            ui.label(unit).classes("text-xs text-grey-5")
        card.on("click", lambda _, wid=record.id: self._on_select(wid))
        card.move(self._container, target_index=0)
        self._cards[record.id] = card

    def remove_entry(self, workout_id: str) -> None:
        card = self._cards.pop(workout_id, None)
        if card is not None:
            card.delete()

    def reload(self) -> None:
        ui.navigate.reload()


def _notify_error(exc: Exception) -> None:
    ui.notify(str(exc), color="negative")


def _schedule(delay: float, callback: Callable[[], None]) -> None:
    ui.timer(delay, callback, once=True)


def _page_backend(cfg: AppSettings) -> KeyValueBackend:
    if cfg.browser_storage:
        # Per-browser slot, like localStorage; needs a storage secret.
        return MappingBackend(app.storage.user)
    return JsonFileBackend(cfg.resolved_store_path)


def run_web_ui(
    *,
    settings: AppSettings | None = None,
    position: Coordinates | None = None,
) -> int:
    cfg = settings or AppSettings()

    @ui.page("/")
    async def index() -> None:
        ui.add_head_html(_STYLE)
        ui.query(".nicegui-content").classes("p-0")

        with ui.row().classes("w-full h-screen no-wrap gap-0"):
            with ui.column().classes("mp-sidebar h-full p-6 gap-4 overflow-auto"):
                ui.label("Mapty").classes("text-3xl font-bold self-center")
                form_view = NiceFormView()
                entries = ui.column().classes("w-full gap-3")
                reset_btn = ui.button("Delete all workouts", icon="delete_sweep").props(
                    "flat color=grey"
                )
            map_area = ui.element("div").classes("h-full grow")

        def make_map(center: Coordinates, zoom_level: int) -> LeafletMapWidget:
            with map_area:
                return LeafletMapWidget(center, zoom_level)

        geolocator: Geolocator
        if position is not None:
            geolocator = FixedGeolocator(*position)
        else:
            geolocator = BrowserGeolocator(timeout_sec=cfg.geolocation_timeout_sec)

        form = FormController(view=form_view, schedule=_schedule, cooldown_sec=cfg.form_cooldown_sec)
        list_view = NiceWorkoutList(
            entries,
            on_select=lambda wid: controller.on_workout_selected(wid),
            on_delete=lambda wid: controller.delete_workout(wid),
        )
        controller = AppController(
            store=WorkoutStore(_page_backend(cfg), key=cfg.storage_key),
            map_controller=MapController(make_map, pan_duration_sec=cfg.pan_duration_sec),
            form=form,
            geolocator=geolocator,
            list_view=list_view,
            settings=cfg,
            on_error=_notify_error,
        )
        form_view.on_submit = controller.on_form_submitted
        form_view.on_type_change = form.select_type
        reset_btn.on_click(controller.reset)

        await ui.context.client.connected()
        await controller.start()

    ui.run(
        host=cfg.web_host,
        port=cfg.web_port,
        reload=False,
        title="Mapty",
        storage_secret=cfg.storage_secret if cfg.browser_storage else None,
    )
    return 0
