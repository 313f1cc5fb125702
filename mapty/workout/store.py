"""Local persistence for logged workouts."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, MutableMapping, Protocol, Sequence

from mapty.core.config import default_store_path
from mapty.core.errors import StorageReadError, StorageWriteError
from mapty.workout.model import WorkoutRecord, get_activity, restore_workout

logger = logging.getLogger(__name__)

# Stored field name for each activity's extra input.
_EXTRA_KEYS = {
    "cadence": "cadence",
    "elevation_gain": "elevationGain",
    "laps": "laps",
}


class KeyValueBackend(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MappingBackend:
    """Backend over any mutable mapping (a dict, or NiceGUI ``app.storage.user``)."""

    def __init__(self, mapping: MutableMapping[str, Any] | None = None) -> None:
        self._mapping: MutableMapping[str, Any] = {} if mapping is None else mapping

    def get(self, key: str) -> str | None:
        value = self._mapping.get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        self._mapping[key] = value

    def remove(self, key: str) -> None:
        self._mapping.pop(key, None)


class JsonFileBackend:
    """All slots kept in one JSON object file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or default_store_path()

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageReadError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise StorageReadError(f"{self.path} must contain a JSON object")
        return {str(k): str(v) for k, v in payload.items()}

    def _write_all(self, slots: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(
                json.dumps(slots, ensure_ascii=True, indent=2), encoding="utf-8"
            )
        except OSError as exc:
            raise StorageWriteError(f"Cannot write {self.path}: {exc}") from exc

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        try:
            slots = self._read_all()
        except StorageReadError:
            # A corrupt file is replaced rather than blocking every save.
            slots = {}
        slots[key] = value
        self._write_all(slots)

    def remove(self, key: str) -> None:
        try:
            slots = self._read_all()
        except StorageReadError:
            slots = {}
        slots.pop(key, None)
        self._write_all(slots)


def workout_to_dict(record: WorkoutRecord) -> dict[str, Any]:
    spec = record.spec
    return {
        "id": record.id,
        "createdAt": record.created_at.isoformat(),
        "type": record.type,
        "coordinates": [record.coordinates[0], record.coordinates[1]],
        "distance": record.distance,
        "duration": record.duration,
        "interactionCount": record.interaction_count,
        _EXTRA_KEYS[spec.extra_field]: record.extra,
        # Informational only, recomputed on load.
        "description": record.description,
        spec.metric_name: record.metric,
    }


def _first(item: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in item:
            return item[key]
    raise KeyError(keys[0])


def workout_from_dict(item: dict[str, Any]) -> WorkoutRecord:
    """Rebuild one stored entry, dispatching on its ``type``.

    Older browser exports used ``date``, ``coords`` and ``clicks``; both
    layouts are accepted.
    """
    spec = get_activity(str(item["type"]))
    lat, lng = _first(item, "coordinates", "coords")
    created_at = datetime.fromisoformat(str(_first(item, "createdAt", "date")))
    extra = float(item[_EXTRA_KEYS[spec.extra_field]])
    return restore_workout(
        workout_id=str(item["id"]),
        created_at=created_at,
        coordinates=(float(lat), float(lng)),
        distance=float(item["distance"]),
        duration=float(item["duration"]),
        activity_type=spec.type,
        extra=extra,
        interaction_count=int(item.get("interactionCount", item.get("clicks", 0))),
    )


class WorkoutStore:
    def __init__(self, backend: KeyValueBackend, key: str = "workouts") -> None:
        self._backend = backend
        self._key = key

    def save(self, records: Sequence[WorkoutRecord]) -> bool:
        """Write the whole collection; returns False when the backend refused it."""
        payload = json.dumps([workout_to_dict(r) for r in records], ensure_ascii=True)
        try:
            self._backend.set(self._key, payload)
        except StorageWriteError as exc:
            logger.warning("Workouts not saved: %s", exc)
            return False
        return True

    def load(self) -> list[WorkoutRecord]:
        try:
            raw = self._backend.get(self._key)
        except StorageReadError as exc:
            logger.warning("Stored workouts unreadable: %s", exc)
            return []
        if raw is None:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Stored workouts are not valid JSON: %s", exc)
            return []
        if not isinstance(data, list):
            logger.warning("Stored workouts must be a JSON array, got %s", type(data).__name__)
            return []

        out: list[WorkoutRecord] = []
        for index, item in enumerate(data):
            if not isinstance(item, dict):
                logger.warning("Skipping stored workout #%d: not an object", index)
                continue
            try:
                out.append(workout_from_dict(item))
            except (KeyError, TypeError, ValueError, ZeroDivisionError) as exc:
                logger.warning("Skipping stored workout #%d: %r", index, exc)
        logger.debug("Loaded %d workouts", len(out))
        return out

    def clear(self) -> None:
        try:
            self._backend.remove(self._key)
        except StorageWriteError as exc:
            logger.warning("Stored workouts not cleared: %s", exc)
