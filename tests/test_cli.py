from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from mapty.cli.main import build_parser, main, settings_from_args
from mapty.workout.model import create_workout
from mapty.workout.store import JsonFileBackend, WorkoutStore


def test_list_prints_stored_workouts(
    tmp_path: Path, created_at: datetime, capsys: pytest.CaptureFixture[str]
) -> None:
    path = tmp_path / "storage.json"
    WorkoutStore(JsonFileBackend(path)).save(
        [create_workout((51.5, -0.1), 20, 60, "cycling", 300, created_at=created_at)]
    )

    assert main(["--list", "--store", str(path)]) == 0

    out = capsys.readouterr().out
    assert "Cycling on March 14" in out
    assert "speed 20.0 km/h" in out


def test_list_empty_store(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--list", "--store", str(tmp_path / "none.json")]) == 0
    assert "No workouts stored" in capsys.readouterr().out


def test_reset_clears_store(tmp_path: Path, created_at: datetime) -> None:
    path = tmp_path / "storage.json"
    store = WorkoutStore(JsonFileBackend(path))
    store.save([create_workout((51.5, -0.1), 5, 25, "running", 180, created_at=created_at)])

    assert main(["--reset", "--store", str(path)]) == 0
    assert store.load() == []


def test_lat_requires_lng(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        main(["--ui-web", "--lat", "51.5", "--store", str(tmp_path / "s.json")])


def test_browser_storage_flags_reach_settings(tmp_path: Path) -> None:
    args = build_parser().parse_args(
        ["--ui-web", "--browser-storage", "--storage-secret", "s3cret", "--store", str(tmp_path)]
    )
    settings = settings_from_args(args)
    assert settings.browser_storage is True
    assert settings.storage_secret == "s3cret"

    defaults = settings_from_args(build_parser().parse_args([]))
    assert defaults.browser_storage is False
