"""Terminal CLI entrypoint for Mapty."""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from mapty.core.config import AppSettings
from mapty.workout.store import JsonFileBackend, WorkoutStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mapty workout map")
    parser.add_argument(
        "--ui-web",
        action="store_true",
        help="Launch web UI (NiceGUI) with the workout map",
    )
    parser.add_argument("--web-host", default="127.0.0.1", help="Host bind for --ui-web")
    parser.add_argument("--web-port", type=int, default=8080, help="Port for --ui-web")
    parser.add_argument(
        "--lat",
        type=float,
        default=None,
        help="Fixed start latitude instead of asking the browser (needs --lng)",
    )
    parser.add_argument(
        "--lng",
        type=float,
        default=None,
        help="Fixed start longitude instead of asking the browser (needs --lat)",
    )
    parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help="Storage file (default: ~/.mapty/storage.json)",
    )
    parser.add_argument(
        "--browser-storage",
        action="store_true",
        help="Keep --ui-web workouts per browser instead of in the storage file",
    )
    parser.add_argument(
        "--storage-secret",
        default="mapty-local",
        help="Secret signing the browser storage cookie (with --browser-storage)",
    )
    parser.add_argument("--list", action="store_true", help="Print stored workouts")
    parser.add_argument("--reset", action="store_true", help="Delete all stored workouts")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def settings_from_args(args: argparse.Namespace) -> AppSettings:
    return replace(
        AppSettings(),
        store_path=args.store,
        web_host=args.web_host,
        web_port=args.web_port,
        browser_storage=args.browser_storage,
        storage_secret=args.storage_secret,
    )


def run_list(store: WorkoutStore) -> int:
    workouts = store.load()
    if not workouts:
        print("No workouts stored")
        return 0
    for w in workouts:
        spec = w.spec
        print(
            f"{w.id:<18} {w.description:<24} "
            f"{w.distance:g} {spec.distance_unit} in {w.duration:g} min, "
            f"{spec.metric_name} {w.metric:.1f} {spec.metric_unit}, "
            f"{spec.extra_field} {w.extra:g}"
        )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if (args.lat is None) != (args.lng is None):
        parser.error("--lat and --lng must be given together")

    settings = settings_from_args(args)
    store = WorkoutStore(JsonFileBackend(settings.resolved_store_path), key=settings.storage_key)

    if args.reset:
        store.clear()
        print(f"Cleared workouts in {settings.resolved_store_path}")
        return 0
    if args.list:
        return run_list(store)
    if args.ui_web:
        from mapty.ui.web_app import run_web_ui

        position = (args.lat, args.lng) if args.lat is not None else None
        return run_web_ui(settings=settings, position=position)

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
