"""CLI para programar recordatorios de agua y consultar el progreso diario."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable
from dataclasses import fields, replace
from datetime import date, datetime
from pathlib import Path

from sleeter.config import AppConfig, resolve_tz
from sleeter.excel_writer import ExcelLayout, write_history_xlsx
from sleeter.model import ProgressSnapshot
from sleeter.recommend import (
    INTENSITY_SLEEP_BONUS,
    format_hours,
    recommended_liters,
    suggested_sleep_goal,
)
from sleeter.report import daily_progress_summary
from sleeter.service import HydrationService
from sleeter.storage import SQLiteStore

_CONFIG_FLAGS: dict[str, str] = {
    "water_goal": "water_goal_liters",
    "sleep_goal": "sleep_goal_hours",
    "start_hour": "start_hour",
    "end_hour": "end_hour",
    "increment": "increment_ml",
    "timezone": "timezone",
    "skip_empty": "skip_empty_reminders",
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="Sleeter: recordatorios de agua por hora y progreso diario."
    )
    parser.add_argument(
        "--db",
        default=str(Path.cwd() / "sleeter.sqlite3"),
        help="Base SQLite (default: ./sleeter.sqlite3).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log DEBUG.")
    sub = parser.add_subparsers(dest="command", required=True)

    cfg = sub.add_parser("config", help="Show or update the configuration.")
    cfg.add_argument("--water-goal", type=float, help="Daily water goal (L).")
    cfg.add_argument("--sleep-goal", type=float, help="Base sleep goal (h).")
    cfg.add_argument("--start-hour", type=int, help="First reminder hour.")
    cfg.add_argument("--end-hour", type=int, help="End hour (exclusive).")
    cfg.add_argument("--increment", type=float, help="Rounding increment (ml).")
    cfg.add_argument("--timezone", help="IANA zone; empty for local.")
    cfg.add_argument(
        "--skip-empty",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Do not create 0 ml reminders.",
    )

    sch = sub.add_parser("schedule", help="Schedule the day's water reminders.")
    sch.add_argument("--liters", type=float, help="Override the configured goal.")
    sch.add_argument("--date", type=date.fromisoformat, help="YYYY-MM-DD.")

    prog = sub.add_parser("progress", help="Show the day's water progress.")
    prog.add_argument("--date", type=date.fromisoformat, help="YYYY-MM-DD.")

    evs = sub.add_parser("events", help="List the day's water reminders.")
    evs.add_argument("--date", type=date.fromisoformat, help="YYYY-MM-DD.")

    tog = sub.add_parser("toggle", help="Mark a reminder as done / not done.")
    tog.add_argument("identifier")
    tog.add_argument("--date", type=date.fromisoformat, help="YYYY-MM-DD.")

    exp = sub.add_parser("export", help="Export a daily summary to Excel.")
    exp.add_argument("--start", type=date.fromisoformat, required=True)
    exp.add_argument("--end", type=date.fromisoformat, required=True)
    exp.add_argument("--out", help="Output .xlsx (default: ./salidas/...).")

    water = sub.add_parser("water", help="Recommended water for a workout.")
    water.add_argument("--sport", required=True)
    water.add_argument("--minutes", type=float, default=30.0)
    water.add_argument(
        "--schedule", action="store_true", help="Schedule it for today."
    )

    sleep = sub.add_parser("sleep", help="Suggested sleep goal.")
    sleep.add_argument("--base", type=float, help="Base goal (default: config).")
    sleep.add_argument(
        "--intensity", default="none", choices=sorted(INTENSITY_SLEEP_BONUS)
    )
    return parser.parse_args(argv)


def _cmd_config(ns: argparse.Namespace, store: SQLiteStore) -> int:
    config = store.load_config()
    changes = {
        target: getattr(ns, flag)
        for flag, target in _CONFIG_FLAGS.items()
        if getattr(ns, flag) is not None
    }
    if changes:
        config = replace(config, **changes)
        resolve_tz(config.timezone)
        store.save_config(config)
        print("OK: Config saved")
    for field in fields(AppConfig):
        print(f"{field.name} = {getattr(config, field.name)!r}")
    return 0


def _cmd_schedule(ns: argparse.Namespace, store: SQLiteStore) -> int:
    service = _build_service(store)
    day = ns.date or service.today()
    count = service.schedule(ns.liters, day)
    print(f"OK: Scheduled {count} water reminders for {day}")
    return 0


def _cmd_progress(ns: argparse.Namespace, store: SQLiteStore) -> int:
    service = _build_service(store)
    _print_progress(service.progress(ns.date))
    return 0


def _cmd_events(ns: argparse.Namespace, store: SQLiteStore) -> int:
    service = _build_service(store)
    day = ns.date or service.today()
    reminders = service.reminders(day)
    if not reminders:
        print(f"No water reminders for {day}")
        return 0
    completion = store.load(day)
    for e in reminders:
        mark = "x" if e.identifier and completion.get(e.identifier) else " "
        print(
            f"[{mark}] {e.start_time:%H:%M}-{e.end_time:%H:%M}  "
            f"{e.amount_ml:>5} ml  {e.identifier}"
        )
    return 0


def _cmd_toggle(ns: argparse.Namespace, store: SQLiteStore) -> int:
    service = _build_service(store)
    _print_progress(service.toggle_completion(ns.identifier, ns.date))
    return 0


def _cmd_export(ns: argparse.Namespace, store: SQLiteStore) -> int:
    if ns.end < ns.start:
        raise ValueError("--end must not be before --start")
    service = _build_service(store)
    summary = daily_progress_summary(service.history_frame(ns.start, ns.end))
    if ns.out:
        out_path = Path(ns.out).expanduser().resolve()
    else:
        ts = datetime.now(tz=service.config.tzinfo()).strftime("%Y-%m-%d_%H-%M-%S")
        out_path = Path.cwd() / "salidas" / f"sleeter_historial_{ts}.xlsx"
    write_history_xlsx(summary, out_path, ExcelLayout())
    print(f"OK: Days exported: {len(summary)}")
    print(f"OK: Output: {out_path}")
    return 0


def _cmd_water(ns: argparse.Namespace, store: SQLiteStore) -> int:
    liters = recommended_liters(ns.sport, ns.minutes)
    print(f"Recommended water: {liters:.1f} L")
    if ns.schedule and liters > 0:
        count = _build_service(store).schedule(liters)
        print(f"OK: Scheduled {count} water reminders for today based on {ns.sport}")
    return 0


def _cmd_sleep(ns: argparse.Namespace, store: SQLiteStore) -> int:
    base = ns.base if ns.base is not None else store.load_config().sleep_goal_hours
    goal = suggested_sleep_goal(base, ns.intensity)
    print(f"Suggested sleep goal: {format_hours(goal)}")
    return 0


_COMMANDS: dict[str, Callable[[argparse.Namespace, SQLiteStore], int]] = {
    "config": _cmd_config,
    "schedule": _cmd_schedule,
    "progress": _cmd_progress,
    "events": _cmd_events,
    "toggle": _cmd_toggle,
    "export": _cmd_export,
    "water": _cmd_water,
    "sleep": _cmd_sleep,
}


def _build_service(store: SQLiteStore) -> HydrationService:
    return HydrationService(events=store, completions=store, config=store.load_config())


def _print_progress(snapshot: ProgressSnapshot) -> None:
    print(f"Goal: {int(snapshot.goal_ml)} ml")
    print(f"Consumed: {int(snapshot.consumed_ml)} ml ({snapshot.progress:.0%})")
    print(f"Expected: {int(snapshot.expected_ml)} ml ({snapshot.expected_progress:.0%})")
    print(snapshot.status_text)


def main(argv: list[str] | None = None) -> int:
    """Run the Sleeter CLI.

    Returns:
        Exit code (0 on success, 2 on invalid input).
    """
    ns = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    store = SQLiteStore(Path(ns.db).expanduser().resolve())
    try:
        return _COMMANDS[ns.command](ns, store)
    except ValueError as exc:
        print(f"Error: {exc}")
        return 2
