from __future__ import annotations

import sqlite3
from dataclasses import replace
from datetime import date, datetime, timedelta
from pathlib import Path

import pytest
from dateutil import tz

from sleeter import storage
from sleeter.allocator import allocate
from sleeter.config import AppConfig
from sleeter.service import HydrationService
from sleeter.storage import SQLiteStore
from sleeter.stores.base import EventStoreError

DAY = date(2025, 12, 15)


def _insert_raw_event(db: Path, ident: str, title: str, start: str) -> None:
    """Fila escrita por otra app del calendario (sin offset horario)."""
    with sqlite3.connect(db) as conn:
        conn.execute(
            """
            INSERT INTO reminder_events(id, day, title, start_time, end_time, amount_ml)
            VALUES (?, ?, ?, ?, ?, 0)
            """,
            (ident, start[:10], title, start, start),
        )
        conn.commit()


def test_store_config_roundtrip_and_defaults(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    assert store.load_config() == AppConfig()

    config = AppConfig(
        water_goal_liters=2.5,
        sleep_goal_hours=7.5,
        start_hour=8,
        end_hour=20,
        increment_ml=50.0,
        timezone="America/Argentina/Buenos_Aires",
        skip_empty_reminders=True,
    )
    store.save_config(config)
    assert store.load_config() == config


def test_malformed_config_values_fall_back(tmp_path: Path) -> None:
    db = tmp_path / "app.sqlite3"
    store = SQLiteStore(db)
    with sqlite3.connect(db) as conn:
        conn.executemany(
            "INSERT INTO app_config(key, value) VALUES(?, ?)",
            [("start_hour", "not json"), ("water_goal_liters", '"x"'), ("end_hour", "20")],
        )
        conn.commit()
    loaded = store.load_config()
    assert loaded.start_hour == 9
    assert loaded.water_goal_liters == 2.0
    assert loaded.end_hour == 20


def test_replace_events_assigns_ids_and_does_not_duplicate(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    first = store.replace_events(DAY, allocate(1.0, DAY))
    second = store.replace_events(DAY, allocate(1.0, DAY))

    assert all(e.identifier for e in first)
    listed = store.list_events(DAY)
    assert len(listed) == 12
    assert sum(e.amount_ml for e in listed) == 1000
    assert {e.identifier for e in listed} == {e.identifier for e in second}
    assert [e.start_time for e in listed] == sorted(e.start_time for e in listed)


def test_replace_keeps_other_days_and_foreign_events(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    next_day = DAY + timedelta(days=1)
    store.replace_events(next_day, allocate(2.0, next_day))
    _insert_raw_event(tmp_path / "app.sqlite3", "dentist", "Dentist", "2025-12-15T15:00:00")

    store.replace_events(DAY, allocate(1.0, DAY))
    store.replace_events(DAY, allocate(1.5, DAY))

    titles = [e.title for e in store.list_events(DAY)]
    assert titles.count("Dentist") == 1
    assert "dentist" in {e.identifier for e in store.list_events(DAY)}
    assert sum(e.amount_ml for e in store.list_events(next_day)) == 2000
    assert len(store.list_events_between(DAY, next_day)) == 12 + 1 + 12


def test_replace_is_atomic_on_failure(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    store.replace_events(DAY, allocate(1.0, DAY))

    clashing = [replace(e, identifier="same-id") for e in allocate(2.0, DAY)[:2]]
    with pytest.raises(EventStoreError):
        store.replace_events(DAY, clashing)

    listed = store.list_events(DAY)
    assert sum(e.amount_ml for e in listed) == 1000


def test_remove_events_matching(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    store.replace_events(DAY, allocate(1.0, DAY))
    removed = store.remove_events_matching(lambda e: e.start_time.hour < 12)
    assert removed == 3
    assert len(store.list_events(DAY)) == 9


def test_completion_is_scoped_per_day(tmp_path: Path) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    store.save(DAY, {"a": True, "b": False})
    assert store.load(DAY) == {"a": True, "b": False}
    assert store.load(DAY + timedelta(days=1)) == {}

    store.save(DAY, {"c": True})
    assert store.load(DAY) == {"c": True}


def _legacy_db(tmp_path: Path) -> Path:
    db = tmp_path / "old.sqlite3"
    with sqlite3.connect(db) as conn:
        conn.execute(
            """
            CREATE TABLE reminder_events (
                id TEXT PRIMARY KEY, day TEXT NOT NULL, title TEXT NOT NULL,
                start_time TEXT NOT NULL, end_time TEXT NOT NULL,
                amount_ml INTEGER NOT NULL
            )
            """
        )
        conn.execute(
            "INSERT INTO reminder_events VALUES (?, ?, ?, ?, ?, ?)",
            (
                "old-1",
                "2025-12-15",
                "Sleeter: Drink 80 ml",
                "2025-12-15T09:00:00",
                "2025-12-15T09:10:00",
                80,
            ),
        )
        conn.commit()
    return db


def test_migration_adds_notes_column(tmp_path: Path) -> None:
    db = _legacy_db(tmp_path)
    store = SQLiteStore(db)
    assert [e.identifier for e in store.list_events(DAY)] == ["old-1"]
    with sqlite3.connect(db) as conn:
        notes = conn.execute("SELECT notes FROM reminder_events").fetchone()[0]
    assert notes == "Automated water schedule from Sleeter"


def test_legacy_naive_times_take_configured_zone(tmp_path: Path) -> None:
    store = SQLiteStore(_legacy_db(tmp_path))
    store.save_config(AppConfig(timezone="UTC"))

    [event] = store.list_events(DAY)
    assert event.start_time == datetime(2025, 12, 15, 9, tzinfo=tz.UTC)
    assert event.end_time.tzinfo is not None

    service = HydrationService(
        events=store,
        completions=store,
        config=store.load_config(),
        clock=lambda: datetime(2025, 12, 15, 9, 30, tzinfo=tz.UTC),
    )
    snap = service.progress(DAY)
    assert snap.goal_ml == 80
    assert snap.expected_ml == 80
    assert service.toggle_completion("old-1", DAY).consumed_ml == 80


def test_read_errors_are_wrapped(tmp_path: Path) -> None:
    db = tmp_path / "app.sqlite3"
    store = SQLiteStore(db)
    with sqlite3.connect(db) as conn:
        conn.execute("DROP TABLE completed_events")
        conn.execute("DROP TABLE reminder_events")
        conn.commit()

    with pytest.raises(EventStoreError, match="Could not load completion"):
        store.load(DAY)
    with pytest.raises(EventStoreError, match="Could not list events"):
        store.list_events(DAY)


def test_failed_reschedule_keeps_previous_reminders(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    store = SQLiteStore(tmp_path / "app.sqlite3")
    service = HydrationService(
        events=store,
        completions=store,
        config=AppConfig(timezone="UTC"),
        clock=lambda: datetime(2025, 12, 15, 8, tzinfo=tz.UTC),
    )
    service.schedule(1.0, DAY)

    def _broken_insert(*_args: object) -> None:
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(storage, "_insert_events", _broken_insert)
    with pytest.raises(EventStoreError, match="disk I/O error"):
        service.schedule(2.0, DAY)

    assert len(service.reminders(DAY)) == 12
    assert service.progress(DAY).goal_ml == 1000
