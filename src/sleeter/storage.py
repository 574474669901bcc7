"""Persistencia SQLite para configuracion, recordatorios y completados."""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import fields, replace
from datetime import date, datetime, tzinfo
from pathlib import Path
from typing import Any

from sleeter.allocator import REMINDER_NOTES, TITLE_PREFIX, is_water_reminder
from sleeter.config import AppConfig
from sleeter.model import ReminderEvent
from sleeter.stores.base import (
    CompletionStore,
    EventPredicate,
    EventStore,
    EventStoreError,
)

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS app_config (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS reminder_events (
    id TEXT PRIMARY KEY,
    day TEXT NOT NULL,
    title TEXT NOT NULL,
    start_time TEXT NOT NULL,
    end_time TEXT NOT NULL,
    amount_ml INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_reminder_events_day
ON reminder_events(day);

CREATE TABLE IF NOT EXISTS completed_events (
    day TEXT NOT NULL,
    event_id TEXT NOT NULL,
    completed INTEGER NOT NULL,
    PRIMARY KEY(day, event_id)
);
"""


class SQLiteStore(EventStore, CompletionStore):
    """Repositorio SQLite para la app."""

    atomic_replace = True

    def __init__(self, db_path: Path) -> None:
        """Create store and ensure schema exists."""
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)
            self._migrate(conn)
            conn.commit()

    def _migrate(self, conn: sqlite3.Connection) -> None:
        """Apply lightweight schema migrations."""
        cols = {
            row["name"] for row in conn.execute("PRAGMA table_info(reminder_events)")
        }
        if "notes" not in cols:
            conn.execute("ALTER TABLE reminder_events ADD COLUMN notes TEXT")
            conn.execute(
                "UPDATE reminder_events SET notes = ? WHERE title LIKE ?",
                (REMINDER_NOTES, f"{TITLE_PREFIX}%"),
            )

    # -- configuracion -----------------------------------------------------

    def load_config(self) -> AppConfig:
        """Devuelve configuracion guardada o defaults."""
        defaults = AppConfig()
        with self._connect() as conn:
            rows = conn.execute("SELECT key, value FROM app_config").fetchall()
        values = {row["key"]: row["value"] for row in rows}

        merged: dict[str, Any] = {}
        for field in fields(AppConfig):
            default = getattr(defaults, field.name)
            raw = values.get(field.name)
            merged[field.name] = default if raw is None else _parse_value(raw, default)
        return AppConfig(**merged)

    def save_config(self, config: AppConfig) -> None:
        """Guarda la configuracion en tabla key/value."""
        payload = {
            field.name: json.dumps(getattr(config, field.name))
            for field in fields(AppConfig)
        }
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT INTO app_config(key, value) VALUES(?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
                """,
                payload.items(),
            )
            conn.commit()

    # -- eventos -----------------------------------------------------------

    def list_events(self, day: date) -> list[ReminderEvent]:
        return self.list_events_between(day, day)

    def list_events_between(self, start_day: date, end_day: date) -> list[ReminderEvent]:
        """Eventos con dia en [start_day, end_day], ordenados por inicio."""
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    """
                    SELECT id, title, start_time, end_time, amount_ml
                    FROM reminder_events
                    WHERE day BETWEEN ? AND ?
                    """,
                    (start_day.isoformat(), end_day.isoformat()),
                ).fetchall()
        except sqlite3.Error as exc:
            raise EventStoreError(f"Could not list events: {exc}") from exc
        zone = self._zone()
        events = [_row_to_event(row, zone) for row in rows]
        return sorted(events, key=lambda e: e.start_time)

    def _zone(self) -> tzinfo:
        """Zona configurada; se asigna a horas guardadas sin offset."""
        return self.load_config().tzinfo()

    def replace_events(
        self, day: date, events: Sequence[ReminderEvent]
    ) -> list[ReminderEvent]:
        created = [_with_identifier(e) for e in events]
        try:
            with self._connect() as conn:
                cur = conn.execute(
                    "DELETE FROM reminder_events WHERE day = ? AND title LIKE ?",
                    (day.isoformat(), f"{TITLE_PREFIX}%"),
                )
                removed = cur.rowcount
                _insert_events(conn, created)
                conn.commit()
        except sqlite3.Error as exc:
            raise EventStoreError(f"Could not replace events for {day}: {exc}") from exc
        logger.debug(
            "Replaced reminders for %s: removed=%s created=%s",
            day,
            removed,
            len(created),
        )
        return created

    def remove_events_matching(self, predicate: EventPredicate) -> int:
        zone = self._zone()
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT id, title, start_time, end_time, amount_ml "
                    "FROM reminder_events"
                ).fetchall()
                doomed = [
                    (event.identifier,)
                    for event in (_row_to_event(row, zone) for row in rows)
                    if predicate(event)
                ]
                if doomed:
                    conn.executemany("DELETE FROM reminder_events WHERE id = ?", doomed)
                conn.commit()
        except sqlite3.Error as exc:
            raise EventStoreError(f"Could not remove events: {exc}") from exc
        return len(doomed)

    # -- completados -------------------------------------------------------

    def load(self, day: date) -> dict[str, bool]:
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT event_id, completed FROM completed_events WHERE day = ?",
                    (day.isoformat(),),
                ).fetchall()
        except sqlite3.Error as exc:
            raise EventStoreError(f"Could not load completion for {day}: {exc}") from exc
        return {str(row["event_id"]): bool(row["completed"]) for row in rows}

    def save(self, day: date, completion: Mapping[str, bool]) -> None:
        key = day.isoformat()
        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM completed_events WHERE day = ?", (key,))
                conn.executemany(
                    """
                    INSERT INTO completed_events(day, event_id, completed)
                    VALUES (?, ?, ?)
                    """,
                    [
                        (key, event_id, int(bool(done)))
                        for event_id, done in completion.items()
                    ],
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise EventStoreError(f"Could not save completion for {day}: {exc}") from exc


def _with_identifier(event: ReminderEvent) -> ReminderEvent:
    if event.identifier:
        return event
    return replace(event, identifier=uuid.uuid4().hex)


def _insert_events(conn: sqlite3.Connection, events: Sequence[ReminderEvent]) -> None:
    conn.executemany(
        """
        INSERT INTO reminder_events(
            id, day, title, start_time, end_time, amount_ml, notes
        ) VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        [
            (
                e.identifier,
                e.start_time.date().isoformat(),
                e.title,
                e.start_time.isoformat(),
                e.end_time.isoformat(),
                int(e.amount_ml),
                REMINDER_NOTES if is_water_reminder(e) else None,
            )
            for e in events
        ],
    )


def _parse_stored_time(raw: str, zone: tzinfo) -> datetime:
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=zone)
    return parsed


def _row_to_event(row: sqlite3.Row, zone: tzinfo) -> ReminderEvent:
    return ReminderEvent(
        start_time=_parse_stored_time(row["start_time"], zone),
        end_time=_parse_stored_time(row["end_time"], zone),
        amount_ml=int(row["amount_ml"]),
        identifier=str(row["id"]),
        title=str(row["title"]),
    )


def _parse_value(raw: str, default: object) -> object:
    """Decodifica un valor JSON guardado; si no coincide el tipo usa el default."""
    try:
        parsed: Any = json.loads(raw)
    except json.JSONDecodeError:
        return default
    if isinstance(default, bool):
        return parsed if isinstance(parsed, bool) else default
    if isinstance(default, int):
        if isinstance(parsed, int) and not isinstance(parsed, bool):
            return parsed
        return default
    if isinstance(default, float):
        if isinstance(parsed, int | float) and not isinstance(parsed, bool):
            return float(parsed)
        return default
    if isinstance(default, str):
        return parsed if isinstance(parsed, str) else default
    return default
