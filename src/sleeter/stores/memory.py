"""Almacenes en memoria (pruebas y ejecuciones sin disco)."""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from dataclasses import replace
from datetime import date

from sleeter.allocator import is_water_reminder
from sleeter.model import ReminderEvent
from sleeter.stores.base import CompletionStore, EventPredicate, EventStore


class InMemoryEventStore(EventStore):
    """Dict-backed event store."""

    def __init__(self) -> None:
        self._events: dict[str, ReminderEvent] = {}

    def list_events(self, day: date) -> list[ReminderEvent]:
        found = [e for e in self._events.values() if e.start_time.date() == day]
        return sorted(found, key=lambda e: e.start_time)

    def replace_events(
        self, day: date, events: Sequence[ReminderEvent]
    ) -> list[ReminderEvent]:
        self.remove_events_matching(
            lambda e: e.start_time.date() == day and is_water_reminder(e)
        )
        return [self.add_event(event) for event in events]

    def add_event(self, event: ReminderEvent) -> ReminderEvent:
        """Store a single event as-is (e.g. a non-reminder calendar entry)."""
        stored = replace(event, identifier=event.identifier or uuid.uuid4().hex)
        self._events[stored.identifier] = stored
        return stored

    def remove_events_matching(self, predicate: EventPredicate) -> int:
        doomed = [key for key, e in self._events.items() if predicate(e)]
        for key in doomed:
            del self._events[key]
        return len(doomed)


class InMemoryCompletionStore(CompletionStore):
    """Dict-backed completion store; each day is an independent copy."""

    def __init__(self) -> None:
        self._days: dict[date, dict[str, bool]] = {}

    def load(self, day: date) -> dict[str, bool]:
        return dict(self._days.get(day, {}))

    def save(self, day: date, completion: Mapping[str, bool]) -> None:
        self._days[day] = {key: bool(value) for key, value in completion.items()}
