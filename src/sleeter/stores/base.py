"""Clases base para almacenes de eventos y de completados."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from datetime import date

from sleeter.model import ReminderEvent

EventPredicate = Callable[[ReminderEvent], bool]


class EventStoreError(RuntimeError):
    """Persistence failure in an event or completion store."""


class EventStore(ABC):
    """Calendar-like store of reminder events."""

    #: True when a failed ``replace_events`` leaves the previous events intact.
    atomic_replace: bool = False

    @abstractmethod
    def list_events(self, day: date) -> list[ReminderEvent]:
        """Return the events starting on ``day``, ordered by start time."""

    @abstractmethod
    def replace_events(
        self, day: date, events: Sequence[ReminderEvent]
    ) -> list[ReminderEvent]:
        """Replace the water reminders of ``day`` with ``events``.

        Prior same-day water reminders are removed before inserting; other
        events of the day are left alone.

        Returns:
            The stored events, with identifiers assigned.

        Raises:
            EventStoreError: If the store could not complete the replacement.
        """

    @abstractmethod
    def remove_events_matching(self, predicate: EventPredicate) -> int:
        """Remove every stored event for which ``predicate`` is true.

        Returns:
            Number of removed events.
        """


class CompletionStore(ABC):
    """Per-day store of consumed flags keyed by event identifier."""

    @abstractmethod
    def load(self, day: date) -> dict[str, bool]:
        """Return the completion state of ``day`` (empty if never saved)."""

    @abstractmethod
    def save(self, day: date, completion: Mapping[str, bool]) -> None:
        """Persist the completion state of ``day``, replacing the previous one."""
