"""Capa de servicio: programar recordatorios, progreso y completados."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime

import pandas as pd

from sleeter.allocator import allocate, is_water_reminder
from sleeter.config import AppConfig
from sleeter.model import ProgressSnapshot, ReminderEvent
from sleeter.progress import aggregate
from sleeter.report import events_to_frame
from sleeter.stores.base import CompletionStore, EventStore, EventStoreError

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class HydrationService:
    """Schedules a day's water reminders and reports progress against them."""

    def __init__(
        self,
        events: EventStore,
        completions: CompletionStore,
        config: AppConfig,
        clock: Clock | None = None,
    ) -> None:
        """Create the service.

        Args:
            events: Store holding the reminder events.
            completions: Per-day completion state store.
            config: Goals, reminder window and time zone.
            clock: Source of the current time (defaults to the configured zone).
        """
        self._events = events
        self._completions = completions
        self._config = config
        self._tz = config.tzinfo()
        self._clock = clock or (lambda: datetime.now(tz=self._tz))

    @property
    def config(self) -> AppConfig:
        return self._config

    def today(self) -> date:
        return self._clock().date()

    def schedule(self, total_liters: float | None = None, day: date | None = None) -> int:
        """Replace the day's reminders with a fresh allocation.

        Returns:
            Number of reminders created.

        Raises:
            EventStoreError: If the store failed. For stores without atomic
                replace, reminders written by the failed call are removed
                before re-raising; earlier ones are kept.
        """
        liters = self._config.water_goal_liters if total_liters is None else total_liters
        day = day or self.today()
        planned = allocate(
            liters,
            day,
            start_hour=self._config.start_hour,
            end_hour=self._config.end_hour,
            increment_ml=self._config.increment_ml,
            tz=self._tz,
        )
        if self._config.skip_empty_reminders:
            planned = [e for e in planned if e.amount_ml > 0]

        previous = (
            set()
            if self._events.atomic_replace
            else {e.identifier for e in self.reminders(day)}
        )
        try:
            created = self._events.replace_events(day, planned)
        except EventStoreError:
            logger.exception("Scheduling failed for %s", day)
            if not self._events.atomic_replace:
                self._remove_partial_writes(day, previous)
            raise

        logger.info(
            "Scheduled %s reminders for %s (%.2f L)", len(created), day, max(liters, 0)
        )
        return len(created)

    def _remove_partial_writes(self, day: date, previous: set[str | None]) -> None:
        """Drop the day's reminders that were not there before a failed replace.

        Cleanup failures are logged so the caller still sees the original error.
        """
        try:
            removed = self._events.remove_events_matching(
                lambda e: e.start_time.date() == day
                and is_water_reminder(e)
                and e.identifier not in previous
            )
        except EventStoreError:
            logger.exception("Cleanup after failed scheduling of %s also failed", day)
            return
        logger.warning("Removed %s partially written reminders for %s", removed, day)

    def reminders(self, day: date | None = None) -> list[ReminderEvent]:
        day = day or self.today()
        return [e for e in self._events.list_events(day) if is_water_reminder(e)]

    def progress(self, day: date | None = None) -> ProgressSnapshot:
        day = day or self.today()
        return aggregate(
            self.reminders(day),
            self._completions.load(day),
            now=self._clock(),
            fallback_goal_ml=self._config.fallback_goal_ml,
        )

    def toggle_completion(
        self, identifier: str, day: date | None = None
    ) -> ProgressSnapshot:
        """Flip the consumed flag of ``identifier`` and return the new progress."""
        day = day or self.today()
        completion = self._completions.load(day)
        completion[identifier] = not completion.get(identifier, False)
        self._completions.save(day, completion)
        logger.debug("Toggled %s on %s -> %s", identifier, day, completion[identifier])
        return self.progress(day)

    def history_frame(self, start_day: date, end_day: date) -> pd.DataFrame:
        """Reminders of every day in [start_day, end_day] with completion flags."""
        events: list[ReminderEvent] = []
        completion: dict[str, bool] = {}
        for day in pd.date_range(start=start_day, end=end_day, freq="D").date:
            events.extend(self.reminders(day))
            completion.update(self._completions.load(day))
        return events_to_frame(events, completion)
