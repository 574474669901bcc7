"""Calculo de progreso diario a partir de recordatorios y completados."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sleeter.model import CompletionState, ProgressSnapshot, ReminderEvent


def aggregate(
    events: Sequence[ReminderEvent],
    completion: CompletionState,
    now: datetime,
    fallback_goal_ml: float,
) -> ProgressSnapshot:
    """Sum goal, consumed and expected volumes for a day's reminders.

    Args:
        events: The day's reminders.
        completion: Identifier -> consumed flag for the same day.
        now: Current time; reminders starting at or before it are expected.
        fallback_goal_ml: Goal used when the reminders add up to zero.

    Returns:
        Snapshot with plain sums; no extra rounding is applied.
    """
    goal_ml = float(sum(e.amount_ml for e in events))
    if goal_ml == 0:
        goal_ml = float(fallback_goal_ml)

    consumed_ml = float(
        sum(e.amount_ml for e in events if _is_completed(e, completion))
    )
    expected_ml = float(sum(e.amount_ml for e in events if e.start_time <= now))
    return ProgressSnapshot(
        goal_ml=goal_ml,
        consumed_ml=consumed_ml,
        expected_ml=expected_ml,
    )


def _is_completed(event: ReminderEvent, completion: CompletionState) -> bool:
    if event.identifier is None:
        return False
    return bool(completion.get(event.identifier, False))
