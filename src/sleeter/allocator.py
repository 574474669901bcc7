"""Reparto de la meta diaria de agua en recordatorios horarios."""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, tzinfo

from sleeter.model import ReminderEvent

TITLE_PREFIX = "Sleeter: Drink"
REMINDER_NOTES = "Automated water schedule from Sleeter"
REMINDER_DURATION = timedelta(minutes=10)

DEFAULT_START_HOUR = 9
DEFAULT_END_HOUR = 21
DEFAULT_INCREMENT_ML = 10.0


def reminder_title(amount_ml: int) -> str:
    """Calendar title for a reminder, e.g. ``Sleeter: Drink 80 ml``."""
    return f"{TITLE_PREFIX} {amount_ml} ml"


def is_water_reminder(event: ReminderEvent) -> bool:
    """True if the event carries the water reminder tag."""
    return event.title.startswith(TITLE_PREFIX)


def allocate(
    total_liters: float,
    day: date,
    start_hour: int = DEFAULT_START_HOUR,
    end_hour: int = DEFAULT_END_HOUR,
    increment_ml: float = DEFAULT_INCREMENT_ML,
    tz: tzinfo | None = None,
) -> list[ReminderEvent]:
    """Spread ``total_liters`` over one reminder per hour in the window.

    Args:
        total_liters: Daily target. Negative values are clamped to 0.
        day: Calendar day of the reminders.
        start_hour: First reminder hour (0-23).
        end_hour: Exclusive end hour (0-23).
        increment_ml: Rounding granularity of the displayed amounts.
        tz: Time zone of the generated start/end times.

    Returns:
        Events ordered by start time, without identifiers. Empty when
        ``end_hour <= start_hour``.

    Raises:
        ValueError: If an hour is outside 0-23.
    """
    for name, hour in (("start_hour", start_hour), ("end_hour", end_hour)):
        if not 0 <= hour <= 23:
            raise ValueError(f"{name} must be between 0 and 23, got {hour}")

    slot_count = max(end_hour - start_hour, 0)
    if slot_count == 0:
        return []

    total_ml = max(total_liters, 0.0) * 1000.0
    amounts = slot_amounts(total_ml, slot_count, increment_ml)

    events: list[ReminderEvent] = []
    for i, amount in enumerate(amounts):
        start = datetime.combine(day, time(hour=start_hour + i), tzinfo=tz)
        events.append(
            ReminderEvent(
                start_time=start,
                end_time=start + REMINDER_DURATION,
                amount_ml=amount,
                title=reminder_title(amount),
            )
        )
    return events


def slot_amounts(total_ml: float, slot_count: int, increment_ml: float) -> list[int]:
    """Amounts per slot whose sum is exactly ``round(total_ml)``.

    Every slot but the last gets the per-slot share floored to the increment;
    the last one takes the remainder rounded to the increment, then absorbs
    whatever rounding drift is left against the whole-ml total.
    """
    if slot_count <= 0:
        return []
    if increment_ml <= 0:
        increment_ml = 1.0
    total_ml = max(total_ml, 0.0)

    exact_per_slot = total_ml / slot_count
    floored_per_slot = math.floor(exact_per_slot / increment_ml) * increment_ml

    # Whole ml for display.
    amounts = [math.floor(floored_per_slot)] * (slot_count - 1)
    last = max(total_ml - floored_per_slot * (slot_count - 1), 0.0)
    amounts.append(_round_half_up(_round_half_up(last / increment_ml) * increment_ml))

    diff = _round_half_up(total_ml) - sum(amounts)
    if abs(diff) >= 1:
        amounts[-1] += diff
    return amounts


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
