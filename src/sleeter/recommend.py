"""Recomendaciones: agua por deporte y meta de sueño segun intensidad."""

from __future__ import annotations

import math

SPORT_LITERS_PER_HOUR: dict[str, float] = {
    "Running": 0.8,
    "Cycling": 0.7,
    "Swimming": 1.0,
    "Soccer": 0.9,
    "Basketball": 0.9,
    "Tennis": 0.8,
    "Strength Training": 0.6,
    "Yoga": 0.4,
    "HIIT": 1.1,
}

# Horas extra de sueño por intensidad del entrenamiento.
INTENSITY_SLEEP_BONUS: dict[str, float] = {
    "none": 0.0,
    "light": 0.25,
    "moderate": 0.75,
    "hard": 1.25,
}

MAX_SLEEP_GOAL_HOURS = 10.0


def _lookup_sport(sport: str) -> float:
    wanted = sport.strip().lower()
    for name, liters in SPORT_LITERS_PER_HOUR.items():
        if name.lower() == wanted:
            return liters
    known = ", ".join(SPORT_LITERS_PER_HOUR)
    raise ValueError(f"Unknown sport: {sport!r} (known: {known})")


def recommended_liters(sport: str, duration_minutes: float) -> float:
    """Water to drink for a workout, rounded to 0.1 L.

    Raises:
        ValueError: If the sport is unknown.
    """
    per_hour = _lookup_sport(sport)
    hours = max(duration_minutes / 60.0, 0.0)
    return math.floor(per_hour * hours * 10 + 0.5) / 10.0


def suggested_sleep_goal(base_hours: float, intensity: str = "none") -> float:
    """Base sleep goal plus the workout bonus, capped at 10 hours.

    Raises:
        ValueError: If the intensity is unknown.
    """
    key = intensity.strip().lower()
    if key not in INTENSITY_SLEEP_BONUS:
        known = ", ".join(INTENSITY_SLEEP_BONUS)
        raise ValueError(f"Unknown intensity: {intensity!r} (known: {known})")
    if base_hours >= MAX_SLEEP_GOAL_HOURS:
        return MAX_SLEEP_GOAL_HOURS
    return min(base_hours + INTENSITY_SLEEP_BONUS[key], MAX_SLEEP_GOAL_HOURS)


def format_hours(total_hours: float) -> str:
    """Formatea horas decimales como ``7h 45m`` (o ``8h``)."""
    hours = int(total_hours)
    minutes = int((total_hours - hours) * 60)
    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h {minutes}m"
