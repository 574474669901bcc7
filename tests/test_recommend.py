from __future__ import annotations

import pytest

from sleeter.recommend import format_hours, recommended_liters, suggested_sleep_goal


@pytest.mark.parametrize(
    ("sport", "minutes", "expected"),
    [
        ("Running", 30, 0.4),
        ("Running", 45, 0.6),
        ("swimming", 60, 1.0),
        ("HIIT", 50, 0.9),
        ("Yoga", 90, 0.6),
        ("Cycling", -20, 0.0),
    ],
)
def test_recommended_liters(sport: str, minutes: float, expected: float) -> None:
    assert recommended_liters(sport, minutes) == pytest.approx(expected)


def test_recommended_liters_unknown_sport() -> None:
    with pytest.raises(ValueError, match="Unknown sport"):
        recommended_liters("Curling", 30)


@pytest.mark.parametrize(
    ("base", "intensity", "expected"),
    [
        (8.0, "none", 8.0),
        (8.0, "light", 8.25),
        (8.0, "Moderate", 8.75),
        (8.0, "hard", 9.25),
        (9.5, "hard", 10.0),
        (10.5, "none", 10.0),
    ],
)
def test_suggested_sleep_goal(base: float, intensity: str, expected: float) -> None:
    assert suggested_sleep_goal(base, intensity) == pytest.approx(expected)


def test_suggested_sleep_goal_unknown_intensity() -> None:
    with pytest.raises(ValueError, match="Unknown intensity"):
        suggested_sleep_goal(8.0, "extreme")


def test_format_hours() -> None:
    assert format_hours(8.0) == "8h"
    assert format_hours(7.75) == "7h 45m"
    assert format_hours(9.25) == "9h 15m"
