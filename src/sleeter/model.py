"""Modelos tipados para recordatorios de agua y progreso diario."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime

CompletionState = Mapping[str, bool]


@dataclass(frozen=True)
class ReminderEvent:
    """One hourly water reminder (calendar block)."""

    start_time: datetime
    end_time: datetime
    amount_ml: int
    identifier: str | None = None
    title: str = ""


@dataclass(frozen=True)
class ProgressSnapshot:
    """Consumed/expected/goal volumes for one day."""

    goal_ml: float
    consumed_ml: float
    expected_ml: float

    @property
    def on_track(self) -> bool:
        return self.consumed_ml >= self.expected_ml

    @property
    def progress(self) -> float:
        """Fraccion consumida de la meta, acotada a [0, 1]."""
        return _clamp_unit(self.consumed_ml / max(self.goal_ml, 1))

    @property
    def expected_progress(self) -> float:
        """Fraccion esperada a esta hora, acotada a [0, 1]."""
        return _clamp_unit(self.expected_ml / max(self.goal_ml, 1))

    @property
    def catch_up_ml(self) -> float:
        return max(self.expected_ml - self.consumed_ml, 0.0)

    @property
    def status_text(self) -> str:
        if self.on_track:
            return "On track"
        return f"Catch up: drink {int(self.catch_up_ml)} ml"


def _clamp_unit(value: float) -> float:
    return max(min(value, 1.0), 0.0)
