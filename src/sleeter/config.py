"""Configuracion de la app (metas, ventana de recordatorios, zona horaria)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo

from dateutil import tz

from sleeter.allocator import DEFAULT_END_HOUR, DEFAULT_INCREMENT_ML, DEFAULT_START_HOUR


@dataclass(frozen=True)
class AppConfig:
    """Configuracion persistida de la app."""

    water_goal_liters: float = 2.0
    sleep_goal_hours: float = 8.0
    start_hour: int = DEFAULT_START_HOUR
    end_hour: int = DEFAULT_END_HOUR
    increment_ml: float = DEFAULT_INCREMENT_ML
    timezone: str = ""
    skip_empty_reminders: bool = False

    @property
    def fallback_goal_ml(self) -> float:
        return max(self.water_goal_liters, 0.0) * 1000.0

    def tzinfo(self) -> tzinfo:
        """Resolve the configured zone (empty -> local zone)."""
        return resolve_tz(self.timezone)


def resolve_tz(name: str) -> tzinfo:
    """Devuelve la zona horaria por nombre IANA, o la local si esta vacio.

    Raises:
        ValueError: If the name is not a known time zone.
    """
    if not name.strip():
        return tz.tzlocal()
    zone = tz.gettz(name.strip())
    if zone is None:
        raise ValueError(f"Unknown timezone: {name}")
    return zone
