"""Tablas de historial: recordatorios por evento y resumen diario."""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from sleeter.model import CompletionState, ReminderEvent

EVENT_COLUMNS = [
    "date",
    "start_time",
    "end_time",
    "amount_ml",
    "identifier",
    "completed",
]

SUMMARY_COLUMNS = [
    "date",
    "reminders",
    "completed",
    "goal_ml",
    "consumed_ml",
    "completion_pct",
]


def events_to_frame(
    events: Sequence[ReminderEvent], completion: CompletionState
) -> pd.DataFrame:
    """Convert reminders to a DataFrame, one row per event, ordered by start."""
    rows = [
        {
            "date": e.start_time.date(),
            "start_time": e.start_time,
            "end_time": e.end_time,
            "amount_ml": e.amount_ml,
            "identifier": e.identifier,
            "completed": bool(e.identifier and completion.get(e.identifier, False)),
        }
        for e in events
    ]
    df = pd.DataFrame(rows, columns=EVENT_COLUMNS)
    if df.empty:
        return df
    return df.sort_values("start_time").reset_index(drop=True)


def daily_progress_summary(events_df: pd.DataFrame) -> pd.DataFrame:
    """Aggregate reminders by day (count/completed/goal/consumed/%)."""
    if events_df.empty:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    df = events_df.copy()
    df["consumed_ml"] = df["amount_ml"].where(df["completed"], 0)
    g = df.groupby("date", as_index=False).agg(
        reminders=("amount_ml", "count"),
        completed=("completed", "sum"),
        goal_ml=("amount_ml", "sum"),
        consumed_ml=("consumed_ml", "sum"),
    )
    g["completed"] = g["completed"].astype(int)
    goal = g["goal_ml"].where(g["goal_ml"] > 0, 1)
    g["completion_pct"] = (g["consumed_ml"] / goal * 100).round(2)
    return g[SUMMARY_COLUMNS].sort_values("date").reset_index(drop=True)
