"""Excel del historial de hidratación: un día por fila más fila de totales."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, NamedTuple

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from sleeter.report import SUMMARY_COLUMNS


class _Column(NamedTuple):
    key: str
    header: str
    width: int
    number_format: str | None


_COLUMNS: tuple[_Column, ...] = (
    _Column("date", "Date", 12, "dd/mm/yyyy"),
    _Column("reminders", "Reminders", 11, "0"),
    _Column("completed", "Completed", 11, "0"),
    _Column("goal_ml", "Goal (ml)", 12, "#,##0"),
    _Column("consumed_ml", "Consumed (ml)", 14, "#,##0"),
    _Column("completion_pct", "Completion (%)", 15, "0.00"),
)

TOTAL_LABEL = "Total"


@dataclass(frozen=True)
class ExcelLayout:
    """Sheet name and status colours of the history workbook."""

    sheet_name: str = "Hydration history"
    met_fill: str = "E2EFDA"
    behind_fill: str = "FCE4D6"
    add_totals: bool = True


def write_history_xlsx(
    summary: pd.DataFrame, out_path: Path, layout: ExcelLayout
) -> None:
    """Write the daily progress summary as a formatted workbook.

    Days that reached their goal are filled with ``layout.met_fill``; days
    below 100% with ``layout.behind_fill``. A bold totals row is appended
    when the summary is not empty.

    Args:
        summary: Output of ``daily_progress_summary``.
        out_path: Destination XLSX file; parent folders are created.
        layout: Sheet name, colours and totals switch.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)

    export_df = summary.reindex(columns=SUMMARY_COLUMNS).copy()
    day_count = len(export_df)
    if day_count and layout.add_totals:
        export_df = pd.concat(
            [export_df, pd.DataFrame([totals_row(summary)])], ignore_index=True
        )
    export_df = export_df.rename(columns={c.key: c.header for c in _COLUMNS})

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        export_df.to_excel(writer, index=False, sheet_name=layout.sheet_name)
        ws = writer.book[layout.sheet_name]
        _format_sheet(ws, day_count, layout)


def totals_row(summary: pd.DataFrame) -> dict[str, Any]:
    """Sum of every numeric column; the percentage is recomputed from totals."""
    goal = int(summary["goal_ml"].sum())
    consumed = int(summary["consumed_ml"].sum())
    return {
        "date": TOTAL_LABEL,
        "reminders": int(summary["reminders"].sum()),
        "completed": int(summary["completed"].sum()),
        "goal_ml": goal,
        "consumed_ml": consumed,
        "completion_pct": round(consumed / goal * 100, 2) if goal > 0 else 0.0,
    }


def _format_sheet(ws: Any, day_count: int, layout: ExcelLayout) -> None:
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center")

    for cell in ws[1]:
        cell.font = Font(bold=True)
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
        cell.border = border
    ws.freeze_panes = "A2"

    met = PatternFill("solid", fgColor=layout.met_fill)
    behind = PatternFill("solid", fgColor=layout.behind_fill)
    pct_idx = len(_COLUMNS) - 1

    for offset, row in enumerate(ws.iter_rows(min_row=2)):
        is_total = offset >= day_count
        pct = row[pct_idx].value
        fill = met if isinstance(pct, int | float) and pct >= 100 else behind
        for col, cell in zip(_COLUMNS, row):
            cell.alignment = center
            cell.border = border
            if col.number_format and not (is_total and col.key == "date"):
                cell.number_format = col.number_format
            if is_total:
                cell.font = Font(bold=True)
            else:
                cell.fill = fill

    for idx, col in enumerate(_COLUMNS, start=1):
        ws.column_dimensions[ws.cell(row=1, column=idx).column_letter].width = col.width
