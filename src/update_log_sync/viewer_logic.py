"""Helper logic for the Streamlit update log viewer."""

from __future__ import annotations

from typing import Any

import pandas as pd

DATE_COLUMNS = ["date", "time", "timestamp", "created_at"]


def logs_to_frame(logs: list[Any]) -> pd.DataFrame:
    """Flatten log records into a table.

    Object records become one column per (nested) field; any other JSON value
    is shown under a single `value` column.
    """
    if not logs:
        return pd.DataFrame()

    rows = [record if isinstance(record, dict) else {"value": record} for record in logs]
    return pd.json_normalize(rows)


def latest_date_column(df: pd.DataFrame) -> str | None:
    for column in DATE_COLUMNS:
        if column in df.columns:
            return column
    return None


def summarize_logs(df: pd.DataFrame) -> dict[str, Any]:
    """Record count plus the newest entry date when the records carry one."""
    summary: dict[str, Any] = {"records": int(len(df)), "latest": None}
    column = latest_date_column(df)
    if column is None or df.empty:
        return summary

    dates = pd.to_datetime(df[column], errors="coerce").dropna()
    if not dates.empty:
        summary["latest"] = dates.max()
    return summary


def filter_logs(df: pd.DataFrame, query: str) -> pd.DataFrame:
    """Keep rows where any cell contains the query text (case-insensitive)."""
    if df.empty or not query.strip():
        return df

    needle = query.strip()
    mask = df.astype(str).apply(
        lambda column: column.str.contains(needle, case=False, regex=False, na=False)
    ).any(axis=1)
    return df[mask].reset_index(drop=True)
