"""Daily net working capital series built from balance snapshots."""

from __future__ import annotations

from datetime import date
from typing import Iterable

import pandas as pd

from analytics.normalize import MalformedRecordError, parse_record_day
from analytics.series import as_day
from core.logging_setup import get_logger
from core.models import WorkingCapitalEntry, WorkingCapitalSnapshot

__all__ = ["build_working_capital_series"]

logger = get_logger(__name__)

_BALANCE_COLUMNS = ["current_assets", "current_liabilities"]


def build_working_capital_series(
    snapshots: Iterable[WorkingCapitalSnapshot],
    window_length_days: int,
    *,
    today: date | str | pd.Timestamp,
) -> list[WorkingCapitalEntry]:
    """Return one entry per day for the window ending on ``today``.

    Each day carries the latest snapshot taken on or before it; days before the
    first snapshot are zero. When several snapshots share a day the last one
    wins. Snapshots with an unparsable date or balance are skipped.
    """

    if window_length_days < 0:
        raise ValueError("window_length_days must be non-negative")

    rows: list[dict[str, object]] = []
    for snapshot in snapshots:
        try:
            day = parse_record_day(snapshot.get("date"))
        except MalformedRecordError as exc:
            logger.warning("Skipping working capital snapshot: %s", exc)
            continue
        rows.append(
            {
                "date": day,
                "current_assets": snapshot.get("current_assets"),
                "current_liabilities": snapshot.get("current_liabilities"),
            }
        )

    index = pd.date_range(end=as_day(today), periods=window_length_days, freq="D")
    frame = pd.DataFrame(rows, columns=["date", *_BALANCE_COLUMNS])
    for column in _BALANCE_COLUMNS:
        frame[column] = pd.to_numeric(frame[column], errors="coerce")
    invalid = frame[_BALANCE_COLUMNS].isna().any(axis=1)
    if invalid.any():
        logger.warning("Skipping %d working capital snapshot(s) with non-numeric balances", int(invalid.sum()))
        frame = frame.loc[~invalid].copy()

    if frame.empty or not len(index):
        daily = pd.DataFrame(0.0, index=index, columns=_BALANCE_COLUMNS)
    else:
        frame["date"] = pd.to_datetime(frame["date"])
        balances = frame.groupby("date", sort=True)[_BALANCE_COLUMNS].last()
        history = balances[balances.index <= index[-1]]
        daily = history.reindex(history.index.union(index)).ffill().reindex(index).fillna(0.0)

    entries: list[WorkingCapitalEntry] = []
    for day, row in daily.iterrows():
        assets = float(row["current_assets"])
        liabilities = float(row["current_liabilities"])
        entries.append(
            {
                "date": pd.Timestamp(day),
                "current_assets": assets,
                "current_liabilities": liabilities,
                "net_working_capital": assets - liabilities,
            }
        )
    return entries
