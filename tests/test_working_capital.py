"""Tests for the working capital series."""

from __future__ import annotations

import warnings

import pandas as pd
import pytest

from analytics.working_capital import build_working_capital_series


def test_snapshots_carry_forward_and_start_at_zero(today):
    snapshots = [
        {"date": "2024-03-13", "current_assets": 1200, "current_liabilities": 900},
        {"date": "2024-03-10", "current_assets": 1000, "current_liabilities": 400},
        {"date": "2024-03-20", "current_assets": 5000, "current_liabilities": 0},
    ]

    series = build_working_capital_series(snapshots, 7, today=today)

    assert [entry["date"] for entry in series] == list(pd.date_range("2024-03-09", "2024-03-15"))
    assert [entry["net_working_capital"] for entry in series] == pytest.approx(
        [0.0, 600.0, 600.0, 600.0, 300.0, 300.0, 300.0]
    )
    assert series[-1]["current_assets"] == pytest.approx(1200.0)
    assert series[-1]["current_liabilities"] == pytest.approx(900.0)


def test_snapshot_before_window_seeds_first_day(today):
    snapshots = [{"date": "2024-01-01", "current_assets": 800, "current_liabilities": 300}]

    series = build_working_capital_series(snapshots, 3, today=today)

    assert [entry["net_working_capital"] for entry in series] == pytest.approx([500.0, 500.0, 500.0])


def test_last_snapshot_of_a_day_wins(today):
    snapshots = [
        {"date": "2024-03-15T08:00:00", "current_assets": 100, "current_liabilities": 50},
        {"date": "2024-03-15T17:00:00", "current_assets": 100, "current_liabilities": 90},
    ]

    series = build_working_capital_series(snapshots, 1, today=today)

    assert series[0]["net_working_capital"] == pytest.approx(10.0)


def test_malformed_snapshots_are_skipped(today):
    snapshots = [
        {"date": "yesterday-ish", "current_assets": 100, "current_liabilities": 50},
        {"date": "2024-03-14", "current_assets": "lots", "current_liabilities": 50},
        {"date": "2024-03-14", "current_assets": "250.5", "current_liabilities": 50},
    ]

    series = build_working_capital_series(snapshots, 2, today=today)

    assert [entry["net_working_capital"] for entry in series] == pytest.approx([200.5, 200.5])


def test_no_snapshots_is_all_zero(today):
    series = build_working_capital_series([], 4, today=today)

    assert len(series) == 4
    assert all(entry["net_working_capital"] == 0.0 for entry in series)
    assert build_working_capital_series([], 0, today=today) == []


def test_dropping_bad_balances_does_not_warn(today):
    snapshots = [
        {"date": "2024-03-14", "current_assets": "lots", "current_liabilities": 50},
        {"date": "2024-03-15", "current_assets": 300, "current_liabilities": 100},
    ]

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        series = build_working_capital_series(snapshots, 2, today=today)

    assert [entry["net_working_capital"] for entry in series] == pytest.approx([0.0, 200.0])
    assert not [w for w in caught if "SettingWithCopy" in w.category.__name__]
