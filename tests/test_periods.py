"""Calendar period resolution and labelling."""

from __future__ import annotations

import pandas as pd
import pytest

from analytics.periods import (
    default_report_range,
    iter_periods,
    period_label,
    previous_period,
    resolve_period,
    shift_period,
)
from core.errors import CashflowRangeError
from core.models import PeriodType


@pytest.mark.parametrize(
    ("period_type", "start", "end_day"),
    [
        ("day", "2024-06-15", "2024-06-15"),
        ("week", "2024-06-10", "2024-06-16"),
        ("month", "2024-06-01", "2024-06-30"),
        ("quarter", "2024-04-01", "2024-06-30"),
        ("year", "2024-01-01", "2024-12-31"),
    ],
)
def test_resolve_period_bounds(period_type, start, end_day):
    period = resolve_period("2024-06-15 13:45", period_type)

    assert period.period_type is PeriodType(period_type)
    assert period.start == pd.Timestamp(start)
    assert period.end.normalize() == pd.Timestamp(end_day)
    assert period.end > pd.Timestamp(end_day) + pd.Timedelta(hours=23)


def test_resolve_period_weeks_start_on_monday():
    sunday = resolve_period("2024-06-16", PeriodType.WEEK)
    monday = resolve_period("2024-06-17", PeriodType.WEEK)

    assert sunday.start == pd.Timestamp("2024-06-10")
    assert monday.start == pd.Timestamp("2024-06-17")


def test_resolve_period_handles_leap_february():
    period = resolve_period("2024-02-10", "month")

    assert period.days == 29
    assert period.contains(pd.Timestamp("2024-02-29 23:00"))
    assert not period.contains(pd.Timestamp("2024-03-01"))


def test_resolve_period_rejects_unknown_type():
    with pytest.raises(ValueError):
        resolve_period("2024-06-15", "fortnight")


def test_iter_periods_keeps_full_calendar_bounds():
    periods = iter_periods("2024-04-15", "2024-06-03", "month")

    assert [p.start for p in periods] == [
        pd.Timestamp("2024-04-01"),
        pd.Timestamp("2024-05-01"),
        pd.Timestamp("2024-06-01"),
    ]
    assert periods[-1].end.normalize() == pd.Timestamp("2024-06-30")


def test_iter_periods_single_day_range():
    periods = iter_periods("2024-06-15", "2024-06-15", "day")

    assert len(periods) == 1
    assert periods[0].start == pd.Timestamp("2024-06-15")


def test_iter_periods_rejects_reversed_range():
    with pytest.raises(CashflowRangeError):
        iter_periods("2024-06-30", "2024-06-01", "day")


@pytest.mark.parametrize(
    ("period_type", "expected"),
    [
        ("day", "10 Jun"),
        ("week", "Wk 24 2024"),
        ("month", "Jun 2024"),
        ("quarter", "Q2 2024"),
        ("year", "2024"),
    ],
)
def test_period_label(period_type, expected):
    assert period_label(resolve_period("2024-06-10", period_type)) == expected


def test_week_label_uses_iso_year():
    assert period_label(resolve_period("2024-12-31", "week")) == "Wk 01 2025"


def test_shift_period_clamps_month_end():
    assert shift_period("2024-03-31", "month", -1) == pd.Timestamp("2024-02-29")
    assert shift_period("2024-06-15", "quarter", 1) == pd.Timestamp("2024-09-15")
    assert shift_period("2024-06-15", "week", -2) == pd.Timestamp("2024-06-01")


def test_previous_period_crosses_year_boundary():
    previous = previous_period(resolve_period("2024-01-15", "month"))

    assert previous.start == pd.Timestamp("2023-12-01")
    assert period_label(previous) == "Dec 2023"


@pytest.mark.parametrize(
    ("period_type", "start", "end_day"),
    [
        ("day", "2024-06-01", "2024-06-30"),
        ("week", "2024-04-01", "2024-06-30"),
        ("month", "2024-01-01", "2024-12-31"),
        ("quarter", "2024-01-01", "2024-12-31"),
        ("year", "2022-01-01", "2026-12-31"),
    ],
)
def test_default_report_range(period_type, start, end_day):
    range_start, range_end = default_report_range("2024-06-15", period_type)

    assert range_start == pd.Timestamp(start)
    assert range_end.normalize() == pd.Timestamp(end_day)
