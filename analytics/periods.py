"""Calendar period resolution, labelling and navigation."""

from __future__ import annotations

from datetime import date, datetime

import pandas as pd

from core.errors import CashflowRangeError
from core.models import Period, PeriodType

__all__ = [
    "to_timestamp",
    "resolve_period",
    "iter_periods",
    "period_label",
    "shift_period",
    "previous_period",
    "default_report_range",
]

# Weeks run Monday to Sunday ("W-SUN" anchors each week on its closing Sunday).
_PERIOD_FREQ: dict[PeriodType, str] = {
    PeriodType.DAY: "D",
    PeriodType.WEEK: "W-SUN",
    PeriodType.MONTH: "M",
    PeriodType.QUARTER: "Q-DEC",
    PeriodType.YEAR: "Y-DEC",
}


def to_timestamp(value: pd.Timestamp | datetime | date | str) -> pd.Timestamp:
    """Convert an input value to a timezone-naive pandas Timestamp."""

    ts = pd.Timestamp(value)
    if ts.tz is not None:
        ts = ts.tz_convert(None)
    return ts


def _span(ts: pd.Timestamp, period_type: PeriodType) -> Period:
    span = ts.to_period(_PERIOD_FREQ[period_type])
    return Period(period_type=period_type, start=span.start_time, end=span.end_time)


def resolve_period(
    reference_date: pd.Timestamp | datetime | date | str,
    period_type: PeriodType | str,
) -> Period:
    """Return the calendar period of ``period_type`` containing ``reference_date``.

    ``start`` is midnight of the first day and ``end`` the last instant of the
    final day, so both bounds are inclusive.
    """

    return _span(to_timestamp(reference_date), PeriodType(period_type))


def iter_periods(
    range_start: pd.Timestamp | datetime | date | str,
    range_end: pd.Timestamp | datetime | date | str,
    period_type: PeriodType | str,
) -> list[Period]:
    """Partition ``[range_start, range_end]`` into consecutive calendar periods.

    The first and last periods keep their full calendar bounds even when the
    range starts or ends part-way through them.
    """

    kind = PeriodType(period_type)
    start = to_timestamp(range_start)
    end = to_timestamp(range_end)
    if end < start:
        raise CashflowRangeError(f"Range end {end.date()} is before range start {start.date()}")

    freq = _PERIOD_FREQ[kind]
    spans = pd.period_range(start=start.to_period(freq), end=end.to_period(freq), freq=freq)
    return [Period(period_type=kind, start=span.start_time, end=span.end_time) for span in spans]


def period_label(period: Period) -> str:
    start = period.start
    if period.period_type is PeriodType.DAY:
        return f"{start.day} {start.strftime('%b')}"
    if period.period_type is PeriodType.WEEK:
        iso = start.isocalendar()
        return f"Wk {iso[1]:02d} {iso[0]}"
    if period.period_type is PeriodType.MONTH:
        return start.strftime("%b %Y")
    if period.period_type is PeriodType.QUARTER:
        return f"Q{start.quarter} {start.year}"
    return str(start.year)


def shift_period(
    reference_date: pd.Timestamp | datetime | date | str,
    period_type: PeriodType | str,
    steps: int,
) -> pd.Timestamp:
    """Move ``reference_date`` by ``steps`` periods (negative steps go back)."""

    kind = PeriodType(period_type)
    ts = to_timestamp(reference_date)
    if kind is PeriodType.DAY:
        return ts + pd.Timedelta(days=steps)
    if kind is PeriodType.WEEK:
        return ts + pd.Timedelta(weeks=steps)
    if kind is PeriodType.MONTH:
        return ts + pd.DateOffset(months=steps)
    if kind is PeriodType.QUARTER:
        return ts + pd.DateOffset(months=3 * steps)
    return ts + pd.DateOffset(years=steps)


def previous_period(period: Period) -> Period:
    return resolve_period(shift_period(period.start, period.period_type, -1), period.period_type)


def default_report_range(
    reference_date: pd.Timestamp | datetime | date | str,
    period_type: PeriodType | str,
) -> tuple[pd.Timestamp, pd.Timestamp]:
    """Return the chart window used by the dashboard for a granularity.

    Daily charts cover the month, weekly charts the quarter, monthly and
    quarterly charts the year, and yearly charts two years either side.
    """

    kind = PeriodType(period_type)
    ts = to_timestamp(reference_date)
    if kind is PeriodType.DAY:
        window = resolve_period(ts, PeriodType.MONTH)
        return window.start, window.end
    if kind is PeriodType.WEEK:
        window = resolve_period(ts, PeriodType.QUARTER)
        return window.start, window.end
    if kind in (PeriodType.MONTH, PeriodType.QUARTER):
        window = resolve_period(ts, PeriodType.YEAR)
        return window.start, window.end
    first = resolve_period(shift_period(ts, PeriodType.YEAR, -2), PeriodType.YEAR)
    last = resolve_period(shift_period(ts, PeriodType.YEAR, 2), PeriodType.YEAR)
    return first.start, last.end
