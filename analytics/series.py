"""Cashflow time series over a reporting range."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Sequence

import pandas as pd

from analytics.aggregation import aggregate_period
from analytics.periods import iter_periods
from core.logging_setup import get_logger
from core.models import CashflowOptions, CashflowPoint, CashflowSummary, Deal, FixedCost, PeriodType

__all__ = ["generate_series", "summarise_series", "series_frame", "SERIES_COLUMNS"]

LOGGER = get_logger(__name__)

SERIES_COLUMNS = ["Period", "Start", "End", "Income", "Expenses", "Net"]


def generate_series(
    deals: Iterable[Deal],
    fixed_costs: Iterable[FixedCost],
    period_type: PeriodType | str,
    range_start: pd.Timestamp | datetime | date | str,
    range_end: pd.Timestamp | datetime | date | str,
    options: CashflowOptions | None = None,
) -> list[CashflowPoint]:
    """Aggregate every calendar sub-period of ``[range_start, range_end]``.

    Points are returned oldest first, one per period. The result is rebuilt
    from scratch on each call.
    """

    periods = iter_periods(range_start, range_end, period_type)
    deal_snapshot = tuple(deals)
    cost_snapshot = tuple(fixed_costs)

    LOGGER.debug(
        "Generating %s %s points from %s deals and %s fixed costs",
        len(periods),
        PeriodType(period_type).value,
        len(deal_snapshot),
        len(cost_snapshot),
    )
    return [aggregate_period(deal_snapshot, cost_snapshot, period, options) for period in periods]


def summarise_series(points: Iterable[CashflowPoint]) -> CashflowSummary:
    """Total income and expenses across a series (net follows from both)."""

    income = 0.0
    expenses = 0.0
    for point in points:
        income += point.income
        expenses += point.expenses
    return CashflowSummary(income=income, expenses=expenses)


def series_frame(points: Sequence[CashflowPoint]) -> pd.DataFrame:
    """Tabulate a series for chart collaborators."""

    if not points:
        return pd.DataFrame(columns=SERIES_COLUMNS)

    return pd.DataFrame(
        {
            "Period": [point.period_label for point in points],
            "Start": [point.period_start for point in points],
            "End": [point.period_end for point in points],
            "Income": [point.income for point in points],
            "Expenses": [point.expenses for point in points],
            "Net": [point.net for point in points],
        }
    )
