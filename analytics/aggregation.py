"""Per-period aggregation of deal income and fixed-cost expenses."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable

import pandas as pd

from analytics.periods import period_label, resolve_period, to_timestamp
from analytics.recurrence import deal_contribution, fixed_cost_contribution
from core.errors import CashflowRangeError
from core.models import CashflowOptions, CashflowPoint, Deal, FixedCost, Period, PeriodType

__all__ = ["aggregate", "aggregate_period", "aggregate_for_date"]


def aggregate(
    deals: Iterable[Deal],
    fixed_costs: Iterable[FixedCost],
    period_type: PeriodType | str,
    period_start: pd.Timestamp | datetime | date | str,
    period_end: pd.Timestamp | datetime | date | str,
    options: CashflowOptions | None = None,
    *,
    label: str | None = None,
) -> CashflowPoint:
    """Sum deal income and fixed-cost expenses for one period.

    Inputs are read only; empty collections yield a zero point. When no
    ``label`` is given the label of the calendar period containing
    ``period_start`` is used.
    """

    kind = PeriodType(period_type)
    start = to_timestamp(period_start)
    end = to_timestamp(period_end)
    if end < start:
        raise CashflowRangeError(f"Period end {end} is before period start {start}")

    income = sum(deal_contribution(deal, kind, start, end, options) for deal in deals)
    expenses = sum(fixed_cost_contribution(cost, kind, start, end, options) for cost in fixed_costs)

    if label is None:
        label = period_label(resolve_period(start, kind))

    return CashflowPoint(
        period_label=label,
        period_start=start,
        period_end=end,
        income=float(income),
        expenses=float(expenses),
    )


def aggregate_period(
    deals: Iterable[Deal],
    fixed_costs: Iterable[FixedCost],
    period: Period,
    options: CashflowOptions | None = None,
) -> CashflowPoint:
    return aggregate(
        deals,
        fixed_costs,
        period.period_type,
        period.start,
        period.end,
        options,
        label=period_label(period),
    )


def aggregate_for_date(
    deals: Iterable[Deal],
    fixed_costs: Iterable[FixedCost],
    reference_date: pd.Timestamp | datetime | date | str,
    period_type: PeriodType | str,
    options: CashflowOptions | None = None,
) -> CashflowPoint:
    """Aggregate the calendar period of ``period_type`` containing ``reference_date``."""

    return aggregate_period(deals, fixed_costs, resolve_period(reference_date, period_type), options)
