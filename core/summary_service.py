"""Core logic for assembling CashPulse dashboard summaries."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from analytics.aggregation import aggregate_period
from analytics.periods import default_report_range, period_label, previous_period, resolve_period
from analytics.pipeline import (
    deal_statistics,
    expected_income,
    fixed_cost_statistics,
    monthly_recurring_revenue,
)
from analytics.series import generate_series, series_frame, summarise_series
from core.data_loader import load_ledger
from core.formatting import build_insights, format_delta
from core.logging_setup import get_logger
from core.models import CashflowOptions, DashboardData, Deal, FixedCost, PeriodSummary, PeriodType

__all__ = ["prepare_dashboard_data", "load_dashboard_data"]

LOGGER = get_logger(__name__)


def prepare_dashboard_data(
    deals: Iterable[Deal],
    fixed_costs: Iterable[FixedCost],
    period_type: PeriodType | str = PeriodType.MONTH,
    reference_date: Optional[date | pd.Timestamp | str] = None,
    options: CashflowOptions | None = None,
) -> DashboardData:
    """Build everything the summary cards, chart and advisor need for one period.

    Amounts are base, VAT-exclusive values throughout.
    """

    kind = PeriodType(period_type)
    deals = tuple(deals)
    fixed_costs = tuple(fixed_costs)
    reference = pd.Timestamp(reference_date) if reference_date is not None else pd.Timestamp.today().normalize()

    period = resolve_period(reference, kind)
    current = aggregate_period(deals, fixed_costs, period, options)
    previous = aggregate_period(deals, fixed_costs, previous_period(period), options)

    range_start, range_end = default_report_range(reference, kind)
    points = generate_series(deals, fixed_costs, kind, range_start, range_end, options)

    summary: PeriodSummary = {
        "period_type": kind.value,
        "label": period_label(period),
        "start": period.start,
        "end": period.end,
        "income": current.income,
        "expenses": current.expenses,
        "net": current.net,
        "previous_income": previous.income,
        "previous_expenses": previous.expenses,
        "previous_net": previous.net,
        "income_delta": format_delta(current.income, previous.income),
        "expenses_delta": format_delta(current.expenses, previous.expenses),
        "net_delta": format_delta(current.net, previous.net),
        "expected_income": expected_income(deals, period.start, period.end),
    }

    deal_stats = deal_statistics(deals)
    recurring = monthly_recurring_revenue(deals, reference, options)
    fixed_cost_stats = fixed_cost_statistics(fixed_costs, as_of=reference)

    LOGGER.info(
        "Prepared %s dashboard for %s: income=%.2f expenses=%.2f",
        kind.value,
        summary["label"],
        summary["income"],
        summary["expenses"],
    )

    return {
        "period_summary": summary,
        "series_df": series_frame(points),
        "series_summary": summarise_series(points),
        "deal_statistics": deal_stats,
        "recurring_revenue": recurring,
        "fixed_cost_statistics": fixed_cost_stats,
        "insights": build_insights(
            summary=summary,
            deal_stats=deal_stats,
            recurring=recurring,
            fixed_cost_stats=fixed_cost_stats,
        ),
    }


def load_dashboard_data(
    data_dir: str | Path,
    period_type: PeriodType | str = PeriodType.MONTH,
    reference_date: Optional[date | pd.Timestamp | str] = None,
    options: CashflowOptions | None = None,
) -> DashboardData:
    """Read the CSV ledger in ``data_dir`` and prepare dashboard data from it."""

    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        raise FileNotFoundError(f"Data directory not found: {data_dir}")

    deals, fixed_costs = load_ledger(data_dir)
    return prepare_dashboard_data(deals, fixed_costs, period_type, reference_date, options)
