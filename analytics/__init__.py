"""Cashflow analytics shared across CashPulse services."""

from analytics.aggregation import aggregate, aggregate_for_date, aggregate_period
from analytics.filters import (
    DealSortField,
    FixedCostSortField,
    filter_deals,
    filter_fixed_costs,
    sort_deals,
    sort_fixed_costs,
)
from analytics.goals import (
    days_to_deadline,
    goal_current_value,
    goal_is_on_track,
    goal_statistics,
    refresh_goals,
)
from analytics.periods import (
    default_report_range,
    iter_periods,
    period_label,
    previous_period,
    resolve_period,
    shift_period,
    to_timestamp,
)
from analytics.pipeline import (
    deal_statistics,
    expected_income,
    fixed_cost_statistics,
    monthly_recurring_revenue,
)
from analytics.recurrence import (
    OPEN_END_DATE,
    WEEKS_PER_MONTH,
    contribution_for,
    conversion_factor,
    convert_amount,
    deal_contribution,
    fixed_cost_contribution,
    recurring_deal_active,
)
from analytics.series import generate_series, series_frame, summarise_series

__all__ = [
    "aggregate",
    "aggregate_for_date",
    "aggregate_period",
    "DealSortField",
    "FixedCostSortField",
    "filter_deals",
    "filter_fixed_costs",
    "sort_deals",
    "sort_fixed_costs",
    "days_to_deadline",
    "goal_current_value",
    "goal_is_on_track",
    "goal_statistics",
    "refresh_goals",
    "default_report_range",
    "iter_periods",
    "period_label",
    "previous_period",
    "resolve_period",
    "shift_period",
    "to_timestamp",
    "deal_statistics",
    "expected_income",
    "fixed_cost_statistics",
    "monthly_recurring_revenue",
    "OPEN_END_DATE",
    "WEEKS_PER_MONTH",
    "contribution_for",
    "conversion_factor",
    "convert_amount",
    "deal_contribution",
    "fixed_cost_contribution",
    "recurring_deal_active",
    "generate_series",
    "series_frame",
    "summarise_series",
]
