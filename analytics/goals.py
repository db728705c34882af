"""Goal tracking: live values for automatic goals and the progress scorecard."""

from __future__ import annotations

import dataclasses
import math
from datetime import date, datetime
from typing import Iterable, Sequence

import pandas as pd

from analytics.aggregation import aggregate_for_date
from analytics.periods import resolve_period, to_timestamp
from analytics.pipeline import monthly_recurring_revenue
from core.logging_setup import get_logger
from core.models import (
    CashflowOptions,
    Deal,
    DealStatus,
    FixedCost,
    Goal,
    GoalStatistics,
    GoalStatus,
    GoalType,
    PeriodType,
)

__all__ = [
    "AT_RISK_DAYS",
    "AT_RISK_PROGRESS",
    "ON_TRACK_PROGRESS",
    "goal_current_value",
    "refresh_goals",
    "days_to_deadline",
    "goal_is_on_track",
    "goal_statistics",
]

LOGGER = get_logger(__name__)

AT_RISK_DAYS = 7
AT_RISK_PROGRESS = 80.0
ON_TRACK_PROGRESS = 50.0


def goal_current_value(
    goal: Goal,
    deals: Sequence[Deal],
    fixed_costs: Sequence[FixedCost],
    as_of: pd.Timestamp | datetime | date | str,
    options: CashflowOptions | None = None,
) -> float:
    """Measure an automatic goal against the month containing ``as_of``.

    Revenue targets sum paid deals whose payment landed in the month, expense
    limits take the month's fixed-cost expenses, MRR goals the month's
    recurring revenue and deal-count goals the deals created in the month.
    Custom goals keep their recorded value.
    """

    month = resolve_period(as_of, PeriodType.MONTH)
    if goal.goal_type is GoalType.REVENUE_TARGET:
        return float(
            sum(
                deal.amount
                for deal in deals
                if deal.status is DealStatus.PAID
                and deal.payment_received_date is not None
                and month.contains(deal.payment_received_date)
            )
        )
    if goal.goal_type is GoalType.EXPENSE_LIMIT:
        return aggregate_for_date([], fixed_costs, month.start, PeriodType.MONTH, options).expenses
    if goal.goal_type is GoalType.MRR_GROWTH:
        return monthly_recurring_revenue(deals, month.start, options)["mrr"]
    if goal.goal_type is GoalType.DEAL_COUNT:
        return float(sum(1 for deal in deals if deal.created_at is not None and month.contains(deal.created_at)))
    return goal.current_value


def refresh_goals(
    goals: Iterable[Goal],
    deals: Sequence[Deal],
    fixed_costs: Sequence[FixedCost],
    as_of: pd.Timestamp | datetime | date | str,
    options: CashflowOptions | None = None,
) -> tuple[Goal, ...]:
    """Return the goals with automatic ones carrying freshly computed values."""

    refreshed = []
    for goal in goals:
        if goal.is_automatic:
            value = goal_current_value(goal, deals, fixed_costs, as_of, options)
            LOGGER.debug("Goal %s (%s) measured at %.2f", goal.id, goal.goal_type.value, value)
            goal = dataclasses.replace(goal, current_value=value)
        refreshed.append(goal)
    return tuple(refreshed)


def days_to_deadline(goal: Goal, as_of: pd.Timestamp | datetime | date | str) -> int:
    """Whole days left until the deadline, rounded up; negative once it has passed."""

    remaining = goal.deadline - to_timestamp(as_of)
    return math.ceil(remaining / pd.Timedelta(days=1))


def goal_is_on_track(goal: Goal, as_of: pd.Timestamp | datetime | date | str) -> bool:
    progress = goal.progress
    if progress >= 100:
        return True
    if days_to_deadline(goal, as_of) < AT_RISK_DAYS and progress < AT_RISK_PROGRESS:
        return False
    return progress >= ON_TRACK_PROGRESS


def goal_statistics(goals: Iterable[Goal], as_of: pd.Timestamp | datetime | date | str) -> GoalStatistics:
    """Scorecard over active goals.

    ``overall_score`` is the mean progress of active goals, each capped at
    100, rounded half up. With no active goals the score is 100.
    """

    goals = list(goals)
    active = [goal for goal in goals if goal.status is GoalStatus.ACTIVE]
    on_track = sum(1 for goal in active if goal_is_on_track(goal, as_of))
    if active:
        mean = sum(min(goal.progress, 100.0) for goal in active) / len(active)
        score = math.floor(mean + 0.5)
    else:
        score = 100
    return {
        "on_track": on_track,
        "at_risk": len(active) - on_track,
        "completed": sum(1 for goal in goals if goal.status is GoalStatus.COMPLETED),
        "overall_score": score,
    }
