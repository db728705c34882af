"""Pipeline, recurring revenue and fixed-cost statistics."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Sequence

import pandas as pd

from analytics.periods import period_label, resolve_period, to_timestamp
from analytics.recurrence import convert_amount, deal_contribution, recurring_deal_active
from core.models import (
    CashflowOptions,
    Deal,
    DealStatistics,
    DealStatus,
    DealType,
    FixedCost,
    FixedCostStatistics,
    Frequency,
    PeriodType,
    RecurringRevenue,
)

__all__ = [
    "OPEN_STATUSES",
    "deal_statistics",
    "monthly_recurring_revenue",
    "fixed_cost_statistics",
    "expected_income",
]

OPEN_STATUSES = frozenset({DealStatus.CONFIRMED, DealStatus.INVOICED})


def _deals_frame(deals: Sequence[Deal]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "status": [deal.status.value for deal in deals],
            "amount": [deal.amount for deal in deals],
        },
        columns=["status", "amount"],
    )


def deal_statistics(deals: Iterable[Deal]) -> DealStatistics:
    """Headline figures for the deals list view."""

    snapshot = list(deals)
    frame = _deals_frame(snapshot)
    by_status = frame.groupby("status")["amount"].sum()
    counts = frame["status"].value_counts()

    def _value(*statuses: DealStatus) -> float:
        return float(sum(by_status.get(status.value, 0.0) for status in statuses))

    return {
        "deal_count": len(snapshot),
        "total_value": float(frame["amount"].sum()),
        "potential_count": int(counts.get(DealStatus.POTENTIAL.value, 0)),
        "confirmed_value": _value(DealStatus.CONFIRMED, DealStatus.INVOICED),
        "paid_value": _value(DealStatus.PAID),
        "pipeline_value": _value(DealStatus.POTENTIAL, DealStatus.CONFIRMED, DealStatus.INVOICED),
        "status_counts": {status.value: int(counts.get(status.value, 0)) for status in DealStatus},
    }


def monthly_recurring_revenue(
    deals: Iterable[Deal],
    as_of: pd.Timestamp | datetime | date | str,
    options: CashflowOptions | None = None,
) -> RecurringRevenue:
    """MRR for the month containing ``as_of`` and the number of contracts behind it."""

    month = resolve_period(as_of, PeriodType.MONTH)
    mrr = 0.0
    active = 0
    for deal in deals:
        if deal.deal_type is not DealType.RECURRING:
            continue
        if not recurring_deal_active(deal, month.start, month.end, options):
            continue
        mrr += deal_contribution(deal, PeriodType.MONTH, month.start, month.end, options)
        active += 1
    return {"month_label": period_label(month), "mrr": mrr, "active_contracts": active}


def fixed_cost_statistics(
    fixed_costs: Iterable[FixedCost],
    as_of: pd.Timestamp | datetime | date | str | None = None,
) -> FixedCostStatistics:
    """Run-rate totals for active fixed costs.

    Recurring costs are expressed per month and per year through the same
    conversion table the aggregator uses; one-time costs are totalled apart.
    When ``as_of`` is given, costs that ended before it are left out.
    """

    cutoff = to_timestamp(as_of).normalize() if as_of is not None else None
    active = [
        cost
        for cost in fixed_costs
        if cost.is_active and (cutoff is None or cost.end_date is None or cost.end_date >= cutoff)
    ]
    reference = cutoff if cutoff is not None else pd.Timestamp.today().normalize()

    monthly_total = 0.0
    yearly_total = 0.0
    one_time_total = 0.0
    for cost in active:
        if cost.frequency is Frequency.ONE_TIME:
            one_time_total += cost.amount
            continue
        monthly_total += convert_amount(cost.amount, cost.frequency, PeriodType.MONTH, reference)
        yearly_total += convert_amount(cost.amount, cost.frequency, PeriodType.YEAR, reference)

    categories = pd.Series([cost.category or "uncategorized" for cost in active], dtype=object)
    category_counts = {str(key): int(value) for key, value in categories.value_counts().sort_index().items()}

    return {
        "active_count": len(active),
        "monthly_total": monthly_total,
        "yearly_total": yearly_total,
        "one_time_total": one_time_total,
        "category_counts": category_counts,
    }


def expected_income(
    deals: Iterable[Deal],
    period_start: pd.Timestamp | datetime | date | str,
    period_end: pd.Timestamp | datetime | date | str,
) -> float:
    """Probability-weighted value of open deals expected to close in the period.

    Only confirmed and invoiced deals count; a missing probability is taken
    as certain.
    """

    start = to_timestamp(period_start)
    end = to_timestamp(period_end)
    total = 0.0
    for deal in deals:
        if deal.status not in OPEN_STATUSES or deal.expected_date is None:
            continue
        if not start <= deal.expected_date <= end:
            continue
        probability = deal.probability if deal.probability is not None else 100
        total += deal.amount * probability / 100
    return total
