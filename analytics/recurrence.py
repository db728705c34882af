"""Recurrence normalisation: what one deal or fixed cost contributes to a period."""

from __future__ import annotations

from typing import NamedTuple

import pandas as pd

from core.models import (
    CashflowOptions,
    Deal,
    DealStatus,
    DealType,
    FixedCost,
    Frequency,
    PeriodType,
    RecurringDealEnd,
)

__all__ = [
    "WEEKS_PER_MONTH",
    "OPEN_END_DATE",
    "ConversionFactor",
    "conversion_factor",
    "convert_amount",
    "fixed_cost_contribution",
    "recurring_deal_active",
    "deal_contribution",
    "contribution_for",
]

WEEKS_PER_MONTH = 4.33
OPEN_END_DATE = pd.Timestamp("2099-12-31")

_DEFAULT_OPTIONS = CashflowOptions()


class ConversionFactor(NamedTuple):
    """``amount * multiplier / divisor``; a ``None`` divisor means the days of the period's month."""

    multiplier: float
    divisor: float | None


_CONVERSION_TABLE: dict[Frequency, dict[PeriodType, ConversionFactor]] = {
    Frequency.MONTHLY: {
        PeriodType.DAY: ConversionFactor(1, None),
        PeriodType.WEEK: ConversionFactor(1, WEEKS_PER_MONTH),
        PeriodType.MONTH: ConversionFactor(1, 1),
        PeriodType.QUARTER: ConversionFactor(3, 1),
        PeriodType.YEAR: ConversionFactor(12, 1),
    },
    Frequency.QUARTERLY: {
        PeriodType.DAY: ConversionFactor(1, 90),
        PeriodType.WEEK: ConversionFactor(1, 13),
        PeriodType.MONTH: ConversionFactor(1, 3),
        PeriodType.QUARTER: ConversionFactor(1, 1),
        PeriodType.YEAR: ConversionFactor(4, 1),
    },
    Frequency.YEARLY: {
        PeriodType.DAY: ConversionFactor(1, 365),
        PeriodType.WEEK: ConversionFactor(1, 52),
        PeriodType.MONTH: ConversionFactor(1, 12),
        PeriodType.QUARTER: ConversionFactor(1, 4),
        PeriodType.YEAR: ConversionFactor(1, 1),
    },
}


def conversion_factor(frequency: Frequency | str, period_type: PeriodType | str) -> ConversionFactor:
    frequency = Frequency(frequency)
    if frequency is Frequency.ONE_TIME:
        raise ValueError("One-time amounts have no recurring conversion factor")
    return _CONVERSION_TABLE[frequency][PeriodType(period_type)]


def convert_amount(
    amount: float,
    frequency: Frequency | str,
    period_type: PeriodType | str,
    period_start: pd.Timestamp,
) -> float:
    """Express a per-occurrence ``amount`` in one unit of ``period_type``."""

    factor = conversion_factor(frequency, period_type)
    divisor = factor.divisor if factor.divisor is not None else pd.Timestamp(period_start).days_in_month
    return float(amount) * factor.multiplier / divisor


def _active_fraction(
    window_start: pd.Timestamp,
    window_end: pd.Timestamp,
    period_start: pd.Timestamp,
    period_end: pd.Timestamp,
) -> float:
    first_day = period_start.normalize()
    last_day = period_end.normalize()
    active_start = max(window_start, first_day)
    active_end = min(window_end, last_day)
    active_days = (active_end - active_start).days + 1
    total_days = (last_day - first_day).days + 1
    if active_days <= 0 or total_days <= 0:
        return 0.0
    return min(active_days / total_days, 1.0)


def fixed_cost_contribution(
    cost: FixedCost,
    period_type: PeriodType | str,
    period_start: pd.Timestamp,
    period_end: pd.Timestamp,
    options: CashflowOptions | None = None,
) -> float:
    """Expense a fixed cost adds to ``[period_start, period_end]``.

    Inactive costs and costs whose ``[start_date, end_date]`` window misses the
    period contribute nothing. One-time costs land in full in the period that
    contains their start date.
    """

    if not cost.is_active:
        return 0.0

    options = options or _DEFAULT_OPTIONS
    window_end = cost.end_date if cost.end_date is not None else OPEN_END_DATE
    if cost.start_date > period_end or window_end < period_start.normalize():
        return 0.0

    if cost.frequency is Frequency.ONE_TIME:
        return cost.amount if period_start <= cost.start_date <= period_end else 0.0

    kind = PeriodType(period_type)
    amount = convert_amount(cost.amount, cost.frequency, kind, period_start)
    if options.prorate_partial_periods and kind is not PeriodType.DAY:
        amount *= _active_fraction(cost.start_date, window_end, period_start, period_end)
    return amount


def recurring_deal_active(
    deal: Deal,
    period_start: pd.Timestamp,
    period_end: pd.Timestamp,
    options: CashflowOptions | None = None,
) -> bool:
    """Whether a recurring deal runs during any part of the period, whatever its amount."""

    options = options or _DEFAULT_OPTIONS
    if deal.start_date is None or deal.start_date > period_end:
        return False
    if options.recurring_deal_end is RecurringDealEnd.CONTRACT:
        contract_end = deal.contract_end
        if contract_end is not None and contract_end < period_start.normalize():
            return False
    return True


def deal_contribution(
    deal: Deal,
    period_type: PeriodType | str,
    period_start: pd.Timestamp,
    period_end: pd.Timestamp,
    options: CashflowOptions | None = None,
) -> float:
    """Income a deal adds to ``[period_start, period_end]``.

    One-time deals count only once paid, in the period holding the payment
    date. Recurring deals add their monthly amount, converted to the period's
    unit, from their start date onwards.
    """

    if deal.deal_type is DealType.ONE_TIME:
        paid_on = deal.payment_received_date
        if deal.status is not DealStatus.PAID or paid_on is None:
            return 0.0
        return deal.amount if period_start <= paid_on <= period_end else 0.0

    if not recurring_deal_active(deal, period_start, period_end, options):
        return 0.0
    return convert_amount(deal.monthly_amount, Frequency.MONTHLY, period_type, period_start)


def contribution_for(
    entity: Deal | FixedCost,
    period_type: PeriodType | str,
    period_start: pd.Timestamp,
    period_end: pd.Timestamp,
    options: CashflowOptions | None = None,
) -> float:
    if isinstance(entity, Deal):
        return deal_contribution(entity, period_type, period_start, period_end, options)
    if isinstance(entity, FixedCost):
        return fixed_cost_contribution(entity, period_type, period_start, period_end, options)
    raise TypeError(f"Unsupported cashflow entity: {type(entity).__name__}")
