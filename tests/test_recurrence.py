"""Per-entity contributions and the frequency conversion table."""

from __future__ import annotations

import pandas as pd
import pytest

from analytics.periods import iter_periods, resolve_period
from analytics.recurrence import (
    WEEKS_PER_MONTH,
    ConversionFactor,
    contribution_for,
    conversion_factor,
    convert_amount,
    deal_contribution,
    fixed_cost_contribution,
    recurring_deal_active,
)
from core.models import CashflowOptions, Deal, FixedCost, Frequency, PeriodType, RecurringDealEnd


def _contribution(entity, period_type, reference, options=None):
    period = resolve_period(reference, period_type)
    return contribution_for(entity, period.period_type, period.start, period.end, options)


def test_conversion_factor_table_entries():
    assert conversion_factor("monthly", "week") == ConversionFactor(1, WEEKS_PER_MONTH)
    assert conversion_factor(Frequency.QUARTERLY, PeriodType.DAY) == ConversionFactor(1, 90)
    assert conversion_factor("yearly", "quarter") == ConversionFactor(1, 4)


def test_conversion_factor_rejects_one_time():
    with pytest.raises(ValueError):
        conversion_factor("one_time", "month")


@pytest.mark.parametrize(
    ("frequency", "period_type", "expected"),
    [
        ("monthly", "month", 1200.0),
        ("monthly", "quarter", 3600.0),
        ("monthly", "year", 14400.0),
        ("monthly", "week", 1200.0 / 4.33),
        ("quarterly", "month", 400.0),
        ("quarterly", "year", 4800.0),
        ("quarterly", "week", 1200.0 / 13),
        ("yearly", "month", 100.0),
        ("yearly", "day", 1200.0 / 365),
        ("yearly", "week", 1200.0 / 52),
    ],
)
def test_convert_amount(frequency, period_type, expected):
    assert convert_amount(1200, frequency, period_type, pd.Timestamp("2024-06-01")) == pytest.approx(expected)


def test_monthly_to_day_uses_days_in_month():
    assert convert_amount(3100, "monthly", "day", pd.Timestamp("2024-07-04")) == pytest.approx(100.0)
    assert convert_amount(2900, "monthly", "day", pd.Timestamp("2024-02-04")) == pytest.approx(100.0)


def test_monthly_cost_over_twelve_months_sums_to_twelve_payments(rent):
    total = sum(
        fixed_cost_contribution(rent, p.period_type, p.start, p.end)
        for p in iter_periods("2024-01-01", "2024-12-31", "month")
    )

    assert total == pytest.approx(12 * 1200)


def test_yearly_cost_round_trips_over_twelve_months():
    insurance = FixedCost(id="F2", amount=1200, frequency="yearly", start_date="2024-01-01")

    total = sum(
        fixed_cost_contribution(insurance, p.period_type, p.start, p.end)
        for p in iter_periods("2024-01-01", "2024-12-31", "month")
    )

    assert total == pytest.approx(1200)


def test_inactive_cost_contributes_nothing():
    cost = FixedCost(id="F3", amount=99, frequency="monthly", start_date="2020-01-01", is_active=False)

    for period_type in PeriodType:
        assert _contribution(cost, period_type, "2024-06-15") == 0.0


def test_cost_window_outside_period_contributes_nothing():
    ended = FixedCost(id="F4", amount=50, frequency="monthly", start_date="2023-01-01", end_date="2024-05-31")
    future = FixedCost(id="F5", amount=50, frequency="monthly", start_date="2024-07-01")

    assert _contribution(ended, "month", "2024-06-15") == 0.0
    assert _contribution(future, "month", "2024-06-15") == 0.0
    assert _contribution(ended, "month", "2024-05-15") == 50.0


def test_cost_ending_inside_period_still_counts_in_full():
    cost = FixedCost(id="F6", amount=300, frequency="monthly", start_date="2024-01-01", end_date="2024-06-10")

    assert _contribution(cost, "month", "2024-06-20") == 300.0


def test_partial_period_proration_is_opt_in():
    cost = FixedCost(id="F7", amount=300, frequency="monthly", start_date="2024-06-16")
    options = CashflowOptions(prorate_partial_periods=True)

    assert _contribution(cost, "month", "2024-06-01") == 300.0
    assert _contribution(cost, "month", "2024-06-01", options) == pytest.approx(150.0)
    assert _contribution(cost, "month", "2024-07-01", options) == pytest.approx(300.0)


def test_proration_never_applies_to_days():
    cost = FixedCost(id="F8", amount=300, frequency="monthly", start_date="2024-06-16")
    options = CashflowOptions(prorate_partial_periods=True)

    assert _contribution(cost, "day", "2024-06-16", options) == pytest.approx(10.0)


def test_one_time_cost_lands_in_one_period():
    laptop = FixedCost(id="F9", amount=1800, frequency="one_time", start_date="2024-02-05")

    contributions = [
        fixed_cost_contribution(laptop, p.period_type, p.start, p.end)
        for p in iter_periods("2024-01-01", "2024-12-31", "month")
    ]

    assert contributions[1] == 1800.0
    assert sum(contributions) == 1800.0


def test_paid_one_time_deal_counts_in_payment_month_only():
    deal = Deal(id="D3", amount=2500, status="paid", payment_received_date="2024-03-15")

    assert _contribution(deal, "month", "2024-03-01") == 2500.0
    assert _contribution(deal, "month", "2024-02-01") == 0.0
    assert _contribution(deal, "month", "2024-04-01") == 0.0


@pytest.mark.parametrize("status", ["potential", "confirmed", "invoiced"])
def test_unpaid_one_time_deal_contributes_nothing(status):
    deal = Deal(id="D4", amount=2500, status=status, payment_received_date="2024-03-15")

    assert _contribution(deal, "month", "2024-03-01") == 0.0


def test_paid_deal_without_payment_date_contributes_nothing():
    deal = Deal(id="D5", amount=2500, status="paid")

    assert _contribution(deal, "year", "2024-03-01") == 0.0


def test_recurring_deal_converts_monthly_amount(retainer):
    assert _contribution(retainer, "quarter", "2024-02-01") == pytest.approx(1500.0)
    assert _contribution(retainer, "year", "2024-02-01") == pytest.approx(6000.0)
    assert _contribution(retainer, "week", "2024-02-01") == pytest.approx(500.0 / 4.33)


def test_recurring_deal_starts_counting_from_start_date(retainer):
    assert _contribution(retainer, "month", "2023-12-15") == 0.0
    assert _contribution(retainer, "day", "2024-01-01") == pytest.approx(500.0 / 31)


def test_recurring_deal_end_is_configurable(retainer):
    contract = CashflowOptions(recurring_deal_end=RecurringDealEnd.CONTRACT)

    assert retainer.contract_end == pd.Timestamp("2024-12-31")
    assert _contribution(retainer, "month", "2025-03-01") == 500.0
    assert _contribution(retainer, "month", "2025-03-01", contract) == 0.0
    assert _contribution(retainer, "month", "2024-12-01", contract) == 500.0


def test_recurring_deal_activity_follows_dates(retainer):
    contract = CashflowOptions(recurring_deal_end=RecurringDealEnd.CONTRACT)
    june = resolve_period("2024-06-10", "month")
    march_next_year = resolve_period("2025-03-10", "month")

    assert recurring_deal_active(retainer, june.start, june.end)
    assert recurring_deal_active(retainer, march_next_year.start, march_next_year.end)
    assert not recurring_deal_active(retainer, march_next_year.start, march_next_year.end, contract)


def test_explicit_end_date_wins_over_contract_length():
    deal = Deal(
        id="D6",
        amount=0,
        status="confirmed",
        deal_type="recurring",
        monthly_amount=800,
        start_date="2024-06-01",
        end_date="2024-08-31",
        contract_length=12,
    )
    contract = CashflowOptions(recurring_deal_end=RecurringDealEnd.CONTRACT)

    assert deal_contribution(deal, "month", pd.Timestamp("2024-09-01"), pd.Timestamp("2024-09-30"), contract) == 0.0


def test_contribution_for_rejects_other_types():
    with pytest.raises(TypeError):
        contribution_for(object(), "month", pd.Timestamp("2024-06-01"), pd.Timestamp("2024-06-30"))
