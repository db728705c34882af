"""Plain-text helpers for CashPulse summaries."""

from __future__ import annotations

from core.models import DealStatistics, FixedCostStatistics, PeriodSummary, RecurringRevenue

__all__ = ["build_insights", "format_delta"]


def format_delta(current: float, previous: float) -> str:
    if previous == 0:
        if current == 0:
            return "No change vs previous period"
        return "New vs previous period"

    change = (current - previous) / abs(previous)
    sign = "+" if change >= 0 else ""
    return f"{sign}{change * 100:.1f}% vs previous period"


def build_insights(
    *,
    summary: PeriodSummary,
    deal_stats: DealStatistics,
    recurring: RecurringRevenue,
    fixed_cost_stats: FixedCostStatistics,
) -> list[str]:
    insights: list[str] = []

    direction = "positive" if summary["net"] >= 0 else "negative"
    insights.append(
        f"Net cashflow for {summary['label']} is {direction} at {summary['net']:,.2f} "
        f"({summary['net_delta']})."
    )
    insights.append(
        f"Income {summary['income']:,.2f} against expenses {summary['expenses']:,.2f}."
    )

    if recurring["active_contracts"]:
        insights.append(
            f"MRR for {recurring['month_label']}: {recurring['mrr']:,.2f} "
            f"from {recurring['active_contracts']} recurring contracts."
        )

    if deal_stats["pipeline_value"] > 0:
        insights.append(
            f"Open pipeline worth {deal_stats['pipeline_value']:,.2f}, "
            f"of which {deal_stats['confirmed_value']:,.2f} is confirmed or invoiced."
        )

    if summary["expected_income"] > 0:
        insights.append(f"Weighted income expected this period: {summary['expected_income']:,.2f}.")

    if fixed_cost_stats["active_count"]:
        insights.append(
            f"Fixed costs run at {fixed_cost_stats['monthly_total']:,.2f} per month "
            f"across {fixed_cost_stats['active_count']} active items."
        )

    return insights
