"""CashPulse command line interface."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, NoReturn

import click
import pandas as pd

from analytics import (
    generate_series,
    goal_is_on_track,
    goal_statistics,
    refresh_goals,
    series_frame,
    summarise_series,
)
from config import get_settings
from core import AdvisorError, CashflowError, CashflowOptions, GoalStatus, PeriodType, generate_advice
from core.data_loader import GOALS_FILE, load_goals, load_ledger
from core.logging_setup import configure_logging, get_logger
from core.summary_service import load_dashboard_data

LOGGER = get_logger(__name__)

PERIOD_CHOICES = [kind.value for kind in PeriodType]
# pandas raises plain ValueError for unparseable dates
ENGINE_ERRORS = (CashflowError, ValueError, FileNotFoundError)


def _fail(message: str) -> NoReturn:
    click.echo(message, err=True)
    sys.exit(1)


def _money(value: float) -> str:
    return f"{value:,.2f}"


def _data_dir(ctx: click.Context, override: str | None) -> Path:
    return Path(override) if override else ctx.obj["settings"].data_dir


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


@click.group()
@click.option("--log-level", default=None, help="Logging level (defaults to CASHPULSE_LOG_LEVEL)")
@click.pass_context
def cli(ctx, log_level):
    """Cashflow reporting for deals and fixed costs

    Examples:
        cashpulse summary --period month --date 2024-06-15
        cashpulse series --period month --start 2024-01-01 --end 2024-12-31
        cashpulse advise "How do my fixed costs compare to recurring revenue?"
        cashpulse goals --date 2024-06-15
    """
    settings = get_settings()
    configure_logging(log_level or settings.log_level)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["options"] = CashflowOptions.from_settings(settings)


@cli.command("summary")
@click.option("--period", "-p", "period_type", type=click.Choice(PERIOD_CHOICES), default="month", show_default=True)
@click.option("--date", "-d", "reference_date", help="Reference date (YYYY-MM-DD), defaults to today")
@click.option("--data-dir", help="Directory holding deals.csv and fixed_costs.csv")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def summary(ctx, period_type, reference_date, data_dir, json_output):
    """Income, expenses and net cashflow for the period containing a date"""
    try:
        data = load_dashboard_data(
            _data_dir(ctx, data_dir),
            period_type,
            reference_date,
            ctx.obj["options"],
        )
    except ENGINE_ERRORS as exc:
        LOGGER.error("Summary failed: %s", exc)
        _fail(f"Unable to compute cashflow for this period: {exc}")

    period = data["period_summary"]
    if json_output:
        _echo_json(
            {
                "period": period,
                "deal_statistics": data["deal_statistics"],
                "recurring_revenue": data["recurring_revenue"],
                "fixed_cost_statistics": data["fixed_cost_statistics"],
                "insights": data["insights"],
            }
        )
        return

    click.echo(f"{period['label']} ({period['start']:%Y-%m-%d} to {period['end']:%Y-%m-%d})")
    click.echo("-" * 40)
    click.echo(f"  Income    {_money(period['income']):>14}  {period['income_delta']}")
    click.echo(f"  Expenses  {_money(period['expenses']):>14}  {period['expenses_delta']}")
    click.echo(f"  Net       {_money(period['net']):>14}  {period['net_delta']}")
    click.echo(f"  Expected  {_money(period['expected_income']):>14}")
    if data["insights"]:
        click.echo("")
        for line in data["insights"]:
            click.echo(f"- {line}")


@cli.command("series")
@click.option("--period", "-p", "period_type", type=click.Choice(PERIOD_CHOICES), default="month", show_default=True)
@click.option("--start", "range_start", required=True, help="First day of the range (YYYY-MM-DD)")
@click.option("--end", "range_end", required=True, help="Last day of the range (YYYY-MM-DD)")
@click.option("--data-dir", help="Directory holding deals.csv and fixed_costs.csv")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def series(ctx, period_type, range_start, range_end, data_dir, json_output):
    """Cashflow for every period between two dates"""
    try:
        deals, fixed_costs = load_ledger(_data_dir(ctx, data_dir))
        points = generate_series(deals, fixed_costs, period_type, range_start, range_end, ctx.obj["options"])
    except ENGINE_ERRORS as exc:
        LOGGER.error("Series failed: %s", exc)
        _fail(f"Unable to compute cashflow for this period: {exc}")

    totals = summarise_series(points)
    if json_output:
        _echo_json({"points": [point.to_dict() for point in points], "summary": totals.to_dict()})
        return

    frame = series_frame(points)
    for column in ("Start", "End"):
        frame[column] = pd.to_datetime(frame[column]).dt.strftime("%Y-%m-%d")
    click.echo(frame.to_string(index=False, float_format=_money))
    click.echo("-" * 40)
    click.echo(f"Total income {_money(totals.income)}, expenses {_money(totals.expenses)}, net {_money(totals.net)}")


@cli.command("advise")
@click.argument("question")
@click.option("--period", "-p", "period_type", type=click.Choice(PERIOD_CHOICES), default="month", show_default=True)
@click.option("--date", "-d", "reference_date", help="Reference date (YYYY-MM-DD), defaults to today")
@click.option("--data-dir", help="Directory holding deals.csv and fixed_costs.csv")
@click.pass_context
def advise(ctx, question, period_type, reference_date, data_dir):
    """Ask the AI advisor a question about the current figures"""
    try:
        data = load_dashboard_data(
            _data_dir(ctx, data_dir),
            period_type,
            reference_date,
            ctx.obj["options"],
        )
    except ENGINE_ERRORS as exc:
        _fail(f"Unable to compute cashflow for this period: {exc}")

    try:
        reply = generate_advice(data, question)
    except AdvisorError as exc:
        LOGGER.error("Advisor failed: %s", exc)
        _fail(f"Advisor unavailable: {exc}")

    click.echo(reply.text)
    LOGGER.info("Advisor used %s tokens (conversation %s)", reply.tokens_used, reply.conversation_id)


@cli.command("goals")
@click.option("--date", "-d", "reference_date", help="Reference date (YYYY-MM-DD), defaults to today")
@click.option("--data-dir", help="Directory holding deals.csv, fixed_costs.csv and goals.csv")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.pass_context
def goals(ctx, reference_date, data_dir, json_output):
    """Progress on goals, with automatic goals measured from the ledger"""
    base = _data_dir(ctx, data_dir)
    try:
        as_of = pd.Timestamp(reference_date) if reference_date else pd.Timestamp.today().normalize()
        deals, fixed_costs = load_ledger(base)
        tracked = refresh_goals(load_goals(base / GOALS_FILE), deals, fixed_costs, as_of, ctx.obj["options"])
        stats = goal_statistics(tracked, as_of)
    except ENGINE_ERRORS as exc:
        LOGGER.error("Goal tracking failed: %s", exc)
        _fail(f"Unable to compute goal progress: {exc}")

    if json_output:
        _echo_json(
            {
                "goals": [
                    {
                        "id": goal.id,
                        "name": goal.name,
                        "goal_type": goal.goal_type.value,
                        "status": goal.status.value,
                        "current_value": goal.current_value,
                        "target_value": goal.target_value,
                        "progress": round(goal.progress, 1),
                        "deadline": goal.deadline.date().isoformat(),
                    }
                    for goal in tracked
                ],
                "statistics": stats,
            }
        )
        return

    for goal in tracked:
        if goal.status is GoalStatus.ACTIVE:
            flag = "on track" if goal_is_on_track(goal, as_of) else "at risk"
        else:
            flag = goal.status.value
        click.echo(
            f"  {goal.name:<24} {_money(goal.current_value):>12} / {_money(goal.target_value):<12}"
            f" {goal.progress:5.1f}%  {flag}"
        )
    click.echo("-" * 40)
    click.echo(
        f"Score {stats['overall_score']}: {stats['on_track']} on track, "
        f"{stats['at_risk']} at risk, {stats['completed']} completed"
    )


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
