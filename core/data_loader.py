"""Data loading utilities for CashPulse's deal and fixed-cost tables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Final, Iterable, Mapping

import pandas as pd

from core.errors import CashflowError, CashflowValidationError
from core.logging_setup import get_logger
from core.models import Deal, FixedCost, Goal

__all__ = [
    "DEALS_FILE",
    "FIXED_COSTS_FILE",
    "GOALS_FILE",
    "load_deals",
    "load_fixed_costs",
    "load_goals",
    "load_ledger",
    "records_to_deals",
    "records_to_fixed_costs",
    "records_to_goals",
]

LOGGER = get_logger(__name__)

DEALS_FILE: Final[str] = "deals.csv"
FIXED_COSTS_FILE: Final[str] = "fixed_costs.csv"
GOALS_FILE: Final[str] = "goals.csv"

DEAL_REQUIRED_COLUMNS: Final[tuple[str, ...]] = ("id", "amount")
FIXED_COST_REQUIRED_COLUMNS: Final[tuple[str, ...]] = ("id", "amount", "frequency", "start_date")
GOAL_REQUIRED_COLUMNS: Final[tuple[str, ...]] = ("id", "goal_type", "target_value", "deadline")

_CACHE_SIZE: Final[int] = 8


@lru_cache(maxsize=_CACHE_SIZE)
def _read_table(path: str, mtime_ns: int) -> pd.DataFrame:
    # ``mtime_ns`` is part of the cache key so an edited file is re-read.
    frame = pd.read_csv(path, dtype=str, skipinitialspace=True)
    frame.columns = [str(column).strip().lower() for column in frame.columns]
    return frame


def _frame_records(csv_path: str | Path, required: Iterable[str]) -> list[dict[str, Any]]:
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")

    frame = _read_table(str(path), path.stat().st_mtime_ns)
    missing = [column for column in required if column not in frame.columns]
    if missing:
        raise CashflowError(f"Missing required columns in {path.name}: {missing}")

    cleaned = frame.astype(object).where(frame.notna(), None)
    return cleaned.to_dict(orient="records")


def records_to_deals(records: Iterable[Mapping[str, Any]]) -> tuple[Deal, ...]:
    """Validate raw deal rows, failing on the first malformed record."""

    deals: list[Deal] = []
    for record in records:
        try:
            deals.append(Deal.from_record(record))
        except CashflowValidationError as exc:
            LOGGER.warning("Rejected deal %s: %s", exc.entity_id, exc)
            raise
    return tuple(deals)


def records_to_fixed_costs(records: Iterable[Mapping[str, Any]]) -> tuple[FixedCost, ...]:
    """Validate raw fixed-cost rows, failing on the first malformed record."""

    costs: list[FixedCost] = []
    for record in records:
        try:
            costs.append(FixedCost.from_record(record))
        except CashflowValidationError as exc:
            LOGGER.warning("Rejected fixed cost %s: %s", exc.entity_id, exc)
            raise
    return tuple(costs)


def records_to_goals(records: Iterable[Mapping[str, Any]]) -> tuple[Goal, ...]:
    goals: list[Goal] = []
    for record in records:
        try:
            goals.append(Goal.from_record(record))
        except CashflowValidationError as exc:
            LOGGER.warning("Rejected goal %s: %s", exc.entity_id, exc)
            raise
    return tuple(goals)


def load_deals(csv_path: str | Path) -> tuple[Deal, ...]:
    deals = records_to_deals(_frame_records(csv_path, DEAL_REQUIRED_COLUMNS))
    LOGGER.info("Loaded %s deals from %s", len(deals), csv_path)
    return deals


def load_fixed_costs(csv_path: str | Path) -> tuple[FixedCost, ...]:
    costs = records_to_fixed_costs(_frame_records(csv_path, FIXED_COST_REQUIRED_COLUMNS))
    LOGGER.info("Loaded %s fixed costs from %s", len(costs), csv_path)
    return costs


def load_goals(csv_path: str | Path) -> tuple[Goal, ...]:
    goals = records_to_goals(_frame_records(csv_path, GOAL_REQUIRED_COLUMNS))
    LOGGER.info("Loaded %s goals from %s", len(goals), csv_path)
    return goals


def load_ledger(data_dir: str | Path) -> tuple[tuple[Deal, ...], tuple[FixedCost, ...]]:
    """Load ``deals.csv`` and ``fixed_costs.csv`` from ``data_dir``."""

    base = Path(data_dir)
    return load_deals(base / DEALS_FILE), load_fixed_costs(base / FIXED_COSTS_FILE)
