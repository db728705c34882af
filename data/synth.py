"""Synthetic deal and fixed-cost generator for CashPulse.

Produces a small agency-style ledger for development and testing: a mix of
one-time project deals, monthly retainers and the fixed costs a studio of a
handful of people typically carries. Output matches the CSV layout read by
:mod:`core.data_loader`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, TypeVar

import numpy as np
import pandas as pd

T = TypeVar("T")


DEAL_FIELDS: Tuple[str, ...] = (
    "id",
    "title",
    "client_name",
    "amount",
    "status",
    "deal_type",
    "payment_received_date",
    "monthly_amount",
    "start_date",
    "end_date",
    "contract_length",
    "expected_date",
    "probability",
    "created_at",
)

FIXED_COST_FIELDS: Tuple[str, ...] = (
    "id",
    "name",
    "category",
    "amount",
    "frequency",
    "start_date",
    "end_date",
    "is_active",
)

STATUS_WEIGHTS: Tuple[Tuple[str, float], ...] = (
    ("paid", 0.45),
    ("invoiced", 0.15),
    ("confirmed", 0.2),
    ("potential", 0.2),
)

CLIENTS: Sequence[str] = (
    "Northwind Traders",
    "Harbour Lights Ltd",
    "Fennel & Co",
    "Blue Finch Studio",
    "Kestrel Logistics",
    "Orchard Dental",
)

PROJECT_TITLES: Sequence[str] = (
    "Website redesign",
    "Brand refresh",
    "Landing page build",
    "Data migration",
    "Workshop day",
    "App prototype",
)

RETAINER_TITLES: Sequence[str] = (
    "Hosting and support",
    "Monthly SEO",
    "Content retainer",
)


@dataclass(frozen=True)
class CostProfile:
    """Template for a synthetic fixed cost."""

    name: str
    category: str
    amount: float
    frequency: str


FIXED_COST_PROFILES: Sequence[CostProfile] = (
    CostProfile("Office rent", "premises", 1200.0, "monthly"),
    CostProfile("Accounting package", "software", 30.0, "monthly"),
    CostProfile("Design tools", "software", 55.0, "monthly"),
    CostProfile("Professional indemnity", "insurance", 480.0, "yearly"),
    CostProfile("Broadband", "utilities", 45.0, "monthly"),
    CostProfile("Cleaning", "premises", 240.0, "monthly"),
    CostProfile("Bookkeeping", "services", 450.0, "quarterly"),
    CostProfile("Laptop purchase", "equipment", 1800.0, "one_time"),
)


def generate_synthetic_deals(
    start_date: date | datetime | str = "2024-01-01",
    months: int = 12,
    *,
    deals_per_month: int = 3,
    retainers: int = 3,
    seed: Optional[int] = None,
) -> pd.DataFrame:
    """Generate a table of one-time and recurring deals.

    One-time deals are spread over ``months`` calendar months starting at
    ``start_date``; paid deals carry a ``payment_received_date`` inside that
    month. ``retainers`` recurring deals start in the first quarter with a
    fixed monthly amount and a 6 to 24 month contract length.
    """

    if months < 1:
        raise ValueError("months must be at least 1")

    rng = np.random.default_rng(seed)
    first_month = pd.Timestamp(_normalize_date(start_date)).to_period("M")
    statuses = [status for status, _ in STATUS_WEIGHTS]
    weights = np.array([weight for _, weight in STATUS_WEIGHTS])

    records: List[dict] = []
    for offset in range(months):
        month = first_month + offset
        month_start = month.start_time
        days_in_month = month.days_in_month
        for _ in range(deals_per_month):
            status = str(rng.choice(statuses, p=weights))
            day = int(rng.integers(0, days_in_month))
            close_date = month_start + pd.Timedelta(days=day)
            amount = round(float(rng.normal(3200, 900)), -1)
            records.append(
                {
                    "id": f"D{len(records) + 1:04d}",
                    "title": _rng_choice(PROJECT_TITLES, rng),
                    "client_name": _rng_choice(CLIENTS, rng),
                    "amount": max(amount, 250.0),
                    "status": status,
                    "deal_type": "one_time",
                    "payment_received_date": _iso(close_date) if status == "paid" else None,
                    "monthly_amount": None,
                    "start_date": None,
                    "end_date": None,
                    "contract_length": None,
                    "expected_date": None if status == "paid" else _iso(close_date),
                    "probability": _probability(status, rng),
                    "created_at": _iso(close_date - pd.Timedelta(days=int(rng.integers(7, 45)))),
                }
            )

    for _ in range(retainers):
        start = (first_month + int(rng.integers(0, 3))).start_time
        monthly = round(float(rng.uniform(400, 1500)), -1)
        contract_length = int(rng.choice([6, 12, 24]))
        records.append(
            {
                "id": f"D{len(records) + 1:04d}",
                "title": _rng_choice(RETAINER_TITLES, rng),
                "client_name": _rng_choice(CLIENTS, rng),
                "amount": monthly * contract_length,
                "status": "confirmed",
                "deal_type": "recurring",
                "payment_received_date": None,
                "monthly_amount": monthly,
                "start_date": _iso(start),
                "end_date": None,
                "contract_length": contract_length,
                "expected_date": None,
                "probability": 100,
                "created_at": _iso(start - pd.Timedelta(days=14)),
            }
        )

    df = pd.DataFrame.from_records(records, columns=DEAL_FIELDS)
    df.sort_values("created_at", inplace=True)
    df.reset_index(drop=True, inplace=True)
    return df


def generate_synthetic_fixed_costs(
    start_date: date | datetime | str = "2024-01-01",
    *,
    seed: Optional[int] = None,
) -> pd.DataFrame:
    """Generate one fixed cost per profile with a small amount jitter."""

    rng = np.random.default_rng(seed)
    anchor = pd.Timestamp(_normalize_date(start_date))

    records: List[dict] = []
    for index, profile in enumerate(FIXED_COST_PROFILES, start=1):
        jitter = 1 + rng.normal(0, 0.03)
        start = anchor + pd.Timedelta(days=int(rng.integers(0, 60)))
        records.append(
            {
                "id": f"F{index:03d}",
                "name": profile.name,
                "category": profile.category,
                "amount": round(profile.amount * jitter, 2),
                "frequency": profile.frequency,
                "start_date": _iso(start),
                "end_date": None,
                "is_active": True,
            }
        )

    return pd.DataFrame.from_records(records, columns=FIXED_COST_FIELDS)


def write_seed_files(
    data_dir: str | Path,
    *,
    seed: Optional[int] = None,
    **kwargs,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Generate both tables and write ``deals.csv`` and ``fixed_costs.csv``.

    Additional keyword arguments are forwarded to
    :func:`generate_synthetic_deals`.
    """

    target = Path(data_dir)
    target.mkdir(parents=True, exist_ok=True)

    deals = generate_synthetic_deals(seed=seed, **kwargs)
    fixed_costs = generate_synthetic_fixed_costs(kwargs.get("start_date", "2024-01-01"), seed=seed)
    deals.to_csv(target / "deals.csv", index=False)
    fixed_costs.to_csv(target / "fixed_costs.csv", index=False)
    return deals, fixed_costs


def _normalize_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(str(value), "%Y-%m-%d").date()


def _iso(moment: pd.Timestamp) -> str:
    return moment.strftime("%Y-%m-%d")


def _probability(status: str, rng: np.random.Generator) -> int:
    if status == "potential":
        return int(rng.integers(2, 8)) * 10
    return 100


def _rng_choice(options: Sequence[T], rng: np.random.Generator) -> T:
    idx = int(rng.integers(0, len(options)))
    return options[idx]
