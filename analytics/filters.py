"""Sorting and filtering for deal and fixed-cost lists.

Sortable fields are enumerated per entity and each maps to a typed key, so a
list is never sorted by an arbitrary attribute name.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Iterable

from core.models import Deal, DealStatus, FixedCost, Frequency

__all__ = [
    "DealSortField",
    "FixedCostSortField",
    "sort_deals",
    "sort_fixed_costs",
    "filter_deals",
    "filter_fixed_costs",
]


class DealSortField(str, Enum):
    AMOUNT = "amount"
    TITLE = "title"
    CLIENT_NAME = "client_name"
    EXPECTED_DATE = "expected_date"
    CREATED_AT = "created_at"


class FixedCostSortField(str, Enum):
    AMOUNT = "amount"
    NAME = "name"
    CATEGORY = "category"
    FREQUENCY = "frequency"
    START_DATE = "start_date"


_DEAL_KEYS: dict[DealSortField, Callable[[Deal], Any]] = {
    DealSortField.AMOUNT: lambda deal: deal.amount,
    DealSortField.TITLE: lambda deal: deal.title.casefold() or None,
    DealSortField.CLIENT_NAME: lambda deal: deal.client_name.casefold() or None,
    DealSortField.EXPECTED_DATE: lambda deal: deal.expected_date,
    DealSortField.CREATED_AT: lambda deal: deal.created_at,
}

_FIXED_COST_KEYS: dict[FixedCostSortField, Callable[[FixedCost], Any]] = {
    FixedCostSortField.AMOUNT: lambda cost: cost.amount,
    FixedCostSortField.NAME: lambda cost: cost.name.casefold() or None,
    FixedCostSortField.CATEGORY: lambda cost: cost.category.casefold() or None,
    FixedCostSortField.FREQUENCY: lambda cost: cost.frequency.value,
    FixedCostSortField.START_DATE: lambda cost: cost.start_date,
}


def _sorted(items: Iterable[Any], key: Callable[[Any], Any], descending: bool) -> list[Any]:
    # Missing values go last whichever way the list is ordered.
    present: list[Any] = []
    missing: list[Any] = []
    for item in items:
        (missing if key(item) is None else present).append(item)
    present.sort(key=key, reverse=descending)
    return present + missing


def sort_deals(
    deals: Iterable[Deal],
    field: DealSortField | str = DealSortField.CREATED_AT,
    descending: bool = True,
) -> list[Deal]:
    return _sorted(deals, _DEAL_KEYS[DealSortField(field)], descending)


def sort_fixed_costs(
    fixed_costs: Iterable[FixedCost],
    field: FixedCostSortField | str = FixedCostSortField.START_DATE,
    descending: bool = True,
) -> list[FixedCost]:
    return _sorted(fixed_costs, _FIXED_COST_KEYS[FixedCostSortField(field)], descending)


def _matches(search: str | None, *fields: str) -> bool:
    if not search or not search.strip():
        return True
    needle = search.strip().casefold()
    return any(needle in value.casefold() for value in fields)


def filter_deals(
    deals: Iterable[Deal],
    *,
    status: DealStatus | str | None = None,
    search: str | None = None,
) -> list[Deal]:
    """Keep deals with the given status whose title or client matches ``search``."""

    wanted = DealStatus(status) if status is not None else None
    return [
        deal
        for deal in deals
        if (wanted is None or deal.status is wanted) and _matches(search, deal.title, deal.client_name)
    ]


def filter_fixed_costs(
    fixed_costs: Iterable[FixedCost],
    *,
    category: str | None = None,
    frequency: Frequency | str | None = None,
    search: str | None = None,
) -> list[FixedCost]:
    """Keep fixed costs by category and frequency whose name or category matches ``search``."""

    wanted_frequency = Frequency(frequency) if frequency is not None else None
    wanted_category = category.casefold() if category else None
    return [
        cost
        for cost in fixed_costs
        if (wanted_category is None or cost.category.casefold() == wanted_category)
        and (wanted_frequency is None or cost.frequency is wanted_frequency)
        and _matches(search, cost.name, cost.category)
    ]
