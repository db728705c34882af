"""Sorting and filtering of deal and fixed-cost lists."""

from __future__ import annotations

import pytest

from analytics.filters import (
    DealSortField,
    FixedCostSortField,
    filter_deals,
    filter_fixed_costs,
    sort_deals,
    sort_fixed_costs,
)
from core.models import Deal, FixedCost


@pytest.fixture()
def deals():
    return [
        Deal(id="D1", amount=300, title="Brand refresh", client_name="Fennel & Co", created_at="2024-03-01"),
        Deal(id="D2", amount=900, title="App prototype", client_name="Northwind", status="paid"),
        Deal(id="D3", amount=100, title="website", client_name="Orchard Dental", created_at="2024-05-01"),
    ]


@pytest.fixture()
def costs():
    return [
        FixedCost(id="F1", amount=1200, frequency="monthly", start_date="2024-01-01", name="Rent", category="Premises"),
        FixedCost(id="F2", amount=480, frequency="yearly", start_date="2024-03-01", name="Insurance"),
        FixedCost(id="F3", amount=30, frequency="monthly", start_date="2024-02-01", name="Ledger app", category="software"),
    ]


def test_sort_deals_defaults_to_newest_first_with_missing_last(deals):
    assert [d.id for d in sort_deals(deals)] == ["D3", "D1", "D2"]
    assert [d.id for d in sort_deals(deals, descending=False)] == ["D1", "D3", "D2"]


def test_sort_deals_by_amount_and_title(deals):
    assert [d.id for d in sort_deals(deals, DealSortField.AMOUNT, descending=False)] == ["D3", "D1", "D2"]
    assert [d.id for d in sort_deals(deals, "title", descending=False)] == ["D2", "D1", "D3"]


def test_sort_rejects_unknown_field(deals):
    with pytest.raises(ValueError):
        sort_deals(deals, "__class__")


def test_sort_fixed_costs(costs):
    assert [c.id for c in sort_fixed_costs(costs)] == ["F2", "F3", "F1"]
    by_category = sort_fixed_costs(costs, FixedCostSortField.CATEGORY, descending=False)
    assert [c.id for c in by_category] == ["F1", "F3", "F2"]


def test_filter_deals_by_status_and_search(deals):
    assert [d.id for d in filter_deals(deals, status="paid")] == ["D2"]
    assert [d.id for d in filter_deals(deals, search="  ORCHARD ")] == ["D3"]
    assert [d.id for d in filter_deals(deals, search="")] == ["D1", "D2", "D3"]
    assert filter_deals(deals, status="potential", search="northwind") == []


def test_filter_fixed_costs(costs):
    assert [c.id for c in filter_fixed_costs(costs, category="premises")] == ["F1"]
    assert [c.id for c in filter_fixed_costs(costs, frequency="monthly")] == ["F1", "F3"]
    assert [c.id for c in filter_fixed_costs(costs, search="soft")] == ["F3"]
