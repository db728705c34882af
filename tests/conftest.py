"""Shared fixtures for the CashPulse test-suite."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import get_settings
from core import logging_setup
from core.models import Deal, FixedCost


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep tests independent of the developer's environment and cached settings."""

    for name in (
        "OPENAI_API_KEY",
        "CASHPULSE_OPENAI_API_KEY",
        "OPENAI_BASE_URL",
        "CASHPULSE_OPENAI_BASE_URL",
        "CASHPULSE_DATA_DIR",
        "CASHPULSE_PRORATE_PARTIAL_PERIODS",
        "CASHPULSE_RECURRING_DEAL_END",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_package_logger(monkeypatch):
    """Drop stream handlers left behind by CLI runs so each test configures afresh."""

    logger = logging.getLogger("cashpulse")
    saved = (logger.level, logger.propagate)
    monkeypatch.setattr(logging_setup, "_CONFIGURED", False)
    yield
    for handler in list(logger.handlers):
        if type(handler) is logging.StreamHandler:
            logger.removeHandler(handler)
    logger.setLevel(saved[0])
    logger.propagate = saved[1]


@pytest.fixture()
def paid_deal() -> Deal:
    return Deal(
        id="D1",
        amount=5000,
        status="paid",
        deal_type="one_time",
        payment_received_date="2024-06-10",
        title="Website redesign",
        client_name="Northwind Traders",
    )


@pytest.fixture()
def retainer() -> Deal:
    return Deal(
        id="D2",
        amount=6000,
        status="confirmed",
        deal_type="recurring",
        monthly_amount=500,
        start_date="2024-01-01",
        contract_length=12,
    )


@pytest.fixture()
def rent() -> FixedCost:
    return FixedCost(id="F1", amount=1200, frequency="monthly", start_date="2024-01-01", name="Office rent")


LEDGER_DEALS = """id,title,client_name,amount,status,deal_type,payment_received_date,monthly_amount,start_date,contract_length,expected_date,probability,created_at
D1,Website redesign,Northwind Traders,5000,paid,one_time,2024-06-10,,,,,,2024-05-01
D2,Workshop day,Fennel & Co,1000,confirmed,one_time,,,,,2024-06-20,50,2024-05-20
"""

LEDGER_FIXED_COSTS = """id,name,category,amount,frequency,start_date,end_date,is_active
F1,Office rent,premises,1200,monthly,2024-01-01,,true
F2,Old desk,premises,300,monthly,2023-01-01,2023-12-31,false
"""


@pytest.fixture()
def ledger_dir(tmp_path: Path) -> Path:
    """A data directory holding a two-deal, two-cost CSV ledger."""

    (tmp_path / "deals.csv").write_text(LEDGER_DEALS, encoding="utf-8")
    (tmp_path / "fixed_costs.csv").write_text(LEDGER_FIXED_COSTS, encoding="utf-8")
    return tmp_path
