"""Shared data model definitions for the CashPulse engine and dashboard."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from typing import TYPE_CHECKING, Annotated, Any, Mapping, TypedDict

import numpy as np
import pandas as pd
from pydantic import BeforeValidator, Field, TypeAdapter, ValidationError

from core.errors import CashflowValidationError

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from config.settings import Settings

__all__ = [
    "PeriodType",
    "Frequency",
    "DealStatus",
    "DealType",
    "RecurringDealEnd",
    "GoalType",
    "GoalStatus",
    "Deal",
    "FixedCost",
    "Goal",
    "Period",
    "CashflowPoint",
    "CashflowSummary",
    "CashflowOptions",
    "PeriodSummary",
    "DealStatistics",
    "RecurringRevenue",
    "FixedCostStatistics",
    "GoalStatistics",
    "DashboardData",
]


class PeriodType(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


class Frequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"
    ONE_TIME = "one_time"


class DealStatus(str, Enum):
    POTENTIAL = "potential"
    CONFIRMED = "confirmed"
    INVOICED = "invoiced"
    PAID = "paid"


class DealType(str, Enum):
    ONE_TIME = "one_time"
    RECURRING = "recurring"


class RecurringDealEnd(str, Enum):
    """How far a recurring deal keeps contributing after its start date."""

    OPEN_ENDED = "open_ended"
    CONTRACT = "contract"


class GoalType(str, Enum):
    REVENUE_TARGET = "revenue_target"
    EXPENSE_LIMIT = "expense_limit"
    MRR_GROWTH = "mrr_growth"
    DEAL_COUNT = "deal_count"
    CUSTOM = "custom"


class GoalStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"
    ARCHIVED = "archived"


def _normalise(value: Any) -> Any:
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _whole_number(value: Any) -> Any:
    # CSV exports write integer columns holding blanks as "12.0"
    value = _normalise(value)
    return float(value) if isinstance(value, str) else value


_Amount = Annotated[float, Field(allow_inf_nan=False), BeforeValidator(_normalise)]
_Count = Annotated[int, BeforeValidator(_whole_number)]
_Percent = Annotated[int, Field(ge=0, le=100), BeforeValidator(_whole_number)]
_Flag = Annotated[bool, BeforeValidator(_normalise)]

_AMOUNT: TypeAdapter[float] = TypeAdapter(_Amount)
_COUNT: TypeAdapter[int] = TypeAdapter(_Count)
_PERCENT: TypeAdapter[int] = TypeAdapter(_Percent)
_FLAG: TypeAdapter[bool] = TypeAdapter(_Flag)


@lru_cache(maxsize=None)
def _choice(enum_type: type[Enum]) -> TypeAdapter[Any]:
    return TypeAdapter(Annotated[enum_type, BeforeValidator(_normalise)])


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _parse(
    adapter: TypeAdapter[Any],
    entity_id: str,
    name: str,
    value: Any,
    *,
    required: bool = False,
    default: Any = None,
) -> Any:
    """Validate one raw field, reporting failures against the owning record."""

    if _is_missing(value):
        if required:
            raise CashflowValidationError(entity_id, name, "value is required")
        return default
    try:
        return adapter.validate_python(value)
    except ValidationError as exc:
        reason = exc.errors()[0]["msg"]
        raise CashflowValidationError(entity_id, name, f"{reason} (got {value!r})") from exc


def _parse_date(entity_id: str, name: str, value: Any, *, required: bool = False) -> pd.Timestamp | None:
    if _is_missing(value):
        if required:
            raise CashflowValidationError(entity_id, name, "date is required")
        return None
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError) as exc:
        raise CashflowValidationError(entity_id, name, f"unparseable date {value!r}") from exc
    if pd.isna(ts):
        raise CashflowValidationError(entity_id, name, f"unparseable date {value!r}")
    if ts.tz is not None:
        ts = ts.tz_convert(None)
    return ts.normalize()


def _text(value: Any) -> str:
    return "" if _is_missing(value) else str(value).strip()


def _entity_id(value: Any) -> str:
    if _is_missing(value):
        raise CashflowValidationError("<missing>", "id", "id is required")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


@dataclass(frozen=True)
class Deal:
    """A sales opportunity or contract.

    Dates and amounts may be passed as raw values (ISO strings, numeric
    strings); they are parsed on construction and malformed input raises
    :class:`~core.errors.CashflowValidationError` naming the deal id.
    """

    id: str
    amount: float
    status: DealStatus = DealStatus.POTENTIAL
    deal_type: DealType = DealType.ONE_TIME
    payment_received_date: pd.Timestamp | None = None
    monthly_amount: float | None = None
    start_date: pd.Timestamp | None = None
    end_date: pd.Timestamp | None = None
    contract_length: int | None = None
    expected_date: pd.Timestamp | None = None
    probability: int | None = None
    title: str = ""
    client_name: str = ""
    created_at: pd.Timestamp | None = None

    def __post_init__(self) -> None:
        entity_id = _entity_id(self.id)
        object.__setattr__(self, "id", entity_id)
        object.__setattr__(self, "amount", _parse(_AMOUNT, entity_id, "amount", self.amount, required=True))
        object.__setattr__(self, "status", _parse(_choice(DealStatus), entity_id, "status", self.status, required=True))
        object.__setattr__(self, "deal_type", _parse(_choice(DealType), entity_id, "deal_type", self.deal_type, required=True))
        for name in ("payment_received_date", "start_date", "end_date", "expected_date", "created_at"):
            value = _parse_date(entity_id, name, getattr(self, name))
            object.__setattr__(self, name, value)
        object.__setattr__(
            self,
            "monthly_amount",
            _parse(_AMOUNT, entity_id, "monthly_amount", self.monthly_amount),
        )
        object.__setattr__(self, "contract_length", _parse(_COUNT, entity_id, "contract_length", self.contract_length))
        object.__setattr__(self, "probability", _parse(_PERCENT, entity_id, "probability", self.probability))
        object.__setattr__(self, "title", _text(self.title))
        object.__setattr__(self, "client_name", _text(self.client_name))

        if self.deal_type is DealType.RECURRING:
            if self.monthly_amount is None:
                raise CashflowValidationError(entity_id, "monthly_amount", "required for recurring deals")
            if self.start_date is None:
                raise CashflowValidationError(entity_id, "start_date", "required for recurring deals")

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Deal":
        """Build a deal from a raw store row using its snake_case column names."""

        return cls(
            id=record.get("id"),
            amount=record.get("amount"),
            status=record.get("status") or DealStatus.POTENTIAL.value,
            deal_type=record.get("deal_type") or DealType.ONE_TIME.value,
            payment_received_date=record.get("payment_received_date"),
            monthly_amount=record.get("monthly_amount"),
            start_date=record.get("start_date"),
            end_date=record.get("end_date"),
            contract_length=record.get("contract_length"),
            expected_date=record.get("expected_date"),
            probability=record.get("probability"),
            title=record.get("title", ""),
            client_name=record.get("client_name", ""),
            created_at=record.get("created_at"),
        )

    @property
    def contract_end(self) -> pd.Timestamp | None:
        """Last day of a recurring contract, if one is recorded."""

        if self.end_date is not None:
            return self.end_date
        if self.start_date is not None and self.contract_length:
            return self.start_date + pd.DateOffset(months=self.contract_length) - pd.Timedelta(days=1)
        return None


@dataclass(frozen=True)
class FixedCost:
    """A recurring or one-time expense."""

    id: str
    amount: float
    frequency: Frequency
    start_date: pd.Timestamp
    end_date: pd.Timestamp | None = None
    is_active: bool = True
    name: str = ""
    category: str = ""

    def __post_init__(self) -> None:
        entity_id = _entity_id(self.id)
        object.__setattr__(self, "id", entity_id)
        object.__setattr__(self, "amount", _parse(_AMOUNT, entity_id, "amount", self.amount, required=True))
        object.__setattr__(self, "frequency", _parse(_choice(Frequency), entity_id, "frequency", self.frequency, required=True))
        object.__setattr__(self, "start_date", _parse_date(entity_id, "start_date", self.start_date, required=True))
        object.__setattr__(self, "end_date", _parse_date(entity_id, "end_date", self.end_date))
        object.__setattr__(self, "is_active", _parse(_FLAG, entity_id, "is_active", self.is_active, default=True))
        object.__setattr__(self, "name", _text(self.name))
        object.__setattr__(self, "category", _text(self.category))

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "FixedCost":
        """Build a fixed cost from a raw store row using its snake_case column names."""

        return cls(
            id=record.get("id"),
            amount=record.get("amount"),
            frequency=record.get("frequency"),
            start_date=record.get("start_date"),
            end_date=record.get("end_date"),
            is_active=record.get("is_active", True),
            name=record.get("name", ""),
            category=record.get("category", ""),
        )


@dataclass(frozen=True)
class Goal:
    """A monthly business target.

    Automatic goals have ``current_value`` recomputed from the ledger (see
    :mod:`analytics.goals`); for the rest it is whatever was recorded.
    """

    id: str
    name: str
    goal_type: GoalType
    target_value: float
    deadline: pd.Timestamp
    current_value: float = 0.0
    status: GoalStatus = GoalStatus.ACTIVE
    is_automatic: bool = False
    category: str = ""
    description: str = ""
    created_at: pd.Timestamp | None = None

    def __post_init__(self) -> None:
        entity_id = _entity_id(self.id)
        object.__setattr__(self, "id", entity_id)
        object.__setattr__(self, "name", _text(self.name))
        object.__setattr__(self, "goal_type", _parse(_choice(GoalType), entity_id, "goal_type", self.goal_type, required=True))
        object.__setattr__(self, "target_value", _parse(_AMOUNT, entity_id, "target_value", self.target_value, required=True))
        object.__setattr__(self, "deadline", _parse_date(entity_id, "deadline", self.deadline, required=True))
        object.__setattr__(self, "current_value", _parse(_AMOUNT, entity_id, "current_value", self.current_value, default=0.0))
        object.__setattr__(self, "status", _parse(_choice(GoalStatus), entity_id, "status", self.status, default=GoalStatus.ACTIVE))
        object.__setattr__(self, "is_automatic", _parse(_FLAG, entity_id, "is_automatic", self.is_automatic, default=False))
        object.__setattr__(self, "category", _text(self.category))
        object.__setattr__(self, "description", _text(self.description))
        object.__setattr__(self, "created_at", _parse_date(entity_id, "created_at", self.created_at))

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Goal":
        return cls(
            id=record.get("id"),
            name=record.get("name", ""),
            goal_type=record.get("goal_type"),
            target_value=record.get("target_value"),
            deadline=record.get("deadline"),
            current_value=record.get("current_value"),
            status=record.get("status"),
            is_automatic=record.get("is_automatic"),
            category=record.get("category", ""),
            description=record.get("description", ""),
            created_at=record.get("created_at"),
        )

    @property
    def progress(self) -> float:
        """Percent of the target reached; zero when there is no positive target."""

        if self.target_value <= 0:
            return 0.0
        return self.current_value / self.target_value * 100


@dataclass(frozen=True)
class Period:
    period_type: PeriodType
    start: pd.Timestamp
    end: pd.Timestamp

    def contains(self, moment: pd.Timestamp) -> bool:
        return self.start <= moment <= self.end

    @property
    def days(self) -> int:
        return int((self.end.normalize() - self.start.normalize()).days) + 1


@dataclass(frozen=True)
class CashflowPoint:
    period_label: str
    period_start: pd.Timestamp
    period_end: pd.Timestamp
    income: float
    expenses: float

    @property
    def net(self) -> float:
        return self.income - self.expenses

    def to_dict(self) -> dict[str, Any]:
        return {
            "period_label": self.period_label,
            "period_start": self.period_start.isoformat(),
            "period_end": self.period_end.isoformat(),
            "income": self.income,
            "expenses": self.expenses,
            "net": self.net,
        }


@dataclass(frozen=True)
class CashflowSummary:
    income: float = 0.0
    expenses: float = 0.0

    @property
    def net(self) -> float:
        return self.income - self.expenses

    def to_dict(self) -> dict[str, float]:
        return {"income": self.income, "expenses": self.expenses, "net": self.net}


@dataclass(frozen=True)
class CashflowOptions:
    """Engine switches resolved from settings and passed explicitly."""

    prorate_partial_periods: bool = False
    recurring_deal_end: RecurringDealEnd = field(default=RecurringDealEnd.OPEN_ENDED)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "CashflowOptions":
        return cls(
            prorate_partial_periods=settings.prorate_partial_periods,
            recurring_deal_end=RecurringDealEnd(settings.recurring_deal_end),
        )


class PeriodSummary(TypedDict):
    period_type: str
    label: str
    start: pd.Timestamp
    end: pd.Timestamp
    income: float
    expenses: float
    net: float
    previous_income: float
    previous_expenses: float
    previous_net: float
    income_delta: str
    expenses_delta: str
    net_delta: str
    expected_income: float


class DealStatistics(TypedDict):
    deal_count: int
    total_value: float
    potential_count: int
    confirmed_value: float
    paid_value: float
    pipeline_value: float
    status_counts: dict[str, int]


class RecurringRevenue(TypedDict):
    month_label: str
    mrr: float
    active_contracts: int


class FixedCostStatistics(TypedDict):
    active_count: int
    monthly_total: float
    yearly_total: float
    one_time_total: float
    category_counts: dict[str, int]


class DashboardData(TypedDict):
    period_summary: PeriodSummary
    series_df: pd.DataFrame
    series_summary: CashflowSummary
    deal_statistics: DealStatistics
    recurring_revenue: RecurringRevenue
    fixed_cost_statistics: FixedCostStatistics
    insights: list[str]


class GoalStatistics(TypedDict):
    on_track: int
    at_risk: int
    completed: int
    overall_score: int
