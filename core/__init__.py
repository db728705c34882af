"""Core domain package for the CashPulse cashflow engine."""

from .ai.advisor import AdvisorError, AdvisorReply, ChatMessage, generate_advice, generate_conversation_title
from .errors import CashflowError, CashflowRangeError, CashflowValidationError
from .models import (
    CashflowOptions,
    CashflowPoint,
    CashflowSummary,
    DashboardData,
    Deal,
    DealStatus,
    DealType,
    FixedCost,
    Frequency,
    Goal,
    GoalStatus,
    GoalType,
    Period,
    PeriodType,
    RecurringDealEnd,
)

__all__ = [
    "AdvisorError",
    "AdvisorReply",
    "ChatMessage",
    "generate_advice",
    "generate_conversation_title",
    "CashflowError",
    "CashflowRangeError",
    "CashflowValidationError",
    "CashflowOptions",
    "CashflowPoint",
    "CashflowSummary",
    "DashboardData",
    "Deal",
    "DealStatus",
    "DealType",
    "FixedCost",
    "Frequency",
    "Goal",
    "GoalStatus",
    "GoalType",
    "Period",
    "PeriodType",
    "RecurringDealEnd",
]
