"""AI-focused helpers for CashPulse."""

from .advisor import (
    AdvisorError,
    AdvisorReply,
    AdvisorRequest,
    ChatMessage,
    build_advisor_request,
    build_financial_context,
    generate_advice,
    generate_conversation_title,
)

__all__ = [
    "AdvisorError",
    "AdvisorReply",
    "AdvisorRequest",
    "ChatMessage",
    "build_advisor_request",
    "build_financial_context",
    "generate_advice",
    "generate_conversation_title",
]
