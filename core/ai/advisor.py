"""AI cashflow advisor built on the OpenAI chat completions API."""

from __future__ import annotations

import json
import math
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from openai import APIError, OpenAI

from config import get_settings
from core.logging_setup import get_logger
from core.models import DashboardData
from prompts import get_prompt_text, render_prompt

PROMPT_ADVISOR = "advisor"
PROMPT_TITLE = "title"
TITLE_MODEL = "gpt-4o-mini"
MAX_OUTPUT_TOKENS = 2000
MAX_TITLE_TOKENS = 50
TITLE_MAX_LENGTH = 40
HISTORY_LIMIT = 15

__all__ = [
    "AdvisorError",
    "AdvisorReply",
    "AdvisorRequest",
    "ChatMessage",
    "build_advisor_request",
    "build_financial_context",
    "estimate_tokens",
    "generate_advice",
    "generate_conversation_title",
]

LOGGER = get_logger(__name__)


class AdvisorError(RuntimeError):
    """Raised when the advisor cannot produce a reply."""


@dataclass(frozen=True, slots=True)
class ChatMessage:
    role: str
    content: str


@dataclass(frozen=True, slots=True)
class AdvisorRequest:
    payload: Mapping[str, Any]
    period_label: str
    model: str
    messages: tuple[ChatMessage, ...]


@dataclass(frozen=True, slots=True)
class AdvisorReply:
    text: str
    tokens_used: int
    conversation_id: str


def _resolve_openai_client() -> OpenAI:
    settings = get_settings()
    if not settings.openai_api_key:
        raise AdvisorError("Missing OpenAI API key. Set OPENAI_API_KEY or CASHPULSE_OPENAI_API_KEY.")
    return OpenAI(**settings.openai_client_kwargs)


def estimate_tokens(text: str) -> int:
    """Rough token count used when the API does not report usage."""

    return math.ceil(len(text) / 4)


def _round(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise AdvisorError(f"Dashboard figure is not a number: {value!r}") from exc
    if not math.isfinite(number):
        raise AdvisorError(f"Dashboard figure is not finite: {value!r}")
    return round(number, 2)


def build_financial_context(data: DashboardData) -> dict[str, Any]:
    """Reduce dashboard data to the scalar totals shared with the model."""

    summary = data["period_summary"]
    series_summary = data["series_summary"]
    deal_stats = data["deal_statistics"]
    recurring = data["recurring_revenue"]
    fixed_costs = data["fixed_cost_statistics"]

    return {
        "period": {
            "type": summary["period_type"],
            "label": summary["label"],
            "income": _round(summary["income"]),
            "expenses": _round(summary["expenses"]),
            "net": _round(summary["net"]),
            "previous_net": _round(summary["previous_net"]),
            "net_change": summary["net_delta"],
            "expected_income": _round(summary["expected_income"]),
        },
        "report_range": {
            "income": _round(series_summary.income),
            "expenses": _round(series_summary.expenses),
            "net": _round(series_summary.net),
        },
        "pipeline": {
            "deal_count": int(deal_stats["deal_count"]),
            "open_value": _round(deal_stats["pipeline_value"]),
            "confirmed_value": _round(deal_stats["confirmed_value"]),
            "paid_value": _round(deal_stats["paid_value"]),
        },
        "recurring_revenue": {
            "month": recurring["month_label"],
            "mrr": _round(recurring["mrr"]),
            "active_contracts": int(recurring["active_contracts"]),
        },
        "fixed_costs": {
            "active_count": int(fixed_costs["active_count"]),
            "monthly_total": _round(fixed_costs["monthly_total"]),
            "yearly_total": _round(fixed_costs["yearly_total"]),
        },
    }


def build_advisor_request(
    data: DashboardData,
    message: str,
    history: Iterable[ChatMessage] = (),
    *,
    model: str | None = None,
) -> AdvisorRequest:
    if not message or not message.strip():
        raise AdvisorError("Cannot ask the advisor an empty question")

    payload = build_financial_context(data)
    period = payload["period"]["label"]
    recent = tuple(history)[-HISTORY_LIMIT:]

    system_prompt = (
        f"{get_prompt_text(PROMPT_ADVISOR)}\n\n"
        f"Financial context for {period} (JSON):\n"
        f"{_format_payload(payload)}"
    )
    messages = (
        ChatMessage(role="system", content=system_prompt),
        *recent,
        ChatMessage(role="user", content=message.strip()),
    )

    return AdvisorRequest(
        payload=payload,
        period_label=period,
        model=model or get_settings().openai_model,
        messages=messages,
    )


def _default_client_factory() -> OpenAI:
    return _resolve_openai_client()


def _completion_text(response: Any) -> str:
    try:
        return (response.choices[0].message.content or "").strip()
    except (AttributeError, IndexError) as exc:  # pragma: no cover - unexpected SDK output
        raise AdvisorError("Unexpected response format from OpenAI API") from exc


def generate_advice(
    data: DashboardData,
    message: str,
    *,
    history: Iterable[ChatMessage] = (),
    conversation_id: str | None = None,
    client_factory: Callable[[], OpenAI] | None = None,
) -> AdvisorReply:
    request = build_advisor_request(data, message, history)
    client = (client_factory or _default_client_factory)()

    LOGGER.debug(
        "Advisor prompt for %s estimated at %s tokens",
        request.period_label,
        sum(estimate_tokens(item.content) for item in request.messages),
    )

    try:
        response = client.chat.completions.create(
            model=request.model,
            messages=[{"role": item.role, "content": item.content} for item in request.messages],
            max_tokens=MAX_OUTPUT_TOKENS,
            temperature=0.2,
        )
    except APIError as exc:
        raise AdvisorError(f"OpenAI API error: {exc}") from exc

    text = _completion_text(response)
    if not text:
        raise AdvisorError("OpenAI response was empty")

    usage = getattr(response, "usage", None)
    tokens_used = getattr(usage, "total_tokens", None) or estimate_tokens(text)
    LOGGER.debug("Advisor reply used %s tokens", tokens_used)

    return AdvisorReply(
        text=text,
        tokens_used=int(tokens_used),
        conversation_id=conversation_id or str(uuid.uuid4()),
    )


def generate_conversation_title(
    message: str,
    *,
    client_factory: Callable[[], OpenAI] | None = None,
) -> str:
    """Ask the model for a short title for a new conversation."""

    client = (client_factory or _default_client_factory)()
    prompt = render_prompt(PROMPT_TITLE, message=message.strip(), limit=TITLE_MAX_LENGTH)

    try:
        response = client.chat.completions.create(
            model=TITLE_MODEL,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=MAX_TITLE_TOKENS,
            temperature=0.3,
        )
    except APIError as exc:
        raise AdvisorError(f"OpenAI API error: {exc}") from exc

    title = _completion_text(response).replace('"', "").strip()
    if not title:
        raise AdvisorError("OpenAI returned an empty title")
    return title[:TITLE_MAX_LENGTH].rstrip()


def _format_payload(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)
