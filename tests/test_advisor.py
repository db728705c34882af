"""AI advisor request building and reply handling with a stubbed client."""

from __future__ import annotations

from types import SimpleNamespace
from typing import cast

import pytest
from openai import OpenAI

from core.ai.advisor import (
    HISTORY_LIMIT,
    TITLE_MAX_LENGTH,
    AdvisorError,
    ChatMessage,
    build_advisor_request,
    build_financial_context,
    estimate_tokens,
    generate_advice,
    generate_conversation_title,
)
from core.summary_service import prepare_dashboard_data


class StubClient:
    """Mimics ``client.chat.completions.create`` and records each call."""

    def __init__(self, content: str | None, usage: object | None = None):
        self.calls: list[dict] = []
        self._response = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
            usage=usage,
        )
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def _create(self, **kwargs):
        self.calls.append(kwargs)
        return self._response


@pytest.fixture()
def dashboard(paid_deal, retainer, rent):
    return prepare_dashboard_data([paid_deal, retainer], [rent], "month", "2024-06-15")


def test_financial_context_holds_rounded_totals(dashboard):
    context = build_financial_context(dashboard)

    assert context["period"]["label"] == "Jun 2024"
    assert context["period"]["income"] == 5500.0
    assert context["period"]["net"] == 4300.0
    assert context["recurring_revenue"] == {"month": "Jun 2024", "mrr": 500.0, "active_contracts": 1}
    assert context["fixed_costs"]["monthly_total"] == 1200.0


@pytest.mark.parametrize("bad_figure", [None, "n/a", float("nan")])
def test_financial_context_rejects_non_numeric_figures(dashboard, bad_figure):
    dashboard["recurring_revenue"]["mrr"] = bad_figure

    with pytest.raises(AdvisorError, match="Dashboard figure"):
        build_financial_context(dashboard)


def test_request_keeps_recent_history(dashboard):
    history = [ChatMessage(role="user", content=f"question {i}") for i in range(20)]

    request = build_advisor_request(dashboard, "  How is June?  ", history, model="test-model")

    assert request.model == "test-model"
    assert request.messages[0].role == "system"
    assert '"label": "Jun 2024"' in request.messages[0].content
    assert len(request.messages) == HISTORY_LIMIT + 2
    assert request.messages[1].content == "question 5"
    assert request.messages[-1] == ChatMessage(role="user", content="How is June?")


def test_empty_question_is_rejected(dashboard):
    with pytest.raises(AdvisorError):
        build_advisor_request(dashboard, "   ")


def test_generate_advice_uses_injected_client(dashboard):
    client = StubClient("Keep an eye on rent.", usage=SimpleNamespace(total_tokens=321))

    reply = generate_advice(dashboard, "Any risks?", client_factory=lambda: cast(OpenAI, client))

    assert reply.text == "Keep an eye on rent."
    assert reply.tokens_used == 321
    assert reply.conversation_id
    assert len(client.calls) == 1
    assert client.calls[0]["messages"][-1] == {"role": "user", "content": "Any risks?"}


def test_generate_advice_estimates_tokens_and_keeps_conversation(dashboard):
    client = StubClient("abcdefgh")

    reply = generate_advice(
        dashboard,
        "Any risks?",
        conversation_id="conv-1",
        client_factory=lambda: cast(OpenAI, client),
    )

    assert reply.tokens_used == estimate_tokens("abcdefgh") == 2
    assert reply.conversation_id == "conv-1"


def test_empty_reply_raises(dashboard):
    client = StubClient("   ")

    with pytest.raises(AdvisorError):
        generate_advice(dashboard, "Any risks?", client_factory=lambda: cast(OpenAI, client))


def test_missing_api_key_raises(dashboard):
    with pytest.raises(AdvisorError, match="API key"):
        generate_advice(dashboard, "Any risks?")


def test_conversation_title_is_trimmed():
    client = StubClient('"' + "Quarterly cashflow review and hiring plans" + '"')

    title = generate_conversation_title("Can I afford to hire?", client_factory=lambda: cast(OpenAI, client))

    assert not title.startswith('"')
    assert len(title) <= TITLE_MAX_LENGTH
    assert "Can I afford to hire?" in client.calls[0]["messages"][0]["content"]
