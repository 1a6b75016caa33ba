from __future__ import annotations

import json
from pathlib import Path

import pytest

from conftest import ticket
from services import assistant_service
from services.assistant_service import (
    APOLOGY,
    FAILURE_TITLE,
    FOLLOW_UP_SUGGESTIONS,
    GREETING,
    AssistantService,
    ChatMessage,
    ChatTranscript,
    _prompt_dir,
    chart_type_for,
    ticket_context,
)
from services.completion_client import CompletionError, CompletionResult


class StubClient:
    def __init__(self, text: str = "answer", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[dict] = []

    def complete(self, *, system: str, user: str, **kw) -> CompletionResult:
        self.calls.append({"system": system, "user": user})
        if self.error:
            raise self.error
        return CompletionResult(text=self.text, model_used="gpt-4o-mini")


def test_ticket_context_keeps_only_descriptive_fields():
    [ctx] = ticket_context([ticket(id=9, created_at="2024-12-01", link="https://x", responsible_department_justification="why")])
    assert set(ctx) == {"summary", "issue", "common_issue", "category", "subcategory", "link", "justification"}
    assert ctx["justification"] == "why"


def test_ask_sends_context_and_question():
    client = StubClient(text="## Top issue\nBattery drain")
    res = AssistantService(client).ask("What is the top issue?", [ticket(id=1)])

    assert res.answer == "## Top issue\nBattery drain"
    assert res.suggestions == FOLLOW_UP_SUGGESTIONS
    [call] = client.calls
    assert "concise markdown" in call["system"]
    context_part, question_part = call["user"].split("\n\nQuestion: ")
    assert question_part == "What is the top issue?"
    ctx = json.loads(context_part[len("Context: "):])
    assert ctx[0]["common_issue"] == "Battery drain"
    assert "id" not in ctx[0]


def test_ask_without_context():
    client = StubClient()
    AssistantService(client).ask("hello")
    assert client.calls[0]["user"] == "Question: hello"


def test_chart_type_detection():
    assert chart_type_for("A Bar chart fits best") == "bar"
    assert chart_type_for("Use a line chart") == "line"
    assert chart_type_for("") == "line"


def test_analyze_charts_uses_category_distribution():
    client = StubClient(text="Most tickets are batteries; a bar chart works.")
    rows = [{"category": "Batterier"}, {"category": "Batterier"}, {"category": "Andra"}]
    res = AssistantService(client).analyze_charts("Where are most tickets?", rows)
    assert res.chart_type == "bar"
    assert res.chart_data == [{"name": "Batterier", "value": 2}, {"name": "Andra", "value": 1}]
    assert res.as_dict()["chartType"] == "bar"


def test_transcript_starts_with_greeting():
    t = ChatTranscript()
    assert [m.text for m in t.messages] == [GREETING]
    assert ChatTranscript.from_dicts([]).messages[0].text == GREETING


def test_transcript_ignores_blank_input():
    t = ChatTranscript()
    assert t.submit("   ", lambda q: ChatMessage(text="x", is_user=False)) is False
    assert len(t.messages) == 1


def test_transcript_appends_answer():
    t = ChatTranscript()
    assert t.submit("hi", lambda q: ChatMessage(text=f"echo {q}", is_user=False))
    assert [(m.text, m.is_user) for m in t.messages[1:]] == [("hi", True), ("echo hi", False)]
    assert t.notice is None


def test_transcript_failure_appends_apology_once():
    calls = []

    def failing(q):
        calls.append(q)
        raise CompletionError("boom", model="gpt-4o-mini", reason="http", http_status=500)

    t = ChatTranscript()
    assert t.submit("hi", failing) is False
    assert len(calls) == 1
    assert t.messages[-1].text == APOLOGY
    assert t.notice["title"] == FAILURE_TITLE

    d = t.as_dict()
    assert d["messages"][-1] == {"text": APOLOGY, "isUser": False}


def test_prompt_files_ship_with_the_package():
    tomllib = pytest.importorskip("tomllib")
    for name in ("ticket_assistant.txt", "chart_assistant.txt"):
        assert (_prompt_dir() / name).is_file()

    pyproject = Path(__file__).resolve().parents[1] / "pyproject.toml"
    setuptools_cfg = tomllib.loads(pyproject.read_text(encoding="utf-8"))["tool"]["setuptools"]
    assert "prompts" in setuptools_cfg["packages"]
    assert setuptools_cfg["package-data"]["prompts"] == ["*.txt"]


def test_transcript_unreadable_prompt_appends_apology(monkeypatch):
    def missing(name):
        raise FileNotFoundError(name)

    monkeypatch.setattr(assistant_service, "_read_prompt", missing)
    svc = AssistantService(client=StubClient())
    t = ChatTranscript()
    t.submit("Hi", lambda q: ChatMessage(text=svc.ask(q).answer, is_user=False))
    assert t.messages[-1].text == APOLOGY
    assert t.notice["title"] == FAILURE_TITLE
