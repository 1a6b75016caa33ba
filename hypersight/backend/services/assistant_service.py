from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from services.chart_aggregates import category_distribution
from services.completion_client import CompletionClient, CompletionError
from services.ticket_store import TicketStoreError

GREETING = "Hello! I can help you analyze your ticket data. Ask me anything about trends, patterns, or insights!"
APOLOGY = "Sorry, I encountered an error while analyzing the data. Please try again."
FAILURE_TITLE = "Analysis Failed"
FAILURE_DESCRIPTION = "Failed to analyze the data. Please try again."

FOLLOW_UP_SUGGESTIONS: tuple[str, ...] = (
    "Which category has the most tickets?",
    "What are the most common issues right now?",
    "Which department is responsible for the most tickets?",
)


def _prompt_dir() -> Path:
    return Path(__file__).resolve().parent.parent / "prompts"


def _read_prompt(name: str) -> str:
    return (_prompt_dir() / name).read_text(encoding="utf-8")


def ticket_context(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Strip rows down to the descriptive fields the assistant may see."""
    return [
        {
            "summary": r.get("summary"),
            "issue": r.get("issue"),
            "common_issue": r.get("common_issue"),
            "category": r.get("category"),
            "subcategory": r.get("subcategory"),
            "link": r.get("link"),
            "justification": r.get("responsible_department_justification"),
        }
        for r in rows
    ]


def chart_type_for(text: str) -> str:
    return "bar" if "bar" in (text or "").lower() else "line"


@dataclass(frozen=True)
class AssistantAnswer:
    answer: str
    suggestions: tuple[str, ...] = FOLLOW_UP_SUGGESTIONS


@dataclass(frozen=True)
class ChartAnalysis:
    analysis: str
    chart_type: str
    chart_data: list[dict[str, Any]]

    def as_dict(self) -> dict:
        return {"analysis": self.analysis, "chartType": self.chart_type, "chartData": self.chart_data}


class AssistantService:
    def __init__(self, client: CompletionClient | None = None) -> None:
        self.client = client or CompletionClient()

    def ask(self, question: str, rows_context: list[dict[str, Any]] | None = None) -> AssistantAnswer:
        if rows_context is None:
            user = f"Question: {question}"
        else:
            context = json.dumps(ticket_context(rows_context), ensure_ascii=False, default=str)
            user = f"Context: {context}\n\nQuestion: {question}"
        res = self.client.complete(system=_read_prompt("ticket_assistant.txt"), user=user)
        return AssistantAnswer(answer=res.text)

    def analyze_charts(self, prompt: str, rows: list[dict[str, Any]]) -> ChartAnalysis:
        chart_data = [{"name": c.name, "value": c.count} for c in category_distribution(rows)]
        user = f"Context: {json.dumps(chart_data, ensure_ascii=False)}\n\nQuestion: {prompt}"
        res = self.client.complete(system=_read_prompt("chart_assistant.txt"), user=user)
        return ChartAnalysis(analysis=res.text, chart_type=chart_type_for(res.text), chart_data=chart_data)


@dataclass
class ChatMessage:
    text: str
    is_user: bool
    chart_type: str | None = None
    chart_data: list[dict[str, Any]] | None = None

    def as_dict(self) -> dict:
        out: dict[str, Any] = {"text": self.text, "isUser": self.is_user}
        if self.chart_data is not None:
            out["chartType"] = self.chart_type
            out["chartData"] = self.chart_data
        return out


@dataclass
class ChatTranscript:
    """
    Conversation shown in the chat panel. A failed round trip appends the
    apology and leaves a one-shot notice for the UI; nothing is retried.
    """

    messages: list[ChatMessage] = field(default_factory=lambda: [ChatMessage(text=GREETING, is_user=False)])
    notice: dict[str, str] | None = None

    @classmethod
    def from_dicts(cls, items: list[dict[str, Any]] | None) -> "ChatTranscript":
        if not items:
            return cls()
        msgs = [
            ChatMessage(
                text=str(m.get("text") or ""),
                is_user=bool(m.get("isUser")),
                chart_type=m.get("chartType"),
                chart_data=m.get("chartData"),
            )
            for m in items
        ]
        return cls(messages=msgs)

    def submit(self, question: str, answer_fn: Callable[[str], ChatMessage]) -> bool:
        self.notice = None
        if not (question or "").strip():
            return False
        self.messages.append(ChatMessage(text=question, is_user=True))
        try:
            reply = answer_fn(question)
        except (CompletionError, TicketStoreError, OSError) as e:
            print(f"[ASSISTANT] chat round trip failed: {e}")
            self.notice = {"title": FAILURE_TITLE, "description": FAILURE_DESCRIPTION}
            self.messages.append(ChatMessage(text=APOLOGY, is_user=False))
            return False
        self.messages.append(reply)
        return True

    def as_dict(self) -> dict:
        return {"messages": [m.as_dict() for m in self.messages], "notice": self.notice}
