from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from database import get_db
from services.assistant_service import AssistantService, ChatMessage, ChatTranscript
from services.completion_client import CompletionError
from services.ticket_store import TicketStore, TicketStoreError

router = APIRouter(prefix="/api/assistant", tags=["assistant"])


class AskRequest(BaseModel):
    query: str


class ChartRequest(BaseModel):
    prompt: str


class ChatRequest(BaseModel):
    prompt: str
    messages: list[dict[str, Any]] | None = None
    # "tickets" grounds the answer in ticket rows; "charts" in the category distribution.
    mode: Literal["tickets", "charts"] = "tickets"


def _svc() -> AssistantService:
    return AssistantService()


def _error(e: Exception) -> JSONResponse:
    print(f"[ASSISTANT] request failed: {type(e).__name__}: {e}")
    return JSONResponse(status_code=500, content={"error": str(e)})


@router.post("/ask")
def ask(body: AskRequest, db: Session = Depends(get_db)):
    try:
        context = TicketStore(db).fetch_assistant_context()
        res = _svc().ask(body.query, context)
    except (TicketStoreError, CompletionError, OSError) as e:
        return _error(e)
    return {"answer": res.answer, "suggestions": list(res.suggestions)}


@router.post("/analyze_charts")
def analyze_charts(body: ChartRequest, db: Session = Depends(get_db)):
    try:
        rows = TicketStore(db).fetch_categories()
        res = _svc().analyze_charts(body.prompt, rows)
    except (TicketStoreError, CompletionError, OSError) as e:
        return _error(e)
    return res.as_dict()


@router.post("/chat")
def chat(body: ChatRequest, db: Session = Depends(get_db)):
    """
    One chat-panel turn. The client sends its transcript back with each prompt;
    the reply (or the apology on failure) is appended and returned.
    """
    transcript = ChatTranscript.from_dicts(body.messages)
    svc = _svc()
    store = TicketStore(db)

    def _answer(question: str) -> ChatMessage:
        if body.mode == "charts":
            res = svc.analyze_charts(question, store.fetch_categories())
            return ChatMessage(text=res.analysis, is_user=False, chart_type=res.chart_type, chart_data=res.chart_data)
        res = svc.ask(question, store.fetch_assistant_context())
        return ChatMessage(text=res.answer, is_user=False)

    transcript.submit(body.prompt, _answer)
    return transcript.as_dict()
