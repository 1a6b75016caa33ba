from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from models import TicketAnalysis

# Fields the assistant is allowed to see. Never ids or timestamps.
ASSISTANT_CONTEXT_COLUMNS: tuple[str, ...] = (
    "summary",
    "issue",
    "common_issue",
    "category",
    "subcategory",
    "link",
    "responsible_department_justification",
)


@dataclass
class TicketStoreError(Exception):
    message: str
    query: str

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.query}: {self.message}"


class TicketStore:
    """
    Read-only access to the ticket_analysis table.
    Every method is a single round trip and returns plain dict rows keyed by column name.
    Failures surface as TicketStoreError; nothing is retried.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def fetch_all(self, *, limit: int | None = None) -> list[dict[str, Any]]:
        cap = settings.ticket_fetch_limit if limit is None else int(limit)
        q = select(TicketAnalysis).order_by(TicketAnalysis.created_at.desc(), TicketAnalysis.id.desc()).limit(cap)
        rows = self._run("fetch_all", q)
        return [_ticket_dict(t) for (t,) in rows]

    def fetch_categories(self) -> list[dict[str, Any]]:
        q = select(TicketAnalysis.category).where(TicketAnalysis.category.is_not(None)).order_by(TicketAnalysis.id)
        rows = self._run("fetch_categories", q)
        return [{"category": c} for (c,) in rows]

    def fetch_issues_for_category(self, category: str) -> list[dict[str, Any]]:
        q = (
            select(TicketAnalysis.category, TicketAnalysis.issue)
            .where(TicketAnalysis.category == category, TicketAnalysis.issue.is_not(None))
            .order_by(TicketAnalysis.id)
        )
        rows = self._run("fetch_issues_for_category", q)
        return [{"category": c, "issue": i} for (c, i) in rows]

    def fetch_assistant_context(self) -> list[dict[str, Any]]:
        cols = [getattr(TicketAnalysis, c) for c in ASSISTANT_CONTEXT_COLUMNS]
        rows = self._run("fetch_assistant_context", select(*cols).order_by(TicketAnalysis.id))
        return [dict(zip(ASSISTANT_CONTEXT_COLUMNS, r)) for r in rows]

    def _run(self, name: str, q):
        try:
            return self.db.execute(q).all()
        except SQLAlchemyError as e:
            print(f"[STORE] {name} failed: {type(e).__name__}: {e}")
            raise TicketStoreError(message=f"{type(e).__name__}: {e}", query=name) from e


def _ticket_dict(t: TicketAnalysis) -> dict[str, Any]:
    return {
        "id": t.id,
        "report_period": t.report_period,
        "category": t.category,
        "subcategory": t.subcategory,
        "issue": t.issue,
        "summary": t.summary,
        "common_issue": t.common_issue,
        "issue_summary": t.issue_summary,
        "responsible_department": t.responsible_department,
        "responsible_department_justification": t.responsible_department_justification,
        "link": t.link,
        "created_at": t.created_at.isoformat() if t.created_at else None,
    }
