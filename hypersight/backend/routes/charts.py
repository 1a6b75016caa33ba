from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from routes.tickets import STORE_UNAVAILABLE
from services.chart_aggregates import (
    DEFAULT_TOP_CATEGORIES,
    category_distribution,
    category_share,
    top_categories,
    top_issue_for_category,
)
from services.ticket_store import TicketStore, TicketStoreError

router = APIRouter(prefix="/api/charts", tags=["charts"])


def _selected(store: TicketStore, name: str, count: int, total: int) -> dict:
    # Scoped round trip to the store, not the rows already loaded for the chart.
    issues = store.fetch_issues_for_category(name)
    return {
        "category": name,
        "count": count,
        "share_pct": category_share(count, total),
        "top_issue": top_issue_for_category(issues, name),
    }


@router.get("/category_distribution")
def category_distribution_chart(db: Session = Depends(get_db)):
    try:
        rows = TicketStore(db).fetch_categories()
    except TicketStoreError as e:
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE) from e
    return {"rows": [{"name": c.name, "value": c.count} for c in category_distribution(rows)]}


@router.get("/top_categories")
def top_categories_chart(
    db: Session = Depends(get_db),
    limit: int = Query(DEFAULT_TOP_CATEGORIES, ge=1),
    category: str | None = None,
):
    """
    Top-N category slices plus the side panel for the selected slice.
    With no `category`, the largest slice is selected.
    """
    store = TicketStore(db)
    try:
        tallies = top_categories(store.fetch_categories(), limit)
        total = sum(c.count for c in tallies)
        selected = None
        pick = next((c for c in tallies if c.name == category), None) if category else (tallies[0] if tallies else None)
        if pick is not None:
            selected = _selected(store, pick.name, pick.count, total)
    except TicketStoreError as e:
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE) from e

    return {
        "rows": [{"name": c.name, "value": c.count} for c in tallies],
        "total": total,
        "selected": selected,
    }


@router.get("/top_issue")
def top_issue(category: str, db: Session = Depends(get_db)):
    try:
        issues = TicketStore(db).fetch_issues_for_category(category)
    except TicketStoreError as e:
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE) from e
    label = top_issue_for_category(issues, category)
    if label is None:
        raise HTTPException(status_code=404, detail=f"No issues recorded for category {category!r}")
    return {"category": category, "top_issue": label, "issue_rows": len(issues)}
