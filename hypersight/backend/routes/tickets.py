from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from services.chart_aggregates import top_issue_for_category
from services.issue_grouping import TableState, group_by_common_issue
from services.ticket_filters import ALL_DEPARTMENTS, FilterSelection, apply_filter, compute_options
from services.ticket_store import TicketStore, TicketStoreError

router = APIRouter(prefix="/api", tags=["tickets"])

STORE_UNAVAILABLE = "Ticket analysis data unavailable"


def _load_all(db: Session) -> list[dict]:
    try:
        return TicketStore(db).fetch_all()
    except TicketStoreError as e:
        raise HTTPException(status_code=503, detail=STORE_UNAVAILABLE) from e


def _parse_state(
    period: str | None,
    category: str | None,
    theme: str | None,
    department: str | None,
    sort_ascending: bool,
    expanded: list[str],
) -> TableState:
    keys = frozenset(k for k in expanded if k)
    return TableState(
        selection=FilterSelection(
            period=period or None,
            category=category or None,
            subcategory=theme or None,
            department=department or ALL_DEPARTMENTS,
        ),
        sort_ascending=sort_ascending,
        expanded=keys,
    )


@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db)):
    rows = _load_all(db)
    categories = list(dict.fromkeys(r.get("category") for r in rows))
    return {
        "total_tickets": len(rows),
        "categories": categories,
        # Derived from the rows already loaded; /api/charts/top_issue asks the store again.
        "top_issue_by_category": {c: top_issue_for_category(rows, c) for c in categories if c},
    }


@router.get("/tickets")
def tickets(db: Session = Depends(get_db)):
    rows = _load_all(db)
    return {"rows": rows, "count": len(rows)}


@router.get("/tickets/table")
def ticket_table(
    db: Session = Depends(get_db),
    period: str | None = None,
    category: str | None = None,
    theme: str | None = None,
    department: str | None = None,
    sort_ascending: bool = False,
    expanded: list[str] = Query(default=[]),
    toggle: str | None = None,
):
    """
    Ticket table view model: dropdown options, the filtered ticket count and the
    issue groups ordered by ticket volume.

    `expanded` repeats once per open issue key (`?expanded=a&expanded=b`); `toggle`
    flips one key before rendering.
    """
    state = _parse_state(period, category, theme, department, sort_ascending, expanded)
    if toggle:
        state = state.toggled(toggle)

    rows = _load_all(db)
    filtered = apply_filter(rows, state.selection)
    options = compute_options(rows, state.selection, sort_ascending=state.sort_ascending, filtered=filtered)
    groups = group_by_common_issue(filtered, state.sort_ascending)

    return {
        "selection": {
            "period": state.selection.period,
            "category": state.selection.category,
            "theme": state.selection.subcategory,
            "department": state.selection.department,
        },
        "sort_ascending": state.sort_ascending,
        "options": options.as_dict(),
        "filtered_count": len(filtered),
        "groups": [g.as_dict(expanded=g.issue in state.expanded) for g in groups],
        "expanded": sorted(state.expanded),
    }
