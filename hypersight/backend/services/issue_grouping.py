from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from services.ticket_filters import FilterSelection

UNCATEGORIZED = "Uncategorized"


@dataclass
class IssueGroup:
    issue: str
    tickets: list[dict[str, Any]] = field(default_factory=list)
    count: int = 0
    # Taken from the first ticket seen for this issue; later tickets never overwrite them.
    summary: str | None = None
    department: str | None = None

    def as_dict(self, *, expanded: bool = False) -> dict:
        return {
            "issue": self.issue,
            "count": self.count,
            "summary": self.summary,
            "department": self.department,
            "expanded": expanded,
            "tickets": list(self.tickets),
        }


@dataclass(frozen=True)
class TableState:
    """
    Everything the ticket table view owns: the filter selection, the sort
    direction and which issue groups are expanded. Aggregations never mutate it.
    """

    selection: FilterSelection = field(default_factory=FilterSelection)
    sort_ascending: bool = False
    expanded: frozenset[str] = frozenset()

    def toggled(self, issue: str) -> "TableState":
        return replace(self, expanded=toggle_expanded(self.expanded, issue))


def issue_key(row: dict[str, Any]) -> str:
    return row.get("common_issue") or UNCATEGORIZED


def group_by_common_issue(rows: list[dict[str, Any]], sort_ascending: bool = False) -> list[IssueGroup]:
    groups: dict[str, IssueGroup] = {}
    for r in rows:
        key = issue_key(r)
        g = groups.get(key)
        if g is None:
            g = IssueGroup(
                issue=key,
                summary=r.get("issue_summary"),
                department=r.get("responsible_department"),
            )
            groups[key] = g
        g.tickets.append(r)
        g.count += 1

    # sorted() is stable in both directions, so ties keep first-insertion order.
    return sorted(groups.values(), key=lambda g: g.count, reverse=not sort_ascending)


def toggle_expanded(expanded: frozenset[str], issue: str) -> frozenset[str]:
    if issue in expanded:
        return expanded - {issue}
    return expanded | {issue}
