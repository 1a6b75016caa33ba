from __future__ import annotations

from collections import Counter
from typing import Any

from services.ticket_filters import LabelCount

DEFAULT_TOP_CATEGORIES = 5


def _tally_present(rows: list[dict[str, Any]], key: str) -> Counter:
    # Rows with an empty/absent label are not counted at all.
    return Counter(r[key] for r in rows if r.get(key))


def category_distribution(rows: list[dict[str, Any]]) -> list[LabelCount]:
    return [LabelCount(name=k, count=v) for k, v in _tally_present(rows, "category").items()]


def top_categories(rows: list[dict[str, Any]], limit: int = DEFAULT_TOP_CATEGORIES) -> list[LabelCount]:
    ranked = sorted(category_distribution(rows), key=lambda c: c.count, reverse=True)
    return ranked[: max(0, int(limit))]


def top_issue_for_category(rows: list[dict[str, Any]], category: str) -> str | None:
    counts = _tally_present([r for r in rows if r.get("category") == category], "issue")
    if not counts:
        return None
    # most_common keeps first-seen order on ties.
    return counts.most_common(1)[0][0]


def category_share(count: int, total: int) -> float | None:
    if total <= 0:
        return None
    return round(count * 100.0 / total, 1)
