from __future__ import annotations

import unicodedata
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable

ALL_DEPARTMENTS = "All"

# Fixed placement in the category dropdown; everything else sorts by name between them.
PINNED_FIRST_CATEGORY = "Batterier"
PINNED_LAST_CATEGORY = "Andra"


@dataclass(frozen=True)
class FilterSelection:
    period: str | None = None
    category: str | None = None
    subcategory: str | None = None
    department: str = ALL_DEPARTMENTS


@dataclass(frozen=True)
class LabelCount:
    name: str | None
    count: int

    def as_dict(self) -> dict:
        return {"name": self.name, "count": self.count}


@dataclass(frozen=True)
class FilterOptions:
    periods: list[str | None] = field(default_factory=list)
    categories: list[LabelCount] = field(default_factory=list)
    subcategories: list[LabelCount] = field(default_factory=list)
    departments: list[str | None] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "periods": list(self.periods),
            "categories": [c.as_dict() for c in self.categories],
            "subcategories": [s.as_dict() for s in self.subcategories],
            "departments": list(self.departments),
        }


def _distinct(values: Iterable[Any]) -> list[Any]:
    # dict keeps discovery order
    return list(dict.fromkeys(values))


def _tally(rows: list[dict[str, Any]], key: str) -> Counter:
    return Counter(r.get(key) for r in rows)


def _collation_key(name: str) -> tuple[str, str, str]:
    # Base letters first (accents and case ignored), then accents, then lowercase before uppercase.
    decomposed = unicodedata.normalize("NFKD", name)
    base = "".join(c for c in decomposed if not unicodedata.combining(c))
    return (base.casefold(), name.casefold(), name.swapcase())


def category_sort_key(name: str | None) -> tuple[int, int, tuple[str, str, str]]:
    if name == PINNED_FIRST_CATEGORY:
        return (0, 0, ("", "", ""))
    if name == PINNED_LAST_CATEGORY:
        return (2, 0, ("", "", ""))
    # A missing label still needs a stable slot; it goes after the named ones.
    if name is None:
        return (1, 1, ("", "", ""))
    return (1, 0, _collation_key(name))


def apply_filter(rows: list[dict[str, Any]], selection: FilterSelection) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for r in rows:
        if selection.period and r.get("report_period") != selection.period:
            continue
        if selection.category and r.get("category") != selection.category:
            continue
        if selection.subcategory and r.get("subcategory") != selection.subcategory:
            continue
        if selection.department != ALL_DEPARTMENTS and r.get("responsible_department") != selection.department:
            continue
        out.append(r)
    return out


def compute_options(
    rows: list[dict[str, Any]],
    selection: FilterSelection,
    *,
    sort_ascending: bool = False,
    filtered: list[dict[str, Any]] | None = None,
) -> FilterOptions:
    """
    Dropdown contents for the ticket table.

    Periods come from the full row set; categories, subcategories and departments
    from the filtered set, so a selection narrows the other lists.
    """
    if filtered is None:
        filtered = apply_filter(rows, selection)

    periods = _distinct(r.get("report_period") for r in rows)

    cat_counts = _tally(filtered, "category")
    categories = sorted(
        (LabelCount(name=k, count=v) for k, v in cat_counts.items()),
        key=lambda c: category_sort_key(c.name),
    )

    subcategories: list[LabelCount] = []
    if selection.category:
        sub_counts = _tally(filtered, "subcategory")
        names = _distinct(r.get("subcategory") for r in filtered if r.get("category") == selection.category)
        subcategories = sorted(
            (LabelCount(name=n, count=sub_counts.get(n, 0)) for n in names),
            key=lambda s: s.count,
            reverse=not sort_ascending,
        )

    departments = [ALL_DEPARTMENTS, *_distinct(r.get("responsible_department") for r in filtered)]

    return FilterOptions(
        periods=periods,
        categories=categories,
        subcategories=subcategories,
        departments=departments,
    )
