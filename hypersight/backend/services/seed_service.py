from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from pathlib import Path

import pandas as pd
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from models import TICKET_COLUMNS, TicketAnalysis

# Export header aliases -> table column. Headers are matched after normalization.
_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("id", "ticket_id"),
    "report_period": ("report_period", "period"),
    "category": ("category",),
    "subcategory": ("subcategory", "sub_category", "theme"),
    "issue": ("issue", "ticket_issue", "description"),
    "summary": ("summary", "ticket_summary"),
    "common_issue": ("common_issue",),
    "issue_summary": ("issue_summary",),
    "responsible_department": ("responsible_department", "department"),
    "responsible_department_justification": ("responsible_department_justification", "justification"),
    "link": ("link", "url"),
    "created_at": ("created_at", "created", "created_date"),
}


def _norm_col(h: object) -> str:
    return str(h).strip().lower().replace(" ", "_").replace("-", "_")


def _clean(v: object) -> str | None:
    if v is None or (isinstance(v, float) and pd.isna(v)):
        return None
    s = str(v).strip()
    return s or None


def _parse_created(v: object) -> dt.datetime | None:
    s = _clean(v)
    if not s:
        return None
    ts = pd.to_datetime(s, errors="coerce", utc=True)
    if pd.isna(ts):
        return None
    return ts.tz_convert(None).to_pydatetime()


@dataclass(frozen=True)
class SeedResult:
    csv_path: str
    inserted: int
    skipped_duplicates: int


class SeedService:
    """Loads a CSV export of analyzed tickets into ticket_analysis (local/demo use)."""

    def has_any_data(self, db: Session) -> bool:
        return int(db.execute(select(func.count()).select_from(TicketAnalysis)).scalar_one() or 0) > 0

    def load_dataframe(self, csv_path: str) -> pd.DataFrame:
        p = Path(csv_path)
        if not p.exists():
            raise FileNotFoundError(csv_path)
        df = pd.read_csv(p, dtype=str, keep_default_na=False, encoding="utf-8-sig")
        norm = {_norm_col(c): c for c in df.columns}
        rename: dict[str, str] = {}
        for col, aliases in _ALIASES.items():
            for a in aliases:
                if a in norm:
                    rename[norm[a]] = col
                    break
        df = df.rename(columns=rename)
        if "category" not in df.columns:
            raise ValueError("CSV must include at least a category column (case-insensitive).")
        return df[[c for c in TICKET_COLUMNS if c in df.columns]]

    def ingest_csv(self, db: Session, csv_path: str) -> SeedResult:
        df = self.load_dataframe(csv_path)
        existing = set(db.execute(select(TicketAnalysis.id)).scalars().all())

        inserted = 0
        skipped = 0
        for rec in df.to_dict(orient="records"):
            raw_id = _clean(rec.get("id"))
            ticket_id = int(raw_id) if raw_id and raw_id.isdigit() else None
            if ticket_id is not None and ticket_id in existing:
                skipped += 1
                continue

            t = TicketAnalysis(
                report_period=_clean(rec.get("report_period")),
                category=_clean(rec.get("category")),
                subcategory=_clean(rec.get("subcategory")),
                issue=_clean(rec.get("issue")),
                summary=_clean(rec.get("summary")),
                common_issue=_clean(rec.get("common_issue")),
                issue_summary=_clean(rec.get("issue_summary")),
                responsible_department=_clean(rec.get("responsible_department")),
                responsible_department_justification=_clean(rec.get("responsible_department_justification")),
                link=_clean(rec.get("link")),
            )
            if ticket_id is not None:
                t.id = ticket_id
                existing.add(ticket_id)
            created = _parse_created(rec.get("created_at"))
            if created is not None:
                t.created_at = created
            db.add(t)
            inserted += 1

        db.flush()
        print(f"[SEED] {csv_path}: inserted={inserted} skipped_duplicates={skipped}")
        return SeedResult(csv_path=str(csv_path), inserted=inserted, skipped_duplicates=skipped)
