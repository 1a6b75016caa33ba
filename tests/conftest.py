from __future__ import annotations

import os

# Settings are read at import time; point everything at throwaway resources first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OPENAI_API_KEY"] = "test-key"
os.environ["SEED_SAMPLE_DATA"] = "false"
os.environ.pop("COMPLETION_TIMEOUT_S", None)

import datetime as dt  # noqa: E402

import pytest  # noqa: E402

from database import SessionLocal, engine  # noqa: E402
from models import Base, TicketAnalysis  # noqa: E402


def ticket(**kw) -> dict:
    row = {
        "id": None,
        "report_period": "Dec 01 - Dec 15",
        "category": "Batterier",
        "subcategory": "Laddning",
        "issue": "Battery drains overnight",
        "summary": "Customer reports loss overnight",
        "common_issue": "Battery drain",
        "issue_summary": "Batteries lose charge while parked",
        "responsible_department": "Battery Engineering",
        "responsible_department_justification": "Cell chemistry",
        "link": None,
        "created_at": None,
    }
    row.update(kw)
    return row


@pytest.fixture
def seven_tickets() -> list[dict]:
    return [
        ticket(id=1, category="Batterier", subcategory="Laddning", common_issue="Battery drain"),
        ticket(id=2, category="Elnät", subcategory="Anslutning", common_issue="Grid connection",
               responsible_department="Installation Partners"),
        ticket(id=3, category="Batterier", subcategory="Garanti", common_issue="Warranty handling",
               responsible_department="Customer Care"),
        ticket(id=4, category="Andra", subcategory="Faktura", common_issue=None, responsible_department="Finance"),
        ticket(id=5, category="Batterier", subcategory="Laddning", common_issue="Battery drain"),
        ticket(id=6, category="Elnät", subcategory="Anslutning", common_issue="Grid connection",
               responsible_department="Installation Partners"),
        ticket(id=7, category="Andra", subcategory="App", common_issue="App login", responsible_department="Digital"),
    ]


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def add_tickets(db):
    def _add(rows: list[dict]) -> None:
        base = dt.datetime(2024, 12, 1, 8, 0, 0)
        for i, r in enumerate(rows):
            data = {k: v for k, v in r.items() if k not in ("id", "created_at")}
            t = TicketAnalysis(**data)
            if r.get("id") is not None:
                t.id = r["id"]
            t.created_at = r.get("created_at") or base + dt.timedelta(hours=i)
            db.add(t)
        db.commit()

    return _add
