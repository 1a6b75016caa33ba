from __future__ import annotations

import datetime as dt

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class TicketAnalysis(Base):
    """
    One analyzed support ticket. The table is owned by the upstream analysis job;
    this service only reads it (seeding aside).
    """

    __tablename__ = "ticket_analysis"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    report_period: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    category: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    subcategory: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)

    issue: Mapped[str | None] = mapped_column(Text, nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    common_issue: Mapped[str | None] = mapped_column(String(256), nullable=True, index=True)
    issue_summary: Mapped[str | None] = mapped_column(Text, nullable=True)

    responsible_department: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    responsible_department_justification: Mapped[str | None] = mapped_column(Text, nullable=True)
    link: Mapped[str | None] = mapped_column(String(512), nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime, default=lambda: dt.datetime.now(dt.timezone.utc).replace(tzinfo=None), nullable=False)


# Column order used when rows are surfaced as plain dicts.
TICKET_COLUMNS: tuple[str, ...] = (
    "id",
    "report_period",
    "category",
    "subcategory",
    "issue",
    "summary",
    "common_issue",
    "issue_summary",
    "responsible_department",
    "responsible_department_justification",
    "link",
    "created_at",
)
