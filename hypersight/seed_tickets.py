#!/usr/bin/env python3
from __future__ import annotations

import sys
from pathlib import Path


def main() -> int:
    if len(sys.argv) < 2:
        print("Usage: python hypersight/seed_tickets.py <csv_path>")
        return 2

    csv_path = sys.argv[1]

    # Import from backend package (works regardless of current working directory)
    repo_root = Path(__file__).resolve().parent
    sys.path.insert(0, str((repo_root / "backend").resolve()))
    from database import engine, session_scope  # type: ignore
    from models import Base  # type: ignore
    from services.seed_service import SeedService  # type: ignore

    Base.metadata.create_all(bind=engine)
    with session_scope() as db:
        res = SeedService().ingest_csv(db, csv_path)
    print(f"inserted={res.inserted} skipped_duplicates={res.skipped_duplicates} csv={res.csv_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
