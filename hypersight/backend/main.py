from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from database import engine, session_scope
from models import Base
from routes import assistant as assistant_routes
from routes import charts as chart_routes
from routes import tickets as ticket_routes
from services.seed_service import SeedService


def _seed_if_empty() -> None:
    svc = SeedService()
    with session_scope() as db:
        if svc.has_any_data(db):
            return
        if not os.path.exists(settings.sample_csv_path):
            print(f"[SEED] Sample CSV not found at {settings.sample_csv_path}; skipping.")
            return
        svc.ingest_csv(db, settings.sample_csv_path)


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name)

    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(ticket_routes.router)
    app.include_router(chart_routes.router)
    app.include_router(assistant_routes.router)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.on_event("startup")
    def _startup() -> None:
        print(f"[CONFIG] APP_ENV={settings.env}")
        print(f"[CONFIG] DATABASE_URL={settings.database_url}")
        print(f"[CONFIG] TICKET_FETCH_LIMIT={settings.ticket_fetch_limit}")
        print(f"[CONFIG] COMPLETION_MODEL={settings.completion_model}")
        print(f"[CONFIG] OPENAI_API_KEY set={bool(settings.openai_api_key)}")

        if settings.recreate_db_on_startup:
            Base.metadata.drop_all(bind=engine)
        Base.metadata.create_all(bind=engine)

        # Seed sample data for local demo (only if the table is empty)
        if settings.seed_sample_data:
            _seed_if_empty()

    return app


app = create_app()
