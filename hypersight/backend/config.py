import os
from pathlib import Path

# Repo root is always the parent of /backend (i.e., hypersight/)
repo_root = Path(__file__).resolve().parent.parent

# Load local environment variables (do NOT commit secrets).
# Lets developers provide OPENAI_API_KEY / DATABASE_URL via hypersight/.env.
try:
    from dotenv import load_dotenv  # type: ignore

    load_dotenv(repo_root / ".env", override=False)
except ImportError:
    # Without python-dotenv we continue with the process env.
    pass
from dataclasses import dataclass


def _optional_int(name: str) -> int | None:
    val = os.getenv(name)
    if val is None or val.strip() == "":
        return None
    return int(val)


@dataclass(frozen=True)
class Settings:
    app_name: str = "HyperSight Backend"
    env: str = os.getenv("APP_ENV", os.getenv("ENV", "local"))

    cors_origins: str = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    # Hosted ticket store. Any SQLAlchemy URL works; production points at the hosted Postgres.
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./hypersight.db")
    ticket_fetch_limit: int = int(os.getenv("TICKET_FETCH_LIMIT", "10000"))

    # Chat completion service (OpenAI-compatible).
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    completion_endpoint: str = os.getenv("COMPLETION_ENDPOINT", "https://api.openai.com/v1/chat/completions")
    completion_model: str = os.getenv("COMPLETION_MODEL", "gpt-4o-mini")
    completion_temperature: float = float(os.getenv("COMPLETION_TEMPERATURE", "0.7"))
    completion_max_tokens: int = int(os.getenv("COMPLETION_MAX_TOKENS", "500"))
    # Unset means no timeout: a hung call blocks until the client gives up.
    completion_timeout_s: int | None = _optional_int("COMPLETION_TIMEOUT_S")

    # Seeding
    seed_sample_data: bool = os.getenv("SEED_SAMPLE_DATA", "false").lower() in ("1", "true", "yes")
    sample_csv_path: str = os.getenv("SAMPLE_CSV_PATH", str((repo_root / "data/sample_tickets.csv").resolve()))

    recreate_db_on_startup: bool = os.getenv("RECREATE_DB_ON_STARTUP", "false").lower() in ("1", "true", "yes")


settings = Settings()
