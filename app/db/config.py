# backend/app/db/config.py
from __future__ import annotations
import os
from urllib.parse import quote_plus

DEFAULT_POSTGRES_URL = "postgresql+asyncpg://localhost:5432/ai_interviewer"


def _build_pg_url() -> str:
    if url := os.getenv("DATABASE_URL"):
        # Heroku commonly provides postgres://, but SQLAlchemy asyncpg expects
        # postgresql+asyncpg://
        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        return url

    user = os.getenv("DB_USER")
    if not user:
        return DEFAULT_POSTGRES_URL

    password = quote_plus(os.getenv("DB_PASSWORD", ""))
    host = os.getenv("DB_HOST")
    port = os.getenv("DB_PORT")
    name = os.getenv("DB_NAME")

    missing = [k for k, v in {
        "DB_PASSWORD": password,
        "DB_HOST": host,
        "DB_PORT": port,
        "DB_NAME": name,
    }.items() if not v]

    if missing:
        raise RuntimeError(f"Missing environment variables: {', '.join(missing)}")

    return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{name}"

POSTGRES_URL: str = _build_pg_url()
