# backend/app/interview/settings.py
from __future__ import annotations
import os


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {name} must be an integer, got '{raw}'") from None


# ───────────────────────── session store ────────────────────────────────────
# "memory" (default) keeps live state in-process, "database" uses the session_states table
SESSION_STORE_URL: str = os.getenv("SESSION_STORE_URL", "memory").strip().lower()

# 4 hours, long enough for an interview plus report generation
SESSION_TTL_SECONDS: int = _int_env("SESSION_TTL_SECONDS", 4 * 60 * 60)

# ───────────────────────── context budgeting ────────────────────────────────
MAX_CONTEXT_TOKENS: int = _int_env("MAX_CONTEXT_TOKENS", 12000)

# ───────────────────────── LLM ──────────────────────────────────────────────
LLM_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
LLM_BASE_URL: str = os.getenv("LLM_BASE_URL", "https://api.openai.com/v1")
LLM_MODEL: str = os.getenv("LLM_MODEL", "gpt-4o-mini")

# ───────────────────────── resumes ──────────────────────────────────────────
# Resume URLs under /uploads/resumes/ are read from this directory
RESUME_UPLOAD_DIR: str = os.getenv("RESUME_UPLOAD_DIR", os.path.join("uploads", "resumes"))
