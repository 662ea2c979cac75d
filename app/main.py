# backend/main.py
"""
FastAPI backend for the AI interviewer: interview sessions, answer
evaluation and recruiter reports.
"""
from __future__ import annotations
import logging
import os
from typing import Dict, List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .db.session import init_models
from .llm.template_store import list_template_names

from app.routers import interview, report

# ───────────────────────── logging ──────────────────────────────────────────
logging.basicConfig(
    format="%(asctime)s — %(name)s — %(levelname)s — %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)


def _get_allowed_origins() -> list[str]:
    default_origins = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    configured_origins = os.getenv("CORS_ORIGINS", "")
    origins = [
        origin.strip()
        for origin in configured_origins.split(",")
        if origin.strip()
    ]
    for origin in default_origins:
        if origin not in origins:
            origins.append(origin)
    return origins


# ───────────────────────── FastAPI app ──────────────────────────────────────
app = FastAPI(title="AI Interviewer Backend")
app.include_router(interview.router)
app.include_router(report.router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ───────────────────────── ensure DB schema ─────────────────────────────────
@app.on_event("startup")
async def on_startup() -> None:
    """Makes sure all required tables exist."""
    await init_models()

# ───────────────────────── routes ───────────────────────────────────────────
@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get("/templates", response_model=Dict[str, List[str]])
async def list_templates() -> Dict[str, List[str]]:
    logger.info("GET /templates")
    return list_template_names()

# ───────────────────────── dev entrypoint ───────────────────────────────────
if __name__ == "__main__":
    import uvicorn

    host, port = "0.0.0.0", 8000
    logger.info("Starting dev server on http://%s:%d", host, port)
    uvicorn.run("app.main:app", host=host, port=port, reload=True)
