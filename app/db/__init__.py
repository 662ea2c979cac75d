# backend/app/db/__init__.py
"""
Re-exports for convenient importing:

    from app.db import Base, get_db, engine, async_session
"""
from .base import Base            # noqa: F401
from .session import get_db, get_sessionmaker, engine, async_session   # noqa: F401
