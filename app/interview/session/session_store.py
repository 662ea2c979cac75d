"""
Key-value session store with TTL for live interview state.
Provides an in-process store (default) and a database-backed store that
shares state across worker processes.
"""
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.models_interview import SessionStateRow
from app.interview import settings

logger = logging.getLogger(__name__)

KEY_PREFIX = "ai_interview:"

SESSION_TTL_SECONDS = settings.SESSION_TTL_SECONDS


def session_key(interview_id: str) -> str:
    return f"{KEY_PREFIX}session:{interview_id}"


def context_key(interview_id: str) -> str:
    return f"{KEY_PREFIX}context:{interview_id}"


class SessionStore:
    """
    Minimal key-value interface used by the interview session service.
    """

    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def setex(self, key: str, seconds: int, value: str) -> None:
        raise NotImplementedError

    async def expire(self, key: str, seconds: int) -> bool:
        raise NotImplementedError

    async def delete(self, key: str) -> bool:
        raise NotImplementedError


class MemorySessionStore(SessionStore):
    """
    In-process store. Entries expire after their TTL; expired entries are
    evicted on read and by a cleanup pass every `cleanup_interval` seconds.
    """

    def __init__(self, cleanup_interval: float = 60.0, clock=time.time):
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._cleanup_interval = cleanup_interval
        self._clock = clock
        self._last_cleanup = clock()

    async def get(self, key: str) -> Optional[str]:
        self._cleanup_expired()
        entry = self._entries.get(key)
        if not entry:
            return None
        value, expiry_ts = entry
        if self._clock() > expiry_ts:
            del self._entries[key]
            return None
        return value

    async def setex(self, key: str, seconds: int, value: str) -> None:
        self._entries[key] = (value, self._clock() + seconds)

    async def expire(self, key: str, seconds: int) -> bool:
        entry = self._entries.get(key)
        if not entry or self._clock() > entry[1]:
            return False
        self._entries[key] = (entry[0], self._clock() + seconds)
        return True

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def _cleanup_expired(self) -> None:
        """Removes expired entries, at most once per cleanup interval."""
        now = self._clock()
        if now - self._last_cleanup < self._cleanup_interval:
            return
        self._last_cleanup = now

        expired = [key for key, (_, expiry_ts) in self._entries.items() if now > expiry_ts]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info(f"Removed {len(expired)} expired session entries")


class SqlSessionStore(SessionStore):
    """
    Store backed by the `session_states` table. Expired rows are deleted on
    read and by a purge that runs from `setex` at most once per `cleanup_interval`.
    """

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession], cleanup_interval: float = 60.0,
                 clock=time.time):
        self._sessionmaker = sessionmaker
        self._cleanup_interval = cleanup_interval
        self._clock = clock
        self._last_cleanup = clock()

    @staticmethod
    def _expiry(seconds: int) -> datetime:
        return datetime.now(timezone.utc) + timedelta(seconds=seconds)

    @staticmethod
    def _is_expired(expires_at: datetime) -> bool:
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) > expires_at

    async def get(self, key: str) -> Optional[str]:
        async with self._sessionmaker() as db:
            row = await db.scalar(select(SessionStateRow).where(SessionStateRow.key == key))
            if not row:
                return None
            if self._is_expired(row.expires_at):
                await db.delete(row)
                await db.commit()
                return None
            return row.value

    async def setex(self, key: str, seconds: int, value: str) -> None:
        async with self._sessionmaker() as db:
            try:
                row = await db.get(SessionStateRow, key)
                if row:
                    row.value = value
                    row.expires_at = self._expiry(seconds)
                else:
                    db.add(SessionStateRow(key=key, value=value, expires_at=self._expiry(seconds)))
                await db.commit()
            except SQLAlchemyError:
                logger.error(f"Failed to write session key {key}", exc_info=True)
                await db.rollback()
                raise

        await self._maybe_purge()

    async def expire(self, key: str, seconds: int) -> bool:
        async with self._sessionmaker() as db:
            row = await db.get(SessionStateRow, key)
            if not row or self._is_expired(row.expires_at):
                return False
            row.expires_at = self._expiry(seconds)
            await db.commit()
            return True

    async def delete(self, key: str) -> bool:
        async with self._sessionmaker() as db:
            result = await db.execute(delete(SessionStateRow).where(SessionStateRow.key == key))
            await db.commit()
            return bool(result.rowcount)

    async def purge_expired(self) -> int:
        """Deletes all expired rows. Returns the number of removed rows."""
        async with self._sessionmaker() as db:
            result = await db.execute(
                delete(SessionStateRow).where(SessionStateRow.expires_at < datetime.now(timezone.utc))
            )
            await db.commit()
            return result.rowcount or 0

    async def _maybe_purge(self) -> None:
        now = self._clock()
        if now - self._last_cleanup < self._cleanup_interval:
            return
        self._last_cleanup = now
        try:
            removed = await self.purge_expired()
        except SQLAlchemyError as e:
            logger.error(f"Failed to purge expired session rows: {e}")
            return
        if removed:
            logger.info(f"Removed {removed} expired session rows")


_store: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """
    Returns the process-wide session store, creating it on first use.
    SESSION_STORE_URL selects the backend: "memory" (default) or "database".
    """
    global _store
    if _store is None:
        if settings.SESSION_STORE_URL == "database":
            from app.db.session import get_sessionmaker

            logger.info("Using database store for session state")
            _store = SqlSessionStore(get_sessionmaker())
        else:
            logger.info("Using in-memory store for session state. "
                        "Set SESSION_STORE_URL=database to share state across workers.")
            _store = MemorySessionStore()
    return _store


def set_session_store(store: Optional[SessionStore]) -> None:
    """Replaces the process-wide session store (None resets to lazy creation)."""
    global _store
    _store = store
