"""
Session handling for the interview engine: TTL key-value store and the
session lifecycle service.
"""

from app.interview.session.session_store import (
    MemorySessionStore,
    SessionStore,
    SqlSessionStore,
    get_session_store,
    set_session_store,
)
from app.interview.session.interview_session_service import InterviewSessionService, StartInterviewInput
