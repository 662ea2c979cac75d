"""
Interview session service: create, load, update and end interview sessions.
The session store holds the live state during the interview; the database
keeps the interview row and the final report for reporting and audit.
"""

import json
import logging
import uuid
from typing import Dict, List, Optional, Tuple

from app.interview.data.interview_repository import InterviewRepository
from app.interview.models import (
    DEFAULT_PHASE_ORDER,
    DifficultyLevel,
    InterviewPhase,
    InterviewReport,
    InterviewRole,
    InterviewState,
    ScheduledCustomQuestion,
    Turn,
)
from app.interview.models.turn import utc_now_iso
from app.interview.session.session_store import SESSION_TTL_SECONDS, SessionStore, session_key

logger = logging.getLogger(__name__)


class StartInterviewInput:
    """Parameters for starting an interview."""

    def __init__(
        self,
        candidate_id: str,
        role: InterviewRole,
        position_id: Optional[str] = None,
        resume_context: Optional[str] = None,
        preferred_difficulty: Optional[DifficultyLevel] = None,
        custom_questions: Optional[List[ScheduledCustomQuestion]] = None,
        focus_areas: Optional[str] = None,
        duration_minutes: Optional[int] = None,
    ):
        self.candidate_id = candidate_id
        self.role = role
        self.position_id = position_id
        self.resume_context = resume_context
        self.preferred_difficulty = preferred_difficulty
        self.custom_questions = custom_questions or []
        self.focus_areas = focus_areas
        self.duration_minutes = duration_minutes


class InterviewSessionService:
    """
    Manages the lifecycle of interview sessions.
    """

    def __init__(self, store: SessionStore, repository: InterviewRepository,
                 ttl_seconds: int = SESSION_TTL_SECONDS):
        self.store = store
        self.repository = repository
        self.ttl_seconds = ttl_seconds

    async def start(self, data: StartInterviewInput) -> Tuple[str, InterviewState]:
        """
        Creates a new interview: writes the initial state to the session store
        and inserts the interview row. The phase starts at intro.

        Returns:
            Tuple of (interview_id, initial state)
        """
        interview_id = str(uuid.uuid4())
        now = utc_now_iso()

        state = InterviewState(
            interview_id=interview_id,
            candidate_id=data.candidate_id,
            role=data.role,
            started_at=now,
            phase=InterviewPhase.INTRO,
            current_difficulty=data.preferred_difficulty or DifficultyLevel.MEDIUM,
            preferred_difficulty=data.preferred_difficulty,
            custom_questions=data.custom_questions,
            resume_context=data.resume_context,
            focus_areas=data.focus_areas,
            duration_minutes=data.duration_minutes,
            approximate_tokens=0,
        )

        await self.set_state(interview_id, state)
        await self.repository.create_interview(
            interview_id, data.candidate_id, data.role, now, position_id=data.position_id)

        logger.info(f"Started interview {interview_id} for candidate {data.candidate_id} ({data.role.value})")
        return interview_id, state

    async def get_state(self, interview_id: str) -> Optional[InterviewState]:
        """
        Loads the session state and refreshes its TTL.

        Returns:
            The state, or None if the session expired, does not exist or is corrupt
        """
        key = session_key(interview_id)
        raw = await self.store.get(key)
        if not raw:
            return None
        try:
            state = InterviewState.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Corrupt session state for {interview_id}: {e}")
            return None
        await self.store.expire(key, self.ttl_seconds)
        return state

    async def set_state(self, interview_id: str, state: InterviewState) -> None:
        """Writes the state and refreshes the TTL."""
        await self.store.setex(session_key(interview_id), self.ttl_seconds, json.dumps(state.to_dict()))

    async def append_turn(
        self,
        interview_id: str,
        turn: Turn,
        phase: Optional[InterviewPhase] = None,
        topic_coverage: Optional[Dict[str, bool]] = None,
        current_difficulty: Optional[DifficultyLevel] = None,
        approximate_tokens: Optional[int] = None,
    ) -> Optional[InterviewState]:
        """
        Appends a turn and applies optional state updates.
        Topic coverage is merged into the existing coverage; the other fields
        are overwritten when given.

        Returns:
            The updated state, or None if the session does not exist
        """
        state = await self.get_state(interview_id)
        if not state:
            logger.warning(f"Cannot append turn: session {interview_id} not found")
            return None

        state.turns.append(turn)
        if phase is not None:
            state.phase = phase
        if topic_coverage is not None:
            state.topic_coverage = {**state.topic_coverage, **topic_coverage}
        if current_difficulty is not None:
            state.current_difficulty = current_difficulty
        if approximate_tokens is not None:
            state.approximate_tokens = approximate_tokens

        await self.set_state(interview_id, state)
        return state

    async def end(self, interview_id: str, report: Optional[InterviewReport] = None) -> bool:
        """
        Ends the interview: marks the row completed and stores the report if
        given. Session state stays in the store until its TTL runs out so the
        report can still be regenerated.
        """
        now = utc_now_iso()
        state = await self.get_state(interview_id)
        if state and not state.ended_at:
            state.ended_at = report.ended_at if report else now
            await self.set_state(interview_id, state)

        await self.repository.complete_interview(interview_id, now)

        if report:
            await self.repository.save_report(report)

        logger.info(f"Ended interview {interview_id}")
        return True

    def get_phase_order(self) -> List[InterviewPhase]:
        """Returns the phases in order (for the question strategy)."""
        return list(DEFAULT_PHASE_ORDER)
