"""
Builds the interview engine services and exposes them as FastAPI dependencies.
Tests replace them via app.dependency_overrides.
"""

import logging
from typing import Optional

from app.db.session import get_sessionmaker
from app.interview import settings
from app.interview.conversation.conversation_manager import ConversationManager
from app.interview.data.interview_repository import InterviewRepository, QuestionTemplateRepository
from app.interview.evaluation.evaluation_engine import EvaluationEngine
from app.interview.orchestrator import AIInterviewerOrchestrator
from app.interview.questioning.question_strategy import QuestionStrategyEngine
from app.interview.scoring.scoring_report_service import ScoringReportService
from app.interview.session.interview_session_service import InterviewSessionService
from app.interview.session.session_store import get_session_store
from app.llm.client import get_llm_client

logger = logging.getLogger(__name__)

_repository: Optional[InterviewRepository] = None
_session_service: Optional[InterviewSessionService] = None
_orchestrator: Optional[AIInterviewerOrchestrator] = None


def get_interview_repository() -> InterviewRepository:
    global _repository
    if _repository is None:
        _repository = InterviewRepository(get_sessionmaker())
    return _repository


def get_session_service() -> InterviewSessionService:
    global _session_service
    if _session_service is None:
        _session_service = InterviewSessionService(
            get_session_store(), get_interview_repository(), settings.SESSION_TTL_SECONDS)
    return _session_service


def get_orchestrator() -> AIInterviewerOrchestrator:
    """Process-wide orchestrator wired to the configured store, database and LLM."""
    global _orchestrator
    if _orchestrator is None:
        llm = get_llm_client()
        _orchestrator = AIInterviewerOrchestrator(
            session_service=get_session_service(),
            strategy=QuestionStrategyEngine(QuestionTemplateRepository(get_sessionmaker())),
            evaluation_engine=EvaluationEngine(llm),
            scoring_service=ScoringReportService(),
            conversation=ConversationManager(settings.MAX_CONTEXT_TOKENS),
            llm=llm,
        )
        logger.info("Interview orchestrator initialized")
    return _orchestrator
