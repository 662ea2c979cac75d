from unittest.mock import AsyncMock

import pytest

from app.interview.conversation.conversation_manager import ConversationManager
from app.interview.evaluation.evaluation_engine import EvaluationEngine
from app.interview.orchestrator import AIInterviewerOrchestrator
from app.interview.questioning.question_strategy import QuestionStrategyEngine
from app.interview.scoring.scoring_report_service import ScoringReportService
from app.interview.session.interview_session_service import InterviewSessionService
from app.interview.session.session_store import MemorySessionStore

from tests.factories import FakeLlm


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store():
    return MemorySessionStore()


@pytest.fixture
def repository():
    """Interview repository double; no database is touched in tests."""
    repo = AsyncMock()
    repo.create_interview.return_value = True
    repo.complete_interview.return_value = True
    repo.save_report.return_value = "report-1"
    repo.get_report.return_value = None
    return repo


@pytest.fixture
def session_service(memory_store, repository):
    return InterviewSessionService(memory_store, repository, ttl_seconds=3600)


@pytest.fixture
def fake_llm():
    return FakeLlm()


@pytest.fixture
def orchestrator(session_service, fake_llm):
    return AIInterviewerOrchestrator(
        session_service=session_service,
        strategy=QuestionStrategyEngine(),
        evaluation_engine=EvaluationEngine(fake_llm),
        scoring_service=ScoringReportService(),
        conversation=ConversationManager(),
        llm=fake_llm,
    )
