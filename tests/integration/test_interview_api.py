import asyncio
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from app.interview import settings
from app.interview.conversation.conversation_manager import ConversationManager
from app.interview.dependencies import get_orchestrator
from app.interview.evaluation.evaluation_engine import EvaluationEngine
from app.interview.models import InterviewRole
from app.interview.orchestrator import AIInterviewerOrchestrator
from app.interview.questioning.question_bank import DEMO_QUESTIONS
from app.interview.questioning.question_strategy import QuestionStrategyEngine
from app.interview.scoring.scoring_report_service import ScoringReportService
from app.interview.session.interview_session_service import InterviewSessionService, StartInterviewInput
from app.interview.session.session_store import MemorySessionStore
from app.main import app
from tests.factories import INTERVIEWER_REPLY, LONG_ANSWER, FakeLlm, ai_turn, candidate_turn, evaluation, make_state


@pytest.fixture
def repository():
    repo = AsyncMock()
    repo.create_interview.return_value = True
    repo.complete_interview.return_value = True
    repo.save_report.return_value = "report-1"
    repo.get_report.return_value = None
    return repo


@pytest.fixture
def orchestrator(repository):
    llm = FakeLlm()
    return AIInterviewerOrchestrator(
        session_service=InterviewSessionService(MemorySessionStore(), repository, ttl_seconds=3600),
        strategy=QuestionStrategyEngine(),
        evaluation_engine=EvaluationEngine(llm),
        scoring_service=ScoringReportService(),
        conversation=ConversationManager(),
        llm=llm,
    )


@pytest.fixture
def client(orchestrator):
    # no context manager: startup would try to reach the database
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


def _start(client, **payload):
    body = {"candidate_id": "cand-42", "role": "technical"}
    body.update(payload)
    response = client.post("/interview/start", json=body)
    assert response.status_code == 200, response.text
    return response.json()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_templates_listing(client):
    data = client.get("/templates").json()

    assert set(data) == {"interviewer", "evaluation"}


def test_start_returns_opening_question(client):
    data = _start(client)

    intro = next(q for q in DEMO_QUESTIONS if q.id == "intro-1")
    assert data["interview_id"]
    assert data["reply"] == intro.text
    assert data["question_id"] == "intro-1"
    assert data["phase"] == "intro"
    assert data["resume_match_score"] is None


def test_start_with_resume_computes_match_score(client, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "RESUME_UPLOAD_DIR", str(tmp_path))
    (tmp_path / "resume.txt").write_text("Python and Postgres engineer", encoding="utf-8")

    data = _start(client, resume_url="https://app.example.com/uploads/resumes/resume.txt",
                  job_description="Python Postgres Kubernetes", candidate_name="Alex Doe")

    assert data["resume_match_score"] == 67
    state = client.get(f"/interview/{data['interview_id']}/state").json()
    assert state["resume_context"].startswith("Candidate name: Alex Doe")
    assert "Python and Postgres engineer" in state["resume_context"]


def test_start_ignores_server_file_paths(client, tmp_path):
    secret = tmp_path / "server_secret.txt"
    secret.write_text("DB_PASSWORD=hunter2", encoding="utf-8")

    data = _start(client, resume_url=str(secret), job_description="DB_PASSWORD")

    assert data["resume_match_score"] == 0
    state = client.get(f"/interview/{data['interview_id']}/state").json()
    assert state["resume_context"] is None


def test_start_validation_errors(client):
    assert client.post("/interview/start", json={"role": "technical"}).status_code == 422
    assert client.post("/interview/start", json={"candidate_id": "c", "role": "pilot"}).status_code == 422
    assert client.post("/interview/start", json={"candidate_id": "c", "duration_minutes": 0}).status_code == 422


def test_answer_flow_and_state(client):
    interview_id = _start(client)["interview_id"]

    response = client.post(f"/interview/{interview_id}/answer", json={"answer": LONG_ANSWER})

    assert response.status_code == 200
    data = response.json()
    assert data["reply"] == INTERVIEWER_REPLY
    assert data["phase"] == "technical"
    assert data["evaluation"] == {"score": 8, "max_score": 10}
    assert data["completed"] is False
    assert data["report"] is None

    state = client.get(f"/interview/{interview_id}/state").json()
    assert [t["role"] for t in state["turns"]] == ["ai", "candidate", "ai"]
    assert state["topic_coverage"] == {"intro-1": True}


def test_empty_answer_is_rejected(client):
    interview_id = _start(client)["interview_id"]

    response = client.post(f"/interview/{interview_id}/answer", json={"answer": ""})

    assert response.status_code == 422


def test_answer_without_pending_question(client, orchestrator):
    interview_id, _ = asyncio.run(
        orchestrator.session_service.start(StartInterviewInput("cand-42", InterviewRole.TECHNICAL)))

    response = client.post(f"/interview/{interview_id}/answer", json={"answer": LONG_ANSWER})

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "NO_PENDING_QUESTION"


def test_unexpected_error_becomes_500(client, orchestrator, monkeypatch):
    interview_id = _start(client)["interview_id"]
    monkeypatch.setattr(orchestrator, "submit_answer", AsyncMock(side_effect=RuntimeError("boom")))

    response = client.post(f"/interview/{interview_id}/answer", json={"answer": LONG_ANSWER})

    assert response.status_code == 500


def test_unknown_session_returns_404(client):
    assert client.post("/interview/missing/answer", json={"answer": "Hi"}).status_code == 404
    assert client.get("/interview/missing/state").status_code == 404
    assert client.post("/interview/missing/end").status_code == 404

    response = client.post("/interview/missing/next", json={})
    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "SESSION_NOT_FOUND"


def test_next_can_skip_to_next_phase(client):
    interview_id = _start(client)["interview_id"]

    response = client.post(f"/interview/{interview_id}/next", json={"force_next_phase": True})

    assert response.status_code == 200
    assert response.json() == {"reply": INTERVIEWER_REPLY, "question_id": "tech-1", "phase": "technical"}


def test_end_interview_returns_report(client, repository):
    interview_id = _start(client)["interview_id"]
    client.post(f"/interview/{interview_id}/answer", json={"answer": LONG_ANSWER})

    response = client.post(f"/interview/{interview_id}/end")

    assert response.status_code == 200
    report = response.json()
    assert report["interview_id"] == interview_id
    assert report["candidate_id"] == "cand-42"
    assert report["overall_score"] == 8
    assert report["max_score"] == 10
    assert report["recommendation"] == "strong_hire"
    assert len(report["question_answer_summary"]) == 1
    repository.complete_interview.assert_awaited_once()
    repository.save_report.assert_awaited_once()

    state = client.get(f"/interview/{interview_id}/state").json()
    assert state["ended_at"] == report["ended_at"]


def test_report_from_live_session(client):
    interview_id = _start(client)["interview_id"]
    client.post(f"/interview/{interview_id}/answer", json={"answer": LONG_ANSWER})

    response = client.get(f"/report/{interview_id}")

    assert response.status_code == 200
    assert response.json()["interview_id"] == interview_id


def test_report_falls_back_to_stored_report(client, repository):
    stored = ScoringReportService().build_report(make_state(
        interview_id="old-interview",
        turns=[ai_turn("Tell me about yourself.", "intro-1"), candidate_turn("I build things.", evaluation(6))],
        ended_at="2026-01-05T10:30:00+00:00",
    ))
    repository.get_report.return_value = stored

    response = client.get("/report/old-interview")

    assert response.status_code == 200
    assert response.json()["interview_id"] == "old-interview"
    assert response.json()["overall_score"] == 6
    repository.get_report.assert_awaited_once_with("old-interview")


def test_report_not_found(client):
    response = client.get("/report/missing")

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "SESSION_NOT_FOUND"
