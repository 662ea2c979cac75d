import json
from unittest.mock import AsyncMock

import pytest

from app.interview.conversation.conversation_manager import ConversationManager
from app.interview.evaluation.evaluation_engine import PARSE_FAILURE_FLAG, EvaluationEngine
from app.interview.models import DifficultyLevel, InterviewPhase, InterviewRole, QuestionTemplate
from app.interview.orchestrator import (
    CLOSING_REPLY,
    NO_PENDING_QUESTION,
    SESSION_NOT_FOUND,
    AIInterviewerOrchestrator,
)
from app.interview.questioning.question_bank import DEMO_QUESTIONS
from app.interview.questioning.question_strategy import QuestionStrategyEngine
from app.interview.scoring.scoring_report_service import ScoringReportService
from app.interview.session.interview_session_service import StartInterviewInput
from app.llm.client import LlmClient
from tests.factories import (
    INTERVIEWER_REPLY,
    LONG_ANSWER,
    WEAK_EVALUATION,
    FakeLlm,
    ai_turn,
)


async def _start(session_service, role=InterviewRole.TECHNICAL, **kwargs):
    interview_id, _ = await session_service.start(StartInterviewInput("cand-1", role, **kwargs))
    return interview_id


def _orchestrator(session_service, llm, strategy=None):
    return AIInterviewerOrchestrator(
        session_service=session_service,
        strategy=strategy or QuestionStrategyEngine(),
        evaluation_engine=EvaluationEngine(llm),
        scoring_service=ScoringReportService(),
        conversation=ConversationManager(),
        llm=llm,
    )


# ───────────────────────── opening reply ──────────────────

@pytest.mark.asyncio
async def test_first_reply_uses_intro_question_verbatim(orchestrator, session_service, fake_llm):
    interview_id = await _start(session_service)

    result = await orchestrator.get_next_reply(interview_id)

    intro = next(q for q in DEMO_QUESTIONS if q.id == "intro-1")
    assert result.success
    assert result.reply == intro.text
    assert result.question_id == "intro-1"
    assert result.phase == "intro"
    assert fake_llm.calls == []

    state = await session_service.get_state(interview_id)
    assert len(state.turns) == 1
    assert state.turns[0].is_ai()
    assert state.current_difficulty == DifficultyLevel.EASY
    assert state.approximate_tokens > 0


@pytest.mark.asyncio
async def test_first_reply_gets_greeting_prefix(orchestrator, session_service):
    interview_id = await _start(session_service, role=InterviewRole.SALES)

    result = await orchestrator.get_next_reply(interview_id)

    assert result.reply == (
        "Hello! Welcome to this sales interview. "
        "Tell me a bit about your background and what interests you about this sales role."
    )


@pytest.mark.asyncio
async def test_greeting_uses_readable_role_label(orchestrator, session_service):
    interview_id = await _start(session_service, role=InterviewRole.CUSTOMER_SUCCESS)

    result = await orchestrator.get_next_reply(interview_id)

    assert result.reply.startswith("Hello! Welcome to this customer success interview.")


@pytest.mark.asyncio
async def test_next_reply_for_unknown_session(orchestrator):
    result = await orchestrator.get_next_reply("missing")

    assert not result.success
    assert result.state is None


@pytest.mark.asyncio
async def test_force_next_phase_skips_ahead(orchestrator, session_service, fake_llm):
    interview_id = await _start(session_service)
    await orchestrator.get_next_reply(interview_id)

    result = await orchestrator.get_next_reply(interview_id, force_next_phase=True)

    assert result.success
    assert result.question_id == "tech-1"
    assert result.phase == "technical"
    assert result.reply == INTERVIEWER_REPLY
    assert len(fake_llm.calls_of("reply")) == 1


# ───────────────────────── answers ────────────────────────

@pytest.mark.asyncio
async def test_submit_answer_evaluates_and_asks_next_question(orchestrator, session_service, fake_llm):
    interview_id = await _start(session_service)
    await orchestrator.get_next_reply(interview_id)

    result = await orchestrator.submit_answer(interview_id, LONG_ANSWER)

    assert result.success
    assert result.next_reply == INTERVIEWER_REPLY
    assert result.evaluation == {"score": 8, "max_score": 10}
    assert result.report is None

    state = result.state
    assert state.phase == InterviewPhase.TECHNICAL
    assert state.topic_coverage == {"intro-1": True}
    assert [t.role.value for t in state.turns] == ["ai", "candidate", "ai"]
    assert state.turns[1].evaluation.score == 8
    assert state.turns[2].question_id == "tech-1"
    assert state.approximate_tokens > 0


@pytest.mark.asyncio
async def test_token_estimate_tracks_history_without_compounding(orchestrator, session_service):
    interview_id = await _start(session_service)
    await orchestrator.get_next_reply(interview_id)

    for _ in range(4):
        result = await orchestrator.submit_answer(interview_id, LONG_ANSWER)

        state = result.state
        history = sum(ConversationManager.estimate_tokens(t.content) for t in state.turns)
        assert state.approximate_tokens == history

    assert [t.question_id for t in state.turns if t.is_ai()] == [
        "intro-1", "tech-1", "tech-2", "tech-follow", "beh-1"]


@pytest.mark.asyncio
async def test_reply_prompt_and_llm_parameters(orchestrator, session_service, fake_llm):
    interview_id = await _start(session_service, focus_areas="distributed systems", duration_minutes=30,
                                resume_context="Candidate name: Alex")
    await orchestrator.get_next_reply(interview_id)

    await orchestrator.submit_answer(interview_id, LONG_ANSWER)

    call = fake_llm.calls_of("reply")[0]
    assert call["temperature"] == 0.4
    assert call["max_tokens"] == 320
    assert call["timeout"] == 10

    system_prompt = call["messages"][0]["content"]
    assert "Current phase: intro. Role type: technical." in system_prompt
    assert "Candidate name: Alex" in system_prompt
    assert "distributed systems" in system_prompt
    assert "30 minutes" in system_prompt

    instruction = call["messages"][-1]["content"]
    assert LONG_ANSWER in instruction
    assert "Describe a technical challenge you recently solved" in instruction
    # history sits between the system prompt and the instruction
    assert call["messages"][1]["role"] == "assistant"
    assert call["messages"][2] == {"role": "user", "content": LONG_ANSWER}


@pytest.mark.asyncio
async def test_submit_answer_unknown_session(orchestrator):
    result = await orchestrator.submit_answer("missing", "Hello")

    assert not result.success
    assert result.failure_reason == SESSION_NOT_FOUND


@pytest.mark.asyncio
async def test_submit_answer_without_pending_question(orchestrator, session_service, fake_llm):
    interview_id = await _start(session_service)

    result = await orchestrator.submit_answer(interview_id, LONG_ANSWER)

    assert not result.success
    assert result.failure_reason == NO_PENDING_QUESTION
    assert fake_llm.calls == []


@pytest.mark.asyncio
async def test_weak_answer_triggers_follow_up(session_service):
    design = QuestionTemplate(
        id="sys-design",
        role=InterviewRole.TECHNICAL,
        phase=InterviewPhase.TECHNICAL,
        difficulty=DifficultyLevel.HARD,
        text="How would you design a rate limiter?",
        competency_ids=["technical_depth"],
        follow_up_prompt="Ask about distributed counters",
    )
    templates = AsyncMock()
    templates.list_for_strategy.return_value = [design]
    llm = FakeLlm(evaluation=WEAK_EVALUATION)
    orchestrator = _orchestrator(session_service, llm, QuestionStrategyEngine(templates))

    interview_id = await _start(session_service)
    state = await session_service.get_state(interview_id)
    state.phase = InterviewPhase.TECHNICAL
    state.current_difficulty = DifficultyLevel.HARD
    state.turns.append(ai_turn(design.text, "sys-design"))
    await session_service.set_state(interview_id, state)

    result = await orchestrator.submit_answer(interview_id, "Not sure, maybe a counter?")

    assert result.success
    assert result.state.turns[-1].question_id == "sys-design-follow"
    assert result.state.topic_coverage["sys-design"] is True
    assert result.evaluation == {"score": 3, "max_score": 10}


@pytest.mark.asyncio
async def test_plain_text_reply_is_used(session_service):
    llm = FakeLlm(reply_content="That sounds like a solid project. What was the hardest part?")
    orchestrator = _orchestrator(session_service, llm)
    interview_id = await _start(session_service)
    await orchestrator.get_next_reply(interview_id)

    result = await orchestrator.submit_answer(interview_id, LONG_ANSWER)

    assert result.next_reply == "That sounds like a solid project. What was the hardest part?"


@pytest.mark.asyncio
async def test_unusable_reply_falls_back_to_question_text(session_service):
    llm = FakeLlm(reply_content=json.dumps({"intent": "next_question"}))
    orchestrator = _orchestrator(session_service, llm)
    interview_id = await _start(session_service)
    await orchestrator.get_next_reply(interview_id)

    result = await orchestrator.submit_answer(interview_id, LONG_ANSWER)

    tech_1 = next(q for q in DEMO_QUESTIONS if q.id == "tech-1")
    assert result.next_reply == tech_1.text


@pytest.mark.asyncio
async def test_stub_model_asks_planned_question_and_leaves_answer_unscored(session_service):
    orchestrator = _orchestrator(session_service, LlmClient(None, "test-model"))
    interview_id = await _start(session_service)
    await orchestrator.get_next_reply(interview_id)

    result = await orchestrator.submit_answer(interview_id, LONG_ANSWER)

    tech_1 = next(q for q in DEMO_QUESTIONS if q.id == "tech-1")
    assert result.next_reply == tech_1.text
    assert result.evaluation == {"score": 0, "max_score": 10}
    assert result.state.turns[1].evaluation.red_flags == [PARSE_FAILURE_FLAG]


@pytest.mark.parametrize("raw, expected", [
    ('{"reply": "Nice. Next question?"}', "Nice. Next question?"),
    ('```json\n{"reply": "Fenced reply"}\n```', "Fenced reply"),
    ("Interesting, tell me more about that.", "Interesting, tell me more about that."),
    ("Okay.", "PLANNED"),
    ('{"reply": ""}', "PLANNED"),
    ('{"reply": "unterminated', "PLANNED"),
])
def test_parse_reply(raw, expected):
    assert AIInterviewerOrchestrator.parse_reply(raw, "PLANNED") == expected


# ───────────────────────── end of interview ───────────────

@pytest.mark.asyncio
async def test_last_answer_ends_interview_with_report(orchestrator, session_service, repository):
    interview_id = await _start(session_service, role=InterviewRole.SALES)
    state = await session_service.get_state(interview_id)
    state.phase = InterviewPhase.WRAP_UP
    state.turns.append(ai_turn("Do you have any questions for me?", "fallback-sales-wrap_up"))
    await session_service.set_state(interview_id, state)

    result = await orchestrator.submit_answer(interview_id, LONG_ANSWER)

    assert result.success
    assert result.next_reply == CLOSING_REPLY
    assert result.report is not None
    assert result.report.overall_score == 8
    assert result.report.max_score == 10
    repository.complete_interview.assert_awaited_once()
    repository.save_report.assert_awaited_once_with(result.report)

    stored = await session_service.get_state(interview_id)
    assert stored.ended_at == result.report.ended_at

    again = await orchestrator.submit_answer(interview_id, "One more thing")
    assert again.failure_reason == NO_PENDING_QUESTION


@pytest.mark.asyncio
async def test_get_report(orchestrator, session_service):
    assert await orchestrator.get_report("missing") is None

    interview_id = await _start(session_service)
    await orchestrator.get_next_reply(interview_id)
    await orchestrator.submit_answer(interview_id, LONG_ANSWER)

    report = await orchestrator.get_report(interview_id)

    assert report.interview_id == interview_id
    assert report.candidate_id == "cand-1"
    assert len(report.question_answer_summary) == 1
    assert report.ended_at


@pytest.mark.asyncio
async def test_weak_answer_lowers_difficulty_for_next_question(session_service):
    def template(question_id, difficulty):
        return QuestionTemplate(id=question_id, role=InterviewRole.TECHNICAL, phase=InterviewPhase.TECHNICAL,
                                difficulty=difficulty, text=f"Question {question_id}")

    templates = AsyncMock()
    templates.list_for_strategy.return_value = [
        template("q-first", DifficultyLevel.MEDIUM),
        template("q-medium", DifficultyLevel.MEDIUM),
        template("q-easy", DifficultyLevel.EASY),
    ]
    orchestrator = _orchestrator(session_service, FakeLlm(evaluation=WEAK_EVALUATION),
                                 QuestionStrategyEngine(templates))
    interview_id = await _start(session_service)
    state = await session_service.get_state(interview_id)
    state.phase = InterviewPhase.TECHNICAL
    state.turns.append(ai_turn("Question q-first", "q-first"))
    await session_service.set_state(interview_id, state)

    result = await orchestrator.submit_answer(interview_id, LONG_ANSWER)

    assert result.state.turns[-1].question_id == "q-easy"
    assert result.state.current_difficulty == DifficultyLevel.EASY
