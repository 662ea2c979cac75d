"""
AI interviewer orchestrator: ties together session, conversation, question
strategy, LLM and evaluation. The routers only call this class.
"""

import json
import logging
import re
from typing import Any, Dict, Optional, Tuple

from app.interview.conversation.conversation_manager import ConversationManager
from app.interview.evaluation.evaluation_engine import EvaluationEngine
from app.interview.models import (
    AnswerEvaluation,
    InterviewReport,
    InterviewRole,
    InterviewState,
    NextQuestion,
    TurnRole,
)
from app.interview.models.turn import utc_now_iso
from app.interview.questioning.question_strategy import QuestionStrategyEngine
from app.interview.scoring.scoring_report_service import ScoringReportService
from app.interview.session.interview_session_service import InterviewSessionService
from app.llm.client import LlmClient
from app.llm.template_store import render_template
from app.llm.utils import strip_code_fences

logger = logging.getLogger(__name__)

REPLY_TEMPERATURE = 0.4
REPLY_MAX_TOKENS = 320
REPLY_TIMEOUT_SECONDS = 10

QUESTION_SNIPPET_CHARS = 300
ANSWER_SNIPPET_CHARS = 800
MIN_PLAIN_TEXT_REPLY_CHARS = 15

# An answer below this normalized score or length gets a follow-up if one exists
FOLLOW_UP_SCORE_THRESHOLD = 0.5
FOLLOW_UP_MIN_ANSWER_CHARS = 50

CLOSING_REPLY = (
    "Thank you for your time today. That concludes our interview. "
    "You will receive feedback shortly."
)

SESSION_NOT_FOUND = "session_not_found"
NO_PENDING_QUESTION = "no_pending_question"

GREETING_PATTERN = re.compile(r"^(hi|hello|welcome)\b", re.IGNORECASE)


class SubmitAnswerResult:
    """Outcome of submitting a candidate answer."""

    def __init__(
        self,
        success: bool,
        state: Optional[InterviewState] = None,
        next_reply: Optional[str] = None,
        evaluation: Optional[Dict[str, float]] = None,
        report: Optional[InterviewReport] = None,
        failure_reason: Optional[str] = None,
    ):
        self.success = success
        self.state = state
        self.next_reply = next_reply
        # {"score": ..., "max_score": ...}
        self.evaluation = evaluation
        self.report = report
        self.failure_reason = failure_reason


class GetNextReplyResult:
    """Outcome of asking the interviewer for its next reply."""

    def __init__(
        self,
        success: bool,
        state: Optional[InterviewState] = None,
        reply: str = "",
        question_id: Optional[str] = None,
        phase: Optional[str] = None,
    ):
        self.success = success
        self.state = state
        self.reply = reply
        self.question_id = question_id
        self.phase = phase


def _role_label(role: InterviewRole) -> str:
    if role == InterviewRole.CUSTOMER_SUCCESS:
        return "customer success"
    return role.value.replace("_", " ")


def _evaluation_summary(evaluation: AnswerEvaluation) -> Dict[str, float]:
    return {"score": evaluation.score, "max_score": evaluation.max_score}


class AIInterviewerOrchestrator:
    """
    Single entry point for "get next AI reply" and "submit candidate answer".
    Enforces the turn order, evaluates answers and decides between a
    follow-up and the next question.
    """

    def __init__(
        self,
        session_service: InterviewSessionService,
        strategy: QuestionStrategyEngine,
        evaluation_engine: EvaluationEngine,
        scoring_service: ScoringReportService,
        conversation: ConversationManager,
        llm: LlmClient,
    ):
        self.session_service = session_service
        self.strategy = strategy
        self.evaluation_engine = evaluation_engine
        self.scoring_service = scoring_service
        self.conversation = conversation
        self.llm = llm

    def _with_greeting_if_first_turn(self, state: InterviewState, reply: str) -> str:
        """Prefixes the opening reply with a greeting unless it already has one."""
        trimmed = (reply or "").strip()
        if state.turns:
            return trimmed
        greeting = f"Hello! Welcome to this {_role_label(state.role)} interview."
        if not trimmed:
            return f"{greeting} Let's get started."
        if GREETING_PATTERN.match(trimmed):
            return trimmed
        return f"{greeting} {trimmed}"

    async def submit_answer(self, interview_id: str, answer_text: str) -> SubmitAnswerResult:
        """
        Evaluates a candidate answer, records it and produces the next AI reply.
        When no question is left, builds the report and ends the interview.

        Args:
            interview_id: Interview the answer belongs to
            answer_text: Candidate answer

        Returns:
            SubmitAnswerResult; failure_reason is set when success is False
        """
        state = await self.session_service.get_state(interview_id)
        if not state:
            return SubmitAnswerResult(False, failure_reason=SESSION_NOT_FOUND)

        last_turn = state.last_turn()
        if not last_turn or not last_turn.is_ai():
            logger.warning(f"Answer for {interview_id} rejected: no pending question")
            return SubmitAnswerResult(False, failure_reason=NO_PENDING_QUESTION)

        last_question_text = last_turn.content or ""
        last_question_id = last_turn.question_id
        competency_ids = (
            self.strategy.get_competency_ids_for_question_id(last_question_id)
            if last_question_id else []
        ) or ["communication"]

        evaluation = await self.evaluation_engine.evaluate(last_question_text, answer_text, competency_ids)

        candidate_turn = self.conversation.create_turn(TurnRole.CANDIDATE, answer_text, evaluation=evaluation)
        updated_state = await self.session_service.append_turn(
            interview_id,
            candidate_turn,
            topic_coverage={last_question_id: True} if last_question_id else None,
            current_difficulty=self.strategy.adjust_difficulty(
                state.current_difficulty, evaluation.normalized_score),
        )
        if not updated_state:
            return SubmitAnswerResult(True, evaluation=_evaluation_summary(evaluation))

        request_follow_up = (
            evaluation.normalized_score < FOLLOW_UP_SCORE_THRESHOLD
            or len(answer_text) < FOLLOW_UP_MIN_ANSWER_CHARS
        )
        next_question = await self.strategy.get_next_question(updated_state, request_follow_up=request_follow_up)

        if next_question is None:
            report = self.scoring_service.build_report(updated_state.copy_with(ended_at=utc_now_iso()))
            await self.session_service.end(interview_id, report)
            return SubmitAnswerResult(
                True,
                state=updated_state,
                next_reply=CLOSING_REPLY,
                evaluation=_evaluation_summary(evaluation),
                report=report,
            )

        reply, approximate_tokens = await self._generate_reply(
            updated_state, next_question, last_question_text, answer_text)
        final_state = await self._append_ai_turn(interview_id, reply, next_question, approximate_tokens)

        return SubmitAnswerResult(
            True,
            state=final_state or updated_state,
            next_reply=reply,
            evaluation=_evaluation_summary(evaluation),
        )

    async def get_next_reply(self, interview_id: str, force_next_phase: bool = False) -> GetNextReplyResult:
        """
        Produces the next AI reply without a candidate answer, e.g. the opening
        question or a reply after a forced phase change.
        """
        state = await self.session_service.get_state(interview_id)
        if not state:
            return GetNextReplyResult(False)

        is_first_question = not state.turns
        if is_first_question:
            next_question = await self.strategy.get_first_question(state.role)
        else:
            next_question = await self.strategy.get_next_question(state, force_next_phase=force_next_phase)

        if next_question is None:
            return GetNextReplyResult(False, state=state)

        if is_first_question:
            # Asked verbatim so the interview always opens with the background question
            raw_reply = next_question.question_text
            approximate_tokens = self.conversation.estimate_tokens(raw_reply)
        else:
            raw_reply, approximate_tokens = await self._generate_reply(state, next_question)

        reply = self._with_greeting_if_first_turn(state, raw_reply)
        updated_state = await self._append_ai_turn(interview_id, reply, next_question, approximate_tokens)

        return GetNextReplyResult(
            True,
            state=updated_state or state,
            reply=reply,
            question_id=next_question.question_id,
            phase=next_question.phase.value,
        )

    async def _append_ai_turn(self, interview_id: str, reply: str, next_question: NextQuestion,
                              approximate_tokens: int) -> Optional[InterviewState]:
        ai_turn = self.conversation.create_turn(
            TurnRole.AI,
            reply,
            question_id=next_question.question_id,
            coding_starter_code=next_question.starter_code,
            coding_language=next_question.language,
            is_coding_question=next_question.is_coding_question,
        )
        return await self.session_service.append_turn(
            interview_id,
            ai_turn,
            phase=next_question.phase,
            current_difficulty=next_question.difficulty,
            approximate_tokens=approximate_tokens,
        )

    def _build_system_prompt(self, state: InterviewState, prior_summary: Optional[str]) -> str:
        parts = [render_template("interviewer_system", phase=state.phase.value, role=state.role.value)]
        if state.resume_context:
            parts.append(render_template("interviewer_resume_block", resume_context=state.resume_context))
        if state.focus_areas:
            parts.append(render_template("interviewer_focus_block", focus_areas=state.focus_areas))
        if state.duration_minutes:
            parts.append(render_template("interviewer_duration_block", duration_minutes=state.duration_minutes))
        if prior_summary:
            parts.append("\n" + render_template("interviewer_prior_context", prior_summary=prior_summary))
        return "".join(parts)

    @staticmethod
    def _build_user_instruction(question_text: str, last_question: Optional[str],
                                last_answer: Optional[str]) -> str:
        answer_snippet = (last_answer or "")[:ANSWER_SNIPPET_CHARS].strip()
        question_snippet = (last_question or "")[:QUESTION_SNIPPET_CHARS].strip()

        if answer_snippet and question_snippet:
            return render_template("interviewer_reply_with_question", last_question=question_snippet,
                                   last_answer=answer_snippet, next_question=question_text)
        if answer_snippet:
            return render_template("interviewer_reply_to_answer", last_answer=answer_snippet,
                                   next_question=question_text)
        return render_template("interviewer_next_question", next_question=question_text)

    @staticmethod
    def parse_reply(raw: str, fallback: str) -> str:
        """
        Extracts the spoken reply from the LLM output. A JSON "reply" wins;
        plain text that looks like speech is used as is; anything else falls
        back to the planned question text.
        """
        text = strip_code_fences(raw or "")
        try:
            parsed: Any = json.loads(text)
        except ValueError:
            if len(text) > MIN_PLAIN_TEXT_REPLY_CHARS and not text.startswith("{"):
                return text
            return fallback

        if isinstance(parsed, dict) and isinstance(parsed.get("reply"), str) and parsed["reply"]:
            return parsed["reply"]
        return fallback

    async def _generate_reply(
        self,
        state: InterviewState,
        next_question: NextQuestion,
        last_question: Optional[str] = None,
        last_answer: Optional[str] = None,
    ) -> Tuple[str, int]:
        """
        Asks the LLM to phrase the next question in context.

        Returns:
            Tuple of (reply text, approximate tokens of the sent context plus the reply)
        """
        context = self.conversation.build_context(state)
        system_prompt = self._build_system_prompt(state, context.prior_summary)
        instruction = self._build_user_instruction(next_question.question_text, last_question, last_answer)

        messages = [{"role": "system", "content": system_prompt}]
        messages.extend(context.messages)
        messages.append({"role": "user", "content": instruction})

        response = await self.llm.chat(
            messages,
            temperature=REPLY_TEMPERATURE,
            max_tokens=REPLY_MAX_TOKENS,
            timeout=REPLY_TIMEOUT_SECONDS,
        )
        if response.is_stub:
            reply = next_question.question_text
        else:
            reply = self.parse_reply(response.content, next_question.question_text)

        return reply, context.approximate_tokens + self.conversation.estimate_tokens(reply)

    async def get_report(self, interview_id: str) -> Optional[InterviewReport]:
        """Builds the report from the live session, or None if the session is gone."""
        state = await self.session_service.get_state(interview_id)
        if not state:
            return None
        return self.scoring_service.build_report(state.copy_with(ended_at=state.ended_at or utc_now_iso()))
