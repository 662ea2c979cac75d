"""
Conversation manager: turns the stored Q&A history into LLM-ready messages,
keeps the context within the token budget and enforces turn order.
"""

import logging
import math
from typing import Dict, List, Optional

from app.interview import settings
from app.interview.models import AnswerEvaluation, InterviewState, Turn, TurnRole

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN_ESTIMATE = 4
MAX_CONTEXT_TOKENS = settings.MAX_CONTEXT_TOKENS
SUMMARIZE_THRESHOLD = math.floor(MAX_CONTEXT_TOKENS * 0.75)

# Context is only trimmed for conversations longer than this
MIN_TURNS_FOR_SUMMARY = 10
RECENT_TURNS_KEPT = 12

PRIOR_SUMMARY_PLACEHOLDER = (
    "Earlier in the interview, the candidate answered several questions. "
    "The following is a brief summary: [Summarization would be inserted here "
    "by a background job or inline summarizer]."
)


class ConversationContext:
    """Messages for the next LLM call plus the resulting token estimate."""

    def __init__(self, messages: List[Dict[str, str]], approximate_tokens: int,
                 prior_summary: Optional[str] = None):
        self.messages = messages
        self.prior_summary = prior_summary
        self.approximate_tokens = approximate_tokens


class ConversationManager:
    """
    All context passed to the LLM goes through this class.
    """

    def __init__(self, max_context_tokens: int = MAX_CONTEXT_TOKENS):
        self.max_context_tokens = max_context_tokens
        self.summarize_threshold = math.floor(max_context_tokens * 0.75)

    @staticmethod
    def estimate_tokens(text: str) -> int:
        """Conservative token estimate from the string length."""
        return math.ceil(len(text) / CHARS_PER_TOKEN_ESTIMATE)

    @staticmethod
    def _to_message(turn: Turn) -> Dict[str, str]:
        role = "assistant" if turn.role == TurnRole.AI else "user"
        return {"role": role, "content": turn.content}

    def build_context(self, state: InterviewState) -> ConversationContext:
        """
        Builds the context for the next LLM call.

        When the token estimate of the whole history exceeds the summarize
        threshold and the conversation is long enough, older turns are
        replaced by a prior summary and only the most recent turns are kept.
        Summarization itself is stubbed with a fixed placeholder. The returned
        estimate covers only what is sent: the summary plus the selected turns.

        Args:
            state: Current interview state

        Returns:
            ConversationContext with messages, optional prior summary and token estimate
        """
        turns = state.turns
        history_tokens = sum(self.estimate_tokens(turn.content) for turn in turns)
        total_tokens = 0
        prior_summary = None

        if history_tokens > self.summarize_threshold and len(turns) > MIN_TURNS_FOR_SUMMARY:
            prior_summary = PRIOR_SUMMARY_PLACEHOLDER
            total_tokens = self.estimate_tokens(prior_summary)
            selected = turns[-RECENT_TURNS_KEPT:]
            logger.info(f"Context over budget for {state.interview_id}, keeping last {len(selected)} turns")
        else:
            selected = turns

        messages = []
        for turn in selected:
            messages.append(self._to_message(turn))
            total_tokens += self.estimate_tokens(turn.content)

        return ConversationContext(messages, total_tokens, prior_summary)

    @staticmethod
    def create_turn(
        role: TurnRole,
        content: str,
        question_id: Optional[str] = None,
        evaluation: Optional[AnswerEvaluation] = None,
        coding_starter_code: Optional[str] = None,
        coding_language: Optional[str] = None,
        is_coding_question: bool = False,
    ) -> Turn:
        """Creates a new turn with a fresh id and the current timestamp."""
        return Turn(
            role=role,
            content=content,
            question_id=question_id,
            evaluation=evaluation,
            coding_starter_code=coding_starter_code,
            coding_language=coding_language,
            is_coding_question=is_coding_question,
        )

    @staticmethod
    def next_speaker(turns: List[Turn]) -> TurnRole:
        """The AI opens the interview; afterwards speakers alternate."""
        if not turns:
            return TurnRole.AI
        return TurnRole.CANDIDATE if turns[-1].role == TurnRole.AI else TurnRole.AI

    @staticmethod
    def last_turn_was_candidate(turns: List[Turn]) -> bool:
        return bool(turns) and turns[-1].role == TurnRole.CANDIDATE
