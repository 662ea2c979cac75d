"""
Evaluation engine: scores a single answer (relevance, structure, depth),
detects red flags and maps the answer to competencies.
The rubric lives in the prompt; no demographic inference.
"""

import logging
from typing import Any, Dict, List, Optional

from app.interview.models import AnswerEvaluation, MAX_SCORE
from app.llm.client import LlmClient
from app.llm.template_store import render_chat
from app.llm.utils import parse_json_object

logger = logging.getLogger(__name__)

EVALUATION_TEMPERATURE = 0.3
EVALUATION_MAX_TOKENS = 256

PARSE_FAILURE_FLAG = "Could not parse evaluation"
PARSE_FAILURE_FEEDBACK = "Evaluation unavailable."


def _clamp_score(value: Any, default: float) -> float:
    """Clamps a score to 0..MAX_SCORE; non-numeric values fall back to the default."""
    if value is None or isinstance(value, bool):
        number = default
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            number = default
    if number != number:  # NaN
        number = default
    return min(MAX_SCORE, max(0, number))


def _unscored(competency_ids: List[str]) -> AnswerEvaluation:
    """Zero evaluation flagged for review."""
    return AnswerEvaluation(
        score=0,
        relevance=0,
        structure=0,
        depth=0,
        competency_ids=competency_ids,
        red_flags=[PARSE_FAILURE_FLAG],
        feedback_snippet=PARSE_FAILURE_FEEDBACK,
    )


def _string_list(value: Any, default: List[str]) -> List[str]:
    if not isinstance(value, list):
        return list(default)
    return [str(item) for item in value if item]


class EvaluationEngine:
    """
    Asks the LLM to score one answer and normalizes the result.
    """

    def __init__(self, llm: LlmClient):
        self.llm = llm

    async def evaluate(self, question: str, answer: str, competency_ids: List[str]) -> AnswerEvaluation:
        """
        Evaluates a candidate answer.

        Args:
            question: Question the candidate answered
            answer: Candidate answer text
            competency_ids: Competencies to map the answer to

        Returns:
            AnswerEvaluation with normalized_score = score / MAX_SCORE
        """
        messages = render_chat(
            "evaluation_system",
            "evaluation_answer",
            question=question,
            answer=answer,
            competency_ids=", ".join(competency_ids),
        )

        response = await self.llm.chat(messages, temperature=EVALUATION_TEMPERATURE,
                                       max_tokens=EVALUATION_MAX_TOKENS)
        if response.is_stub:
            logger.warning("No model response available, answer left unscored")
            return _unscored(competency_ids)
        return self.parse_evaluation_response(response.content, competency_ids)

    @staticmethod
    def parse_evaluation_response(raw: str, competency_ids: List[str]) -> AnswerEvaluation:
        """
        Parses the LLM output. Sub-scores default to the overall score; an
        unparseable response yields a zero evaluation carrying a red flag.
        """
        parsed: Optional[Dict[str, Any]] = parse_json_object(raw or "")
        if parsed is None:
            logger.error("Could not parse evaluation response")
            return _unscored(competency_ids)

        score = _clamp_score(parsed.get("score"), 0)
        feedback = parsed.get("feedbackSnippet")
        return AnswerEvaluation(
            score=score,
            relevance=_clamp_score(parsed.get("relevance"), score),
            structure=_clamp_score(parsed.get("structure"), score),
            depth=_clamp_score(parsed.get("depth"), score),
            competency_ids=_string_list(parsed.get("competencyIds"), competency_ids),
            red_flags=_string_list(parsed.get("redFlags"), []),
            feedback_snippet=feedback if isinstance(feedback, str) else "",
        )
