"""
Turn and answer evaluation models.
A turn is one utterance (AI question or candidate answer) in the interview history.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .enums import TurnRole, parse_enum

MAX_SCORE = 10


def utc_now_iso() -> str:
    """Current time as ISO-8601 string (UTC)."""
    return datetime.now(timezone.utc).isoformat()


class AnswerEvaluation:
    """
    LLM-based evaluation of a single candidate answer.
    All sub-scores are on a 0..MAX_SCORE scale; normalized_score is 0..1.
    """

    def __init__(
        self,
        score: float,
        relevance: float,
        structure: float,
        depth: float,
        competency_ids: Optional[List[str]] = None,
        red_flags: Optional[List[str]] = None,
        feedback_snippet: str = "",
        max_score: int = MAX_SCORE,
        normalized_score: Optional[float] = None,
    ):
        self.score = score
        self.max_score = max_score
        self.relevance = relevance
        self.structure = structure
        self.depth = depth
        self.competency_ids = list(competency_ids or [])
        self.red_flags = list(red_flags or [])
        self.feedback_snippet = feedback_snippet
        self.normalized_score = (
            normalized_score if normalized_score is not None else score / max_score
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "max_score": self.max_score,
            "relevance": self.relevance,
            "structure": self.structure,
            "depth": self.depth,
            "competency_ids": self.competency_ids,
            "red_flags": self.red_flags,
            "feedback_snippet": self.feedback_snippet,
            "normalized_score": self.normalized_score,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnswerEvaluation":
        return cls(
            score=data.get("score", 0),
            max_score=data.get("max_score", MAX_SCORE),
            relevance=data.get("relevance", 0),
            structure=data.get("structure", 0),
            depth=data.get("depth", 0),
            competency_ids=data.get("competency_ids", []),
            red_flags=data.get("red_flags", []),
            feedback_snippet=data.get("feedback_snippet", ""),
            normalized_score=data.get("normalized_score"),
        )


class Turn:
    """
    One entry in the interview history.

    AI turns carry the question id they ask (and coding metadata for coding
    questions); candidate turns carry their evaluation once available.
    """

    def __repr__(self):
        return f"<Turn role={self.role.value} question_id={self.question_id} content={self.content[:30]!r}>"

    def __init__(
        self,
        role: TurnRole,
        content: str,
        id: Optional[str] = None,
        timestamp: Optional[str] = None,
        question_id: Optional[str] = None,
        evaluation: Optional[AnswerEvaluation] = None,
        coding_starter_code: Optional[str] = None,
        coding_language: Optional[str] = None,
        is_coding_question: bool = False,
    ):
        self.id = str(id) if id is not None else str(uuid.uuid4())
        self.role = role
        self.content = content
        self.timestamp = timestamp or utc_now_iso()
        self.question_id = question_id
        self.evaluation = evaluation
        self.coding_starter_code = coding_starter_code
        self.coding_language = coding_language
        self.is_coding_question = bool(is_coding_question)

    def is_ai(self) -> bool:
        return self.role == TurnRole.AI

    def is_candidate(self) -> bool:
        return self.role == TurnRole.CANDIDATE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp,
            "question_id": self.question_id,
            "evaluation": self.evaluation.to_dict() if self.evaluation else None,
            "coding_starter_code": self.coding_starter_code,
            "coding_language": self.coding_language,
            "is_coding_question": self.is_coding_question,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Turn":
        evaluation = data.get("evaluation")
        return cls(
            id=data.get("id"),
            role=parse_enum(TurnRole, data.get("role"), TurnRole.AI),
            content=data.get("content") or "",
            timestamp=data.get("timestamp"),
            question_id=data.get("question_id"),
            evaluation=AnswerEvaluation.from_dict(evaluation) if evaluation else None,
            coding_starter_code=data.get("coding_starter_code"),
            coding_language=data.get("coding_language"),
            is_coding_question=data.get("is_coding_question", False),
        )
