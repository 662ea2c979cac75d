"""
Question models used by the question strategy.
"""

from typing import Any, Dict, List, Optional

from .enums import DifficultyLevel, InterviewPhase, InterviewRole, parse_enum


class QuestionTemplate:
    """
    Question from the question bank (database or built-in demo bank).
    """

    def __init__(
        self,
        id: str,
        role: InterviewRole,
        phase: InterviewPhase,
        difficulty: DifficultyLevel,
        text: str,
        competency_ids: Optional[List[str]] = None,
        follow_up_prompt: Optional[str] = None,
        is_coding_question: bool = False,
        starter_code: Optional[str] = None,
        language: Optional[str] = None,
    ):
        self.id = str(id)
        self.role = role
        self.phase = phase
        self.difficulty = difficulty
        self.text = text
        self.competency_ids = list(competency_ids or [])
        self.follow_up_prompt = follow_up_prompt
        self.is_coding_question = bool(is_coding_question)
        self.starter_code = starter_code
        self.language = language

    @classmethod
    def from_row(cls, row: Any) -> "QuestionTemplate":
        """Builds a template from a `question_templates` ORM row."""
        return cls(
            id=row.id,
            role=parse_enum(InterviewRole, row.role, InterviewRole.TECHNICAL),
            phase=parse_enum(InterviewPhase, row.phase, InterviewPhase.TECHNICAL),
            difficulty=parse_enum(DifficultyLevel, row.difficulty, DifficultyLevel.MEDIUM),
            text=row.text,
            competency_ids=row.competency_ids or [],
            follow_up_prompt=row.follow_up_prompt,
            is_coding_question=bool(row.is_coding_question),
            starter_code=row.starter_code,
            language=row.language,
        )


class NextQuestion:
    """
    Result of the question strategy: what the interviewer should ask next.
    """

    def __init__(
        self,
        question_text: str,
        question_id: str,
        phase: InterviewPhase,
        difficulty: DifficultyLevel,
        competency_ids: List[str],
        is_follow_up: bool = False,
        is_coding_question: bool = False,
        starter_code: Optional[str] = None,
        language: Optional[str] = None,
    ):
        self.question_text = question_text
        self.question_id = question_id
        self.phase = phase
        self.difficulty = difficulty
        self.competency_ids = list(competency_ids)
        self.is_follow_up = is_follow_up
        self.is_coding_question = is_coding_question
        self.starter_code = starter_code
        self.language = language

    def __repr__(self):
        return f"<NextQuestion id={self.question_id} phase={self.phase.value} follow_up={self.is_follow_up}>"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_text": self.question_text,
            "question_id": self.question_id,
            "phase": self.phase.value,
            "difficulty": self.difficulty.value,
            "competency_ids": self.competency_ids,
            "is_follow_up": self.is_follow_up,
            "is_coding_question": self.is_coding_question,
            "starter_code": self.starter_code,
            "language": self.language,
        }
