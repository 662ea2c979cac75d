"""
Live interview state kept in the session store.
The state is the source of truth while the interview runs; it is serialized
to JSON via to_dict()/from_dict() on every write.
"""

import copy
from typing import Any, Dict, List, Optional

from .enums import DifficultyLevel, InterviewPhase, InterviewRole, parse_enum
from .turn import Turn


class ScheduledCustomQuestion:
    """Recruiter-supplied question to prioritize during a scheduled interview."""

    def __init__(
        self,
        text: str,
        difficulty: DifficultyLevel = DifficultyLevel.MEDIUM,
        is_coding_question: bool = False,
        language: Optional[str] = None,
        starter_code: Optional[str] = None,
    ):
        self.text = text
        self.difficulty = difficulty
        self.is_coding_question = bool(is_coding_question)
        self.language = language
        self.starter_code = starter_code

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "difficulty": self.difficulty.value,
            "is_coding_question": self.is_coding_question,
            "language": self.language,
            "starter_code": self.starter_code,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduledCustomQuestion":
        return cls(
            text=data.get("text", ""),
            difficulty=parse_enum(DifficultyLevel, data.get("difficulty"), DifficultyLevel.MEDIUM),
            is_coding_question=data.get("is_coding_question", False),
            language=data.get("language"),
            starter_code=data.get("starter_code"),
        )


class InterviewState:
    """
    Complete state of a running interview session.
    """

    def __init__(
        self,
        interview_id: str,
        candidate_id: str,
        role: InterviewRole,
        started_at: str,
        phase: InterviewPhase = InterviewPhase.INTRO,
        turns: Optional[List[Turn]] = None,
        topic_coverage: Optional[Dict[str, bool]] = None,
        current_difficulty: DifficultyLevel = DifficultyLevel.MEDIUM,
        preferred_difficulty: Optional[DifficultyLevel] = None,
        custom_questions: Optional[List[ScheduledCustomQuestion]] = None,
        resume_context: Optional[str] = None,
        focus_areas: Optional[str] = None,
        duration_minutes: Optional[int] = None,
        ended_at: Optional[str] = None,
        approximate_tokens: int = 0,
    ):
        """
        Initialize an interview state.

        Args:
            interview_id: Unique interview id (also the session key suffix)
            candidate_id: Candidate being interviewed
            role: Role type the interview is for
            started_at: ISO timestamp of the start
            phase: Current interview phase
            turns: Conversation history, oldest first
            topic_coverage: Question ids that have already been answered
            current_difficulty: Difficulty used for the next question selection
            preferred_difficulty: Recruiter-selected target difficulty
            custom_questions: Recruiter-supplied questions
            resume_context: Parsed resume/profile text used to personalize questions
            focus_areas: Recruiter-specified subject areas
            duration_minutes: Recruiter-specified duration
            ended_at: ISO timestamp of the end, if ended
            approximate_tokens: Running token estimate for context budgeting
        """
        self.interview_id = interview_id
        self.candidate_id = candidate_id
        self.role = role
        self.started_at = started_at
        self.phase = phase
        self.turns: List[Turn] = turns if turns else []
        self.topic_coverage: Dict[str, bool] = topic_coverage if topic_coverage else {}
        self.current_difficulty = current_difficulty
        self.preferred_difficulty = preferred_difficulty
        self.custom_questions: List[ScheduledCustomQuestion] = custom_questions if custom_questions else []
        self.resume_context = resume_context
        self.focus_areas = focus_areas
        self.duration_minutes = duration_minutes
        self.ended_at = ended_at
        self.approximate_tokens = approximate_tokens

    def last_turn(self) -> Optional[Turn]:
        return self.turns[-1] if self.turns else None

    def last_ai_turn(self) -> Optional[Turn]:
        for turn in reversed(self.turns):
            if turn.is_ai():
                return turn
        return None

    def is_covered(self, question_id: str) -> bool:
        return bool(self.topic_coverage.get(question_id))

    def copy_with(self, **changes: Any) -> "InterviewState":
        """Returns a deep copy with the given attributes replaced."""
        clone = copy.deepcopy(self)
        for key, value in changes.items():
            setattr(clone, key, value)
        return clone

    def to_dict(self) -> Dict[str, Any]:
        return {
            "interview_id": self.interview_id,
            "candidate_id": self.candidate_id,
            "resume_context": self.resume_context,
            "role": self.role.value,
            "phase": self.phase.value,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
            "turns": [turn.to_dict() for turn in self.turns],
            "topic_coverage": dict(self.topic_coverage),
            "current_difficulty": self.current_difficulty.value,
            "preferred_difficulty": self.preferred_difficulty.value if self.preferred_difficulty else None,
            "custom_questions": [q.to_dict() for q in self.custom_questions],
            "focus_areas": self.focus_areas,
            "duration_minutes": self.duration_minutes,
            "approximate_tokens": self.approximate_tokens,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InterviewState":
        preferred = data.get("preferred_difficulty")
        return cls(
            interview_id=data["interview_id"],
            candidate_id=data["candidate_id"],
            role=parse_enum(InterviewRole, data.get("role"), InterviewRole.TECHNICAL),
            started_at=data.get("started_at", ""),
            phase=parse_enum(InterviewPhase, data.get("phase"), InterviewPhase.INTRO),
            turns=[Turn.from_dict(t) for t in data.get("turns", [])],
            topic_coverage=data.get("topic_coverage", {}),
            current_difficulty=parse_enum(
                DifficultyLevel, data.get("current_difficulty"), DifficultyLevel.MEDIUM),
            preferred_difficulty=(
                parse_enum(DifficultyLevel, preferred, DifficultyLevel.MEDIUM) if preferred else None
            ),
            custom_questions=[
                ScheduledCustomQuestion.from_dict(q) for q in data.get("custom_questions", [])
            ],
            resume_context=data.get("resume_context"),
            focus_areas=data.get("focus_areas"),
            duration_minutes=data.get("duration_minutes"),
            ended_at=data.get("ended_at"),
            approximate_tokens=data.get("approximate_tokens", 0),
        )
