from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.interview.models import DifficultyLevel, InterviewRole, ScheduledCustomQuestion


class CustomQuestionIn(BaseModel):
    text: str = Field(min_length=1)
    difficulty: DifficultyLevel = DifficultyLevel.MEDIUM
    is_coding_question: bool = False
    language: Optional[str] = None
    starter_code: Optional[str] = None

    def to_model(self) -> ScheduledCustomQuestion:
        return ScheduledCustomQuestion(
            text=self.text,
            difficulty=self.difficulty,
            is_coding_question=self.is_coding_question,
            language=self.language,
            starter_code=self.starter_code,
        )


class StartInterviewRequest(BaseModel):
    candidate_id: str = Field(min_length=1)
    role: InterviewRole = InterviewRole.TECHNICAL
    position_id: Optional[str] = None

    # Profile used to personalize questions
    candidate_name: Optional[str] = None
    position_title: Optional[str] = None
    resume_url: Optional[str] = None
    cover_letter: Optional[str] = None
    job_description: Optional[str] = None

    preferred_difficulty: Optional[DifficultyLevel] = None
    custom_questions: List[CustomQuestionIn] = []
    focus_areas: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0)


class StartInterviewResponse(BaseModel):
    interview_id: str
    reply: str
    question_id: Optional[str] = None
    phase: Optional[str] = None
    resume_match_score: Optional[int] = None


class SubmitAnswerRequest(BaseModel):
    answer: str = Field(min_length=1)


class EvaluationOut(BaseModel):
    score: float
    max_score: float


class SubmitAnswerResponse(BaseModel):
    reply: Optional[str] = None
    phase: Optional[str] = None
    evaluation: Optional[EvaluationOut] = None
    completed: bool = False
    report: Optional[Dict[str, Any]] = None


class NextReplyRequest(BaseModel):
    force_next_phase: bool = False


class NextReplyResponse(BaseModel):
    reply: str
    question_id: Optional[str] = None
    phase: Optional[str] = None
