"""
Data models for the interview engine: enums, turns, session state, questions and reports.
"""

from app.interview.models.enums import (
    DEFAULT_PHASE_ORDER,
    DifficultyLevel,
    InterviewPhase,
    InterviewRole,
    Recommendation,
    TurnRole,
)
from app.interview.models.turn import AnswerEvaluation, Turn, MAX_SCORE
from app.interview.models.interview_state import InterviewState, ScheduledCustomQuestion
from app.interview.models.question import NextQuestion, QuestionTemplate
from app.interview.models.report import InterviewReport, ReportCompetency
