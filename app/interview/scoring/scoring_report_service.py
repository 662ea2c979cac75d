"""
Scoring and reporting: aggregates per-answer evaluations into competency
scores, a hiring recommendation and a recruiter-ready report.
"""

import logging
from typing import Any, Dict, List

from app.interview.models import (
    AnswerEvaluation,
    InterviewReport,
    InterviewState,
    MAX_SCORE,
    Recommendation,
    ReportCompetency,
)
from app.interview.models.turn import utc_now_iso

logger = logging.getLogger(__name__)

STRENGTH_THRESHOLD = 0.7
IMPROVEMENT_THRESHOLD = 0.5
MAX_LIST_ITEMS = 5
MAX_EVIDENCE_PER_COMPETENCY = 3
MAX_RED_FLAGS_BEFORE_NO_HIRE = 2

DEFAULT_QUESTION_TEXT = "Question"


def _format_number(value: float) -> str:
    """Formats a score without a trailing '.0' for whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return str(round(value, 2))


class ScoringReportService:
    """
    Builds the final report from a (completed) interview state.
    """

    def build_report(self, state: InterviewState) -> InterviewReport:
        """
        Builds the recruiter report.

        Args:
            state: Interview state with evaluations attached to candidate turns

        Returns:
            InterviewReport for the interview
        """
        ended_at = state.ended_at or utc_now_iso()
        evaluations = [t.evaluation for t in state.turns if t.is_candidate() and t.evaluation is not None]

        overall_score = sum(e.score for e in evaluations)
        max_score = len(evaluations) * MAX_SCORE
        competencies = self._aggregate_competencies(evaluations)
        red_flags = self._unique_red_flags(evaluations)

        strengths = [
            e.feedback_snippet or "Strong answer"
            for e in evaluations if e.normalized_score >= STRENGTH_THRESHOLD
        ][:MAX_LIST_ITEMS]
        improvements = [
            e.feedback_snippet or "Needs improvement"
            for e in evaluations if e.normalized_score < IMPROVEMENT_THRESHOLD
        ][:MAX_LIST_ITEMS]

        recommendation = self.recommend(overall_score, max_score, red_flags)
        summary = self.write_summary(len(evaluations), overall_score, max_score, recommendation)

        logger.info(f"Built report for {state.interview_id}: {overall_score}/{max_score}, {recommendation.value}")

        return InterviewReport(
            interview_id=state.interview_id,
            candidate_id=state.candidate_id,
            role=state.role,
            started_at=state.started_at,
            ended_at=ended_at,
            overall_score=overall_score,
            max_score=max_score,
            recommendation=recommendation,
            summary=summary,
            competencies=competencies,
            red_flags=red_flags,
            strengths=strengths,
            improvements=improvements,
            question_answer_summary=self._question_answer_summary(state),
        )

    @staticmethod
    def _aggregate_competencies(evaluations: List[AnswerEvaluation]) -> List[ReportCompetency]:
        # Insertion order follows the first evaluation mentioning a competency
        totals: Dict[str, Dict[str, Any]] = {}
        for e in evaluations:
            average = (e.relevance + e.structure + e.depth) / 3
            for competency_id in e.competency_ids:
                entry = totals.setdefault(competency_id, {"sum": 0.0, "count": 0, "evidence": []})
                entry["sum"] += average
                entry["count"] += 1
                if e.feedback_snippet:
                    entry["evidence"].append(e.feedback_snippet)

        return [
            ReportCompetency(
                competency_id=competency_id,
                name=competency_id.replace("_", " "),
                score=data["sum"],
                max_score=data["count"] * MAX_SCORE,
                evidence=data["evidence"][:MAX_EVIDENCE_PER_COMPETENCY],
            )
            for competency_id, data in totals.items()
        ]

    @staticmethod
    def _unique_red_flags(evaluations: List[AnswerEvaluation]) -> List[str]:
        seen: List[str] = []
        for e in evaluations:
            for flag in e.red_flags:
                if flag not in seen:
                    seen.append(flag)
        return seen

    @staticmethod
    def _question_answer_summary(state: InterviewState) -> List[Dict[str, Any]]:
        """Pairs each candidate answer with the AI turn right before it."""
        last_question = DEFAULT_QUESTION_TEXT
        pairs = []
        for turn in state.turns:
            if turn.is_ai():
                last_question = turn.content or last_question
            elif turn.is_candidate():
                normalized = turn.evaluation.normalized_score if turn.evaluation else 0
                pairs.append({
                    "question": last_question,
                    "answer": turn.content,
                    "score": normalized * MAX_SCORE,
                })
        return pairs

    @staticmethod
    def recommend(overall_score: float, max_score: float, red_flags: List[str]) -> Recommendation:
        """
        Maps the score ratio to a recommendation. More than two distinct red
        flags always result in no_hire.
        """
        pct = overall_score / max_score if max_score > 0 else 0
        if len(red_flags) > MAX_RED_FLAGS_BEFORE_NO_HIRE:
            return Recommendation.NO_HIRE
        if pct >= 0.8:
            return Recommendation.STRONG_HIRE
        if pct >= 0.6:
            return Recommendation.HIRE
        if pct >= 0.4:
            return Recommendation.BORDERLINE
        return Recommendation.NO_HIRE

    @staticmethod
    def write_summary(num_answers: int, overall_score: float, max_score: float,
                      recommendation: Recommendation) -> str:
        pct = round(overall_score / max_score * 100) if max_score > 0 else 0
        return (
            f"The candidate answered {num_answers} questions with an overall score of "
            f"{_format_number(overall_score)}/{_format_number(max_score)} ({pct}%). "
            f"Recommendation: {recommendation.value}."
        )

