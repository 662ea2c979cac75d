"""
Recruiter report models.
"""

from typing import Any, Dict, List

from .enums import InterviewRole, Recommendation, parse_enum


class ReportCompetency:
    """Aggregated score for one competency (skill dimension)."""

    def __init__(self, competency_id: str, name: str, score: float, max_score: float,
                 evidence: List[str]):
        self.competency_id = competency_id
        self.name = name
        self.score = score
        self.max_score = max_score
        self.evidence = list(evidence)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "competency_id": self.competency_id,
            "name": self.name,
            "score": self.score,
            "max_score": self.max_score,
            "evidence": self.evidence,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReportCompetency":
        return cls(
            competency_id=data.get("competency_id", ""),
            name=data.get("name", ""),
            score=data.get("score", 0),
            max_score=data.get("max_score", 0),
            evidence=data.get("evidence", []),
        )


class InterviewReport:
    """
    Final recruiter-ready report for an interview.
    """

    def __init__(
        self,
        interview_id: str,
        candidate_id: str,
        role: InterviewRole,
        started_at: str,
        ended_at: str,
        overall_score: float,
        max_score: float,
        recommendation: Recommendation,
        summary: str,
        competencies: List[ReportCompetency],
        red_flags: List[str],
        strengths: List[str],
        improvements: List[str],
        question_answer_summary: List[Dict[str, Any]],
    ):
        self.interview_id = interview_id
        self.candidate_id = candidate_id
        self.role = role
        self.started_at = started_at
        self.ended_at = ended_at
        self.overall_score = overall_score
        self.max_score = max_score
        self.recommendation = recommendation
        self.summary = summary
        self.competencies = competencies
        self.red_flags = red_flags
        self.strengths = strengths
        self.improvements = improvements
        # Entries: {"question": str, "answer": str, "score": float}
        self.question_answer_summary = question_answer_summary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "interview_id": self.interview_id,
            "candidate_id": self.candidate_id,
            "role": self.role.value,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
            "overall_score": self.overall_score,
            "max_score": self.max_score,
            "recommendation": self.recommendation.value,
            "summary": self.summary,
            "competencies": [c.to_dict() for c in self.competencies],
            "red_flags": self.red_flags,
            "strengths": self.strengths,
            "improvements": self.improvements,
            "question_answer_summary": self.question_answer_summary,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InterviewReport":
        return cls(
            interview_id=data.get("interview_id", ""),
            candidate_id=data.get("candidate_id", ""),
            role=parse_enum(InterviewRole, data.get("role"), InterviewRole.TECHNICAL),
            started_at=data.get("started_at", ""),
            ended_at=data.get("ended_at", ""),
            overall_score=data.get("overall_score", 0),
            max_score=data.get("max_score", 0),
            recommendation=parse_enum(Recommendation, data.get("recommendation"), Recommendation.NO_HIRE),
            summary=data.get("summary", ""),
            competencies=[ReportCompetency.from_dict(c) for c in data.get("competencies") or []],
            red_flags=data.get("red_flags") or [],
            strengths=data.get("strengths") or [],
            improvements=data.get("improvements") or [],
            question_answer_summary=data.get("question_answer_summary") or [],
        )
