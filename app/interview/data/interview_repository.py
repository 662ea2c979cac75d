"""
Data access layer for the interview engine.
Persists interview rows and final reports, and loads question templates.
Live session state is NOT stored here (see session_store).
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.models_interview import Interview, QuestionTemplateRow, Report
from app.interview.models import InterviewPhase, InterviewReport, InterviewRole, QuestionTemplate

logger = logging.getLogger(__name__)


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        logger.warning(f"Unparseable timestamp: {value}")
        return None


class InterviewRepository:
    """
    Database operations for interviews and reports.
    Writes are best effort: failures are logged and rolled back so a database
    outage never blocks a running interview.
    """

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]):
        self._sessionmaker = sessionmaker

    async def create_interview(self, interview_id: str, candidate_id: str, role: InterviewRole,
                               started_at: str, position_id: Optional[str] = None) -> bool:
        """
        Inserts the interview row with status `in_progress`.

        Returns:
            True on success, False if the write failed
        """
        async with self._sessionmaker() as db:
            try:
                started = _parse_timestamp(started_at)
                db.add(Interview(
                    id=interview_id,
                    candidate_id=candidate_id,
                    position_id=position_id,
                    role=role.value,
                    status="in_progress",
                    started_at=started,
                    updated_at=started,
                ))
                await db.commit()
                logger.info(f"Interview {interview_id} created")
                return True
            except (SQLAlchemyError, OSError) as e:
                logger.error(f"Error creating interview {interview_id}: {e}")
                await db.rollback()
                return False

    async def complete_interview(self, interview_id: str, ended_at: str) -> bool:
        """Marks the interview as completed."""
        async with self._sessionmaker() as db:
            try:
                interview = await db.get(Interview, interview_id)
                if not interview:
                    logger.warning(f"Interview {interview_id} not found while ending")
                    return False
                ended = _parse_timestamp(ended_at)
                interview.status = "completed"
                interview.ended_at = ended
                interview.updated_at = ended
                await db.commit()
                return True
            except (SQLAlchemyError, OSError) as e:
                logger.error(f"Error completing interview {interview_id}: {e}")
                await db.rollback()
                return False

    async def save_report(self, report: InterviewReport) -> Optional[str]:
        """
        Inserts or replaces the report of an interview.

        Returns:
            ID of the report row or None if the write failed
        """
        data = report.to_dict()
        async with self._sessionmaker() as db:
            try:
                row = await db.scalar(select(Report).where(Report.interview_id == report.interview_id))
                if not row:
                    row = Report(id=str(uuid.uuid4()), interview_id=report.interview_id)
                    db.add(row)
                row.overall_score = report.overall_score
                row.max_score = report.max_score
                row.recommendation = report.recommendation.value
                row.summary = report.summary
                row.red_flags = data["red_flags"]
                row.strengths = data["strengths"]
                row.improvements = data["improvements"]
                row.competencies = data["competencies"]
                row.question_answer_summary = data["question_answer_summary"]
                await db.commit()
                logger.info(f"Report {row.id} stored for interview {report.interview_id}")
                return row.id
            except (SQLAlchemyError, OSError) as e:
                logger.error(f"Error storing report for interview {report.interview_id}: {e}")
                await db.rollback()
                return None

    async def get_report(self, interview_id: str) -> Optional[InterviewReport]:
        """Loads a persisted report, joined with its interview row when available."""
        async with self._sessionmaker() as db:
            try:
                row = await db.scalar(select(Report).where(Report.interview_id == interview_id))
                if not row:
                    return None
                interview = await db.get(Interview, interview_id)
            except (SQLAlchemyError, OSError) as e:
                logger.error(f"Error loading report for interview {interview_id}: {e}")
                return None

        return InterviewReport.from_dict({
            "interview_id": row.interview_id,
            "candidate_id": interview.candidate_id if interview else "",
            "role": interview.role if interview else None,
            "started_at": interview.started_at.isoformat() if interview and interview.started_at else "",
            "ended_at": interview.ended_at.isoformat() if interview and interview.ended_at else "",
            "overall_score": row.overall_score,
            "max_score": row.max_score,
            "recommendation": row.recommendation,
            "summary": row.summary or "",
            "competencies": row.competencies,
            "red_flags": row.red_flags,
            "strengths": row.strengths,
            "improvements": row.improvements,
            "question_answer_summary": row.question_answer_summary,
        })


class QuestionTemplateRepository:
    """
    Loads admin-added question templates for the question strategy.
    """

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]):
        self._sessionmaker = sessionmaker

    async def list_for_strategy(self, role: InterviewRole, phase: InterviewPhase) -> List[QuestionTemplate]:
        async with self._sessionmaker() as db:
            stmt = (
                select(QuestionTemplateRow)
                .where(QuestionTemplateRow.role == role.value, QuestionTemplateRow.phase == phase.value)
                .order_by(QuestionTemplateRow.sort_order.asc(), QuestionTemplateRow.created_at.asc())
            )
            result = await db.execute(stmt)
            return [QuestionTemplate.from_row(row) for row in result.scalars().all()]
