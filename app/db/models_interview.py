from datetime import datetime
from typing import Optional

from sqlalchemy import Column, String, Integer, DateTime, JSON, ForeignKey, Text, Index, Float, Boolean
from sqlalchemy import text as sa_text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class Interview(Base):
    __tablename__ = "interviews"

    id = Column(String, primary_key=True)
    candidate_id = Column(String, index=True, nullable=False)
    position_id = Column(String, nullable=True)
    role = Column(String(32), nullable=False)
    status = Column(String(32), nullable=False, default="in_progress")
    started_at = Column(DateTime(timezone=True), nullable=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=sa_text("CURRENT_TIMESTAMP"),
        onupdate=sa_text("CURRENT_TIMESTAMP"),
    )

    report = relationship(
        "Report",
        back_populates="interview",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_interviews_started_at", "started_at"),
    )


class Report(Base):
    __tablename__ = "reports"

    id = Column(String, primary_key=True)
    interview_id = Column(
        String,
        ForeignKey("interviews.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    overall_score = Column(Float, nullable=False)
    max_score = Column(Float, nullable=False)
    recommendation = Column(String(32), nullable=False)
    summary = Column(Text)
    red_flags = Column(JSON, nullable=True, default=list)
    strengths = Column(JSON, nullable=True, default=list)
    improvements = Column(JSON, nullable=True, default=list)
    competencies = Column(JSON, nullable=True, default=list)
    question_answer_summary = Column(JSON, nullable=True, default=list)
    created_at = Column(DateTime(timezone=True), server_default=sa_text("CURRENT_TIMESTAMP"))

    interview = relationship("Interview", back_populates="report")


class QuestionTemplateRow(Base):
    __tablename__ = "question_templates"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    role: Mapped[str] = mapped_column(String(32), index=True)
    phase: Mapped[str] = mapped_column(String(32), index=True)
    difficulty: Mapped[str] = mapped_column(String(16))
    text: Mapped[str] = mapped_column(Text)
    competency_ids: Mapped[list] = mapped_column(JSON, default=list)
    follow_up_prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_coding_question: Mapped[bool] = mapped_column(Boolean, default=False)
    starter_code: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    language: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=sa_text("CURRENT_TIMESTAMP"))


class SessionStateRow(Base):
    """Key-value row backing the database session store."""
    __tablename__ = "session_states"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
