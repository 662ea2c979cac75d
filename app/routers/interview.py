from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from app.interview.dependencies import get_orchestrator
from app.interview.orchestrator import AIInterviewerOrchestrator, NO_PENDING_QUESTION
from app.interview.resume.resume_context import (
    build_resume_context,
    compute_resume_job_match_score,
    read_resume_text,
)
from app.interview.session.interview_session_service import StartInterviewInput
from app.schemas.schemas_interview import (
    EvaluationOut,
    NextReplyRequest,
    NextReplyResponse,
    StartInterviewRequest,
    StartInterviewResponse,
    SubmitAnswerRequest,
    SubmitAnswerResponse,
)

router = APIRouter(prefix="/interview", tags=["interview"])
logger = logging.getLogger(__name__)


def session_not_found() -> HTTPException:
    return HTTPException(status_code=404, detail={
        "code": "SESSION_NOT_FOUND",
        "message": "Interview session not found or expired",
    })


@router.post("/start", response_model=StartInterviewResponse)
async def start_interview(
    payload: StartInterviewRequest,
    orchestrator: AIInterviewerOrchestrator = Depends(get_orchestrator),
) -> StartInterviewResponse:
    """
    Creates an interview session and returns the opening question.
    """
    resume_context = await run_in_threadpool(
        build_resume_context,
        payload.resume_url,
        payload.cover_letter,
        payload.candidate_name,
        payload.position_title,
    )

    match_score = None
    if payload.job_description and payload.resume_url:
        resume_text = await run_in_threadpool(read_resume_text, payload.resume_url)
        match_score = compute_resume_job_match_score(payload.job_description, resume_text)

    interview_id, _ = await orchestrator.session_service.start(StartInterviewInput(
        candidate_id=payload.candidate_id,
        role=payload.role,
        position_id=payload.position_id,
        resume_context=resume_context,
        preferred_difficulty=payload.preferred_difficulty,
        custom_questions=[q.to_model() for q in payload.custom_questions],
        focus_areas=payload.focus_areas,
        duration_minutes=payload.duration_minutes,
    ))

    result = await orchestrator.get_next_reply(interview_id)
    if not result.success:
        logger.error(f"No opening question for interview {interview_id}")
        raise HTTPException(status_code=500, detail="Could not generate the opening question")

    return StartInterviewResponse(
        interview_id=interview_id,
        reply=result.reply,
        question_id=result.question_id,
        phase=result.phase,
        resume_match_score=match_score,
    )


@router.post("/{interview_id}/answer", response_model=SubmitAnswerResponse)
async def submit_answer(
    interview_id: str,
    payload: SubmitAnswerRequest,
    orchestrator: AIInterviewerOrchestrator = Depends(get_orchestrator),
) -> SubmitAnswerResponse:
    try:
        result = await orchestrator.submit_answer(interview_id, payload.answer)
    except Exception:
        logger.exception("Failed to process answer for interview %s", interview_id)
        raise HTTPException(status_code=500, detail="Could not process the answer")

    if not result.success:
        if result.failure_reason == NO_PENDING_QUESTION:
            raise HTTPException(status_code=400, detail={
                "code": "NO_PENDING_QUESTION",
                "message": "There is no open question to answer",
            })
        raise session_not_found()

    return SubmitAnswerResponse(
        reply=result.next_reply,
        phase=result.state.phase.value if result.state else None,
        evaluation=EvaluationOut(**result.evaluation) if result.evaluation else None,
        completed=result.report is not None,
        report=result.report.to_dict() if result.report else None,
    )


@router.post("/{interview_id}/next", response_model=NextReplyResponse)
async def next_reply(
    interview_id: str,
    payload: NextReplyRequest,
    orchestrator: AIInterviewerOrchestrator = Depends(get_orchestrator),
) -> NextReplyResponse:
    """
    Produces the next interviewer reply without an answer, e.g. to skip
    ahead to the next phase.
    """
    try:
        result = await orchestrator.get_next_reply(interview_id, force_next_phase=payload.force_next_phase)
    except Exception:
        logger.exception("Failed to generate next reply for interview %s", interview_id)
        raise HTTPException(status_code=500, detail="Could not generate the next reply")
    if not result.success:
        if result.state is None:
            raise session_not_found()
        raise HTTPException(status_code=409, detail={
            "code": "INTERVIEW_FINISHED",
            "message": "No questions left in this interview",
        })
    return NextReplyResponse(reply=result.reply, question_id=result.question_id, phase=result.phase)


@router.get("/{interview_id}/state")
async def get_interview_state(
    interview_id: str,
    orchestrator: AIInterviewerOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    state = await orchestrator.session_service.get_state(interview_id)
    if not state:
        raise session_not_found()
    return state.to_dict()


@router.post("/{interview_id}/end")
async def end_interview(
    interview_id: str,
    orchestrator: AIInterviewerOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """
    Ends the interview early and returns the report built from the answers so far.
    """
    report = await orchestrator.get_report(interview_id)
    if not report:
        raise session_not_found()
    await orchestrator.session_service.end(interview_id, report)
    return report.to_dict()
