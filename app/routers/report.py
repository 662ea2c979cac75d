from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from app.interview.dependencies import get_orchestrator
from app.interview.orchestrator import AIInterviewerOrchestrator

router = APIRouter(tags=["report"])
logger = logging.getLogger(__name__)


@router.get("/report/{interview_id}")
async def get_report(
    interview_id: str,
    orchestrator: AIInterviewerOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """
    Returns the report of an interview. Built from the live session while it
    exists, otherwise loaded from the reports table.
    """
    report = await orchestrator.get_report(interview_id)
    if report is None:
        report = await orchestrator.session_service.repository.get_report(interview_id)
    if report is None:
        logger.info(f"No report found for interview {interview_id}")
        raise HTTPException(status_code=404, detail={
            "code": "SESSION_NOT_FOUND",
            "message": "No live session or stored report for this interview",
        })
    return report.to_dict()
