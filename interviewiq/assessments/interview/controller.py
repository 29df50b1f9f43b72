"""
Interview Assessment Controller

HTTP routes for taking an interview assessment.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from interviewiq.api import APIResponse
from interviewiq.common.logger import app_logger
from interviewiq.services import ServiceContainer, get_services

logger = app_logger.getChild("assessments.interview.controller")

router = APIRouter()


class StartAssessmentRequest(BaseModel):
    """Request model for starting an interview assessment."""
    level: str = Field(..., description="Experience level: fresher or experienced")
    domain: str = Field(..., min_length=1, description="Domain, e.g. Web Development")
    email: Optional[str] = Field(None, description="Email the result is tracked under")
    user_name: Optional[str] = Field(None, description="Candidate display name")


class DraftRequest(BaseModel):
    """Text currently typed for the displayed question."""
    text: str = ""


class SubmitAnswerRequest(BaseModel):
    """Request model for answering the current question."""
    answer: str = Field(..., description="Answer text")
    time_spent: Optional[int] = Field(None, ge=0, description="Seconds spent, used when no timer runs")


@router.get("/catalog", summary="List the available levels and domains")
async def get_catalog(services: ServiceContainer = Depends(get_services)):
    bank = services.bank
    return APIResponse.success({
        "levels": await bank.list_levels(),
        "domains": await bank.list_domains(),
        "questionCount": services.config.assessment.question_count,
        "timeLimit": services.config.assessment.question_time_limit,
    })


@router.post("/sessions", status_code=status.HTTP_201_CREATED, summary="Start an assessment")
async def start_assessment(request: StartAssessmentRequest, services: ServiceContainer = Depends(get_services)):
    """
    Select questions and open a session.

    Responds 404 with a readable message when the level/domain pool is empty.
    """
    session, question = await services.flow.start(
        request.level, request.domain, email=request.email, user_name=request.user_name
    )
    return APIResponse.success({
        "session": session.to_dict(),
        "question": question.to_public_dict(),
        "timer": services.flow.timer_state(session.id),
    }, message="Assessment started")


@router.get("/sessions/{session_id}", summary="Get a session")
async def get_session(session_id: str, services: ServiceContainer = Depends(get_services)):
    session = await services.sessions.get(session_id)
    return APIResponse.success(session.to_dict())


@router.get("/sessions/{session_id}/question", summary="Get the question awaiting an answer")
async def get_current_question(session_id: str, services: ServiceContainer = Depends(get_services)):
    question = await services.flow.current_question(session_id)
    return APIResponse.success({
        "question": question.to_public_dict() if question else None,
        "timer": services.flow.timer_state(session_id),
    })


@router.put("/sessions/{session_id}/draft", summary="Save the typed answer text")
async def update_draft(session_id: str, request: DraftRequest, services: ServiceContainer = Depends(get_services)):
    await services.flow.update_draft(session_id, request.text)
    return APIResponse.success({"timer": services.flow.timer_state(session_id)}, message="Draft saved")


@router.post("/sessions/{session_id}/answers", summary="Answer the current question")
async def submit_answer(session_id: str, request: SubmitAnswerRequest,
                        services: ServiceContainer = Depends(get_services)):
    result = await services.flow.submit_answer(session_id, request.answer, request.time_spent)
    return APIResponse.success(result.to_dict(), message="Answer recorded")


@router.get("/sessions/{session_id}/report", summary="Get the session report")
async def get_report(session_id: str, services: ServiceContainer = Depends(get_services)):
    report = await services.flow.report(session_id)
    return APIResponse.success(report.to_dict())


@router.delete("/sessions/{session_id}", summary="Discard a session (restart)")
async def restart_assessment(session_id: str, services: ServiceContainer = Depends(get_services)):
    removed = await services.flow.restart(session_id)
    return APIResponse.success({"removed": removed}, message="Session discarded" if removed else "Session not found")
