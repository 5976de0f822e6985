from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from app.ai.factory import get_ai_client
from app.ai.types import AIClient
from app.core.rate_limit import quiz_rate_limit, rate_limit
from app.core.security import current_user_id
from app.schemas.interview import AssessmentRecord, QuizResponse, QuizResultRequest
from app.services import interview_service
from app.services.errors import InterviewServiceError
from app.storage.db import SqliteStore, get_store

router = APIRouter()


def _raise_service_error(exc: InterviewServiceError) -> None:
    raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.post("/interview/quiz", response_model=QuizResponse)
@quiz_rate_limit()
async def create_quiz(
    request: Request,
    user_id: str | None = Depends(current_user_id),
    ai: AIClient = Depends(get_ai_client),
    store: SqliteStore = Depends(get_store),
):
    _ = request
    try:
        questions = await interview_service.generate_quiz(user_id, ai=ai, store=store)
    except InterviewServiceError as exc:
        _raise_service_error(exc)
    return QuizResponse(questions=questions)


@router.post("/interview/results", response_model=AssessmentRecord)
@quiz_rate_limit()
async def submit_quiz_result(
    request: Request,
    payload: QuizResultRequest,
    user_id: str | None = Depends(current_user_id),
    ai: AIClient = Depends(get_ai_client),
    store: SqliteStore = Depends(get_store),
):
    _ = request
    try:
        return await interview_service.save_quiz_result(
            user_id,
            payload.questions,
            payload.answers,
            payload.score,
            ai=ai,
            store=store,
        )
    except InterviewServiceError as exc:
        _raise_service_error(exc)


@router.get("/interview/assessments", response_model=list[AssessmentRecord])
@rate_limit()
def list_assessments(
    request: Request,
    user_id: str | None = Depends(current_user_id),
    store: SqliteStore = Depends(get_store),
):
    _ = request
    try:
        return interview_service.get_assessments(user_id, store=store)
    except InterviewServiceError as exc:
        _raise_service_error(exc)
