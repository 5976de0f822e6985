from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from app.core.rate_limit import rate_limit
from app.core.security import current_user_id
from app.schemas.user import EnsureUserRequest, OnboardingStatus, ProfileUpdateRequest, UserProfile
from app.services import user_service
from app.services.errors import InterviewServiceError
from app.storage.db import SqliteStore, get_store

router = APIRouter()


def _raise_service_error(exc: InterviewServiceError) -> None:
    raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc


@router.post("/users/me", response_model=UserProfile)
@rate_limit()
def ensure_current_user(
    request: Request,
    payload: EnsureUserRequest,
    user_id: str | None = Depends(current_user_id),
    store: SqliteStore = Depends(get_store),
):
    _ = request
    try:
        return user_service.ensure_user(user_id, payload, store=store)
    except InterviewServiceError as exc:
        _raise_service_error(exc)


@router.put("/users/me/profile", response_model=UserProfile)
@rate_limit()
def update_current_profile(
    request: Request,
    payload: ProfileUpdateRequest,
    user_id: str | None = Depends(current_user_id),
    store: SqliteStore = Depends(get_store),
):
    _ = request
    try:
        return user_service.update_profile(user_id, payload, store=store)
    except InterviewServiceError as exc:
        _raise_service_error(exc)


@router.get("/users/me/onboarding", response_model=OnboardingStatus)
@rate_limit()
def onboarding_status(
    request: Request,
    user_id: str | None = Depends(current_user_id),
    store: SqliteStore = Depends(get_store),
):
    _ = request
    try:
        return user_service.get_onboarding_status(user_id, store=store)
    except InterviewServiceError as exc:
        _raise_service_error(exc)
