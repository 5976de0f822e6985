from __future__ import annotations

import logging
import sqlite3

from app.schemas.user import EnsureUserRequest, OnboardingStatus, ProfileUpdateRequest, UserProfile
from app.services.errors import PersistenceFailure, Unauthorized, UserNotFound
from app.storage.db import SqliteStore

logger = logging.getLogger(__name__)


def require_user(external_id: str | None, store: SqliteStore) -> UserProfile:
    """Resolve the caller's profile or raise the matching precondition failure."""
    if not external_id:
        raise Unauthorized()
    try:
        record = store.get_user_by_external_id(external_id)
    except sqlite3.Error as exc:
        logger.error("user_lookup_failed error=%s", exc)
        raise PersistenceFailure("Failed to load user") from exc
    if not record:
        raise UserNotFound()
    return UserProfile(**record)


def ensure_user(external_id: str | None, payload: EnsureUserRequest, *, store: SqliteStore) -> UserProfile:
    if not external_id:
        raise Unauthorized()
    try:
        record = store.get_user_by_external_id(external_id)
        if record:
            return UserProfile(**record)
        record = store.create_user(
            external_id=external_id,
            email=payload.email,
            name=payload.name,
            image_url=payload.image_url,
        )
    except sqlite3.Error as exc:
        logger.error("user_create_failed error=%s", exc)
        raise PersistenceFailure("Failed to create user") from exc
    logger.info("user_created id=%s", record["id"])
    return UserProfile(**record)


def update_profile(external_id: str | None, payload: ProfileUpdateRequest, *, store: SqliteStore) -> UserProfile:
    user = require_user(external_id, store)
    normalized_industry = payload.industry.strip().lower()
    try:
        record = store.update_user_profile(
            user.id,
            industry=normalized_industry,
            experience=payload.experience,
            bio=payload.bio,
            skills=payload.skills,
        )
    except sqlite3.Error as exc:
        logger.error("profile_update_failed user_id=%s error=%s", user.id, exc)
        raise PersistenceFailure("Failed to update profile") from exc
    return UserProfile(**record)


def get_onboarding_status(external_id: str | None, *, store: SqliteStore) -> OnboardingStatus:
    user = require_user(external_id, store)
    return OnboardingStatus(is_onboarded=bool(user.industry))
