from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from app.schemas.interview import CamelModel


class UserProfile(CamelModel):
    id: int
    external_id: str
    email: str | None = None
    name: str | None = None
    image_url: str | None = None
    industry: str | None = None
    experience: int | None = None
    bio: str | None = None
    skills: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class EnsureUserRequest(CamelModel):
    email: str | None = Field(default=None, max_length=320)
    name: str | None = Field(default=None, max_length=200)
    image_url: str | None = Field(default=None, max_length=2000)


class ProfileUpdateRequest(CamelModel):
    industry: str = Field(min_length=1, max_length=200)
    experience: int | None = Field(default=None, ge=0, le=50)
    bio: str | None = Field(default=None, max_length=2000)
    skills: list[str] = Field(default_factory=list, max_length=50)

    @field_validator("industry")
    @classmethod
    def _industry_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("industry must not be blank")
        return value.strip()

    @field_validator("skills")
    @classmethod
    def _clean_skills(cls, value: list[str]) -> list[str]:
        return [skill.strip() for skill in value if skill and skill.strip()]


class OnboardingStatus(CamelModel):
    is_onboarded: bool
