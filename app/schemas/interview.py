from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

AssessmentCategory = Literal["Technical"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuizQuestion(CamelModel):
    question: str = Field(min_length=1)
    options: list[str] = Field(min_length=4, max_length=4)
    correct_answer: str = Field(min_length=1)
    explanation: str = Field(min_length=1)

    @field_validator("options")
    @classmethod
    def _options_not_empty(cls, value: list[str]) -> list[str]:
        if any(not option for option in value):
            raise ValueError("options must be non-empty strings")
        return value

    @model_validator(mode="after")
    def _answer_is_an_option(self) -> "QuizQuestion":
        if self.correct_answer not in self.options:
            raise ValueError("correct_answer must be one of options")
        return self


class QuizResponse(CamelModel):
    questions: list[QuizQuestion]


class QuizResultRequest(CamelModel):
    questions: list[QuizQuestion] = Field(min_length=1, max_length=10)
    answers: list[str | None] = Field(default_factory=list, max_length=10)
    score: float = Field(ge=0.0, le=100.0)


class QuestionResult(CamelModel):
    question: str
    correct_answer: str
    user_answer: str | None = None
    is_correct: bool
    explanation: str


class AssessmentRecord(CamelModel):
    id: int
    user_id: int
    score: float
    questions: list[QuestionResult] = Field(default_factory=list)
    category: AssessmentCategory = "Technical"
    improvement_tip: str | None = None
    created_at: datetime
