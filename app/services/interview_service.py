from __future__ import annotations

import logging
import sqlite3
import time
from typing import Any, Sequence

from pydantic import ValidationError

from app.ai.types import AIClient
from app.core.config import settings
from app.quiz.fallback import get_fallback_quiz
from app.quiz.normalize import normalize_response
from app.quiz.parsing import JsonParseFailure, parse_ai_response
from app.quiz.validation import InvalidQuizStructure, validate_quiz
from app.schemas.interview import AssessmentRecord, QuestionResult, QuizQuestion
from app.services.errors import PersistenceFailure
from app.services.user_service import require_user
from app.storage.db import SqliteStore

logger = logging.getLogger(__name__)

ASSESSMENT_CATEGORY = "Technical"


def _clip(text: str) -> str:
    limit = max(0, settings.log_message_max_chars)
    return text if len(text) <= limit else text[:limit] + "..."


def build_quiz_prompt(industry: str | None, skills: Sequence[str] | None, count: int) -> str:
    expertise = f" with expertise in {', '.join(skills)}" if skills else ""
    return f"""
    Generate {count} technical interview questions for a {industry} professional{expertise}.

    Each question should be multiple choice with 4 options.

    IMPORTANT: Return ONLY valid JSON with no additional text, explanations, or formatting.
    The JSON must be properly formatted with no syntax errors.

    Use this exact JSON structure:
    {{
      "questions": [
        {{
          "question": "Your question here",
          "options": ["Option 1", "Option 2", "Option 3", "Option 4"],
          "correctAnswer": "Option 1",
          "explanation": "Why this is correct"
        }}
      ]
    }}

    Make sure:
    - All strings are properly quoted
    - No trailing commas
    - No unescaped quotes within strings
    - Valid JSON syntax throughout
    """


def build_improvement_prompt(industry: str | None, wrong: Sequence[QuestionResult]) -> str:
    wrong_questions_text = "\n\n".join(
        f'Question: "{item.question}"\nCorrect Answer: "{item.correct_answer}"\nUser Answer: "{item.user_answer}"'
        for item in wrong
    )
    return f"""
    The user got the following {industry} technical interview questions wrong:

    {wrong_questions_text}

    Based on these mistakes, provide a concise, specific improvement tip.
    Focus on the knowledge gaps revealed by these wrong answers.
    Keep the response under 2 sentences and make it encouraging.
    Don't explicitly mention the mistakes, instead focus on what to learn/practice.

    Return only the improvement tip text, no additional formatting.
    """


def _to_questions(items: Sequence[dict[str, Any]]) -> list[QuizQuestion]:
    questions: list[QuizQuestion] = []
    for item in items:
        try:
            questions.append(QuizQuestion.model_validate(item))
        except ValidationError as exc:
            logger.warning("quiz_question_dropped reason=schema error_count=%s", exc.error_count())
    return questions


def resolve_quiz(
    generated: Sequence[QuizQuestion],
    fallback: Sequence[QuizQuestion],
    *,
    max_questions: int,
    min_questions: int,
) -> list[QuizQuestion]:
    """Apply the top-up policy: pad short quizzes with fallback, cap long ones."""
    if not generated:
        return list(fallback)
    if len(generated) < min_questions:
        return [*generated, *fallback][:max_questions]
    return list(generated[:max_questions])


async def _generate_questions(ai: AIClient, prompt: str) -> list[QuizQuestion]:
    started = time.perf_counter()
    try:
        text = await ai.generate(prompt)
    except Exception as exc:  # noqa: BLE001 - deterministic fallback is expected
        logger.warning(
            "quiz_generation_failed stage=model latency_ms=%s: %s",
            int((time.perf_counter() - started) * 1000),
            exc,
        )
        return []

    logger.debug("quiz_raw_response text=%s", _clip(text))
    try:
        parsed = parse_ai_response(normalize_response(text))
        valid = validate_quiz(parsed)
    except JsonParseFailure as exc:
        logger.warning(
            "quiz_generation_failed stage=parse strategies=%s: %s",
            ",".join(a.strategy for a in exc.attempts),
            exc,
        )
        logger.debug("quiz_unparseable_response text=%s", _clip(text))
        return []
    except InvalidQuizStructure as exc:
        logger.warning("quiz_generation_failed stage=validate: %s", exc)
        return []

    questions = _to_questions(valid)
    logger.info(
        "quiz_generated valid=%s latency_ms=%s",
        len(questions),
        int((time.perf_counter() - started) * 1000),
    )
    return questions


async def generate_quiz(
    external_id: str | None,
    *,
    ai: AIClient,
    store: SqliteStore,
) -> list[QuizQuestion]:
    """Build a quiz for the caller's industry and skills.

    Generation, parse and validation failures never escape: the caller always
    gets between ``quiz_min_questions`` and ``quiz_question_count`` questions,
    topped up from the static fallback when needed. Missing identity or
    profile still raise.
    """
    user = require_user(external_id, store)
    max_questions = settings.quiz_question_count

    prompt = build_quiz_prompt(user.industry, user.skills, max_questions)
    generated = await _generate_questions(ai, prompt)
    fallback = get_fallback_quiz(user.industry, user.skills)
    if not generated:
        logger.info("quiz_fallback_used user_id=%s", user.id)
    elif len(generated) < settings.quiz_min_questions:
        logger.info("quiz_fallback_padding user_id=%s generated=%s", user.id, len(generated))

    return resolve_quiz(
        generated,
        fallback,
        max_questions=max_questions,
        min_questions=settings.quiz_min_questions,
    )


def score_answers(questions: Sequence[QuizQuestion], answers: Sequence[str | None]) -> list[QuestionResult]:
    results: list[QuestionResult] = []
    for index, question in enumerate(questions):
        user_answer = answers[index] if index < len(answers) else None
        results.append(
            QuestionResult(
                question=question.question,
                correct_answer=question.correct_answer,
                user_answer=user_answer,
                is_correct=user_answer == question.correct_answer,
                explanation=question.explanation,
            )
        )
    return results


async def _improvement_tip(ai: AIClient, industry: str | None, wrong: Sequence[QuestionResult]) -> str | None:
    try:
        tip = (await ai.generate(build_improvement_prompt(industry, wrong))).strip()
    except Exception as exc:  # noqa: BLE001 - the tip is optional
        logger.warning("improvement_tip_failed wrong=%s: %s", len(wrong), exc)
        return None
    return tip or None


async def save_quiz_result(
    external_id: str | None,
    questions: Sequence[QuizQuestion],
    answers: Sequence[str | None],
    score: float,
    *,
    ai: AIClient,
    store: SqliteStore,
) -> AssessmentRecord:
    user = require_user(external_id, store)
    results = score_answers(questions, answers)

    wrong = [item for item in results if not item.is_correct]
    improvement_tip = await _improvement_tip(ai, user.industry, wrong) if wrong else None

    try:
        record = store.create_assessment(
            user_id=user.id,
            score=score,
            questions=[item.model_dump(by_alias=True) for item in results],
            category=ASSESSMENT_CATEGORY,
            improvement_tip=improvement_tip,
        )
    except sqlite3.Error as exc:
        logger.error("quiz_result_save_failed user_id=%s error=%s", user.id, exc)
        raise PersistenceFailure("Failed to save quiz result") from exc

    logger.info(
        "quiz_result_saved user_id=%s score=%s wrong=%s tip=%s",
        user.id,
        score,
        len(wrong),
        improvement_tip is not None,
    )
    return AssessmentRecord(**record)


def get_assessments(external_id: str | None, *, store: SqliteStore) -> list[AssessmentRecord]:
    user = require_user(external_id, store)
    try:
        records = store.list_assessments(user.id)
    except sqlite3.Error as exc:
        logger.error("assessments_fetch_failed user_id=%s error=%s", user.id, exc)
        raise PersistenceFailure("Failed to fetch assessments") from exc
    return [AssessmentRecord(**record) for record in records]
