from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

OPTIONS_PER_QUESTION = 4
_TEXT_FIELDS = ("question", "correctAnswer", "explanation")


class InvalidQuizStructure(ValueError):
    pass


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def question_problem(item: Any) -> str | None:
    """Name the first rule ``item`` breaks, or None for a well-formed question."""
    if not isinstance(item, dict):
        return "not an object"
    for field in _TEXT_FIELDS:
        if not _is_text(item.get(field)):
            return f"missing {field}"
    options = item.get("options")
    if not isinstance(options, list) or len(options) != OPTIONS_PER_QUESTION:
        return f"options must be a list of {OPTIONS_PER_QUESTION}"
    if not all(_is_text(option) for option in options):
        return "empty option"
    if item["correctAnswer"] not in options:
        return "correctAnswer is not one of the options"
    return None


def is_valid_question(item: Any) -> bool:
    return question_problem(item) is None


def validate_quiz(parsed: Any) -> list[dict[str, Any]]:
    if not parsed or not isinstance(parsed, dict) or "questions" not in parsed:
        raise InvalidQuizStructure("Invalid quiz structure - missing questions array")
    questions = parsed["questions"]
    if not isinstance(questions, list):
        raise InvalidQuizStructure("Invalid quiz structure - questions is not an array")

    valid: list[dict[str, Any]] = []
    for index, item in enumerate(questions):
        problem = question_problem(item)
        if problem:
            logger.warning("quiz_question_dropped index=%s reason=%s", index, problem)
            continue
        valid.append(item)
    return valid
