from __future__ import annotations

from typing import Sequence

from app.schemas.interview import QuizQuestion


def get_fallback_quiz(industry: str | None, skills: Sequence[str] | None = None) -> list[QuizQuestion]:
    """Static three-question quiz served when generated content can't be used.

    ``skills`` is accepted for signature parity with generation but does not
    change the content.
    """
    _ = skills
    return [
        QuizQuestion(
            question=f"What is the most important skill for a {industry} professional?",
            options=[
                "Technical expertise",
                "Communication skills",
                "Problem-solving ability",
                "Time management",
            ],
            correct_answer="Problem-solving ability",
            explanation=(
                "Problem-solving is crucial across all technical roles as it combines "
                "technical knowledge with analytical thinking."
            ),
        ),
        QuizQuestion(
            question="How would you approach learning new technologies?",
            options=[
                "Self-study only",
                "Formal training courses",
                "Hands-on practice with mentorship",
                "Reading documentation exclusively",
            ],
            correct_answer="Hands-on practice with mentorship",
            explanation=(
                "Combining practical experience with guidance from experienced professionals "
                "is the most effective learning approach."
            ),
        ),
        QuizQuestion(
            question="What's the best way to handle a challenging technical problem?",
            options=[
                "Work on it alone until solved",
                "Ask for help immediately",
                "Break it down into smaller parts",
                "Look for similar solutions online",
            ],
            correct_answer="Break it down into smaller parts",
            explanation="Breaking complex problems into manageable components is a fundamental problem-solving technique.",
        ),
    ]
