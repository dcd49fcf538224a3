"""
Lesson scorer.

Grades every question of a lesson against a mapping of submitted
answers and aggregates the verdicts into a score.
"""

from collections.abc import Mapping
from typing import Any

from quizgrade.grading.engine import grade
from quizgrade.models import Lesson, LessonResult, QuestionResult


def score_lesson(lesson: Lesson, answers: Mapping[str, Any] | None) -> LessonResult:
    """
    Grade all questions of a lesson, in order.

    Args:
        lesson: The lesson being taken.
        answers: Submitted answers keyed by question id. Questions with
            no entry are graded as unanswered.

    Returns:
        LessonResult with one QuestionResult per question.
    """
    answers = answers or {}
    results: list[QuestionResult] = []

    for index, question in enumerate(lesson.questions, start=1):
        submitted = answers.get(question.id)
        results.append(
            QuestionResult(
                index=index,
                question=question,
                submitted=submitted,
                verdict=grade(question, submitted),
            )
        )

    return LessonResult(
        lesson_id=lesson.id,
        lesson_title=lesson.title,
        kind=lesson.kind,
        results=tuple(results),
    )
