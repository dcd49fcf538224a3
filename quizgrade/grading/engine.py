"""
Grading engine - pure, per-question grading.

Every comparison runs on normalized text (lower-case, whitespace runs
collapsed, trimmed). Grading never raises: a malformed question or an
ill-formed answer simply produces an incorrect verdict.
"""

from collections.abc import Callable
from typing import Any

from quizgrade.models import (
    ContainsQuestion,
    ExactQuestion,
    MultiQuestion,
    QuestionType,
    SingleQuestion,
    Verdict,
)
from quizgrade.utils import count_words, normalize, normalize_set, pretty_print

# Submissions for text questions must be scalars
_COLLECTION_TYPES = (list, tuple, set, frozenset, dict)


def grade(question: Any, submitted: Any) -> Verdict:
    """
    Grade one submitted answer against a question.

    Args:
        question: A validated question model (single, multi, exact or contains).
        submitted: The raw answer: a string, a list of strings for multi
            questions, or None when unanswered.

    Returns:
        A fresh Verdict. Anything that is not a known question model
        yields ``correct=False`` with no type.
    """
    grader = _GRADERS.get(type(question))
    if grader is None:
        return Verdict(correct=False, normalized_user=_normalize_text(submitted))
    return grader(question, submitted)


def expected_answer(question: Any) -> str | tuple[str, ...] | None:
    """
    Return the expected answer of a question for display.

    Contains questions expose their keywords.
    """
    if isinstance(question, ContainsQuestion):
        return question.keywords
    return getattr(question, "answer", None)


def _normalize_text(submitted: Any) -> str:
    if isinstance(submitted, _COLLECTION_TYPES):
        return normalize(pretty_print(list(submitted)))
    return normalize(submitted)


def _grade_phrase(question: SingleQuestion | ExactQuestion, submitted: Any) -> Verdict:
    user = _normalize_text(submitted)
    expected = normalize(question.answer)
    correct = not isinstance(submitted, _COLLECTION_TYPES) and user == expected
    return Verdict(
        correct=correct,
        normalized_user=user,
        normalized_expected=expected,
        type=QuestionType(question.type),
    )


def _grade_multi(question: MultiQuestion, submitted: Any) -> Verdict:
    user = normalize_set(submitted)
    expected = normalize_set(question.answer)
    # Equal size plus every expected option present: no extras, no omissions
    correct = len(user) == len(expected) and all(v in user for v in expected)
    return Verdict(
        correct=correct,
        normalized_user=tuple(sorted(user)),
        normalized_expected=tuple(sorted(expected)),
        type=QuestionType.MULTI,
    )


def _grade_contains(question: ContainsQuestion, submitted: Any) -> Verdict:
    text = _normalize_text(submitted)
    keywords = tuple(k for k in (normalize(k) for k in question.keywords) if k)
    fields = dict(
        normalized_user=text,
        normalized_expected=tuple(sorted(set(keywords))),
        type=QuestionType.CONTAINS,
    )

    if isinstance(submitted, _COLLECTION_TYPES):
        return Verdict(correct=False, **fields)

    if question.min_words > 0 and count_words(text) < question.min_words:
        return Verdict(correct=False, **fields)

    if not keywords:
        # No keywords: any non-empty answer counts
        return Verdict(correct=bool(text), **fields)

    # Plain substring match, "cat" matches inside "category"
    return Verdict(correct=all(k in text for k in keywords), **fields)


_GRADERS: dict[type, Callable[[Any, Any], Verdict]] = {
    SingleQuestion: _grade_phrase,
    ExactQuestion: _grade_phrase,
    MultiQuestion: _grade_multi,
    ContainsQuestion: _grade_contains,
}
