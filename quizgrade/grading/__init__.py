"""
Grading Engine Module.

Pure grading of submitted answers plus lesson-level scoring.
"""

from quizgrade.grading.engine import expected_answer, grade
from quizgrade.grading.scorer import score_lesson
from quizgrade.utils import normalize, percent, pretty_print

__all__ = [
    "expected_answer",
    "grade",
    "normalize",
    "percent",
    "pretty_print",
    "score_lesson",
]
