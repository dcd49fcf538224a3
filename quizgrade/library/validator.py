"""
Library validation module.

Finds authoring problems that make a question impossible or ambiguous
to grade. Grading itself tolerates all of these; the validator exists
so instructors can surface them before students do.
"""

from typing import Sequence

from quizgrade.models import (
    AnyQuestion,
    ContainsQuestion,
    ExactQuestion,
    Lesson,
    Library,
    MultiQuestion,
    SingleQuestion,
)
from quizgrade.utils import normalize, normalize_set


class LibraryValidationError(Exception):
    """Raised when library validation fails."""

    def __init__(self, issues: list[str]):
        self.issues = issues
        message = "Library validation failed:\n" + "\n".join(f"  - {i}" for i in issues)
        super().__init__(message)


class LibraryValidator:
    """
    Validates a library for gradeable questions.

    Checks:
    1. Lesson ids are unique, and question ids are unique within a lesson
    2. Every lesson has at least one question with a prompt
    3. Single/multi answers are among the options
    4. Exact answers are non-empty
    """

    def validate(self, library: Library) -> tuple[bool, list[str]]:
        """
        Validate a library and return any issues found.

        Returns:
            Tuple of (is_valid, list of issues).
        """
        issues: list[str] = []

        issues.extend(self._check_duplicate_lessons(library.lessons))

        for lesson in library.lessons:
            issues.extend(self._validate_lesson(lesson))

        return len(issues) == 0, issues

    def validate_or_raise(self, library: Library) -> None:
        """
        Validate a library and raise if invalid.

        Raises:
            LibraryValidationError: If validation fails.
        """
        is_valid, issues = self.validate(library)
        if not is_valid:
            raise LibraryValidationError(issues)

    def _check_duplicate_lessons(self, lessons: Sequence[Lesson]) -> list[str]:
        issues: list[str] = []
        seen: dict[str, int] = {}

        for i, lesson in enumerate(lessons, start=1):
            if lesson.id in seen:
                issues.append(
                    f"Duplicate lesson id: '{lesson.id}' "
                    f"(appears at positions {seen[lesson.id]} and {i})"
                )
            else:
                seen[lesson.id] = i

        return issues

    def _validate_lesson(self, lesson: Lesson) -> list[str]:
        issues: list[str] = []
        prefix = f"Lesson '{lesson.id}'"

        if not lesson.questions:
            issues.append(f"{prefix}: Lesson has no questions")

        seen: set[str] = set()
        for index, question in enumerate(lesson.questions, start=1):
            if question.id in seen:
                issues.append(f"{prefix}: Duplicate question id '{question.id}'")
            seen.add(question.id)
            issues.extend(self._validate_question(question, f"{prefix} Q{index}"))

        return issues

    def _validate_question(self, question: AnyQuestion, prefix: str) -> list[str]:
        """Validate a single question."""
        issues: list[str] = []

        if not question.prompt.strip():
            issues.append(f"{prefix}: Prompt is empty")

        if isinstance(question, SingleQuestion):
            if not question.options:
                issues.append(f"{prefix}: Single choice question has no options")
            elif normalize(question.answer) not in normalize_set(question.options):
                issues.append(f"{prefix}: Answer '{question.answer}' is not one of the options")

        elif isinstance(question, MultiQuestion):
            if not question.answer:
                issues.append(f"{prefix}: Multi choice question has no correct options")
            missing = normalize_set(question.answer) - normalize_set(question.options)
            if missing:
                issues.append(
                    f"{prefix}: Answers not among the options: {', '.join(sorted(missing))}"
                )

        elif isinstance(question, ExactQuestion):
            if not normalize(question.answer):
                issues.append(f"{prefix}: Exact answer is empty")

        elif isinstance(question, ContainsQuestion):
            if not question.keywords and not question.min_words:
                issues.append(
                    f"{prefix}: No keywords or minimum word count, any answer is accepted"
                )

        return issues
