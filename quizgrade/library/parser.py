"""
Library parser module.

Shapes the published library JSON into validated Library models.
Authored values are loose: ids may be missing, options and keywords
may be free text, numeric fields may be strings. Defaults are filled
here so everything downstream works on typed values.
"""

import json
import re
from typing import Any

from pydantic import ValidationError

from quizgrade.models import (
    AttemptPolicy,
    ContainsQuestion,
    ExactQuestion,
    Lesson,
    Library,
    MultiQuestion,
    QuestionType,
    SingleQuestion,
    TakeMode,
)
from quizgrade.utils import coerce_int

_KEYWORD_SEPARATOR = re.compile(r"\s*,\s*")


class LibraryParseError(Exception):
    """Raised when library data cannot be shaped into a Library."""

    def __init__(self, message: str, location: str | None = None):
        self.location = location
        if location:
            message = f"{location}: {message}"
        super().__init__(message)


def parse_option_lines(text: Any) -> tuple[str, ...]:
    """
    Split free text into option lines.

    Lines are trimmed and empty lines discarded.
    """
    return tuple(line.strip() for line in str(text or "").splitlines() if line.strip())


def _parse_lines(value: Any) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(str(v).strip() for v in value if v is not None and str(v).strip())
    return parse_option_lines(value)


def _parse_keywords(value: Any) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        return _parse_lines(value)
    return parse_option_lines(_KEYWORD_SEPARATOR.sub("\n", str(value or "")))


class LibraryParser:
    """
    Parses raw library data into a Library model.

    Accepts the camelCase keys of the published JSON
    (``appName``, ``takePolicy``, ``minWords``).
    """

    def __init__(self, default_take_mode: TakeMode = TakeMode.UNLIMITED):
        self._default_take_mode = default_take_mode

    def parse_json(self, content: str) -> Library:
        """
        Parse library JSON text.

        Raises:
            LibraryParseError: If the text is not valid JSON or not a library.
        """
        if not content or not content.strip():
            raise LibraryParseError("Library content is empty")
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise LibraryParseError(f"Invalid JSON: {e}") from e
        return self.parse(data)

    def parse(self, data: Any) -> Library:
        """
        Parse a decoded library object.

        Args:
            data: The decoded JSON document.

        Returns:
            Validated Library.

        Raises:
            LibraryParseError: If the structure cannot be interpreted.
        """
        if not isinstance(data, dict):
            raise LibraryParseError("Library must be a JSON object")

        raw_lessons = data.get("lessons")
        if not isinstance(raw_lessons, list):
            raw_lessons = []

        lessons = tuple(
            self._parse_lesson(raw, index) for index, raw in enumerate(raw_lessons, start=1)
        )

        version = coerce_int(data.get("version"), default=2)
        return Library(
            app_name=str(data.get("appName") or "English Quest"),
            version=version if version >= 1 else 2,
            lessons=lessons,
        )

    def _parse_lesson(self, raw: Any, index: int) -> Lesson:
        location = f"lessons[{index - 1}]"
        if not isinstance(raw, dict):
            raise LibraryParseError("Lesson must be an object", location)

        lesson_id = str(raw.get("id") or f"lesson_{index:02d}")

        raw_questions = raw.get("questions")
        if not isinstance(raw_questions, list):
            raw_questions = []

        questions = tuple(
            self._parse_question(q, lesson_id, number, f"{location}.questions[{number - 1}]")
            for number, q in enumerate(raw_questions, start=1)
        )

        try:
            return Lesson(
                id=lesson_id,
                title=str(raw.get("title") or "Untitled"),
                description=str(raw.get("description") or ""),
                kind=raw.get("kind"),
                take_policy=AttemptPolicy.from_raw(
                    raw.get("takePolicy"), default_mode=self._default_take_mode
                ),
                questions=questions,
            )
        except ValidationError as e:
            raise LibraryParseError(str(e), location) from e

    def _parse_question(self, raw: Any, lesson_id: str, number: int, location: str) -> Any:
        if not isinstance(raw, dict):
            raise LibraryParseError("Question must be an object", location)

        raw_type = str(raw.get("type") or QuestionType.SINGLE.value).strip().lower()
        try:
            question_type = QuestionType(raw_type)
        except ValueError as e:
            raise LibraryParseError(f"Unknown question type: '{raw_type}'", location) from e

        common = {
            "id": str(raw.get("id") or f"q_{lesson_id}_{number}"),
            "prompt": str(raw.get("prompt") or ""),
        }

        if question_type is not QuestionType.CONTAINS and raw.get("answer") is None:
            raise LibraryParseError("Missing required field: answer", location)

        try:
            if question_type is QuestionType.SINGLE:
                return SingleQuestion(
                    **common, options=_parse_lines(raw.get("options")), answer=str(raw["answer"])
                )
            if question_type is QuestionType.MULTI:
                return MultiQuestion(
                    **common,
                    options=_parse_lines(raw.get("options")),
                    answer=_parse_lines(raw["answer"]),
                )
            if question_type is QuestionType.EXACT:
                return ExactQuestion(**common, answer=str(raw["answer"]))
            return ContainsQuestion(
                **common,
                keywords=_parse_keywords(raw.get("keywords")),
                min_words=raw.get("minWords"),
            )
        except ValidationError as e:
            raise LibraryParseError(str(e), location) from e
