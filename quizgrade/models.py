"""
Pydantic models for Quiz Grader.

These models define the schemas for:
- Questions (a closed union over the four question types)
- Grading verdicts and lesson results
- Attempt policies, attempt status and attempt records
- Lessons and the published lesson library

Lenient coercion of authored values (numeric strings, unknown modes)
happens here, once, so the grading and policy code only ever sees
validated values.
"""

from datetime import datetime, timezone
from enum import Enum
from secrets import token_hex
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from quizgrade.utils import coerce_int, normalize, percent, pretty_print

# ==============================================================================
# Enumerations
# ==============================================================================


class QuestionType(str, Enum):
    """Question type tag."""

    SINGLE = "single"  # One correct option
    MULTI = "multi"  # Set of correct options, no partial credit
    EXACT = "exact"  # Whole phrase equality
    CONTAINS = "contains"  # Required keywords and optional minimum word count


class TakeMode(str, Enum):
    """How many times a student may submit an assignment."""

    UNLIMITED = "unlimited"
    ONE_TIME = "one_time"
    LIMIT = "limit"


class LessonKind(str, Enum):
    """Assignment category shown to students."""

    HOMEWORK = "homework"
    QUIZ = "quiz"
    EXAM = "exam"


def _clean_lines(values: Any) -> tuple[str, ...]:
    """Trim each string and drop empty ones."""
    if values is None:
        return ()
    if isinstance(values, str):
        values = [values]
    cleaned = (str(v).strip() for v in values if v is not None)
    return tuple(v for v in cleaned if v)


# ==============================================================================
# Question Models
# ==============================================================================


class _QuestionBase(BaseModel):
    """Fields shared by every question type."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Stable question identifier")

    prompt: str = Field(default="", description="Question text shown to the student")


class SingleQuestion(_QuestionBase):
    """Single choice: exactly one correct option."""

    type: Literal["single"] = "single"

    options: tuple[str, ...] = Field(default=(), description="Ordered option strings")

    answer: str = Field(..., description="The correct option")

    @field_validator("options", mode="before")
    @classmethod
    def clean_options(cls, v: Any) -> tuple[str, ...]:
        """Trim options and discard empty lines."""
        return _clean_lines(v)


class MultiQuestion(_QuestionBase):
    """Multi choice: the selection must equal the correct set."""

    type: Literal["multi"] = "multi"

    options: tuple[str, ...] = Field(default=(), description="Ordered option strings")

    answer: tuple[str, ...] = Field(..., description="Correct options (unordered)")

    @field_validator("options", mode="before")
    @classmethod
    def clean_options(cls, v: Any) -> tuple[str, ...]:
        """Trim options and discard empty lines."""
        return _clean_lines(v)

    @field_validator("answer", mode="before")
    @classmethod
    def collapse_duplicates(cls, v: Any) -> tuple[str, ...]:
        """Drop answers that duplicate an earlier one after normalization."""
        seen: set[str] = set()
        unique: list[str] = []
        for item in _clean_lines(v):
            key = normalize(item)
            if key not in seen:
                seen.add(key)
                unique.append(item)
        return tuple(unique)


class ExactQuestion(_QuestionBase):
    """Exact phrase, compared after normalization."""

    type: Literal["exact"] = "exact"

    answer: str = Field(..., description="The correct phrase")


class ContainsQuestion(_QuestionBase):
    """Free text that must contain every keyword."""

    type: Literal["contains"] = "contains"

    keywords: tuple[str, ...] = Field(default=(), description="Required keyword substrings")

    min_words: int = Field(
        default=0,
        ge=0,
        alias="minWords",
        description="Minimum word count, 0 for no minimum",
    )

    @field_validator("keywords", mode="before")
    @classmethod
    def clean_keywords(cls, v: Any) -> tuple[str, ...]:
        """Trim keywords and discard empty ones."""
        return _clean_lines(v)

    @field_validator("min_words", mode="before")
    @classmethod
    def parse_min_words(cls, v: Any) -> int:
        """Parse leniently; absent, invalid or negative values mean no minimum."""
        return max(0, coerce_int(v, default=0))


AnyQuestion = Union[SingleQuestion, MultiQuestion, ExactQuestion, ContainsQuestion]

Question = Annotated[AnyQuestion, Field(discriminator="type")]


# ==============================================================================
# Grading Result Models
# ==============================================================================


class Verdict(BaseModel):
    """
    The result of grading one question against one submitted answer.

    ``normalized_user`` and ``normalized_expected`` are strings for
    single/exact/contains user text, and sorted tuples for sets.
    """

    model_config = ConfigDict(frozen=True)

    correct: bool = Field(..., description="Whether the answer is correct")

    normalized_user: str | tuple[str, ...] = Field(
        default="",
        description="Normalized submitted answer",
    )

    normalized_expected: str | tuple[str, ...] = Field(
        default="",
        description="Normalized expected answer (or keywords)",
    )

    type: QuestionType | None = Field(
        default=None,
        description="Question type, None when the question was malformed",
    )


class QuestionResult(BaseModel):
    """A graded question inside a lesson result."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=1, description="1-based position in the lesson")

    question: Question

    submitted: str | tuple[str, ...] | None = Field(
        default=None,
        description="Raw submitted answer",
    )

    verdict: Verdict

    @field_validator("submitted", mode="before")
    @classmethod
    def freeze_submitted(cls, v: Any) -> Any:
        """Store list and set answers as tuples; other non-strings become their str()."""
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (set, frozenset)):
            return tuple(sorted(str(item) for item in v))
        if isinstance(v, (list, tuple)):
            return tuple(str(item) for item in v)
        return str(v)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def expected_display(self) -> str:
        """Expected answer (or keywords) as display text."""
        if isinstance(self.question, ContainsQuestion):
            return pretty_print(self.question.keywords)
        return pretty_print(self.question.answer)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def submitted_display(self) -> str:
        """Submitted answer as display text."""
        return pretty_print(self.submitted)


class LessonResult(BaseModel):
    """
    Aggregated result of grading every question of a lesson.

    One point per correct question; no partial credit.
    """

    model_config = ConfigDict(frozen=True)

    lesson_id: str

    lesson_title: str

    kind: LessonKind = LessonKind.QUIZ

    results: tuple[QuestionResult, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def score(self) -> int:
        """Number of correct questions."""
        return sum(1 for r in self.results if r.verdict.correct)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total(self) -> int:
        """Number of graded questions."""
        return len(self.results)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def percent(self) -> int:
        """Score as a rounded percentage."""
        return percent(self.score, self.total)

    @property
    def wrong(self) -> tuple[QuestionResult, ...]:
        """Results that were not correct."""
        return tuple(r for r in self.results if not r.verdict.correct)


# ==============================================================================
# Attempt Models
# ==============================================================================


class AttemptPolicy(BaseModel):
    """
    Per-assignment rule limiting how many times a student may submit.

    Unknown modes fall back to unlimited and ``limit`` is parsed
    leniently with a default of 0.
    """

    model_config = ConfigDict(frozen=True)

    mode: TakeMode = Field(default=TakeMode.UNLIMITED, description="Attempt mode")

    limit: int = Field(
        default=0,
        ge=0,
        description="Attempt cap, meaningful only when mode is 'limit'",
    )

    @field_validator("mode", mode="before")
    @classmethod
    def parse_mode(cls, v: Any) -> TakeMode:
        """Map unknown or missing modes to unlimited."""
        if isinstance(v, TakeMode):
            return v
        try:
            return TakeMode(str(v).strip().lower())
        except ValueError:
            return TakeMode.UNLIMITED

    @field_validator("limit", mode="before")
    @classmethod
    def parse_limit(cls, v: Any) -> int:
        """Parse leniently; negative values become 0."""
        return max(0, coerce_int(v, default=0))

    @classmethod
    def from_raw(cls, raw: Any, default_mode: TakeMode = TakeMode.UNLIMITED) -> "AttemptPolicy":
        """
        Build a policy from a raw ``takePolicy`` value.

        Anything that is not a mapping yields a policy in ``default_mode``.
        """
        if isinstance(raw, AttemptPolicy):
            return raw
        if not isinstance(raw, dict):
            return cls(mode=default_mode)
        return cls(mode=raw.get("mode", default_mode), limit=raw.get("limit"))


class AttemptStatus(BaseModel):
    """Outcome of evaluating an attempt policy."""

    model_config = ConfigDict(frozen=True)

    can_take: bool = Field(..., description="Whether a new attempt is permitted")

    status_text: str = Field(..., description="Human-readable attempt status")

    used: int = Field(default=0, ge=0, description="Attempts already recorded")

    cap: int | None = Field(default=None, description="Effective cap, None when unlimited")


def _new_attempt_id() -> str:
    """Attempt ids look like a_1f2e3d4c_18c3a9f0b12."""
    millis = int(datetime.now(timezone.utc).timestamp() * 1000)
    return f"a_{token_hex(4)}_{millis:x}"


class AttemptRecord(BaseModel):
    """One recorded attempt by a student at a lesson."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    attempt_id: str = Field(default_factory=_new_attempt_id, alias="attemptId")

    student_id: str = Field(..., min_length=1, alias="studentId")

    lesson_id: str = Field(..., min_length=1, alias="lessonId")

    lesson_title: str = Field(default="", alias="lessonTitle")

    kind: LessonKind = LessonKind.QUIZ

    score: int = Field(..., ge=0)

    total: int = Field(..., ge=0)

    percent: int = Field(..., ge=0, le=100)

    taken_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="takenAt",
    )

    @model_validator(mode="after")
    def validate_score_range(self) -> "AttemptRecord":
        """Ensure the score does not exceed the total."""
        if self.score > self.total:
            raise ValueError(f"Score ({self.score}) cannot exceed total ({self.total})")
        return self


# ==============================================================================
# Library Models
# ==============================================================================


class Lesson(BaseModel):
    """An assignment: an ordered list of questions plus its attempt policy."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)

    title: str = Field(default="Untitled")

    description: str = Field(default="")

    kind: LessonKind = Field(default=LessonKind.QUIZ)

    take_policy: AttemptPolicy = Field(default_factory=AttemptPolicy, alias="takePolicy")

    questions: tuple[Question, ...] = Field(default=())

    @field_validator("kind", mode="before")
    @classmethod
    def parse_kind(cls, v: Any) -> LessonKind:
        """Unknown kinds fall back to quiz."""
        if isinstance(v, LessonKind):
            return v
        try:
            return LessonKind(str(v or "").strip().lower())
        except ValueError:
            return LessonKind.QUIZ

    def get_question(self, question_id: str) -> AnyQuestion | None:
        """Find a question by id."""
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


class Library(BaseModel):
    """The published lesson library."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    app_name: str = Field(default="English Quest", alias="appName")

    version: int = Field(default=2, ge=1)

    lessons: tuple[Lesson, ...] = Field(default=())

    @computed_field  # type: ignore[prop-decorator]
    @property
    def question_count(self) -> int:
        """Total number of questions across all lessons."""
        return sum(len(lesson.questions) for lesson in self.lessons)

    def get_lesson(self, lesson_id: str) -> Lesson | None:
        """Find a lesson by id."""
        for lesson in self.lessons:
            if lesson.id == lesson_id:
                return lesson
        return None
