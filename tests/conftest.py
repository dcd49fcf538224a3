"""
Pytest configuration and fixtures.

Provides common test fixtures for all test modules.
"""

import json
import tempfile
from pathlib import Path
from typing import Any, Generator

import pytest

from quizgrade.config import Settings
from quizgrade.library import LibraryParser
from quizgrade.models import (
    ContainsQuestion,
    ExactQuestion,
    Lesson,
    Library,
    MultiQuestion,
    SingleQuestion,
)


# ==============================================================================
# Directory Fixtures
# ==============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ==============================================================================
# Question Fixtures
# ==============================================================================


@pytest.fixture
def single_question() -> SingleQuestion:
    """Single choice question about capitals."""
    return SingleQuestion(
        id="q_single",
        prompt="What is the capital of France?",
        options=("Paris", "London", "Berlin"),
        answer="Paris",
    )


@pytest.fixture
def multi_question() -> MultiQuestion:
    """Multi choice question with two correct options."""
    return MultiQuestion(
        id="q_multi",
        prompt="Select A and B",
        options=("A", "B", "C"),
        answer=("A", "B"),
    )


@pytest.fixture
def exact_question() -> ExactQuestion:
    """Exact phrase question."""
    return ExactQuestion(
        id="q_exact",
        prompt="Type: I am learning English.",
        answer="I am learning English.",
    )


@pytest.fixture
def contains_question() -> ContainsQuestion:
    """Keyword question with a minimum word count."""
    return ContainsQuestion(
        id="q_contains",
        prompt="Write a sentence using 'because' and 'although'.",
        keywords=("because", "although"),
        min_words=5,
    )


# ==============================================================================
# Library Fixtures
# ==============================================================================


@pytest.fixture
def sample_library_data() -> dict[str, Any]:
    """Library JSON as published, including loosely authored fields."""
    return {
        "appName": "English Quest",
        "version": 2,
        "lessons": [
            {
                "id": "lesson_01",
                "title": "Capitals and Grammar",
                "kind": "quiz",
                "takePolicy": {"mode": "limit", "limit": "2"},
                "questions": [
                    {
                        "id": "q1",
                        "type": "single",
                        "prompt": "What is the capital of France?",
                        "options": "Paris\nLondon\n\n  Berlin  ",
                        "answer": "Paris",
                    },
                    {
                        "id": "q2",
                        "type": "multi",
                        "prompt": "Pick the vowels",
                        "options": ["A", "B", "E"],
                        "answer": ["A", "E"],
                    },
                    {
                        "id": "q3",
                        "type": "exact",
                        "prompt": "Type: I am learning English.",
                        "answer": "I am learning English.",
                    },
                    {
                        "id": "q4",
                        "type": "contains",
                        "prompt": "Use 'because' and 'although' in one sentence.",
                        "keywords": "because, although",
                        "minWords": "5",
                    },
                ],
            },
            {
                "id": "final",
                "title": "Final Exam",
                "kind": "EXAM",
                "takePolicy": {"mode": "one_time"},
                "questions": [
                    {
                        "id": "f1",
                        "type": "exact",
                        "prompt": "Say hello",
                        "answer": "hello",
                    }
                ],
            },
        ],
    }


@pytest.fixture
def sample_library(sample_library_data: dict[str, Any]) -> Library:
    """Parsed sample library."""
    return LibraryParser().parse(sample_library_data)


@pytest.fixture
def sample_lesson(sample_library: Library) -> Lesson:
    """The four-question lesson of the sample library."""
    lesson = sample_library.get_lesson("lesson_01")
    assert lesson is not None
    return lesson


@pytest.fixture
def library_file(temp_dir: Path, sample_library_data: dict[str, Any]) -> Path:
    """Sample library written to disk."""
    file_path = temp_dir / "library.json"
    file_path.write_text(json.dumps(sample_library_data), encoding="utf-8")
    return file_path


@pytest.fixture
def correct_answers() -> dict[str, Any]:
    """Fully correct answers for lesson_01, with incidental formatting noise."""
    return {
        "q1": "  paris ",
        "q2": ["E", "A"],
        "q3": "i  AM Learning english.",
        "q4": "I stayed home because it rained although it was warm",
    }


# ==============================================================================
# Settings Fixtures
# ==============================================================================


@pytest.fixture
def test_settings(temp_dir: Path, library_file: Path) -> Settings:
    """Create test settings pointing at temporary files."""
    return Settings(
        library_path=library_file,
        attempts_path=temp_dir / "data" / "attempts.json",
        max_library_size_mb=1.0,
        pass_threshold_percent=70,
    )
