"""
Unit tests for the attempt history store.
"""

import json
import threading
from pathlib import Path

import pytest

from quizgrade.attempts import AttemptLimitReached, AttemptStore, AttemptStoreError, new_attempt
from quizgrade.grading import score_lesson
from quizgrade.models import AttemptPolicy, AttemptRecord, Lesson, LessonKind, TakeMode


def _attempt(student: str = "alice", lesson: str = "lesson_01", score: int = 3) -> AttemptRecord:
    return AttemptRecord(
        student_id=student,
        lesson_id=lesson,
        lesson_title="Capitals",
        score=score,
        total=4,
        percent=75,
    )


class TestAttemptRecord:
    """Tests for the AttemptRecord model."""

    def test_attempt_id_format(self) -> None:
        attempt = _attempt()

        assert attempt.attempt_id.startswith("a_")
        assert len(attempt.attempt_id.split("_")) == 3
        assert attempt.attempt_id != _attempt().attempt_id

    def test_score_cannot_exceed_total(self) -> None:
        with pytest.raises(ValueError, match="cannot exceed"):
            AttemptRecord(student_id="a", lesson_id="l", score=5, total=4, percent=100)

    def test_new_attempt_from_result(self, sample_lesson: Lesson, correct_answers: dict) -> None:
        result = score_lesson(sample_lesson, correct_answers)
        attempt = new_attempt("bob", result)

        assert attempt.student_id == "bob"
        assert attempt.lesson_id == "lesson_01"
        assert attempt.kind is LessonKind.QUIZ
        assert (attempt.score, attempt.total, attempt.percent) == (4, 4, 100)


class TestAttemptStore:
    """Tests for AttemptStore."""

    def test_empty_store(self, temp_dir: Path) -> None:
        store = AttemptStore(temp_dir / "attempts.json")

        assert store.attempts_for("alice") == []
        assert store.count_for("alice", "lesson_01") == 0

    def test_record_and_count(self, temp_dir: Path) -> None:
        store = AttemptStore(temp_dir / "attempts.json")
        store.record(_attempt())
        store.record(_attempt())
        store.record(_attempt(lesson="other"))
        store.record(_attempt(student="bob"))

        assert store.count_for("alice", "lesson_01") == 2
        assert store.count_for("alice", "other") == 1
        assert store.count_for("bob", "lesson_01") == 1
        assert len(store.attempts_for("alice")) == 3

    def test_persists_published_shape(self, temp_dir: Path) -> None:
        path = temp_dir / "nested" / "attempts.json"
        attempt = _attempt()
        AttemptStore(path).record(attempt)

        raw = json.loads(path.read_text(encoding="utf-8"))
        saved = raw["alice"][0]

        assert saved["attemptId"] == attempt.attempt_id
        assert saved["lessonId"] == "lesson_01"
        assert saved["kind"] == "quiz"
        assert "studentId" not in saved

        reloaded = AttemptStore(path).attempts_for("alice")
        assert reloaded == [attempt]

    def test_status_for(self, temp_dir: Path) -> None:
        store = AttemptStore(temp_dir / "attempts.json")
        policy = AttemptPolicy(mode=TakeMode.ONE_TIME)

        assert store.status_for(policy, "alice", "lesson_01").can_take
        store.record(_attempt())
        assert not store.status_for(policy, "alice", "lesson_01").can_take

    def test_record_if_allowed(self, temp_dir: Path) -> None:
        store = AttemptStore(temp_dir / "attempts.json")
        policy = AttemptPolicy(mode=TakeMode.LIMIT, limit=2)

        first = store.record_if_allowed(policy, _attempt())
        second = store.record_if_allowed(policy, _attempt())

        assert first.status_text == "Attempts: 1/2"
        assert second.status_text == "Attempts: 2/2 (locked)"
        assert not second.can_take

        with pytest.raises(AttemptLimitReached) as exc_info:
            store.record_if_allowed(policy, _attempt())

        assert exc_info.value.status.status_text == "Attempts: 2/2 (locked)"
        assert store.count_for("alice", "lesson_01") == 2

    def test_concurrent_submissions_respect_limit(self, temp_dir: Path) -> None:
        """Racing submissions cannot exceed the cap."""
        store = AttemptStore(temp_dir / "attempts.json")
        policy = AttemptPolicy(mode=TakeMode.LIMIT, limit=3)
        refused: list[AttemptLimitReached] = []
        barrier = threading.Barrier(8)

        def submit() -> None:
            barrier.wait()
            try:
                store.record_if_allowed(policy, _attempt())
            except AttemptLimitReached as e:
                refused.append(e)

        threads = [threading.Thread(target=submit) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.count_for("alice", "lesson_01") == 3
        assert len(refused) == 5

    def test_corrupt_file(self, temp_dir: Path) -> None:
        path = temp_dir / "attempts.json"
        path.write_text("{oops", encoding="utf-8")

        with pytest.raises(AttemptStoreError, match="Could not read"):
            AttemptStore(path).attempts_for("alice")

    def test_wrong_shape(self, temp_dir: Path) -> None:
        path = temp_dir / "attempts.json"
        path.write_text(json.dumps({"alice": {"not": "a list"}}), encoding="utf-8")

        with pytest.raises(AttemptStoreError, match="must be a list"):
            AttemptStore(path).count_for("alice", "lesson_01")

    def test_invalid_record(self, temp_dir: Path) -> None:
        path = temp_dir / "attempts.json"
        path.write_text(json.dumps({"alice": [{"lessonId": "l1"}]}), encoding="utf-8")

        with pytest.raises(AttemptStoreError, match="Invalid attempt record"):
            AttemptStore(path).attempts_for("alice")
