"""
Attempt history store.

Keeps one growing list of attempt records per student in a local JSON
file: ``{"<student id>": [{attempt}, ...]}``. Checking the attempt
policy and appending the new attempt happen under one lock, so two
submissions racing inside this process cannot exceed a limit.
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from quizgrade.models import AttemptPolicy, AttemptRecord, AttemptStatus, LessonResult
from quizgrade.policy import evaluate_attempt_policy

logger = logging.getLogger(__name__)


class AttemptStoreError(Exception):
    """Raised when the attempt history file cannot be read or written."""

    def __init__(self, message: str, file_path: str | Path, cause: Exception | None = None):
        self.file_path = str(file_path)
        self.cause = cause
        super().__init__(f"Attempt history '{file_path}': {message}")


class AttemptLimitReached(Exception):
    """Raised when the attempt policy forbids recording another attempt."""

    def __init__(self, status: AttemptStatus):
        self.status = status
        super().__init__(f"No attempts left ({status.status_text})")


def new_attempt(student_id: str, result: LessonResult) -> AttemptRecord:
    """Build an attempt record from a graded lesson."""
    return AttemptRecord(
        student_id=student_id,
        lesson_id=result.lesson_id,
        lesson_title=result.lesson_title,
        kind=result.kind,
        score=result.score,
        total=result.total,
        percent=result.percent,
    )


class AttemptStore:
    """
    JSON-file backed attempt history.

    One store instance should be shared per file; the lock only
    serializes callers within this process.
    """

    def __init__(self, path: Path | str):
        self._path = Path(path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def attempts_for(self, student_id: str) -> list[AttemptRecord]:
        """All attempts of a student, oldest first."""
        with self._lock:
            return list(self._load().get(student_id, []))

    def count_for(self, student_id: str, lesson_id: str) -> int:
        """Number of attempts a student has recorded for a lesson."""
        with self._lock:
            return self._count(self._load(), student_id, lesson_id)

    def status_for(self, policy: AttemptPolicy, student_id: str, lesson_id: str) -> AttemptStatus:
        """Evaluate the policy against the current attempt count."""
        return evaluate_attempt_policy(policy, self.count_for(student_id, lesson_id))

    def record(self, attempt: AttemptRecord) -> None:
        """Append an attempt unconditionally."""
        with self._lock:
            data = self._load()
            data.setdefault(attempt.student_id, []).append(attempt)
            self._save(data)
        logger.info(
            "Recorded attempt %s for %s on %s (%d/%d)",
            attempt.attempt_id,
            attempt.student_id,
            attempt.lesson_id,
            attempt.score,
            attempt.total,
        )

    def record_if_allowed(self, policy: AttemptPolicy, attempt: AttemptRecord) -> AttemptStatus:
        """
        Check the policy and record the attempt as one step.

        Args:
            policy: The lesson's attempt policy.
            attempt: The attempt to record.

        Returns:
            The attempt status after recording.

        Raises:
            AttemptLimitReached: If the policy forbids another attempt.
            AttemptStoreError: If the history file cannot be read or written.
        """
        with self._lock:
            data = self._load()
            used = self._count(data, attempt.student_id, attempt.lesson_id)
            status = evaluate_attempt_policy(policy, used)
            if not status.can_take:
                logger.warning(
                    "Refused attempt for %s on %s: %s",
                    attempt.student_id,
                    attempt.lesson_id,
                    status.status_text,
                )
                raise AttemptLimitReached(status)

            data.setdefault(attempt.student_id, []).append(attempt)
            self._save(data)

        logger.info("Recorded attempt %s (%s)", attempt.attempt_id, status.status_text)
        return evaluate_attempt_policy(policy, used + 1)

    @staticmethod
    def _count(data: dict[str, list[AttemptRecord]], student_id: str, lesson_id: str) -> int:
        return sum(1 for a in data.get(student_id, []) if a.lesson_id == lesson_id)

    def _load(self) -> dict[str, list[AttemptRecord]]:
        if not self._path.exists():
            return {}

        try:
            raw: Any = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise AttemptStoreError("Could not read file", self._path, cause=e) from e

        if not isinstance(raw, dict):
            raise AttemptStoreError("Expected a JSON object keyed by student id", self._path)

        data: dict[str, list[AttemptRecord]] = {}
        for student_id, items in raw.items():
            if not isinstance(items, list):
                raise AttemptStoreError(f"Attempts for '{student_id}' must be a list", self._path)
            try:
                data[student_id] = [
                    AttemptRecord.model_validate({"studentId": student_id, **item})
                    for item in items
                ]
            except (TypeError, ValidationError) as e:
                raise AttemptStoreError(
                    f"Invalid attempt record for '{student_id}'", self._path, cause=e
                ) from e
        return data

    def _save(self, data: dict[str, list[AttemptRecord]]) -> None:
        payload = {
            student_id: [
                a.model_dump(mode="json", by_alias=True, exclude={"student_id"}) for a in attempts
            ]
            for student_id, attempts in data.items()
        }
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise AttemptStoreError("Could not write file", self._path, cause=e) from e
