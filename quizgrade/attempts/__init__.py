"""
Attempt History Module.

Local storage of recorded attempts with atomic policy-checked recording.
"""

from quizgrade.attempts.store import (
    AttemptLimitReached,
    AttemptStore,
    AttemptStoreError,
    new_attempt,
)

__all__ = [
    "AttemptLimitReached",
    "AttemptStore",
    "AttemptStoreError",
    "new_attempt",
]
