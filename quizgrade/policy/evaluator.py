"""
Attempt policy evaluator.

Decides whether a student may start another attempt given the
assignment's policy and the number of attempts already recorded.
The count is supplied by the caller; this module never reads storage.
"""

from typing import Any

from quizgrade.models import AttemptPolicy, AttemptStatus, TakeMode
from quizgrade.utils import coerce_int


def evaluate_attempt_policy(policy: Any, attempts_used: Any) -> AttemptStatus:
    """
    Evaluate an attempt policy.

    Args:
        policy: An AttemptPolicy. Raw mappings are parsed leniently and
            anything unrecognised behaves as unlimited.
        attempts_used: Attempts already recorded for this student and
            assignment. Negative or non-numeric values count as 0.

    Returns:
        AttemptStatus with ``can_take`` and a status line such as
        "Attempts: 2/3" or "Attempts: 1/1 (locked)".
    """
    policy = AttemptPolicy.from_raw(policy)
    used = max(0, coerce_int(attempts_used, default=0))

    if policy.mode is TakeMode.ONE_TIME:
        return _capped(used, cap=1)

    if policy.mode is TakeMode.LIMIT:
        # A limit of 0 means one attempt, never zero or unlimited
        return _capped(used, cap=max(1, policy.limit))

    return AttemptStatus(
        can_take=True,
        status_text=f"Attempts: {used} (unlimited)",
        used=used,
    )


def _capped(used: int, cap: int) -> AttemptStatus:
    if used >= cap:
        text = f"Attempts: {cap}/{cap} (locked)"
    else:
        text = f"Attempts: {used}/{cap}"
    return AttemptStatus(can_take=used < cap, status_text=text, used=used, cap=cap)
