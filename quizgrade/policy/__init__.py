"""
Attempt Policy Module.

Evaluates per-assignment attempt limits against attempt counts.
"""

from quizgrade.policy.evaluator import evaluate_attempt_policy

__all__ = ["evaluate_attempt_policy"]
