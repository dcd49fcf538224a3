"""
Quiz Grader - grading and attempt-policy core for lesson quizzes.

This package grades student answers to single-choice, multi-choice,
exact-phrase and keyword-containment questions, and decides whether
a student may take another attempt at an assignment.
"""

__version__ = "1.0.0"
__author__ = "Quiz Grader Team"
