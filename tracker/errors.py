"""
Error types raised by the tracker.

The scheduler itself only ever raises InvalidRating. Store-level errors are
kept distinct so callers can tell "bad input" apart from "the problem is gone"
and "someone else reviewed it first".
"""

from __future__ import annotations

from typing import Optional


class TrackerError(Exception):
    """Base class for all tracker errors."""


class InvalidRating(TrackerError, ValueError):
    """Rating is not one of Again (1), Hard (2), Good (3), Easy (4)."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid rating {value!r}: expected 1-4 or Again/Hard/Good/Easy")


class ProblemNotFound(TrackerError, LookupError):
    """No problem with this id exists for the requesting user."""

    def __init__(self, problem_id: str, user_id: str):
        self.problem_id = problem_id
        self.user_id = user_id
        super().__init__(f"Problem {problem_id!r} not found for user {user_id!r}")


class ConcurrentReviewError(TrackerError):
    """The problem was modified between loading and writing a review."""

    def __init__(self, problem_id: str, expected_review_count: int):
        self.problem_id = problem_id
        self.expected_review_count = expected_review_count
        super().__init__(
            f"Problem {problem_id!r} was reviewed concurrently "
            f"(expected review_count={expected_review_count}); reload and retry"
        )


class ConfigurationError(TrackerError):
    """Settings from the environment could not be parsed."""


class InvalidProblemReference(TrackerError, ValueError):
    """Input cannot be turned into a LeetCode problem slug."""


class LeetCodeError(TrackerError):
    """
    LeetCode could not return the requested problem.

    Attributes:
        status_code: HTTP status from LeetCode, 404 when the slug matched no
            problem, None for network failures.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
