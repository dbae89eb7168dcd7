"""
Memory State - per-problem FSRS state and retrievability

Key concepts:
- Stability (S): days until recall probability decays to 90%
- Difficulty (D): how hard the problem is to retain (1-10 scale)
- Retrievability (R): probability of successful recall at time t
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from tracker.fsrs.constants import (
    DECAY,
    DEFAULT_DIFFICULTY,
    DEFAULT_STABILITY,
    FACTOR,
    S_MIN,
    Rating,
)


SECONDS_PER_DAY = 86400.0


@dataclass(frozen=True)
class MemoryState:
    """
    Scheduling state of a single problem.

    Instances are immutable; the scheduler returns a new one per review.
    """
    stability: float  # S, in days
    difficulty: float  # D, range 1-10
    due: datetime  # Next review instant
    last_review: Optional[datetime] = None  # None until first rating
    review_count: int = 0
    last_rating: Optional[Rating] = None

    @property
    def is_new(self) -> bool:
        return self.last_review is None


def ensure_utc(value: datetime) -> datetime:
    """Read naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def initialize_memory_state(
    created_at: Optional[datetime] = None,
    stability: float = DEFAULT_STABILITY,
    difficulty: float = DEFAULT_DIFFICULTY
) -> MemoryState:
    """
    Initialize state for a newly logged problem.

    The problem is due immediately at its solve/creation date.

    Args:
        created_at: Solve date (default: now)
        stability: Starting stability (default: 2.5 days)
        difficulty: Starting difficulty (default: 3.5)

    Returns:
        New MemoryState with zero reviews
    """
    if created_at is None:
        created_at = datetime.now(timezone.utc)

    return MemoryState(
        stability=stability,
        difficulty=difficulty,
        due=ensure_utc(created_at),
    )


def days_between(start: Optional[datetime], end: datetime) -> float:
    """
    Days elapsed from start to end.

    Returns 0 when start is None (never reviewed) or lies after end.
    """
    if start is None:
        return 0.0

    delta = ensure_utc(end) - ensure_utc(start)
    return max(0.0, delta.total_seconds() / SECONDS_PER_DAY)


def calculate_retrievability(stability: float, elapsed_days: float) -> float:
    """
    Calculate retrievability using the FSRS power-law forgetting curve.

    Formula: R = (1 + FACTOR * t / S) ^ DECAY

    Interpretation:
    - Immediately after review: R = 1.0
    - After S days: R = 0.9
    - R keeps decaying smoothly afterwards

    Args:
        stability: Current stability in days
        elapsed_days: Time since last review in days

    Returns:
        Retrievability between 0 and 1
    """
    if elapsed_days <= 0:
        return 1.0

    return (1.0 + FACTOR * elapsed_days / max(S_MIN, stability)) ** DECAY


def retrievability_at(state: MemoryState, now: Optional[datetime] = None) -> float:
    """Recall probability for a state at the given instant (1.0 if never reviewed)."""
    if now is None:
        now = datetime.now(timezone.utc)
    return calculate_retrievability(state.stability, days_between(state.last_review, now))
