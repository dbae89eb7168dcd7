"""
Scheduler - FSRS Algorithm Logic

Pure scheduling and state updates (no database calls).

Main workflow:
1. Load memory state (caller's responsibility)
2. Measure elapsed time since the last review
3. Apply the difficulty and stability update rules
4. Turn the new stability into a review interval
5. Return the new state (caller persists it)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from tracker.errors import ConfigurationError
from tracker.fsrs import updates
from tracker.fsrs.constants import (
    D_MAX,
    D_MIN,
    DECAY,
    DEFAULT_WEIGHTS,
    DESIRED_RETENTION,
    FACTOR,
    MAXIMUM_INTERVAL,
    S_MAX,
    S_MIN,
    SHORT_TERM_DAYS,
    Rating,
)
from tracker.fsrs.memory_state import (
    MemoryState,
    calculate_retrievability,
    days_between,
    ensure_utc,
)


@dataclass(frozen=True)
class SchedulerParameters:
    """Model weights plus the retention target used to derive intervals."""
    weights: Sequence[float] = DEFAULT_WEIGHTS
    desired_retention: float = DESIRED_RETENTION
    maximum_interval: int = MAXIMUM_INTERVAL

    def __post_init__(self):
        if len(self.weights) != len(DEFAULT_WEIGHTS):
            raise ConfigurationError(
                f"Expected {len(DEFAULT_WEIGHTS)} weights, got {len(self.weights)}"
            )
        if not 0.0 < self.desired_retention < 1.0:
            raise ConfigurationError(
                f"desired_retention must be in (0, 1), got {self.desired_retention}"
            )
        if self.maximum_interval < 1:
            raise ConfigurationError(
                f"maximum_interval must be >= 1 day, got {self.maximum_interval}"
            )
        # Freeze a caller-supplied list so instances stay hashable
        object.__setattr__(self, "weights", tuple(float(x) for x in self.weights))


DEFAULT_PARAMETERS = SchedulerParameters()


def next_interval(stability: float, parameters: SchedulerParameters = DEFAULT_PARAMETERS) -> int:
    """
    Convert stability into a whole number of days until the next review.

    Formula:
        I = S / FACTOR * (r ^ (1 / DECAY) - 1)

    With the default retention r = 0.9 this is exactly S. The result is
    capped at maximum_interval before rounding and never below 1 day, so it
    is monotonically non-decreasing in stability and finite even for an
    infinite one.
    """
    raw = stability / FACTOR * (parameters.desired_retention ** (1.0 / DECAY) - 1.0)
    raw = min(float(parameters.maximum_interval), raw)
    return int(max(round(raw), 1))


def schedule(
    state: MemoryState,
    rating: object,
    now: Optional[datetime] = None,
    parameters: SchedulerParameters = DEFAULT_PARAMETERS
) -> MemoryState:
    """
    Apply one review to a memory state and return the resulting state.

    This is the core FSRS algorithm. No database calls, no randomness:
    identical inputs always give identical outputs.

    Args:
        state: Current memory state (may hold defaults if never reviewed)
        rating: Rating, 1-4, or a level name
        now: Review instant (defaults to now, naive values are read as UTC)
        parameters: Model weights and retention target

    Returns:
        New MemoryState with due > now and review_count incremented

    Raises:
        InvalidRating: if rating is not one of the four levels
    """
    rating = Rating.parse(rating)
    now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
    w = parameters.weights

    # Extreme stored values are pulled back into the model's domain
    stability = max(S_MIN, min(S_MAX, state.stability))
    difficulty = max(D_MIN, min(D_MAX, state.difficulty))

    # First review has no anchor: treat it as zero elapsed time
    elapsed_days = days_between(state.last_review, now)

    new_difficulty = updates.update_difficulty(difficulty, rating, w)

    if elapsed_days < SHORT_TERM_DAYS:
        new_stability = updates.update_stability_short_term(stability, rating, w)
    else:
        retrievability = calculate_retrievability(stability, elapsed_days)
        if rating == Rating.AGAIN:
            new_stability = updates.update_stability_on_failure(
                stability, difficulty, retrievability, w
            )
        else:
            new_stability = updates.update_stability_on_success(
                stability, difficulty, retrievability, rating, w
            )

    interval = next_interval(new_stability, parameters)

    return MemoryState(
        stability=new_stability,
        difficulty=new_difficulty,
        due=now + timedelta(days=interval),
        last_review=now,
        review_count=state.review_count + 1,
        last_rating=rating,
    )


def preview(
    state: MemoryState,
    now: Optional[datetime] = None,
    parameters: SchedulerParameters = DEFAULT_PARAMETERS
) -> dict[Rating, MemoryState]:
    """
    Compute the outcome of every rating for the same review instant.

    Useful for showing "Again: 1d / Good: 4d" style hints before the user
    answers.
    """
    now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)
    return {rating: schedule(state, rating, now, parameters) for rating in Rating}


def interval_days(state: MemoryState) -> float:
    """Days between the last review and the due date of a scheduled state."""
    if state.last_review is None:
        return 0.0
    return days_between(state.last_review, state.due)
