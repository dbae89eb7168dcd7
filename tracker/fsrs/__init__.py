"""
FSRS - Free Spaced Repetition Scheduler

Decides when each tracked problem should be reviewed again.

This package implements the FSRS-5 memory model with:
- Power-law forgetting curve: R = (1 + FACTOR * t / S) ^ DECAY
- Interpretable memory state (Stability, Difficulty, Retrievability)
- A pure transition function: (state, rating, now) -> new state

Quick start:
    from tracker import fsrs

    state = fsrs.initialize_memory_state(solved_at)
    state = fsrs.schedule(state, fsrs.Rating.GOOD)
    print(state.due, fsrs.review_label(state))
"""

# Core scheduler API (algorithm logic)
from tracker.fsrs.scheduler import (
    DEFAULT_PARAMETERS,
    SchedulerParameters,
    interval_days,
    next_interval,
    preview,
    schedule,
)

# Constants and parameters
from tracker.fsrs.constants import (
    DEFAULT_DIFFICULTY,
    DEFAULT_STABILITY,
    DEFAULT_WEIGHTS,
    D_MAX,
    D_MIN,
    S_MAX,
    S_MIN,
    Rating,
)

# Memory state
from tracker.fsrs.memory_state import (
    MemoryState,
    calculate_retrievability,
    ensure_utc,
    initialize_memory_state,
    retrievability_at,
)

# Status policy
from tracker.fsrs.policy import (
    ReviewLabel,
    Status,
    is_due,
    review_label,
    status_after_review,
)


__all__ = [
    # Core algorithm
    "schedule",
    "preview",
    "next_interval",
    "interval_days",
    "SchedulerParameters",
    "DEFAULT_PARAMETERS",

    # Enums
    "Rating",
    "Status",
    "ReviewLabel",

    # Memory state
    "MemoryState",
    "initialize_memory_state",
    "calculate_retrievability",
    "retrievability_at",
    "ensure_utc",

    # Policy
    "status_after_review",
    "is_due",
    "review_label",

    # Parameters
    "DEFAULT_WEIGHTS",
    "DEFAULT_STABILITY",
    "DEFAULT_DIFFICULTY",
    "S_MIN",
    "S_MAX",
    "D_MIN",
    "D_MAX",
]
