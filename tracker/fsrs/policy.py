"""
Status policy on top of the memory model.

The scheduler only produces numbers. This module turns a rating into the
problem's stored status and a state into a display label. Callers that want
different thresholds can pass their own function to the review service.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from tracker.fsrs.constants import Rating
from tracker.fsrs.memory_state import MemoryState, ensure_utc


class Status(str, Enum):
    """Stored status of a tracked problem."""
    TO_REVISE = "ToRevise"
    SOLVED = "Solved"
    STUCK = "Stuck"
    REVISITED = "Revisited"


class ReviewLabel(str, Enum):
    """Display label derived from the due date and the last rating."""
    DUE = "due"
    SCHEDULED = "scheduled"                # Not due, never rated
    RETAINED = "retained"                  # Not due, last rating Good or Easy
    NEEDS_REVISITING = "needs_revisiting"  # Not due, last rating Again or Hard


def status_after_review(rating: Rating, threshold: Rating = Rating.GOOD) -> Status:
    """Good and above marks the problem solved, anything lower sends it back for revision."""
    if Rating.parse(rating) >= threshold:
        return Status.SOLVED
    return Status.TO_REVISE


def is_due(state: MemoryState, now: Optional[datetime] = None) -> bool:
    if now is None:
        now = datetime.now(timezone.utc)
    return ensure_utc(state.due) <= ensure_utc(now)


def review_label(state: MemoryState, now: Optional[datetime] = None) -> ReviewLabel:
    """
    Label a state for display.

    Args:
        state: Current memory state
        now: Reference instant (default: now)

    Returns:
        DUE when the due date has passed, otherwise a label based on the last rating
    """
    if is_due(state, now):
        return ReviewLabel.DUE
    if state.last_rating is None:
        return ReviewLabel.SCHEDULED
    if state.last_rating >= Rating.GOOD:
        return ReviewLabel.RETAINED
    return ReviewLabel.NEEDS_REVISITING
