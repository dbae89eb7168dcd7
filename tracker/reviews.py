"""
Reviews - apply a user's rating to a stored problem

Main workflow:
1. Validate the rating (before touching the store)
2. Load the problem, scoped to its owner
3. Run the pure scheduler
4. Write the new state with a conditional update
5. Return the updated problem
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Optional

from tracker.errors import ConcurrentReviewError
from tracker.fsrs import (
    DEFAULT_PARAMETERS,
    Rating,
    SchedulerParameters,
    Status,
    ensure_utc,
    retrievability_at,
    schedule,
    status_after_review,
)
from tracker.logging import logger
from tracker.schemas import ProblemRecord
from tracker.store import ProblemStore


StatusPolicy = Callable[[Rating], Status]


def schedule_review(
    store: ProblemStore,
    user_id: str,
    problem_id: str,
    rating: object,
    now: Optional[datetime] = None,
    parameters: SchedulerParameters = DEFAULT_PARAMETERS,
    status_policy: StatusPolicy = status_after_review
) -> ProblemRecord:
    """
    Review a problem and persist its next schedule.

    Args:
        store: Store holding the user's problems
        user_id: Owner of the problem
        problem_id: Problem being reviewed
        rating: Rating, 1-4, or a level name
        now: Review instant (defaults to now)
        parameters: Scheduler weights and retention target
        status_policy: Maps the rating to the stored status

    Returns:
        The updated problem

    Raises:
        InvalidRating: rating outside the four levels (store untouched)
        ProblemNotFound: no such problem for this user
        ConcurrentReviewError: another review of the same problem landed first
    """
    rating = Rating.parse(rating)
    now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)

    problem = store.get_problem(user_id, problem_id)
    state = problem.memory_state

    new_state = schedule(state, rating, now, parameters)
    retrievability = retrievability_at(state, now)

    try:
        updated = store.apply_review(
            user_id,
            problem_id,
            previous=state,
            new_state=new_state,
            status=status_policy(rating),
            retrievability_before=retrievability,
        )
    except ConcurrentReviewError:
        logger.warning(
            "review_conflict",
            user_id=user_id,
            problem_id=problem_id,
            expected_review_count=state.review_count,
        )
        raise

    logger.info(
        "review_scheduled",
        user_id=user_id,
        problem_id=problem_id,
        rating=rating.name,
        retrievability=round(retrievability, 4),
        stability=round(updated.stability, 4),
        difficulty=round(updated.fsrs_difficulty, 4),
        due=updated.due.isoformat(),
        review_count=updated.review_count,
    )
    return updated
