"""
Memory Updates

Implements the FSRS-5 stability and difficulty update rules.

Key principles:
- Well-spaced successful recall produces the largest stability gains
- Lapses shrink stability, more so when recall was expected (high R)
- Difficulty rises on Again, falls on Easy, and drifts slowly back towards
  the difficulty of an easy first review
"""

from __future__ import annotations

import math
from typing import Sequence

from tracker.fsrs.constants import D_MAX, D_MIN, S_MAX, S_MIN, Rating


def clamp_difficulty(difficulty: float) -> float:
    return max(D_MIN, min(D_MAX, difficulty))


def clamp_stability(stability: float) -> float:
    return max(S_MIN, min(S_MAX, stability))


def initial_difficulty(rating: Rating, w: Sequence[float]) -> float:
    """
    Difficulty a brand-new card would get from its first rating.

    Formula:
        D0(G) = w4 - exp(w5 * (G - 1)) + 1
    """
    return clamp_difficulty(w[4] - math.exp(w[5] * (rating - 1)) + 1)


def update_difficulty(difficulty: float, rating: Rating, w: Sequence[float]) -> float:
    """
    Update difficulty based on the review outcome.

    Formula:
        delta = -w6 * (G - 3)
        D' = D + delta * (10 - D) / 9            (linear damping)
        D'' = w7 * D0(Easy) + (1 - w7) * D'      (mean reversion)

    Good leaves difficulty almost untouched, Again and Hard never lower it,
    Easy never raises it. Damping keeps steps small as D approaches the upper
    bound, where mean reversion alone would otherwise pull a failed item
    back down.

    Args:
        difficulty: Current difficulty
        rating: User feedback
        w: Model weights

    Returns:
        New difficulty value (clipped to [1, 10])
    """
    delta = -w[6] * (rating - 3)
    damped = difficulty + delta * (D_MAX - difficulty) / 9.0
    reverted = w[7] * initial_difficulty(Rating.EASY, w) + (1.0 - w[7]) * damped

    if rating < Rating.GOOD:
        return clamp_difficulty(max(difficulty, reverted))
    if rating == Rating.EASY:
        return clamp_difficulty(min(difficulty, reverted))
    return clamp_difficulty(reverted)


def update_stability_on_success(
    stability: float,
    difficulty: float,
    retrievability: float,
    rating: Rating,
    w: Sequence[float]
) -> float:
    """
    Update stability after successful recall (Hard/Good/Easy).

    Formula:
        S' = S * (1 + e^w8 * (11 - D) * S^-w9 * (e^(w10 * (1 - R)) - 1) * penalty * bonus)

    Where:
        - (1 - R) rewards risky (well-spaced) success
        - (11 - D) reduces gains for difficult problems
        - S^-w9 makes already-stable memories grow more slowly
        - penalty = w15 for Hard, bonus = w16 for Easy

    Args:
        stability: Current stability (S)
        difficulty: Current difficulty (D)
        retrievability: Recall probability at review time (R)
        rating: User feedback (HARD, GOOD, or EASY)
        w: Model weights

    Returns:
        New stability value
    """
    if rating == Rating.AGAIN:
        raise ValueError("Use update_stability_on_failure for AGAIN feedback")

    hard_penalty = w[15] if rating == Rating.HARD else 1.0
    easy_bonus = w[16] if rating == Rating.EASY else 1.0

    growth = (
        math.exp(w[8])
        * (11.0 - difficulty)
        * stability ** -w[9]
        * (math.exp(w[10] * (1.0 - retrievability)) - 1.0)
        * hard_penalty
        * easy_bonus
    )

    return clamp_stability(stability * (1.0 + growth))


def update_stability_on_failure(
    stability: float,
    difficulty: float,
    retrievability: float,
    w: Sequence[float]
) -> float:
    """
    Update stability after a lapse (Again).

    Formula:
        S_long = w11 * D^-w12 * ((S + 1)^w13 - 1) * e^(w14 * (1 - R))
        S' = max(S_min, min(S_long, S / e^(w17 * w18)))

    The second term guarantees a lapse never increases stability.

    Args:
        stability: Current stability
        difficulty: Current difficulty
        retrievability: Recall probability at review time

    Returns:
        New stability value (reduced)
    """
    long_term = (
        w[11]
        * difficulty ** -w[12]
        * ((stability + 1.0) ** w[13] - 1.0)
        * math.exp(w[14] * (1.0 - retrievability))
    )
    ceiling = stability / math.exp(w[17] * w[18])

    return clamp_stability(min(long_term, ceiling))


def update_stability_short_term(stability: float, rating: Rating, w: Sequence[float]) -> float:
    """
    Update stability for a review less than a day after the previous one.

    Formula:
        S' = S * e^(w17 * (G - 3 + w18))

    Used for the first review of a problem and for same-day repeats, where
    the forgetting curve has not had time to move. Good and Easy never
    reduce stability.
    """
    increase = math.exp(w[17] * (rating - 3 + w[18]))
    if rating >= Rating.GOOD:
        increase = max(increase, 1.0)

    return clamp_stability(stability * increase)
