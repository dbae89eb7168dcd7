"""
FSRS Constants and Parameters

All configurable parameters for the scheduler in one place.
Weights are the published FSRS-5 defaults from open-spaced-repetition.
"""

from __future__ import annotations

from enum import IntEnum

from tracker.errors import InvalidRating


# ---- Ratings ----

class Rating(IntEnum):
    """User feedback on a review attempt."""
    AGAIN = 1  # Forgotten
    HARD = 2   # Recalled with high effort
    GOOD = 3   # Recalled normally
    EASY = 4   # Recalled fluently

    @classmethod
    def parse(cls, value: object) -> "Rating":
        """
        Coerce user input into a Rating.

        Accepts a Rating, an int in 1..4, or a level name ("good", "Again").
        Booleans and floats are rejected even when numerically in range.

        Raises:
            InvalidRating: for anything outside the four levels
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise InvalidRating(value)
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise InvalidRating(value) from None
        if isinstance(value, str):
            name = value.strip().upper()
            if name in cls.__members__:
                return cls[name]
        raise InvalidRating(value)


# ---- Memory model bounds ----

S_MIN = 0.01     # Minimum stability (days)
S_MAX = 36500.0  # Maximum stability (days)
D_MIN = 1.0      # Minimum difficulty
D_MAX = 10.0     # Maximum difficulty


# ---- Defaults for never-reviewed problems ----

DEFAULT_STABILITY = 2.5
DEFAULT_DIFFICULTY = 3.5


# ---- Forgetting curve ----
# R(t, S) = (1 + FACTOR * t / S) ** DECAY, chosen so that R(S, S) = 0.9

DECAY = -0.5
FACTOR = 0.9 ** (1 / DECAY) - 1


# ---- Scheduling ----

DESIRED_RETENTION = 0.9
MAXIMUM_INTERVAL = 36500  # days

# Reviews closer together than this use the short-term stability rule
SHORT_TERM_DAYS = 1.0


# ---- FSRS-5 default weights ----
#  w0-w3   initial stability per rating (unused: problems start from DEFAULT_STABILITY)
#  w4-w5   initial difficulty
#  w6      difficulty step per rating
#  w7      mean reversion towards D0(Easy)
#  w8-w10  stability growth on recall
#  w11-w14 stability after a lapse
#  w15     hard penalty
#  w16     easy bonus
#  w17-w18 short-term stability

DEFAULT_WEIGHTS = (
    0.40255,
    1.18385,
    3.173,
    15.69105,
    7.1949,
    0.5345,
    1.4604,
    0.0046,
    1.54575,
    0.1192,
    1.01925,
    1.9395,
    0.11,
    0.29605,
    2.2698,
    0.2315,
    2.9898,
    0.51655,
    0.6621,
)
