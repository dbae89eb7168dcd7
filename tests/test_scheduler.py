import math
from datetime import datetime, timedelta, timezone

import pytest

from tracker.errors import ConfigurationError, InvalidRating
from tracker.fsrs import (
    D_MAX,
    D_MIN,
    S_MAX,
    MemoryState,
    Rating,
    SchedulerParameters,
    initialize_memory_state,
    interval_days,
    next_interval,
    preview,
    schedule,
)

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def new_state():
    return initialize_memory_state(T0)


def _interval(state: MemoryState) -> timedelta:
    return state.due - state.last_review


# ---- Scenarios ----

def test_first_good_review_of_a_new_problem(new_state):
    state = schedule(new_state, Rating.GOOD, T0)

    assert state.review_count == 1
    assert state.last_review == T0
    assert state.last_rating is Rating.GOOD
    assert state.due > T0
    assert state.stability > 2.5
    assert state.difficulty == pytest.approx(3.5, abs=0.01)


def test_again_at_due_date_after_good(new_state):
    first = schedule(new_state, Rating.GOOD, T0)

    lapsed = schedule(first, Rating.AGAIN, first.due)
    recalled = schedule(first, Rating.GOOD, first.due)

    assert lapsed.difficulty > first.difficulty
    assert 0 < lapsed.stability < first.stability
    assert _interval(lapsed) < _interval(recalled)
    assert lapsed.review_count == 2


def test_repeated_easy_reviews_grow_stability_and_intervals(new_state):
    state = schedule(new_state, Rating.EASY, T0)
    stabilities = [state.stability]
    intervals = [_interval(state)]

    for _ in range(7):
        state = schedule(state, Rating.EASY, state.due)
        stabilities.append(state.stability)
        intervals.append(_interval(state))

    assert stabilities == sorted(stabilities)
    assert intervals == sorted(intervals)
    assert stabilities[-1] > stabilities[0]


def test_repeated_good_reviews_grow_intervals(new_state):
    state = new_state
    now = T0
    intervals = []
    for _ in range(6):
        state = schedule(state, Rating.GOOD, now)
        intervals.append(interval_days(state))
        now = state.due

    assert intervals == sorted(intervals)
    assert intervals[-1] > intervals[0]


def test_repeated_again_keeps_stability_above_floor(new_state):
    state = new_state
    now = T0
    for _ in range(30):
        state = schedule(state, Rating.AGAIN, now)
        assert state.stability > 0
        assert D_MIN <= state.difficulty <= D_MAX
        now = state.due

    assert state.review_count == 30
    assert next_interval(state.stability) == 1


def test_difficulty_direction_per_rating(new_state):
    reviewed = schedule(new_state, Rating.GOOD, T0)
    now = reviewed.due
    outcomes = preview(reviewed, now)

    assert outcomes[Rating.AGAIN].difficulty > reviewed.difficulty
    assert outcomes[Rating.HARD].difficulty > reviewed.difficulty
    assert outcomes[Rating.GOOD].difficulty == pytest.approx(reviewed.difficulty, abs=0.01)
    assert outcomes[Rating.EASY].difficulty < reviewed.difficulty


@pytest.mark.parametrize("difficulty", [9.9, 9.95, 9.99, 10.0])
@pytest.mark.parametrize("rating", [Rating.AGAIN, Rating.HARD])
def test_failure_never_lowers_difficulty_near_ceiling(difficulty, rating):
    state = MemoryState(
        stability=5.0,
        difficulty=difficulty,
        due=T0,
        last_review=T0 - timedelta(days=29),
        review_count=4,
    )

    result = schedule(state, rating, T0)

    assert difficulty <= result.difficulty <= D_MAX


@pytest.mark.parametrize("difficulty", [1.0, 1.01, 1.05, 1.1])
def test_easy_never_raises_difficulty_near_floor(difficulty):
    state = MemoryState(
        stability=5.0,
        difficulty=difficulty,
        due=T0,
        last_review=T0 - timedelta(days=29),
        review_count=4,
    )

    result = schedule(state, Rating.EASY, T0)

    assert D_MIN <= result.difficulty <= difficulty


def test_repeated_failures_of_a_hard_problem_keep_difficulty_at_ceiling():
    state = MemoryState(stability=1.0, difficulty=D_MAX, due=T0, last_review=T0 - timedelta(days=3), review_count=9)
    for _ in range(10):
        state = schedule(state, Rating.AGAIN, state.due)
        assert state.difficulty == D_MAX


# ---- Invariants ----

EXTREME_STABILITIES = [0.0, 1e-9, 0.01, 0.3, 2.5, 180.0, 1e5, 1e308, math.inf]
EXTREME_DIFFICULTIES = [0.0, 1.0, 3.5, 9.99, 10.0, 25.0]
LAST_REVIEW_OFFSETS = [None, timedelta(hours=2), timedelta(days=3), timedelta(days=900)]


@pytest.mark.parametrize("rating", list(Rating))
@pytest.mark.parametrize("offset", LAST_REVIEW_OFFSETS)
def test_schedule_keeps_state_in_bounds(rating, offset):
    now = T0 + timedelta(days=1000)
    last_review = None if offset is None else now - offset

    for stability in EXTREME_STABILITIES:
        for difficulty in EXTREME_DIFFICULTIES:
            state = MemoryState(
                stability=stability,
                difficulty=difficulty,
                due=now,
                last_review=last_review,
                review_count=7,
            )
            result = schedule(state, rating, now)

            assert math.isfinite(result.stability)
            assert math.isfinite(result.difficulty)
            assert 0 < result.stability <= S_MAX
            assert D_MIN <= result.difficulty <= D_MAX
            assert result.due > now
            assert result.last_review == now
            assert result.review_count == 8
            assert result.last_rating == rating


@pytest.mark.parametrize("rating", list(Rating))
def test_first_review_never_fails(new_state, rating):
    result = schedule(new_state, rating, T0)

    assert math.isfinite(result.stability) and result.stability > 0
    assert math.isfinite(result.difficulty)
    assert result.due > T0
    assert result.review_count == 1


def test_schedule_is_deterministic(new_state):
    reviewed = schedule(new_state, Rating.HARD, T0)
    now = T0 + timedelta(days=5, hours=3)

    assert schedule(reviewed, Rating.GOOD, now) == schedule(reviewed, Rating.GOOD, now)
    assert schedule(reviewed, Rating.AGAIN, now) == schedule(reviewed, Rating.AGAIN, now)


def test_schedule_does_not_mutate_input(new_state):
    schedule(new_state, Rating.EASY, T0)
    assert new_state == initialize_memory_state(T0)


def test_naive_now_is_read_as_utc(new_state):
    naive = datetime(2024, 3, 1, 12, 0)
    assert schedule(new_state, Rating.GOOD, naive) == schedule(new_state, Rating.GOOD, T0)


def test_now_defaults_to_wall_clock(new_state):
    before = datetime.now(timezone.utc)
    result = schedule(new_state, Rating.GOOD)
    after = datetime.now(timezone.utc)

    assert before <= result.last_review <= after
    assert result.due > result.last_review


# ---- Ratings ----

@pytest.mark.parametrize("value", [0, 5, -1, 3.0, True, None, "meh", ""])
def test_invalid_ratings_are_rejected(new_state, value):
    with pytest.raises(InvalidRating):
        schedule(new_state, value, T0)


def test_invalid_rating_is_a_value_error(new_state):
    with pytest.raises(ValueError):
        schedule(new_state, 5, T0)


@pytest.mark.parametrize(
    "value, expected",
    [(1, Rating.AGAIN), (4, Rating.EASY), ("good", Rating.GOOD), (" Hard ", Rating.HARD), (Rating.EASY, Rating.EASY)],
)
def test_rating_parse_accepts_numbers_and_names(value, expected):
    assert Rating.parse(value) is expected


def test_ratings_are_ordered():
    assert Rating.AGAIN < Rating.HARD < Rating.GOOD < Rating.EASY


# ---- Intervals ----

def test_preview_intervals_follow_rating_order(new_state):
    for state, now in [(new_state, T0), (schedule(new_state, Rating.GOOD, T0), T0 + timedelta(days=4))]:
        outcomes = preview(state, now)
        assert set(outcomes) == set(Rating)
        intervals = [_interval(outcomes[rating]) for rating in Rating]
        assert intervals == sorted(intervals)


def test_next_interval_is_monotonic_and_bounded():
    stabilities = [0.01, 0.4, 0.6, 1.0, 1.7, 3.0, 10.0, 99.4, 365.0, 5e4, 1e9]
    intervals = [next_interval(s) for s in stabilities]

    assert intervals == sorted(intervals)
    assert intervals[0] == 1
    assert intervals[-1] == 36500
    assert next_interval(10.0) == 10


@pytest.mark.parametrize("stability", [1e308, math.inf])
def test_unbounded_stability_is_capped(stability):
    assert next_interval(stability) == 36500

    for rating in (Rating.GOOD, Rating.EASY):
        state = MemoryState(stability=stability, difficulty=5.0, due=T0, review_count=1)
        result = schedule(state, rating, T0)

        assert result.stability == S_MAX
        assert _interval(result) == timedelta(days=36500)


def test_higher_retention_target_shortens_intervals():
    strict = SchedulerParameters(desired_retention=0.95)
    relaxed = SchedulerParameters(desired_retention=0.8)

    assert next_interval(30.0, strict) < next_interval(30.0) < next_interval(30.0, relaxed)


def test_maximum_interval_caps_due_date(new_state):
    params = SchedulerParameters(maximum_interval=3)
    result = schedule(new_state, Rating.EASY, T0, params)
    assert _interval(result) == timedelta(days=3)


@pytest.mark.parametrize(
    "kwargs",
    [{"weights": (1.0, 2.0)}, {"desired_retention": 1.0}, {"desired_retention": 0.0}, {"maximum_interval": 0}],
)
def test_invalid_parameters_are_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        SchedulerParameters(**kwargs)
