from datetime import timedelta

import pytest

from tracker.errors import ConcurrentReviewError, InvalidRating, ProblemNotFound
from tracker.fsrs import Rating, SchedulerParameters, Status
from tracker.reviews import schedule_review


def test_first_review_of_new_problem(store, make_problem, solved_at):
    problem = make_problem()

    reviewed = schedule_review(store, "alice", problem.id, 3, now=solved_at)

    assert reviewed.review_count == 1
    assert reviewed.last_review == solved_at
    assert reviewed.last_rating is Rating.GOOD
    assert reviewed.due > solved_at
    assert reviewed.stability > 2.5
    assert reviewed.fsrs_difficulty == pytest.approx(3.5, abs=0.01)
    assert reviewed.status is Status.SOLVED
    assert store.get_problem("alice", problem.id) == reviewed


def test_failed_review_sends_problem_back_for_revision(store, make_problem, solved_at):
    problem = make_problem()
    first = schedule_review(store, "alice", problem.id, Rating.GOOD, now=solved_at)

    failed = schedule_review(store, "alice", problem.id, "again", now=first.due)

    assert failed.review_count == 2
    assert failed.status is Status.TO_REVISE
    assert failed.fsrs_difficulty > first.fsrs_difficulty
    assert 0 < failed.stability < first.stability
    assert failed.due - failed.last_review < first.due - first.last_review


def test_reviewed_problem_leaves_due_list(store, make_problem, solved_at):
    problem = make_problem()
    assert [p.id for p in store.list_due("alice", solved_at)] == [problem.id]

    reviewed = schedule_review(store, "alice", problem.id, Rating.EASY, now=solved_at)

    assert store.list_due("alice", solved_at) == []
    assert [p.id for p in store.list_due("alice", reviewed.due)] == [problem.id]


def test_invalid_rating_leaves_store_untouched(store, make_problem, solved_at):
    problem = make_problem()

    for bad in (0, 5, "maybe"):
        with pytest.raises(InvalidRating):
            schedule_review(store, "alice", problem.id, bad, now=solved_at)

    assert store.get_problem("alice", problem.id) == problem
    assert store.get_recent_events("alice") == []


def test_invalid_rating_is_reported_before_missing_problem(store):
    with pytest.raises(InvalidRating):
        schedule_review(store, "alice", "does-not-exist", 9)


def test_unknown_or_foreign_problem_is_not_found(store, make_problem, solved_at):
    problem = make_problem(user_id="alice")

    with pytest.raises(ProblemNotFound):
        schedule_review(store, "alice", "does-not-exist", 3, now=solved_at)
    with pytest.raises(ProblemNotFound):
        schedule_review(store, "bob", problem.id, 3, now=solved_at)

    assert store.get_problem("alice", problem.id).review_count == 0


def test_concurrent_reviews_only_one_increment_survives(store, make_problem, solved_at, monkeypatch):
    problem = make_problem()
    stale = store.get_problem("alice", problem.id)

    schedule_review(store, "alice", problem.id, Rating.GOOD, now=solved_at)

    # Second submission was loaded before the first one landed
    monkeypatch.setattr(store, "get_problem", lambda user_id, problem_id: stale)
    with pytest.raises(ConcurrentReviewError):
        schedule_review(store, "alice", problem.id, Rating.EASY, now=solved_at + timedelta(seconds=5))
    monkeypatch.undo()

    stored = store.get_problem("alice", problem.id)
    assert stored.review_count == 1
    assert stored.last_rating is Rating.GOOD
    assert len(store.get_recent_events("alice")) == 1


def test_review_events_record_before_and_after(store, make_problem, solved_at):
    problem = make_problem()
    first = schedule_review(store, "alice", problem.id, Rating.GOOD, now=solved_at)
    second = schedule_review(store, "alice", problem.id, Rating.HARD, now=first.due)

    events = store.get_recent_events("alice")
    assert [e.rating for e in events] == [Rating.HARD, Rating.GOOD]

    latest = events[0]
    assert latest.problem_id == problem.id
    assert latest.timestamp == first.due
    assert latest.stability_before == pytest.approx(first.stability)
    assert latest.stability_after == pytest.approx(second.stability)
    assert latest.elapsed_days == pytest.approx((first.due - solved_at).days)
    assert 0 < latest.retrievability_before < 1
    assert latest.interval_days == pytest.approx((second.due - second.last_review).days)

    oldest = events[1]
    assert oldest.retrievability_before == 1.0
    assert oldest.elapsed_days == 0.0
    assert oldest.difficulty_before == 3.5


def test_custom_status_policy_and_parameters(store, make_problem, solved_at):
    problem = make_problem()

    reviewed = schedule_review(
        store,
        "alice",
        problem.id,
        Rating.EASY,
        now=solved_at,
        parameters=SchedulerParameters(maximum_interval=2),
        status_policy=lambda rating: Status.REVISITED,
    )

    assert reviewed.status is Status.REVISITED
    assert reviewed.due == solved_at + timedelta(days=2)


def test_deleting_problem_clears_its_review_log(store, make_problem, solved_at):
    problem = make_problem()
    schedule_review(store, "alice", problem.id, Rating.GOOD, now=solved_at)

    store.delete_problem("alice", problem.id)

    assert store.get_recent_events("alice") == []
