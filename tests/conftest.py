"""Shared fixtures: a throwaway SQLite-backed store per test."""

import os
from datetime import datetime, timezone

import pytest

# Keep scripts and settings away from any real database during tests.
os.environ.setdefault("TEST_MODE", "true")

from tracker.schemas import ProblemCreate  # noqa: E402
from tracker.store import ProblemStore  # noqa: E402


@pytest.fixture
def store(tmp_path):
    store = ProblemStore.from_url(f"sqlite:///{tmp_path / 'tracker.db'}")
    store.init_db()
    yield store
    store.close()


@pytest.fixture
def solved_at():
    return datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_problem(store, solved_at):
    def _make(user_id="alice", **overrides):
        payload = {
            "name": "Two Sum",
            "platform": "LeetCode",
            "link": "https://leetcode.com/problems/two-sum/",
            "difficulty": "Easy",
            "category": "arrays, hashing",
            "date_solved": solved_at,
        }
        payload.update(overrides)
        return store.create_problem(user_id, ProblemCreate(**payload))

    return _make
