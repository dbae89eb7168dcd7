"""
Log a solved LeetCode problem, filling in title, difficulty and tags from LeetCode.

Usage:
    python -m scripts.add_leetcode_problem two-sum --user-id alice
    python -m scripts.add_leetcode_problem https://leetcode.com/problems/two-sum/ --notes "hash map"
"""

import argparse
import sys

from pydantic import ValidationError

from tracker.config import load_settings
from tracker.errors import InvalidProblemReference, LeetCodeError
from tracker.fsrs import Status
from tracker.leetcode import fetch_question, to_problem_create
from tracker.logging import configure_logging
from tracker.store import ProblemStore


def main(argv=None):
    settings = load_settings()

    parser = argparse.ArgumentParser(description="Add a LeetCode problem by slug or URL")
    parser.add_argument("reference", help="Problem slug (two-sum) or URL")
    parser.add_argument(
        "--user-id",
        type=str,
        default=settings.default_user_id,
        help="Owner of the problem (default: DEFAULT_USER_ID)"
    )
    parser.add_argument(
        "--status",
        choices=[status.value for status in Status],
        default=Status.TO_REVISE.value,
        help="Initial status (default: ToRevise)"
    )
    parser.add_argument("--notes", type=str, default="", help="Free-text notes")
    parser.add_argument(
        "--category",
        type=str,
        default=None,
        help="Comma-separated tags, replacing LeetCode's topic tags"
    )
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)

    try:
        question = fetch_question(args.reference)
    except InvalidProblemReference as exc:
        print(f"Rejected: {exc}", file=sys.stderr)
        return 2
    except LeetCodeError as exc:
        print(f"LeetCode lookup failed: {exc}", file=sys.stderr)
        return 1

    overrides = {"status": args.status, "notes": args.notes}
    if args.category is not None:
        overrides["category"] = args.category

    try:
        payload = to_problem_create(question, **overrides)
    except ValidationError as exc:
        print(f"Rejected: {exc.errors()[0]['msg']} (try --category)", file=sys.stderr)
        return 2

    with ProblemStore.from_url(settings.database_url) as store:
        store.init_db()
        problem = store.create_problem(args.user_id, payload)

    print(f"✓ Added {problem.name} [{problem.difficulty.value}] "
          f"({', '.join(problem.category)}) as {problem.id}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
