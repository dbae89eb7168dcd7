"""
Record a review for one problem from the command line.

Usage:
    python -m scripts.review_problem --user-id alice --problem-id 3f2a... --rating good
"""

import argparse
import sys

from tracker.config import load_settings
from tracker.errors import ConcurrentReviewError, InvalidRating, ProblemNotFound
from tracker.logging import configure_logging
from tracker.reviews import schedule_review
from tracker.store import ProblemStore


def main(argv=None):
    settings = load_settings()

    parser = argparse.ArgumentParser(description="Rate a problem and schedule its next review")
    parser.add_argument(
        "--user-id",
        type=str,
        default=settings.default_user_id,
        help="Owner of the problem (default: DEFAULT_USER_ID)"
    )
    parser.add_argument("--problem-id", type=str, required=True, help="Problem to review")
    parser.add_argument(
        "--rating",
        type=str,
        required=True,
        help="again, hard, good, easy (or 1-4)"
    )
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)
    rating = int(args.rating) if args.rating.isdigit() else args.rating

    with ProblemStore.from_url(settings.database_url) as store:
        store.init_db()
        try:
            problem = schedule_review(
                store,
                args.user_id,
                args.problem_id,
                rating,
                parameters=settings.scheduler_parameters,
            )
        except InvalidRating as exc:
            print(f"Rejected: {exc}", file=sys.stderr)
            return 2
        except ProblemNotFound as exc:
            print(f"Not found: {exc}", file=sys.stderr)
            return 1
        except ConcurrentReviewError as exc:
            print(f"Conflict: {exc}", file=sys.stderr)
            return 1

    print(f"✓ {problem.name}: next review {problem.due:%Y-%m-%d} "
          f"(stability {problem.stability:.2f}d, status {problem.status.value})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
