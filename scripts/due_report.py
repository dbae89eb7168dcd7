"""
Print the problems due for review.

Usage:
    python -m scripts.due_report --user-id alice --limit 20
"""

import argparse
from datetime import datetime, timezone

from tracker import fsrs
from tracker.config import load_settings
from tracker.logging import configure_logging
from tracker.store import ProblemStore


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def format_row(problem, now: datetime) -> str:
    state = problem.memory_state
    overdue_days = (now - problem.due).total_seconds() / 86400.0
    recall = fsrs.retrievability_at(state, now)
    return (
        f"{problem.name[:40]:<40} {problem.platform:<12} {problem.difficulty.value:<6} "
        f"overdue {overdue_days:5.1f}d  R={recall:.2f}  S={state.stability:.2f}  "
        f"reviews={state.review_count}"
    )


def main(argv=None):
    settings = load_settings()

    parser = argparse.ArgumentParser(description="List problems due for review")
    parser.add_argument(
        "--user-id",
        type=str,
        default=settings.default_user_id,
        help="Owner of the problems (default: DEFAULT_USER_ID)"
    )
    parser.add_argument(
        "--limit",
        type=positive_int,
        default=None,
        help="Number of problems to display (default: all)"
    )
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)
    now = datetime.now(timezone.utc)

    with ProblemStore.from_url(settings.database_url) as store:
        store.init_db()
        due = store.list_due(args.user_id, now)

    if not due:
        print(f"Nothing due for {args.user_id}.")
        return 0

    print(f"\n{len(due)} problem(s) due for {args.user_id}")
    if args.limit is not None and args.limit < len(due):
        due = due[:args.limit]
        print(f"(showing first {len(due)})")
    print()

    for problem in due:
        print(format_row(problem, now))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
