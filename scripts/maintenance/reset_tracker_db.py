"""
Reset the tracker database.

DANGEROUS: This deletes all problems and review history!
Only use when you want to start fresh for testing.

Usage:
    python -m scripts.maintenance.reset_tracker_db
"""

from sqlalchemy.engine import make_url

from tracker.config import load_settings
from tracker.logging import configure_logging
from tracker.store import ProblemStore


def main():
    settings = load_settings()
    configure_logging(settings.log_level)

    print("=" * 60)
    print("WARNING: Reset Tracker Database")
    print("=" * 60)
    print()
    print(f"Database: {make_url(settings.database_url).render_as_string(hide_password=True)}")
    print("This will DELETE:")
    print("  - All problems (notes, tags, stability, difficulty, due dates)")
    print("  - All review events (logs of past reviews)")
    print()

    response = input("Are you sure you want to reset? (type 'yes' to confirm): ")

    if response.lower() == "yes":
        print("\nResetting database...")
        with ProblemStore.from_url(settings.database_url) as store:
            store.reset_db()
        print("✓ Database reset complete!")
    else:
        print("\nCancelled. No changes made.")


if __name__ == "__main__":
    main()
