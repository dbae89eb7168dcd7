"""
Problem tracker: log solved coding problems and review them on an FSRS schedule.

Subpackages and modules:
- tracker.fsrs: pure spaced-repetition scheduler
- tracker.store: owner-scoped persistence
- tracker.reviews: apply a rating to a stored problem
"""
