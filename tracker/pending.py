"""
Pending writes for problem edits.

Editors (notes, tags, status) tend to fire many small changes in a row.
PendingWrites buffers them per problem and writes each problem once on
flush(). Leaving the `with` block flushes whatever is still staged; an
exception inside the block discards nothing and writes nothing, so the
caller can decide.

This is independent of reviews: memory-state fields cannot be staged.
"""

from __future__ import annotations

from typing import Any

from tracker.schemas import ProblemRecord, ProblemUpdate
from tracker.store import ProblemStore


class PendingWrites:
    """Per-user buffer of partial problem updates."""

    def __init__(self, store: ProblemStore, user_id: str):
        self.store = store
        self.user_id = user_id
        self._pending: dict[str, dict[str, Any]] = {}

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, problem_id: str) -> bool:
        return problem_id in self._pending

    def stage(self, problem_id: str, **fields: Any) -> None:
        """
        Merge field changes into the pending edit for a problem.

        Later values for the same field replace earlier ones. Fields are
        validated now, so a bad edit fails at the call site rather than at flush.
        """
        merged = {**self._pending.get(problem_id, {}), **fields}
        ProblemUpdate(**merged)
        self._pending[problem_id] = merged

    def discard(self, problem_id: str) -> None:
        self._pending.pop(problem_id, None)

    def flush(self) -> list[ProblemRecord]:
        """
        Write all staged edits in the order problems were first staged.

        A problem leaves the buffer only after its write succeeded; if a
        write fails the error propagates and the remaining edits stay staged.
        """
        written = []
        for problem_id in list(self._pending):
            changes = ProblemUpdate(**self._pending[problem_id])
            written.append(self.store.update_problem(self.user_id, problem_id, changes))
            del self._pending[problem_id]
        return written

    def __enter__(self) -> "PendingWrites":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.flush()
