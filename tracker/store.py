"""
Problem Store - Database I/O for tracked problems

Uses SQLAlchemy ORM with a SQLite or Postgres backend.

This module handles ONLY database I/O. Scheduling logic lives in tracker.fsrs;
the review workflow that ties both together lives in tracker.reviews.

Every query is scoped by (problem id, user id). Reviews are written with a
single conditional UPDATE guarded by the review count that was read, so two
concurrent reviews of the same problem can never both land.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine, delete, update
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tracker.errors import ConcurrentReviewError, ProblemNotFound
from tracker.fsrs import MemoryState, Status, ensure_utc, initialize_memory_state, interval_days
from tracker.fsrs.memory_state import days_between
from tracker.logging import logger
from tracker.models import Base, Problem as ProblemModel, ReviewEvent as ReviewEventModel
from tracker.schemas import ProblemCreate, ProblemRecord, ProblemUpdate, ReviewEventRecord


def create_engine_for_url(database_url: str) -> Engine:
    """
    Build an engine suited to the backend behind the URL.

    SQLite files get their directory created; in-memory SQLite shares one
    connection so every session sees the same database. Server databases use
    a small connection pool.
    """
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        if not url.database or url.database == ":memory:":
            return create_engine(
                database_url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
        return create_engine(database_url, connect_args={"check_same_thread": False})

    return create_engine(
        database_url,
        pool_size=5,           # Keep 5 connections open
        max_overflow=10,       # Allow up to 10 extra connections
        pool_pre_ping=True,    # Verify connections before use
        echo=False
    )


class ProblemStore:
    """
    Owner-scoped persistence for problems and their review log.

    Construct one per process (or per test), pass it to whoever needs it, and
    call close() on shutdown. Usable as a context manager.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)

    @classmethod
    def from_url(cls, database_url: str) -> "ProblemStore":
        return cls(create_engine_for_url(database_url))

    def close(self) -> None:
        """Release all pooled connections."""
        self.engine.dispose()

    def __enter__(self) -> "ProblemStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _session(self) -> Session:
        return self._session_factory()

    # ---- Schema ----

    def init_db(self) -> None:
        """
        Create tables if they don't exist.

        Safe to call multiple times.
        """
        Base.metadata.create_all(self.engine)

    def reset_db(self) -> None:
        """
        DANGEROUS: Drop all tables and recreate them.

        All problems and review history will be lost!
        """
        Base.metadata.drop_all(self.engine)
        logger.warning("database_reset", url=self.engine.url.render_as_string(hide_password=True))
        self.init_db()

    # ---- Problems ----

    def create_problem(self, user_id: str, payload: ProblemCreate) -> ProblemRecord:
        """
        Insert a new problem with a fresh memory state.

        The problem is due for its first review at its solve date.

        Args:
            user_id: Owner of the problem
            payload: Validated problem fields

        Returns:
            The stored problem
        """
        state = initialize_memory_state(payload.date_solved)

        session = self._session()
        try:
            row = ProblemModel(
                id=uuid.uuid4().hex,
                user_id=user_id,
                name=payload.name,
                platform=payload.platform,
                link=payload.link,
                difficulty=payload.difficulty.value,
                status=payload.status.value,
                category=list(payload.category),
                notes=payload.notes,
                mistakes_made=payload.mistakes_made,
                date_solved=state.due,
                created_at=datetime.now(timezone.utc),
                stability=state.stability,
                fsrs_difficulty=state.difficulty,
                due=state.due,
                last_review=None,
                review_count=0,
                last_rating=None,
            )
            session.add(row)
            session.commit()
            record = ProblemRecord.model_validate(row)
        finally:
            session.close()

        logger.info("problem_created", user_id=user_id, problem_id=record.id, name=record.name)
        return record

    def get_problem(self, user_id: str, problem_id: str) -> ProblemRecord:
        """
        Load one problem owned by the user.

        Raises:
            ProblemNotFound: if no such problem exists for this user
        """
        session = self._session()
        try:
            row = self._find(session, user_id, problem_id)
            if row is None:
                raise ProblemNotFound(problem_id, user_id)
            return ProblemRecord.model_validate(row)
        finally:
            session.close()

    def list_problems(self, user_id: str) -> list[ProblemRecord]:
        """All of a user's problems, most recently solved first."""
        session = self._session()
        try:
            rows = session.query(ProblemModel).filter(
                ProblemModel.user_id == user_id
            ).order_by(ProblemModel.date_solved.desc()).all()
            return [ProblemRecord.model_validate(row) for row in rows]
        finally:
            session.close()

    def list_due(self, user_id: str, now: Optional[datetime] = None) -> list[ProblemRecord]:
        """
        Problems due on or before now, most overdue first.

        Args:
            user_id: Owner of the problems
            now: Reference instant (default: now)

        Returns:
            List of problems ordered by due date ascending
        """
        now = ensure_utc(now) if now is not None else datetime.now(timezone.utc)

        session = self._session()
        try:
            rows = session.query(ProblemModel).filter(
                ProblemModel.user_id == user_id,
                ProblemModel.due <= now
            ).order_by(ProblemModel.due.asc(), ProblemModel.id.asc()).all()
            return [ProblemRecord.model_validate(row) for row in rows]
        finally:
            session.close()

    def list_categories(self, user_id: str) -> list[str]:
        """
        Distinct topic tags across a user's problems, for autocompletion.

        Sorted case-insensitively; tags differing only in case are kept apart.
        """
        session = self._session()
        try:
            rows = session.query(ProblemModel.category).filter(
                ProblemModel.user_id == user_id
            ).all()
        finally:
            session.close()

        tags = {tag for (category,) in rows for tag in (category or [])}
        return sorted(tags, key=lambda tag: (tag.lower(), tag))

    def update_problem(self, user_id: str, problem_id: str, changes: ProblemUpdate) -> ProblemRecord:
        """
        Apply a partial edit to a problem's descriptive fields.

        Raises:
            ProblemNotFound: if no such problem exists for this user
        """
        values = changes.changes()

        session = self._session()
        try:
            if values:
                result = session.execute(
                    update(ProblemModel)
                    .where(ProblemModel.id == problem_id, ProblemModel.user_id == user_id)
                    .values(**values)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    raise ProblemNotFound(problem_id, user_id)
                session.commit()

            row = self._find(session, user_id, problem_id)
            if row is None:
                raise ProblemNotFound(problem_id, user_id)
            record = ProblemRecord.model_validate(row)
        finally:
            session.close()

        if values:
            logger.info("problem_updated", user_id=user_id, problem_id=problem_id, fields=sorted(values))
        return record

    def delete_problem(self, user_id: str, problem_id: str) -> None:
        """
        Delete a problem and its review log.

        Raises:
            ProblemNotFound: if no such problem exists for this user
        """
        session = self._session()
        try:
            result = session.execute(
                delete(ProblemModel)
                .where(ProblemModel.id == problem_id, ProblemModel.user_id == user_id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise ProblemNotFound(problem_id, user_id)
            session.execute(
                delete(ReviewEventModel)
                .where(ReviewEventModel.problem_id == problem_id, ReviewEventModel.user_id == user_id)
                .execution_options(synchronize_session=False)
            )
            session.commit()
        finally:
            session.close()

        logger.info("problem_deleted", user_id=user_id, problem_id=problem_id)

    # ---- Reviews ----

    def apply_review(
        self,
        user_id: str,
        problem_id: str,
        previous: MemoryState,
        new_state: MemoryState,
        status: Status,
        retrievability_before: float
    ) -> ProblemRecord:
        """
        Persist a scheduled review and log it, in one transaction.

        The UPDATE only matches while the stored review count still equals
        previous.review_count, so exactly one of several racing reviews wins.

        Args:
            user_id: Owner of the problem
            problem_id: Problem being reviewed
            previous: State the review was computed from
            new_state: State returned by the scheduler
            status: Status to store alongside the new state
            retrievability_before: Recall probability at review time

        Returns:
            The updated problem

        Raises:
            ProblemNotFound: if the problem no longer exists for this user
            ConcurrentReviewError: if another review was written first
        """
        session = self._session()
        try:
            result = session.execute(
                update(ProblemModel)
                .where(
                    ProblemModel.id == problem_id,
                    ProblemModel.user_id == user_id,
                    ProblemModel.review_count == previous.review_count,
                )
                .values(
                    stability=new_state.stability,
                    fsrs_difficulty=new_state.difficulty,
                    due=ensure_utc(new_state.due),
                    last_review=ensure_utc(new_state.last_review),
                    review_count=ProblemModel.review_count + 1,
                    last_rating=int(new_state.last_rating),
                    status=status.value,
                )
                .execution_options(synchronize_session=False)
            )

            if result.rowcount != 1:
                session.rollback()
                if self._find(session, user_id, problem_id) is None:
                    raise ProblemNotFound(problem_id, user_id)
                raise ConcurrentReviewError(problem_id, previous.review_count)

            session.add(ReviewEventModel(
                user_id=user_id,
                problem_id=problem_id,
                timestamp=ensure_utc(new_state.last_review),
                rating=int(new_state.last_rating),
                stability_before=previous.stability,
                difficulty_before=previous.difficulty,
                retrievability_before=retrievability_before,
                elapsed_days=days_between(previous.last_review, new_state.last_review),
                stability_after=new_state.stability,
                difficulty_after=new_state.difficulty,
                interval_days=interval_days(new_state),
            ))
            session.commit()

            return ProblemRecord.model_validate(self._find(session, user_id, problem_id))
        finally:
            session.close()

    def get_recent_events(self, user_id: str, limit: int = 10) -> list[ReviewEventRecord]:
        """
        Get recent review events for a user, newest first.
        """
        session = self._session()
        try:
            events = session.query(ReviewEventModel).filter(
                ReviewEventModel.user_id == user_id
            ).order_by(
                ReviewEventModel.timestamp.desc(),
                ReviewEventModel.id.desc()
            ).limit(limit).all()
            return [ReviewEventRecord.model_validate(event) for event in events]
        finally:
            session.close()

    # ---- Helpers ----

    @staticmethod
    def _find(session: Session, user_id: str, problem_id: str) -> Optional[ProblemModel]:
        return session.query(ProblemModel).filter(
            ProblemModel.id == problem_id,
            ProblemModel.user_id == user_id
        ).first()
