"""
SQLAlchemy ORM Models

Defines the Problem and ReviewEvent tables. Works with SQLite and Postgres.
"""

from sqlalchemy import JSON, Column, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Problem(Base):
    """
    A solved coding problem together with its spaced-repetition state.

    Rows are always addressed by (id, user_id) so one user can never read or
    write another user's problems.
    """
    __tablename__ = 'problems'

    id = Column(String(32), primary_key=True)
    user_id = Column(String(255), nullable=False)

    # Descriptive fields
    name = Column(String(255), nullable=False)
    platform = Column(String(100), nullable=False)
    link = Column(Text, nullable=False, default="")
    difficulty = Column(String(20), nullable=False)  # Easy / Medium / Hard label
    status = Column(String(20), nullable=False)  # ToRevise / Solved / Stuck / Revisited
    category = Column(JSON, nullable=False)  # list of topic tags
    notes = Column(Text, nullable=False, default="")
    mistakes_made = Column(Text, nullable=False, default="")
    date_solved = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    # Memory state
    stability = Column(Float, nullable=False)
    fsrs_difficulty = Column(Float, nullable=False)
    due = Column(DateTime(timezone=True), nullable=False)
    last_review = Column(DateTime(timezone=True), nullable=True)
    review_count = Column(Integer, nullable=False, default=0)
    last_rating = Column(Integer, nullable=True)  # 1=AGAIN, 2=HARD, 3=GOOD, 4=EASY

    __table_args__ = (
        Index('idx_problems_user_due', 'user_id', 'due'),
    )

    def __repr__(self):
        return f"<Problem({self.id}, {self.user_id}, {self.name!r})>"


class ReviewEvent(Base):
    """
    Log entry for a single applied review.

    Captures the memory state before and after, for auditing and tuning.
    """
    __tablename__ = 'review_events'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    problem_id = Column(String(32), nullable=False)

    timestamp = Column(DateTime(timezone=True), nullable=False)
    rating = Column(Integer, nullable=False)

    # State before review
    stability_before = Column(Float, nullable=False)
    difficulty_before = Column(Float, nullable=False)
    retrievability_before = Column(Float, nullable=False)
    elapsed_days = Column(Float, nullable=False)

    # State after review
    stability_after = Column(Float, nullable=False)
    difficulty_after = Column(Float, nullable=False)
    interval_days = Column(Float, nullable=False)

    __table_args__ = (
        Index('idx_review_events_user_ts', 'user_id', 'timestamp'),
    )

    def __repr__(self):
        return f"<ReviewEvent(id={self.id}, {self.problem_id}, rating={self.rating})>"
