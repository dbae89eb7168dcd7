"""
Pydantic models for tracked problems.

Create/update payloads are validated here before they reach the store.
ProblemRecord is the detached, read-only view the store hands back.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tracker.fsrs import MemoryState, Rating, Status, ensure_utc


# Configuration
MAX_INPUT_LENGTH = 2000  # Maximum length of free-text fields (notes, mistakes)


class Difficulty(str, Enum):
    """Difficulty label shown by the problem's platform."""
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


def _split_categories(value: object) -> object:
    """Accept "dp, graphs" as well as ["dp", "graphs"]; drop blank tags."""
    if value is None:
        return value
    if isinstance(value, str):
        value = value.split(",")
    if isinstance(value, (list, tuple)):
        return [str(tag).strip() for tag in value if str(tag).strip()]
    return value


def _to_utc(value: Optional[datetime]) -> Optional[datetime]:
    return ensure_utc(value) if value is not None else None


# ---- Payloads ----

class ProblemCreate(BaseModel):
    """A newly solved problem as submitted by the user."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, description="Problem title")
    platform: str = Field(..., min_length=1, description="e.g. LeetCode, Codeforces")
    link: str = ""
    difficulty: Difficulty
    status: Status = Status.TO_REVISE
    category: list[str] = Field(..., min_length=1, description="Topic tags, at least one")
    notes: str = Field(default="", max_length=MAX_INPUT_LENGTH)
    mistakes_made: str = Field(default="", max_length=MAX_INPUT_LENGTH)
    date_solved: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("category", mode="before")
    @classmethod
    def split_category(cls, value):
        return _split_categories(value)

    @field_validator("date_solved")
    @classmethod
    def normalize_date(cls, value):
        return _to_utc(value)


class ProblemUpdate(BaseModel):
    """
    Partial edit of a problem's descriptive fields.

    Memory-state fields are absent: they change only through reviews.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1)
    platform: Optional[str] = Field(default=None, min_length=1)
    link: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    status: Optional[Status] = None
    category: Optional[list[str]] = Field(default=None, min_length=1)
    notes: Optional[str] = Field(default=None, max_length=MAX_INPUT_LENGTH)
    mistakes_made: Optional[str] = Field(default=None, max_length=MAX_INPUT_LENGTH)

    @field_validator("category", mode="before")
    @classmethod
    def split_category(cls, value):
        return _split_categories(value)

    def changes(self) -> dict:
        """Only the fields the caller actually set."""
        return self.model_dump(exclude_unset=True, mode="json")


# ---- Records ----

class ProblemRecord(BaseModel):
    """Snapshot of a stored problem, detached from any database session."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    user_id: str
    name: str
    platform: str
    link: str
    difficulty: Difficulty
    status: Status
    category: list[str]
    notes: str
    mistakes_made: str
    date_solved: datetime
    created_at: datetime

    # Memory state
    stability: float
    fsrs_difficulty: float
    due: datetime
    last_review: Optional[datetime] = None
    review_count: int
    last_rating: Optional[Rating] = None

    @field_validator("date_solved", "created_at", "due", "last_review")
    @classmethod
    def normalize_dates(cls, value):
        return _to_utc(value)

    @property
    def memory_state(self) -> MemoryState:
        return MemoryState(
            stability=self.stability,
            difficulty=self.fsrs_difficulty,
            due=self.due,
            last_review=self.last_review,
            review_count=self.review_count,
            last_rating=self.last_rating,
        )


class ReviewEventRecord(BaseModel):
    """One entry of the append-only review log."""
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    user_id: str
    problem_id: str
    timestamp: datetime
    rating: Rating
    stability_before: float
    difficulty_before: float
    retrievability_before: float
    elapsed_days: float
    stability_after: float
    difficulty_after: float
    interval_days: float

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value):
        return _to_utc(value)
