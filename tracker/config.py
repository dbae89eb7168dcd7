"""
Configuration loaded from environment variables (and an optional .env file).

Keys:
- DATABASE_URL: SQLAlchemy URL (default: sqlite:///logs/tracker.db)
- TEST_MODE: "true" switches to a test_-prefixed database
- DEFAULT_USER_ID: owner used by maintenance scripts
- DESIRED_RETENTION: target recall probability at the due date (default 0.9)
- MAXIMUM_INTERVAL: longest review interval in days (default 36500)
- LOG_LEVEL: stdlib logging level name (default INFO)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from tracker.errors import ConfigurationError
from tracker.fsrs import SchedulerParameters
from tracker.fsrs.constants import DESIRED_RETENTION, MAXIMUM_INTERVAL

# Load environment
load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///logs/tracker.db"


@dataclass(frozen=True)
class Settings:
    database_url: str
    test_mode: bool
    default_user_id: str
    desired_retention: float
    maximum_interval: int
    log_level: str

    @property
    def scheduler_parameters(self) -> SchedulerParameters:
        return SchedulerParameters(
            desired_retention=self.desired_retention,
            maximum_interval=self.maximum_interval,
        )


def is_test_mode() -> bool:
    """Check if running in test mode."""
    return os.getenv("TEST_MODE", "false").lower() == "true"


def get_database_url() -> str:
    """
    Get the database URL from environment variables.

    In test mode the database name gets a "test_" prefix, so
    postgresql://.../tracker_db becomes postgresql://.../test_tracker_db and
    sqlite:///logs/tracker.db becomes sqlite:///logs/test_tracker.db.

    Returns:
        SQLAlchemy database URL
    """
    base_url = os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL

    try:
        url = make_url(base_url)
    except ArgumentError as exc:
        raise ConfigurationError(f"DATABASE_URL is not a valid database URL: {base_url!r}") from exc

    if not is_test_mode() or not url.database or url.database == ":memory:":
        return base_url

    path = Path(url.database)
    test_db = str(path.with_name(f"test_{path.name}"))
    return url.set(database=test_db).render_as_string(hide_password=False)


def get_default_user_id() -> str:
    """Get default user id for scripts that act on one user's problems."""
    return os.getenv("DEFAULT_USER_ID", "default")


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def load_settings() -> Settings:
    """Read all settings from the current environment."""
    settings = Settings(
        database_url=get_database_url(),
        test_mode=is_test_mode(),
        default_user_id=get_default_user_id(),
        desired_retention=_get_float("DESIRED_RETENTION", DESIRED_RETENTION),
        maximum_interval=_get_int("MAXIMUM_INTERVAL", MAXIMUM_INTERVAL),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
    # Fail fast on out-of-range scheduler settings
    settings.scheduler_parameters
    return settings
