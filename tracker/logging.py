"""
Structured logging for the tracker.

Store and review code log through the module-level `logger` with an event
name and keyword fields, e.g.

    logger.info("review_scheduled", user_id=..., problem_id=..., rating="GOOD")

Events emitted: problem_created, problem_updated, problem_deleted,
database_reset, review_scheduled, review_conflict, leetcode_fetch_failed.

Scripts call configure_logging() once at startup with LOG_LEVEL from the
settings; library code never configures logging itself.
"""

import logging

import structlog


def configure_logging(level: str = "INFO") -> None:
    """Route structlog through stdlib logging and render JSON lines.

    Unknown level names fall back to INFO. Events below the level are dropped
    before rendering.
    """
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO))
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


logger = structlog.get_logger()
