"""
LeetCode lookup - fill in a new problem from its LeetCode page

Main workflow:
1. Turn a slug or problem URL into a slug (numeric IDs are rejected)
2. Query LeetCode's public GraphQL endpoint for the question
3. Map title, difficulty and topic tags onto a ProblemCreate payload

Only reads from LeetCode; nothing here touches the store.
"""

from __future__ import annotations

import re
from typing import Any, Optional

import requests
from pydantic import BaseModel, ConfigDict, Field, field_validator

from tracker.errors import InvalidProblemReference, LeetCodeError
from tracker.logging import logger
from tracker.schemas import Difficulty, ProblemCreate


LEETCODE_BASE_URL = "https://leetcode.com"
LEETCODE_GRAPHQL_URL = f"{LEETCODE_BASE_URL}/graphql"
DEFAULT_TIMEOUT_SECONDS = 15

QUESTION_QUERY = """
query questionData($titleSlug: String!) {
  question(titleSlug: $titleSlug) {
    questionId
    questionFrontendId
    title
    titleSlug
    difficulty
    topicTags {
      name
    }
    content
  }
}
"""

_PROBLEM_URL = re.compile(r"leetcode\.(?:com|cn)/problems/([^/?#\s]+)", re.IGNORECASE)
_SLUG = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class LeetCodeQuestion(BaseModel):
    """The subset of a LeetCode question used to log a problem."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    question_id: str = Field(alias="questionId")
    frontend_id: str = Field(alias="questionFrontendId")
    title: str
    slug: str = Field(alias="titleSlug")
    difficulty: Difficulty
    topic_tags: list[str] = Field(default_factory=list, alias="topicTags")
    content: Optional[str] = None  # null for premium questions

    @field_validator("topic_tags", mode="before")
    @classmethod
    def tag_names(cls, value):
        if value is None:
            return []
        return [tag["name"] if isinstance(tag, dict) else tag for tag in value]

    @property
    def url(self) -> str:
        return f"{LEETCODE_BASE_URL}/problems/{self.slug}/"


def extract_slug(reference: str) -> str:
    """
    Normalize user input to a LeetCode title slug.

    Accepts "two-sum", "Two-Sum" or any leetcode.com/problems/<slug>/... URL.

    Raises:
        InvalidProblemReference: for numeric frontend IDs and anything that is
            not a slug or problem URL
    """
    value = (reference or "").strip()
    if not value:
        raise InvalidProblemReference("Enter a LeetCode problem slug or URL")

    # The GraphQL question query only resolves slugs
    if value.isdigit():
        raise InvalidProblemReference(
            f'Numeric LeetCode problem IDs (e.g., "{value}") are not supported. '
            'Enter the problem\'s slug (e.g., "two-sum") or its full URL.'
        )

    match = _PROBLEM_URL.search(value)
    slug = (match.group(1) if match else value).lower()
    if not _SLUG.match(slug):
        raise InvalidProblemReference(f"Not a LeetCode problem slug or URL: {reference!r}")
    return slug


def fetch_question(reference: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> LeetCodeQuestion:
    """
    Look up a question on LeetCode.

    Args:
        reference: Slug or problem URL
        timeout: Request timeout in seconds

    Returns:
        The question's metadata

    Raises:
        InvalidProblemReference: input is not a slug or URL (no request is made)
        LeetCodeError: network failure, HTTP error, GraphQL error, or unknown slug
    """
    slug = extract_slug(reference)

    try:
        response = requests.post(
            LEETCODE_GRAPHQL_URL,
            json={"query": QUESTION_QUERY, "variables": {"titleSlug": slug}},
            headers={"Content-Type": "application/json", "Referer": LEETCODE_BASE_URL},
            timeout=timeout,
        )
    except requests.RequestException as exc:
        logger.warning("leetcode_fetch_failed", slug=slug, error=str(exc))
        raise LeetCodeError(f"LeetCode request failed: {exc}") from exc

    if response.status_code >= 400:
        logger.warning("leetcode_fetch_failed", slug=slug, status_code=response.status_code)
        raise LeetCodeError(
            f"LeetCode API error: {response.status_code} - {response.text[:100]}",
            status_code=response.status_code,
        )

    try:
        payload: dict[str, Any] = response.json()
    except ValueError as exc:
        raise LeetCodeError("LeetCode returned a non-JSON response", status_code=response.status_code) from exc

    # GraphQL reports errors with a 200 status
    errors = payload.get("errors")
    if errors:
        message = errors[0].get("message") or "GraphQL error from LeetCode"
        raise LeetCodeError(message, status_code=400)

    question = (payload.get("data") or {}).get("question")
    if not question:
        raise LeetCodeError("Problem not found on LeetCode. Please check the slug or URL.", status_code=404)

    return LeetCodeQuestion.model_validate(question)


def to_problem_create(question: LeetCodeQuestion, **overrides: Any) -> ProblemCreate:
    """
    Build a new-problem payload from a LeetCode question.

    Overrides (status, notes, category, date_solved, ...) win over the
    fetched values. Questions without topic tags need a category override.
    """
    fields: dict[str, Any] = {
        "name": question.title,
        "platform": "LeetCode",
        "link": question.url,
        "difficulty": question.difficulty,
        "category": list(question.topic_tags),
    }
    fields.update(overrides)
    return ProblemCreate(**fields)
