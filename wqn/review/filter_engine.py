"""
Filter Engine for smart problem sets.

A problem is eligible when it passes every restriction in the FilterConfig:
- tags: shares at least one tag with tag_ids
- status: status is in statuses
- type: problem_type is in problem_types
- recency: not reviewed for at least days_since_review days

Empty restrictions always pass. Input order is preserved; ordering is the
Session Composer's job.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

from wqn.review.models import FilterConfig, ProblemRef


def as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def passes_recency(problem: ProblemRef, config: FilterConfig, now: datetime) -> bool:
    """Recency check for a single problem."""
    if config.days_since_review is None:
        return True
    if problem.last_reviewed_date is None:
        return config.include_never_reviewed
    age = as_utc(now) - as_utc(problem.last_reviewed_date)
    return age >= timedelta(days=config.days_since_review)


def matches(problem: ProblemRef, config: FilterConfig, now: datetime) -> bool:
    """Check whether a problem is eligible under the config."""
    if config.tag_ids and not (problem.tag_ids & config.tag_ids):
        return False
    if config.statuses and problem.status not in config.statuses:
        return False
    if config.problem_types and problem.problem_type not in config.problem_types:
        return False
    return passes_recency(problem, config, now)


def filter_problems(
    problems: list[ProblemRef],
    config: FilterConfig,
    now: datetime | None = None,
) -> list[ProblemRef]:
    """
    Return the eligible problems, in input order.

    Args:
        problems: Candidate problems (typically all problems of one subject)
        config: Smart set filter configuration
        now: Reference time for the recency check (default: current UTC time)

    Returns:
        Eligible problems; empty when nothing matches
    """
    now = now or datetime.now(timezone.utc)
    return [p for p in problems if matches(p, config, now)]
