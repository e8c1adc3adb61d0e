"""
Summary Calculator.

Computes session statistics from the result log and the problem statuses
read at summary time:
- Counts: answered (correct / incorrect) and skipped, one entry per problem
- Accuracy: correct / answered, as a rounded percentage
- Status deltas: live status counts minus the counts captured at session start

Live statuses are used on purpose, so edits made outside the session show up.
"""
from __future__ import annotations

import math
from datetime import datetime
from typing import Iterable, Mapping

from wqn.review.filter_engine import as_utc
from wqn.review.models import (
    STATUS_VALUES,
    ReviewSession,
    SessionResult,
    SessionState,
    SessionSummary,
)


def _result_sort_key(indexed: tuple[int, SessionResult]) -> tuple[float, int]:
    position, result = indexed
    ts = as_utc(result.completed_at).timestamp() if result.completed_at else float("-inf")
    return ts, position


def latest_results_by_problem(results: Iterable[SessionResult]) -> dict[str, SessionResult]:
    """
    Collapse the result log to one record per problem.

    The most recent answer wins. A problem that was only ever skipped keeps
    its most recent skip. An answer is never overridden by a later skip.
    """
    ordered = [r for _, r in sorted(enumerate(results), key=_result_sort_key)]
    latest: dict[str, SessionResult] = {}
    for result in ordered:
        current = latest.get(result.problem_id)
        if result.was_skipped and current is not None and not current.was_skipped:
            continue
        latest[result.problem_id] = result
    return latest


def accuracy_percent(correct: int, completed: int) -> int:
    """Rounded percentage (half up); 0 when nothing was answered."""
    if completed <= 0:
        return 0
    return int(math.floor(correct / completed * 100 + 0.5))


def count_statuses(problem_ids: Iterable[str], statuses: Mapping[str, str]) -> dict[str, int]:
    """Count known statuses over the given problems; unknown/missing are ignored."""
    counts = {status: 0 for status in STATUS_VALUES}
    for pid in problem_ids:
        status = statuses.get(pid)
        if status in counts:
            counts[status] += 1
    return counts


def status_transitions(
    problem_ids: Iterable[str],
    initial: Mapping[str, str],
    live: Mapping[str, str],
) -> dict[str, int]:
    """Count per-problem status changes, keyed like "wrong->mastered"."""
    transitions: dict[str, int] = {}
    for pid in problem_ids:
        before, after = initial.get(pid), live.get(pid)
        if before is None or after is None or before == after:
            continue
        key = f"{before}->{after}"
        transitions[key] = transitions.get(key, 0) + 1
    return transitions


def summarize(
    session: ReviewSession | SessionState,
    results: Iterable[SessionResult],
    live_statuses: Mapping[str, str],
    completed_at: datetime | None = None,
) -> SessionSummary:
    """
    Build the summary for a session.

    Args:
        session: Session record (or bare state when timestamps are not needed)
        results: The session's result log, any order
        live_statuses: problem_id -> status read at summary time
        completed_at: Close time; defaults to last_activity_at for inactive sessions

    Returns:
        SessionSummary; all-zero counts when there are no results
    """
    if isinstance(session, ReviewSession):
        state = session.state
        started_at = session.started_at
        if completed_at is None and not session.is_active:
            completed_at = session.last_activity_at
    else:
        state = session
        started_at = None

    problem_ids = state.problem_ids
    latest = latest_results_by_problem(results).values()
    completed = [r for r in latest if not r.was_skipped]
    skipped = [r for r in latest if r.was_skipped]
    correct = sum(1 for r in completed if r.was_correct is True)
    incorrect = sum(1 for r in completed if r.was_correct is False)

    live_counts = count_statuses(problem_ids, live_statuses)
    initial_counts = count_statuses(problem_ids, state.initial_statuses)

    return SessionSummary(
        total_problems=len(problem_ids),
        completed_count=len(completed),
        skipped_count=len(skipped),
        correct_count=correct,
        incorrect_count=incorrect,
        accuracy=accuracy_percent(correct, len(completed)),
        status_counts=live_counts,
        status_deltas={s: live_counts[s] - initial_counts[s] for s in STATUS_VALUES},
        status_transitions=status_transitions(problem_ids, state.initial_statuses, live_statuses),
        elapsed_ms=state.elapsed_ms,
        started_at=started_at,
        completed_at=completed_at,
    )
