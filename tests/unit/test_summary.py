"""
Unit tests for the Summary Calculator.
"""

from datetime import datetime, timedelta, timezone

import pytest

from wqn.review.models import ReviewSession, SessionResult, SessionState
from wqn.review.summary import accuracy_percent, latest_results_by_problem, summarize

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def result(pid, correct=None, skipped=False, minute=0):
    return SessionResult(
        problem_id=pid,
        was_correct=correct,
        was_skipped=skipped,
        completed_at=T0 + timedelta(minutes=minute),
    )


@pytest.fixture
def state():
    return SessionState(
        problem_ids=("p1", "p2", "p3", "p4"),
        initial_statuses={"p1": "wrong", "p2": "wrong", "p3": "needs_review", "p4": "mastered"},
        elapsed_ms=61000,
    )


class TestCounts:
    def test_answer_answer_skip_gives_fifty_percent(self, state):
        results = [result("p1", True, minute=1), result("p2", False, minute=2), result("p3", skipped=True, minute=3)]
        summary = summarize(state, results, dict(state.initial_statuses))
        assert summary.total_problems == 4
        assert summary.completed_count == 2
        assert summary.correct_count == 1
        assert summary.incorrect_count == 1
        assert summary.skipped_count == 1
        assert summary.accuracy == 50
        assert summary.elapsed_ms == 61000

    def test_no_results_is_all_zero(self, state):
        summary = summarize(state, [], dict(state.initial_statuses))
        assert summary.completed_count == summary.skipped_count == 0
        assert summary.correct_count == summary.incorrect_count == 0
        assert summary.accuracy == 0
        assert summary.status_deltas == {"wrong": 0, "needs_review": 0, "mastered": 0}
        assert summary.status_transitions == {}

    def test_latest_answer_wins(self, state):
        results = [result("p2", False, minute=1), result("p2", True, minute=5)]
        summary = summarize(state, results, {})
        assert summary.completed_count == 1
        assert summary.correct_count == 1
        assert summary.incorrect_count == 0

    def test_out_of_order_log_uses_timestamps(self, state):
        results = [result("p2", True, minute=5), result("p2", False, minute=1)]
        assert summarize(state, results, {}).correct_count == 1

    def test_skip_then_answer_counts_as_answered(self, state):
        results = [result("p3", skipped=True, minute=1), result("p3", False, minute=2)]
        summary = summarize(state, results, {})
        assert summary.skipped_count == 0
        assert summary.completed_count == 1

    def test_answer_then_skip_keeps_answer(self):
        latest = latest_results_by_problem([result("p1", True, minute=1), result("p1", skipped=True, minute=2)])
        assert latest["p1"].was_correct is True

    def test_repeated_skips_count_once(self, state):
        results = [result("p4", skipped=True, minute=m) for m in range(3)]
        assert summarize(state, results, {}).skipped_count == 1


class TestAccuracy:
    @pytest.mark.parametrize(
        "correct,completed,expected",
        [(0, 0, 0), (1, 2, 50), (2, 3, 67), (1, 3, 33), (1, 8, 13), (3, 3, 100), (0, 4, 0)],
    )
    def test_rounding(self, correct, completed, expected):
        assert accuracy_percent(correct, completed) == expected


class TestStatusDeltas:
    def test_deltas_use_live_statuses(self, state):
        live = {"p1": "mastered", "p2": "wrong", "p3": "needs_review", "p4": "mastered"}
        summary = summarize(state, [], live)
        assert summary.status_counts == {"wrong": 1, "needs_review": 1, "mastered": 2}
        assert summary.status_deltas == {"wrong": -1, "needs_review": 0, "mastered": 1}
        assert summary.status_transitions == {"wrong->mastered": 1}

    def test_deltas_sum_to_zero_when_all_statuses_known(self, state):
        live = {"p1": "needs_review", "p2": "mastered", "p3": "wrong", "p4": "wrong"}
        assert sum(summarize(state, [], live).status_deltas.values()) == 0


class TestTimestamps:
    def test_inactive_session_completed_at_is_last_activity(self, state):
        session = ReviewSession(
            id="s1",
            user_id="u1",
            problem_set_id="ps1",
            state=state,
            is_active=False,
            started_at=T0,
            last_activity_at=T0 + timedelta(minutes=30),
        )
        summary = summarize(session, [], {})
        assert summary.started_at == T0
        assert summary.completed_at == T0 + timedelta(minutes=30)

    def test_active_session_has_no_completed_at(self, state):
        session = ReviewSession(id="s1", user_id="u1", problem_set_id="ps1", state=state, started_at=T0)
        assert summarize(session, [], {}).completed_at is None
