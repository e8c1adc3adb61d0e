"""
Unit tests for the smart set Filter Engine.

Pure functions over ProblemRef; no database required.
"""

from datetime import datetime, timedelta, timezone

from wqn.review.filter_engine import filter_problems, passes_recency
from wqn.review.models import FilterConfig, ProblemRef

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_problem(pid, status="needs_review", problem_type="short", tags=(), reviewed_days_ago=None):
    reviewed = NOW - timedelta(days=reviewed_days_ago) if reviewed_days_ago is not None else None
    return ProblemRef(
        id=pid,
        status=status,
        problem_type=problem_type,
        tag_ids=frozenset(tags),
        last_reviewed_date=reviewed,
    )


class TestRestrictions:
    """Tag, status and type restrictions."""

    def test_empty_config_passes_everything_in_order(self):
        problems = [make_problem("c"), make_problem("a"), make_problem("b")]
        result = filter_problems(problems, FilterConfig(), NOW)
        assert [p.id for p in result] == ["c", "a", "b"]

    def test_tag_restriction_needs_one_shared_tag(self):
        problems = [
            make_problem("p1", tags={"t1"}),
            make_problem("p2", tags={"t2", "t3"}),
            make_problem("p3"),
        ]
        config = FilterConfig(tag_ids=frozenset({"t1", "t3"}))
        assert [p.id for p in filter_problems(problems, config, NOW)] == ["p1", "p2"]

    def test_status_and_type_restrictions_combine(self):
        problems = [
            make_problem("p1", status="wrong", problem_type="mcq"),
            make_problem("p2", status="wrong", problem_type="extended"),
            make_problem("p3", status="mastered", problem_type="mcq"),
        ]
        config = FilterConfig(statuses=frozenset({"wrong"}), problem_types=frozenset({"mcq"}))
        assert [p.id for p in filter_problems(problems, config, NOW)] == ["p1"]

    def test_empty_input_returns_empty(self):
        assert filter_problems([], FilterConfig(statuses=frozenset({"wrong"})), NOW) == []

    def test_every_result_satisfies_the_config(self):
        problems = [
            make_problem(f"p{i}", status=status, tags={f"t{i % 3}"})
            for i, status in enumerate(["wrong", "needs_review", "mastered"] * 4)
        ]
        config = FilterConfig(tag_ids=frozenset({"t0", "t1"}), statuses=frozenset({"wrong", "mastered"}))
        result = filter_problems(problems, config, NOW)
        assert result
        for p in result:
            assert p.tag_ids & config.tag_ids
            assert p.status in config.statuses


class TestRecency:
    """days_since_review and include_never_reviewed."""

    def test_no_days_restriction_passes_never_reviewed(self):
        config = FilterConfig(include_never_reviewed=False)
        assert passes_recency(make_problem("p"), config, NOW) is True

    def test_exactly_n_days_passes(self):
        config = FilterConfig(days_since_review=7)
        assert passes_recency(make_problem("p", reviewed_days_ago=7), config, NOW) is True

    def test_reviewed_too_recently_fails(self):
        config = FilterConfig(days_since_review=7)
        assert passes_recency(make_problem("p", reviewed_days_ago=6), config, NOW) is False

    def test_never_reviewed_follows_flag(self):
        never = make_problem("p")
        assert passes_recency(never, FilterConfig(days_since_review=3), NOW) is True
        assert passes_recency(
            never, FilterConfig(days_since_review=3, include_never_reviewed=False), NOW
        ) is False

    def test_naive_timestamp_treated_as_utc(self):
        naive = ProblemRef(
            id="p",
            status="wrong",
            problem_type="short",
            last_reviewed_date=datetime(2026, 2, 22, 12, 0),
        )
        config = FilterConfig(days_since_review=7)
        assert passes_recency(naive, config, NOW) is True
        assert passes_recency(naive, FilterConfig(days_since_review=8), NOW) is False
