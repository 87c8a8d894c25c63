"""Tests for review queue derivation and stats."""

from datetime import datetime, timedelta
from itertools import combinations

import pytest
from conftest import NOW, make_problem, make_solve

from codereps.application.queue_builder import (
    build_queue,
    compute_stats,
    get_overdue_items,
    get_upcoming_items,
    select_latest_solve,
)
from codereps.domain.models import QueueFilters


@pytest.fixture
def problems():
    """
    Problems around NOW (2025-01-15):
      two-sum       due 01-07  (-8, overdue)
      valid-anagram due 01-11  (-4, overdue)
      lru-cache     due 01-15  ( 0, today)
      word-ladder   due 01-18  ( 3)
      median-heap   due 01-27  (12)
      n-queens      never solved
    """
    return [
        make_problem("lru-cache", make_solve("lru-cache", datetime(2025, 1, 14, 8), interval=1)),
        make_problem("median-heap", make_solve("median-heap", datetime(2025, 1, 15, 7), interval=12)),
        make_problem("two-sum", make_solve("two-sum", datetime(2025, 1, 1, 9), interval=6)),
        make_problem("n-queens"),
        make_problem("word-ladder", make_solve("word-ladder", datetime(2025, 1, 12, 20), interval=6)),
        make_problem("valid-anagram", make_solve("valid-anagram", datetime(2025, 1, 10, 9), interval=1)),
    ]


def _ids(items):
    return [item.problem.id for item in items]


class TestSelectLatestSolve:
    def test_empty_history(self):
        assert select_latest_solve([]) is None

    def test_max_timestamp_wins_regardless_of_order(self):
        newest = make_solve("p", datetime(2025, 1, 10))
        solves = [make_solve("p", datetime(2025, 1, 5)), newest, make_solve("p", datetime(2025, 1, 7))]
        assert select_latest_solve(solves) is newest

    def test_tie_broken_by_created_at(self):
        when = datetime(2025, 1, 10)
        later = make_solve("p", when, solve_id="b", created_at=datetime(2025, 1, 10, 12))
        earlier = make_solve("p", when, solve_id="a", created_at=datetime(2025, 1, 10, 11))
        assert select_latest_solve([later, earlier]).id == "b"

    def test_tie_without_created_at_prefers_later_position(self):
        when = datetime(2025, 1, 10)
        solves = [make_solve("p", when, solve_id="first"), make_solve("p", when, solve_id="second")]
        assert select_latest_solve(solves).id == "second"


class TestBuildQueue:
    def test_excludes_unsolved_and_sorts(self, problems):
        queue = build_queue(problems, now=NOW)
        assert _ids(queue) == ["two-sum", "valid-anagram", "lru-cache", "word-ladder", "median-heap"]

    def test_derived_fields(self, problems):
        by_id = {item.problem.id: item for item in build_queue(problems, now=NOW)}

        two_sum = by_id["two-sum"]
        assert two_sum.days_until_due == -8
        assert two_sum.is_overdue is True
        assert two_sum.next_review_date == datetime(2025, 1, 7, 9)
        assert two_sum.review_state.interval == 6
        assert two_sum.last_solve.problem_id == "two-sum"

        assert by_id["lru-cache"].days_until_due == 0
        assert by_id["lru-cache"].is_overdue is False
        assert by_id["median-heap"].days_until_due == 12

    def test_uses_latest_solve_for_state(self, now):
        entry = make_problem(
            "p",
            make_solve("p", datetime(2025, 1, 14), interval=30, solve_id="newest"),
            make_solve("p", datetime(2024, 12, 1), interval=1, solve_id="old"),
        )
        [item] = build_queue([entry], now=now)
        assert item.last_solve.id == "newest"
        assert item.days_until_due == 29

    def test_time_of_day_is_ignored(self, now):
        late_yesterday = make_problem("late", make_solve("late", datetime(2025, 1, 13, 23), interval=1))
        late_today = make_problem("today", make_solve("today", datetime(2025, 1, 14, 23, 59), interval=1))

        by_id = {i.problem.id: i for i in build_queue([late_yesterday, late_today], now=now)}

        # Due 2025-01-14 23:00, less than a day ago but on an earlier calendar day
        assert by_id["late"].is_overdue is True
        assert by_id["late"].days_until_due == -1
        # Due later today
        assert by_id["today"].is_overdue is False
        assert by_id["today"].days_until_due == 0

    def test_equal_due_dates_keep_input_order(self, now):
        entries = [
            make_problem(name, make_solve(name, datetime(2025, 1, 13, hour), interval=4))
            for name, hour in [("c", 9), ("a", 18), ("b", 7)]
        ]
        assert _ids(build_queue(entries, now=now)) == ["c", "a", "b"]

    def test_idempotent(self, problems):
        first = build_queue(problems, now=NOW)
        second = build_queue(problems, now=NOW)
        assert first == second

    def test_sort_order_property(self, problems):
        queue = build_queue(problems, now=NOW)
        for a, b in combinations(queue, 2):
            if a.is_overdue == b.is_overdue:
                assert a.days_until_due <= b.days_until_due
            else:
                assert a.is_overdue

    def test_defaults_to_current_time(self):
        recent = make_problem("p", make_solve("p", datetime.now() - timedelta(days=3), interval=1))
        [item] = build_queue([recent])
        assert item.is_overdue is True


class TestFilters:
    def test_overdue_only(self, problems):
        queue = build_queue(problems, QueueFilters(show_overdue=True), now=NOW)
        assert _ids(queue) == ["two-sum", "valid-anagram"]

    def test_upcoming_only(self, problems):
        queue = build_queue(problems, QueueFilters(show_upcoming=True), now=NOW)
        assert _ids(queue) == ["lru-cache", "word-ladder", "median-heap"]

    @pytest.mark.parametrize("both", [True, False])
    def test_both_or_neither_keeps_everything(self, problems, both):
        filters = QueueFilters(show_overdue=both, show_upcoming=both)
        assert len(build_queue(problems, filters, now=NOW)) == 5

    def test_days_ahead_keeps_overdue(self, problems):
        queue = build_queue(problems, QueueFilters(days_ahead=3), now=NOW)
        assert _ids(queue) == ["two-sum", "valid-anagram", "lru-cache", "word-ladder"]

    def test_days_ahead_zero_is_today_only(self, problems):
        queue = build_queue(problems, QueueFilters(show_upcoming=True, days_ahead=0), now=NOW)
        assert _ids(queue) == ["lru-cache"]

    @pytest.mark.parametrize(
        "filters",
        [
            None,
            QueueFilters(),
            QueueFilters(show_overdue=True),
            QueueFilters(show_upcoming=True),
            QueueFilters(days_ahead=100),
        ],
    )
    def test_unsolved_never_appear(self, problems, filters):
        assert "n-queens" not in _ids(build_queue(problems, filters, now=NOW))

    def test_convenience_selectors(self, problems):
        assert _ids(get_overdue_items(problems, now=NOW)) == ["two-sum", "valid-anagram"]
        assert _ids(get_upcoming_items(problems, now=NOW)) == ["lru-cache", "word-ladder"]
        assert _ids(get_upcoming_items(problems, days_ahead=30, now=NOW)) == [
            "lru-cache",
            "word-ladder",
            "median-heap",
        ]


class TestStats:
    def test_counts(self, problems):
        stats = compute_stats(build_queue(problems, now=NOW), now=NOW)

        assert stats.overdue_count == 2
        assert stats.due_today_count == 1
        assert stats.due_this_week_count == 2
        assert stats.total_problems == 5

    def test_week_boundary_is_inclusive(self, now):
        entries = [
            make_problem("day7", make_solve("day7", datetime(2025, 1, 15), interval=7)),
            make_problem("day8", make_solve("day8", datetime(2025, 1, 15), interval=8)),
        ]
        stats = compute_stats(build_queue(entries, now=now), now=now)
        assert stats.due_this_week_count == 1

    def test_empty_queue(self, now):
        stats = compute_stats([], now=now)
        assert stats.total_problems == 0
        assert stats.overdue_count == 0

    @pytest.mark.parametrize(
        "filters",
        [None, QueueFilters(show_overdue=True), QueueFilters(show_upcoming=True, days_ahead=3)],
    )
    def test_total_matches_queue_length(self, problems, filters):
        queue = build_queue(problems, filters, now=NOW)
        assert compute_stats(queue, now=NOW).total_problems == len(queue)
