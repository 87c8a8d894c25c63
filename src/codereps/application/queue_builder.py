"""
Queue builder for spaced-repetition review sessions.

Builds ordered review queues by:
1. Picking the latest solve of every problem that has been solved
2. Deriving due / overdue status on calendar days
3. Filtering by side (overdue / upcoming) and look-ahead window
4. Sorting overdue items first, most overdue at the top

Pure computation: no I/O, no shared state.
"""

from collections.abc import Iterable
from datetime import datetime

from codereps.application.utils.dates import (
    days_between,
    is_past,
    is_today,
    is_within_days,
)
from codereps.domain.constants import DEFAULT_DAYS_AHEAD, DUE_THIS_WEEK_DAYS
from codereps.domain.models import (
    ProblemWithSolves,
    QueueFilters,
    QueueItem,
    QueueStats,
    SolveRecord,
)


def select_latest_solve(solves: Iterable[SolveRecord]) -> SolveRecord | None:
    """
    Pick the solve with the greatest `solved_at`.

    Ties are broken by `created_at`, then by position (later wins), so
    non-monotonic histories still resolve deterministically.
    """
    latest: SolveRecord | None = None
    latest_key = None

    for position, solve in enumerate(solves):
        key = (solve.solved_at, _created_key(solve), position)
        if latest_key is None or key >= latest_key:
            latest, latest_key = solve, key

    return latest


def _created_key(solve: SolveRecord) -> tuple[bool, datetime]:
    # Records without created_at lose ties against records that have one
    if solve.created_at is None:
        return (False, solve.solved_at)
    return (True, solve.created_at)


def _to_queue_item(entry: ProblemWithSolves, now: datetime) -> QueueItem | None:
    latest = select_latest_solve(entry.solves)
    if latest is None:
        return None  # Never entered the review cycle

    state = latest.review_state
    next_review = state.next_review_date

    return QueueItem(
        problem=entry.problem,
        review_state=state,
        next_review_date=next_review,
        days_until_due=days_between(now, next_review),
        is_overdue=is_past(next_review, now),
        last_solve=latest,
    )


def _apply_filters(
    items: list[QueueItem], filters: QueueFilters, now: datetime
) -> list[QueueItem]:
    if filters.show_overdue and not filters.show_upcoming:
        items = [item for item in items if item.is_overdue]
    elif filters.show_upcoming and not filters.show_overdue:
        items = [item for item in items if not item.is_overdue]

    if filters.days_ahead is not None:
        days_ahead = filters.days_ahead
        items = [
            item
            for item in items
            if item.is_overdue or is_within_days(item.next_review_date, days_ahead, now)
        ]

    return items


def _sort_key(item: QueueItem) -> tuple[bool, int]:
    # Overdue (False) sorts before upcoming (True); then soonest/most overdue
    return (not item.is_overdue, item.days_until_due)


def build_queue(
    problems: Iterable[ProblemWithSolves],
    filters: QueueFilters | None = None,
    now: datetime | None = None,
) -> list[QueueItem]:
    """
    Build the review queue for a set of problems.

    Args:
        problems: Problems with their solve histories. Problems without
            solves are skipped.
        filters: Optional side and window filters.
        now: Reference time for "today". Defaults to `datetime.now()`.

    Returns:
        Queue items, overdue first (most overdue at top), then upcoming by
        nearest due date. Ties keep input order.
    """
    now = now or datetime.now()

    items = [
        item
        for item in (_to_queue_item(entry, now) for entry in problems)
        if item is not None
    ]

    if filters is not None:
        items = _apply_filters(items, filters, now)

    # sorted() is stable, equal keys keep input order
    return sorted(items, key=_sort_key)


def compute_stats(items: Iterable[QueueItem], now: datetime | None = None) -> QueueStats:
    """
    Aggregate counts over a built queue.

    `due_this_week_count` covers non-overdue items due within the next
    seven days inclusive, so it includes items due today.
    """
    now = now or datetime.now()
    items = list(items)

    return QueueStats(
        overdue_count=sum(1 for item in items if item.is_overdue),
        due_today_count=sum(1 for item in items if is_today(item.next_review_date, now)),
        due_this_week_count=sum(
            1
            for item in items
            if not item.is_overdue
            and is_within_days(item.next_review_date, DUE_THIS_WEEK_DAYS, now)
        ),
        total_problems=len(items),
    )


def get_overdue_items(
    problems: Iterable[ProblemWithSolves], now: datetime | None = None
) -> list[QueueItem]:
    return build_queue(
        problems, QueueFilters(show_overdue=True, show_upcoming=False), now=now
    )


def get_upcoming_items(
    problems: Iterable[ProblemWithSolves],
    days_ahead: int = DEFAULT_DAYS_AHEAD,
    now: datetime | None = None,
) -> list[QueueItem]:
    return build_queue(
        problems,
        QueueFilters(show_overdue=False, show_upcoming=True, days_ahead=days_ahead),
        now=now,
    )
