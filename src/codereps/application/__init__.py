# Application Package
from .queue_builder import (
    build_queue,
    compute_stats,
    get_overdue_items,
    get_upcoming_items,
    select_latest_solve,
)
from .scheduler import SM2Scheduler, compute_next_review, quality_from_difficulty

__all__ = [
    "build_queue",
    "compute_stats",
    "get_overdue_items",
    "get_upcoming_items",
    "select_latest_solve",
    "SM2Scheduler",
    "compute_next_review",
    "quality_from_difficulty",
]
