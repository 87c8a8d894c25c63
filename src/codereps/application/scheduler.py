"""SM-2 Spaced Repetition Algorithm Implementation.

Maps a personal difficulty rating plus the prior review state onto the next
review state. This is a pure computation module with no I/O.

Quality scale (0-5), as used by SM-2:
    5 - Perfect response
    4 - Correct response after hesitation
    3 - Correct response with serious difficulty
    2 - Incorrect response, but correct answer seemed easy to recall
    1 - Incorrect response, remembered after seeing the answer
    0 - Complete blackout

PersonalDifficulty mapping:
    TRIVIAL (1) -> 5
    EASY (2) -> 4
    MEDIUM (3) -> 3
    HARD (4) -> 2
    IMPOSSIBLE (5) -> 0

Quality 1 is never produced; the rating UI offers five buckets, not six.
"""

import math
from datetime import datetime
from typing import Protocol

from codereps.application.utils.dates import add_days
from codereps.domain.constants import (
    DEFAULT_EASINESS_FACTOR,
    DEFAULT_INTERVAL,
    DEFAULT_REPETITION,
    FAILED_RECALL_INTERVAL,
    FIRST_INTERVAL,
    MAX_QUALITY,
    MIN_EASINESS_FACTOR,
    MIN_QUALITY,
    PASSING_QUALITY,
    SECOND_INTERVAL,
)
from codereps.domain.models import PersonalDifficulty, ReviewState
from codereps.domain.ports import Clock


class Scheduler(Protocol):
    """Protocol for review schedulers."""

    def compute_next_review(
        self,
        rating: PersonalDifficulty,
        prior: ReviewState | None = None,
        solve_date: datetime | None = None,
    ) -> ReviewState:
        """Calculate the next review state for a solve."""
        ...


def quality_from_difficulty(rating: PersonalDifficulty) -> int:
    """
    Convert a personal difficulty (1-5) to SM-2 quality (5-0).

    Inverted: easier personal difficulty means a higher quality score.
    """
    if rating == PersonalDifficulty.IMPOSSIBLE:
        return 0
    return 6 - int(rating)


def _round_half_up(value: float) -> int:
    # Built-in round() is banker's rounding; intervals round .5 upward.
    return int(math.floor(value + 0.5))


def calculate_sm2(
    quality: int,
    solve_date: datetime,
    previous_ef: float = DEFAULT_EASINESS_FACTOR,
    previous_interval: int = DEFAULT_INTERVAL,
    previous_repetition: int = DEFAULT_REPETITION,
) -> ReviewState:
    """
    Run one SM-2 step on a raw quality score.

    Args:
        quality: Quality of recall (0-5). Out-of-range values are clamped.
        solve_date: When the solve happened; the next review is counted from it.
        previous_ef: Easiness factor before this solve.
        previous_interval: Interval (days) before this solve.
        previous_repetition: Consecutive successes before this solve.

    Returns:
        ReviewState with updated scheduling parameters
    """
    q = max(MIN_QUALITY, min(MAX_QUALITY, quality))

    if q < PASSING_QUALITY:
        # Failed recall - reset, ease only moves on success
        return ReviewState(
            easiness_factor=previous_ef,
            interval=FAILED_RECALL_INTERVAL,
            repetition=0,
            next_review_date=add_days(solve_date, FAILED_RECALL_INTERVAL),
        )

    # EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
    new_ef = previous_ef + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
    new_ef = max(MIN_EASINESS_FACTOR, new_ef)

    if previous_repetition == 0:
        new_interval = FIRST_INTERVAL
    elif previous_repetition == 1:
        new_interval = SECOND_INTERVAL
    else:
        new_interval = max(1, _round_half_up(previous_interval * new_ef))

    return ReviewState(
        easiness_factor=new_ef,
        interval=new_interval,
        repetition=previous_repetition + 1,
        next_review_date=add_days(solve_date, new_interval),
    )


class SM2Scheduler:
    """
    SM-2 (SuperMemo 2) scheduler driven by personal difficulty ratings.

    Stateless apart from the clock used when no solve date is supplied.
    """

    def __init__(self, clock: Clock | None = None):
        self._clock = clock or datetime.now

    def compute_next_review(
        self,
        rating: PersonalDifficulty,
        prior: ReviewState | None = None,
        solve_date: datetime | None = None,
    ) -> ReviewState:
        """
        Calculate the review state that follows a solve.

        Args:
            rating: Validated personal difficulty for this solve.
            prior: State from the problem's previous solve, or None for a
                first-time solve (EF 2.5, interval 0, repetition 0).
            solve_date: When the solve happened. Defaults to the clock's now.
        """
        when = solve_date if solve_date is not None else self._clock()
        quality = quality_from_difficulty(rating)

        if prior is None:
            return calculate_sm2(quality, when)

        return calculate_sm2(
            quality,
            when,
            previous_ef=prior.easiness_factor,
            previous_interval=prior.interval,
            previous_repetition=prior.repetition,
        )

    def initial_review_state(
        self, rating: PersonalDifficulty, solve_date: datetime | None = None
    ) -> ReviewState:
        """Review state for a problem's first solve."""
        return self.compute_next_review(rating, None, solve_date)


# Default scheduler instance
default_scheduler = SM2Scheduler()


def compute_next_review(
    rating: PersonalDifficulty,
    prior: ReviewState | None = None,
    solve_date: datetime | None = None,
) -> ReviewState:
    """Module-level shortcut for `default_scheduler.compute_next_review`."""
    return default_scheduler.compute_next_review(rating, prior, solve_date)
