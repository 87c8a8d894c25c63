"""
Domain models for problems, solves and review scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum, IntEnum

from .errors import InvalidRatingError


class PersonalDifficulty(IntEnum):
    """
    Self-reported recall rating for a solve attempt.

    Lower values mean better recall. This is the inverse of SM-2's native
    quality scale, see `quality_from_difficulty`.
    """

    TRIVIAL = 1  # Knew it instantly
    EASY = 2  # Minor hints needed
    MEDIUM = 3  # Significant thinking
    HARD = 4  # Struggled considerably
    IMPOSSIBLE = 5  # Could not solve

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def description(self) -> str:
        return _DIFFICULTY_DESCRIPTIONS[self]

    @classmethod
    def parse(cls, value: object) -> "PersonalDifficulty":
        """
        Validate and convert user input into a rating.

        Accepts a member, an int in 1-5, a numeric string, or a
        case-insensitive member name.

        Raises:
            InvalidRatingError: If the value is not on the 5-point scale.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise InvalidRatingError(value)
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise InvalidRatingError(value) from None
        if isinstance(value, str):
            text = value.strip()
            if text.isdigit():
                return cls.parse(int(text))
            try:
                return cls[text.upper()]
            except KeyError:
                raise InvalidRatingError(value) from None
        raise InvalidRatingError(value)


_DIFFICULTY_DESCRIPTIONS = {
    PersonalDifficulty.TRIVIAL: "Knew it instantly",
    PersonalDifficulty.EASY: "Minor hints needed",
    PersonalDifficulty.MEDIUM: "Significant thinking required",
    PersonalDifficulty.HARD: "Struggled considerably",
    PersonalDifficulty.IMPOSSIBLE: "Could not solve without solution",
}


class LeetcodeDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class ReviewState:
    """
    SM-2 scheduling state produced by a single solve.

    Attributes:
        easiness_factor: Ease multiplier, never below 1.3.
        interval: Days until the next review, counted from the solve date.
        repetition: Consecutive successful reviews; 0 after a failure.
        next_review_date: Solve timestamp plus `interval` days.
    """

    easiness_factor: float
    interval: int
    repetition: int
    next_review_date: datetime


@dataclass(frozen=True)
class SolveRecord:
    """
    An immutable, append-only review attempt.

    Only the SM-2 fields are stored; the next review date is derived from
    `solved_at` and `interval`.
    """

    id: str
    problem_id: str
    solved_at: datetime
    personal_difficulty: PersonalDifficulty
    easiness_factor: float
    interval: int
    repetition: int

    # Free-text metadata, irrelevant to scheduling
    time_complexity: str = ""
    space_complexity: str = ""
    pseudocode: str | None = None
    notes: str | None = None

    created_at: datetime | None = None

    @property
    def next_review_date(self) -> datetime:
        return self.solved_at + timedelta(days=self.interval)

    @property
    def review_state(self) -> ReviewState:
        return ReviewState(
            easiness_factor=self.easiness_factor,
            interval=self.interval,
            repetition=self.repetition,
            next_review_date=self.next_review_date,
        )


@dataclass(frozen=True)
class SolveCreate:
    """Input for recording a new solve. The rating is validated on use."""

    problem_id: str
    personal_difficulty: PersonalDifficulty | int | str
    solved_at: datetime | None = None
    time_complexity: str = ""
    space_complexity: str = ""
    pseudocode: str | None = None
    notes: str | None = None


@dataclass
class Problem:
    id: str
    title: str
    leetcode_number: int | None = None
    url: str | None = None
    leetcode_difficulty: LeetcodeDifficulty | None = None
    pattern_id: str | None = None
    subpattern_id: str | None = None
    notes: str | None = None


@dataclass
class ProblemWithSolves:
    """A problem together with its full solve history, in any order."""

    problem: Problem
    solves: list[SolveRecord] = field(default_factory=list)


@dataclass(frozen=True)
class QueueItem:
    """
    A problem's current position in the review queue.

    Derived on every read from the latest solve; never persisted.
    """

    problem: Problem
    review_state: ReviewState
    next_review_date: datetime
    days_until_due: int  # Negative when overdue
    is_overdue: bool
    last_solve: SolveRecord


@dataclass(frozen=True)
class QueueFilters:
    """
    Optional queue filters.

    Setting exactly one of `show_overdue` / `show_upcoming` selects that
    side of the queue; setting both or neither keeps everything.
    `days_ahead` limits upcoming items to a window but always keeps
    overdue ones.
    """

    show_overdue: bool = False
    show_upcoming: bool = False
    days_ahead: int | None = None


@dataclass(frozen=True)
class QueueStats:
    overdue_count: int
    due_today_count: int
    due_this_week_count: int
    total_problems: int
