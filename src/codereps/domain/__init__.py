# Domain Package
from .errors import (
    CoderepsError,
    ConcurrentSolveError,
    InvalidRatingError,
    ProblemNotFoundError,
    RepositoryError,
    SolveNotFoundError,
    StaleSolveError,
)
from .models import (
    LeetcodeDifficulty,
    PersonalDifficulty,
    Problem,
    ProblemWithSolves,
    QueueFilters,
    QueueItem,
    QueueStats,
    ReviewState,
    SolveCreate,
    SolveRecord,
)
from .ports import Clock, ProblemRepository

__all__ = [
    "CoderepsError",
    "ConcurrentSolveError",
    "InvalidRatingError",
    "ProblemNotFoundError",
    "RepositoryError",
    "SolveNotFoundError",
    "StaleSolveError",
    "LeetcodeDifficulty",
    "PersonalDifficulty",
    "Problem",
    "ProblemWithSolves",
    "QueueFilters",
    "QueueItem",
    "QueueStats",
    "ReviewState",
    "SolveCreate",
    "SolveRecord",
    "Clock",
    "ProblemRepository",
]
