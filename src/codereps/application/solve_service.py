"""
Solve Service: Application layer orchestrator.

Records solves by reading the latest review state, running the scheduler and
appending the result. The read-then-write is guarded with optimistic
concurrency: the repository only accepts the append if the latest solve is
still the one that was read, otherwise the workflow re-reads and recomputes.
"""

import logging
from datetime import datetime

from ulid import ULID

from codereps.application.queue_builder import build_queue, compute_stats, select_latest_solve
from codereps.application.scheduler import Scheduler, SM2Scheduler
from codereps.domain.constants import DEFAULT_MAX_RECORD_ATTEMPTS
from codereps.domain.errors import (
    ConcurrentSolveError,
    ProblemNotFoundError,
    StaleSolveError,
)
from codereps.domain.models import (
    PersonalDifficulty,
    QueueFilters,
    QueueItem,
    QueueStats,
    SolveCreate,
    SolveRecord,
)
from codereps.domain.ports import Clock, ProblemRepository

logger = logging.getLogger(__name__)


def generate_solve_id() -> str:
    """Generate a sortable solve ID using ULID."""
    return f"solve_{ULID()}"


class SolveService:
    """
    Application service for recording solves and reading the review queue.

    Depends on the ProblemRepository abstraction, which is passed in.
    """

    def __init__(
        self,
        repository: ProblemRepository,
        scheduler: Scheduler | None = None,
        clock: Clock | None = None,
        max_attempts: int = DEFAULT_MAX_RECORD_ATTEMPTS,
    ):
        """
        Args:
            repository: The repository (port) for problems and solves.
            scheduler: Optional custom scheduler; SM-2 if not provided.
            clock: Source of "now"; `datetime.now` if not provided.
            max_attempts: Optimistic write attempts before giving up.
        """
        self._repo = repository
        self._clock = clock or datetime.now
        self._scheduler = scheduler or SM2Scheduler(clock=self._clock)
        self._max_attempts = max(1, max_attempts)

    async def record_solve(self, dto: SolveCreate) -> SolveRecord:
        """
        Record a new solve and its computed review state.

        Raises:
            InvalidRatingError: If the rating is not on the 5-point scale.
            ProblemNotFoundError: If the problem does not exist.
            ConcurrentSolveError: If every optimistic write lost a race.
        """
        rating = PersonalDifficulty.parse(dto.personal_difficulty)

        if await self._repo.get_problem(dto.problem_id) is None:
            raise ProblemNotFoundError(dto.problem_id)

        solved_at = dto.solved_at or self._clock()

        for attempt in range(1, self._max_attempts + 1):
            previous = select_latest_solve(await self._repo.get_solves(dto.problem_id))
            prior_state = previous.review_state if previous else None

            state = self._scheduler.compute_next_review(rating, prior_state, solved_at)

            solve = SolveRecord(
                id=generate_solve_id(),
                problem_id=dto.problem_id,
                solved_at=solved_at,
                personal_difficulty=rating,
                easiness_factor=state.easiness_factor,
                interval=state.interval,
                repetition=state.repetition,
                time_complexity=dto.time_complexity,
                space_complexity=dto.space_complexity,
                pseudocode=dto.pseudocode,
                notes=dto.notes,
                created_at=self._clock(),
            )

            try:
                saved = await self._repo.append_solve(
                    solve, expected_latest_id=previous.id if previous else None
                )
            except StaleSolveError as e:
                logger.warning(
                    f"Concurrent solve on {dto.problem_id} "
                    f"(attempt {attempt}/{self._max_attempts}): {e}"
                )
                continue

            logger.info(
                f"Recorded solve {saved.id} for {dto.problem_id}: "
                f"rating={rating.name} interval={saved.interval} "
                f"repetition={saved.repetition} ef={saved.easiness_factor:.2f}"
            )
            return saved

        raise ConcurrentSolveError(dto.problem_id, self._max_attempts)

    async def get_solve_history(self, problem_id: str) -> list[SolveRecord]:
        """
        Fetch a problem's solves, newest first.
        """
        if await self._repo.get_problem(problem_id) is None:
            raise ProblemNotFoundError(problem_id)

        solves = list(enumerate(await self._repo.get_solves(problem_id)))
        solves.sort(key=lambda pair: (pair[1].solved_at, pair[0]), reverse=True)
        return [solve for _, solve in solves]

    async def delete_solve(self, solve_id: str) -> None:
        await self._repo.delete_solve(solve_id)
        logger.info(f"Deleted solve {solve_id}")

    async def get_queue(self, filters: QueueFilters | None = None) -> list[QueueItem]:
        problems = await self._repo.list_problems_with_solves()
        return build_queue(problems, filters, now=self._clock())

    async def get_queue_stats(self) -> QueueStats:
        now = self._clock()
        problems = await self._repo.list_problems_with_solves()
        return compute_stats(build_queue(problems, now=now), now=now)
