"""
In-memory Problem Repository: Infrastructure adapter.

Implements ProblemRepository over plain dicts. The compare-and-append for
new solves runs under a lock so concurrent callers cannot both win.
"""

import logging
import threading
from collections.abc import Iterable

from codereps.application.queue_builder import select_latest_solve
from codereps.domain.errors import ProblemNotFoundError, SolveNotFoundError, StaleSolveError
from codereps.domain.models import Problem, ProblemWithSolves, SolveRecord
from codereps.domain.ports import ProblemRepository

logger = logging.getLogger(__name__)


class InMemoryProblemRepository(ProblemRepository):
    """
    Keeps problems and their solve histories in memory.

    Solve lists preserve insertion order, which doubles as record-creation
    order when resolving ties between equal timestamps.
    """

    def __init__(self, problems: Iterable[ProblemWithSolves] | None = None):
        self._lock = threading.Lock()
        self._problems: dict[str, Problem] = {}
        self._solves: dict[str, list[SolveRecord]] = {}

        for entry in problems or []:
            self.add_problem(entry.problem, entry.solves)

    def add_problem(self, problem: Problem, solves: Iterable[SolveRecord] = ()) -> None:
        """Seed a problem. Problem management itself lives outside this package."""
        with self._lock:
            self._problems[problem.id] = problem
            self._solves[problem.id] = list(solves)

    async def list_problems_with_solves(self) -> list[ProblemWithSolves]:
        with self._lock:
            return [
                ProblemWithSolves(problem=problem, solves=list(self._solves[pid]))
                for pid, problem in self._problems.items()
            ]

    async def get_problem(self, problem_id: str) -> Problem | None:
        return self._problems.get(problem_id)

    async def get_solves(self, problem_id: str) -> list[SolveRecord]:
        with self._lock:
            if problem_id not in self._problems:
                raise ProblemNotFoundError(problem_id)
            return list(self._solves[problem_id])

    async def append_solve(
        self, solve: SolveRecord, expected_latest_id: str | None
    ) -> SolveRecord:
        with self._lock:
            if solve.problem_id not in self._problems:
                raise ProblemNotFoundError(solve.problem_id)

            history = self._solves[solve.problem_id]
            latest = select_latest_solve(history)
            actual_id = latest.id if latest else None

            if actual_id != expected_latest_id:
                raise StaleSolveError(solve.problem_id, expected_latest_id, actual_id)

            history.append(solve)
            try:
                self._on_change()
            except Exception:
                history.pop()
                raise

        logger.debug(f"Appended solve {solve.id} to {solve.problem_id}")
        return solve

    async def delete_solve(self, solve_id: str) -> None:
        with self._lock:
            for history in self._solves.values():
                for index, solve in enumerate(history):
                    if solve.id == solve_id:
                        del history[index]
                        try:
                            self._on_change()
                        except Exception:
                            history.insert(index, solve)
                            raise
                        return
        raise SolveNotFoundError(solve_id)

    def _on_change(self) -> None:
        """Hook for persistent subclasses. Called with the lock held.

        If it raises, the pending change is rolled back.
        """
