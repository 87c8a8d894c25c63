"""
Ports (interfaces) for problem and solve persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime

from .models import Problem, ProblemWithSolves, SolveRecord

Clock = Callable[[], datetime]


class ProblemRepository(ABC):
    """
    Port for reading problems and appending solves.

    Implementations:
        - InMemoryProblemRepository: dict-backed, used by tests and as a base.
        - YamlProblemRepository: persists the same data to a YAML file.
    """

    @abstractmethod
    async def list_problems_with_solves(self) -> list[ProblemWithSolves]:
        """
        Fetch every problem together with its full solve history.
        """
        pass

    @abstractmethod
    async def get_problem(self, problem_id: str) -> Problem | None:
        pass

    @abstractmethod
    async def get_solves(self, problem_id: str) -> list[SolveRecord]:
        """
        Fetch the solve history for a problem, in insertion order.
        """
        pass

    @abstractmethod
    async def append_solve(
        self, solve: SolveRecord, expected_latest_id: str | None
    ) -> SolveRecord:
        """
        Append a solve only if the problem's latest solve is still the one
        the caller read.

        Args:
            solve: The new record.
            expected_latest_id: Id of the latest solve at read time, or None
                if the problem had no solves.

        Raises:
            ProblemNotFoundError: If the problem does not exist.
            StaleSolveError: If a newer solve was written since the read.
        """
        pass

    @abstractmethod
    async def delete_solve(self, solve_id: str) -> None:
        """
        Raises:
            SolveNotFoundError: If no solve has this id.
        """
        pass
