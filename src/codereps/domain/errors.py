"""Domain exceptions.

Pure computations never raise for valid inputs; these are raised by the
validation layer, the repositories and the recording workflow.
"""


class CoderepsError(Exception):
    """Base class for all codereps errors."""


class InvalidRatingError(CoderepsError, ValueError):
    """A personal difficulty rating outside the 1-5 scale."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(
            f"Invalid rating {value!r}: expected 1-5 or one of "
            "trivial, easy, medium, hard, impossible"
        )


class ProblemNotFoundError(CoderepsError, LookupError):
    def __init__(self, problem_id: str):
        self.problem_id = problem_id
        super().__init__(f"Problem not found: {problem_id}")


class SolveNotFoundError(CoderepsError, LookupError):
    def __init__(self, solve_id: str):
        self.solve_id = solve_id
        super().__init__(f"Solve not found: {solve_id}")


class StaleSolveError(CoderepsError):
    """
    Raised by a repository when an append was based on an outdated read.

    The latest solve for the problem changed between reading the prior
    state and writing the new one.
    """

    def __init__(self, problem_id: str, expected: str | None, actual: str | None):
        self.problem_id = problem_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Latest solve for {problem_id} is {actual!r}, expected {expected!r}"
        )


class ConcurrentSolveError(CoderepsError):
    """Optimistic writes kept losing against concurrent submissions."""

    def __init__(self, problem_id: str, attempts: int):
        self.problem_id = problem_id
        self.attempts = attempts
        super().__init__(
            f"Could not record solve for {problem_id} after {attempts} attempts "
            "due to concurrent submissions"
        )


class RepositoryError(CoderepsError):
    """The backing store is unreadable or malformed."""
