from datetime import datetime

import pytest

from codereps.domain.models import (
    PersonalDifficulty,
    Problem,
    ProblemWithSolves,
    SolveRecord,
)

# Fixed reference time used as "now" throughout the suite
NOW = datetime(2025, 1, 15, 10, 30)


def make_solve(
    problem_id: str,
    solved_at: datetime,
    interval: int = 1,
    repetition: int = 1,
    easiness_factor: float = 2.5,
    rating: PersonalDifficulty = PersonalDifficulty.MEDIUM,
    solve_id: str | None = None,
    created_at: datetime | None = None,
) -> SolveRecord:
    return SolveRecord(
        id=solve_id or f"{problem_id}-{solved_at:%Y%m%d%H%M}",
        problem_id=problem_id,
        solved_at=solved_at,
        personal_difficulty=rating,
        easiness_factor=easiness_factor,
        interval=interval,
        repetition=repetition,
        created_at=created_at,
    )


def make_problem(problem_id: str, *solves: SolveRecord) -> ProblemWithSolves:
    return ProblemWithSolves(
        problem=Problem(id=problem_id, title=problem_id.replace("-", " ").title()),
        solves=list(solves),
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/data files
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "CODEREPS_DATA_FILE",
        "CODEREPS_DEFAULT_DAYS_AHEAD",
        "CODEREPS_MAX_RECORD_ATTEMPTS",
        "CODEREPS_VERBOSE",
    ):
        monkeypatch.delenv(var, raising=False)
    return home
