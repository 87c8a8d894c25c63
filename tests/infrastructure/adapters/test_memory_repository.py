from datetime import datetime

import pytest
from conftest import make_problem, make_solve

from codereps.domain.errors import (
    ProblemNotFoundError,
    RepositoryError,
    SolveNotFoundError,
    StaleSolveError,
)
from codereps.domain.models import Problem
from codereps.infrastructure.adapters.memory_repository import InMemoryProblemRepository


@pytest.fixture
def repo():
    return InMemoryProblemRepository(
        [make_problem("two-sum", make_solve("two-sum", datetime(2025, 1, 10), solve_id="s1"))]
    )


@pytest.mark.asyncio
async def test_list_returns_copies(repo):
    [entry] = await repo.list_problems_with_solves()
    entry.solves.clear()

    assert len(await repo.get_solves("two-sum")) == 1


@pytest.mark.asyncio
async def test_append_with_matching_expectation(repo):
    new = make_solve("two-sum", datetime(2025, 1, 12), solve_id="s2")
    assert await repo.append_solve(new, expected_latest_id="s1") is new
    assert [s.id for s in await repo.get_solves("two-sum")] == ["s1", "s2"]


@pytest.mark.asyncio
async def test_append_with_stale_expectation(repo):
    new = make_solve("two-sum", datetime(2025, 1, 12), solve_id="s2")

    with pytest.raises(StaleSolveError) as exc_info:
        await repo.append_solve(new, expected_latest_id=None)

    assert exc_info.value.actual == "s1"
    assert len(await repo.get_solves("two-sum")) == 1


@pytest.mark.asyncio
async def test_first_append_expects_none():
    repo = InMemoryProblemRepository()
    repo.add_problem(Problem(id="new", title="New"))

    await repo.append_solve(make_solve("new", datetime(2025, 1, 1)), expected_latest_id=None)
    assert len(await repo.get_solves("new")) == 1


@pytest.mark.asyncio
async def test_unknown_problem(repo):
    assert await repo.get_problem("missing") is None
    with pytest.raises(ProblemNotFoundError):
        await repo.get_solves("missing")
    with pytest.raises(ProblemNotFoundError):
        await repo.append_solve(make_solve("missing", datetime(2025, 1, 1)), None)


@pytest.mark.asyncio
async def test_delete_unknown_solve(repo):
    with pytest.raises(SolveNotFoundError):
        await repo.delete_solve("nope")


class FailingRepository(InMemoryProblemRepository):
    def _on_change(self):
        raise RepositoryError("disk full")


@pytest.mark.asyncio
async def test_failed_append_is_rolled_back():
    repo = FailingRepository(
        [make_problem("two-sum", make_solve("two-sum", datetime(2025, 1, 10), solve_id="s1"))]
    )
    new = make_solve("two-sum", datetime(2025, 1, 12), solve_id="s2")

    with pytest.raises(RepositoryError):
        await repo.append_solve(new, expected_latest_id="s1")

    assert [s.id for s in await repo.get_solves("two-sum")] == ["s1"]


@pytest.mark.asyncio
async def test_failed_delete_is_rolled_back():
    repo = FailingRepository(
        [
            make_problem(
                "two-sum",
                make_solve("two-sum", datetime(2025, 1, 10), solve_id="s1"),
                make_solve("two-sum", datetime(2025, 1, 12), solve_id="s2"),
            )
        ]
    )

    with pytest.raises(RepositoryError):
        await repo.delete_solve("s1")

    assert [s.id for s in await repo.get_solves("two-sum")] == ["s1", "s2"]
