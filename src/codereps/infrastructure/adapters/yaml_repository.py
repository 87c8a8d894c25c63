"""
YAML Problem Repository: Infrastructure adapter for a local YAML file.

The file holds every problem with its solve history:

    problems:
      - id: two-sum
        title: Two Sum
        leetcode_number: 1
        leetcode_difficulty: easy
        solves:
          - id: solve_01J...
            solved_at: 2025-01-15T09:30:00
            personal_difficulty: 3
            easiness_factor: 2.36
            interval: 1
            repetition: 1

The document is validated with pydantic on load, so malformed ratings or
scheduling fields fail there instead of reaching the scheduler. Timestamps
with a UTC offset are converted to naive local time.

Writes are serialized across processes with a sidecar `<file>.lock`. The file
is re-read under that lock before each change, so the optimistic check sees
solves recorded by other processes.
"""

import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml
from filelock import FileLock, Timeout
from pydantic import BaseModel, Field, ValidationError, field_validator

from codereps.application.utils.dates import to_local_naive
from codereps.domain.constants import DATA_FILE_LOCK_TIMEOUT_SECONDS
from codereps.domain.errors import RepositoryError
from codereps.domain.models import (
    LeetcodeDifficulty,
    PersonalDifficulty,
    Problem,
    ProblemWithSolves,
    SolveRecord,
)

from .memory_repository import InMemoryProblemRepository

logger = logging.getLogger(__name__)


class SolveDocument(BaseModel):
    id: str
    solved_at: datetime
    personal_difficulty: PersonalDifficulty
    easiness_factor: float = Field(ge=1.3)
    interval: int = Field(ge=1)
    repetition: int = Field(ge=0)
    time_complexity: str = ""
    space_complexity: str = ""
    pseudocode: str | None = None
    notes: str | None = None
    created_at: datetime | None = None

    @field_validator("personal_difficulty", mode="before")
    @classmethod
    def parse_rating(cls, v: Any) -> PersonalDifficulty:
        return PersonalDifficulty.parse(v)

    @field_validator("solved_at", "created_at")
    @classmethod
    def drop_offset(cls, v: datetime | None) -> datetime | None:
        return to_local_naive(v) if v is not None else None

    def to_domain(self, problem_id: str) -> SolveRecord:
        return SolveRecord(problem_id=problem_id, **self.model_dump())

    @classmethod
    def from_domain(cls, solve: SolveRecord) -> "SolveDocument":
        return cls(
            id=solve.id,
            solved_at=solve.solved_at,
            personal_difficulty=solve.personal_difficulty,
            easiness_factor=solve.easiness_factor,
            interval=solve.interval,
            repetition=solve.repetition,
            time_complexity=solve.time_complexity,
            space_complexity=solve.space_complexity,
            pseudocode=solve.pseudocode,
            notes=solve.notes,
            created_at=solve.created_at,
        )


class ProblemDocument(BaseModel):
    id: str
    title: str
    leetcode_number: int | None = None
    url: str | None = None
    leetcode_difficulty: LeetcodeDifficulty | None = None
    pattern_id: str | None = None
    subpattern_id: str | None = None
    notes: str | None = None
    solves: list[SolveDocument] = Field(default_factory=list)

    def to_domain(self) -> ProblemWithSolves:
        problem = Problem(**self.model_dump(exclude={"solves"}))
        return ProblemWithSolves(
            problem=problem,
            solves=[s.to_domain(self.id) for s in self.solves],
        )


class StoreDocument(BaseModel):
    problems: list[ProblemDocument] = Field(default_factory=list)


class YamlProblemRepository(InMemoryProblemRepository):
    """
    In-memory repository that loads from and writes back to a YAML file.

    Writes go to a temporary file first and are then moved into place.
    """

    def __init__(self, path: Path, lock_timeout: float = DATA_FILE_LOCK_TIMEOUT_SECONDS):
        self.path = path
        self._file_lock = FileLock(f"{path}.lock", timeout=lock_timeout)
        super().__init__(self._load())

    async def append_solve(
        self, solve: SolveRecord, expected_latest_id: str | None
    ) -> SolveRecord:
        with self._exclusive():
            self._refresh()
            return await super().append_solve(solve, expected_latest_id)

    async def delete_solve(self, solve_id: str) -> None:
        with self._exclusive():
            self._refresh()
            await super().delete_solve(solve_id)

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file_lock.acquire()
        except Timeout as e:
            raise RepositoryError(f"Timed out waiting for lock on {self.path}") from e
        except OSError as e:
            raise RepositoryError(f"Could not lock {self.path}: {e}") from e
        try:
            yield
        finally:
            self._file_lock.release()

    def _refresh(self) -> None:
        entries = self._load()
        with self._lock:
            self._problems = {e.problem.id: e.problem for e in entries}
            self._solves = {e.problem.id: list(e.solves) for e in entries}

    def _load(self) -> list[ProblemWithSolves]:
        if not self.path.exists():
            logger.info(f"No data file at {self.path}, starting empty")
            return []

        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
            doc = StoreDocument.model_validate(raw)
        except yaml.YAMLError as e:
            raise RepositoryError(f"Could not parse {self.path}: {e}") from e
        except ValidationError as e:
            raise RepositoryError(f"Invalid data in {self.path}: {e}") from e

        logger.debug(f"Loaded {len(doc.problems)} problems from {self.path}")
        return [p.to_domain() for p in doc.problems]

    def _on_change(self) -> None:
        doc = StoreDocument(
            problems=[
                ProblemDocument(
                    id=problem.id,
                    title=problem.title,
                    leetcode_number=problem.leetcode_number,
                    url=problem.url,
                    leetcode_difficulty=problem.leetcode_difficulty,
                    pattern_id=problem.pattern_id,
                    subpattern_id=problem.subpattern_id,
                    notes=problem.notes,
                    solves=[SolveDocument.from_domain(s) for s in self._solves[pid]],
                )
                for pid, problem in self._problems.items()
            ]
        )
        data = doc.model_dump(mode="json", exclude_none=True)

        try:
            self._write(data)
        except OSError as e:
            raise RepositoryError(f"Could not write {self.path}: {e}") from e

    def _write(self, data: dict[str, Any]) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
