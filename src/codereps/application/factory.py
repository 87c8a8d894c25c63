"""
Service Factory
Centralizes wiring of the repository and services from configuration.
"""

from codereps.application.config import AppConfig
from codereps.application.solve_service import SolveService
from codereps.domain.ports import Clock, ProblemRepository
from codereps.infrastructure.adapters.yaml_repository import YamlProblemRepository


def get_problem_repository(config: AppConfig) -> ProblemRepository:
    """
    Returns the repository backing the configured data file.
    """
    return YamlProblemRepository(config.data_file)


def get_solve_service(config: AppConfig, clock: Clock | None = None) -> SolveService:
    return SolveService(
        get_problem_repository(config),
        clock=clock,
        max_attempts=config.max_record_attempts,
    )
