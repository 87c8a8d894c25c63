# Repository adapters
from .memory_repository import InMemoryProblemRepository
from .yaml_repository import YamlProblemRepository

__all__ = ["InMemoryProblemRepository", "YamlProblemRepository"]
