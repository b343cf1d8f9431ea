"""Read-oriented repositories encapsulating SQL for the service layer."""

from rxctl.infrastructure.repositories.directory import DirectoryRepository
from rxctl.infrastructure.repositories.fills import FillRepository

__all__ = ["DirectoryRepository", "FillRepository"]
